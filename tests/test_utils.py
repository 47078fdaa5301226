import math
import datetime

import pytest

from dream_rhythm.utils import (
    adjust_overnight,
    parse_hhmm,
    format_hours,
    start_of_day,
    hours_between,
    clamp,
    constellation_points,
)

DAY = datetime.datetime(2026, 10, 18, 15, 45, 12, 999)


def test_adjust_overnight_moves_wake_forward():
    bedtime = datetime.datetime(2026, 10, 18, 22, 0)
    wake = datetime.datetime(2026, 10, 18, 7, 0)
    assert adjust_overnight(bedtime, wake) == datetime.datetime(2026, 10, 19, 7, 0)


def test_adjust_overnight_keeps_later_wake():
    bedtime = datetime.datetime(2026, 10, 18, 1, 0)
    wake = datetime.datetime(2026, 10, 18, 7, 0)
    assert adjust_overnight(bedtime, wake) == wake


def test_parse_hhmm():
    assert parse_hhmm("07:05", DAY) == datetime.datetime(2026, 10, 18, 7, 5)
    assert parse_hhmm(" 22:00 ", DAY) == datetime.datetime(2026, 10, 18, 22, 0)


@pytest.mark.parametrize("text", ["", "7", "aa:bb", "25:00", "10:61", "1:2:3"])
def test_parse_hhmm_rejects_bad_input(text):
    with pytest.raises(ValueError):
        parse_hhmm(text, DAY)


def test_format_hours():
    assert format_hours(7.5) == "7h 30m"
    assert format_hours(0.25) == "15m"
    assert format_hours(-1) == "0m"


def test_day_helpers():
    assert start_of_day(DAY) == datetime.datetime(2026, 10, 18)
    assert hours_between(start_of_day(DAY), DAY.replace(microsecond=0)) == pytest.approx(15.7533, abs=1e-3)
    assert clamp(13, 4, 12) == 12


def test_hours_between_counts_the_repeated_hour(central_europe_tz):
    bedtime = datetime.datetime(2026, 10, 24, 22, 0)
    wake = datetime.datetime(2026, 10, 25, 7, 0)
    assert hours_between(bedtime, wake) == 10.0


def test_hours_between_skips_the_missing_hour(central_europe_tz):
    bedtime = datetime.datetime(2026, 3, 28, 22, 0)
    wake = datetime.datetime(2026, 3, 29, 7, 0)
    assert hours_between(bedtime, wake) == 8.0


class TestConstellation:
    def test_no_stars(self):
        assert constellation_points(0) == []

    def test_capped_at_twenty(self):
        assert len(constellation_points(57)) == 20
        assert len(constellation_points(7)) == 7

    def test_rings_cycle(self):
        radii = [round(math.hypot(x, y), 6) for x, y in constellation_points(6)]
        assert radii == [60, 80, 100, 60, 80, 100]
