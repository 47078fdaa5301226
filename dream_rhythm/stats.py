import datetime
from typing import Iterable, Sequence

from .config import QUALITY_STARS, SCORE_PER_STAR, STREAK_THRESHOLD
from .models import SleepRecord
from .utils import start_of_day


def qualifies(hours: float, goal: float) -> bool:
    return hours >= goal * STREAK_THRESHOLD


def current_streak(records: Iterable[SleepRecord], goal: float, today: datetime.datetime) -> int:
    """Count consecutive qualifying days walking back from ``today``.

    A day qualifies when any record dated that day meets the threshold.
    The walk starts at today, so a streak that ended yesterday is 0.
    """
    good_days = {start_of_day(r.date).date() for r in records if qualifies(r.hours, goal)}

    streak = 0
    day = start_of_day(today).date()
    while day in good_days:
        streak += 1
        day -= datetime.timedelta(days=1)
    return streak


def longest_streak(records: Iterable[SleepRecord], goal: float) -> int:
    # Calendar gaps do not break the run, only a night below the threshold does
    best = 0
    run = 0
    for r in sorted(records, key=lambda r: r.date):
        if qualifies(r.hours, goal):
            run += 1
            best = max(best, run)
        else:
            run = 0
    return best


def _newest(records: Iterable[SleepRecord], window_days: int) -> list[SleepRecord]:
    if window_days <= 0:
        return []
    return sorted(records, key=lambda r: r.date, reverse=True)[:window_days]


def average_hours(records: Iterable[SleepRecord], window_days: int) -> float:
    window = _newest(records, window_days)
    if not window:
        return 0.0
    return sum(r.hours for r in window) / len(window)


def recent_records(records: Iterable[SleepRecord], window_days: int) -> list[SleepRecord]:
    return list(reversed(_newest(records, window_days)))


def hours_on(records: Sequence[SleepRecord], day: datetime.datetime) -> float:
    target = start_of_day(day).date()
    for r in records:
        if start_of_day(r.date).date() == target:
            return r.hours
    return 0.0


def quality_ratio(hours: float, goal: float) -> float:
    if goal <= 0:
        return 0.0
    return hours / goal


def quality_tier(hours: float, goal: float) -> str:
    ratio = quality_ratio(hours, goal)
    if ratio >= 1.0:
        return "perfect"
    if ratio >= STREAK_THRESHOLD:
        return "great"
    if ratio >= 0.6:
        return "good"
    return "rest"


QUALITY_LABELS = {
    "perfect": "Perfect sleep!",
    "great": "Great sleep!",
    "good": "Good sleep",
    "rest": "Try to get more rest",
}


def quality_stars(hours: float, goal: float) -> int:
    return max(0, int(quality_ratio(hours, goal) * QUALITY_STARS))


def game_reward(score: int) -> int:
    return max(1, int(score) // SCORE_PER_STAR)
