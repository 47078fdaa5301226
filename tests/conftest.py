import time
import random
import logging
import datetime

import pytest

from dream_rhythm.storage import JsonKeyValueStore
from dream_rhythm.store import SleepStore


class FakeClock:
    """Mutable clock so tests can move time forward."""

    def __init__(self, now: datetime.datetime):
        self.now = now

    def __call__(self) -> datetime.datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + datetime.timedelta(**kwargs)


@pytest.fixture
def logger():
    return logging.getLogger("DreamRhythmTest")


@pytest.fixture
def store_path(tmp_path):
    return str(tmp_path / "dream_rhythm.json")


@pytest.fixture
def clock():
    return FakeClock(datetime.datetime(2026, 10, 18, 9, 30, 0))


@pytest.fixture
def storage(store_path, logger):
    return JsonKeyValueStore(store_path, logger)


@pytest.fixture
def store(storage, logger, clock):
    return SleepStore(storage, logger, clock=clock)


@pytest.fixture
def reopen(store_path, logger, clock):
    """Build a fresh store over the same file, as after an app restart."""

    def _reopen() -> SleepStore:
        return SleepStore(JsonKeyValueStore(store_path, logger), logger, clock=clock)

    return _reopen


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def central_europe_tz(monkeypatch):
    """Local time with a DST switch on the last Sundays of March and October."""
    if not hasattr(time, "tzset"):
        pytest.skip("time.tzset is not available on this platform")
    monkeypatch.setenv("TZ", "CET-1CEST,M3.5.0,M10.5.0/3")
    time.tzset()
    yield
    monkeypatch.undo()
    time.tzset()
