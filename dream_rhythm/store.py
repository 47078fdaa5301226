import datetime
import logging
from typing import Callable

from .config import (
    RECORDS_KEY,
    STATS_KEY,
    SESSION_KEY,
    ONBOARDING_KEY,
    MIN_SLEEP_GOAL,
    MAX_SLEEP_GOAL,
    GOAL_STEP,
    DEFAULT_WINDOW_DAYS,
)
from .models import SleepRecord, UserStats, ActiveSession
from .storage import JsonKeyValueStore
from .utils import clamp, start_of_day, hours_between, adjust_overnight
from . import stats as engine


Listener = Callable[[], None]


class SleepStore:
    def __init__(
        self,
        storage: JsonKeyValueStore,
        logger: logging.Logger,
        clock: Callable[[], datetime.datetime] | None = None,
    ):
        self._storage = storage
        self._logger = logger
        self._clock = clock or datetime.datetime.now
        self._listeners: list[Listener] = []

        self.records: list[SleepRecord] = []
        self.stats = UserStats()
        self.active_session: ActiveSession | None = None

        self.load()

    def now(self) -> datetime.datetime:
        return self._clock()

    # Persistence
    def load(self) -> None:
        raw = self._storage.get(RECORDS_KEY)
        if raw is not None:
            try:
                self.records = [SleepRecord.from_dict(item) for item in raw]
            except (KeyError, TypeError, ValueError):
                self._logger.exception("SLEEP records unreadable, using defaults")
                self.records = []

        raw = self._storage.get(STATS_KEY)
        if raw is not None:
            try:
                self.stats = UserStats.from_dict(raw)
            except (KeyError, TypeError, ValueError):
                self._logger.exception("SLEEP stats unreadable, using defaults")
                self.stats = UserStats()
        self.stats.sleep_goal = clamp(self.stats.sleep_goal, MIN_SLEEP_GOAL, MAX_SLEEP_GOAL)

        raw = self._storage.get(SESSION_KEY)
        if raw is not None:
            try:
                self.active_session = ActiveSession.from_dict(raw)
            except (KeyError, TypeError, ValueError):
                self._logger.exception("SLEEP active session unreadable, ignoring")
                self.active_session = None

        self._update_stats()
        self._logger.info(
            f"SLEEP store loaded records={len(self.records)} "
            f"sleeping={self.active_session is not None}"
        )

    def save(self) -> None:
        self._storage.set_many(
            {
                RECORDS_KEY: [r.to_dict() for r in self.records],
                STATS_KEY: self.stats.to_dict(),
            }
        )
        if self.active_session is not None:
            self._storage.set(SESSION_KEY, self.active_session.to_dict())
        else:
            self._storage.remove(SESSION_KEY)

    # Change notification
    def subscribe(self, listener: Listener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def unsubscribe(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener()
            except Exception:
                self._logger.exception("SLEEP listener failed")

    def _commit(self) -> None:
        self.save()
        self._notify()

    def _update_stats(self) -> None:
        goal = self.stats.sleep_goal
        self.stats.total_sleep_entries = len(self.records)
        self.stats.current_streak = engine.current_streak(self.records, goal, self._clock())
        self.stats.longest_streak = engine.longest_streak(self.records, goal)

    # Records
    def add_record(self, bedtime: datetime.datetime, wake_time: datetime.datetime) -> SleepRecord:
        """Append a night from bedtime to wake_time, dated to the wake day.

        Callers logging clock times must apply adjust_overnight first;
        log_sleep does this.
        """
        record = SleepRecord(
            date=start_of_day(wake_time),
            hours=hours_between(bedtime, wake_time),
            bedtime=bedtime,
            wake_time=wake_time,
        )
        self.records.append(record)
        self._update_stats()
        self._logger.info(f"SLEEP record add hours={record.hours:.2f} date={record.date.date()}")
        self._commit()
        return record

    def add_manual_record(self, hours: float) -> SleepRecord:
        now = self._clock()
        bedtime = now - datetime.timedelta(hours=float(hours))
        return self.add_record(bedtime, now)

    def log_sleep(self, bedtime: datetime.datetime, wake_time: datetime.datetime) -> int:
        record = self.add_record(bedtime, adjust_overnight(bedtime, wake_time))
        return self._award_quality(record.hours)

    def log_manual_sleep(self, hours: float) -> int:
        record = self.add_manual_record(hours)
        return self._award_quality(record.hours)

    def _award_quality(self, hours: float) -> int:
        stars = engine.quality_stars(hours, self.stats.sleep_goal)
        if stars > 0:
            self.add_reward_points(stars)
        return stars

    # Active session
    @property
    def is_sleeping(self) -> bool:
        return self.active_session is not None

    def start_session(self) -> ActiveSession | None:
        # Rejected while a session is already running
        if self.active_session is not None:
            self._logger.warning(
                f"SLEEP start rejected, session {self.active_session.id} already active"
            )
            return None
        self.active_session = ActiveSession(start_time=self._clock())
        self._logger.info(f"SLEEP session start at={self.active_session.start_time.isoformat()}")
        self._commit()
        return self.active_session

    def end_session(self) -> float | None:
        session = self.active_session
        if session is None:
            return None

        end = self._clock()
        hours = hours_between(session.start_time, end)
        self.records.append(
            SleepRecord(
                date=start_of_day(end),
                hours=hours,
                bedtime=session.start_time,
                wake_time=end,
            )
        )
        self.active_session = None
        self._update_stats()
        self._logger.info(f"SLEEP session end hours={hours:.2f}")
        self._commit()
        return hours

    def cancel_session(self) -> None:
        if self.active_session is None:
            return
        self.active_session = None
        self._logger.info("SLEEP session cancelled")
        self._commit()

    def current_session_hours(self) -> float:
        if self.active_session is None:
            return 0.0
        return hours_between(self.active_session.start_time, self._clock())

    # Goal and rewards
    def update_goal(self, goal: float) -> float:
        self.stats.sleep_goal = clamp(float(goal), MIN_SLEEP_GOAL, MAX_SLEEP_GOAL)
        # Streak classification always uses the current goal
        self._update_stats()
        self._logger.info(f"SLEEP goal set to {self.stats.sleep_goal:.1f}")
        self._commit()
        return self.stats.sleep_goal

    def step_goal(self, direction: int) -> float:
        step = GOAL_STEP if direction > 0 else -GOAL_STEP
        return self.update_goal(self.stats.sleep_goal + step)

    def can_step_goal(self, direction: int) -> bool:
        if direction > 0:
            return self.stats.sleep_goal < MAX_SLEEP_GOAL
        return self.stats.sleep_goal > MIN_SLEEP_GOAL

    def add_reward_points(self, points: int) -> None:
        points = int(points)
        if points < 0:
            self._logger.warning(f"SLEEP ignoring negative reward points={points}")
            return
        self.stats.dream_stars += points
        self._logger.info(f"SLEEP stars +{points} total={self.stats.dream_stars}")
        self._commit()

    def reset_all(self) -> None:
        # Unlike a plain progress reset, this also drops an in-progress session
        self.records = []
        self.stats = UserStats()
        self.active_session = None
        self._update_stats()
        self._logger.info("SLEEP progress reset")
        self._commit()

    # Queries
    def average_hours(self, window_days: int = DEFAULT_WINDOW_DAYS) -> float:
        return engine.average_hours(self.records, window_days)

    def recent_records(self, window_days: int = DEFAULT_WINDOW_DAYS) -> list[SleepRecord]:
        return engine.recent_records(self.records, window_days)

    def todays_hours(self) -> float:
        return engine.hours_on(self.records, self._clock())

    def goal_progress(self) -> float:
        return min(engine.quality_ratio(self.todays_hours(), self.stats.sleep_goal), 1.0)

    # Onboarding
    @property
    def has_completed_onboarding(self) -> bool:
        return bool(self._storage.get(ONBOARDING_KEY, False))

    def complete_onboarding(self) -> None:
        self._storage.set(ONBOARDING_KEY, True)
        self._logger.info("Onboarding completed")
