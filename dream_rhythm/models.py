import uuid
import datetime
from dataclasses import dataclass, field, asdict

from .config import DEFAULT_SLEEP_GOAL


def _new_id() -> str:
    return str(uuid.uuid4())


def _iso(moment: datetime.datetime) -> str:
    return moment.isoformat()


def _parse(value) -> datetime.datetime:
    if not isinstance(value, str):
        raise TypeError(f"expected ISO timestamp, got {type(value).__name__}")
    moment = datetime.datetime.fromisoformat(value)
    if moment.tzinfo is not None:
        # Stored instants are local naive times; offsets are folded in here
        moment = moment.astimezone().replace(tzinfo=None)
    return moment


@dataclass(frozen=True)
class SleepRecord:
    """A finished night of sleep. ``date`` is local midnight of the wake day."""

    date: datetime.datetime
    hours: float
    bedtime: datetime.datetime
    wake_time: datetime.datetime
    id: str = field(default_factory=_new_id)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "date": _iso(self.date),
            "hours": float(self.hours),
            "bedtime": _iso(self.bedtime),
            "wake_time": _iso(self.wake_time),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "SleepRecord":
        return cls(
            id=str(data["id"]),
            date=_parse(data["date"]),
            hours=float(data["hours"]),
            bedtime=_parse(data["bedtime"]),
            wake_time=_parse(data["wake_time"]),
        )


@dataclass
class UserStats:
    sleep_goal: float = DEFAULT_SLEEP_GOAL
    dream_stars: int = 0
    longest_streak: int = 0
    current_streak: int = 0
    total_sleep_entries: int = 0

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "UserStats":
        if not isinstance(data, dict):
            raise TypeError("user stats must be an object")
        defaults = cls()
        return cls(
            sleep_goal=float(data.get("sleep_goal", defaults.sleep_goal)),
            dream_stars=max(0, int(data.get("dream_stars", 0))),
            longest_streak=int(data.get("longest_streak", 0)),
            current_streak=int(data.get("current_streak", 0)),
            total_sleep_entries=int(data.get("total_sleep_entries", 0)),
        )


@dataclass(frozen=True)
class ActiveSession:
    start_time: datetime.datetime
    id: str = field(default_factory=_new_id)

    def to_dict(self) -> dict:
        return {"id": self.id, "start_time": _iso(self.start_time)}

    @classmethod
    def from_dict(cls, data: dict) -> "ActiveSession":
        return cls(id=str(data["id"]), start_time=_parse(data["start_time"]))
