import os
import math
import datetime

from .config import CONSTELLATION_MAX_STARS


def ensure_dir(path: str) -> None:
    if path:
        os.makedirs(path, exist_ok=True)


def clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))


def start_of_day(moment: datetime.datetime) -> datetime.datetime:
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)


def hours_between(start: datetime.datetime, end: datetime.datetime) -> float:
    # Elapsed time, not wall-clock difference, across DST changes
    return (end.timestamp() - start.timestamp()) / 3600.0


def adjust_overnight(bedtime: datetime.datetime, wake_time: datetime.datetime) -> datetime.datetime:
    """Move wake_time forward a day when it falls before bedtime."""
    if wake_time < bedtime:
        return wake_time + datetime.timedelta(days=1)
    return wake_time


def parse_hhmm(text: str, day: datetime.datetime) -> datetime.datetime:
    """Parse "HH:MM" into an instant on the calendar day of ``day``.

    Raises ValueError on malformed input.
    """
    parts = (text or "").strip().split(":")
    if len(parts) != 2:
        raise ValueError(f"expected HH:MM, got {text!r}")
    hour, minute = int(parts[0]), int(parts[1])
    return start_of_day(day).replace(hour=hour, minute=minute)


def format_hours(hours: float) -> str:
    total_minutes = max(0, int(hours * 60))
    h, m = divmod(total_minutes, 60)
    if h > 0:
        return f"{h}h {m}m"
    return f"{m}m"


def format_time(moment: datetime.datetime) -> str:
    return moment.strftime("%H:%M")


def format_day(moment: datetime.datetime) -> str:
    return moment.strftime("%a %d %b")


def constellation_points(stars: int, limit: int = CONSTELLATION_MAX_STARS) -> list[tuple[float, float]]:
    """Offsets from the centre for up to ``limit`` stars on three rings."""
    count = max(0, min(int(stars), limit))
    points = []
    for i in range(count):
        angle = i * (2 * math.pi / count)
        radius = 60 + (i % 3) * 20
        points.append((math.cos(angle) * radius, math.sin(angle) * radius))
    return points
