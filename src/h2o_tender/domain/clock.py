"""Time-of-day and calendar helpers."""

import re
from collections.abc import Callable
from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo

MINUTES_PER_DAY = 24 * 60

_TIME_PATTERN = re.compile(r"^([01]?\d|2[0-3]):([0-5]\d)$")


def is_valid_time(value: str) -> bool:
    """Return True for a 24-hour ``HH:MM`` string."""
    return bool(_TIME_PATTERN.match(value.strip()))


def parse_time_to_minutes(value: str) -> int:
    """Convert ``HH:MM`` to minutes since midnight."""
    hours, minutes = value.split(":")
    return int(hours) * 60 + int(minutes)


def format_minutes_to_time(minutes: int) -> str:
    """Convert minutes since midnight to ``HH:MM``."""
    minutes %= MINUTES_PER_DAY
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def minutes_of_day(moment: datetime) -> int:
    """Return the minute-of-day of a datetime."""
    return moment.hour * 60 + moment.minute


def date_key(day: date) -> str:
    """Return the storage key for a calendar date (``YYYY-MM-DD``)."""
    return day.isoformat()


def seconds_until_next_midnight(now: datetime) -> float:
    """Seconds from ``now`` until the next local midnight."""
    midnight = (now + timedelta(days=1)).replace(
        hour=0, minute=0, second=0, microsecond=0
    )
    return (midnight - now).total_seconds()


def next_occurrence(time_of_day: str, now: datetime) -> datetime:
    """Return the next datetime at ``time_of_day`` strictly after ``now``."""
    minutes = parse_time_to_minutes(time_of_day)
    candidate = now.replace(
        hour=minutes // 60, minute=minutes % 60, second=0, microsecond=0
    )
    if candidate <= now:
        candidate += timedelta(days=1)
    return candidate


def is_reminder_time(
    reminder_time: str, current_time: str, tolerance_minutes: int = 5
) -> bool:
    """Return True when ``current_time`` is within tolerance of the reminder.

    The distance wraps at midnight, so 23:58 and 00:01 are three minutes apart.
    """
    diff = abs(
        parse_time_to_minutes(current_time) - parse_time_to_minutes(reminder_time)
    )
    return min(diff, MINUTES_PER_DAY - diff) <= tolerance_minutes


def local_clock(timezone_name: str) -> Callable[[], datetime]:
    """Return a clock reading the current time in ``timezone_name``."""
    tz = ZoneInfo(timezone_name)

    def now() -> datetime:
        return datetime.now(tz=tz)

    return now
