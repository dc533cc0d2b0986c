"""
UTC calendar-day helpers.

Every day stamp in the store is a canonical ``YYYY-MM-DD`` string in UTC, so
lexicographic order equals chronological order. ``utc_now`` is the only
wall-clock read in the application; tests freeze time by patching it.
"""
import re
from datetime import date, datetime, timedelta, timezone
from typing import List, Optional, Union

DAY_FORMAT = "%Y-%m-%d"

_CANONICAL_DAY = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _resolve(now: Optional[datetime]) -> datetime:
    if now is None:
        now = utc_now()
    if now.tzinfo is None:
        return now.replace(tzinfo=timezone.utc)
    return now.astimezone(timezone.utc)


def current_day(now: Optional[datetime] = None) -> str:
    """Return today's UTC day string."""
    return _resolve(now).strftime(DAY_FORMAT)


def now_timestamp(now: Optional[datetime] = None) -> str:
    """
    Return the current UTC instant as an ISO-8601 string.

    Millisecond precision with a ``Z`` suffix, e.g. ``2024-04-05T09:30:00.123Z``.
    Fixed width keeps ``MAX(created_at)`` chronological.
    """
    return _resolve(now).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def day_range(n: int, newest_first: bool = False, now: Optional[datetime] = None) -> List[str]:
    """
    Return the ``n`` consecutive UTC days ending today.

    Args:
        n: Number of days, must be >= 1
        newest_first: Order newest to oldest instead of oldest to newest

    Raises:
        ValueError: if ``n`` is not positive
    """
    if n < 1:
        raise ValueError(f"day_range needs at least one day, got {n}")
    today = _resolve(now).date()
    days = [(today - timedelta(days=offset)).strftime(DAY_FORMAT) for offset in range(n - 1, -1, -1)]
    if newest_first:
        days.reverse()
    return days


def shift_day(day: str, delta: int) -> str:
    return (datetime.strptime(day, DAY_FORMAT) + timedelta(days=delta)).strftime(DAY_FORMAT)


def is_canonical_day(value: Optional[str]) -> bool:
    if not value or not _CANONICAL_DAY.match(value):
        return False
    try:
        datetime.strptime(value, DAY_FORMAT)
    except ValueError:
        return False
    return True


def to_utc_day(value: Union[str, int, float, date, datetime]) -> str:
    """Convert an instant (datetime, date, epoch seconds or ISO string) to a UTC day string."""
    if isinstance(value, datetime):
        return current_day(value)
    if isinstance(value, date):
        return value.strftime(DAY_FORMAT)
    if isinstance(value, (int, float)):
        return current_day(datetime.fromtimestamp(value, tz=timezone.utc))
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return current_day(datetime.fromisoformat(text))


def format_day_short(day: str) -> str:
    """Human label for a day string, e.g. ``Apr 5``."""
    parsed = datetime.strptime(day, DAY_FORMAT)
    return f"{parsed.strftime('%b')} {parsed.day}"
