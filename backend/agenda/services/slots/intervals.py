# backend/agenda/services/slots/intervals.py
"""
Interval helpers.

Inside the engine every instant is a timezone-aware UTC datetime. The
database stores naive UTC; naive input from callers is read as UTC.
Intervals are half-open: [start, end).
"""

import re
from datetime import date, datetime, time, timedelta

import pytz

from ...errors import InvalidArgument

UTC = pytz.utc

_TIME_RE = re.compile(r"^(\d{2}):(\d{2})(?::(\d{2}))?$")


def get_timezone(tz_name: str):
    try:
        return pytz.timezone(tz_name)
    except pytz.UnknownTimeZoneError:
        raise InvalidArgument(f"Unknown timezone: {tz_name}") from None


def ensure_utc(dt: datetime) -> datetime:
    """Return dt as an aware UTC datetime (naive values are taken as UTC)."""
    if dt.tzinfo is None:
        return UTC.localize(dt)
    return dt.astimezone(UTC)


def to_db(dt: datetime) -> datetime:
    """Aware or naive → naive UTC for storage."""
    return ensure_utc(dt).replace(tzinfo=None)


def from_db(dt: datetime) -> datetime:
    return UTC.localize(dt) if dt.tzinfo is None else dt.astimezone(UTC)


def parse_time_of_day(value: str) -> time:
    """Parse "HH:MM" or "HH:MM:SS"."""
    match = _TIME_RE.match(value.strip()) if isinstance(value, str) else None
    if not match:
        raise InvalidArgument(f"Time must be in HH:MM format, got {value!r}")
    hour, minute, second = int(match[1]), int(match[2]), int(match[3] or 0)
    if hour > 23 or minute > 59 or second > 59:
        raise InvalidArgument(f"Time out of range: {value!r}")
    return time(hour, minute, second)


def parse_day(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except (TypeError, ValueError):
        raise InvalidArgument(f"Date must be in YYYY-MM-DD format, got {value!r}") from None


def parse_timestamp(value: str | datetime) -> datetime:
    """Parse an ISO-8601 timestamp into aware UTC."""
    if isinstance(value, datetime):
        return ensure_utc(value)
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except (AttributeError, ValueError):
        raise InvalidArgument(f"Malformed timestamp: {value!r}") from None
    return ensure_utc(parsed)


def local_datetime(day: date, at: time, tz_name: str) -> datetime:
    """Wall-clock time on `day` in the provider timezone, as aware UTC."""
    tz = get_timezone(tz_name)
    return tz.localize(datetime.combine(day, at)).astimezone(UTC)


def day_bounds(day: date, tz_name: str) -> tuple[datetime, datetime]:
    """
    Local midnight to next local midnight in the provider timezone.

    Returns (start_of_day, end_of_day) as aware UTC; end is exclusive.
    """
    start = local_datetime(day, time.min, tz_name)
    end = local_datetime(day + timedelta(days=1), time.min, tz_name)
    return start, end


def overlaps(a_start: datetime, a_end: datetime, b_start: datetime, b_end: datetime) -> bool:
    """Half-open overlap: back-to-back intervals do not collide."""
    return a_start < b_end and b_start < a_end


def local_date(dt: datetime, tz_name: str) -> date:
    return ensure_utc(dt).astimezone(get_timezone(tz_name)).date()


def rule_weekday(day: date) -> int:
    """Weekday as stored on availability rules: 0 = Sunday … 6 = Saturday."""
    return (day.weekday() + 1) % 7
