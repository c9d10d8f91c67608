"""Time bucketing helpers.

Every historical profile partitions observations by hour-of-day and
day-of-week. Hours are taken in a single reference timezone while days stay
on the UTC calendar. The reference is a fixed additive offset from UTC (US Eastern standard time by default) with no DST table, so
during daylight saving the buckets are shifted by one hour relative to local
wall-clock time. This is an accepted approximation: the buckets only have to
be consistent across the history and the live query, which a fixed offset
guarantees.
"""
from __future__ import annotations

from datetime import datetime, timedelta, timezone

from .types import TimeLike, Timestamp

DEFAULT_TZ_OFFSET_HOURS = -5.0

LATE_NIGHT_HOURS = range(0, 6)
BUSINESS_HOURS = range(9, 17)


def as_utc(value: TimeLike) -> datetime:
    """Return ``value`` as an aware UTC datetime.

    Naive datetimes are read as UTC; ints/floats as UNIX seconds.
    """

    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)
    return datetime.fromtimestamp(float(value), tz=timezone.utc)


def shift(value: TimeLike, tz_offset_hours: float) -> datetime:
    """Move ``value`` into the fixed-offset reference zone."""

    return as_utc(value) + timedelta(hours=tz_offset_hours)


def hour_of(value: TimeLike, tz_offset_hours: float = DEFAULT_TZ_OFFSET_HOURS) -> int:
    """Hour-of-day bucket in ``[0, 23]`` for the reference offset."""

    return shift(value, tz_offset_hours).hour


def day_of_week_of(value: TimeLike) -> int:
    """Day-of-week bucket in ``[0, 6]`` with 0 = Sunday, taken on the UTC calendar.

    Unlike the hour, the day is not shifted by the reference offset, so a
    Monday 02:00 UTC observation is a Monday even though it is Sunday evening
    at UTC-5.
    """

    # datetime.weekday() has Monday = 0
    return (as_utc(value).weekday() + 1) % 7


def is_weekend(day_of_week: int) -> bool:
    return day_of_week in (0, 6)


def is_late_night(hour: int) -> bool:
    return hour in LATE_NIGHT_HOURS


def is_business_hours(hour: int) -> bool:
    return hour in BUSINESS_HOURS


def floor_to_hour(value: TimeLike, tz_offset_hours: float = 0.0) -> datetime:
    """Start of the reference-zone hour containing ``value``, returned in UTC."""

    local = shift(value, tz_offset_hours).replace(minute=0, second=0, microsecond=0)
    return local - timedelta(hours=tz_offset_hours)


def format_offset(tz_offset_hours: float) -> str:
    """Render the reference offset as ``UTC-05:00``."""

    sign = "-" if tz_offset_hours < 0 else "+"
    total_minutes = int(round(abs(tz_offset_hours) * 60))
    return f"UTC{sign}{total_minutes // 60:02d}:{total_minutes % 60:02d}"


def now_utc() -> datetime:
    """Return the current UTC datetime with tzinfo."""

    return datetime.now(timezone.utc)


def to_unix_timestamp(dt: datetime) -> Timestamp:
    """Convert an aware datetime to a UNIX timestamp (float seconds)."""

    if dt.tzinfo is None:
        raise ValueError("Datetime must be timezone-aware before conversion")
    return Timestamp(dt.timestamp())
