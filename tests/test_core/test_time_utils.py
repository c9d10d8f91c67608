from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from arb_oppity.core.time_utils import (
    as_utc,
    day_of_week_of,
    floor_to_hour,
    format_offset,
    hour_of,
    is_late_night,
    is_weekend,
    to_unix_timestamp,
)


def test_hour_of_applies_fixed_offset() -> None:
    ts = datetime(2024, 1, 1, 3, 30, tzinfo=timezone.utc)
    assert hour_of(ts, -5) == 22
    assert hour_of(ts, 0) == 3
    assert hour_of(ts, 5.5) == 9


def test_day_of_week_is_sunday_based() -> None:
    assert day_of_week_of(datetime(2024, 1, 7, 12, 0, tzinfo=timezone.utc)) == 0
    assert day_of_week_of(datetime(2024, 1, 6, 12, 0, tzinfo=timezone.utc)) == 6


def test_day_of_week_stays_on_utc_calendar() -> None:
    # Monday 02:00 UTC is Sunday evening at UTC-5, but buckets as Monday
    ts = datetime(2024, 1, 1, 2, 0, tzinfo=timezone.utc)
    assert hour_of(ts, -5) == 21
    assert day_of_week_of(ts) == 1
    assert not is_weekend(day_of_week_of(ts))


def test_naive_datetime_and_epoch_read_as_utc() -> None:
    naive = datetime(2024, 1, 1, 12, 0)
    assert as_utc(naive) == datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)
    assert as_utc(0) == datetime(1970, 1, 1, tzinfo=timezone.utc)
    eastern = timezone(timedelta(hours=-5))
    assert as_utc(datetime(2024, 1, 1, 7, 0, tzinfo=eastern)).hour == 12


def test_floor_to_hour_respects_fractional_offsets() -> None:
    ts = datetime(2024, 1, 1, 10, 50, tzinfo=timezone.utc)
    assert floor_to_hour(ts) == datetime(2024, 1, 1, 10, 0, tzinfo=timezone.utc)
    # local 16:20 at UTC+05:30 floors to local 16:00 = 10:30 UTC
    assert floor_to_hour(ts, 5.5) == datetime(2024, 1, 1, 10, 30, tzinfo=timezone.utc)


@pytest.mark.parametrize(
    ("offset", "expected"),
    [(-5, "UTC-05:00"), (0, "UTC+00:00"), (5.5, "UTC+05:30")],
)
def test_format_offset(offset: float, expected: str) -> None:
    assert format_offset(offset) == expected


def test_segment_helpers() -> None:
    assert is_weekend(0) and is_weekend(6)
    assert not is_weekend(3)
    assert is_late_night(0) and is_late_night(5)
    assert not is_late_night(6)


def test_to_unix_timestamp_requires_aware_datetime() -> None:
    with pytest.raises(ValueError):
        to_unix_timestamp(datetime(2024, 1, 1))
    assert to_unix_timestamp(datetime(1970, 1, 1, 0, 1, tzinfo=timezone.utc)) == 60.0
