"""Historical spread profile of one market (or an aggregate of markets).

A profile partitions a finite history of observations into hour-of-day
buckets (24), day-of-week buckets (7), category buckets (6) and one global
pool, and keeps :class:`~arb_oppity.market.stats.DescriptiveStats` for each.
Every bucket in range is present even when empty, so lookups never need a
fallback. The global depth baseline and a few named segments (weekend,
weekday, late night, business hours) are computed alongside.

Profiles are rebuilt from scratch on every analysis run; there is no
incremental update path.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Dict, Iterable, List, Mapping

from arb_oppity.core.enums import Category, Dimension
from arb_oppity.core.time_utils import (
    DEFAULT_TZ_OFFSET_HOURS,
    day_of_week_of,
    hour_of,
    is_business_hours,
    is_late_night,
    is_weekend,
)
from arb_oppity.data_feed.observations import Observation

from .models import BucketKey
from .stats import EMPTY_STATS, DescriptiveStats, compute

LOGGER = logging.getLogger(__name__)

HOURS = range(24)
DAYS = range(7)

SEGMENT_WEEKEND = "weekend"
SEGMENT_WEEKDAY = "weekday"
SEGMENT_LATE_NIGHT = "late_night"
SEGMENT_BUSINESS_HOURS = "business_hours"

CategoryResolver = Callable[[str], Category]


@dataclass(frozen=True, slots=True)
class HistoricalProfile:
    """Read-only per-bucket baseline for one market."""

    market_id: str
    tz_offset_hours: float
    by_hour: Mapping[int, DescriptiveStats]
    by_day_of_week: Mapping[int, DescriptiveStats]
    by_category: Mapping[Category, DescriptiveStats]
    global_stats: DescriptiveStats
    depth_stats: DescriptiveStats
    segments: Mapping[str, DescriptiveStats] = field(default_factory=dict)
    start: datetime | None = None
    end: datetime | None = None

    @property
    def observation_count(self) -> int:
        return self.global_stats.count

    @property
    def has_baseline(self) -> bool:
        return self.global_stats.count > 0

    def stats_for(self, key: BucketKey) -> DescriptiveStats:
        """Stats of ``key``; out-of-range keys read as empty buckets."""

        if key.dimension is Dimension.HOUR:
            return self.by_hour.get(key.index, EMPTY_STATS)
        if key.dimension is Dimension.DAY_OF_WEEK:
            return self.by_day_of_week.get(key.index, EMPTY_STATS)
        if key.dimension is Dimension.CATEGORY:
            return self.by_category.get(key.index, EMPTY_STATS)
        return self.global_stats

    def buckets(self, dimension: Dimension) -> List[BucketKey]:
        """All bucket keys of ``dimension`` in ascending index order."""

        if dimension is Dimension.HOUR:
            return [BucketKey.hour(hour) for hour in HOURS]
        if dimension is Dimension.DAY_OF_WEEK:
            return [BucketKey.day_of_week(day) for day in DAYS]
        if dimension is Dimension.CATEGORY:
            return [BucketKey.category(category) for category in Category]
        return [BucketKey.global_()]

    def ranked_buckets(self, dimension: Dimension) -> List[BucketKey]:
        """Buckets sorted by mean spread desc, then sample count desc, then index."""

        def _priority(key: BucketKey) -> tuple[float, int, int]:
            stats = self.stats_for(key)
            return (-stats.mean, -stats.count, key.ordinal)

        return sorted(self.buckets(dimension), key=_priority)

    def to_dict(self) -> Dict[str, object]:
        return {
            "market_id": self.market_id,
            "tz_offset_hours": self.tz_offset_hours,
            "start": self.start.isoformat() if self.start else None,
            "end": self.end.isoformat() if self.end else None,
            "global": self.global_stats.to_dict(),
            "depth": self.depth_stats.to_dict(),
            "by_hour": {BucketKey.hour(h).bucket_id: s.to_dict() for h, s in self.by_hour.items()},
            "by_day_of_week": {BucketKey.day_of_week(d).bucket_id: s.to_dict() for d, s in self.by_day_of_week.items()},
            "by_category": {BucketKey.category(c).bucket_id: s.to_dict() for c, s in self.by_category.items()},
            "segments": {name: s.to_dict() for name, s in self.segments.items()},
        }


def build_profile(
    observations: Iterable[Observation],
    category_of: CategoryResolver,
    *,
    market_id: str = "",
    tz_offset_hours: float = DEFAULT_TZ_OFFSET_HOURS,
) -> HistoricalProfile:
    """Partition ``observations`` and compute stats for every bucket.

    ``category_of`` is called once per distinct ``market_id`` found in the
    observations. Hours are taken in the reference offset, days on the UTC
    calendar.
    """

    by_hour: Dict[int, List[float]] = {hour: [] for hour in HOURS}
    by_day: Dict[int, List[float]] = {day: [] for day in DAYS}
    by_category: Dict[Category, List[float]] = {category: [] for category in Category}
    segments: Dict[str, List[float]] = {
        SEGMENT_WEEKEND: [],
        SEGMENT_WEEKDAY: [],
        SEGMENT_LATE_NIGHT: [],
        SEGMENT_BUSINESS_HOURS: [],
    }
    spreads: List[float] = []
    depths: List[float] = []
    categories: Dict[str, Category] = {}
    start: datetime | None = None
    end: datetime | None = None

    for obs in observations:
        hour = hour_of(obs.timestamp, tz_offset_hours)
        day = day_of_week_of(obs.timestamp)
        if obs.market_id not in categories:
            categories[obs.market_id] = category_of(obs.market_id)
        spread = obs.spread

        spreads.append(spread)
        depths.append(obs.total_depth)
        by_hour[hour].append(spread)
        by_day[day].append(spread)
        by_category[categories[obs.market_id]].append(spread)
        segments[SEGMENT_WEEKEND if is_weekend(day) else SEGMENT_WEEKDAY].append(spread)
        if is_late_night(hour):
            segments[SEGMENT_LATE_NIGHT].append(spread)
        elif is_business_hours(hour):
            segments[SEGMENT_BUSINESS_HOURS].append(spread)

        if start is None or obs.timestamp < start:
            start = obs.timestamp
        if end is None or obs.timestamp > end:
            end = obs.timestamp

    return HistoricalProfile(
        market_id=market_id,
        tz_offset_hours=tz_offset_hours,
        by_hour={hour: compute(values) for hour, values in by_hour.items()},
        by_day_of_week={day: compute(values) for day, values in by_day.items()},
        by_category={category: compute(values) for category, values in by_category.items()},
        global_stats=compute(spreads),
        depth_stats=compute(depths),
        segments={name: compute(values) for name, values in segments.items()},
        start=start,
        end=end,
    )


def empty_profile(market_id: str = "", tz_offset_hours: float = DEFAULT_TZ_OFFSET_HOURS) -> HistoricalProfile:
    """Profile without any history; every query against it reads as "no baseline"."""

    return build_profile((), lambda _market_id: Category.OTHER, market_id=market_id, tz_offset_hours=tz_offset_hours)


class ProfileBuilder:
    """Build profiles with a configured reference offset and log a summary."""

    def __init__(self, *, tz_offset_hours: float = DEFAULT_TZ_OFFSET_HOURS) -> None:
        self._tz_offset_hours = tz_offset_hours

    @property
    def tz_offset_hours(self) -> float:
        return self._tz_offset_hours

    def build(
        self,
        market_id: str,
        observations: Iterable[Observation],
        category_of: CategoryResolver,
    ) -> HistoricalProfile:
        profile = build_profile(
            observations,
            category_of,
            market_id=market_id,
            tz_offset_hours=self._tz_offset_hours,
        )
        empty_hours = sum(1 for stats in profile.by_hour.values() if stats.is_empty)
        LOGGER.info(
            "Built historical profile",
            extra={
                "market_id": market_id,
                "observations": profile.observation_count,
                "mean_spread_bps": profile.global_stats.mean,
                "empty_hour_buckets": empty_hours,
            },
        )
        return profile


__all__ = [
    "HistoricalProfile",
    "ProfileBuilder",
    "build_profile",
    "empty_profile",
    "SEGMENT_BUSINESS_HOURS",
    "SEGMENT_LATE_NIGHT",
    "SEGMENT_WEEKDAY",
    "SEGMENT_WEEKEND",
]
