"""Domain models produced by the statistics engine.

``BucketKey`` names a partition of the history, ``RegimeResult`` is the
per-query classification, ``ConfirmationResult`` bundles the per-timeframe
labels and ``PredictedWindow`` is a forward-looking claim about the next thin
window. All of them are derived values: recomputed per query, never stored,
and rendered to plain dicts for JSON output.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Mapping, Union

from arb_oppity.core.enums import DAY_NAMES, Category, Confidence, Dimension, RegimeLabel, Timeframe
from arb_oppity.core.time_utils import as_utc

BucketIndex = Union[int, Category, None]

_CATEGORY_ORDER = {category: position for position, category in enumerate(Category)}


@dataclass(frozen=True, slots=True)
class BucketKey:
    """Identifies one bucket of a profile dimension."""

    dimension: Dimension
    index: BucketIndex = None

    @classmethod
    def hour(cls, hour: int) -> "BucketKey":
        return cls(Dimension.HOUR, hour)

    @classmethod
    def day_of_week(cls, day: int) -> "BucketKey":
        return cls(Dimension.DAY_OF_WEEK, day)

    @classmethod
    def category(cls, category: Category) -> "BucketKey":
        return cls(Dimension.CATEGORY, category)

    @classmethod
    def global_(cls) -> "BucketKey":
        return cls(Dimension.GLOBAL, None)

    @property
    def ordinal(self) -> int:
        """Ascending bucket position used as the final ranking tie-breaker."""

        if isinstance(self.index, Category):
            return _CATEGORY_ORDER[self.index]
        if self.index is None:
            return 0
        return int(self.index)

    @property
    def bucket_id(self) -> str:
        if self.dimension is Dimension.HOUR:
            return f"hour_{int(self.index):02d}"
        if self.dimension is Dimension.DAY_OF_WEEK:
            return f"dow_{DAY_NAMES[int(self.index)]}"
        if self.dimension is Dimension.CATEGORY:
            return f"category_{Category(self.index).value}"
        return "global"

    def __str__(self) -> str:
        return self.bucket_id


@dataclass(frozen=True, slots=True)
class RegimeResult:
    """Classification of one observation against a profile."""

    regime: RegimeLabel
    spread_zscore: float
    depth_zscore: float
    percentile_hour: float
    percentile_dow: float
    percentile_global: float
    confidence: Confidence
    confidence_by_dimension: Mapping[Dimension, Confidence] = field(default_factory=dict)
    hour: int = 0
    day_of_week: int = 0
    spread: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "regime": self.regime.value,
            "spread": self.spread,
            "spread_zscore": self.spread_zscore,
            "depth_zscore": self.depth_zscore,
            "percentile_hour": self.percentile_hour,
            "percentile_dow": self.percentile_dow,
            "percentile_global": self.percentile_global,
            "confidence": self.confidence.value,
            "confidence_by_dimension": {
                dimension.value: level.value for dimension, level in self.confidence_by_dimension.items()
            },
            "hour": self.hour,
            "day_of_week": self.day_of_week,
        }


@dataclass(frozen=True, slots=True)
class ConfirmationResult:
    """Per-timeframe labels reduced to a majority and an agreement score."""

    per_timeframe: Mapping[Timeframe, RegimeLabel]
    results: Mapping[Timeframe, RegimeResult]
    majority: RegimeLabel
    agreement: float

    def is_confirmed(self, min_agreement: float) -> bool:
        return self.agreement >= min_agreement

    def to_dict(self) -> Dict[str, Any]:
        return {
            "per_timeframe": {tf.value: label.value for tf, label in self.per_timeframe.items()},
            "majority": self.majority.value,
            "agreement": self.agreement,
        }


@dataclass(frozen=True, slots=True)
class PredictedWindow:
    """Next expected thin-liquidity window; stale once ``end`` has passed."""

    start: datetime
    end: datetime
    expected_spread: float
    confidence: Confidence
    bucket_id: str
    hours_until: int
    rationale: str = ""

    def is_expired(self, now: datetime) -> bool:
        return as_utc(now) >= self.end

    def to_dict(self) -> Dict[str, Any]:
        return {
            "start": self.start.isoformat(),
            "end": self.end.isoformat(),
            "expected_spread": self.expected_spread,
            "confidence": self.confidence.value,
            "bucket_id": self.bucket_id,
            "hours_until": self.hours_until,
            "rationale": self.rationale,
        }


__all__ = ["BucketKey", "ConfirmationResult", "PredictedWindow", "RegimeResult"]
