"""Descriptive statistics over one bucket of spread values.

Percentiles use the nearest-rank method: sort ascending, take index
``floor(n * q)`` clamped to ``[0, n - 1]``; no interpolation. The standard
deviation is the population one (divide by ``n``) because a bucket is the
full history of that bucket rather than a sample of it. An empty bucket is a
valid, all-zero result: consumers read ``count == 0`` as "no baseline".
"""
from __future__ import annotations

import math
from dataclasses import asdict, dataclass
from statistics import fmean, pstdev
from typing import Any, Dict, Iterable, Sequence


@dataclass(frozen=True, slots=True)
class DescriptiveStats:
    """Summary of one partition's spread (or depth) values."""

    count: int = 0
    mean: float = 0.0
    std: float = 0.0
    median: float = 0.0
    p75: float = 0.0
    p90: float = 0.0
    min: float = 0.0
    max: float = 0.0

    @property
    def is_empty(self) -> bool:
        return self.count == 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


EMPTY_STATS = DescriptiveStats()


def percentile(sorted_samples: Sequence[float], q: float) -> float:
    """Nearest-rank percentile of an ascending sequence (``q`` in ``[0, 1]``)."""

    n = len(sorted_samples)
    if n == 0:
        return 0.0
    index = min(max(math.floor(n * q), 0), n - 1)
    return sorted_samples[index]


def _median(sorted_samples: Sequence[float]) -> float:
    n = len(sorted_samples)
    middle = n // 2
    if n % 2:
        return sorted_samples[middle]
    return (sorted_samples[middle - 1] + sorted_samples[middle]) / 2.0


def compute(samples: Iterable[float]) -> DescriptiveStats:
    """Return :class:`DescriptiveStats` for ``samples`` (all zeros when empty)."""

    values = [float(value) for value in samples]
    if not values:
        return EMPTY_STATS
    ordered = sorted(values)
    return DescriptiveStats(
        count=len(values),
        mean=fmean(values),
        std=pstdev(values),
        median=_median(ordered),
        p75=percentile(ordered, 0.75),
        p90=percentile(ordered, 0.90),
        min=ordered[0],
        max=ordered[-1],
    )


__all__ = ["DescriptiveStats", "EMPTY_STATS", "compute", "percentile"]
