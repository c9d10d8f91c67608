"""Liquidity regime classification against a historical profile.

The spread z-score is taken against the profile's global baseline and mapped
to a label with the priority very_thin > thin > thick > normal, so a value
sitting exactly on a boundary gets the widest applicable label. Hour and
day-of-week baselines contribute percentiles and per-dimension confidence.

Percentiles come from a closed-form normal-CDF surrogate rather than the
empirical distribution; treat them as ordinal signals, not probabilities.
"""
from __future__ import annotations

import math
from typing import Dict

from arb_oppity.config.models import RegimeThresholdsConfig
from arb_oppity.core.enums import Confidence, Dimension, RegimeLabel
from arb_oppity.core.errors import InvalidConfiguration
from arb_oppity.core.time_utils import day_of_week_of, hour_of
from arb_oppity.data_feed.observations import Observation

from .models import BucketKey, RegimeResult
from .profile import HistoricalProfile
from .stats import DescriptiveStats


def zscore(value: float, baseline: DescriptiveStats) -> float:
    """Standardized distance from the baseline mean; 0 for a flat baseline."""

    if baseline.std == 0:
        return 0.0
    return (value - baseline.mean) / baseline.std


def percentile_from_zscore(z: float) -> float:
    """Approximate normal CDF of ``z`` scaled to ``[0, 100]``."""

    magnitude = math.sqrt(1.0 - math.exp(-2.0 * z * z / math.pi))
    value = 50.0 * (1.0 + math.copysign(magnitude, z))
    return max(0.0, min(100.0, value))


class RegimeClassifier:
    """Classify thick/normal/thin/very_thin regimes from spread z-scores."""

    def __init__(
        self,
        *,
        very_thin_zscore: float = 2.5,
        thin_zscore: float = 1.5,
        thick_zscore: float = -1.0,
        high_confidence_samples: int = 50,
        medium_confidence_samples: int = 20,
    ) -> None:
        if not thick_zscore < thin_zscore <= very_thin_zscore:
            raise InvalidConfiguration(
                "Regime thresholds must satisfy thick < thin <= very_thin "
                f"(got thick={thick_zscore}, thin={thin_zscore}, very_thin={very_thin_zscore})"
            )
        if medium_confidence_samples > high_confidence_samples:
            raise InvalidConfiguration(
                "medium_confidence_samples must not exceed high_confidence_samples "
                f"(got {medium_confidence_samples} > {high_confidence_samples})"
            )
        self._very_thin = very_thin_zscore
        self._thin = thin_zscore
        self._thick = thick_zscore
        self._high_samples = high_confidence_samples
        self._medium_samples = medium_confidence_samples

    @classmethod
    def from_config(cls, config: RegimeThresholdsConfig) -> "RegimeClassifier":
        return cls(
            very_thin_zscore=config.very_thin_zscore,
            thin_zscore=config.thin_zscore,
            thick_zscore=config.thick_zscore,
            high_confidence_samples=config.high_confidence_samples,
            medium_confidence_samples=config.medium_confidence_samples,
        )

    def label(self, spread_zscore: float) -> RegimeLabel:
        if spread_zscore >= self._very_thin:
            return RegimeLabel.VERY_THIN
        if spread_zscore >= self._thin:
            return RegimeLabel.THIN
        if spread_zscore <= self._thick:
            return RegimeLabel.THICK
        return RegimeLabel.NORMAL

    def confidence(self, sample_count: int) -> Confidence:
        if sample_count > self._high_samples:
            return Confidence.HIGH
        if sample_count > self._medium_samples:
            return Confidence.MEDIUM
        return Confidence.LOW

    def classify(self, observation: Observation, profile: HistoricalProfile) -> RegimeResult:
        """Return the regime of ``observation`` relative to ``profile``."""

        hour = hour_of(observation.timestamp, profile.tz_offset_hours)
        day = day_of_week_of(observation.timestamp)
        hour_stats = profile.stats_for(BucketKey.hour(hour))
        day_stats = profile.stats_for(BucketKey.day_of_week(day))
        global_stats = profile.global_stats

        spread_z = zscore(observation.spread, global_stats)
        depth_z = zscore(observation.total_depth, profile.depth_stats)

        by_dimension: Dict[Dimension, Confidence] = {
            Dimension.HOUR: self.confidence(hour_stats.count),
            Dimension.DAY_OF_WEEK: self.confidence(day_stats.count),
            Dimension.GLOBAL: self.confidence(global_stats.count),
        }
        return RegimeResult(
            regime=self.label(spread_z),
            spread_zscore=spread_z,
            depth_zscore=depth_z,
            percentile_hour=percentile_from_zscore(zscore(observation.spread, hour_stats)),
            percentile_dow=percentile_from_zscore(zscore(observation.spread, day_stats)),
            percentile_global=percentile_from_zscore(spread_z),
            confidence=by_dimension[Dimension.GLOBAL],
            confidence_by_dimension=by_dimension,
            hour=hour,
            day_of_week=day,
            spread=observation.spread,
        )


__all__ = ["RegimeClassifier", "percentile_from_zscore", "zscore"]
