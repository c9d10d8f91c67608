"""Forward prediction of the next thin-liquidity window.

Candidates are the historically widest hour buckets. For each candidate hour
``h`` the distance from the current hour is ``(h - now_hour) mod 24`` with 0
remapped to 24: the current hour is never "the next" window. The closest
candidate inside the horizon wins; if none fits the result is ``None`` and
the caller has to handle "no prediction".
"""
from __future__ import annotations

from datetime import datetime, timedelta
from typing import List, Sequence

from arb_oppity.config.models import PredictorConfig
from arb_oppity.core.enums import DAY_NAMES, Dimension
from arb_oppity.core.time_utils import floor_to_hour, format_offset, hour_of

from .models import BucketKey, PredictedWindow
from .profile import HistoricalProfile
from .regime_classifier import RegimeClassifier


def hours_until(target_hour: int, now_hour: int) -> int:
    """Hours from ``now_hour`` to the next occurrence of ``target_hour`` (1..24)."""

    delta = (target_hour - now_hour + 24) % 24
    return 24 if delta == 0 else delta


def next_candidate(candidate_hours: Sequence[int], now_hour: int, horizon_hours: int) -> tuple[int, int] | None:
    """Return ``(hour, hours_until)`` of the closest candidate within the horizon."""

    best: tuple[int, int] | None = None
    for hour in candidate_hours:
        distance = hours_until(hour, now_hour)
        if distance > horizon_hours:
            continue
        if best is None or distance < best[1]:
            best = (hour, distance)
    return best


class WindowPredictor:
    """Rank hour buckets by historical wideness and project the next one."""

    def __init__(
        self,
        classifier: RegimeClassifier,
        *,
        top_n: int = 5,
        window_hours: int = 2,
        best_days: int = 3,
    ) -> None:
        self._classifier = classifier
        self._top_n = top_n
        self._window_hours = window_hours
        self._best_days = best_days

    @classmethod
    def from_config(cls, classifier: RegimeClassifier, config: PredictorConfig) -> "WindowPredictor":
        return cls(
            classifier,
            top_n=config.top_n,
            window_hours=config.window_hours,
            best_days=config.best_days,
        )

    def best_hours(self, profile: HistoricalProfile, n: int | None = None) -> List[int]:
        """Widest hour buckets that have samples, widest first."""

        limit = self._top_n if n is None else n
        return [int(key.index) for key in self._non_empty_ranked(profile, Dimension.HOUR)][:limit]

    def best_days(self, profile: HistoricalProfile, n: int | None = None) -> List[str]:
        """Names of the widest day-of-week buckets that have samples."""

        ranked = self._non_empty_ranked(profile, Dimension.DAY_OF_WEEK)
        limit = self._best_days if n is None else n
        return [DAY_NAMES[int(key.index)] for key in ranked][:limit]

    def predict_next(
        self,
        profile: HistoricalProfile,
        *,
        now: datetime,
        horizon_hours: int,
        top_n: int | None = None,
    ) -> PredictedWindow | None:
        """Return the next predicted thin window within ``horizon_hours`` or ``None``."""

        now_hour = hour_of(now, profile.tz_offset_hours)
        candidates = self.best_hours(profile, top_n)
        chosen = next_candidate(candidates, now_hour, horizon_hours)
        if chosen is None:
            return None
        hour, distance = chosen
        key = BucketKey.hour(hour)
        stats = profile.stats_for(key)
        start = floor_to_hour(now, profile.tz_offset_hours) + timedelta(hours=distance)
        return PredictedWindow(
            start=start,
            end=start + timedelta(hours=self._window_hours),
            expected_spread=stats.mean,
            confidence=self._classifier.confidence(stats.count),
            bucket_id=key.bucket_id,
            hours_until=distance,
            rationale=self._rationale(profile, hour, stats.mean),
        )

    @staticmethod
    def _non_empty_ranked(profile: HistoricalProfile, dimension: Dimension) -> List[BucketKey]:
        return [key for key in profile.ranked_buckets(dimension) if not profile.stats_for(key).is_empty]

    @staticmethod
    def _rationale(profile: HistoricalProfile, hour: int, expected: float) -> str:
        zone = format_offset(profile.tz_offset_hours)
        average = profile.global_stats.mean
        if average <= 0:
            return f"Hour {hour:02d} ({zone}) is the widest historical bucket within the horizon"
        relative = (expected / average - 1.0) * 100.0
        return f"Hour {hour:02d} ({zone}) historically has {relative:+.0f}% wider spreads than average"


__all__ = ["WindowPredictor", "hours_until", "next_candidate"]
