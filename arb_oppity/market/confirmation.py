"""Multi-timeframe confirmation of the regime label.

A thin signal that only appears at one sampling granularity is usually an
aggregation artifact. The confirmer classifies the same market independently
per timeframe and reports how many timeframes agree with the majority label.
"""
from __future__ import annotations

from collections import Counter
from typing import Dict, Mapping

from arb_oppity.core.enums import RegimeLabel, Timeframe
from arb_oppity.core.errors import AnalysisError
from arb_oppity.data_feed.observations import Observation

from .models import ConfirmationResult, RegimeResult
from .profile import HistoricalProfile
from .regime_classifier import RegimeClassifier


class MultiTimeframeConfirmer:
    """Run :class:`RegimeClassifier` per timeframe and reduce to an agreement score."""

    def __init__(self, classifier: RegimeClassifier) -> None:
        self._classifier = classifier

    def confirm(
        self,
        observations_by_timeframe: Mapping[Timeframe, Observation],
        profiles_by_timeframe: Mapping[Timeframe, HistoricalProfile],
    ) -> ConfirmationResult:
        if not observations_by_timeframe:
            raise AnalysisError("confirm() requires at least one timeframe")
        missing = [tf.value for tf in observations_by_timeframe if tf not in profiles_by_timeframe]
        if missing:
            raise AnalysisError(f"No profile for timeframe(s): {', '.join(missing)}")

        ordered = sorted(observations_by_timeframe, key=lambda tf: tf.seconds)
        results: Dict[Timeframe, RegimeResult] = {}
        labels: Dict[Timeframe, RegimeLabel] = {}
        for timeframe in ordered:
            result = self._classifier.classify(observations_by_timeframe[timeframe], profiles_by_timeframe[timeframe])
            results[timeframe] = result
            labels[timeframe] = result.regime

        majority = majority_label(labels)
        matching = sum(1 for label in labels.values() if label is majority)
        return ConfirmationResult(
            per_timeframe=labels,
            results=results,
            majority=majority,
            agreement=matching / len(labels),
        )


def majority_label(labels: Mapping[Timeframe, RegimeLabel]) -> RegimeLabel:
    """Most frequent label; ties go to the label of the narrowest tied timeframe."""

    counts = Counter(labels.values())
    top = max(counts.values())
    tied = {label for label, count in counts.items() if count == top}
    for timeframe in sorted(labels, key=lambda tf: tf.seconds):
        if labels[timeframe] in tied:
            return labels[timeframe]
    raise AnalysisError("majority_label() requires at least one label")


__all__ = ["MultiTimeframeConfirmer", "majority_label"]
