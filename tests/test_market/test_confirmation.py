from __future__ import annotations

from datetime import timedelta

import pytest

from arb_oppity.core.enums import Category, RegimeLabel, Timeframe
from arb_oppity.core.errors import AnalysisError
from arb_oppity.market.confirmation import MultiTimeframeConfirmer, majority_label
from arb_oppity.market.profile import build_profile
from arb_oppity.market.regime_classifier import RegimeClassifier


def _profile(observation_factory, low: float, high: float):
    base = observation_factory().timestamp
    samples = [
        observation_factory(timestamp=base + timedelta(hours=i), spread=low if i % 2 else high)
        for i in range(40)
    ]
    return build_profile(samples, lambda _market_id: Category.OTHER)


@pytest.fixture
def confirmer() -> MultiTimeframeConfirmer:
    return MultiTimeframeConfirmer(RegimeClassifier())


def test_full_agreement(confirmer, observation_factory) -> None:
    profile = _profile(observation_factory, 100.0, 200.0)
    observation = observation_factory(spread=300.0)
    timeframes = (Timeframe.MIN_15, Timeframe.HOUR_1, Timeframe.HOUR_4)
    result = confirmer.confirm(
        {tf: observation for tf in timeframes},
        {tf: profile for tf in timeframes},
    )
    assert result.majority is RegimeLabel.VERY_THIN
    assert result.agreement == pytest.approx(1.0)
    assert result.is_confirmed(0.66)


def test_two_of_three_agree(confirmer, observation_factory) -> None:
    observation = observation_factory(spread=300.0)
    narrow = _profile(observation_factory, 100.0, 200.0)  # z = 3 -> very_thin
    wide = _profile(observation_factory, 200.0, 400.0)  # z = 0 -> normal
    result = confirmer.confirm(
        {Timeframe.MIN_15: observation, Timeframe.HOUR_1: observation, Timeframe.HOUR_4: observation},
        {Timeframe.MIN_15: narrow, Timeframe.HOUR_1: wide, Timeframe.HOUR_4: narrow},
    )
    assert result.majority is RegimeLabel.VERY_THIN
    assert result.agreement == pytest.approx(2 / 3)
    assert result.per_timeframe[Timeframe.HOUR_1] is RegimeLabel.NORMAL
    assert not result.is_confirmed(0.7)


def test_tie_goes_to_narrowest_timeframe() -> None:
    labels = {Timeframe.HOUR_4: RegimeLabel.THIN, Timeframe.MIN_15: RegimeLabel.NORMAL}
    assert majority_label(labels) is RegimeLabel.NORMAL


def test_empty_input_raises(confirmer) -> None:
    with pytest.raises(AnalysisError):
        confirmer.confirm({}, {})


def test_missing_profile_raises(confirmer, observation_factory) -> None:
    with pytest.raises(AnalysisError):
        confirmer.confirm({Timeframe.HOUR_1: observation_factory()}, {})


def test_to_dict_keys_by_timeframe_value(confirmer, observation_factory) -> None:
    profile = _profile(observation_factory, 100.0, 200.0)
    result = confirmer.confirm({Timeframe.HOUR_1: observation_factory(spread=150.0)}, {Timeframe.HOUR_1: profile})
    assert result.to_dict() == {"per_timeframe": {"1h": "normal"}, "majority": "normal", "agreement": 1.0}
