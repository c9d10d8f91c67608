from __future__ import annotations

from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from arb_oppity.core.enums import ArbAction, Category, Confidence, RegimeLabel, Timeframe, Venue
from arb_oppity.core.errors import ConfigurationError, DataUnavailable
from arb_oppity.market.models import BucketKey
from arb_oppity.service.liquidity_service import LiquidityService, recommend
from arb_oppity.telemetry.storage import default_storage

# Thursday 2024-02-01 10:00 at UTC-5
NOW = datetime(2024, 2, 1, 15, 0, tzinfo=timezone.utc)


@pytest.fixture
def seeded_source(fake_source, hourly_history, observation_factory):
    fake_source.history["K-ALPHA"] = hourly_history(
        spread_for=lambda hour: 400.0 if hour == 3 else 100.0,
        market_id="K-ALPHA",
    )
    fake_source.snapshots[("K-ALPHA", Venue.KALSHI)] = observation_factory(
        timestamp=NOW, spread=100.0, mid_price=0.40, market_id="K-ALPHA"
    )
    fake_source.snapshots[("P-ALPHA", Venue.POLYMARKET)] = observation_factory(
        timestamp=NOW, spread=100.0, mid_price=0.44, market_id="P-ALPHA"
    )
    return fake_source


@pytest.fixture
def service(default_config, seeded_source, fake_fees) -> LiquidityService:
    return LiquidityService(default_config, seeded_source, fake_fees)


def test_build_profile_fetches_configured_window_and_caches(service, seeded_source) -> None:
    profile = service.build_profile("alpha", now=NOW)

    market_id, start, end, timeframe = seeded_source.history_calls[0]
    assert market_id == "K-ALPHA"
    assert end - start == timedelta(days=90)
    assert timeframe is Timeframe.HOUR_1
    assert profile.market_id == "alpha"
    assert profile.stats_for(BucketKey.category(Category.POLITICS)).count == 168
    assert service.cache.get("alpha") is profile


def test_queries_reuse_cached_profile(service, seeded_source) -> None:
    service.classify("alpha", now=NOW)
    service.classify("alpha", now=NOW)
    assert len(seeded_source.history_calls) == 1


def test_unknown_market_id_passed_through(service, seeded_source, hourly_history) -> None:
    seeded_source.history["RAW-TICKER"] = hourly_history(hours=24, market_id="RAW-TICKER")
    profile = service.build_profile("RAW-TICKER", now=NOW)
    assert seeded_source.history_calls[-1][0] == "RAW-TICKER"
    assert profile.observation_count == 24


def test_data_unavailable_propagates(service) -> None:
    with pytest.raises(DataUnavailable):
        service.classify("beta", now=NOW)


def test_classify_current_snapshot(service) -> None:
    result = service.classify("alpha", now=NOW)
    # global mean ~112.5 so a 100 bps spread is ordinary
    assert result.regime is RegimeLabel.NORMAL
    assert result.confidence is Confidence.HIGH
    assert result.hour == 10


def test_confirm_builds_one_profile_per_timeframe(service, seeded_source) -> None:
    result = service.confirm("alpha", now=NOW)
    timeframes = [call[3] for call in seeded_source.history_calls]
    assert timeframes == [Timeframe.MIN_15, Timeframe.HOUR_1, Timeframe.HOUR_4]
    assert all(call[2] - call[1] == timedelta(days=30) for call in seeded_source.history_calls)
    assert result.agreement == pytest.approx(1.0)
    assert result.majority is RegimeLabel.NORMAL


def test_confirm_does_not_reuse_the_classify_baseline(service, seeded_source) -> None:
    service.classify("alpha", now=NOW)
    service.confirm("alpha", now=NOW)
    windows = [(call[3], call[2] - call[1]) for call in seeded_source.history_calls]
    assert windows == [
        (Timeframe.HOUR_1, timedelta(days=90)),
        (Timeframe.MIN_15, timedelta(days=30)),
        (Timeframe.HOUR_1, timedelta(days=30)),
        (Timeframe.HOUR_4, timedelta(days=30)),
    ]

    # the 90-day baseline is still the one classify and predict use
    service.classify("alpha", now=NOW)
    service.predict_next("alpha", 24, now=NOW)
    assert len(seeded_source.history_calls) == 4


def test_predict_next_finds_hour_three(service) -> None:
    window = service.predict_next("alpha", 24, now=NOW)
    assert window is not None
    # top 5 candidates are hours 3, 0, 1, 2, 4; from 10:00 hour 0 is closest
    assert window.bucket_id == "hour_00"
    assert window.hours_until == 14
    assert service.predict_next("alpha", 0, now=NOW) is None


def test_forecast_summarises_current_spread(service, seeded_source, observation_factory) -> None:
    forecast = service.forecast("alpha", 24, now=NOW)
    assert forecast.best_hours[0] == 3
    assert len(forecast.best_hours) == 3
    assert len(forecast.best_days) == 2
    assert forecast.average_spread == pytest.approx(112.5)
    assert forecast.summary.startswith("Current spread is normal")
    assert "Next likely window: 00:00 UTC-05:00" in forecast.summary

    seeded_source.snapshots[("K-ALPHA", Venue.KALSHI)] = observation_factory(timestamp=NOW, spread=400.0)
    wide = service.forecast("alpha", 24, now=NOW)
    assert wide.is_currently_wide
    assert "WIDER than usual" in wide.summary
    assert wide.to_dict()["mode"] == "predict"


def test_check_liquidity_time_factors(service) -> None:
    # Saturday 2024-02-03 03:00 at UTC-5
    saturday_night = datetime(2024, 2, 3, 8, 0, tzinfo=timezone.utc)
    check = service.check_liquidity("alpha", Venue.POLYMARKET, now=saturday_night)
    assert check.hour == 3
    assert check.is_off_hours and check.is_weekend
    assert check.regime is RegimeLabel.NORMAL
    assert not check.is_favorable
    assert check.recommendation == "Normal spreads during off-hours - monitor for widening"
    assert check.to_dict()["venue"] == "POLYMARKET"


@pytest.mark.parametrize(
    ("regime", "fragment"),
    [
        (RegimeLabel.VERY_THIN, "Excellent conditions"),
        (RegimeLabel.THIN, "Good conditions"),
        (RegimeLabel.THICK, "Tight spreads"),
    ],
)
def test_recommendation_by_regime(regime, fragment) -> None:
    assert recommend(regime, False, False, -5).startswith(fragment)
    assert "UTC-05:00" in recommend(RegimeLabel.NORMAL, False, False, -5)


def test_scan_and_rank_skips_unavailable_pairs(service) -> None:
    report = service.scan_and_rank(now=NOW)
    assert report.total_scanned == 3
    assert [opp.market_id for opp in report.opportunities] == ["alpha"]
    assert {market_id for market_id, _reason in report.skipped} == {"beta", "gamma"}


def test_scan_and_rank_rejects_unknown_ids(service) -> None:
    with pytest.raises(ConfigurationError):
        service.scan_and_rank(["nope"], now=NOW)


def test_analyze_arb_by_pair_id(service) -> None:
    analysis = service.analyze_arb("alpha", 1000.0, 0.5, now=NOW)
    assert analysis.buy_venue is Venue.KALSHI
    assert analysis.action is ArbAction.EXECUTE


def test_queries_are_recorded(default_config, seeded_source, fake_fees, tmp_path: Path) -> None:
    storage = default_storage(tmp_path)
    service = LiquidityService(default_config, seeded_source, fake_fees, storage=storage)
    service.classify("alpha", now=NOW)
    service.analyze_arb("alpha", now=NOW)
    lines = (tmp_path / "logs" / "queries_20240201.jsonl").read_text(encoding="utf-8").splitlines()
    assert len(lines) == 2
