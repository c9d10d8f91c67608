from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, List, Sequence, Tuple

import pytest

from arb_oppity.config.models import AppConfig, MarketPairConfig, ScannerConfig
from arb_oppity.core.enums import Category, Timeframe, Venue
from arb_oppity.core.errors import DataUnavailable
from arb_oppity.data_feed.observations import Observation
from arb_oppity.data_feed.sources import FeeAnalysis, FeeLeg, LegFeeEstimate

# Monday 2024-01-01 05:00 UTC is 00:00 at UTC-5.
BASE_TIME = datetime(2024, 1, 1, 5, 0, tzinfo=timezone.utc)


@pytest.fixture
def observation_factory() -> Callable[..., Observation]:
    def _factory(**overrides: object) -> Observation:
        payload: Dict[str, object] = {
            "timestamp": overrides.pop("timestamp", BASE_TIME),
            "spread": overrides.pop("spread", 100.0),
            "mid_price": overrides.pop("mid_price", 0.5),
            "bid_depth": overrides.pop("bid_depth", 500.0),
            "ask_depth": overrides.pop("ask_depth", 500.0),
            "market_id": overrides.pop("market_id", "MKT"),
        }
        payload.update(overrides)
        return Observation(**payload)  # type: ignore[arg-type]

    return _factory


@pytest.fixture
def hourly_history(observation_factory) -> Callable[..., List[Observation]]:
    """One observation per hour starting at local midnight; ``spread_for(hour)`` sets the value."""

    def _build(
        hours: int = 168,
        spread_for: Callable[[int], float] = lambda hour: 100.0,
        market_id: str = "MKT",
    ) -> List[Observation]:
        history = []
        for offset in range(hours):
            local_hour = offset % 24
            history.append(
                observation_factory(
                    timestamp=BASE_TIME + timedelta(hours=offset),
                    spread=spread_for(local_hour),
                    market_id=market_id,
                )
            )
        return history

    return _build


class FakeDataSource:
    """In-memory MarketDataSource; snapshots keyed by ``(id, venue)``."""

    def __init__(self) -> None:
        self.history: Dict[str, List[Observation]] = {}
        self.snapshots: Dict[Tuple[str, Venue], Observation] = {}
        self.categories: Dict[str, Category] = {}
        self.failing: set[str] = set()
        self.history_calls: List[Tuple[str, datetime, datetime, Timeframe]] = []

    def fetch_observations(
        self,
        market_id: str,
        start: datetime,
        end: datetime,
        timeframe: Timeframe,
    ) -> Sequence[Observation]:
        self.history_calls.append((market_id, start, end, timeframe))
        if market_id in self.failing or market_id not in self.history:
            raise DataUnavailable(f"no history for {market_id}")
        return list(self.history[market_id])

    def fetch_current_snapshot(self, market_id: str, venue: Venue = Venue.KALSHI) -> Observation:
        if market_id in self.failing or (market_id, venue) not in self.snapshots:
            raise DataUnavailable(f"no snapshot for {market_id} on {venue.value}")
        return self.snapshots[(market_id, venue)]

    def category_of(self, market_id: str) -> Category:
        return self.categories.get(market_id, Category.OTHER)


@pytest.fixture
def fake_source() -> FakeDataSource:
    return FakeDataSource()


class FakeFeeService:
    """Flat fee per leg; profitable when net % clears the threshold."""

    def __init__(self, fee_per_leg: float = 1.0) -> None:
        self.fee_per_leg = fee_per_leg
        self.calls: List[Tuple[List[FeeLeg], float, float]] = []

    def analyze_arbitrage(
        self,
        legs: Sequence[FeeLeg],
        gross_profit_usd: float,
        min_net_profit_pct: float,
    ) -> FeeAnalysis:
        self.calls.append((list(legs), gross_profit_usd, min_net_profit_pct))
        estimates = [LegFeeEstimate(venue=leg.venue, total_fee_usd=self.fee_per_leg) for leg in legs]
        total = self.fee_per_leg * len(legs)
        net = gross_profit_usd - total
        size = legs[0].size_usd if legs else 0.0
        net_pct = net / size * 100.0 if size else 0.0
        return FeeAnalysis(
            total_fees_usd=total,
            net_profit_usd=net,
            net_profit_pct=net_pct,
            is_profitable=net > 0 and net_pct >= min_net_profit_pct,
            leg_estimates=estimates,
        )


@pytest.fixture
def fake_fees() -> FakeFeeService:
    return FakeFeeService()


@pytest.fixture
def market_pairs() -> list[MarketPairConfig]:
    return [
        MarketPairConfig(id="alpha", kalshi_ticker="K-ALPHA", polymarket_token_id="P-ALPHA", category=Category.POLITICS),
        MarketPairConfig(id="beta", kalshi_ticker="K-BETA", polymarket_token_id="P-BETA", category=Category.CRYPTO),
        MarketPairConfig(id="gamma", kalshi_ticker="K-GAMMA", polymarket_token_id="P-GAMMA"),
    ]


@pytest.fixture
def default_config(market_pairs) -> AppConfig:
    return AppConfig(
        scanner=ScannerConfig(min_spread_pct=2.0, min_net_profit_usd=10.0, size_usd=1000.0, max_workers=2),
        markets=market_pairs,
    )
