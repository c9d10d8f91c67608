"""Collaborator contracts consumed by the service layer.

The statistics engine itself never fetches anything. The service layer
talks to a :class:`MarketDataSource` (candles, spreads, orderbook snapshots)
and a :class:`FeeService` (venue fee estimates). Both are protocols so tests
and alternative venues can plug in plain objects.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Protocol, Sequence, runtime_checkable

from arb_oppity.core.enums import Category, Timeframe, Venue

from .observations import Observation


@runtime_checkable
class MarketDataSource(Protocol):
    """Source of historical and current spread observations."""

    def fetch_observations(
        self,
        market_id: str,
        start: datetime,
        end: datetime,
        timeframe: Timeframe,
    ) -> Sequence[Observation]:
        """Return observations in ``[start, end]``; raise ``DataUnavailable`` if none."""

    def fetch_current_snapshot(self, market_id: str, venue: Venue = Venue.KALSHI) -> Observation:
        """Return the latest observation for ``market_id`` on ``venue``."""

    def category_of(self, market_id: str) -> Category:
        """Return the market's category."""


@dataclass(slots=True)
class FeeLeg:
    """One side of a cross-venue trade submitted for fee estimation."""

    venue: Venue
    direction: str  # BUY | SELL
    size_usd: float
    price: float


@dataclass(slots=True)
class LegFeeEstimate:
    venue: Venue
    total_fee_usd: float


@dataclass(slots=True)
class FeeAnalysis:
    """Fee-adjusted outcome of a candidate arbitrage."""

    total_fees_usd: float
    net_profit_usd: float
    net_profit_pct: float
    is_profitable: bool
    leg_estimates: List[LegFeeEstimate] = field(default_factory=list)

    def fee_for(self, venue: Venue) -> float:
        for estimate in self.leg_estimates:
            if estimate.venue is venue:
                return estimate.total_fee_usd
        return 0.0


@runtime_checkable
class FeeService(Protocol):
    """Opaque fee calculator (venue fee schedules, gas)."""

    def analyze_arbitrage(
        self,
        legs: Sequence[FeeLeg],
        gross_profit_usd: float,
        min_net_profit_pct: float,
    ) -> FeeAnalysis:
        """Return the fee-adjusted analysis for ``legs``."""
