"""Datamodels describing scan results and cross-venue arbitrage checks.

The scan engine produces one :class:`ScoredOpportunity` per market pair that
clears the spread and profit thresholds; :class:`ScanReport` ranks them and
records which pairs were skipped because their data could not be fetched.
:class:`ArbAnalysis` is the detailed single-pair view with a recommended
action.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Tuple

from arb_oppity.core.enums import ArbAction, RegimeLabel, Venue


@dataclass(frozen=True, slots=True)
class CrossVenueQuote:
    """Mid prices of the same question on both venues."""

    kalshi_price: float
    polymarket_price: float

    @property
    def price_diff(self) -> float:
        return abs(self.kalshi_price - self.polymarket_price)

    @property
    def buy_venue(self) -> Venue:
        return Venue.KALSHI if self.kalshi_price < self.polymarket_price else Venue.POLYMARKET

    @property
    def buy_price(self) -> float:
        return min(self.kalshi_price, self.polymarket_price)

    @property
    def sell_price(self) -> float:
        return max(self.kalshi_price, self.polymarket_price)

    @property
    def gross_spread_pct(self) -> float:
        if self.buy_price <= 0:
            return 0.0
        return self.price_diff / self.buy_price * 100.0

    def price_on(self, venue: Venue) -> float:
        return self.kalshi_price if venue is Venue.KALSHI else self.polymarket_price


@dataclass(frozen=True, slots=True)
class ScoredOpportunity:
    market_id: str
    kalshi_ticker: str
    polymarket_token_id: str
    kalshi_price: float
    polymarket_price: float
    gross_spread_pct: float
    total_fees_usd: float
    net_profit_usd: float
    net_profit_pct: float
    buy_venue: Venue
    sell_venue: Venue
    liquidity_regime: RegimeLabel
    spread_percentile: float
    score: int

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["buy_venue"] = self.buy_venue.value
        data["sell_venue"] = self.sell_venue.value
        data["liquidity_regime"] = self.liquidity_regime.value
        return data


@dataclass(slots=True)
class ScanReport:
    timestamp: datetime
    opportunities: List[ScoredOpportunity]
    total_scanned: int
    skipped: List[Tuple[str, str]] = field(default_factory=list)
    summary: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "mode": "scan_now",
            "timestamp": self.timestamp.isoformat(),
            "opportunities": [opportunity.to_dict() for opportunity in self.opportunities],
            "total_scanned": self.total_scanned,
            "skipped": [{"market_id": market_id, "reason": reason} for market_id, reason in self.skipped],
            "summary": self.summary,
        }


@dataclass(frozen=True, slots=True)
class ArbAnalysis:
    """Fee-adjusted view of a single cross-venue pair."""

    timestamp: datetime
    size_usd: float
    kalshi_price: float
    polymarket_price: float
    price_diff: float
    gross_spread_pct: float
    gross_profit_usd: float
    kalshi_fee_usd: float
    polymarket_fee_usd: float
    total_fees_usd: float
    fees_as_pct_of_gross: float
    net_profit_usd: float
    net_profit_pct: float
    is_profitable: bool
    buy_venue: Venue
    sell_venue: Venue
    action: ArbAction
    reason: str

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["timestamp"] = self.timestamp.isoformat()
        data["buy_venue"] = self.buy_venue.value
        data["sell_venue"] = self.sell_venue.value
        data["action"] = self.action.value
        return data


__all__ = ["ArbAnalysis", "CrossVenueQuote", "ScanReport", "ScoredOpportunity"]
