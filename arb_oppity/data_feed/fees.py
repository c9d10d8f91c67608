"""Built-in venue fee calculator.

Kalshi charges ``rate * contracts * P * (1 - P)`` rounded up to the next
cent, where ``contracts = size_usd / P``. Polymarket charges a flat basis
point fee on notional plus a fixed gas estimate per leg. Net profit is
expressed as a percentage of the trade size.
"""
from __future__ import annotations

import math
from typing import Sequence

from arb_oppity.config.models import FeesConfig
from arb_oppity.core.enums import Venue

from .sources import FeeAnalysis, FeeLeg, LegFeeEstimate


def kalshi_fee(size_usd: float, price: float, rate: float) -> float:
    if price <= 0 or price >= 1 or size_usd <= 0:
        return 0.0
    contracts = size_usd / price
    raw = rate * contracts * price * (1.0 - price)
    return math.ceil(round(raw * 100.0, 6)) / 100.0


def polymarket_fee(size_usd: float, fee_bps: float, gas_usd: float) -> float:
    if size_usd <= 0:
        return 0.0
    return size_usd * fee_bps / 10_000.0 + gas_usd


class ScheduleFeeService:
    """:class:`~arb_oppity.data_feed.sources.FeeService` backed by static fee schedules."""

    def __init__(self, config: FeesConfig | None = None) -> None:
        self._config = config or FeesConfig()

    def estimate(self, leg: FeeLeg) -> LegFeeEstimate:
        if leg.venue is Venue.KALSHI:
            fee = kalshi_fee(leg.size_usd, leg.price, self._config.kalshi_fee_rate)
        else:
            fee = polymarket_fee(leg.size_usd, self._config.polymarket_fee_bps, self._config.polymarket_gas_usd)
        return LegFeeEstimate(venue=leg.venue, total_fee_usd=fee)

    def analyze_arbitrage(
        self,
        legs: Sequence[FeeLeg],
        gross_profit_usd: float,
        min_net_profit_pct: float,
    ) -> FeeAnalysis:
        estimates = [self.estimate(leg) for leg in legs]
        total_fees = sum(estimate.total_fee_usd for estimate in estimates)
        net_profit = gross_profit_usd - total_fees
        size_usd = max((leg.size_usd for leg in legs), default=0.0)
        net_pct = net_profit / size_usd * 100.0 if size_usd > 0 else 0.0
        return FeeAnalysis(
            total_fees_usd=total_fees,
            net_profit_usd=net_profit,
            net_profit_pct=net_pct,
            is_profitable=net_profit > 0 and net_pct >= min_net_profit_pct,
            leg_estimates=estimates,
        )


__all__ = ["ScheduleFeeService", "kalshi_fee", "polymarket_fee"]
