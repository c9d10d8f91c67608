"""Opportunity quality score (0-100).

Fixed 50/30/20 policy: profitability dominates, rarity of the current spread
comes second, executability (book depth) third.

* profit: ``net_profit_pct * 10`` clamped to ``[0, 50]`` (5% net or more maxes it);
* percentile: ``percentile / 100 * 30``;
* depth: ``min((bid_depth + ask_depth) / 10_000, 1) * 20``.
"""
from __future__ import annotations

import math

PROFIT_WEIGHT = 50.0
PERCENTILE_WEIGHT = 30.0
DEPTH_WEIGHT = 20.0
PROFIT_SCALE = 10.0
DEPTH_SATURATION = 10_000.0


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def score(net_profit_pct: float, spread_percentile: float, bid_depth: float, ask_depth: float) -> int:
    profit_score = _clamp(net_profit_pct * PROFIT_SCALE, 0.0, PROFIT_WEIGHT)
    percentile_score = _clamp(spread_percentile, 0.0, 100.0) / 100.0 * PERCENTILE_WEIGHT
    depth_score = _clamp((bid_depth + ask_depth) / DEPTH_SATURATION, 0.0, 1.0) * DEPTH_WEIGHT
    # round half up
    return int(math.floor(profit_score + percentile_score + depth_score + 0.5))


__all__ = ["score"]
