"""Kalshi candlestick normalization."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, List, Mapping

from .observations import Observation, spread_bps_from_quotes


def _close_price(side: Mapping[str, Any] | None) -> float | None:
    """Closing quote of a Kalshi candle side, in dollars (0-1)."""

    if not side:
        return None
    dollars = side.get("close_dollars")
    if dollars is not None:
        return float(dollars)
    cents = side.get("close")
    if cents is None:
        return None
    return float(cents) / 100.0


def parse_kalshi_candlesticks(market_id: str, payload: Mapping[str, Any] | None) -> List[Observation]:
    """Convert Kalshi candlesticks into :class:`Observation` objects.

    Candles lacking either a yes bid or a yes ask close are dropped. Candles
    carry no book depth, so ``bid_depth``/``ask_depth`` are 0 and the depth
    baseline of a candle-built profile stays flat.
    """

    if not payload:
        return []
    entries = payload.get("candlesticks", [])
    if isinstance(entries, Mapping):
        entries = entries.get(market_id, [])
    observations: List[Observation] = []
    for raw in entries:
        bid = _close_price(raw.get("yes_bid"))
        ask = _close_price(raw.get("yes_ask"))
        if bid is None or ask is None:
            continue
        mid = (bid + ask) / 2.0
        observations.append(
            Observation(
                timestamp=datetime.fromtimestamp(int(raw["end_period_ts"]), tz=timezone.utc),
                spread=spread_bps_from_quotes(bid, ask),
                mid_price=mid,
                bid_depth=0.0,
                ask_depth=0.0,
                market_id=market_id,
            )
        )
    observations.sort(key=lambda obs: obs.timestamp)
    return observations
