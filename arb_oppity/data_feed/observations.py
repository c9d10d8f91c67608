"""Observation records produced by the market-data source."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Mapping

from arb_oppity.core.time_utils import as_utc


@dataclass(frozen=True, slots=True)
class Observation:
    """One spread/depth reading for a market.

    ``spread`` is expressed in basis points of ``mid_price``; depths are in
    contracts. Observations are immutable once recorded.
    """

    timestamp: datetime
    spread: float
    mid_price: float
    bid_depth: float
    ask_depth: float
    market_id: str = ""

    @property
    def total_depth(self) -> float:
        return self.bid_depth + self.ask_depth

    def to_dict(self) -> Dict[str, Any]:
        return {
            "timestamp": self.timestamp.isoformat(),
            "market_id": self.market_id,
            "spread": self.spread,
            "mid_price": self.mid_price,
            "bid_depth": self.bid_depth,
            "ask_depth": self.ask_depth,
        }


def spread_bps_from_quotes(bid: float, ask: float) -> float:
    """Return ``(ask - bid) / mid`` in basis points (0 when mid is 0)."""

    mid = (bid + ask) / 2.0
    if mid <= 0.0:
        return 0.0
    return (ask - bid) / mid * 10_000.0


def parse_snapshot(market_id: str, raw: Mapping[str, Any]) -> Observation:
    """Convert a Replay Labs orderbook history row into an :class:`Observation`.

    Rows carry ``spread_bps`` directly; older rows only have the absolute
    ``spread`` which is converted through ``mid_price``.
    """

    mid = float(raw.get("mid_price", 0.0))
    if raw.get("spread_bps") is not None:
        spread = float(raw["spread_bps"])
    else:
        absolute = float(raw.get("spread", 0.0))
        spread = absolute / mid * 10_000.0 if mid > 0 else 0.0
    return Observation(
        timestamp=as_utc(_parse_timestamp(raw["timestamp"])),
        spread=spread,
        mid_price=mid,
        bid_depth=float(raw.get("bid_depth", 0.0)),
        ask_depth=float(raw.get("ask_depth", 0.0)),
        market_id=market_id,
    )


def _parse_timestamp(value: Any) -> datetime | float:
    if isinstance(value, (int, float)):
        return float(value)
    text = str(value)
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text)
