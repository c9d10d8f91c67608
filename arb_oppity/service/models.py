"""Composite results returned by :class:`~arb_oppity.service.LiquidityService`."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List

from arb_oppity.core.enums import RegimeLabel, Venue
from arb_oppity.market.models import PredictedWindow, RegimeResult

WIDE_PERCENTILE = 70.0


@dataclass(frozen=True, slots=True)
class MarketForecast:
    """Predict-mode payload: historical best slots plus the next window."""

    market_id: str
    timestamp: datetime
    best_hours: List[int]
    best_days: List[str]
    next_window: PredictedWindow | None
    current_spread: float
    average_spread: float
    spread_percentile: float
    summary: str = ""

    @property
    def is_currently_wide(self) -> bool:
        return self.spread_percentile > WIDE_PERCENTILE

    def to_dict(self) -> Dict[str, Any]:
        return {
            "mode": "predict",
            "market_id": self.market_id,
            "timestamp": self.timestamp.isoformat(),
            "best_hours": list(self.best_hours),
            "best_days": list(self.best_days),
            "next_window": self.next_window.to_dict() if self.next_window else None,
            "current_spread": self.current_spread,
            "average_spread": self.average_spread,
            "spread_percentile": self.spread_percentile,
            "summary": self.summary,
        }


@dataclass(frozen=True, slots=True)
class LiquidityCheck:
    """Current regime of one venue book combined with time-of-day factors."""

    market_id: str
    venue: Venue
    timestamp: datetime
    result: RegimeResult
    bid_depth: float
    ask_depth: float
    hour: int
    is_off_hours: bool
    is_weekend: bool
    recommendation: str

    @property
    def regime(self) -> RegimeLabel:
        return self.result.regime

    @property
    def is_favorable(self) -> bool:
        return self.result.regime.is_favorable

    def to_dict(self) -> Dict[str, Any]:
        return {
            "market_id": self.market_id,
            "venue": self.venue.value,
            "timestamp": self.timestamp.isoformat(),
            "regime": self.result.regime.value,
            "confidence": self.result.confidence.value,
            "spread_bps": self.result.spread,
            "spread_zscore": self.result.spread_zscore,
            "bid_depth": self.bid_depth,
            "ask_depth": self.ask_depth,
            "depth_zscore": self.result.depth_zscore,
            "hour": self.hour,
            "is_off_hours": self.is_off_hours,
            "is_weekend": self.is_weekend,
            "is_favorable": self.is_favorable,
            "recommendation": self.recommendation,
        }


__all__ = ["LiquidityCheck", "MarketForecast", "WIDE_PERCENTILE"]
