"""Market data ingestion and normalization package.

Modules placed here talk to the Replay Labs API (Kalshi and Polymarket data)
and transform raw orderbooks, candles and history rows into the
:class:`~arb_oppity.data_feed.observations.Observation` records consumed by
the statistics engine.
"""

from arb_oppity.core.enums import Timeframe

from .fees import ScheduleFeeService
from .observations import Observation
from .sources import FeeAnalysis, FeeLeg, FeeService, LegFeeEstimate, MarketDataSource

__all__ = [
    "FeeAnalysis",
    "FeeLeg",
    "FeeService",
    "LegFeeEstimate",
    "MarketDataSource",
    "Observation",
    "ScheduleFeeService",
    "Timeframe",
]
