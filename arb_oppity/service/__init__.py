"""Query facade over the data source, statistics engine and scanner."""

from .liquidity_service import LiquidityService, recommend
from .models import LiquidityCheck, MarketForecast

__all__ = ["LiquidityCheck", "LiquidityService", "MarketForecast", "recommend"]
