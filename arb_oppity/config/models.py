"""Typed configuration models for the liquidity toolkit.

The config subsystem relies on pydantic to validate YAML files and to provide
strongly-typed objects to the rest of the runtime. Logical ordering of regime
thresholds is enforced by :class:`~arb_oppity.market.regime_classifier.RegimeClassifier`
at construction time; the models here only check field-level bounds.
"""
from __future__ import annotations

import os
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, PositiveInt, field_validator

from arb_oppity.core.enums import Category, Timeframe
from arb_oppity.core.time_utils import DEFAULT_TZ_OFFSET_HOURS

API_KEY_ENV = "REPLAY_LABS_API_KEY"
DEFAULT_BASE_URL = "https://api.replay.labs"


class RegimeThresholdsConfig(BaseModel):
    """Z-score cut-offs for the regime label and sample counts for confidence."""

    very_thin_zscore: float = 2.5
    thin_zscore: float = 1.5
    thick_zscore: float = -1.0
    high_confidence_samples: int = Field(50, ge=0)
    medium_confidence_samples: int = Field(20, ge=0)


class ProfileConfig(BaseModel):
    """How historical profiles are built."""

    tz_offset_hours: float = Field(DEFAULT_TZ_OFFSET_HOURS, ge=-12, le=14)
    history_days: PositiveInt = 90
    timeframe: str = Field("1h", description="Sampling granularity of the history fetch")

    @field_validator("timeframe")
    @classmethod
    def _known_timeframe(cls, value: str) -> str:
        return Timeframe.from_value(value).value


class PredictorConfig(BaseModel):
    """Window prediction knobs."""

    top_n: PositiveInt = 5
    horizon_hours: int = Field(24, ge=0)
    window_hours: PositiveInt = 2
    best_days: PositiveInt = 3


class ConfirmationConfig(BaseModel):
    """Multi-timeframe confirmation settings (narrowest timeframe first)."""

    timeframes: List[str] = Field(default_factory=lambda: ["15m", "1h", "4h"])
    min_agreement: float = Field(0.66, ge=0, le=1)
    lookback_days: PositiveInt = 30

    @field_validator("timeframes")
    @classmethod
    def _known_timeframes(cls, value: List[str]) -> List[str]:
        if not value:
            raise ValueError("confirmation.timeframes must not be empty")
        return [Timeframe.from_value(item).value for item in value]


class ScannerConfig(BaseModel):
    """Scan-now thresholds and fan-out width."""

    min_spread_pct: float = Field(2.0, ge=0)
    min_net_profit_usd: float = 10.0
    min_net_profit_pct: float = 0.5
    size_usd: float = Field(1000.0, gt=0)
    max_workers: PositiveInt = 4


class MarketPairConfig(BaseModel):
    """Cross-venue market mapping (same question listed on both venues)."""

    id: str = Field(..., min_length=1)
    name: Optional[str] = None
    kalshi_ticker: str = Field(..., min_length=1)
    polymarket_token_id: str = Field(..., min_length=1)
    category: Category = Category.OTHER

    model_config = ConfigDict(frozen=True)


class FeesConfig(BaseModel):
    """Venue fee schedule used by the built-in fee calculator."""

    kalshi_fee_rate: float = Field(0.07, ge=0, description="Multiplier of contracts * P * (1 - P)")
    polymarket_fee_bps: float = Field(1.0, ge=0)
    polymarket_gas_usd: float = Field(0.05, ge=0)


class ReplayLabsConfig(BaseModel):
    """HTTP client settings for the Replay Labs market-data API."""

    base_url: str = DEFAULT_BASE_URL
    api_key: Optional[str] = None
    timeout: float = Field(10.0, gt=0)
    max_retries: PositiveInt = 3
    backoff_base: float = Field(0.25, ge=0)

    def resolved_api_key(self) -> Optional[str]:
        """Explicit key wins, otherwise ``REPLAY_LABS_API_KEY`` from the environment."""

        return self.api_key or os.environ.get(API_KEY_ENV)


class TelemetryConfig(BaseModel):
    """Logging/reporting switches."""

    log_level: str = Field("INFO")
    reports_dir: str = Field("results")


class AppConfig(BaseModel):
    """Runtime config composed of every section plus the tracked market pairs."""

    replay_labs: ReplayLabsConfig = Field(default_factory=ReplayLabsConfig)
    regime: RegimeThresholdsConfig = Field(default_factory=RegimeThresholdsConfig)
    profile: ProfileConfig = Field(default_factory=ProfileConfig)
    predictor: PredictorConfig = Field(default_factory=PredictorConfig)
    confirmation: ConfirmationConfig = Field(default_factory=ConfirmationConfig)
    scanner: ScannerConfig = Field(default_factory=ScannerConfig)
    fees: FeesConfig = Field(default_factory=FeesConfig)
    telemetry: TelemetryConfig = Field(default_factory=TelemetryConfig)
    markets: List[MarketPairConfig] = Field(default_factory=list)

    @field_validator("markets")
    @classmethod
    def _unique_ids(cls, value: List[MarketPairConfig]) -> List[MarketPairConfig]:
        seen: set[str] = set()
        for pair in value:
            if pair.id in seen:
                raise ValueError(f"Duplicate market id: {pair.id}")
            seen.add(pair.id)
        return value

    def market(self, market_id: str) -> MarketPairConfig | None:
        for pair in self.markets:
            if pair.id == market_id:
                return pair
        return None
