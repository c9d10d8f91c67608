"""Configuration loading and validation package."""

from .loader import load_app_config, load_markets_config, load_settings_config
from .models import (
    AppConfig,
    ConfirmationConfig,
    FeesConfig,
    MarketPairConfig,
    PredictorConfig,
    ProfileConfig,
    RegimeThresholdsConfig,
    ReplayLabsConfig,
    ScannerConfig,
    TelemetryConfig,
)

__all__ = [
    "AppConfig",
    "ConfirmationConfig",
    "FeesConfig",
    "MarketPairConfig",
    "PredictorConfig",
    "ProfileConfig",
    "RegimeThresholdsConfig",
    "ReplayLabsConfig",
    "ScannerConfig",
    "TelemetryConfig",
    "load_app_config",
    "load_markets_config",
    "load_settings_config",
]
