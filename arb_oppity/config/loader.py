"""YAML loaders for the config subsystem.

Each helper consumes one YAML file, validates it via models.py and returns
typed objects to the caller. ``settings.yml`` holds the analysis sections
and ``markets.yml`` the tracked cross-venue pairs; :func:`load_app_config`
merges the two.
"""
from __future__ import annotations

from pathlib import Path
from typing import List, Mapping, Sequence

import yaml

from .models import AppConfig, MarketPairConfig

_DEFAULT_CONFIG_DIR = Path("config")


def _read_yaml(path: Path) -> Mapping:
    """Read a YAML file and return a mapping (empty dict if file is blank)."""

    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")
    with path.open("r", encoding="utf-8") as fp:
        data = yaml.safe_load(fp) or {}
    if not isinstance(data, Mapping):
        raise ValueError(f"YAML root must be a mapping in {path}")
    return data


def load_settings_config(path: Path | str = _DEFAULT_CONFIG_DIR / "settings.yml") -> AppConfig:
    """Load settings.yml (regime thresholds, profile, predictor, scanner, telemetry).

    Every section is optional and falls back to the model defaults. A
    ``markets`` key, if present, is validated as well.
    """

    data = _read_yaml(Path(path))
    return AppConfig.model_validate(data)


def load_markets_config(path: Path | str = _DEFAULT_CONFIG_DIR / "markets.yml") -> List[MarketPairConfig]:
    """Load markets.yml (list of Kalshi/Polymarket pairs)."""

    data = _read_yaml(Path(path))
    raw_markets = data.get("markets")
    if raw_markets is None:
        raise ValueError("markets.yml must contain `markets: [...]`")
    if isinstance(raw_markets, (str, bytes)) or not isinstance(raw_markets, Sequence):
        raise TypeError("`markets` must be a list")
    return [MarketPairConfig.model_validate(entry) for entry in raw_markets]


def load_app_config(
    *,
    settings_path: Path | str = _DEFAULT_CONFIG_DIR / "settings.yml",
    markets_path: Path | str | None = _DEFAULT_CONFIG_DIR / "markets.yml",
) -> AppConfig:
    """Load and aggregate settings.yml + markets.yml into a single AppConfig.

    ``markets_path`` is skipped when ``None`` or when the file does not exist,
    so a settings-only setup keeps working for predict/classify runs.
    """

    config = load_settings_config(settings_path)
    if markets_path is None or not Path(markets_path).exists():
        return config
    markets = load_markets_config(markets_path)
    payload = config.model_dump()
    payload["markets"] = [pair.model_dump() for pair in [*config.markets, *markets]]
    return AppConfig.model_validate(payload)
