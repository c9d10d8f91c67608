"""Enumerations shared across subsystems.

The enums below define the core contracts (regime labels, confidence levels,
market categories, bucket dimensions, sampling timeframes, venues) referenced
by the market, scanner and service packages. They live in the core package so
that every module can import them without introducing circular dependencies.
"""
from __future__ import annotations

from enum import Enum


class RegimeLabel(str, Enum):
    """Liquidity regime ordered by spread wideness."""

    THICK = "thick"
    NORMAL = "normal"
    THIN = "thin"
    VERY_THIN = "very_thin"

    @property
    def rank(self) -> int:
        """Position on the wideness scale (thick=0 .. very_thin=3)."""

        return _REGIME_ORDER.index(self)

    @property
    def is_favorable(self) -> bool:
        """True when spreads are wide enough to look for cross-venue arb."""

        return self in (RegimeLabel.THIN, RegimeLabel.VERY_THIN)


_REGIME_ORDER = (RegimeLabel.THICK, RegimeLabel.NORMAL, RegimeLabel.THIN, RegimeLabel.VERY_THIN)


class Confidence(str, Enum):
    """Sample-size driven trust level for a baseline."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Category(str, Enum):
    """Market categories used as a bucketing dimension."""

    POLITICS = "politics"
    SPORTS = "sports"
    CRYPTO = "crypto"
    ECONOMICS = "economics"
    WEATHER = "weather"
    OTHER = "other"

    @classmethod
    def from_value(cls, value: str | None) -> "Category":
        """Map raw strings to members, falling back to ``OTHER``."""

        if not value:
            return cls.OTHER
        for member in cls:
            if member.value == value.lower():
                return member
        return cls.OTHER


class Dimension(str, Enum):
    """Bucketing dimensions of a historical profile."""

    HOUR = "hour"
    DAY_OF_WEEK = "day_of_week"
    CATEGORY = "category"
    GLOBAL = "global"


_UNIT_SECONDS = {"m": 60, "h": 60 * 60, "d": 24 * 60 * 60}


class Timeframe(str, Enum):
    """Supported sampling granularities (Replay Labs ``period`` values)."""

    MIN_1 = "1m"
    MIN_5 = "5m"
    MIN_15 = "15m"
    HOUR_1 = "1h"
    HOUR_4 = "4h"
    DAY_1 = "1d"

    @property
    def seconds(self) -> int:
        """Return timeframe duration in seconds."""

        return int(self.value[:-1]) * _UNIT_SECONDS[self.value[-1]]

    @classmethod
    def from_value(cls, value: str) -> "Timeframe":
        """Map raw interval strings to enum members."""

        for member in cls:
            if member.value == value:
                return member
        raise ValueError(f"Unsupported timeframe: {value}")


class Venue(str, Enum):
    """Prediction market venues served by the data client."""

    KALSHI = "KALSHI"
    POLYMARKET = "POLYMARKET"

    @property
    def other(self) -> "Venue":
        return Venue.POLYMARKET if self is Venue.KALSHI else Venue.KALSHI


class ArbAction(str, Enum):
    """Recommended action for a cross-venue arbitrage check."""

    EXECUTE = "EXECUTE"
    WAIT = "WAIT"
    SKIP = "SKIP"


DAY_NAMES: tuple[str, ...] = ("sun", "mon", "tue", "wed", "thu", "fri", "sat")
