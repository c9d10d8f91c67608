"""Caller-owned cache of historical profiles.

The service layer builds profiles once per analysis run and keeps them here
for the query cycle. The cache is an explicit object handed to whoever needs
it (there is no module-level instance); replacing an entry is the only way
to "update" a profile.

Entries are keyed by market, sampling timeframe and history window in days,
so a short confirmation lookback never shadows the main baseline.
"""
from __future__ import annotations

import threading
from typing import Dict, Iterator, Tuple

from arb_oppity.core.enums import Timeframe
from arb_oppity.market.profile import HistoricalProfile

DEFAULT_HISTORY_DAYS = 90

_CacheKey = Tuple[str, Timeframe, int]


class ProfileCache:
    """Thread-safe ``(market_id, timeframe, days) -> HistoricalProfile`` map."""

    def __init__(
        self,
        default_timeframe: Timeframe = Timeframe.HOUR_1,
        default_days: int = DEFAULT_HISTORY_DAYS,
    ) -> None:
        self._default_timeframe = default_timeframe
        self._default_days = default_days
        self._profiles: Dict[_CacheKey, HistoricalProfile] = {}
        self._lock = threading.Lock()

    def _key(self, market_id: str, timeframe: Timeframe | None, days: int | None) -> _CacheKey:
        return (
            market_id,
            timeframe or self._default_timeframe,
            self._default_days if days is None else days,
        )

    def put(self, profile: HistoricalProfile, timeframe: Timeframe | None = None, days: int | None = None) -> None:
        with self._lock:
            self._profiles[self._key(profile.market_id, timeframe, days)] = profile

    def get(
        self,
        market_id: str,
        timeframe: Timeframe | None = None,
        days: int | None = None,
    ) -> HistoricalProfile | None:
        with self._lock:
            return self._profiles.get(self._key(market_id, timeframe, days))

    def invalidate(self, market_id: str) -> None:
        """Drop every timeframe and window cached for ``market_id``."""

        with self._lock:
            for key in [key for key in self._profiles if key[0] == market_id]:
                del self._profiles[key]

    def clear(self) -> None:
        with self._lock:
            self._profiles.clear()

    def __contains__(self, market_id: object) -> bool:
        with self._lock:
            return any(key[0] == market_id for key in self._profiles)

    def __len__(self) -> int:
        with self._lock:
            return len(self._profiles)

    def __iter__(self) -> Iterator[_CacheKey]:
        with self._lock:
            return iter(list(self._profiles))


__all__ = ["DEFAULT_HISTORY_DAYS", "ProfileCache"]
