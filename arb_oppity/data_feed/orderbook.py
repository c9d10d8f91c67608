"""Order book normalization helpers and liquidity metrics.

Both venues quote binary-outcome prices in ``[0, 1]``. Kalshi publishes only
resting bids for each side (``yes`` and ``no``); a ``no`` bid at ``q`` is an
offer to sell ``yes`` at ``1 - q``, so the yes ask ladder is implied from the
no bids. Kalshi ladders are in cents unless the ``yes_dollars`` / ``no_dollars``
variants are present. Polymarket's CLOB publishes explicit bids and asks in
dollars.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Iterable, List, Mapping, Sequence

from arb_oppity.core.time_utils import as_utc, now_utc

from .observations import Observation


@dataclass(slots=True)
class OrderBookLevel:
    """Single price level (price in dollars, size in contracts)."""

    price: float
    size: float


@dataclass(slots=True)
class OrderBookSnapshot:
    """Normalized L2 snapshot: bids sorted descending, asks ascending."""

    market_id: str
    timestamp: datetime
    bids: Sequence[OrderBookLevel]
    asks: Sequence[OrderBookLevel]

    @property
    def best_bid(self) -> float:
        return self.bids[0].price if self.bids else 0.0

    @property
    def best_ask(self) -> float:
        return self.asks[0].price if self.asks else 1.0


def compute_mid_price(snapshot: OrderBookSnapshot) -> float:
    """Return ``mid_price = (best_ask + best_bid) / 2``."""

    return (snapshot.best_bid + snapshot.best_ask) / 2.0


def compute_spread_bps(snapshot: OrderBookSnapshot) -> float:
    """Return the quoted spread in basis points of mid."""

    mid = compute_mid_price(snapshot)
    if mid == 0.0:
        return 0.0
    return (snapshot.best_ask - snapshot.best_bid) / mid * 10_000.0


def to_observation(snapshot: OrderBookSnapshot) -> Observation:
    """Collapse a snapshot into the spread/depth :class:`Observation`."""

    return Observation(
        timestamp=snapshot.timestamp,
        spread=compute_spread_bps(snapshot),
        mid_price=compute_mid_price(snapshot),
        bid_depth=_total_size(snapshot.bids),
        ask_depth=_total_size(snapshot.asks),
        market_id=snapshot.market_id,
    )


def parse_kalshi_orderbook(
    market_id: str,
    payload: Mapping[str, Any] | None,
    *,
    timestamp: datetime | None = None,
) -> OrderBookSnapshot:
    """Convert a Kalshi ``/orderbook`` payload into :class:`OrderBookSnapshot`."""

    book = payload.get("orderbook", payload) if payload else {}
    if book.get("yes_dollars") or book.get("no_dollars"):
        yes_levels = _parse_levels(book.get("yes_dollars") or [])
        no_levels = _parse_levels(book.get("no_dollars") or [])
    else:
        yes_levels = _parse_levels(book.get("yes") or [], cents=True)
        no_levels = _parse_levels(book.get("no") or [], cents=True)
    bids = sorted(yes_levels, key=lambda level: level.price, reverse=True)
    asks = sorted(
        (OrderBookLevel(price=1.0 - level.price, size=level.size) for level in no_levels),
        key=lambda level: level.price,
    )
    return OrderBookSnapshot(
        market_id=market_id,
        timestamp=as_utc(timestamp) if timestamp else now_utc(),
        bids=bids,
        asks=asks,
    )


def parse_polymarket_book(market_id: str, payload: Mapping[str, Any] | None) -> OrderBookSnapshot:
    """Convert a Polymarket CLOB ``/book`` payload into :class:`OrderBookSnapshot`."""

    payload = payload or {}
    bids = sorted(_parse_levels(payload.get("bids") or []), key=lambda level: level.price, reverse=True)
    asks = sorted(_parse_levels(payload.get("asks") or []), key=lambda level: level.price)
    raw_ts = payload.get("timestamp")
    timestamp = as_utc(float(raw_ts) / 1000.0) if raw_ts else now_utc()
    return OrderBookSnapshot(market_id=market_id, timestamp=timestamp, bids=bids, asks=asks)


def _parse_levels(raw_levels: Iterable[Any], *, cents: bool = False) -> List[OrderBookLevel]:
    levels: List[OrderBookLevel] = []
    for raw in raw_levels:
        if isinstance(raw, Mapping):
            price = float(raw.get("price", 0.0))
            size = float(raw.get("size", raw.get("quantity", 0.0)))
        else:
            price, size = float(raw[0]), float(raw[1])
        if size <= 0:
            continue
        levels.append(OrderBookLevel(price=price / 100.0 if cents else price, size=size))
    return levels


def _total_size(levels: Iterable[OrderBookLevel]) -> float:
    return sum(level.size for level in levels)
