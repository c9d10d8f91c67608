"""Replay Labs data client wrapping the REST endpoints used by the toolkit.

The client covers:

* ``GET /api/orderbook/{market_id}`` for historical spread/depth snapshots
  (``start``, ``end``, ``interval`` query parameters);
* ``GET /api/kalshi/markets/{ticker}/orderbook`` for the live Kalshi book;
* ``GET /api/polymarket/clob/book`` for the live Polymarket book;
* ``GET /api/kalshi/markets/candlesticks`` for candle-based history, used
  when the orderbook history endpoint has no rows for a market;
* ``GET /api/kalshi/markets/{ticker}`` for market metadata (category
  inference).

Transport failures are retried with exponential backoff
``backoff_base * 2 ** attempt``; once the budget is spent the last error is
re-raised as :class:`~arb_oppity.core.errors.DataUnavailable`. Client errors
(4xx) are not retried. Bodies that are not JSON, or that do not have the shape
a parser expects, also surface as :class:`DataUnavailable`.
"""
from __future__ import annotations

import logging
import time
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Iterator, List, Mapping, Optional

import httpx

from arb_oppity.config.models import ReplayLabsConfig
from arb_oppity.core.enums import Category, Timeframe, Venue
from arb_oppity.core.errors import DataUnavailable
from arb_oppity.core.time_utils import as_utc, to_unix_timestamp

from .candles import parse_kalshi_candlesticks
from .categories import infer_category
from .observations import Observation, parse_snapshot
from .orderbook import OrderBookSnapshot, parse_kalshi_orderbook, parse_polymarket_book, to_observation

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class MarketInfo:
    """Kalshi market metadata used for category resolution."""

    id: str
    ticker: str
    title: str
    category: Category
    volume_24h_usd: float
    created_at: Optional[str] = None
    closes_at: Optional[str] = None


class ReplayLabsClient:
    """Synchronous REST client implementing :class:`MarketDataSource`.

    Parameters
    ----------
    config:
        :class:`~arb_oppity.config.models.ReplayLabsConfig` with base URL,
        credentials and retry budget.
    session:
        Optional pre-configured :class:`httpx.Client` (e.g. with a
        ``MockTransport`` in tests).
    categories:
        Known ``market_id -> Category`` mapping (usually from markets.yml);
        unknown ids fall back to metadata lookup plus keyword inference.
    """

    def __init__(
        self,
        config: ReplayLabsConfig,
        session: httpx.Client | None = None,
        *,
        categories: Mapping[str, Category] | None = None,
    ) -> None:
        headers = {"Content-Type": "application/json"}
        api_key = config.resolved_api_key()
        if api_key:
            headers["Authorization"] = f"Bearer {api_key}"
        self._client = session or httpx.Client(base_url=config.base_url, timeout=config.timeout)
        self._headers = headers
        self._max_retries = config.max_retries
        self._backoff_base = config.backoff_base
        self._categories: Dict[str, Category] = dict(categories or {})

    def close(self) -> None:
        """Close the underlying HTTP client."""

        self._client.close()

    def __enter__(self) -> "ReplayLabsClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # ------------------------------------------------------------------
    # REST helpers
    # ------------------------------------------------------------------
    def _request(self, path: str, *, params: Optional[Mapping[str, Any]] = None) -> Any:
        """GET ``path`` with retry/backoff and return the decoded JSON body."""

        url_path = path if path.startswith("/") else f"/{path}"
        attempt = 0
        last_error: Exception | None = None
        while attempt < self._max_retries:
            start = time.perf_counter()
            try:
                response = self._client.get(url_path, params=dict(params or {}), headers=self._headers)
                latency_ms = (time.perf_counter() - start) * 1_000.0
                if response.is_client_error:
                    raise DataUnavailable(f"Replay Labs {response.status_code} for {url_path}: {response.text[:200]}")
                response.raise_for_status()
                LOGGER.debug("GET %s", url_path, extra={"latency_ms": latency_ms})
                try:
                    return response.json()
                except ValueError as exc:
                    raise DataUnavailable(f"Replay Labs returned a non-JSON body for {url_path}: {response.text[:200]!r}") from exc
            except httpx.HTTPError as exc:
                last_error = exc
                LOGGER.warning("Replay Labs GET %s failed (attempt %s/%s): %s", url_path, attempt + 1, self._max_retries, exc)
                attempt += 1
                if attempt < self._max_retries:
                    time.sleep(self._backoff_base * (2 ** (attempt - 1)))
        raise DataUnavailable(f"Replay Labs GET {url_path} failed after {self._max_retries} attempts") from last_error

    # ------------------------------------------------------------------
    # MarketDataSource
    # ------------------------------------------------------------------
    def fetch_observations(
        self,
        market_id: str,
        start: datetime,
        end: datetime,
        timeframe: Timeframe,
    ) -> List[Observation]:
        """Return historical snapshots for ``market_id`` between ``start`` and ``end``."""

        params = {
            "start": as_utc(start).isoformat(),
            "end": as_utc(end).isoformat(),
            "interval": timeframe.value,
        }
        payload = self._request(f"/api/orderbook/{market_id}", params=params) or {}
        with _payload_errors(f"orderbook history {market_id}"):
            rows = payload.get("snapshots", [])
            observations = [parse_snapshot(market_id, row) for row in rows]
        if not observations:
            LOGGER.info("No orderbook history for %s, falling back to Kalshi candlesticks", market_id)
            return self.fetch_kalshi_candles(market_id, start, end, timeframe)
        observations.sort(key=lambda obs: obs.timestamp)
        LOGGER.info(
            "Fetched observation history",
            extra={"market_id": market_id, "timeframe": timeframe.value, "count": len(observations)},
        )
        return observations

    def fetch_current_snapshot(self, market_id: str, venue: Venue = Venue.KALSHI) -> Observation:
        """Return the live book of ``market_id`` collapsed to an observation."""

        if venue is Venue.KALSHI:
            snapshot = self.fetch_kalshi_orderbook(market_id)
        else:
            snapshot = self.fetch_polymarket_book(market_id)
        return to_observation(snapshot)

    def category_of(self, market_id: str) -> Category:
        """Return the known category, else infer it from Kalshi metadata."""

        known = self._categories.get(market_id)
        if known is not None:
            return known
        try:
            market = self.fetch_kalshi_market(market_id)
        except DataUnavailable as exc:
            LOGGER.warning("Category lookup failed for %s: %s", market_id, exc)
            return Category.OTHER
        self._categories[market_id] = market.category
        return market.category

    # ------------------------------------------------------------------
    # Venue endpoints
    # ------------------------------------------------------------------
    def fetch_kalshi_orderbook(self, ticker: str) -> OrderBookSnapshot:
        payload = self._request(f"/api/kalshi/markets/{ticker}/orderbook")
        with _payload_errors(f"Kalshi orderbook {ticker}"):
            return parse_kalshi_orderbook(ticker, payload)

    def fetch_polymarket_book(self, token_id: str) -> OrderBookSnapshot:
        payload = self._request("/api/polymarket/clob/book", params={"token_id": token_id})
        with _payload_errors(f"Polymarket book {token_id}"):
            return parse_polymarket_book(token_id, payload)

    def fetch_kalshi_candles(
        self,
        ticker: str,
        start: datetime,
        end: datetime,
        timeframe: Timeframe = Timeframe.HOUR_1,
    ) -> List[Observation]:
        """Return candle-derived observations (spread from closing yes quotes)."""

        params = {
            "market_tickers": ticker,
            "start_ts": int(to_unix_timestamp(as_utc(start))),
            "end_ts": int(to_unix_timestamp(as_utc(end))),
            "period_interval": str(timeframe.seconds // 60),
        }
        payload = self._request("/api/kalshi/markets/candlesticks", params=params)
        with _payload_errors(f"Kalshi candlesticks {ticker}"):
            observations = parse_kalshi_candlesticks(ticker, payload)
        if not observations:
            raise DataUnavailable(f"No candlesticks for {ticker} between {start} and {end}")
        return observations

    def fetch_kalshi_market(self, ticker: str) -> MarketInfo:
        payload = self._request(f"/api/kalshi/markets/{ticker}") or {}
        with _payload_errors(f"Kalshi market {ticker}"):
            return _parse_market(payload.get("market", payload))


@contextmanager
def _payload_errors(description: str) -> Iterator[None]:
    """Re-raise shape errors from a payload parser as :class:`DataUnavailable`."""

    try:
        yield
    except (AttributeError, IndexError, KeyError, TypeError, ValueError) as exc:
        raise DataUnavailable(f"Malformed Replay Labs payload for {description}: {exc!r}") from exc


def _parse_market(raw: Mapping[str, Any]) -> MarketInfo:
    ticker = str(raw.get("ticker", ""))
    title = str(raw.get("title", ""))
    return MarketInfo(
        id=ticker,
        ticker=ticker,
        title=title,
        category=infer_category(raw.get("category"), title),
        volume_24h_usd=float(raw.get("volume_24h", 0.0) or 0.0),
        created_at=raw.get("open_time"),
        closes_at=raw.get("close_time"),
    )


__all__ = ["MarketInfo", "ReplayLabsClient"]
