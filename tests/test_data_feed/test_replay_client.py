from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable, List

import httpx
import pytest

from arb_oppity.config.models import ReplayLabsConfig
from arb_oppity.core.enums import Category, Timeframe, Venue
from arb_oppity.core.errors import DataUnavailable
from arb_oppity.data_feed.replay_client import ReplayLabsClient
from arb_oppity.data_feed.sources import MarketDataSource

START = datetime(2024, 1, 1, tzinfo=timezone.utc)
END = datetime(2024, 1, 2, tzinfo=timezone.utc)


def _client(handler: Callable[[httpx.Request], httpx.Response], **kwargs) -> ReplayLabsClient:
    config = ReplayLabsConfig(api_key="secret", max_retries=3, backoff_base=0.0)
    session = httpx.Client(base_url="https://replay.test", transport=httpx.MockTransport(handler))
    return ReplayLabsClient(config, session=session, **kwargs)


def test_fetch_observations_sends_auth_and_range() -> None:
    seen: List[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(
            200,
            json={
                "snapshots": [
                    {"timestamp": "2024-01-01T02:00:00Z", "spread_bps": 90, "mid_price": 0.5},
                    {"timestamp": "2024-01-01T01:00:00Z", "spread_bps": 80, "mid_price": 0.5},
                ]
            },
        )

    with _client(handler) as client:
        assert isinstance(client, MarketDataSource)
        observations = client.fetch_observations("K-1", START, END, Timeframe.HOUR_1)

    assert [obs.spread for obs in observations] == [80.0, 90.0]
    request = seen[0]
    assert request.url.path == "/api/orderbook/K-1"
    assert request.url.params["interval"] == "1h"
    assert request.headers["Authorization"] == "Bearer secret"


def test_empty_history_is_data_unavailable() -> None:
    with _client(lambda request: httpx.Response(200, json={"snapshots": []})) as client:
        with pytest.raises(DataUnavailable):
            client.fetch_observations("K-1", START, END, Timeframe.HOUR_1)


def test_server_errors_retried_then_raised() -> None:
    calls: List[int] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(1)
        return httpx.Response(503, json={"error": "busy"})

    with _client(handler) as client:
        with pytest.raises(DataUnavailable):
            client.fetch_kalshi_orderbook("K-1")
    assert len(calls) == 3


def test_transient_error_recovers() -> None:
    calls: List[int] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(1)
        if len(calls) == 1:
            raise httpx.ConnectError("boom", request=request)
        return httpx.Response(200, json={"orderbook": {"yes": [[40, 10]], "no": [[55, 10]]}})

    with _client(handler) as client:
        observation = client.fetch_current_snapshot("K-1", Venue.KALSHI)
    assert len(calls) == 2
    assert observation.mid_price == pytest.approx(0.425)


def test_client_errors_not_retried() -> None:
    calls: List[int] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(1)
        return httpx.Response(404, text="not found")

    with _client(handler) as client:
        with pytest.raises(DataUnavailable):
            client.fetch_polymarket_book("P-1")
    assert len(calls) == 1


def test_polymarket_snapshot_uses_token_query() -> None:
    seen: List[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"bids": [{"price": "0.40", "size": "5"}], "asks": [{"price": "0.42", "size": "5"}]})

    with _client(handler) as client:
        observation = client.fetch_current_snapshot("TOKEN", Venue.POLYMARKET)
    assert seen[0].url.path == "/api/polymarket/clob/book"
    assert seen[0].url.params["token_id"] == "TOKEN"
    assert observation.market_id == "TOKEN"


def test_category_from_mapping_then_metadata() -> None:
    calls: List[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request.url.path)
        return httpx.Response(200, json={"market": {"ticker": "K-2", "title": "Will Bitcoin close above 100k?"}})

    with _client(handler, categories={"K-1": Category.POLITICS}) as client:
        assert client.category_of("K-1") is Category.POLITICS
        assert client.category_of("K-2") is Category.CRYPTO
        assert client.category_of("K-2") is Category.CRYPTO
    assert calls == ["/api/kalshi/markets/K-2"]


def test_category_lookup_failure_falls_back_to_other() -> None:
    with _client(lambda request: httpx.Response(404)) as client:
        assert client.category_of("K-9") is Category.OTHER


def test_empty_history_falls_back_to_kalshi_candles() -> None:
    seen: List[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        if request.url.path == "/api/orderbook/K-1":
            return httpx.Response(200, json={"snapshots": []})
        return httpx.Response(
            200,
            json={
                "candlesticks": {
                    "K-1": [{"end_period_ts": 1_704_067_200, "yes_bid": {"close": 40}, "yes_ask": {"close": 42}}]
                }
            },
        )

    with _client(handler) as client:
        observations = client.fetch_observations("K-1", START, END, Timeframe.HOUR_4)

    assert len(observations) == 1
    assert observations[0].mid_price == pytest.approx(0.41)
    candles = seen[1]
    assert candles.url.path == "/api/kalshi/markets/candlesticks"
    assert candles.url.params["market_tickers"] == "K-1"
    assert candles.url.params["period_interval"] == "240"
    assert candles.url.params["start_ts"] == str(int(START.timestamp()))


def test_non_json_body_is_data_unavailable_without_retry() -> None:
    calls: List[int] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(1)
        return httpx.Response(200, text="<html>gateway</html>")

    with _client(handler) as client:
        with pytest.raises(DataUnavailable, match="non-JSON"):
            client.fetch_kalshi_orderbook("K-1")
    assert len(calls) == 1


@pytest.mark.parametrize(
    ("body", "fetch"),
    [
        ({"orderbook": {"yes": [[40]], "no": []}}, lambda client: client.fetch_kalshi_orderbook("K-1")),
        ({"bids": [{"price": "n/a", "size": "5"}], "asks": []}, lambda client: client.fetch_polymarket_book("P-1")),
        (
            {"snapshots": [{"spread_bps": 80, "mid_price": 0.5}]},
            lambda client: client.fetch_observations("K-1", START, END, Timeframe.HOUR_1),
        ),
    ],
    ids=["kalshi-ladder", "polymarket-price", "history-row"],
)
def test_malformed_payloads_are_data_unavailable(body: object, fetch: Callable[[ReplayLabsClient], object]) -> None:
    with _client(lambda request: httpx.Response(200, json=body)) as client:
        with pytest.raises(DataUnavailable, match="Malformed"):
            fetch(client)
