"""Unit tests for HTTPMarketDataProvider using httpx.MockTransport."""

from __future__ import annotations

import json
from collections.abc import Callable
from unittest.mock import MagicMock

import httpx
import pytest

from tradelens.providers.market_data.http_provider import HTTPMarketDataProvider
from tradelens.utils.errors import (
    DecodingError,
    EmptyDataError,
    InvalidRequestError,
    NetworkFailureError,
    ServerError,
)

BASE_URL = "http://api.test"

SNAPSHOT_JSON = {
    "symbol": "AAPL",
    "name": "Apple Inc.",
    "price": 189.12,
    "changePercent": 0.85,
    "high52w": 199.62,
    "low52w": 164.08,
    "currency": "USD",
}

OUTLOOK_JSON = {
    "symbol": "AAPL",
    "timeframeDays": 30,
    "sentimentSummary": "Constructive",
    "historicalHitRate": 0.62,
    "typicalRangePercent": 4.5,
    "volatilityLabel": "Moderate",
    "keyDrivers": ["Earnings"],
}

AI_JSON = {
    "whatsHappeningNow": "Shares are drifting higher.",
    "keyDrivers": ["Services growth"],
    "riskVsOpportunity": "Balanced",
    "historicalBehavior": "Calm after earnings",
    "simpleRecap": "Steady week",
}


class _Recorder:
    """Mock transport handler that records requests and replays one response."""

    def __init__(self, respond: Callable[[httpx.Request], httpx.Response]) -> None:
        self.requests: list[httpx.Request] = []
        self._respond = respond

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self._respond(request)


def _json_response(payload: object, status: int = 200) -> Callable[[httpx.Request], httpx.Response]:
    return lambda request: httpx.Response(status, json=payload)


def _provider(client: httpx.AsyncClient, base_url: str = BASE_URL) -> HTTPMarketDataProvider:
    return HTTPMarketDataProvider(http_client=client, base_url=base_url)


# ======================================================================
# Successful requests
# ======================================================================


class TestHTTPMarketDataProviderSuccess:
    def test_provider_name(self) -> None:
        provider = _provider(MagicMock(spec=httpx.AsyncClient))
        assert provider.get_provider_name() == "http"

    @pytest.mark.asyncio
    async def test_fetch_snapshot_decodes_camel_case(self) -> None:
        recorder = _Recorder(_json_response(SNAPSHOT_JSON))
        async with httpx.AsyncClient(transport=httpx.MockTransport(recorder)) as client:
            snapshot = await _provider(client).fetch_snapshot("AAPL")

        assert snapshot.price == 189.12
        assert snapshot.change_percent == 0.85
        assert snapshot.high_52w == 199.62
        request = recorder.requests[0]
        assert request.method == "GET"
        assert request.url.path == "/snapshot"
        assert request.url.params["symbol"] == "AAPL"
        assert request.headers["Accept"] == "application/json"

    @pytest.mark.asyncio
    async def test_fetch_history(self) -> None:
        payload = [
            {"date": "2024-03-13T00:00:00Z", "close": 187.0},
            {"date": "2024-03-14T00:00:00Z", "close": 189.12},
        ]
        recorder = _Recorder(_json_response(payload))
        async with httpx.AsyncClient(transport=httpx.MockTransport(recorder)) as client:
            points = await _provider(client).fetch_history("AAPL", "1M")

        assert [p.close for p in points] == [187.0, 189.12]
        assert points[0].date.year == 2024
        assert recorder.requests[0].url.params["range"] == "1M"

    @pytest.mark.asyncio
    async def test_request_outlook_omits_missing_timeframe(self) -> None:
        recorder = _Recorder(_json_response(OUTLOOK_JSON))
        async with httpx.AsyncClient(transport=httpx.MockTransport(recorder)) as client:
            outlook = await _provider(client).request_outlook("AAPL", None)

        assert outlook.timeframe_days == 30
        assert "timeframeDays" not in recorder.requests[0].url.params

    @pytest.mark.asyncio
    async def test_request_outlook_sends_timeframe(self) -> None:
        recorder = _Recorder(_json_response(OUTLOOK_JSON))
        async with httpx.AsyncClient(transport=httpx.MockTransport(recorder)) as client:
            await _provider(client).request_outlook("AAPL", 30)

        assert recorder.requests[0].url.params["timeframeDays"] == "30"

    @pytest.mark.asyncio
    async def test_ask_ai_posts_camel_case_body(self) -> None:
        recorder = _Recorder(_json_response(AI_JSON))
        async with httpx.AsyncClient(transport=httpx.MockTransport(recorder)) as client:
            response = await _provider(client).ask_ai("What now?", "AAPL", 30, True)

        assert response.simple_recap == "Steady week"
        request = recorder.requests[0]
        assert request.method == "POST"
        assert request.url.path == "/ask"
        assert json.loads(request.content) == {
            "question": "What now?",
            "symbol": "AAPL",
            "timeframeDays": 30,
            "simpleMode": True,
        }

    @pytest.mark.asyncio
    async def test_base_url_path_prefix_is_kept(self) -> None:
        recorder = _Recorder(_json_response(SNAPSHOT_JSON))
        async with httpx.AsyncClient(transport=httpx.MockTransport(recorder)) as client:
            await _provider(client, "https://api.test/v1/").fetch_snapshot("AAPL")

        url = recorder.requests[0].url
        assert url.scheme == "https"
        assert url.path == "/v1/snapshot"


# ======================================================================
# Failures
# ======================================================================


class TestHTTPMarketDataProviderErrors:
    @pytest.mark.asyncio
    async def test_server_error_uses_backend_message(self) -> None:
        recorder = _Recorder(_json_response({"message": "Symbol not supported"}, status=404))
        async with httpx.AsyncClient(transport=httpx.MockTransport(recorder)) as client:
            with pytest.raises(ServerError) as exc_info:
                await _provider(client).fetch_snapshot("ZZZZ")

        assert exc_info.value.message == "Symbol not supported"
        assert exc_info.value.provider_name == "http"

    @pytest.mark.asyncio
    async def test_server_error_without_body_uses_reason(self) -> None:
        recorder = _Recorder(lambda request: httpx.Response(500))
        async with httpx.AsyncClient(transport=httpx.MockTransport(recorder)) as client:
            with pytest.raises(ServerError) as exc_info:
                await _provider(client).fetch_snapshot("AAPL")

        assert exc_info.value.message == "Internal Server Error"

    @pytest.mark.asyncio
    async def test_empty_body_is_empty_data(self) -> None:
        recorder = _Recorder(lambda request: httpx.Response(200, content=b""))
        async with httpx.AsyncClient(transport=httpx.MockTransport(recorder)) as client:
            with pytest.raises(EmptyDataError):
                await _provider(client).fetch_snapshot("AAPL")

    @pytest.mark.asyncio
    async def test_malformed_body_is_decoding_error(self) -> None:
        recorder = _Recorder(lambda request: httpx.Response(200, content=b"{not json"))
        async with httpx.AsyncClient(transport=httpx.MockTransport(recorder)) as client:
            with pytest.raises(DecodingError):
                await _provider(client).fetch_snapshot("AAPL")

    @pytest.mark.asyncio
    async def test_wrong_shape_is_decoding_error(self) -> None:
        recorder = _Recorder(_json_response({"symbol": "AAPL"}))
        async with httpx.AsyncClient(transport=httpx.MockTransport(recorder)) as client:
            with pytest.raises(DecodingError):
                await _provider(client).fetch_snapshot("AAPL")

    @pytest.mark.asyncio
    async def test_connection_error_is_network_failure(self) -> None:
        def refuse(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        async with httpx.AsyncClient(transport=httpx.MockTransport(refuse)) as client:
            with pytest.raises(NetworkFailureError):
                await _provider(client).fetch_history("AAPL", "1M")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("base_url", ["not a url", "ftp://api.test", "http://"])
    async def test_invalid_base_url(self, base_url: str) -> None:
        recorder = _Recorder(_json_response(SNAPSHOT_JSON))
        async with httpx.AsyncClient(transport=httpx.MockTransport(recorder)) as client:
            with pytest.raises(InvalidRequestError):
                await _provider(client, base_url).fetch_snapshot("AAPL")

        assert recorder.requests == []
