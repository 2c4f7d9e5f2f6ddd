"""HTTP client for the TradeLens backend implementing IMarketDataProvider.

Endpoints (all JSON):

    GET  /snapshot?symbol=AAPL
    GET  /history?symbol=AAPL&range=1M
    GET  /outlook?symbol=AAPL[&timeframeDays=30]
    POST /ask      {"question", "symbol", "timeframeDays", "simpleMode"}

Every failure is raised as a classified ``TradeLensError``: transport
problems as network failures, non-2xx responses as server errors carrying
the backend's ``{"message": ...}`` when present, empty bodies as empty data
and unparseable bodies as decoding errors.  The ``httpx.AsyncClient`` is
injected via the constructor for testability.
"""

from __future__ import annotations

from typing import Any, TypeVar

import httpx
from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from tradelens.interfaces.market_data_provider import IMarketDataProvider
from tradelens.models.market import (
    AIResponse,
    APIErrorResponse,
    Outlook,
    PricePoint,
    TickerSnapshot,
)
from tradelens.utils.errors import (
    DecodingError,
    EmptyDataError,
    InvalidRequestError,
    NetworkFailureError,
    ServerError,
)
from tradelens.utils.logging import get_logger

_T = TypeVar("_T")

_SNAPSHOT_PATH = "/snapshot"
_HISTORY_PATH = "/history"
_OUTLOOK_PATH = "/outlook"
_ASK_PATH = "/ask"

_JSON = "application/json"
_INVALID_BASE_URL = "The backend URL is invalid. Please check your settings."

_SNAPSHOT_ADAPTER = TypeAdapter(TickerSnapshot)
_HISTORY_ADAPTER = TypeAdapter(list[PricePoint])
_OUTLOOK_ADAPTER = TypeAdapter(Outlook)
_AI_RESPONSE_ADAPTER = TypeAdapter(AIResponse)


class _AskAIRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    question: str
    symbol: str | None
    timeframe_days: int | None = Field(alias="timeframeDays")
    simple_mode: bool = Field(alias="simpleMode")


class HTTPMarketDataProvider(IMarketDataProvider):
    """Market-data provider backed by the TradeLens REST backend.

    Parameters
    ----------
    http_client:
        Shared async client; its lifetime is owned by the caller.
    base_url:
        Backend root, optionally with a path prefix
        (``https://api.example.com/v1``).
    """

    def __init__(self, http_client: httpx.AsyncClient, base_url: str) -> None:
        self._http = http_client
        self._base_url = base_url
        self._logger = get_logger(__name__, provider=self.get_provider_name(), base_url=base_url)

    def get_provider_name(self) -> str:
        return "http"

    # -- IMarketDataProvider ---------------------------------------------------

    async def fetch_snapshot(self, symbol: str) -> TickerSnapshot:
        body = await self._request("GET", _SNAPSHOT_PATH, params={"symbol": symbol})
        return self._decode(_SNAPSHOT_ADAPTER, body)

    async def fetch_history(self, symbol: str, range: str) -> list[PricePoint]:
        body = await self._request(
            "GET", _HISTORY_PATH, params={"symbol": symbol, "range": range}
        )
        return self._decode(_HISTORY_ADAPTER, body)

    async def request_outlook(self, symbol: str, timeframe_days: int | None) -> Outlook:
        params = {"symbol": symbol}
        if timeframe_days is not None:
            params["timeframeDays"] = str(timeframe_days)
        body = await self._request("GET", _OUTLOOK_PATH, params=params)
        return self._decode(_OUTLOOK_ADAPTER, body)

    async def ask_ai(
        self,
        question: str,
        symbol: str | None,
        timeframe_days: int | None,
        simple_mode: bool,
    ) -> AIResponse:
        payload = _AskAIRequest(
            question=question,
            symbol=symbol,
            timeframe_days=timeframe_days,
            simple_mode=simple_mode,
        )
        body = await self._request(
            "POST", _ASK_PATH, json_body=payload.model_dump(by_alias=True)
        )
        return self._decode(_AI_RESPONSE_ADAPTER, body)

    # -- Private helpers -------------------------------------------------------

    def _build_url(self, endpoint: str) -> httpx.URL:
        try:
            base = httpx.URL(self._base_url)
        except httpx.InvalidURL as exc:
            raise InvalidRequestError(_INVALID_BASE_URL, self.get_provider_name()) from exc
        if base.scheme not in ("http", "https") or not base.host:
            raise InvalidRequestError(_INVALID_BASE_URL, self.get_provider_name())
        return base.copy_with(path=self._joined_path(base.path, endpoint))

    @staticmethod
    def _joined_path(base_path: str, endpoint: str) -> str:
        trimmed_base = base_path.strip("/")
        trimmed_endpoint = endpoint.strip("/")
        if not trimmed_base:
            return f"/{trimmed_endpoint}"
        return f"/{trimmed_base}/{trimmed_endpoint}"

    async def _request(
        self,
        method: str,
        endpoint: str,
        params: dict[str, str] | None = None,
        json_body: dict[str, Any] | None = None,
    ) -> bytes:
        """Perform one request and return the raw body of a 2xx response."""
        url = self._build_url(endpoint)
        headers = {"Accept": _JSON}
        try:
            response = await self._http.request(
                method, url, params=params, json=json_body, headers=headers
            )
        except httpx.TransportError as exc:
            self._logger.warning(
                "backend_request_failed", method=method, endpoint=endpoint, error=str(exc)
            )
            raise NetworkFailureError(provider_name=self.get_provider_name()) from exc

        if not response.is_success:
            message = self._error_message(response)
            self._logger.warning(
                "backend_http_error",
                method=method,
                endpoint=endpoint,
                status=response.status_code,
            )
            raise ServerError(message, self.get_provider_name())

        if not response.content:
            raise EmptyDataError(provider_name=self.get_provider_name())

        self._logger.debug(
            "backend_request_ok", method=method, endpoint=endpoint, bytes=len(response.content)
        )
        return response.content

    @staticmethod
    def _error_message(response: httpx.Response) -> str | None:
        """Extract ``{"message": ...}`` from an error body, else the reason phrase."""
        if response.content:
            try:
                return APIErrorResponse.model_validate_json(response.content).message
            except ValidationError:
                pass
        return response.reason_phrase or None

    def _decode(self, adapter: TypeAdapter[_T], body: bytes) -> _T:
        try:
            return adapter.validate_json(body)
        except ValidationError as exc:
            self._logger.warning("backend_decode_failed", error_count=exc.error_count())
            raise DecodingError(provider_name=self.get_provider_name()) from exc
