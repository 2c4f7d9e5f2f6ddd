"""Custom exception hierarchy and error classification for TradeLens.

Every failure that crosses the data-store boundary is reduced to exactly one
:class:`ErrorKind`.  The hierarchy mirrors that closed set one-to-one:

    TradeLensError  (base -- carries kind, user-facing message, provider name)
    +-- InvalidRequestError   (bad symbol, bad base URL, malformed request)
    +-- NetworkFailureError   (server unreachable, timeouts, DNS)
    +-- ServerError           (non-2xx response from the data service)
    +-- DecodingError         (response body could not be parsed)
    +-- EmptyDataError        (2xx response with no body)
    +-- InvalidResponseError  (response of an unexpected shape)
    +-- UnknownError          (anything that could not be classified)

Providers raise these directly.  The keyed cache runs every fetch failure
through :func:`classify_error` so only the kind and the user-facing message
are retained -- never the raw exception.
"""

from __future__ import annotations

import json
from enum import Enum

import httpx
from pydantic import ValidationError


class ErrorKind(str, Enum):  # noqa: UP042 (StrEnum needs 3.11)
    """Closed set of failure classes a store can record for a key."""

    INVALID_REQUEST = "INVALID_REQUEST"
    NETWORK_FAILURE = "NETWORK_FAILURE"
    SERVER = "SERVER"
    DECODING = "DECODING"
    EMPTY_DATA = "EMPTY_DATA"
    INVALID_RESPONSE = "INVALID_RESPONSE"
    UNKNOWN = "UNKNOWN"


class TradeLensError(Exception):
    """Base exception for all TradeLens data errors.

    Subclasses pin :attr:`kind` and provide a default user-facing message.
    The ``__str__`` method prefixes the provider name in brackets for log
    output, e.g. ``[http] We couldn't reach the server. Please try again.``
    """

    kind: ErrorKind = ErrorKind.UNKNOWN
    default_message: str = "Something went wrong. Please try again."

    def __init__(
        self,
        message: str | None = None,
        provider_name: str | None = None,
    ) -> None:
        self._message = message or self.default_message
        self._provider_name = provider_name
        super().__init__(self._message)

    @property
    def message(self) -> str:
        return self._message

    @property
    def provider_name(self) -> str | None:
        return self._provider_name

    @property
    def user_message(self) -> str:
        """Message suitable for rendering in a retry prompt."""
        return self._message

    def __str__(self) -> str:
        if self._provider_name:
            return f"[{self._provider_name}] {self._message}"
        return self._message


class InvalidRequestError(TradeLensError):
    """Raised when a request cannot be built (empty symbol, bad base URL)."""

    kind = ErrorKind.INVALID_REQUEST
    default_message = "The request was invalid. Please check your input."


class NetworkFailureError(TradeLensError):
    """Raised when the data service cannot be reached."""

    kind = ErrorKind.NETWORK_FAILURE
    default_message = "We couldn't reach the server. Please try again."


class ServerError(TradeLensError):
    """Raised when the data service answers with a non-success status."""

    kind = ErrorKind.SERVER
    default_message = "The server reported an error. Please try again."


class DecodingError(TradeLensError):
    kind = ErrorKind.DECODING
    default_message = "We couldn't read the latest data. Please try again."


class EmptyDataError(TradeLensError):
    kind = ErrorKind.EMPTY_DATA
    default_message = "No data is available yet. Please try again soon."


class InvalidResponseError(TradeLensError):
    kind = ErrorKind.INVALID_RESPONSE
    default_message = "We received an unexpected response. Please try again."


class UnknownError(TradeLensError):
    kind = ErrorKind.UNKNOWN


_ERRORS_BY_KIND: dict[ErrorKind, type[TradeLensError]] = {
    ErrorKind.INVALID_REQUEST: InvalidRequestError,
    ErrorKind.NETWORK_FAILURE: NetworkFailureError,
    ErrorKind.SERVER: ServerError,
    ErrorKind.DECODING: DecodingError,
    ErrorKind.EMPTY_DATA: EmptyDataError,
    ErrorKind.INVALID_RESPONSE: InvalidResponseError,
    ErrorKind.UNKNOWN: UnknownError,
}


def error_for_kind(
    kind: ErrorKind,
    message: str | None = None,
    provider_name: str | None = None,
) -> TradeLensError:
    """Build the exception instance matching *kind*."""
    return _ERRORS_BY_KIND[kind](message=message, provider_name=provider_name)


def classify_error(exc: BaseException, provider_name: str | None = None) -> TradeLensError:
    """Map an arbitrary exception onto a fresh, unchained :class:`TradeLensError`.

    The returned instance holds only the kind and the user-facing message, so
    storing it does not keep the original exception (or its traceback) alive.
    Messages of non-TradeLens exceptions are never shown to the user; the
    kind's default message is used instead.
    """
    if isinstance(exc, TradeLensError):
        return error_for_kind(exc.kind, exc.message, exc.provider_name or provider_name)
    if isinstance(exc, httpx.HTTPStatusError):
        return ServerError(
            message=exc.response.reason_phrase or None,
            provider_name=provider_name,
        )
    if isinstance(exc, httpx.TransportError):
        return NetworkFailureError(provider_name=provider_name)
    if isinstance(exc, (ValidationError, json.JSONDecodeError)):
        return DecodingError(provider_name=provider_name)
    return UnknownError(provider_name=provider_name)
