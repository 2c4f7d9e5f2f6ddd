"""Shared utilities: errors, logging, key normalization and clocks."""

from tradelens.utils.errors import (
    DecodingError,
    EmptyDataError,
    ErrorKind,
    InvalidRequestError,
    InvalidResponseError,
    NetworkFailureError,
    ServerError,
    TradeLensError,
    UnknownError,
    classify_error,
    error_for_kind,
)

__all__ = [
    "DecodingError",
    "EmptyDataError",
    "ErrorKind",
    "InvalidRequestError",
    "InvalidResponseError",
    "NetworkFailureError",
    "ServerError",
    "TradeLensError",
    "UnknownError",
    "classify_error",
    "error_for_kind",
]
