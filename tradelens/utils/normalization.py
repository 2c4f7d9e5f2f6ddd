"""Cache-key normalization for the entity stores.

Every store normalizes its natural key before touching the cache so that
logically identical requests ("aapl", " AAPL ") land on the same entry.
All functions here are idempotent: applying them to their own output is a
no-op.
"""

from __future__ import annotations

from typing import NamedTuple

from tradelens.utils.errors import InvalidRequestError

DEFAULT_HISTORY_RANGE = "1M"


class HistoryKey(NamedTuple):
    """Cache key for a price-history series, rendered as ``SYMBOL:RANGE``."""

    symbol: str
    range: str

    def __str__(self) -> str:
        return f"{self.symbol}:{self.range}"


class OutlookKey(NamedTuple):
    """Cache key for an outlook; ``timeframe_days`` is optional."""

    symbol: str
    timeframe_days: int | None = None

    def __str__(self) -> str:
        if self.timeframe_days is None:
            return self.symbol
        return f"{self.symbol}:{self.timeframe_days}D"


def normalize_symbol(symbol: str) -> str:
    """Strip and upper-case a ticker symbol.

    Raises:
        InvalidRequestError: If nothing is left after stripping.
    """
    normalized = symbol.strip().upper()
    if not normalized:
        raise InvalidRequestError("A ticker symbol is required.")
    return normalized


def normalize_range(range_token: str | None) -> str:
    """Upper-case a history range token, defaulting to ``1M``."""
    if range_token is None:
        return DEFAULT_HISTORY_RANGE
    normalized = range_token.strip().upper()
    return normalized or DEFAULT_HISTORY_RANGE


def normalize_question(question: str) -> str:
    """Trim and lower-case an AI question so rephrasings by case collide."""
    return question.strip().lower()


def history_key(symbol: str, range_token: str | None = None) -> HistoryKey:
    return HistoryKey(normalize_symbol(symbol), normalize_range(range_token))


def outlook_key(symbol: str, timeframe_days: int | None = None) -> OutlookKey:
    return OutlookKey(normalize_symbol(symbol), timeframe_days)
