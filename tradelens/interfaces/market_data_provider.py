"""Abstract base class for the remote market-data service.

Defines the contract the entity stores fetch through.  The production
implementation talks HTTP to the TradeLens backend; tests inject fakes.
Implementations raise :class:`~tradelens.utils.errors.TradeLensError`
subclasses where they can classify a failure themselves; anything else is
classified by the cache.  No retries are part of the contract -- an
implementation that wants them performs them internally.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from tradelens.models.market import AIResponse, Outlook, PricePoint, TickerSnapshot


# Concrete implementation: HTTPMarketDataProvider (tradelens/providers/market_data/)
class IMarketDataProvider(ABC):
    """Contract for the quote, history, outlook and AI endpoints."""

    @abstractmethod
    async def fetch_snapshot(self, symbol: str) -> TickerSnapshot:
        """Return the latest quote for a normalized *symbol*."""

    @abstractmethod
    async def fetch_history(self, symbol: str, range: str) -> list[PricePoint]:
        """Return the close series for *symbol* over *range* (e.g. ``"1M"``).

        Points are ordered oldest first; the last point is the latest close.
        """

    @abstractmethod
    async def request_outlook(self, symbol: str, timeframe_days: int | None) -> Outlook:
        """Return the outlook for *symbol*, optionally scoped to a timeframe."""

    @abstractmethod
    async def ask_ai(
        self,
        question: str,
        symbol: str | None,
        timeframe_days: int | None,
        simple_mode: bool,
    ) -> AIResponse:
        """Answer a free-form *question*.

        Parameters
        ----------
        question:
            The question as the user typed it.
        symbol:
            Optional ticker the question is about.
        timeframe_days:
            Optional horizon for the answer.
        simple_mode:
            Ask for a shorter, plain-language answer.
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a short identifier used in logs (e.g. ``"http"``)."""
