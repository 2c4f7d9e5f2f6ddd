"""Abstract base class for news sources.

The backend has no news endpoint yet, so the only implementation is a
placeholder generator.  Keeping it behind this interface means a real source
can be dropped into :class:`~tradelens.stores.news_store.NewsStore` without
changing the store's contract.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from tradelens.models.market import NewsItem


# Concrete implementation: PlaceholderNewsProvider (tradelens/providers/news/)
class INewsProvider(ABC):
    """Contract for per-symbol news retrieval."""

    @abstractmethod
    async def fetch_news(self, symbol: str) -> list[NewsItem]:
        """Return recent news items for a normalized *symbol*, newest first."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a short identifier used in logs."""
