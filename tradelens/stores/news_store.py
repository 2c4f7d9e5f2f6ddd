"""Store for per-symbol news.

Fetches go through an :class:`INewsProvider`.  Until the backend serves news
the default provider is :class:`PlaceholderNewsProvider`, whose synthesized
items are cached exactly as fetched ones would be.
"""

from __future__ import annotations

from tradelens.interfaces.news_provider import INewsProvider
from tradelens.models.cache import FreshnessPolicy
from tradelens.models.market import NewsItem
from tradelens.providers.news.placeholder_provider import PlaceholderNewsProvider
from tradelens.stores.base import SymbolKeyedStore
from tradelens.utils.clock import Clock, utc_now
from tradelens.utils.normalization import normalize_symbol


class NewsStore(SymbolKeyedStore[list[NewsItem]]):
    """News per symbol; refreshed after 10 min, stale after 30."""

    name = "news"
    DEFAULT_POLICY = FreshnessPolicy(cache_window=600, stale_warning_threshold=1800)

    def __init__(
        self,
        provider: INewsProvider | None = None,
        policy: FreshnessPolicy | None = None,
        clock: Clock = utc_now,
    ) -> None:
        super().__init__(policy=policy, clock=clock)
        self._provider = provider or PlaceholderNewsProvider(clock=clock)

    async def _fetch(self, key: str) -> list[NewsItem]:
        return await self._provider.fetch_news(key)

    async def news_items(self, symbol: str) -> list[NewsItem]:
        """Return cached news, waiting for a refresh when the window has elapsed.

        Falls back to the previously cached items (or an empty list) when the
        provider fails.
        """
        key = normalize_symbol(symbol)
        if self._cache.should_refresh(key):
            result = await self._cache.refresh(key, self._fetch)
            return result.value or []
        return self._cache.get(key) or []
