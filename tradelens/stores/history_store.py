"""Store for price-history series keyed by symbol and range.

Keys render as ``SYMBOL:RANGE`` (``AAPL:1M``).  Both parts are upper-cased,
and a missing range means ``1M``.
"""

from __future__ import annotations

from datetime import datetime

from tradelens.cache.entry import CacheEntryState
from tradelens.interfaces.market_data_provider import IMarketDataProvider
from tradelens.models.cache import FreshnessPolicy
from tradelens.models.market import PricePoint
from tradelens.stores.base import EntityStore
from tradelens.utils.clock import Clock, utc_now
from tradelens.utils.errors import ErrorKind
from tradelens.utils.normalization import HistoryKey, history_key


class HistoryStore(EntityStore[HistoryKey, list[PricePoint]]):
    """Close series per (symbol, range); refreshed after 5 min, stale after 10."""

    name = "history"
    DEFAULT_POLICY = FreshnessPolicy(cache_window=300, stale_warning_threshold=600)

    def __init__(
        self,
        provider: IMarketDataProvider,
        policy: FreshnessPolicy | None = None,
        clock: Clock = utc_now,
    ) -> None:
        super().__init__(policy=policy, clock=clock)
        self._provider = provider

    async def _fetch(self, key: HistoryKey) -> list[PricePoint]:
        points = await self._provider.fetch_history(key.symbol, key.range)
        self._logger.debug("history_points_received", key=str(key), points=len(points))
        return points

    def read(self, symbol: str, range: str | None = None) -> list[PricePoint] | None:
        """Return cached points, scheduling a refresh when the window has elapsed."""
        return self._read(history_key(symbol, range))

    def peek(self, symbol: str, range: str | None = None) -> list[PricePoint] | None:
        return self._cache.get(history_key(symbol, range))

    async def force_refresh(self, symbol: str, range: str | None = None) -> list[PricePoint]:
        """Fetch now; see :meth:`SymbolKeyedStore.force_refresh` for semantics."""
        return await self._force_refresh(history_key(symbol, range))

    def latest_close(self, symbol: str, range: str | None = None) -> float | None:
        """Close of the most recent cached point, without triggering a fetch."""
        points = self.peek(symbol, range)
        if not points:
            return None
        return points[-1].close

    def last_update_time(self, symbol: str, range: str | None = None) -> datetime | None:
        return self._cache.last_success_at(history_key(symbol, range))

    def is_stale(self, symbol: str, range: str | None = None) -> bool:
        return self._cache.is_stale(history_key(symbol, range))

    def last_error(self, symbol: str, range: str | None = None) -> ErrorKind | None:
        return self._cache.last_error(history_key(symbol, range))

    def error_message(self, symbol: str, range: str | None = None) -> str | None:
        return self._cache.error_message(history_key(symbol, range))

    def is_loading(self, symbol: str, range: str | None = None) -> bool:
        return self._cache.is_fetching(history_key(symbol, range))

    def state(
        self, symbol: str, range: str | None = None
    ) -> CacheEntryState[list[PricePoint]] | None:
        return self._state(history_key(symbol, range))
