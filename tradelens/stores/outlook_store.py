"""Store for outlooks keyed by symbol and optional timeframe.

Outlooks have no stale-warning threshold.  Instead, when a refresh fails and
an earlier outlook exists, that outlook is returned and the key is marked as
using fallback data until the next successful refresh.
"""

from __future__ import annotations

from datetime import datetime

from tradelens.cache.entry import CacheEntryState
from tradelens.interfaces.market_data_provider import IMarketDataProvider
from tradelens.models.cache import FreshnessPolicy
from tradelens.models.market import Outlook
from tradelens.stores.base import EntityStore
from tradelens.utils.clock import Clock, utc_now
from tradelens.utils.errors import ErrorKind
from tradelens.utils.normalization import OutlookKey, outlook_key


class OutlookStore(EntityStore[OutlookKey, Outlook]):
    """Outlook per (symbol, timeframe); refreshed after 5 min."""

    name = "outlook"
    DEFAULT_POLICY = FreshnessPolicy(cache_window=300)

    def __init__(
        self,
        provider: IMarketDataProvider,
        policy: FreshnessPolicy | None = None,
        clock: Clock = utc_now,
    ) -> None:
        super().__init__(policy=policy, clock=clock)
        self._provider = provider

    async def _fetch(self, key: OutlookKey) -> Outlook:
        return await self._provider.request_outlook(key.symbol, key.timeframe_days)

    def read(self, symbol: str, timeframe_days: int | None = None) -> Outlook | None:
        return self._read(outlook_key(symbol, timeframe_days))

    def peek(self, symbol: str, timeframe_days: int | None = None) -> Outlook | None:
        return self._cache.get(outlook_key(symbol, timeframe_days))

    async def force_refresh(self, symbol: str, timeframe_days: int | None = None) -> Outlook:
        """Fetch now.

        On failure with an earlier outlook cached, that outlook is returned
        and :meth:`is_using_fallback` becomes true.

        Raises:
            TradeLensError: The fetch failed and no outlook was cached before.
        """
        return await self._force_refresh(outlook_key(symbol, timeframe_days))

    def is_using_fallback(self, symbol: str, timeframe_days: int | None = None) -> bool:
        """True iff the latest refresh failed and returned the previous outlook."""
        return self._cache.is_using_fallback(outlook_key(symbol, timeframe_days))

    def last_update_time(self, symbol: str, timeframe_days: int | None = None) -> datetime | None:
        return self._cache.last_success_at(outlook_key(symbol, timeframe_days))

    def is_stale(self, symbol: str, timeframe_days: int | None = None) -> bool:
        return self._cache.is_stale(outlook_key(symbol, timeframe_days))

    def last_error(self, symbol: str, timeframe_days: int | None = None) -> ErrorKind | None:
        return self._cache.last_error(outlook_key(symbol, timeframe_days))

    def error_message(self, symbol: str, timeframe_days: int | None = None) -> str | None:
        return self._cache.error_message(outlook_key(symbol, timeframe_days))

    def is_loading(self, symbol: str, timeframe_days: int | None = None) -> bool:
        return self._cache.is_fetching(outlook_key(symbol, timeframe_days))

    def state(
        self, symbol: str, timeframe_days: int | None = None
    ) -> CacheEntryState[Outlook] | None:
        return self._state(outlook_key(symbol, timeframe_days))
