"""Store for per-symbol price snapshots.

A failed refresh leaves the previous snapshot in place and records the error
for the symbol; callers keep seeing the last good quote.
"""

from __future__ import annotations

from tradelens.interfaces.market_data_provider import IMarketDataProvider
from tradelens.models.cache import FreshnessPolicy
from tradelens.models.market import TickerSnapshot
from tradelens.stores.base import SymbolKeyedStore
from tradelens.utils.clock import Clock, utc_now


class SnapshotStore(SymbolKeyedStore[TickerSnapshot]):
    """Latest quote per symbol; refreshed after 60 s, stale after 120 s."""

    name = "snapshot"
    DEFAULT_POLICY = FreshnessPolicy(cache_window=60, stale_warning_threshold=120)

    def __init__(
        self,
        provider: IMarketDataProvider,
        policy: FreshnessPolicy | None = None,
        clock: Clock = utc_now,
    ) -> None:
        super().__init__(policy=policy, clock=clock)
        self._provider = provider

    async def _fetch(self, key: str) -> TickerSnapshot:
        return await self._provider.fetch_snapshot(key)
