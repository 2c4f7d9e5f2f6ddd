"""Cross-store coordination for a ticker symbol.

The coordinator owns the five entity stores built by the composition root
and answers questions that span more than one of them: when was this symbol
last synced, is any of its data stale, do the snapshot and the history agree
on the price.  It reads the stores only through their public accessors and
never mutates their caches except through ``force_refresh``.
"""

from __future__ import annotations

import asyncio
from collections.abc import Hashable
from datetime import datetime, tzinfo

import structlog

from tradelens.cache.entry import CacheEntryState
from tradelens.models.cache import ConsistencyWarning, WarningKind
from tradelens.stores.ai_response_store import AIResponseStore
from tradelens.stores.history_store import HistoryStore
from tradelens.stores.news_store import NewsStore
from tradelens.stores.outlook_store import OutlookStore
from tradelens.stores.snapshot_store import SnapshotStore
from tradelens.utils.clock import Clock, utc_now
from tradelens.utils.logging import get_logger
from tradelens.utils.normalization import normalize_symbol

# Relative difference above which snapshot and history prices disagree.
PRICE_MISMATCH_THRESHOLD = 0.001

_BANNER_SUFFIX = "outlook updates periodically"
_BANNER_SYNCED_PREFIX = "Data synced"
_BANNER_FROM_PREFIX = "Data from"
_JUST_NOW = "just now"


def _short_time(moment: datetime, display_tz: tzinfo | None) -> str:
    """Format *moment* as ``3:04 PM`` in *display_tz* (local time when None)."""
    local = moment.astimezone(display_tz)
    hour = local.hour % 12 or 12
    meridiem = "AM" if local.hour < 12 else "PM"
    return f"{hour}:{local.minute:02d} {meridiem}"


def _relative_age(minutes_ago: int) -> str:
    if minutes_ago < 1:
        return f"{_BANNER_FROM_PREFIX} {_JUST_NOW}"
    unit = "minute" if minutes_ago == 1 else "minutes"
    return f"{_BANNER_FROM_PREFIX} {minutes_ago} {unit} ago"


class StoreCoordinator:
    """Aggregates snapshot and history state per symbol.

    Parameters
    ----------
    snapshot_store, history_store, ai_response_store, outlook_store, news_store:
        The entity stores; owned by the coordinator for the app's lifetime.
    clock:
        Time source for sync banners and ``last_global_sync``.
    display_tz:
        Timezone for absolute times in banners; the host's local zone when
        ``None``.
    """

    def __init__(
        self,
        snapshot_store: SnapshotStore,
        history_store: HistoryStore,
        ai_response_store: AIResponseStore,
        outlook_store: OutlookStore,
        news_store: NewsStore,
        clock: Clock = utc_now,
        display_tz: tzinfo | None = None,
    ) -> None:
        self.snapshot_store = snapshot_store
        self.history_store = history_store
        self.ai_response_store = ai_response_store
        self.outlook_store = outlook_store
        self.news_store = news_store
        self._clock = clock
        self._display_tz = display_tz
        self._last_global_sync: datetime | None = None
        self._logger: structlog.BoundLogger = get_logger(__name__)

        self.snapshot_store.register_listener(self._on_snapshot_change)

    @property
    def last_global_sync(self) -> datetime | None:
        """When :meth:`refresh_all` last finished, for any symbol."""
        return self._last_global_sync

    # ------------------------------------------------------------------
    # Refreshing
    # ------------------------------------------------------------------

    async def refresh_all(self, symbol: str) -> None:
        """Force-refresh snapshot and history for *symbol* in parallel.

        Waits for both.  A failure in either is logged, not raised; inspect
        each store afterwards for its own error state.
        """
        results = await asyncio.gather(
            self.snapshot_store.force_refresh(symbol),
            self.history_store.force_refresh(symbol),
            return_exceptions=True,
        )
        for store_name, result in zip(("snapshot", "history"), results):
            if isinstance(result, BaseException):
                self._logger.warning(
                    "refresh_all_partial_failure",
                    symbol=symbol,
                    store=store_name,
                    error=str(result),
                )
        self._last_global_sync = self._clock()

    # ------------------------------------------------------------------
    # Sync reporting
    # ------------------------------------------------------------------

    def most_recent_sync(self, symbol: str) -> datetime | None:
        """Latest successful update across the snapshot and history stores."""
        dates = [
            moment
            for moment in (
                self.snapshot_store.last_update_time(symbol),
                self.history_store.last_update_time(symbol),
            )
            if moment is not None
        ]
        return max(dates) if dates else None

    def sync_time_string(self, symbol: str) -> str | None:
        synced = self.most_recent_sync(symbol)
        if synced is None:
            return None
        return f"{_BANNER_SYNCED_PREFIX} at {_short_time(synced, self._display_tz)}"

    def sync_banner_text(self, symbol: str, now: datetime | None = None) -> str | None:
        """Banner such as ``Data from 3 minutes ago — Data synced 3:04 PM — ...``.

        Returns ``None`` if neither store has ever synced *symbol*.
        """
        synced = self.most_recent_sync(symbol)
        if synced is None:
            return None
        reference = now or self._clock()
        minutes_ago = max(0, int((reference - synced).total_seconds() // 60))
        sync_segment = f"{_BANNER_SYNCED_PREFIX} {_short_time(synced, self._display_tz)}"
        return f"{_relative_age(minutes_ago)} — {sync_segment} — {_BANNER_SUFFIX}"

    def has_stale_data(self, symbol: str) -> bool:
        return self.snapshot_store.is_stale(symbol) or self.history_store.is_stale(symbol)

    # ------------------------------------------------------------------
    # Diagnostics
    # ------------------------------------------------------------------

    def check_consistency(self, symbol: str) -> list[ConsistencyWarning]:
        """Compare snapshot and history for *symbol* and report staleness.

        Diagnostic only: reads cached values without triggering fetches and
        never changes what the stores return.
        """
        normalized = normalize_symbol(symbol)
        warnings: list[ConsistencyWarning] = []

        snapshot = self.snapshot_store.peek(normalized)
        latest_close = self.history_store.latest_close(normalized)
        if snapshot is not None and latest_close is not None:
            mismatch = self._price_mismatch(normalized, snapshot.price, latest_close)
            if mismatch is not None:
                warnings.append(mismatch)

        if self.snapshot_store.is_stale(normalized):
            warnings.append(
                ConsistencyWarning(
                    kind=WarningKind.SNAPSHOT_STALE,
                    symbol=normalized,
                    message=f"Price data for {normalized} is stale",
                )
            )
        if self.history_store.is_stale(normalized):
            warnings.append(
                ConsistencyWarning(
                    kind=WarningKind.HISTORY_STALE,
                    symbol=normalized,
                    message=f"History data for {normalized} is stale",
                )
            )

        for warning in warnings:
            self._logger.warning(
                "consistency_warning", kind=warning.kind.value, message=warning.message
            )
        return warnings

    def debug_info(self, symbol: str) -> str:
        lines: list[str] = []

        snapshot = self.snapshot_store.peek(symbol)
        if snapshot is not None:
            lines.append(f"Price: {snapshot.price}")

        points = self.history_store.peek(symbol)
        if points is not None:
            lines.append(f"History: {len(points)} points")
            if points:
                lines.append(f"Last close: {points[-1].close}")

        sync_time = self.sync_time_string(symbol)
        if sync_time:
            lines.append(sync_time)

        if self.has_stale_data(symbol):
            lines.append("STALE DATA")

        return "\n".join(lines)

    @staticmethod
    def _price_mismatch(symbol: str, price: float, latest_close: float) -> ConsistencyWarning | None:
        if latest_close == 0:
            return None
        difference = abs(price - latest_close) / latest_close
        if difference <= PRICE_MISMATCH_THRESHOLD:
            return None
        return ConsistencyWarning(
            kind=WarningKind.PRICE_MISMATCH,
            symbol=symbol,
            message=(
                f"Price mismatch for {symbol}: snapshot={price}, history={latest_close}, "
                f"diff={difference * 100:.2f}%"
            ),
        )

    def _on_snapshot_change(
        self, store_name: str, key: Hashable, state: CacheEntryState | None
    ) -> None:
        """After each successful snapshot refresh, log disagreement with history."""
        if state is None or state.is_fetching or state.last_error is not None:
            return
        if state.value is None:
            return
        latest_close = self.history_store.latest_close(str(key))
        if latest_close is None:
            return
        mismatch = self._price_mismatch(str(key), state.value.price, latest_close)
        if mismatch is not None:
            self._logger.warning("price_mismatch", symbol=str(key), message=mismatch.message)
