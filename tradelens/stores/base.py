"""Shared plumbing for the entity stores.

An entity store binds one :class:`KeyedCache` to one key-normalization rule,
one default :class:`FreshnessPolicy` and one remote fetch.  Subclasses expose
the entity-specific public API (``read``, ``force_refresh`` ...) in terms of
natural keys and delegate to the key-based helpers here.

``read`` is deliberately not pure: when the cache window has elapsed it
schedules a background refresh and returns whatever is cached right now.
The refresh task is held by the store until it finishes, so it runs to
completion even if the caller goes away; the result is visible to the next
reader and to registered listeners.  ``peek`` is the side-effect-free read.
"""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from collections.abc import Callable, Hashable
from datetime import datetime
from typing import ClassVar, Generic, TypeVar

import structlog

from tradelens.cache.entry import CacheEntryState
from tradelens.cache.keyed_cache import FetchFn, KeyedCache
from tradelens.models.cache import FreshnessPolicy
from tradelens.utils.clock import Clock, utc_now
from tradelens.utils.errors import ErrorKind
from tradelens.utils.logging import get_logger
from tradelens.utils.normalization import normalize_symbol

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


class EntityStore(ABC, Generic[K, V]):
    """Base class for a single-entity cache in front of a remote fetch.

    Parameters
    ----------
    policy:
        Freshness policy; the subclass's ``DEFAULT_POLICY`` when omitted.
    clock:
        Time source shared with the underlying cache.
    """

    name: ClassVar[str]
    DEFAULT_POLICY: ClassVar[FreshnessPolicy]

    def __init__(self, policy: FreshnessPolicy | None = None, clock: Clock = utc_now) -> None:
        self._clock = clock
        self._cache: KeyedCache[K, V] = KeyedCache(
            self.name, policy or self.DEFAULT_POLICY, clock=clock
        )
        self._background: set[asyncio.Task] = set()
        self._logger: structlog.BoundLogger = get_logger(__name__, store=self.name)

    @abstractmethod
    async def _fetch(self, key: K) -> V:
        """Fetch the value for an already-normalized *key*."""

    # ------------------------------------------------------------------
    # Store-wide API
    # ------------------------------------------------------------------

    @property
    def policy(self) -> FreshnessPolicy:
        return self._cache.policy

    @property
    def pending_refreshes(self) -> int:
        return len(self._background)

    def register_listener(self, callback: Callable) -> None:
        """Subscribe to entry changes: ``callback(store_name, key, state)``."""
        self._cache.notifier.register_listener(callback)

    def unregister_listener(self, callback: Callable) -> None:
        self._cache.notifier.unregister_listener(callback)

    async def clear_all(self) -> None:
        await self._cache.clear()

    async def wait_idle(self) -> None:
        """Wait until every background refresh scheduled so far has finished."""
        while self._background:
            await asyncio.gather(*list(self._background), return_exceptions=True)

    # ------------------------------------------------------------------
    # Key-based helpers for subclasses
    # ------------------------------------------------------------------

    def _read(self, key: K, fetch_fn: FetchFn | None = None) -> V | None:
        if self._cache.should_refresh(key):
            self._schedule_refresh(key, fetch_fn or self._fetch)
        return self._cache.get(key)

    async def _force_refresh(self, key: K, fetch_fn: FetchFn | None = None) -> V:
        result = await self._cache.refresh(key, fetch_fn or self._fetch)
        return result.unwrap()

    def _schedule_refresh(self, key: K, fetch_fn: FetchFn) -> None:
        if self._cache.is_fetching(key):
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self._logger.warning(
                "background_refresh_skipped", key=str(key), reason="no running event loop"
            )
            return
        task = loop.create_task(self._cache.refresh(key, fetch_fn))
        self._background.add(task)
        task.add_done_callback(self._background.discard)
        self._logger.debug("background_refresh_scheduled", key=str(key))

    def _state(self, key: K) -> CacheEntryState[V] | None:
        return self._cache.state(key)


class SymbolKeyedStore(EntityStore[str, V]):
    """Store keyed by nothing but the normalized ticker symbol."""

    def read(self, symbol: str) -> V | None:
        """Return the cached value, scheduling a refresh when it is due."""
        return self._read(normalize_symbol(symbol))

    def peek(self, symbol: str) -> V | None:
        return self._cache.get(normalize_symbol(symbol))

    async def force_refresh(self, symbol: str) -> V:
        """Fetch now, coalescing with any fetch already running for *symbol*.

        Returns the fresh value, or the previous value if the fetch failed.

        Raises:
            TradeLensError: The fetch failed and nothing was cached before.
        """
        return await self._force_refresh(normalize_symbol(symbol))

    def last_update_time(self, symbol: str) -> datetime | None:
        return self._cache.last_success_at(normalize_symbol(symbol))

    def is_stale(self, symbol: str) -> bool:
        return self._cache.is_stale(normalize_symbol(symbol))

    def last_error(self, symbol: str) -> ErrorKind | None:
        return self._cache.last_error(normalize_symbol(symbol))

    def error_message(self, symbol: str) -> str | None:
        return self._cache.error_message(normalize_symbol(symbol))

    def is_loading(self, symbol: str) -> bool:
        return self._cache.is_fetching(normalize_symbol(symbol))

    def state(self, symbol: str) -> CacheEntryState[V] | None:
        return self._state(normalize_symbol(symbol))
