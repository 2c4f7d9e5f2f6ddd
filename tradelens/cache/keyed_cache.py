"""Generic per-key TTL cache with coalesced refresh and stale-on-error fallback.

One ``KeyedCache`` backs each entity store.  It owns a single dict of
:class:`CacheEntry` records and enforces, per key:

- at most one outstanding fetch (callers arriving while a fetch is in
  flight join it instead of starting another);
- a failed fetch never destroys a previously cached value;
- every failure is classified into an ``ErrorKind`` before it is stored.

All mutations happen synchronously between awaits on the event loop that
owns the cache, so no lock is needed.  The fetch itself runs as a separate
task that clears its own in-flight marker when it finishes; callers await it
through ``asyncio.shield`` so a cancelled caller never cancels the fetch.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Hashable
from datetime import datetime
from typing import Generic, TypeVar

import structlog

from tradelens.cache.entry import CacheEntry, CacheEntryState, RefreshResult
from tradelens.cache.notifier import StoreNotifier
from tradelens.models.cache import FreshnessPolicy
from tradelens.utils.clock import Clock, utc_now
from tradelens.utils.errors import ErrorKind, classify_error
from tradelens.utils.logging import get_logger

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")

FetchFn = Callable[[K], Awaitable[V]]


class KeyedCache(Generic[K, V]):
    """In-memory cache of ``K -> V`` governed by one :class:`FreshnessPolicy`.

    Parameters
    ----------
    name:
        Store name used in logs and change notifications.
    policy:
        Cache window and stale-warning threshold for every key.
    clock:
        Source of "now" for freshness checks and success timestamps.
    notifier:
        Receives a notification whenever an entry starts fetching, finishes,
        or is cleared.  A private notifier is created when omitted.
    """

    def __init__(
        self,
        name: str,
        policy: FreshnessPolicy,
        clock: Clock = utc_now,
        notifier: StoreNotifier | None = None,
    ) -> None:
        self._name = name
        self._policy = policy
        self._clock = clock
        self._notifier = notifier or StoreNotifier(name)
        self._entries: dict[K, CacheEntry[V]] = {}
        self._logger: structlog.BoundLogger = get_logger(__name__, store=name)

    # ------------------------------------------------------------------
    # Read-only accessors
    # ------------------------------------------------------------------

    @property
    def name(self) -> str:
        return self._name

    @property
    def policy(self) -> FreshnessPolicy:
        return self._policy

    @property
    def notifier(self) -> StoreNotifier:
        return self._notifier

    def get(self, key: K) -> V | None:
        """Return the cached value for *key* regardless of freshness."""
        entry = self._entries.get(key)
        return entry.value if entry else None

    def state(self, key: K) -> CacheEntryState[V] | None:
        entry = self._entries.get(key)
        return entry.snapshot() if entry else None

    def keys(self) -> list[K]:
        return list(self._entries)

    def last_success_at(self, key: K) -> datetime | None:
        entry = self._entries.get(key)
        return entry.last_success_at if entry else None

    def last_error(self, key: K) -> ErrorKind | None:
        entry = self._entries.get(key)
        return entry.last_error if entry else None

    def error_message(self, key: K) -> str | None:
        entry = self._entries.get(key)
        return entry.error_message if entry else None

    def is_fetching(self, key: K) -> bool:
        entry = self._entries.get(key)
        return entry is not None and entry.is_fetching

    def is_using_fallback(self, key: K) -> bool:
        entry = self._entries.get(key)
        return entry is not None and entry.is_fallback

    def is_stale(self, key: K, now: datetime | None = None) -> bool:
        """True if *key* never succeeded or is older than the stale threshold."""
        updated = self.last_success_at(key)
        if updated is None:
            return True
        threshold = self._policy.stale_warning_threshold
        if threshold is None:
            return False
        return (now or self._clock()) - updated > threshold

    def should_refresh(self, key: K, now: datetime | None = None) -> bool:
        """True if *key* never succeeded or is older than the cache window."""
        updated = self.last_success_at(key)
        if updated is None:
            return True
        return (now or self._clock()) - updated > self._policy.cache_window

    # ------------------------------------------------------------------
    # Coordinated fetch
    # ------------------------------------------------------------------

    async def refresh(
        self,
        key: K,
        fetch_fn: FetchFn,
        now: datetime | None = None,
        join: bool = True,
    ) -> RefreshResult[V]:
        """Fetch *key* through *fetch_fn*, coalescing with any in-flight fetch.

        Never raises a fetch error: failures come back classified inside the
        :class:`RefreshResult`.

        Parameters
        ----------
        key:
            Normalized cache key; passed unchanged to *fetch_fn*.
        fetch_fn:
            Async callable performing the remote fetch for *key*.
        now:
            Timestamp recorded as the success time.  Defaults to the clock
            reading when the fetch completes.
        join:
            When a fetch for *key* is already running, ``True`` waits for its
            outcome; ``False`` returns the cached value immediately with
            ``in_progress`` set.
        """
        entry = self._entries.get(key)
        if entry is None:
            entry = CacheEntry()
            self._entries[key] = entry

        if entry.in_flight is not None:
            if not join:
                self._logger.debug("refresh_in_progress", key=str(key))
                return RefreshResult(value=entry.value, in_progress=True)
            self._logger.debug("refresh_coalesced", key=str(key))
            return await asyncio.shield(entry.in_flight)

        entry.last_error = None
        entry.error_message = None
        task = asyncio.create_task(self._run_fetch(key, entry, fetch_fn, now))
        entry.in_flight = task
        self._logger.debug("refresh_started", key=str(key))
        await self._notifier.notify(key, entry.snapshot())
        return await asyncio.shield(task)

    async def _run_fetch(
        self,
        key: K,
        entry: CacheEntry[V],
        fetch_fn: FetchFn,
        now: datetime | None,
    ) -> RefreshResult[V]:
        try:
            try:
                value = await fetch_fn(key)
            except Exception as exc:
                error = classify_error(exc, provider_name=self._name)
                if entry.discard_result:
                    self._logger.info(
                        "refresh_result_discarded", key=str(key), error_kind=error.kind.value
                    )
                    return RefreshResult(error=error)
                entry.record_failure(error)
                if entry.is_fallback:
                    self._logger.warning(
                        "refresh_failed_using_fallback",
                        key=str(key),
                        error_kind=error.kind.value,
                        error=error.user_message,
                    )
                    result = RefreshResult(value=entry.value, error=error, is_fallback=True)
                else:
                    self._logger.error(
                        "refresh_failed",
                        key=str(key),
                        error_kind=error.kind.value,
                        error=error.user_message,
                    )
                    result = RefreshResult(error=error)
            else:
                if entry.discard_result:
                    self._logger.info("refresh_result_discarded", key=str(key))
                    return RefreshResult(value=value)
                entry.record_success(value, now or self._clock())
                self._logger.info("refresh_succeeded", key=str(key))
                result = RefreshResult(value=value)
        finally:
            entry.in_flight = None
            if entry.discard_result:
                self._drop_cleared(key, entry)

        await self._notifier.notify(key, entry.snapshot())
        return result

    def _drop_cleared(self, key: K, entry: CacheEntry[V]) -> None:
        # Listeners already saw the removal when clear() ran.
        entry.discard_result = False
        if self._entries.get(key) is entry:
            del self._entries[key]

    # ------------------------------------------------------------------
    # Clearing
    # ------------------------------------------------------------------

    async def clear(self) -> None:
        """Remove every entry.

        A key whose fetch is still running keeps only that fetch: callers
        arriving before it ends join it rather than starting another, and its
        result reaches them without being cached.
        """
        keys = list(self._entries)
        for key in keys:
            self._forget(key)
        self._logger.info("cache_cleared", entries=len(keys))
        for key in keys:
            await self._notifier.notify(key, None)

    async def clear_key(self, key: K) -> None:
        if key in self._entries:
            self._forget(key)
            self._logger.debug("cache_key_cleared", key=str(key))
            await self._notifier.notify(key, None)

    def _forget(self, key: K) -> None:
        entry = self._entries[key]
        if entry.in_flight is None:
            del self._entries[key]
        else:
            entry.reset_pending()
