"""Change notification for store state with callback-based listeners.

Implements the Observer pattern so a UI layer can react to refreshes
without polling:

    KeyedCache ──notify()──→ StoreNotifier ──callback()──→ view model
                                            ──→ coordinator consistency check

Listeners receive ``(store_name, key, state)`` where ``state`` is the
entry's :class:`~tradelens.cache.entry.CacheEntryState` after the change, or
``None`` when the entry was removed by a clear.  Both sync and async
callbacks are supported.  A listener that raises is logged and skipped so
it cannot break the refresh that triggered it or starve other listeners.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Hashable

import structlog

from tradelens.cache.entry import CacheEntryState
from tradelens.utils.logging import get_logger


class StoreNotifier:
    """Broadcasts entry changes for one store to registered listeners."""

    def __init__(self, store_name: str) -> None:
        self._store_name = store_name
        self._listeners: list[Callable] = []
        self._logger: structlog.BoundLogger = get_logger(__name__, store=store_name)

    @property
    def store_name(self) -> str:
        return self._store_name

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def register_listener(self, callback: Callable) -> None:
        """Register a sync or async callable taking ``(store_name, key, state)``.

        Registering the same callback twice is a no-op.
        """
        if callback not in self._listeners:
            self._listeners.append(callback)
            self._logger.debug("listener_registered", total_listeners=len(self._listeners))

    def unregister_listener(self, callback: Callable) -> None:
        if callback in self._listeners:
            self._listeners.remove(callback)
            self._logger.debug("listener_unregistered", remaining_listeners=len(self._listeners))

    async def notify(self, key: Hashable, state: CacheEntryState | None) -> None:
        """Invoke every listener with the new state of *key*."""
        # Iterate over a copy: a listener may unregister itself.
        for callback in list(self._listeners):
            try:
                result = callback(self._store_name, key, state)
                if asyncio.iscoroutine(result):
                    await result
            except Exception as exc:
                self._logger.warning(
                    "listener_callback_error",
                    key=str(key),
                    error=str(exc),
                    callback=getattr(callback, "__name__", repr(callback)),
                )
