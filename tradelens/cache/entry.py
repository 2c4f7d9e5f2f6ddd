"""Per-key cache state and the immutable views handed out to callers.

``CacheEntry`` is mutable and owned by exactly one :class:`KeyedCache`; it
never leaves the cache.  Readers get a :class:`CacheEntryState` snapshot or a
:class:`RefreshResult`, both frozen.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import datetime
from typing import Generic, TypeVar

from tradelens.utils.errors import ErrorKind, TradeLensError

V = TypeVar("V")


@dataclass(frozen=True)
class CacheEntryState(Generic[V]):
    """Point-in-time view of one cache entry."""

    value: V | None
    last_success_at: datetime | None
    is_fetching: bool
    last_error: ErrorKind | None
    error_message: str | None
    is_fallback: bool


@dataclass
class CacheEntry(Generic[V]):
    """Mutable state for one key.

    ``in_flight`` holds the single outstanding fetch task; ``is_fetching`` is
    derived from it so the flag and the task can never disagree.
    ``discard_result`` is set when the entry was cleared while fetching: the
    running fetch still answers its callers but its outcome is not recorded.
    """

    value: V | None = None
    last_success_at: datetime | None = None
    last_error: ErrorKind | None = None
    error_message: str | None = None
    is_fallback: bool = False
    in_flight: asyncio.Task | None = field(default=None, repr=False)
    discard_result: bool = False

    @property
    def is_fetching(self) -> bool:
        return self.in_flight is not None

    def record_success(self, value: V, at: datetime) -> None:
        self.value = value
        self.last_success_at = at
        self.last_error = None
        self.error_message = None
        self.is_fallback = False

    def record_failure(self, error: TradeLensError) -> None:
        self.last_error = error.kind
        self.error_message = error.user_message
        self.is_fallback = self.value is not None

    def reset_pending(self) -> None:
        """Forget everything but the running fetch, whose outcome is dropped."""
        self.value = None
        self.last_success_at = None
        self.last_error = None
        self.error_message = None
        self.is_fallback = False
        self.discard_result = True

    def snapshot(self) -> CacheEntryState[V]:
        return CacheEntryState(
            value=self.value,
            last_success_at=self.last_success_at,
            is_fetching=self.is_fetching,
            last_error=self.last_error,
            error_message=self.error_message,
            is_fallback=self.is_fallback,
        )


@dataclass(frozen=True)
class RefreshResult(Generic[V]):
    """Outcome of one coordinated refresh.

    Exactly one of these shapes:
        fresh       -- ``value`` set, no error
        fallback    -- ``value`` is the previous value, ``error`` set,
                       ``is_fallback`` true
        failed      -- no value, ``error`` set
        in progress -- another fetch owns the key; ``value`` is whatever was
                       cached (possibly ``None``)
    """

    value: V | None = None
    error: TradeLensError | None = None
    is_fallback: bool = False
    in_progress: bool = False

    @property
    def ok(self) -> bool:
        """True for a fresh value from a completed fetch."""
        return self.error is None and not self.in_progress and self.value is not None

    def unwrap(self) -> V:
        """Return the value (fresh or fallback) or raise the classified error."""
        if self.value is not None:
            return self.value
        if self.error is not None:
            raise self.error
        raise RuntimeError("refresh still in progress and nothing is cached yet")
