"""Generic caching core shared by every entity store."""

from tradelens.cache.entry import CacheEntry, CacheEntryState, RefreshResult
from tradelens.cache.keyed_cache import KeyedCache
from tradelens.cache.notifier import StoreNotifier

__all__ = [
    "CacheEntry",
    "CacheEntryState",
    "KeyedCache",
    "RefreshResult",
    "StoreNotifier",
]
