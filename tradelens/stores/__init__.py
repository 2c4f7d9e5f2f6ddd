"""Entity stores: one keyed cache per kind of market data."""

from tradelens.stores.ai_response_store import AIResponseStore
from tradelens.stores.base import EntityStore, SymbolKeyedStore
from tradelens.stores.history_store import HistoryStore
from tradelens.stores.news_store import NewsStore
from tradelens.stores.outlook_store import OutlookStore
from tradelens.stores.snapshot_store import SnapshotStore

__all__ = [
    "AIResponseStore",
    "EntityStore",
    "HistoryStore",
    "NewsStore",
    "OutlookStore",
    "SnapshotStore",
    "SymbolKeyedStore",
]
