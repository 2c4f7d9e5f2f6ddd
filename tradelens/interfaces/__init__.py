"""Public interface definitions for the external data sources.

Stores never talk to the network directly; they call an object implementing
one of these ABCs, injected by the composition root (``tradelens/main.py``).
Tests inject fakes the same way.

CONCRETE PROVIDER MAP:
    Interface              →  Concrete implementations (in tradelens/providers/)
    ─────────────────────────────────────────────────────────────────────
    IMarketDataProvider    →  HTTPMarketDataProvider
    INewsProvider          →  PlaceholderNewsProvider
"""

from tradelens.interfaces.market_data_provider import IMarketDataProvider
from tradelens.interfaces.news_provider import INewsProvider

__all__ = ["IMarketDataProvider", "INewsProvider"]
