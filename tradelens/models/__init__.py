"""TradeLens domain models — re-exports all public model classes.

    - market.py — entities returned by the data service
    - cache.py  — freshness policies and consistency warnings
"""

from __future__ import annotations

from tradelens.models.cache import ConsistencyWarning, FreshnessPolicy, WarningKind
from tradelens.models.market import (
    AIResponse,
    APIErrorResponse,
    NewsItem,
    Outlook,
    PricePoint,
    TickerSnapshot,
)

__all__ = [
    "AIResponse",
    "APIErrorResponse",
    "ConsistencyWarning",
    "FreshnessPolicy",
    "NewsItem",
    "Outlook",
    "PricePoint",
    "TickerSnapshot",
    "WarningKind",
]
