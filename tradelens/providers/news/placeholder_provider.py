"""Placeholder news source used until the backend exposes a news endpoint.

Synthesizes two headlines per symbol.  Content depends only on the symbol
and the provider's clock, so identical calls at the same instant produce
identical items.  Swap in a real :class:`INewsProvider` in
``tradelens/main.py`` once one exists; the news store does not change.
"""

from __future__ import annotations

from datetime import timedelta

from tradelens.interfaces.news_provider import INewsProvider
from tradelens.models.market import NewsItem
from tradelens.utils.clock import Clock, utc_now


class PlaceholderNewsProvider(INewsProvider):
    """Always-succeeding generator of sample news items."""

    def __init__(self, clock: Clock = utc_now) -> None:
        self._clock = clock

    def get_provider_name(self) -> str:
        return "placeholder"

    async def fetch_news(self, symbol: str) -> list[NewsItem]:
        now = self._clock()
        return [
            NewsItem(
                id=f"{symbol}-1",
                title=f"{symbol} Shows Strong Trading Volume",
                summary=f"Trading activity has increased for {symbol} amid broader market movements.",
                source="Market Watch",
                published_at=now - timedelta(hours=1),
                related_tickers=[symbol],
            ),
            NewsItem(
                id=f"{symbol}-2",
                title=f"Analyst Updates {symbol} Outlook",
                summary=(
                    f"Several analysts have reviewed their positions on {symbol} "
                    "following recent earnings."
                ),
                source="Financial Times",
                published_at=now - timedelta(hours=2),
                related_tickers=[symbol],
            ),
        ]
