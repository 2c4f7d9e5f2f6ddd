"""Shared pytest fixtures for the TradeLens test suite."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest

from tradelens.interfaces.market_data_provider import IMarketDataProvider
from tradelens.models.market import AIResponse, Outlook, PricePoint, TickerSnapshot

T0 = datetime(2024, 3, 15, 15, 4, tzinfo=timezone.utc)  # noqa: UP017


class FakeClock:
    """Controllable clock; call it to read, ``advance`` to move forward."""

    def __init__(self, start: datetime = T0) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


def make_snapshot(symbol: str = "AAPL", price: float = 189.12) -> TickerSnapshot:
    return TickerSnapshot(
        symbol=symbol,
        name=f"{symbol} Inc.",
        price=price,
        change_percent=0.85,
        high_52w=199.62,
        low_52w=164.08,
        currency="USD",
    )


def make_points(*closes: float, start: datetime = T0) -> list[PricePoint]:
    return [
        PricePoint(date=start - timedelta(days=len(closes) - i), close=close)
        for i, close in enumerate(closes)
    ]


def make_outlook(symbol: str = "AAPL", summary: str = "Constructive") -> Outlook:
    return Outlook(
        symbol=symbol,
        timeframe_days=30,
        sentiment_summary=summary,
        historical_hit_rate=0.62,
        typical_range_percent=4.5,
        volatility_label="Moderate",
        key_drivers=["Earnings", "Rates"],
    )


def make_ai_response(recap: str = "Steady week") -> AIResponse:
    return AIResponse(
        whats_happening_now="Shares are drifting higher.",
        key_drivers=["Services growth"],
        risk_vs_opportunity="Balanced",
        historical_behavior="Usually calm after earnings",
        simple_recap=recap,
    )


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def mock_market_data_provider() -> IMarketDataProvider:
    """Mock IMarketDataProvider returning sample data for every endpoint.

    Override per test with e.g.
    ``mock_market_data_provider.fetch_history.side_effect = [...]``.
    """
    mock = MagicMock(spec=IMarketDataProvider)
    mock.get_provider_name.return_value = "mock-market-data"
    mock.fetch_snapshot = AsyncMock(return_value=make_snapshot())
    mock.fetch_history = AsyncMock(return_value=make_points(187.0, 188.5, 189.12))
    mock.request_outlook = AsyncMock(return_value=make_outlook())
    mock.ask_ai = AsyncMock(return_value=make_ai_response())
    return mock
