"""Unit tests for the market-data and cache models."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from tests.conftest import make_snapshot
from tradelens.models.cache import ConsistencyWarning, WarningKind
from tradelens.models.market import AIResponse, NewsItem, Outlook, TickerSnapshot


class TestTickerSnapshot:
    def test_parses_wire_names(self) -> None:
        snapshot = TickerSnapshot.model_validate(
            {
                "symbol": "AAPL",
                "name": "Apple Inc.",
                "price": 189.12,
                "changePercent": -1.2,
                "high52w": 199.62,
                "low52w": 164.08,
                "currency": "USD",
            }
        )
        assert snapshot.change_percent == -1.2
        assert snapshot.low_52w == 164.08

    def test_dumps_wire_names(self) -> None:
        dumped = make_snapshot().model_dump(by_alias=True)
        assert "changePercent" in dumped
        assert "high52w" in dumped

    def test_frozen(self) -> None:
        snapshot = make_snapshot()
        with pytest.raises(ValidationError):
            snapshot.price = 1.0

    def test_missing_field_rejected(self) -> None:
        with pytest.raises(ValidationError):
            TickerSnapshot.model_validate({"symbol": "AAPL", "price": 1.0})


class TestOtherModels:
    def test_outlook_key_drivers_default(self) -> None:
        outlook = Outlook.model_validate(
            {
                "symbol": "AAPL",
                "timeframeDays": 30,
                "sentimentSummary": "Neutral",
                "historicalHitRate": 0.5,
                "typicalRangePercent": 3.0,
                "volatilityLabel": "Low",
            }
        )
        assert outlook.key_drivers == []

    def test_ai_response_from_json(self) -> None:
        response = AIResponse.model_validate_json(
            '{"whatsHappeningNow": "Up", "keyDrivers": ["AI"], '
            '"riskVsOpportunity": "Balanced", "historicalBehavior": "Volatile", '
            '"simpleRecap": "Up on AI"}'
        )
        assert response.key_drivers == ["AI"]
        assert response.simple_recap == "Up on AI"

    def test_news_item_optional_url(self) -> None:
        item = NewsItem.model_validate(
            {
                "id": "n1",
                "title": "Headline",
                "summary": "Body",
                "source": "Wire",
                "publishedAt": "2024-03-15T14:04:00Z",
            }
        )
        assert item.url is None
        assert item.related_tickers == []

    def test_consistency_warning(self) -> None:
        warning = ConsistencyWarning(
            kind=WarningKind.SNAPSHOT_STALE, symbol="AAPL", message="stale"
        )
        assert warning.kind.value == "SNAPSHOT_STALE"
