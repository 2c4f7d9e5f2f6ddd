"""Market-data domain models returned by the data service.

Pydantic v2 models with frozen config: a cached value can be handed to any
number of readers without one of them mutating what the others see.  Field
names are snake_case in Python; the camelCase names used on the wire are
declared as aliases, and ``populate_by_name`` allows building instances
with either spelling.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class TickerSnapshot(BaseModel):
    """Latest quote for one symbol."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    symbol: str
    name: str
    price: float
    change_percent: float = Field(alias="changePercent")
    high_52w: float = Field(alias="high52w")
    low_52w: float = Field(alias="low52w")
    currency: str


class PricePoint(BaseModel):
    """One close in a price-history series."""

    model_config = ConfigDict(frozen=True)

    date: datetime
    close: float


class Outlook(BaseModel):
    """Forward-looking summary for a symbol over an optional timeframe."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    symbol: str
    timeframe_days: int = Field(alias="timeframeDays")
    sentiment_summary: str = Field(alias="sentimentSummary")
    historical_hit_rate: float = Field(alias="historicalHitRate")
    typical_range_percent: float = Field(alias="typicalRangePercent")
    volatility_label: str = Field(alias="volatilityLabel")
    key_drivers: list[str] = Field(default_factory=list, alias="keyDrivers")


class AIResponse(BaseModel):
    """Structured answer to a free-form market question."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    whats_happening_now: str = Field(alias="whatsHappeningNow")
    key_drivers: list[str] = Field(default_factory=list, alias="keyDrivers")
    risk_vs_opportunity: str = Field(alias="riskVsOpportunity")
    historical_behavior: str = Field(alias="historicalBehavior")
    simple_recap: str = Field(alias="simpleRecap")


class NewsItem(BaseModel):
    """A headline related to one or more tickers."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    title: str
    summary: str
    source: str
    published_at: datetime = Field(alias="publishedAt")
    url: str | None = None
    related_tickers: list[str] = Field(default_factory=list, alias="relatedTickers")


class APIErrorResponse(BaseModel):
    """Error envelope the data service returns on non-2xx responses."""

    message: str
