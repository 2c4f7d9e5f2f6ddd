"""Unit tests for the composition root in tradelens.main."""

from __future__ import annotations

from datetime import timedelta
from unittest.mock import MagicMock

import httpx
import pytest

from tests.conftest import FakeClock
from tradelens.config.settings import Settings
from tradelens.coordinator import StoreCoordinator
from tradelens.interfaces.news_provider import INewsProvider
from tradelens.main import build_data_stores, build_http_client, setup
from tradelens.providers.market_data.http_provider import HTTPMarketDataProvider
from tradelens.providers.news.placeholder_provider import PlaceholderNewsProvider


class TestBuildDataStores:
    def test_wires_every_store(self, mock_market_data_provider) -> None:
        coordinator = build_data_stores(
            app_settings=Settings(),
            config={},
            market_data_provider=mock_market_data_provider,
        )

        assert isinstance(coordinator, StoreCoordinator)
        assert coordinator.snapshot_store._provider is mock_market_data_provider
        assert coordinator.history_store._provider is mock_market_data_provider
        assert coordinator.ai_response_store._provider is mock_market_data_provider
        assert coordinator.outlook_store._provider is mock_market_data_provider
        assert isinstance(coordinator.news_store._provider, PlaceholderNewsProvider)

    def test_policies_come_from_config(self, mock_market_data_provider) -> None:
        coordinator = build_data_stores(
            app_settings=Settings(),
            config={"freshness": {"history": {"cache_window": 120}}},
            market_data_provider=mock_market_data_provider,
        )

        assert coordinator.history_store.policy.cache_window == timedelta(seconds=120)
        assert coordinator.snapshot_store.policy.cache_window == timedelta(seconds=60)

    def test_http_provider_built_from_config(self) -> None:
        client = MagicMock(spec=httpx.AsyncClient)
        coordinator = build_data_stores(
            app_settings=Settings(),
            http_client=client,
            config={"backend": {"base_url": "http://backend.test"}},
        )

        provider = coordinator.snapshot_store._provider
        assert isinstance(provider, HTTPMarketDataProvider)
        assert provider._base_url == "http://backend.test"
        assert provider._http is client

    def test_requires_client_or_provider(self) -> None:
        with pytest.raises(ValueError):
            build_data_stores(app_settings=Settings(), config={})

    def test_custom_news_provider_and_shared_clock(self, mock_market_data_provider) -> None:
        news_provider = MagicMock(spec=INewsProvider)
        news_provider.get_provider_name.return_value = "mock-news"
        clock = FakeClock()

        coordinator = build_data_stores(
            app_settings=Settings(),
            config={},
            market_data_provider=mock_market_data_provider,
            news_provider=news_provider,
            clock=clock,
        )

        assert coordinator.news_store._provider is news_provider
        assert coordinator.snapshot_store._clock is clock
        assert coordinator._clock is clock


class TestBuildHttpClient:
    @pytest.mark.asyncio
    async def test_timeout_from_settings(self) -> None:
        client = build_http_client(Settings(backend_timeout_seconds=3.5))
        try:
            assert client.timeout.read == 3.5
        finally:
            await client.aclose()


class TestSetup:
    def test_returns_settings(self) -> None:
        settings = Settings(log_level="WARNING")
        assert setup(settings) is settings
