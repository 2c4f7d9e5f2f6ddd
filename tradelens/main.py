"""TradeLens data-layer composition root.

Builds every provider and store exactly once and hands back a
:class:`StoreCoordinator` that owns them.  Nothing in the package reaches for
module-level store instances; consumers receive the coordinator (or a store
from it) and tests construct stores directly with fake providers.

Typical usage from an async entry point::

    async with httpx.AsyncClient() as client:
        coordinator = build_data_stores(http_client=client)
        await coordinator.refresh_all("AAPL")
"""

from __future__ import annotations

from datetime import tzinfo
from typing import Any

import httpx
import structlog

from tradelens.config.loader import freshness_policies_from_config, load_config
from tradelens.config.settings import Settings
from tradelens.coordinator import StoreCoordinator
from tradelens.interfaces.market_data_provider import IMarketDataProvider
from tradelens.interfaces.news_provider import INewsProvider
from tradelens.providers.market_data.http_provider import HTTPMarketDataProvider
from tradelens.providers.news.placeholder_provider import PlaceholderNewsProvider
from tradelens.stores.ai_response_store import AIResponseStore
from tradelens.stores.history_store import HistoryStore
from tradelens.stores.news_store import NewsStore
from tradelens.stores.outlook_store import OutlookStore
from tradelens.stores.snapshot_store import SnapshotStore
from tradelens.utils.clock import Clock, utc_now
from tradelens.utils.logging import configure_logging, get_logger


def build_http_client(app_settings: Settings) -> httpx.AsyncClient:
    """Create the shared HTTP client; the caller owns and closes it."""
    return httpx.AsyncClient(timeout=app_settings.backend_timeout_seconds)


def build_data_stores(
    app_settings: Settings | None = None,
    http_client: httpx.AsyncClient | None = None,
    config: dict[str, Any] | None = None,
    market_data_provider: IMarketDataProvider | None = None,
    news_provider: INewsProvider | None = None,
    clock: Clock = utc_now,
    display_tz: tzinfo | None = None,
) -> StoreCoordinator:
    """Assemble providers, stores and the coordinator.

    Args:
        app_settings: Settings; loaded from the environment when omitted.
        http_client: Client for the HTTP provider.  Required unless a
            ``market_data_provider`` is supplied.
        config: Resolved config dict (see :func:`load_config`); loaded from
            ``config/config.yaml`` when omitted.
        market_data_provider: Overrides the HTTP provider.
        news_provider: Overrides the placeholder news provider.
        clock: Time source shared by every store and the coordinator.
        display_tz: Timezone for banner times (host local time when None).

    Returns:
        A coordinator owning all five stores.
    """
    app_settings = app_settings or Settings()
    config = config if config is not None else load_config(settings=app_settings)
    policies = freshness_policies_from_config(config)
    logger: structlog.BoundLogger = get_logger(__name__)

    if market_data_provider is None:
        if http_client is None:
            raise ValueError("http_client is required when no market_data_provider is given")
        base_url = (config.get("backend") or {}).get("base_url", app_settings.backend_base_url)
        market_data_provider = HTTPMarketDataProvider(http_client=http_client, base_url=base_url)

    news_provider = news_provider or PlaceholderNewsProvider(clock=clock)

    coordinator = StoreCoordinator(
        snapshot_store=SnapshotStore(market_data_provider, policies["snapshot"], clock),
        history_store=HistoryStore(market_data_provider, policies["history"], clock),
        ai_response_store=AIResponseStore(market_data_provider, policies["ai_response"], clock),
        outlook_store=OutlookStore(market_data_provider, policies["outlook"], clock),
        news_store=NewsStore(news_provider, policies["news"], clock),
        clock=clock,
        display_tz=display_tz,
    )
    logger.info(
        "data_stores_built",
        market_data_provider=market_data_provider.get_provider_name(),
        news_provider=news_provider.get_provider_name(),
    )
    return coordinator


def setup(app_settings: Settings | None = None) -> Settings:
    """Configure logging from settings and return them."""
    app_settings = app_settings or Settings()
    configure_logging(log_level=app_settings.log_level, json_output=app_settings.is_production)
    return app_settings
