from tradelens.providers.market_data.http_provider import HTTPMarketDataProvider

__all__ = ["HTTPMarketDataProvider"]
