from tradelens.providers.news.placeholder_provider import PlaceholderNewsProvider

__all__ = ["PlaceholderNewsProvider"]
