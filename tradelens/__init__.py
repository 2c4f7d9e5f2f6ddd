"""TradeLens data stores: per-entity market-data caches with coalesced refresh."""

__version__ = "0.1.0"
