"""Concrete provider implementations for the TradeLens interfaces."""
