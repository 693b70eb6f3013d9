"""Market analysis reports built on the indicator library."""

from .market import MarketAnalysis, MarketOutlook, analyze_market

__all__ = ["MarketAnalysis", "MarketOutlook", "analyze_market"]
