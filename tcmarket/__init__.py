"""TCMarket - Pokemon TCG collection valuation and market engine."""

__version__ = "0.1.0"
