"""TCMarket - Shared helpers."""
