from tcmarket.services.collection import CollectionCounts, CollectionService
from tcmarket.services.market import MarketService

__all__ = ["CollectionCounts", "CollectionService", "MarketService"]
