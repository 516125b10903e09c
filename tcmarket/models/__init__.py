"""
Models package - export all SQLAlchemy models.
"""

from tcmarket.models.base import Base
from tcmarket.models.edition import Edition
from tcmarket.models.market_price import MarketPrice
from tcmarket.models.official_card import OfficialCard
from tcmarket.models.user_card import UserCard
from tcmarket.models.watchlist import PriceAlert, Wishlist

__all__ = ["Base", "Edition", "MarketPrice", "OfficialCard", "PriceAlert", "UserCard", "Wishlist"]
