"""
TCMarket - Market Service

Market-wide listings (most valuable cards, gainers, losers), the
marketplace for one card, and the user's watched cards.

Same failure policy as CollectionService: log and return an empty result.
"""

from __future__ import annotations

from typing import Sequence

import structlog
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from tcmarket.engine.movers import (
    CardPrice,
    PriceMove,
    WatchedCard,
    build_watched_cards,
    compute_price_moves,
    rank_gainers,
    rank_losers,
    rank_top_cards,
)
from tcmarket.engine.types import CatalogCard, Holding, PriceSnapshot
from tcmarket.store import catalog, holdings, prices, watchlist

logger = structlog.get_logger(__name__)


async def _edition_names(cards: Sequence[CatalogCard], session: AsyncSession) -> dict[str, str]:
    editions = await catalog.fetch_editions(
        [c.edition_id for c in cards if c.edition_id], session
    )
    return {e.id: e.name for e in editions}


class MarketService:
    """Read-mostly market views plus wishlist / alert toggles."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def _recent_market(
        self, dates_per_card: int
    ) -> tuple[list[PriceSnapshot], list[CatalogCard], dict[str, str]]:
        async with self.session_factory() as session:
            snapshots = await prices.fetch_recent_snapshots(session, dates_per_card=dates_per_card)
            cards = await catalog.fetch_cards([s.card_id for s in snapshots], session)
            names = await _edition_names(cards, session)
        return snapshots, cards, names

    async def get_top_cards(self, limit: int | None = None) -> list[CardPrice]:
        try:
            snapshots, cards, names = await self._recent_market(dates_per_card=1)
        except Exception as e:
            logger.error("top_cards_fetch_failed", error=str(e), error_type=type(e).__name__)
            return []
        return rank_top_cards(snapshots, cards, names, limit=limit)

    async def get_top_gainers(self, limit: int | None = None) -> list[PriceMove]:
        try:
            snapshots, cards, names = await self._recent_market(dates_per_card=2)
        except Exception as e:
            logger.error("top_gainers_fetch_failed", error=str(e), error_type=type(e).__name__)
            return []
        return rank_gainers(compute_price_moves(snapshots, cards, names), limit=limit)

    async def get_top_losers(self, limit: int | None = None) -> list[PriceMove]:
        try:
            snapshots, cards, names = await self._recent_market(dates_per_card=2)
        except Exception as e:
            logger.error("top_losers_fetch_failed", error=str(e), error_type=type(e).__name__)
            return []
        return rank_losers(compute_price_moves(snapshots, cards, names), limit=limit)

    async def get_cards_for_sale(self, card_id: str, condition: str | None = None) -> list[Holding]:
        """Copies listed for sale, cheapest first, optionally one condition only."""
        try:
            async with self.session_factory() as session:
                return await holdings.fetch_cards_for_sale(card_id, session, condition=condition)
        except Exception as e:
            logger.error(
                "cards_for_sale_fetch_failed",
                card_id=card_id,
                error=str(e),
                error_type=type(e).__name__,
            )
            return []

    async def get_card_price_history(self, card_id: str) -> list[PriceSnapshot]:
        try:
            async with self.session_factory() as session:
                return await prices.fetch_card_price_history(card_id, session)
        except Exception as e:
            logger.error(
                "card_price_history_fetch_failed",
                card_id=card_id,
                error=str(e),
                error_type=type(e).__name__,
            )
            return []

    async def get_watched_cards(self, user_id: str) -> list[WatchedCard]:
        """Wishlist and price-alert cards with their latest prices."""
        try:
            async with self.session_factory() as session:
                card_ids = await watchlist.fetch_watched_card_ids(user_id, session)
                if not card_ids:
                    return []
                cards = await catalog.fetch_cards(card_ids, session)
                names = await _edition_names(cards, session)
                history = await prices.fetch_price_history(card_ids, session)
        except Exception as e:
            logger.error(
                "watched_cards_fetch_failed",
                user_id=user_id,
                error=str(e),
                error_type=type(e).__name__,
            )
            return []
        return build_watched_cards(cards, history, names)

    async def toggle_wishlist(self, user_id: str, card_id: str) -> bool | None:
        """
        Returns:
            True if added, False if removed, None if the write failed.
        """
        try:
            async with self.session_factory() as session:
                return await watchlist.toggle_wishlist(user_id, card_id, session)
        except Exception as e:
            logger.error(
                "wishlist_toggle_failed",
                user_id=user_id,
                card_id=card_id,
                error=str(e),
                error_type=type(e).__name__,
            )
            return None

    async def toggle_price_alert(
        self, user_id: str, card_id: str, condition: str | None = None
    ) -> bool | None:
        """
        Returns:
            True if added, False if removed, None if the write failed.
        """
        try:
            async with self.session_factory() as session:
                return await watchlist.toggle_price_alert(user_id, card_id, session, condition=condition)
        except Exception as e:
            logger.error(
                "price_alert_toggle_failed",
                user_id=user_id,
                card_id=card_id,
                error=str(e),
                error_type=type(e).__name__,
            )
            return None
