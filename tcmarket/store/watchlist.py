"""
TCMarket - Wishlist & price alert queries

Toggles return True when the card was added and False when it was removed.
"""

from __future__ import annotations

from decimal import Decimal

import structlog
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from tcmarket.models.watchlist import PriceAlert, Wishlist

logger = structlog.get_logger(__name__)


async def toggle_wishlist(user_id: str, card_id: str, session: AsyncSession) -> bool:
    """Add the card to the wishlist, or remove it if already there."""
    existing = await session.execute(
        select(Wishlist.id).where(Wishlist.user_id == user_id, Wishlist.card_id == card_id)
    )
    if existing.first() is not None:
        await session.execute(
            delete(Wishlist).where(Wishlist.user_id == user_id, Wishlist.card_id == card_id)
        )
        added = False
    else:
        session.add(Wishlist(user_id=user_id, card_id=card_id))
        added = True
    await session.commit()

    logger.info("wishlist_toggled", user_id=user_id, card_id=card_id, added=added)
    return added


async def toggle_price_alert(
    user_id: str,
    card_id: str,
    session: AsyncSession,
    condition: str | None = None,
    target_price: Decimal = Decimal("0"),
) -> bool:
    """Create an active price alert, or delete the existing ones for this card."""
    existing = await session.execute(
        select(PriceAlert.id).where(PriceAlert.user_id == user_id, PriceAlert.card_id == card_id)
    )
    if existing.first() is not None:
        await session.execute(
            delete(PriceAlert).where(PriceAlert.user_id == user_id, PriceAlert.card_id == card_id)
        )
        added = False
    else:
        session.add(
            PriceAlert(
                user_id=user_id,
                card_id=card_id,
                condition=condition,
                target_price=target_price,
                is_active=True,
            )
        )
        added = True
    await session.commit()

    logger.info("price_alert_toggled", user_id=user_id, card_id=card_id, added=added)
    return added


async def fetch_watched_card_ids(user_id: str, session: AsyncSession) -> set[str]:
    """Union of wishlist and price-alert card ids."""
    wished = await session.execute(select(Wishlist.card_id).where(Wishlist.user_id == user_id))
    alerted = await session.execute(select(PriceAlert.card_id).where(PriceAlert.user_id == user_id))
    return set(wished.scalars().all()) | set(alerted.scalars().all())
