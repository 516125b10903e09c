"""
TCMarket - Holdings queries (user_cards)

Reads feed the valuation engine; writes cover the holding lifecycle
(register, list for sale, sell). Every write returns an explicit result so
callers know whether to refetch.
"""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Sequence

import structlog
from sqlalchemy import distinct, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from tcmarket.config import settings
from tcmarket.engine.types import Holding
from tcmarket.models.official_card import OfficialCard
from tcmarket.models.user_card import UserCard
from tcmarket.utils.numbers import parse_decimal

logger = structlog.get_logger(__name__)


def _validated_price(price: Any) -> Decimal:
    value = parse_decimal(price, default=None)
    if value is None or value < settings.MIN_SALE_PRICE:
        raise ValueError(f"price must be at least {settings.MIN_SALE_PRICE}, got {price!r}")
    return value


async def fetch_holdings(
    user_id: str,
    session: AsyncSession,
    include_sold: bool = False,
) -> list[Holding]:
    """
    All holdings of a user, one per physical copy.

    Sold copies are excluded unless ``include_sold`` is set.
    """
    stmt = select(UserCard).where(UserCard.user_id == user_id)
    if not include_sold:
        stmt = stmt.where(UserCard.sold_date.is_(None))

    result = await session.execute(stmt)
    rows: Sequence[UserCard] = result.scalars().all()

    logger.debug("holdings_fetched", user_id=user_id, rows=len(rows), include_sold=include_sold)
    return [Holding.model_validate(row) for row in rows]


async def fetch_cards_for_sale(
    card_id: str,
    session: AsyncSession,
    condition: str | None = None,
) -> list[Holding]:
    """Listed, unsold copies of a card, cheapest first."""
    stmt = (
        select(UserCard)
        .where(
            UserCard.card_id == card_id,
            UserCard.is_for_sale.is_(True),
            UserCard.sold_date.is_(None),
        )
        .order_by(UserCard.price.asc())
    )
    if condition:
        stmt = stmt.where(UserCard.condition == condition)

    result = await session.execute(stmt)
    return [Holding.model_validate(row) for row in result.scalars().all()]


async def count_user_cards(user_id: str, session: AsyncSession) -> int:
    """Number of unsold copies the user holds."""
    stmt = select(func.count(UserCard.id)).where(
        UserCard.user_id == user_id,
        UserCard.sold_date.is_(None),
    )
    result = await session.execute(stmt)
    return int(result.scalar() or 0)


async def count_user_editions(user_id: str, session: AsyncSession) -> int:
    """Number of distinct editions across the user's unsold copies."""
    stmt = (
        select(func.count(distinct(OfficialCard.edition_id)))
        .select_from(UserCard)
        .join(OfficialCard, OfficialCard.id == UserCard.card_id)
        .where(
            UserCard.user_id == user_id,
            UserCard.sold_date.is_(None),
            OfficialCard.edition_id.isnot(None),
        )
    )
    result = await session.execute(stmt)
    return int(result.scalar() or 0)


async def add_holding(
    user_id: str,
    card_id: str,
    session: AsyncSession,
    condition: str | None = None,
    price: Any = None,
) -> Holding:
    """Register one physical copy of a card for a user."""
    row = UserCard(
        user_id=user_id,
        card_id=card_id,
        condition=condition or settings.DEFAULT_CONDITION.value,
        is_for_sale=False,
        price=_validated_price(price) if price is not None else None,
    )
    session.add(row)
    await session.flush()
    holding = Holding.model_validate(row)
    await session.commit()

    logger.info("holding_added", user_id=user_id, card_id=card_id, user_card_id=holding.id)
    return holding


async def set_for_sale(
    user_card_id: str,
    price: Any,
    session: AsyncSession,
    for_sale: bool = True,
) -> bool:
    """
    List a copy for sale at a manual price, or withdraw it.

    Withdrawing keeps the manual price on the row.

    Returns:
        True when an unsold row was updated.
    """
    values: dict[str, Any] = {"is_for_sale": for_sale}
    if for_sale:
        values["price"] = _validated_price(price)

    result = await session.execute(
        update(UserCard)
        .where(UserCard.id == user_card_id, UserCard.sold_date.is_(None))
        .values(**values)
    )
    await session.commit()

    updated = result.rowcount > 0
    logger.info("holding_sale_status_set", user_card_id=user_card_id, for_sale=for_sale, updated=updated)
    return updated


async def mark_card_as_sold(
    user_card_id: str,
    sale_price: Any,
    session: AsyncSession,
    sold_at: datetime | None = None,
) -> bool:
    """
    Record the sale of a copy.

    Returns:
        True when the row existed and was not already sold.
    """
    price = _validated_price(sale_price)
    result = await session.execute(
        update(UserCard)
        .where(UserCard.id == user_card_id, UserCard.sold_date.is_(None))
        .values(
            sold_price=price,
            sold_date=sold_at or datetime.now(timezone.utc),
            is_for_sale=False,
        )
    )
    await session.commit()

    sold = result.rowcount > 0
    logger.info("holding_marked_sold", user_card_id=user_card_id, sale_price=str(price), sold=sold)
    return sold
