"""
TCMarket - Price history queries (market_prices)

Snapshots are returned newest first. The engine applies its own
deterministic tie-break, so SQL ordering is only a convenience.
"""

from __future__ import annotations

from datetime import date
from typing import Iterable, Sequence

import structlog
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from tcmarket.engine.types import PriceSnapshot
from tcmarket.models.market_price import MarketPrice

logger = structlog.get_logger(__name__)


async def fetch_price_history(
    card_ids: Iterable[str],
    session: AsyncSession,
    until: date | None = None,
) -> list[PriceSnapshot]:
    """
    All snapshots for the given cards, optionally bounded by date (inclusive).

    Args:
        card_ids: Cards to fetch. Duplicates are fine.
        session: Async SQLAlchemy session.
        until: Inclusive upper bound on snapshot date.

    Returns:
        Snapshots ordered by date descending. Empty when card_ids is empty.
    """
    ids = sorted(set(card_ids))
    if not ids:
        return []

    stmt = select(MarketPrice).where(MarketPrice.card_id.in_(ids))
    if until is not None:
        stmt = stmt.where(MarketPrice.date <= until)
    stmt = stmt.order_by(MarketPrice.date.desc())

    result = await session.execute(stmt)
    rows: Sequence[MarketPrice] = result.scalars().all()

    logger.debug(
        "price_history_fetched",
        cards=len(ids),
        rows=len(rows),
        until=until.isoformat() if until else None,
    )
    return [PriceSnapshot.model_validate(row) for row in rows]


async def fetch_card_price_history(card_id: str, session: AsyncSession) -> list[PriceSnapshot]:
    """One card's snapshots, oldest first (chart order)."""
    stmt = (
        select(MarketPrice)
        .where(MarketPrice.card_id == card_id)
        .order_by(MarketPrice.date.asc())
    )
    result = await session.execute(stmt)
    return [PriceSnapshot.model_validate(row) for row in result.scalars().all()]


async def fetch_recent_snapshots(
    session: AsyncSession,
    dates_per_card: int = 2,
) -> list[PriceSnapshot]:
    """
    Snapshots on each card's N most recent distinct dates, across the market.

    Feeds the top cards (N=1) and gainers/losers (N=2) listings.
    """
    ranked = select(
        MarketPrice,
        func.dense_rank()
        .over(partition_by=MarketPrice.card_id, order_by=MarketPrice.date.desc())
        .label("date_rank"),
    ).subquery()

    stmt = select(ranked).where(ranked.c.date_rank <= dates_per_card)
    result = await session.execute(stmt)
    rows = result.mappings().all()

    logger.debug("recent_snapshots_fetched", rows=len(rows), dates_per_card=dates_per_card)
    return [PriceSnapshot.model_validate(dict(row)) for row in rows]
