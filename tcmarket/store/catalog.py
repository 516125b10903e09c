"""
TCMarket - Catalog queries (official_cards, editions)
"""

from __future__ import annotations

from typing import Iterable

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from tcmarket.engine.types import CatalogCard, Edition
from tcmarket.models.edition import Edition as EditionRow
from tcmarket.models.official_card import OfficialCard

logger = structlog.get_logger(__name__)


async def fetch_cards(card_ids: Iterable[str], session: AsyncSession) -> list[CatalogCard]:
    """Catalog cards by id. Unknown ids are simply absent."""
    ids = sorted(set(card_ids))
    if not ids:
        return []
    result = await session.execute(select(OfficialCard).where(OfficialCard.id.in_(ids)))
    return [CatalogCard.model_validate(row) for row in result.scalars().all()]


async def fetch_card(card_id: str, session: AsyncSession) -> CatalogCard | None:
    row = await session.get(OfficialCard, card_id)
    return CatalogCard.model_validate(row) if row is not None else None


async def fetch_edition_cards(edition_id: str, session: AsyncSession) -> list[CatalogCard]:
    """Every catalog card of an edition, ordered by card number."""
    result = await session.execute(
        select(OfficialCard)
        .where(OfficialCard.edition_id == edition_id)
        .order_by(OfficialCard.number)
    )
    return [CatalogCard.model_validate(row) for row in result.scalars().all()]


async def fetch_editions(edition_ids: Iterable[str], session: AsyncSession) -> list[Edition]:
    ids = sorted(set(edition_ids))
    if not ids:
        return []
    result = await session.execute(select(EditionRow).where(EditionRow.id.in_(ids)))
    return [Edition.model_validate(row) for row in result.scalars().all()]


async def fetch_edition(edition_id: str, session: AsyncSession) -> Edition | None:
    row = await session.get(EditionRow, edition_id)
    if row is None:
        logger.info("edition_not_found", edition_id=edition_id)
        return None
    return Edition.model_validate(row)
