"""
TCMarket - Shared pytest Fixtures & Configuration

Provides common fixtures for all test modules:
- In-memory aiosqlite database with every TCMarket table
- Session factory for service tests
- Seed helpers for editions, cards, holdings and price snapshots
"""

from __future__ import annotations

import datetime as dt
from decimal import Decimal
from typing import Any, AsyncGenerator

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from tcmarket.models import Base, Edition, MarketPrice, OfficialCard, UserCard


# ---------------------------------------------------------------------------
# Database Fixtures
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def db_engine() -> AsyncGenerator[AsyncEngine, None]:
    """Fresh in-memory SQLite database per test."""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(db_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest_asyncio.fixture
async def db_session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


# ---------------------------------------------------------------------------
# Seed Helpers
# ---------------------------------------------------------------------------


async def seed_catalog(
    session: AsyncSession,
    editions: list[dict[str, Any]],
    cards: list[dict[str, Any]],
) -> None:
    """Insert editions and official cards."""
    for edition in editions:
        session.add(Edition(**edition))
    await session.flush()
    for card in cards:
        session.add(OfficialCard(**card))
    await session.commit()


async def seed_holding(
    session: AsyncSession,
    user_id: str,
    card_id: str,
    price: Decimal | None = None,
    **extra: Any,
) -> str:
    row = UserCard(user_id=user_id, card_id=card_id, price=price, **extra)
    session.add(row)
    await session.commit()
    return row.id


async def seed_price(
    session: AsyncSession,
    card_id: str,
    on: dt.date,
    mid: Decimal | None,
    low: Decimal | None = None,
    high: Decimal | None = None,
) -> None:
    session.add(
        MarketPrice(card_id=card_id, date=on, price_low=low, price_mid=mid, price_high=high)
    )
    await session.commit()


# ---------------------------------------------------------------------------
# Reference Data
# ---------------------------------------------------------------------------

AS_OF = dt.date(2026, 10, 19)


@pytest.fixture
def as_of() -> dt.date:
    """Fixed valuation date so windows never depend on the wall clock."""
    return AS_OF


@pytest.fixture
def editions() -> list[dict[str, Any]]:
    return [
        {"id": "sv1", "name": "Scarlet & Violet", "release_date": dt.date(2023, 3, 31), "printed_total": 198, "total": 258},
        {"id": "sv3", "name": "Obsidian Flames", "release_date": dt.date(2023, 8, 11), "printed_total": 197, "total": 230},
        {"id": "promo", "name": "Promo", "release_date": None},
        {"id": "sv9", "name": "Journey Together", "release_date": dt.date(2025, 3, 28)},
    ]


@pytest.fixture
def cards() -> list[dict[str, Any]]:
    return [
        {"id": "sv1-25", "name": "Pikachu", "number": "25", "rarity": "Common", "edition_id": "sv1"},
        {"id": "sv1-198", "name": "Miraidon ex", "number": "198", "rarity": "Ultra Rare", "edition_id": "sv1"},
        {"id": "sv3-125", "name": "Charizard ex", "number": "125", "rarity": "Double Rare", "edition_id": "sv3"},
        {"id": "promo-1", "name": "Mew", "number": "1", "rarity": "Promo", "edition_id": "promo"},
        {"id": "sv9-10", "name": "Lillie's Clefairy", "number": "10", "rarity": "Rare", "edition_id": "sv9"},
    ]
