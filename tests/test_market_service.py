"""
Tests for services/market.py - market listings and watched cards.
"""

from __future__ import annotations

import datetime as dt
from decimal import Decimal
from unittest.mock import MagicMock

import pytest
import pytest_asyncio

from conftest import AS_OF, seed_catalog, seed_holding, seed_price
from tcmarket.services.market import MarketService


def _days_before(n: int) -> dt.date:
    return AS_OF - dt.timedelta(days=n)


@pytest_asyncio.fixture
async def market(session_factory, db_session, editions, cards) -> MarketService:
    await seed_catalog(db_session, editions, cards)
    # Charizard: 100 -> 150, Pikachu: 4 -> 3, Miraidon: single snapshot
    await seed_price(db_session, "sv3-125", _days_before(5), Decimal("90"))
    await seed_price(db_session, "sv3-125", _days_before(2), Decimal("100"))
    await seed_price(db_session, "sv3-125", _days_before(1), Decimal("150"))
    await seed_price(db_session, "sv1-25", _days_before(2), Decimal("4"))
    await seed_price(db_session, "sv1-25", _days_before(1), Decimal("3"))
    await seed_price(db_session, "sv1-198", _days_before(1), Decimal("25"))
    return MarketService(session_factory)


@pytest.fixture
def broken_market() -> MarketService:
    return MarketService(MagicMock(side_effect=ConnectionError("database unreachable")))


class TestListings:
    @pytest.mark.asyncio
    async def test_top_cards(self, market) -> None:
        top = await market.get_top_cards()

        assert [c.card_id for c in top] == ["sv3-125", "sv1-198", "sv1-25"]
        assert top[0].price_mid == Decimal("150")
        assert top[0].edition_name == "Obsidian Flames"

    @pytest.mark.asyncio
    async def test_top_cards_limit(self, market) -> None:
        assert len(await market.get_top_cards(limit=1)) == 1

    @pytest.mark.asyncio
    async def test_gainers_and_losers(self, market) -> None:
        gainers = await market.get_top_gainers()
        losers = await market.get_top_losers()

        assert gainers[0].card_id == "sv3-125"
        assert gainers[0].diff == Decimal("50")
        assert gainers[0].diff_percent == Decimal("50")
        assert losers[0].card_id == "sv1-25"
        assert losers[0].diff == Decimal("-1")
        assert losers[0].diff_percent == Decimal("-25")

    @pytest.mark.asyncio
    async def test_failures_return_empty(self, broken_market) -> None:
        assert await broken_market.get_top_cards() == []
        assert await broken_market.get_top_gainers() == []
        assert await broken_market.get_top_losers() == []
        assert await broken_market.get_cards_for_sale("sv3-125") == []
        assert await broken_market.get_card_price_history("sv3-125") == []
        assert await broken_market.get_watched_cards("u1") == []


class TestMarketplace:
    @pytest.mark.asyncio
    async def test_cards_for_sale(self, market, db_session) -> None:
        await seed_holding(db_session, "u1", "sv3-125", price=Decimal("140"), is_for_sale=True, condition="NM")
        await seed_holding(db_session, "u2", "sv3-125", price=Decimal("120"), is_for_sale=True, condition="EX")

        offers = await market.get_cards_for_sale("sv3-125")
        excellent = await market.get_cards_for_sale("sv3-125", condition="EX")

        assert [o.price for o in offers] == [Decimal("120"), Decimal("140")]
        assert [o.user_id for o in excellent] == ["u2"]

    @pytest.mark.asyncio
    async def test_card_price_history(self, market) -> None:
        history = await market.get_card_price_history("sv3-125")
        assert [s.date for s in history] == [_days_before(5), _days_before(2), _days_before(1)]


class TestWatchedCards:
    @pytest.mark.asyncio
    async def test_toggle_and_list(self, market) -> None:
        assert await market.get_watched_cards("u1") == []

        assert await market.toggle_wishlist("u1", "sv3-125") is True
        assert await market.toggle_price_alert("u1", "sv1-25", condition="NM") is True

        watched = await market.get_watched_cards("u1")
        assert [w.card_name for w in watched] == ["Charizard ex", "Pikachu"]
        assert watched[0].price_mid == Decimal("150")
        assert watched[0].last_updated == _days_before(1)

        assert await market.toggle_wishlist("u1", "sv3-125") is False
        assert [w.card_id for w in await market.get_watched_cards("u1")] == ["sv1-25"]

    @pytest.mark.asyncio
    async def test_toggle_failure_returns_none(self, broken_market) -> None:
        assert await broken_market.toggle_wishlist("u1", "sv3-125") is None
        assert await broken_market.toggle_price_alert("u1", "sv3-125") is None
