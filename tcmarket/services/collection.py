"""
TCMarket - Collection Service

Orchestrates store queries and the valuation engine for one user's
collection. The session factory is injected; nothing reads ambient state.

Failure policy: a failed query is logged and the caller still receives a
result object (zero valuation, empty list, None detail, False for writes).
Invalid caller input (e.g. a non-positive sale price) raises ValueError.
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any, NamedTuple

import structlog
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from tcmarket.config import settings
from tcmarket.engine.grouping import (
    EditionDetail,
    EditionGroup,
    build_edition_detail,
    group_holdings_by_edition,
)
from tcmarket.engine.listing import ListingQuery, apply_listing_query
from tcmarket.engine.types import ValuationResult
from tcmarket.engine.valuation import compute_total_value, compute_variation
from tcmarket.store import catalog, holdings, prices
from tcmarket.utils.numbers import parse_decimal
from tcmarket.utils.request_guard import RequestSequencer

logger = structlog.get_logger(__name__)


class CollectionCounts(NamedTuple):
    """Profile counters."""
    cards: int
    editions: int


def _today() -> date:
    return datetime.now(timezone.utc).date()


class CollectionService:
    """Valuation, grouping and holding lifecycle for user collections."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        lookback_days: int | None = None,
    ):
        self.session_factory = session_factory
        self.lookback_days = (
            lookback_days if lookback_days is not None else settings.VARIATION_LOOKBACK_DAYS
        )
        self._valuations: RequestSequencer[ValuationResult] = RequestSequencer()

    # -----------------------------------------------------------------------
    # Valuation
    # -----------------------------------------------------------------------

    async def get_total_value(self, user_id: str) -> Decimal:
        """Current collection value; 0 when the fetch fails."""
        try:
            async with self.session_factory() as session:
                user_holdings = await holdings.fetch_holdings(user_id, session)
                history = await prices.fetch_price_history(
                    [h.card_id for h in user_holdings], session
                )
        except Exception as e:
            logger.error(
                "total_value_fetch_failed",
                user_id=user_id,
                error=str(e),
                error_type=type(e).__name__,
            )
            return Decimal("0")

        total = compute_total_value(user_holdings, history)
        logger.info("total_value_computed", user_id=user_id, holdings=len(user_holdings), total=str(total))
        return total

    async def get_price_variation(self, user_id: str, as_of: date | None = None) -> ValuationResult:
        """
        Total value and trailing variation.

        Returns ValuationResult.zero() when the fetch fails, so "no data" and
        "fetch failed" look the same to the caller.
        """
        cutoff = as_of or _today()
        try:
            async with self.session_factory() as session:
                user_holdings = await holdings.fetch_holdings(user_id, session)
                if not user_holdings:
                    return ValuationResult.zero()
                history = await prices.fetch_price_history(
                    [h.card_id for h in user_holdings], session, until=cutoff
                )
        except Exception as e:
            logger.error(
                "price_variation_fetch_failed",
                user_id=user_id,
                error=str(e),
                error_type=type(e).__name__,
            )
            return ValuationResult.zero()

        result = compute_variation(user_holdings, history, cutoff, lookback_days=self.lookback_days)
        logger.info(
            "price_variation_computed",
            user_id=user_id,
            as_of=cutoff.isoformat(),
            total_value=str(result.total_value),
            variation_percent=str(result.variation_percent),
            cards_with_both_prices=result.cards_with_both_prices,
        )
        return result

    async def refresh_valuation(self, user_id: str, as_of: date | None = None) -> ValuationResult | None:
        """
        Recompute the valuation and make it the user's current one.

        Concurrent refreshes for the same user are not cancelled, but only
        the most recently started one is applied.

        Returns:
            The applied result, or None if a newer refresh superseded this one.
        """
        return await self._valuations.run(user_id, self.get_price_variation(user_id, as_of))

    def current_valuation(self, user_id: str) -> ValuationResult | None:
        """Last applied valuation for the user, if any refresh completed."""
        return self._valuations.current(user_id)

    # -----------------------------------------------------------------------
    # Grouping & detail
    # -----------------------------------------------------------------------

    async def get_cards_grouped_by_edition(
        self,
        user_id: str,
        query: ListingQuery | None = None,
    ) -> list[EditionGroup]:
        """
        The user's holdings grouped by edition, newest edition first.

        When ``query`` is given the groups are filtered by edition name and
        re-sorted by its key instead.
        """
        try:
            async with self.session_factory() as session:
                user_holdings = await holdings.fetch_holdings(user_id, session)
                card_ids = [h.card_id for h in user_holdings]
                cards = await catalog.fetch_cards(card_ids, session)
                editions = await catalog.fetch_editions(
                    [c.edition_id for c in cards if c.edition_id], session
                )
                history = await prices.fetch_price_history(card_ids, session)
        except Exception as e:
            logger.error(
                "grouped_cards_fetch_failed",
                user_id=user_id,
                error=str(e),
                error_type=type(e).__name__,
            )
            return []

        groups = group_holdings_by_edition(user_holdings, cards, editions, history)
        if query is not None:
            groups = apply_listing_query(groups, query)
        return groups

    async def get_edition_detail(self, edition_id: str, user_id: str) -> EditionDetail | None:
        """Every card of an edition with the user's ownership; None if unavailable."""
        try:
            async with self.session_factory() as session:
                edition = await catalog.fetch_edition(edition_id, session)
                if edition is None:
                    return None
                edition_cards = await catalog.fetch_edition_cards(edition_id, session)
                edition_card_ids = {c.id for c in edition_cards}
                user_holdings = [
                    h for h in await holdings.fetch_holdings(user_id, session)
                    if h.card_id in edition_card_ids
                ]
                history = await prices.fetch_price_history(edition_card_ids, session)
        except Exception as e:
            logger.error(
                "edition_detail_fetch_failed",
                edition_id=edition_id,
                user_id=user_id,
                error=str(e),
                error_type=type(e).__name__,
            )
            return None

        return build_edition_detail(edition, edition_cards, user_holdings, history)

    async def get_collection_counts(self, user_id: str) -> CollectionCounts:
        """Card and edition counts; zeros when the fetch fails."""
        try:
            async with self.session_factory() as session:
                cards = await holdings.count_user_cards(user_id, session)
                editions = await holdings.count_user_editions(user_id, session)
        except Exception as e:
            logger.error(
                "collection_counts_fetch_failed",
                user_id=user_id,
                error=str(e),
                error_type=type(e).__name__,
            )
            return CollectionCounts(cards=0, editions=0)
        return CollectionCounts(cards=cards, editions=editions)

    # -----------------------------------------------------------------------
    # Holding lifecycle
    # -----------------------------------------------------------------------

    async def list_for_sale(self, user_card_id: str, price: Any) -> bool:
        """
        List a copy for sale at ``price``.

        Returns:
            True when the listing was saved; the caller should refetch.
        """
        self._require_price(price)
        try:
            async with self.session_factory() as session:
                return await holdings.set_for_sale(user_card_id, price, session)
        except Exception as e:
            logger.error(
                "list_for_sale_failed",
                user_card_id=user_card_id,
                error=str(e),
                error_type=type(e).__name__,
            )
            return False

    async def withdraw_from_sale(self, user_card_id: str) -> bool:
        try:
            async with self.session_factory() as session:
                return await holdings.set_for_sale(user_card_id, None, session, for_sale=False)
        except Exception as e:
            logger.error(
                "withdraw_from_sale_failed",
                user_card_id=user_card_id,
                error=str(e),
                error_type=type(e).__name__,
            )
            return False

    async def mark_as_sold(self, user_card_id: str, sale_price: Any) -> bool:
        """
        Record a sale.

        Returns:
            True when the copy was marked sold; the caller should refetch
            its collection and valuation.
        """
        self._require_price(sale_price)
        try:
            async with self.session_factory() as session:
                return await holdings.mark_card_as_sold(user_card_id, sale_price, session)
        except Exception as e:
            logger.error(
                "mark_as_sold_failed",
                user_card_id=user_card_id,
                error=str(e),
                error_type=type(e).__name__,
            )
            return False

    @staticmethod
    def _require_price(price: Any) -> None:
        value = parse_decimal(price, default=None)
        if value is None or value < settings.MIN_SALE_PRICE:
            raise ValueError(f"price must be at least {settings.MIN_SALE_PRICE}, got {price!r}")
