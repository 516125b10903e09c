"""
TCMarket - Edition grouping

Joins holdings -> catalog cards -> editions for the collection screen, and
builds the per-edition detail (every card of the set, owned or not).
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Sequence

import structlog
from pydantic import BaseModel, Field

from tcmarket.engine.types import CatalogCard, Edition, Holding, PriceSnapshot
from tcmarket.engine.valuation import holding_value, latest_prices

logger = structlog.get_logger(__name__)

_ZERO = Decimal("0")


class GroupedCard(BaseModel):
    """One holding as shown inside its edition group."""
    id: str | None = None
    card_id: str
    card_name: str
    card_image: str | None = None
    rarity: str | None = None
    condition: str | None = None
    is_for_sale: bool = False
    price: Decimal | None = None
    value: Decimal = _ZERO
    release_date: date | None = None

    # Listing protocol (see engine/listing.py)
    @property
    def name(self) -> str:
        return self.card_name

    @property
    def total_value(self) -> Decimal:
        return self.value

    @property
    def owned_count(self) -> int:
        return 1


class EditionGroup(BaseModel):
    """All of a user's holdings from one edition."""
    id: str
    name: str
    release_date: date | None = None
    logo_url: str | None = None
    symbol_url: str | None = None
    printed_total: int = 0
    total: int = 0
    cards: list[GroupedCard] = Field(default_factory=list)
    total_value: Decimal = _ZERO

    @property
    def owned_count(self) -> int:
        return len(self.cards)


class EditionCard(BaseModel):
    """A catalog card of an edition, annotated with the user's ownership."""
    id: str
    name: str
    number: str | None = None
    rarity: str | None = None
    image_small: str | None = None
    image_large: str | None = None
    owned: bool = False
    price: Decimal | None = None
    is_for_sale: bool = False
    market_price_low: Decimal | None = None
    market_price_mid: Decimal | None = None
    market_price_high: Decimal | None = None


class EditionDetail(BaseModel):
    """One edition with every catalog card and ownership totals."""
    edition: Edition
    cards: list[EditionCard] = Field(default_factory=list)
    owned_cards: int = 0
    total_value: Decimal = _ZERO


def _release_sort_key(group: EditionGroup) -> date:
    return group.release_date or date.min


def group_holdings_by_edition(
    holdings: Sequence[Holding],
    cards_catalog: Sequence[CatalogCard],
    editions_catalog: Sequence[Edition],
    price_history: Sequence[PriceSnapshot] = (),
) -> list[EditionGroup]:
    """
    Bucket holdings into one group per edition.

    Holdings whose card or edition cannot be resolved are skipped. Editions
    with no holdings never appear. Groups are ordered by release date, most
    recent first; a missing release date sorts last.

    Args:
        holdings: The user's holdings.
        cards_catalog: Catalog cards (at least those held).
        editions_catalog: Editions (at least those referenced).
        price_history: Optional snapshots for market-price fallback values.

    Returns:
        Edition groups, newest first.
    """
    cards_by_id = {card.id: card for card in cards_catalog}
    editions_by_id = {edition.id: edition for edition in editions_catalog}
    latest_by_card = latest_prices(price_history)

    groups: dict[str, EditionGroup] = {}
    skipped = 0

    for holding in holdings:
        card = cards_by_id.get(holding.card_id)
        if card is None or not card.edition_id:
            skipped += 1
            continue
        edition = editions_by_id.get(card.edition_id)
        if edition is None:
            skipped += 1
            continue

        group = groups.get(edition.id)
        if group is None:
            group = EditionGroup(
                id=edition.id,
                name=edition.name,
                release_date=edition.release_date,
                logo_url=edition.logo_image,
                symbol_url=edition.symbol_image,
                printed_total=edition.printed_total or 0,
                total=edition.total or 0,
            )
            groups[edition.id] = group

        value = holding_value(holding, latest_by_card)
        group.cards.append(
            GroupedCard(
                id=holding.id,
                card_id=holding.card_id,
                card_name=card.name,
                card_image=card.image_url,
                rarity=card.rarity,
                condition=holding.condition,
                is_for_sale=holding.is_for_sale,
                price=holding.price,
                value=value,
                release_date=edition.release_date,
            )
        )
        group.total_value += value

    result = sorted(groups.values(), key=_release_sort_key, reverse=True)

    logger.debug(
        "holdings_grouped_by_edition",
        holdings=len(holdings),
        editions=len(result),
        skipped=skipped,
    )
    return result


def build_edition_detail(
    edition: Edition,
    edition_cards: Sequence[CatalogCard],
    holdings: Sequence[Holding],
    price_history: Sequence[PriceSnapshot],
) -> EditionDetail:
    """
    Annotate every card of an edition with the user's ownership and prices.

    A card counts once however many copies are held. Its display price is
    the first manual price found among its holdings, else the latest market
    mid. total_value sums display prices of owned cards (missing -> 0).
    """
    latest_by_card = latest_prices(price_history)

    owned_ids: set[str] = set()
    manual_price: dict[str, Decimal] = {}
    for_sale: dict[str, bool] = {}
    for holding in holdings:
        owned_ids.add(holding.card_id)
        if holding.price is not None and holding.card_id not in manual_price:
            manual_price[holding.card_id] = holding.price
        for_sale[holding.card_id] = for_sale.get(holding.card_id, False) or holding.is_for_sale

    cards: list[EditionCard] = []
    total_value = _ZERO
    for card in edition_cards:
        snapshot = latest_by_card.get(card.id)
        market_mid = snapshot.price_mid if snapshot else None
        owned = card.id in owned_ids
        price = manual_price.get(card.id, market_mid)

        cards.append(
            EditionCard(
                id=card.id,
                name=card.name,
                number=card.number,
                rarity=card.rarity,
                image_small=card.image_small,
                image_large=card.image_large,
                owned=owned,
                price=price,
                is_for_sale=for_sale.get(card.id, False),
                market_price_low=snapshot.price_low if snapshot else None,
                market_price_mid=market_mid,
                market_price_high=snapshot.price_high if snapshot else None,
            )
        )
        if owned and price is not None:
            total_value += price

    owned_cards = sum(1 for c in cards if c.owned)
    logger.debug(
        "edition_detail_built",
        edition_id=edition.id,
        cards=len(cards),
        owned_cards=owned_cards,
        total_value=str(total_value),
    )
    return EditionDetail(
        edition=edition,
        cards=cards,
        owned_cards=owned_cards,
        total_value=total_value,
    )
