"""
TCMarket - Market movers & most valuable cards

Price moves compare each card's two most recent distinct snapshot dates:
    diff         = last_price - prev_price
    diff_percent = diff / prev_price * 100   (0 when prev_price is 0)
A card with no previous price reports diff = 0 and diff_percent = 0.

Gainers sort by diff descending (ties: diff_percent descending).
Losers sort by diff ascending (ties: diff_percent ascending).
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Mapping, Sequence

import structlog
from pydantic import BaseModel

from tcmarket.config import settings
from tcmarket.engine.types import CatalogCard, PriceSnapshot
from tcmarket.engine.valuation import index_by_card, latest_snapshot

logger = structlog.get_logger(__name__)

_ZERO = Decimal("0")
_HUNDRED = Decimal("100")


class CardPrice(BaseModel):
    """A card with its latest market mid price."""
    card_id: str
    card_name: str
    price_mid: Decimal
    image_small: str | None = None
    edition_name: str | None = None


class PriceMove(BaseModel):
    """Change between a card's last two snapshot dates."""
    card_id: str
    card_name: str
    last_price: Decimal | None = None
    prev_price: Decimal | None = None
    diff: Decimal = _ZERO
    diff_percent: Decimal = _ZERO
    image_small: str | None = None
    edition_name: str | None = None


def _card_fields(
    card_id: str,
    cards_by_id: Mapping[str, CatalogCard],
    edition_names: Mapping[str, str],
) -> dict[str, str | None]:
    card = cards_by_id.get(card_id)
    if card is None:
        return {"card_name": card_id, "image_small": None, "edition_name": None}
    return {
        "card_name": card.name,
        "image_small": card.image_small,
        "edition_name": edition_names.get(card.edition_id or ""),
    }


def rank_top_cards(
    price_history: Sequence[PriceSnapshot],
    cards: Sequence[CatalogCard],
    edition_names: Mapping[str, str] | None = None,
    limit: int | None = None,
) -> list[CardPrice]:
    """Cards ordered by latest price_mid, highest first. Null mids are skipped."""
    top_n = limit if limit is not None else settings.TOP_CARDS_LIMIT
    cards_by_id = {c.id: c for c in cards}
    names = edition_names or {}

    ranked: list[CardPrice] = []
    for card_id, snapshots in index_by_card(price_history).items():
        latest = latest_snapshot(snapshots)
        if latest is None or latest.price_mid is None:
            continue
        ranked.append(
            CardPrice(
                card_id=card_id,
                price_mid=latest.price_mid,
                **_card_fields(card_id, cards_by_id, names),
            )
        )

    ranked.sort(key=lambda c: c.price_mid, reverse=True)
    return ranked[:top_n]


def compute_price_moves(
    price_history: Sequence[PriceSnapshot],
    cards: Sequence[CatalogCard],
    edition_names: Mapping[str, str] | None = None,
) -> list[PriceMove]:
    """
    Compute one PriceMove per card that has at least one snapshot.

    Args:
        price_history: Snapshots for any number of cards.
        cards: Catalog metadata for display fields.
        edition_names: edition_id -> edition name.

    Returns:
        Unordered list of moves.
    """
    cards_by_id = {c.id: c for c in cards}
    names = edition_names or {}
    moves: list[PriceMove] = []

    for card_id, snapshots in index_by_card(price_history).items():
        last = latest_snapshot(snapshots)
        if last is None:
            continue
        earlier = [s for s in snapshots if s.date < last.date]
        prev = latest_snapshot(earlier)

        last_price = last.price_mid
        prev_price = prev.price_mid if prev is not None else None

        if prev_price is None or last_price is None:
            diff = _ZERO
            diff_percent = _ZERO
        else:
            diff = last_price - prev_price
            diff_percent = diff / prev_price * _HUNDRED if prev_price != _ZERO else _ZERO

        moves.append(
            PriceMove(
                card_id=card_id,
                last_price=last_price,
                prev_price=prev_price,
                diff=diff,
                diff_percent=diff_percent,
                **_card_fields(card_id, cards_by_id, names),
            )
        )

    logger.debug("price_moves_computed", cards=len(moves))
    return moves


def rank_gainers(moves: Sequence[PriceMove], limit: int | None = None) -> list[PriceMove]:
    """Largest absolute rise first."""
    top_n = limit if limit is not None else settings.TOP_MOVERS_LIMIT
    ordered = sorted(moves, key=lambda m: (m.diff, m.diff_percent), reverse=True)
    return ordered[:top_n]


def rank_losers(moves: Sequence[PriceMove], limit: int | None = None) -> list[PriceMove]:
    """Largest absolute drop first."""
    top_n = limit if limit is not None else settings.TOP_MOVERS_LIMIT
    ordered = sorted(moves, key=lambda m: (m.diff, m.diff_percent))
    return ordered[:top_n]


class WatchedCard(BaseModel):
    """A wishlisted or alerted card with its latest prices."""
    card_id: str
    card_name: str
    number: str | None = None
    rarity: str | None = None
    image_small: str | None = None
    image_large: str | None = None
    price_low: Decimal | None = None
    price_mid: Decimal | None = None
    price_high: Decimal | None = None
    last_updated: date | None = None
    edition_name: str | None = None


def build_watched_cards(
    cards: Sequence[CatalogCard],
    price_history: Sequence[PriceSnapshot],
    edition_names: Mapping[str, str] | None = None,
) -> list[WatchedCard]:
    """Catalog cards joined to their latest snapshot, sorted by name."""
    names = edition_names or {}
    by_card = index_by_card(price_history)
    watched: list[WatchedCard] = []

    for card in cards:
        latest = latest_snapshot(by_card.get(card.id, []))
        watched.append(
            WatchedCard(
                card_id=card.id,
                card_name=card.name,
                number=card.number,
                rarity=card.rarity,
                image_small=card.image_small,
                image_large=card.image_large,
                price_low=latest.price_low if latest else None,
                price_mid=latest.price_mid if latest else None,
                price_high=latest.price_high if latest else None,
                last_updated=latest.date if latest else None,
                edition_name=names.get(card.edition_id or ""),
            )
        )

    watched.sort(key=lambda w: w.card_name.casefold())
    return watched
