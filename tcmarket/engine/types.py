"""
TCMarket - Engine value types

Plain pydantic records the engine works on. They are built from ORM rows
(``from_attributes``) or from dicts returned by the data store, so the
engine never touches a session.
"""

from __future__ import annotations

import datetime as dt
from decimal import Decimal
from typing import Any, NamedTuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

from tcmarket.utils.numbers import parse_optional_price


class PriceSnapshot(BaseModel):
    """One market price record for a catalog card on a given day."""
    model_config = ConfigDict(from_attributes=True, frozen=True)

    card_id: str
    date: dt.date
    price_low: Decimal | None = None
    price_mid: Decimal | None = None
    price_high: Decimal | None = None

    @field_validator("price_low", "price_mid", "price_high", mode="before")
    @classmethod
    def coerce_price(cls, v: Any) -> Decimal | None:
        return parse_optional_price(v)


class Holding(BaseModel):
    """
    One physical card owned by a user.

    ``price`` is the owner's manual price (set when listing for sale). When
    it is None the market price is used instead.
    """
    model_config = ConfigDict(from_attributes=True, frozen=True)

    user_id: str
    card_id: str
    price: Decimal | None = None
    id: str | None = Field(default=None, description="user_cards row id")
    condition: str | None = None
    is_for_sale: bool = False

    @field_validator("price", mode="before")
    @classmethod
    def coerce_price(cls, v: Any) -> Decimal | None:
        return parse_optional_price(v)

    @field_validator("is_for_sale", mode="before")
    @classmethod
    def coerce_flag(cls, v: Any) -> bool:
        return bool(v)


class CatalogCard(BaseModel):
    """Catalog (official) card metadata."""
    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: str
    name: str
    edition_id: str | None = None
    number: str | None = None
    rarity: str | None = None
    image_small: str | None = None
    image_large: str | None = None

    @property
    def image_url(self) -> str | None:
        return self.image_large or self.image_small


class Edition(BaseModel):
    """A released set that catalog cards belong to."""
    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: str
    name: str
    release_date: dt.date | None = None
    logo_image: str | None = None
    symbol_image: str | None = None
    printed_total: int | None = None
    total: int | None = None


class ValuationResult(NamedTuple):
    """Collection value and trailing variation. Never persisted."""
    total_value: Decimal
    variation_percent: Decimal
    current_total: Decimal
    previous_total: Decimal
    cards_with_both_prices: int

    @classmethod
    def zero(cls) -> ValuationResult:
        """Result returned when there is no data or the fetch failed."""
        return cls(
            total_value=Decimal("0"),
            variation_percent=Decimal("0"),
            current_total=Decimal("0"),
            previous_total=Decimal("0"),
            cards_with_both_prices=0,
        )
