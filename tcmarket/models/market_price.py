"""
TCMarket - Market Price Model

Append-only daily price snapshots per card, written by an external
ingestion job. Never updated or deleted here.
"""

from __future__ import annotations

import uuid
import datetime as dt
from decimal import Decimal

from sqlalchemy import DATE, DECIMAL, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from tcmarket.models.base import Base


class MarketPrice(Base):
    """
    One price snapshot for a card on a given date.

    A card may have several snapshots on the same date (one per upstream
    source); the engine resolves ties deterministically.

    Index: (card_id, date) supports latest-price and window queries.
    """

    __tablename__ = "market_prices"

    id: Mapped[str] = mapped_column(
        String, primary_key=True, default=lambda: str(uuid.uuid4())
    )
    card_id: Mapped[str] = mapped_column(
        String, ForeignKey("official_cards.id"), nullable=False
    )
    date: Mapped[dt.date] = mapped_column(DATE, nullable=False)
    price_low: Mapped[Decimal | None] = mapped_column(DECIMAL(10, 2), nullable=True)
    price_mid: Mapped[Decimal | None] = mapped_column(
        DECIMAL(10, 2), nullable=True, comment="Used for valuation and variation"
    )
    price_high: Mapped[Decimal | None] = mapped_column(DECIMAL(10, 2), nullable=True)
    source: Mapped[str | None] = mapped_column(String, nullable=True)

    __table_args__ = (
        Index("ix_market_prices_card_date", "card_id", "date"),
    )

    def __repr__(self) -> str:
        return (
            f"<MarketPrice card_id={self.card_id!r} date={self.date} "
            f"low={self.price_low} mid={self.price_mid} high={self.price_high}>"
        )
