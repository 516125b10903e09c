"""
TCMarket - Wishlist & Price Alert Models

Both tables mark cards a user is watching; the watched-cards screen shows
their union.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal

from sqlalchemy import BOOLEAN, DECIMAL, TIMESTAMP, ForeignKey, Index, String, func
from sqlalchemy.orm import Mapped, mapped_column

from tcmarket.models.base import Base


class Wishlist(Base):
    """A card the user wants to acquire."""

    __tablename__ = "wishlists"

    id: Mapped[str] = mapped_column(
        String, primary_key=True, default=lambda: str(uuid.uuid4())
    )
    user_id: Mapped[str] = mapped_column(String, nullable=False)
    card_id: Mapped[str] = mapped_column(
        String, ForeignKey("official_cards.id"), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now(), nullable=False
    )

    __table_args__ = (
        Index("ix_wishlists_user_card", "user_id", "card_id", unique=True),
    )

    def __repr__(self) -> str:
        return f"<Wishlist user_id={self.user_id!r} card_id={self.card_id!r}>"


class PriceAlert(Base):
    """A price watch on a card."""

    __tablename__ = "price_alerts"

    id: Mapped[str] = mapped_column(
        String, primary_key=True, default=lambda: str(uuid.uuid4())
    )
    user_id: Mapped[str] = mapped_column(String, nullable=False)
    card_id: Mapped[str] = mapped_column(
        String, ForeignKey("official_cards.id"), nullable=False
    )
    target_price: Mapped[Decimal] = mapped_column(
        DECIMAL(10, 2), nullable=False, default=Decimal("0"), comment="0 until the user edits it"
    )
    condition: Mapped[str | None] = mapped_column(String, nullable=True)
    is_active: Mapped[bool] = mapped_column(BOOLEAN, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now(), nullable=False
    )

    __table_args__ = (
        Index("ix_price_alerts_user_card", "user_id", "card_id"),
    )

    def __repr__(self) -> str:
        return (
            f"<PriceAlert user_id={self.user_id!r} card_id={self.card_id!r} "
            f"target={self.target_price} active={self.is_active}>"
        )
