"""
TCMarket - User Card Model (holdings)

One row per physical card a user owns. Copies are separate rows; there is
no quantity column.

price is the owner's manual price, set when the card is listed for sale.
Sold cards keep their row with sold_price / sold_date filled in.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal

from sqlalchemy import BOOLEAN, DECIMAL, TIMESTAMP, ForeignKey, Index, String, func
from sqlalchemy.orm import Mapped, mapped_column

from tcmarket.models.base import Base


class UserCard(Base):
    """A single owned copy of an official card."""

    __tablename__ = "user_cards"

    id: Mapped[str] = mapped_column(
        String, primary_key=True, default=lambda: str(uuid.uuid4())
    )
    user_id: Mapped[str] = mapped_column(String, nullable=False, comment="Auth user id")
    card_id: Mapped[str] = mapped_column(
        String, ForeignKey("official_cards.id"), nullable=False
    )
    condition: Mapped[str | None] = mapped_column(String, nullable=True)
    is_for_sale: Mapped[bool] = mapped_column(BOOLEAN, nullable=False, default=False)
    price: Mapped[Decimal | None] = mapped_column(
        DECIMAL(10, 2), nullable=True, comment="Manual price; overrides market price"
    )
    sold_price: Mapped[Decimal | None] = mapped_column(DECIMAL(10, 2), nullable=True)
    sold_date: Mapped[datetime | None] = mapped_column(
        TIMESTAMP(timezone=True), nullable=True, comment="Set when the card is sold"
    )
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now(), nullable=False
    )

    __table_args__ = (
        Index("ix_user_cards_user", "user_id"),
        Index("ix_user_cards_card_for_sale", "card_id", "is_for_sale"),
    )

    def __repr__(self) -> str:
        return (
            f"<UserCard id={self.id!r} user_id={self.user_id!r} card_id={self.card_id!r} "
            f"price={self.price} for_sale={self.is_for_sale}>"
        )
