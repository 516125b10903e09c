"""
TCMarket - Official Card Model

Catalog of every printed card. Holdings, wishlists, alerts and market
prices all reference official_cards.id.
"""

from __future__ import annotations

from sqlalchemy import ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from tcmarket.models.base import Base


class OfficialCard(Base):
    """
    Catalog card.

    The id uses the canonical "{set_code}-{card_number}" format
    (e.g., "sv1-25").
    """

    __tablename__ = "official_cards"

    id: Mapped[str] = mapped_column(
        String, primary_key=True, comment="Canonical ID: {set_code}-{card_number}"
    )
    name: Mapped[str] = mapped_column(String, nullable=False)
    number: Mapped[str | None] = mapped_column(String, nullable=True)
    rarity: Mapped[str | None] = mapped_column(String, nullable=True)
    image_small: Mapped[str | None] = mapped_column(String, nullable=True)
    image_large: Mapped[str | None] = mapped_column(String, nullable=True)
    edition_id: Mapped[str | None] = mapped_column(
        String, ForeignKey("editions.id"), nullable=True
    )

    __table_args__ = (
        Index("ix_official_cards_edition", "edition_id"),
    )

    def __repr__(self) -> str:
        return f"<OfficialCard id={self.id!r} name={self.name!r} edition={self.edition_id!r}>"
