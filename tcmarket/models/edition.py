"""
TCMarket - Edition Model

Released sets. Read-only here; the catalog is maintained upstream.
"""

from __future__ import annotations

from datetime import date

from sqlalchemy import DATE, INTEGER, String
from sqlalchemy.orm import Mapped, mapped_column

from tcmarket.models.base import Base


class Edition(Base):
    """One released set (e.g. 'Scarlet & Violet')."""

    __tablename__ = "editions"

    id: Mapped[str] = mapped_column(String, primary_key=True, comment="Set code (e.g., 'sv1')")
    name: Mapped[str] = mapped_column(String, nullable=False)
    logo_image: Mapped[str | None] = mapped_column(String, nullable=True)
    symbol_image: Mapped[str | None] = mapped_column(String, nullable=True)
    release_date: Mapped[date | None] = mapped_column(
        DATE, nullable=True, comment="Used to order collection groups, newest first"
    )
    printed_total: Mapped[int | None] = mapped_column(
        INTEGER, nullable=True, comment="Card count printed on the cards"
    )
    total: Mapped[int | None] = mapped_column(
        INTEGER, nullable=True, comment="Card count including secret rares"
    )

    def __repr__(self) -> str:
        return f"<Edition id={self.id!r} name={self.name!r} released={self.release_date}>"
