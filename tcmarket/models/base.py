"""
SQLAlchemy 2.0 async DeclarativeBase for TCMarket.

All models inherit from this Base.
"""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base class for all TCMarket database models."""
    pass
