"""
TCMarket - Client-side filter & sort for collection and trading listings

Applied in order:
    1. Case-insensitive substring filter on the item's name.
    2. One active sort key {name, release_date, value, owned_count} with an
       ascending/descending toggle.

Items only need ``name``, ``release_date``, ``total_value`` and
``owned_count`` attributes (EditionGroup and GroupedCard both qualify).
Missing release dates sort as the earliest date, missing values as 0.
Relative order of equal keys is unspecified.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Any, Callable, Protocol, Sequence, TypeVar

import structlog
from pydantic import BaseModel

from tcmarket.config import SortKey

logger = structlog.get_logger(__name__)


class Listable(Protocol):
    @property
    def name(self) -> str: ...

    @property
    def release_date(self) -> date | None: ...

    @property
    def total_value(self) -> Decimal: ...

    @property
    def owned_count(self) -> int: ...


T = TypeVar("T", bound=Listable)


class ListingQuery(BaseModel):
    """Filter/sort state of one listing. Defaults are the reset state."""
    search: str = ""
    sort_key: SortKey = SortKey.NAME
    descending: bool = False


_SORT_KEYS: dict[SortKey, Callable[[Any], Any]] = {
    SortKey.NAME: lambda item: (item.name or "").casefold(),
    SortKey.RELEASE_DATE: lambda item: item.release_date or date.min,
    SortKey.VALUE: lambda item: item.total_value if item.total_value is not None else Decimal("0"),
    SortKey.OWNED_COUNT: lambda item: item.owned_count,
}


def filter_by_name(items: Sequence[T], search: str) -> list[T]:
    """Keep items whose name contains ``search`` (case-insensitive)."""
    needle = search.strip().casefold()
    if not needle:
        return list(items)
    return [item for item in items if needle in (item.name or "").casefold()]


def sort_items(items: Sequence[T], sort_key: SortKey, descending: bool = False) -> list[T]:
    """Sort by a single key."""
    try:
        key_fn = _SORT_KEYS[SortKey(sort_key)]
    except (KeyError, ValueError):
        raise ValueError(f"Unknown sort key: {sort_key!r}") from None
    return sorted(items, key=key_fn, reverse=descending)


def apply_listing_query(items: Sequence[T], query: ListingQuery) -> list[T]:
    """Filter then sort."""
    filtered = filter_by_name(items, query.search)
    result = sort_items(filtered, query.sort_key, query.descending)
    logger.debug(
        "listing_query_applied",
        total=len(items),
        matched=len(result),
        search=query.search,
        sort_key=query.sort_key.value,
        descending=query.descending,
    )
    return result
