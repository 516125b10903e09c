"""
TCMarket - Collection Valuation & Price Variation

Two pure functions over a user's holdings and the market price series:

compute_total_value:
    Sum over holdings. A manual price wins unconditionally (even 0);
    otherwise the latest snapshot's price_mid; otherwise 0.

compute_variation:
    Market-only movement between two cutoffs:
        current_cutoff  = as_of
        previous_cutoff = as_of - VARIATION_LOOKBACK_DAYS (8)
    For each holding (copies are NOT deduplicated) the latest snapshot at or
    before each cutoff supplies the price when its price_mid is non-null.
    Manual prices are ignored here.

    current_total / previous_total sum every available price.
    variation_percent compares the holdings priced at both cutoffs:
        (paired_current - paired_previous) / paired_previous * 100
    and is 0 when previous_total == 0 or no holding has both prices.

Same-date snapshots: the one with a non-null price_mid wins, then the
highest price_mid. See latest_snapshot().
"""

from __future__ import annotations

from collections import defaultdict
from datetime import date, timedelta
from decimal import Decimal
from typing import Iterable, Sequence

import structlog

from tcmarket.config import settings
from tcmarket.engine.types import Holding, PriceSnapshot, ValuationResult

logger = structlog.get_logger(__name__)

_ZERO = Decimal("0")
_HUNDRED = Decimal("100")


def _recency_key(snapshot: PriceSnapshot) -> tuple[date, bool, Decimal]:
    mid = snapshot.price_mid
    return (snapshot.date, mid is not None, mid if mid is not None else _ZERO)


def latest_snapshot(
    snapshots: Iterable[PriceSnapshot],
    on_or_before: date | None = None,
) -> PriceSnapshot | None:
    """
    Pick the most recent snapshot, optionally bounded by a cutoff date.

    Ties on date resolve to the snapshot with a non-null price_mid, then to
    the highest price_mid, so the result never depends on input order.

    Args:
        snapshots: Snapshots for a single card.
        on_or_before: Inclusive upper bound on snapshot date.

    Returns:
        The winning snapshot, or None when nothing qualifies.
    """
    best: PriceSnapshot | None = None
    for snapshot in snapshots:
        if on_or_before is not None and snapshot.date > on_or_before:
            continue
        if best is None or _recency_key(snapshot) > _recency_key(best):
            best = snapshot
    return best


def index_by_card(
    price_history: Iterable[PriceSnapshot],
) -> dict[str, list[PriceSnapshot]]:
    """Bucket snapshots per card_id, preserving input order."""
    by_card: dict[str, list[PriceSnapshot]] = defaultdict(list)
    for snapshot in price_history:
        by_card[snapshot.card_id].append(snapshot)
    return dict(by_card)


def latest_prices(
    price_history: Iterable[PriceSnapshot],
    on_or_before: date | None = None,
) -> dict[str, PriceSnapshot]:
    """Latest snapshot per card (same tie-break as latest_snapshot)."""
    latest: dict[str, PriceSnapshot] = {}
    for card_id, snapshots in index_by_card(price_history).items():
        found = latest_snapshot(snapshots, on_or_before)
        if found is not None:
            latest[card_id] = found
    return latest


def holding_value(
    holding: Holding,
    latest_by_card: dict[str, PriceSnapshot],
) -> Decimal:
    """
    Value of one holding: manual price, else latest market mid, else 0.
    """
    if holding.price is not None:
        return holding.price
    snapshot = latest_by_card.get(holding.card_id)
    if snapshot is None or snapshot.price_mid is None:
        return _ZERO
    return snapshot.price_mid


def compute_total_value(
    holdings: Sequence[Holding],
    price_history: Sequence[PriceSnapshot],
) -> Decimal:
    """
    Total value of a collection.

    No rounding is applied; presentation formats to 2 decimals.

    Args:
        holdings: One entry per physical card.
        price_history: Snapshots for (at least) the held cards.

    Returns:
        Sum of per-holding values. 0 for an empty collection.
    """
    if not holdings:
        return _ZERO

    latest_by_card = latest_prices(price_history)
    total = sum((holding_value(h, latest_by_card) for h in holdings), _ZERO)

    logger.debug(
        "total_value_computed",
        holdings=len(holdings),
        priced_cards=len(latest_by_card),
        total=str(total),
    )
    return total


def compute_variation(
    holdings: Sequence[Holding],
    price_history: Sequence[PriceSnapshot],
    as_of: date,
    lookback_days: int | None = None,
) -> ValuationResult:
    """
    Percentage change of market value over the trailing window.

    Args:
        holdings: One entry per physical card; manual prices are ignored
            for the variation but still count toward total_value.
        price_history: Snapshots for the held cards.
        as_of: Current cutoff (inclusive).
        lookback_days: Override for VARIATION_LOOKBACK_DAYS.

    Returns:
        ValuationResult. variation_percent is 0 when there is no usable
        previous-period data.
    """
    if not holdings:
        return ValuationResult.zero()

    days = lookback_days if lookback_days is not None else settings.VARIATION_LOOKBACK_DAYS
    current_cutoff = as_of
    previous_cutoff = as_of - timedelta(days=days)

    by_card = index_by_card(price_history)
    current_price: dict[str, Decimal] = {}
    previous_price: dict[str, Decimal] = {}
    for card_id in {h.card_id for h in holdings}:
        snapshots = by_card.get(card_id, [])
        current = latest_snapshot(snapshots, current_cutoff)
        if current is not None and current.price_mid is not None:
            current_price[card_id] = current.price_mid
        previous = latest_snapshot(snapshots, previous_cutoff)
        if previous is not None and previous.price_mid is not None:
            previous_price[card_id] = previous.price_mid

    current_total = _ZERO
    previous_total = _ZERO
    paired_current = _ZERO
    paired_previous = _ZERO
    cards_with_both_prices = 0

    for holding in holdings:
        cur = current_price.get(holding.card_id)
        prev = previous_price.get(holding.card_id)
        if cur is not None:
            current_total += cur
        if prev is not None:
            previous_total += prev
        if cur is not None and prev is not None:
            cards_with_both_prices += 1
            paired_current += cur
            paired_previous += prev

    total_value = compute_total_value(
        holdings, [s for s in price_history if s.date <= current_cutoff]
    )

    if previous_total == _ZERO or cards_with_both_prices == 0 or paired_previous == _ZERO:
        logger.debug(
            "variation_insufficient_history",
            holdings=len(holdings),
            previous_total=str(previous_total),
            cards_with_both_prices=cards_with_both_prices,
            previous_cutoff=previous_cutoff.isoformat(),
        )
        variation = _ZERO
    else:
        variation = (paired_current - paired_previous) / paired_previous * _HUNDRED

    logger.debug(
        "variation_computed",
        holdings=len(holdings),
        current_total=str(current_total),
        previous_total=str(previous_total),
        cards_with_both_prices=cards_with_both_prices,
        variation_percent=str(variation),
        as_of=as_of.isoformat(),
    )

    return ValuationResult(
        total_value=total_value,
        variation_percent=variation,
        current_total=current_total,
        previous_total=previous_total,
        cards_with_both_prices=cards_with_both_prices,
    )
