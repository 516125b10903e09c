from tcmarket.engine.grouping import build_edition_detail, group_holdings_by_edition
from tcmarket.engine.listing import ListingQuery, apply_listing_query
from tcmarket.engine.movers import (
    build_watched_cards,
    compute_price_moves,
    rank_gainers,
    rank_losers,
    rank_top_cards,
)
from tcmarket.engine.types import CatalogCard, Edition, Holding, PriceSnapshot, ValuationResult
from tcmarket.engine.valuation import compute_total_value, compute_variation, latest_snapshot

__all__ = [
    "CatalogCard",
    "Edition",
    "Holding",
    "ListingQuery",
    "PriceSnapshot",
    "ValuationResult",
    "apply_listing_query",
    "build_edition_detail",
    "build_watched_cards",
    "compute_price_moves",
    "compute_total_value",
    "compute_variation",
    "group_holdings_by_edition",
    "latest_snapshot",
    "rank_gainers",
    "rank_losers",
    "rank_top_cards",
]
