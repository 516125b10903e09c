"""
Tests for engine/movers.py - Top cards, gainers/losers, watched cards.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from tcmarket.engine.movers import (
    PriceMove,
    build_watched_cards,
    compute_price_moves,
    rank_gainers,
    rank_losers,
    rank_top_cards,
)
from tcmarket.engine.types import CatalogCard, PriceSnapshot

D1 = date(2026, 10, 17)
D2 = date(2026, 10, 18)

CARDS = [
    CatalogCard(id="sv3-125", name="Charizard ex", edition_id="sv3", image_small="char.png"),
    CatalogCard(id="sv1-25", name="pikachu", edition_id="sv1"),
    CatalogCard(id="sv1-198", name="Miraidon ex", edition_id="sv1"),
]
EDITION_NAMES = {"sv1": "Scarlet & Violet", "sv3": "Obsidian Flames"}


def _snap(card_id: str, on: date, mid: str | None, **extra) -> PriceSnapshot:
    return PriceSnapshot(card_id=card_id, date=on, price_mid=mid, **extra)


def _move(card_id: str, diff: str, pct: str) -> PriceMove:
    return PriceMove(card_id=card_id, card_name=card_id, diff=Decimal(diff), diff_percent=Decimal(pct))


class TestRankTopCards:
    def test_orders_by_latest_mid(self) -> None:
        history = [
            _snap("sv1-25", D2, "3"),
            _snap("sv3-125", D1, "10"),
            _snap("sv3-125", D2, "80"),
            _snap("sv1-198", D2, "25"),
        ]

        top = rank_top_cards(history, CARDS, EDITION_NAMES)

        assert [c.card_id for c in top] == ["sv3-125", "sv1-198", "sv1-25"]
        assert top[0].price_mid == Decimal("80")
        assert top[0].card_name == "Charizard ex"
        assert top[0].edition_name == "Obsidian Flames"
        assert top[0].image_small == "char.png"

    def test_null_mid_skipped(self) -> None:
        top = rank_top_cards([_snap("sv1-25", D2, None), _snap("sv1-198", D2, "1")], CARDS)
        assert [c.card_id for c in top] == ["sv1-198"]

    def test_limit(self) -> None:
        history = [_snap(c.id, D2, str(i + 1)) for i, c in enumerate(CARDS)]
        assert len(rank_top_cards(history, CARDS, limit=2)) == 2

    def test_unknown_card_uses_id_as_name(self) -> None:
        (top,) = rank_top_cards([_snap("xx-1", D2, "4")], CARDS)
        assert top.card_name == "xx-1"
        assert top.edition_name is None


class TestComputePriceMoves:
    def test_diff_between_last_two_dates(self) -> None:
        history = [_snap("sv3-125", D1, "80"), _snap("sv3-125", D2, "100")]

        (move,) = compute_price_moves(history, CARDS, EDITION_NAMES)

        assert move.prev_price == Decimal("80")
        assert move.last_price == Decimal("100")
        assert move.diff == Decimal("20")
        assert move.diff_percent == Decimal("25")

    def test_single_snapshot_has_no_move(self) -> None:
        (move,) = compute_price_moves([_snap("sv1-25", D2, "3")], CARDS)
        assert move.prev_price is None
        assert move.diff == Decimal("0")
        assert move.diff_percent == Decimal("0")

    def test_zero_previous_price_guard(self) -> None:
        (move,) = compute_price_moves([_snap("sv1-25", D1, "0"), _snap("sv1-25", D2, "3")], CARDS)
        assert move.diff == Decimal("3")
        assert move.diff_percent == Decimal("0")

    def test_same_date_snapshots_are_not_a_move(self) -> None:
        history = [_snap("sv1-25", D2, "3"), _snap("sv1-25", D2, "4")]
        (move,) = compute_price_moves(history, CARDS)
        assert move.last_price == Decimal("4")
        assert move.prev_price is None


class TestRankMovers:
    MOVES = [
        _move("a", "5", "10"),
        _move("b", "-3", "-30"),
        _move("c", "5", "50"),
        _move("d", "0", "0"),
        _move("e", "-3", "-5"),
    ]

    def test_gainers(self) -> None:
        assert [m.card_id for m in rank_gainers(self.MOVES)] == ["c", "a", "d", "e", "b"]

    def test_losers(self) -> None:
        assert [m.card_id for m in rank_losers(self.MOVES)] == ["b", "e", "d", "a", "c"]

    def test_limit(self) -> None:
        assert [m.card_id for m in rank_gainers(self.MOVES, limit=1)] == ["c"]
        assert [m.card_id for m in rank_losers(self.MOVES, limit=2)] == ["b", "e"]


class TestBuildWatchedCards:
    def test_joins_latest_snapshot_and_sorts_by_name(self) -> None:
        history = [
            _snap("sv3-125", D1, "70", price_low="60", price_high="90"),
            _snap("sv3-125", D2, "75", price_low="65", price_high="95"),
        ]

        watched = build_watched_cards(CARDS, history, EDITION_NAMES)

        assert [w.card_name for w in watched] == ["Charizard ex", "Miraidon ex", "pikachu"]
        charizard = watched[0]
        assert charizard.price_mid == Decimal("75")
        assert charizard.price_low == Decimal("65")
        assert charizard.price_high == Decimal("95")
        assert charizard.last_updated == D2
        assert charizard.edition_name == "Obsidian Flames"

    def test_card_without_prices(self) -> None:
        (watched,) = build_watched_cards(CARDS[1:2], [])
        assert watched.price_mid is None
        assert watched.last_updated is None
        assert watched.edition_name is None
