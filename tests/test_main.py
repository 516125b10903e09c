"""Tests for main.py - report assembly and CLI argument parsing."""

from __future__ import annotations

import datetime as dt
from decimal import Decimal

import pytest

from conftest import AS_OF, seed_catalog, seed_holding, seed_price
from tcmarket.main import build_report, create_db_engine, parse_args
from tcmarket.services.collection import CollectionService


class TestParseArgs:
    def test_required_user(self) -> None:
        with pytest.raises(SystemExit):
            parse_args([])

    def test_as_of_parsed_to_date(self) -> None:
        args = parse_args(["--user-id", "u1", "--as-of", "2026-10-19"])
        assert args.user_id == "u1"
        assert args.as_of == dt.date(2026, 10, 19)
        assert args.database_url is None


class TestCreateDbEngine:
    @pytest.mark.asyncio
    async def test_sqlite_url_skips_pool_sizing(self) -> None:
        engine, session_factory = create_db_engine("sqlite+aiosqlite:///:memory:")
        try:
            assert engine.dialect.name == "sqlite"
            async with session_factory() as session:
                assert session.bind is engine
        finally:
            await engine.dispose()


class TestBuildReport:
    @pytest.mark.asyncio
    async def test_report_values_rounded(self, session_factory, db_session, editions, cards) -> None:
        await seed_catalog(db_session, editions, cards)
        await seed_holding(db_session, "u1", "sv3-125")
        await seed_holding(db_session, "u1", "sv1-25", price=Decimal("0.333"))
        await seed_price(db_session, "sv3-125", AS_OF - dt.timedelta(days=10), Decimal("30"))
        await seed_price(db_session, "sv3-125", AS_OF - dt.timedelta(days=1), Decimal("40"))

        report = await build_report(CollectionService(session_factory), "u1", AS_OF)

        assert report["as_of"] == "2026-10-19"
        assert report["total_value"] == "40.33"
        assert report["variation_percent"] == "33.33"
        assert report["cards"] == 2
        assert report["editions"] == 2
        assert [g["edition_id"] for g in report["by_edition"]] == ["sv3", "sv1"]
        assert report["by_edition"][0]["value"] == "40.00"

    @pytest.mark.asyncio
    async def test_empty_report(self, session_factory) -> None:
        report = await build_report(CollectionService(session_factory), "nobody", AS_OF)

        assert report["total_value"] == "0.00"
        assert report["variation_percent"] == "0.00"
        assert report["by_edition"] == []
