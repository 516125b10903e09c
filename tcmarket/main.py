"""
TCMarket - Application Entrypoint

Configures structlog, creates the async SQLAlchemy engine, and prints a
JSON valuation report for one user.

Run via:
    python -m tcmarket.main --user-id <uuid> [--as-of 2026-10-19]
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from datetime import date, datetime, timezone
from typing import Any

import structlog
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from tcmarket import __version__
from tcmarket.config import settings
from tcmarket.services.collection import CollectionService
from tcmarket.utils.numbers import round_display


# ---------------------------------------------------------------------------
# Structlog Configuration
# ---------------------------------------------------------------------------


def configure_logging(log_level: str = "INFO") -> None:
    """
    Set up structured logging with JSON output.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR).
    """
    # Logs go to stderr so stdout carries only the report
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, log_level.upper()),
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.JSONRenderer(),
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


# ---------------------------------------------------------------------------
# Database Setup
# ---------------------------------------------------------------------------


def create_db_engine(
    database_url: str | None = None,
) -> tuple[AsyncEngine, async_sessionmaker[AsyncSession]]:
    """
    Create SQLAlchemy async engine and session factory.

    Returns:
        (engine, session_factory) tuple.
    """
    logger = structlog.get_logger(__name__)
    url = database_url or settings.DATABASE_URL

    engine_kwargs: dict[str, Any] = {"echo": False, "pool_pre_ping": True}
    if not url.startswith("sqlite"):
        engine_kwargs["pool_size"] = settings.DB_POOL_SIZE
        engine_kwargs["max_overflow"] = settings.DB_MAX_OVERFLOW

    engine = create_async_engine(url, **engine_kwargs)
    session_factory = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )

    logger.info("database_engine_ready", dialect=engine.dialect.name)
    return engine, session_factory


# ---------------------------------------------------------------------------
# Report
# ---------------------------------------------------------------------------


async def build_report(
    service: CollectionService,
    user_id: str,
    as_of: date | None = None,
) -> dict[str, Any]:
    """Valuation, counts and per-edition summary as a JSON-ready dict."""
    places = settings.DISPLAY_DECIMAL_PLACES
    as_of = as_of or datetime.now(timezone.utc).date()
    valuation = await service.get_price_variation(user_id, as_of)
    counts = await service.get_collection_counts(user_id)
    groups = await service.get_cards_grouped_by_edition(user_id)

    return {
        "user_id": user_id,
        "as_of": as_of.isoformat(),
        "total_value": str(round_display(valuation.total_value, places)),
        "variation_percent": str(round_display(valuation.variation_percent, places)),
        "current_total": str(round_display(valuation.current_total, places)),
        "previous_total": str(round_display(valuation.previous_total, places)),
        "cards_with_both_prices": valuation.cards_with_both_prices,
        "cards": counts.cards,
        "editions": counts.editions,
        "by_edition": [
            {
                "edition_id": g.id,
                "name": g.name,
                "release_date": g.release_date.isoformat() if g.release_date else None,
                "owned": g.owned_count,
                "value": str(round_display(g.total_value, places)),
            }
            for g in groups
        ],
    }


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Print a collection valuation report for one user.",
    )
    parser.add_argument("--user-id", type=str, required=True, help="Auth user id.")
    parser.add_argument(
        "--as-of",
        type=date.fromisoformat,
        default=None,
        help="Valuation date YYYY-MM-DD (default: today, UTC).",
    )
    parser.add_argument(
        "--database-url",
        type=str,
        default=None,
        help="Override DATABASE_URL.",
    )
    return parser.parse_args(argv)


async def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    configure_logging(settings.LOG_LEVEL)
    logger = structlog.get_logger(__name__)

    logger.info("tcmarket_report_begin", version=__version__, user_id=args.user_id)

    engine, session_factory = create_db_engine(args.database_url)
    try:
        async with session_factory() as session:
            await session.execute(text("SELECT 1"))
        logger.info("database_health_check_passed")

        report = await build_report(CollectionService(session_factory), args.user_id, args.as_of)
        print(json.dumps(report, indent=2))
    except Exception as e:
        logger.error(
            "tcmarket_report_failed",
            error=str(e),
            error_type=type(e).__name__,
        )
        raise
    finally:
        await engine.dispose()


# ---------------------------------------------------------------------------
# CLI Entry
# ---------------------------------------------------------------------------


if __name__ == "__main__":
    asyncio.run(main())
