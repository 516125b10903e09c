"""
TCMarket - Register a card in a user's collection

Creates one user_cards row (one physical copy). Run it once per copy.

Usage:
    python scripts/add_holding.py --user-id 6f1c... --card-id sv1-25
    python scripts/add_holding.py --user-id 6f1c... --card-id sv1-25 --condition LP --price 12.50
"""

from __future__ import annotations

import argparse
import asyncio
import os
import sys

# Resolve project root so this script can be run from any working directory
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from tcmarket.config import CardCondition, settings
from tcmarket.engine.types import Holding
from tcmarket.main import configure_logging, create_db_engine
from tcmarket.store.catalog import fetch_card
from tcmarket.store.holdings import add_holding


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Add one physical card to a user's collection (user_cards row).",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python scripts/add_holding.py --user-id 6f1c0e2a --card-id sv1-25
  python scripts/add_holding.py --user-id 6f1c0e2a --card-id sv3-199 --condition EX --price 40
""",
    )
    parser.add_argument("--user-id", type=str, required=True, help="Auth user id of the owner.")
    parser.add_argument(
        "--card-id",
        type=str,
        required=True,
        help="Official card id in {set_code}-{card_number} format (e.g., sv1-25).",
    )
    parser.add_argument(
        "--condition",
        type=str,
        default=settings.DEFAULT_CONDITION.value,
        choices=[c.value for c in CardCondition],
        help=f"Card condition (default: {settings.DEFAULT_CONDITION.value}).",
    )
    parser.add_argument(
        "--price",
        type=str,
        default=None,
        help="Optional manual price; overrides the market price in valuations.",
    )
    return parser.parse_args()


async def create_holding(
    user_id: str,
    card_id: str,
    condition: str,
    price: str | None,
) -> Holding:
    """Insert the row after checking the card exists in the catalog."""
    engine, session_factory = create_db_engine()
    try:
        async with session_factory() as session:
            if await fetch_card(card_id, session) is None:
                raise ValueError(f"Unknown card id: {card_id}")
            return await add_holding(user_id, card_id, session, condition=condition, price=price)
    finally:
        await engine.dispose()


async def main() -> None:
    args = parse_args()
    configure_logging(settings.LOG_LEVEL)

    print(f"Adding card: user_id={args.user_id}, card_id={args.card_id}, condition={args.condition}")

    try:
        holding = await create_holding(
            user_id=args.user_id,
            card_id=args.card_id,
            condition=args.condition,
            price=args.price,
        )
    except Exception as e:
        print(f"Failed to add card: {e}", file=sys.stderr)
        sys.exit(1)

    print("Card added successfully.")
    print(f"  user_cards.id = {holding.id}")
    print(f"  card_id       = {holding.card_id}")
    print(f"  condition     = {holding.condition}")
    if holding.price is not None:
        print(f"  manual price  = {holding.price}")


if __name__ == "__main__":
    asyncio.run(main())
