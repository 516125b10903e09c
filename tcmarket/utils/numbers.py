"""
TCMarket - Numeric coercion helpers

Prices reach us as Decimal from the ORM, but also as strings or floats from
query rows and CLI input. Everything is normalized to Decimal here.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any

import structlog

logger = structlog.get_logger(__name__)

_ZERO = Decimal("0")


def parse_decimal(value: Any, default: Decimal | None = _ZERO) -> Decimal | None:
    """
    Parse a price-like value into a Decimal.

    None and empty strings return ``default``. Values that cannot be parsed
    (or parse to NaN/Infinity) also return ``default`` and log a warning.

    Args:
        value: Decimal, int, float, str, or None.
        default: Fallback for missing or malformed input.

    Returns:
        The parsed Decimal, or ``default``.
    """
    if value is None:
        return default
    if isinstance(value, bool):
        # bool is an int subclass; a flag is never a price
        logger.warning("parse_decimal_rejected_bool", value=value)
        return default
    if isinstance(value, Decimal):
        result = value
    else:
        raw = str(value).strip()
        if not raw:
            return default
        try:
            result = Decimal(raw)
        except InvalidOperation:
            logger.warning("parse_decimal_malformed", value=raw)
            return default

    if not result.is_finite():
        logger.warning("parse_decimal_not_finite", value=str(value))
        return default
    return result


def parse_optional_price(value: Any) -> Decimal | None:
    """
    Parse a nullable price column.

    None stays None (no price recorded); a present but malformed value
    becomes 0.
    """
    if value is None:
        return None
    return parse_decimal(value, default=_ZERO)


def round_display(value: Decimal, places: int = 2) -> Decimal:
    """Round for presentation only. Engine totals are never rounded."""
    quantum = Decimal(1).scaleb(-places)
    return value.quantize(quantum, rounding=ROUND_HALF_UP)
