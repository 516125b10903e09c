"""
TCMarket - Request sequencing (latest request wins)

Each refresh for a key takes a token from a per-key counter. When the
response arrives it may only be applied if its token is still the newest
one issued for that key, so a slow superseded request can never overwrite
the result of a newer one.
"""

from __future__ import annotations

from typing import Awaitable, Generic, TypeVar

import structlog

logger = structlog.get_logger(__name__)

T = TypeVar("T")


class RequestSequencer(Generic[T]):
    """
    Per-key request tokens plus the last applied result.

    Usage:
        token = sequencer.issue(user_id)
        result = await fetch(...)
        if sequencer.apply(user_id, token, result):
            ...  # result is now the current state
    """

    def __init__(self) -> None:
        self._issued: dict[str, int] = {}
        self._applied: dict[str, T] = {}

    def issue(self, key: str) -> int:
        """Start a new request for ``key`` and return its token."""
        token = self._issued.get(key, 0) + 1
        self._issued[key] = token
        return token

    def is_current(self, key: str, token: int) -> bool:
        return self._issued.get(key) == token

    def apply(self, key: str, token: int, result: T) -> bool:
        """
        Store ``result`` if ``token`` is still the newest for ``key``.

        Returns:
            True when applied, False when the request was superseded.
        """
        if not self.is_current(key, token):
            logger.info(
                "stale_response_discarded",
                key=key,
                token=token,
                latest_token=self._issued.get(key),
            )
            return False
        self._applied[key] = result
        return True

    def current(self, key: str) -> T | None:
        """Last applied result for ``key``, if any."""
        return self._applied.get(key)

    async def run(self, key: str, request: Awaitable[T]) -> T | None:
        """
        Await ``request`` under a fresh token.

        Returns:
            The result when it was applied, None when superseded.
        """
        token = self.issue(key)
        result = await request
        if self.apply(key, token, result):
            return result
        return None
