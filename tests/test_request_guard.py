"""
Tests for utils/request_guard.py - latest request wins.

Concurrency is simulated with asyncio.Event so the completion order is
controlled by the test, not by the scheduler.
"""

from __future__ import annotations

import asyncio

import pytest

from tcmarket.utils.request_guard import RequestSequencer


class TestTokens:
    def test_tokens_increase_per_key(self) -> None:
        seq: RequestSequencer[int] = RequestSequencer()
        assert seq.issue("u1") == 1
        assert seq.issue("u1") == 2
        assert seq.issue("u2") == 1

    def test_only_latest_token_applies(self) -> None:
        seq: RequestSequencer[str] = RequestSequencer()
        first = seq.issue("u1")
        second = seq.issue("u1")

        assert seq.apply("u1", second, "new") is True
        assert seq.apply("u1", first, "old") is False
        assert seq.current("u1") == "new"

    def test_keys_are_independent(self) -> None:
        seq: RequestSequencer[str] = RequestSequencer()
        a = seq.issue("u1")
        seq.issue("u2")
        assert seq.apply("u1", a, "a") is True
        assert seq.current("u2") is None

    def test_unknown_token_rejected(self) -> None:
        seq: RequestSequencer[str] = RequestSequencer()
        assert seq.apply("u1", 1, "x") is False
        assert seq.current("u1") is None


class TestRun:
    @pytest.mark.asyncio
    async def test_slow_superseded_request_is_discarded(self) -> None:
        seq: RequestSequencer[str] = RequestSequencer()
        release_slow = asyncio.Event()

        async def slow() -> str:
            await release_slow.wait()
            return "stale"

        async def fast() -> str:
            return "fresh"

        slow_task = asyncio.create_task(seq.run("u1", slow()))
        await asyncio.sleep(0)  # let slow() take its token first

        assert await seq.run("u1", fast()) == "fresh"

        release_slow.set()
        assert await slow_task is None
        assert seq.current("u1") == "fresh"

    @pytest.mark.asyncio
    async def test_sequential_runs_all_apply(self) -> None:
        seq: RequestSequencer[int] = RequestSequencer()

        async def value(v: int) -> int:
            return v

        assert await seq.run("u1", value(1)) == 1
        assert await seq.run("u1", value(2)) == 2
        assert seq.current("u1") == 2
