"""Tests for per-unit deadline enforcement."""

from __future__ import annotations

import asyncio

import pytest

from scatter.core.errors import UnitTimeoutError
from scatter.execution.timeout import DeadlineContext, run_with_deadline, with_deadline


class TestDeadlineContext:
    def test_remaining_and_expiry(self):
        import time

        now = time.monotonic()
        ctx = DeadlineContext(deadline=now + 60, timeout_seconds=60, start_time=now)
        assert 0 < ctx.remaining() <= 60
        assert not ctx.is_expired()
        assert ctx.elapsed >= 0

    def test_expired(self):
        import time

        ctx = DeadlineContext(deadline=time.monotonic() - 1, timeout_seconds=1)
        assert ctx.is_expired()
        assert ctx.remaining() < 0


class TestWithDeadline:
    @pytest.mark.asyncio
    async def test_completes_within_deadline(self):
        async with with_deadline(1.0, "fast") as ctx:
            await asyncio.sleep(0)
        assert ctx.operation == "fast"
        assert ctx.timeout_seconds == 1.0

    @pytest.mark.asyncio
    async def test_expiry_raises_unit_timeout(self):
        with pytest.raises(UnitTimeoutError) as exc:
            async with with_deadline(0.05, "GET http://slow"):
                await asyncio.sleep(5)
        assert exc.value.timeout == 0.05
        assert exc.value.elapsed >= 0.04
        assert exc.value.context.metadata["operation"] == "GET http://slow"

    @pytest.mark.asyncio
    async def test_foreign_timeout_error_propagates_unchanged(self):
        with pytest.raises(TimeoutError) as exc:
            async with with_deadline(5.0):
                raise TimeoutError("from the block")
        assert not isinstance(exc.value, UnitTimeoutError)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("seconds", [0, -1])
    async def test_non_positive_rejected(self, seconds):
        with pytest.raises(ValueError):
            async with with_deadline(seconds):
                pass


class TestRunWithDeadline:
    @pytest.mark.asyncio
    async def test_returns_result(self):
        async def work():
            await asyncio.sleep(0.01)
            return "OK"

        assert await run_with_deadline(work(), 1.0) == "OK"

    @pytest.mark.asyncio
    async def test_propagates_errors(self):
        async def boom():
            raise ConnectionError("refused")

        with pytest.raises(ConnectionError):
            await run_with_deadline(boom(), 1.0)

    @pytest.mark.asyncio
    async def test_never_completing_awaitable_times_out(self):
        with pytest.raises(UnitTimeoutError):
            await run_with_deadline(asyncio.Event().wait(), 0.05)

    @pytest.mark.asyncio
    async def test_one_timeout_does_not_affect_sibling(self):
        async def slow():
            return await run_with_deadline(asyncio.sleep(5, result="late"), 0.05)

        async def quick():
            return await run_with_deadline(asyncio.sleep(0.1, result="OK"), 1.0)

        results = await asyncio.gather(slow(), quick(), return_exceptions=True)
        assert isinstance(results[0], UnitTimeoutError)
        assert results[1] == "OK"
