"""Tests for UnitExecutor — one unit, one deadline, never raises."""

from __future__ import annotations

import asyncio

import pytest

from scatter.execution.executor import DEFAULT_DEADLINE_SECONDS, UnitExecutor
from scatter.execution.outcome import OutcomeStatus
from scatter.execution.transports import StubTransport
from scatter.execution.units import Unit


class _ExplodingTransport:
    """Raises something other than a TransportError."""

    async def fetch(self, target: str) -> str:
        raise RuntimeError(f"unexpected state for {target}")


class _CancelledTransport:
    async def fetch(self, target: str) -> str:
        raise asyncio.CancelledError


class TestConstruction:
    def test_default_deadline(self):
        assert UnitExecutor(StubTransport()).deadline_seconds == DEFAULT_DEADLINE_SECONDS == 5.0

    @pytest.mark.parametrize("value", [0, -2.0])
    def test_rejects_non_positive_deadline(self, value):
        with pytest.raises(ValueError):
            UnitExecutor(StubTransport(), deadline_seconds=value)


class TestExecute:
    @pytest.mark.asyncio
    async def test_success(self):
        executor = UnitExecutor(StubTransport(responses={"A": "Not Found"}))
        outcome = await executor.execute(Unit("A", 0))
        assert outcome.status is OutcomeStatus.SUCCESS
        assert outcome.message == "A -> Not Found"
        assert outcome.elapsed_seconds is not None

    @pytest.mark.asyncio
    async def test_transport_failure_becomes_outcome(self):
        executor = UnitExecutor(StubTransport(failures={"bad": "Name or service not known"}))
        outcome = await executor.execute(Unit("bad", 2))
        assert outcome.status is OutcomeStatus.FAILURE
        assert outcome.index == 2
        assert outcome.detail == "Name or service not known"
        assert outcome.error_type == "ConnectionError"

    @pytest.mark.asyncio
    async def test_unexpected_exception_becomes_outcome(self):
        outcome = await UnitExecutor(_ExplodingTransport()).execute(Unit("x", 0))
        assert outcome.status is OutcomeStatus.FAILURE
        assert outcome.detail == "unexpected state for x"
        assert outcome.error_type == "RuntimeError"

    @pytest.mark.asyncio
    async def test_hang_becomes_timeout(self):
        executor = UnitExecutor(StubTransport(hang={"slow"}), deadline_seconds=0.05)
        outcome = await executor.execute(Unit("slow", 0))
        assert outcome.status is OutcomeStatus.TIMEOUT
        assert outcome.detail == "timed out after 0.05s"

    @pytest.mark.asyncio
    async def test_per_call_deadline_overrides_default(self):
        executor = UnitExecutor(StubTransport(delays={"A": 0.2}), deadline_seconds=5.0)
        outcome = await executor.execute(Unit("A", 0), deadline=0.05)
        assert outcome.status is OutcomeStatus.TIMEOUT

    @pytest.mark.asyncio
    async def test_invalid_deadline_raises_before_fetch(self):
        transport = StubTransport()
        with pytest.raises(ValueError):
            await UnitExecutor(transport).execute(Unit("A", 0), deadline=0)
        assert transport.calls == []

    @pytest.mark.asyncio
    async def test_cancellation_propagates(self):
        with pytest.raises(asyncio.CancelledError):
            await UnitExecutor(_CancelledTransport()).execute(Unit("A", 0))


class TestLogging:
    @pytest.mark.asyncio
    async def test_failure_logged_as_warning(self, log_output):
        executor = UnitExecutor(StubTransport(failures={"bad": "refused"}))
        await executor.execute(Unit("bad", 0))
        events = [e for e in log_output.entries if e["event"] == "unit.failed"]
        assert len(events) == 1
        assert events[0]["log_level"] == "warning"
        assert events[0]["unit"] == "bad"
        assert events[0]["error"] == "refused"

    @pytest.mark.asyncio
    async def test_timeout_logged(self, log_output):
        executor = UnitExecutor(StubTransport(hang={"slow"}), deadline_seconds=0.02)
        await executor.execute(Unit("slow", 0))
        assert any(e["event"] == "unit.timed_out" for e in log_output.entries)
