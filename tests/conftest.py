"""
Shared pytest fixtures for scatter tests.

This module provides:
- Logging and settings isolation (autouse)
- Stub transports with deterministic latencies
- Unit sets and executors built on top of them

Usage:
    Fixtures are auto-discovered by pytest. Use them as function arguments:

    @pytest.mark.asyncio
    async def test_something(abc_dispatcher):
        outcomes = await abc_dispatcher.get_all_parallel()
"""

from __future__ import annotations

from collections.abc import Iterator

import pytest
import structlog
from structlog.testing import LogCapture

from scatter.core.logging import clear_context
from scatter.core.settings import ScatterSettings, reset_settings
from scatter.execution import Dispatcher, StubTransport, UnitExecutor, UnitSet

# A(30ms), B(10ms), C(20ms): completion order is B, C, A
ABC_DELAYS = {"A": 0.03, "B": 0.01, "C": 0.02}


# =============================================================================
# Isolation
# =============================================================================


@pytest.fixture(autouse=True)
def quiet_logging() -> Iterator[None]:
    """Route structlog output nowhere; capture_logs() still sees events."""
    structlog.configure(logger_factory=structlog.ReturnLoggerFactory())
    clear_context()
    yield
    clear_context()
    structlog.reset_defaults()


@pytest.fixture(autouse=True)
def clean_settings(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Drop cached settings and keep a developer's .env out of the tests."""
    monkeypatch.setitem(ScatterSettings.model_config, "env_file", None)
    reset_settings()
    yield
    reset_settings()


# =============================================================================
# Transports / executors
# =============================================================================


@pytest.fixture
def settings() -> ScatterSettings:
    return ScatterSettings()


@pytest.fixture
def abc_transport() -> StubTransport:
    return StubTransport(delays=ABC_DELAYS)


@pytest.fixture
def abc_units() -> UnitSet:
    return UnitSet.of(["A", "B", "C"])


@pytest.fixture
def abc_executor(abc_transport: StubTransport) -> UnitExecutor:
    return UnitExecutor(abc_transport, deadline_seconds=2.0)


@pytest.fixture
def abc_dispatcher(
    abc_units: UnitSet, abc_executor: UnitExecutor, settings: ScatterSettings
) -> Dispatcher:
    return Dispatcher(abc_units, abc_executor, settings=settings)


@pytest.fixture
def mixed_transport() -> StubTransport:
    """One success, one unreachable host, one hang."""
    return StubTransport(
        delays={"ok": 0.01},
        failures={"bad": "Name or service not known"},
        hang={"slow"},
    )


@pytest.fixture
def mixed_dispatcher(mixed_transport: StubTransport, settings: ScatterSettings) -> Dispatcher:
    executor = UnitExecutor(mixed_transport, deadline_seconds=0.1)
    return Dispatcher(["ok", "bad", "slow"], executor, settings=settings)


@pytest.fixture
def log_output() -> LogCapture:
    """Capture structlog events (with bound contextvars) as dicts."""
    capture = LogCapture()
    structlog.configure(
        processors=[structlog.contextvars.merge_contextvars, capture],
        logger_factory=structlog.ReturnLoggerFactory(),
    )
    return capture
