"""Deadline enforcement for unit execution.

Every unit carries its own deadline, enforced where the unit runs rather
than by the caller. One unit timing out never cancels or delays another.

Architecture:
    ::

        async with with_deadline(5.0, "GET http://x") as ctx:
            status = await transport.fetch("http://x")
        # raises UnitTimeoutError if > 5 seconds; the in-flight
        # fetch is cancelled (abandoned) at expiry
                          │
                          │ uses
                          ▼
        asyncio.timeout  - native async timeout, cancels the awaiting task

Examples:
    >>> result = await run_with_deadline(transport.fetch(url), 2.0, operation=url)

    Check remaining time:

    >>> async with with_deadline(30.0) as ctx:
    ...     if ctx.remaining() < 5.0:
    ...         skip_optional_work()
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import TypeVar

from scatter.core.errors import UnitTimeoutError

T = TypeVar("T")


@dataclass
class DeadlineContext:
    """Context for tracking deadline state.

    Attributes:
        deadline: Absolute deadline timestamp (monotonic clock)
        timeout_seconds: Original timeout value in seconds
        operation: Name/description of the operation
        start_time: When the deadline context started
    """

    deadline: float
    timeout_seconds: float
    operation: str = "operation"
    start_time: float = field(default_factory=time.monotonic)

    def remaining(self) -> float:
        """Seconds left before the deadline (negative once expired)."""
        return self.deadline - time.monotonic()

    @property
    def elapsed(self) -> float:
        """Elapsed time since start in seconds."""
        return time.monotonic() - self.start_time

    def is_expired(self) -> bool:
        """True if deadline has passed."""
        return time.monotonic() >= self.deadline


def _validate(seconds: float) -> None:
    if seconds <= 0:
        raise ValueError(f"Timeout must be positive, got {seconds}")


@asynccontextmanager
async def with_deadline(seconds: float, operation: str | None = None):
    """Async context manager enforcing a time limit on the enclosed block.

    Args:
        seconds: Maximum time allowed
        operation: Name/description for error messages

    Yields:
        DeadlineContext for checking remaining time

    Raises:
        UnitTimeoutError: If the deadline is exceeded
        ValueError: If seconds <= 0
    """
    _validate(seconds)
    now = time.monotonic()
    ctx = DeadlineContext(
        deadline=now + seconds,
        timeout_seconds=seconds,
        operation=operation or "operation",
        start_time=now,
    )
    scope = asyncio.timeout(seconds)
    try:
        async with scope:
            yield ctx
    except TimeoutError:
        if not scope.expired():
            # raised by the block itself, not by our deadline
            raise
        raise UnitTimeoutError(seconds, elapsed=ctx.elapsed).with_context(
            operation=ctx.operation
        ) from None


async def run_with_deadline(
    awaitable: Awaitable[T],
    timeout_seconds: float,
    operation: str | None = None,
) -> T:
    """Await *awaitable*, abandoning it once ``timeout_seconds`` elapse.

    Raises:
        UnitTimeoutError: If execution exceeds the deadline
        Exception: Any exception raised by the awaitable
    """
    async with with_deadline(timeout_seconds, operation):
        return await awaitable


__all__ = ["DeadlineContext", "with_deadline", "run_with_deadline"]
