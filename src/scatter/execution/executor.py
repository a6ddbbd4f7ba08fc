"""Unit Executor - run one unit under a deadline, never raise.

The executor is the single boundary where unit-level failures stop being
exceptions. Whatever the transport does (returns, raises a
``TransportError``, raises something unexpected, or never answers) the
caller receives an :class:`~scatter.execution.outcome.Outcome`.

ARCHITECTURE
────────────
::

    UnitExecutor(transport, deadline_seconds=5.0)
      └── await execute(unit, deadline=None) -> Outcome
            ├── run_with_deadline(transport.fetch(unit.target))
            ├── str result          → Outcome.success
            ├── UnitTimeoutError    → Outcome.timeout
            └── any other Exception → Outcome.failure (root-cause message)

Task cancellation (``asyncio.CancelledError``) is not a unit failure and is
allowed to propagate so that an enclosing run can still be torn down.
"""

from __future__ import annotations

import time

from scatter.core.errors import UnitTimeoutError, describe_error, root_cause
from scatter.core.logging import get_logger

from .outcome import Outcome
from .timeout import run_with_deadline
from .transports import Transport
from .units import Unit

logger = get_logger(__name__)

DEFAULT_DEADLINE_SECONDS = 5.0


class UnitExecutor:
    """Executes one unit per call with a per-unit deadline.

    Parameters
    ----------
    transport : Transport
        Performs the single network operation per call.
    deadline_seconds : float
        Default deadline applied when ``execute`` is called without one.
    """

    def __init__(
        self,
        transport: Transport,
        deadline_seconds: float = DEFAULT_DEADLINE_SECONDS,
    ) -> None:
        if deadline_seconds <= 0:
            raise ValueError(f"deadline_seconds must be positive, got {deadline_seconds}")
        self.transport = transport
        self.deadline_seconds = deadline_seconds

    async def execute(self, unit: Unit, deadline: float | None = None) -> Outcome:
        """Execute *unit* and return its outcome.

        Args:
            unit: The unit to fetch.
            deadline: Seconds allowed for this unit; defaults to
                ``deadline_seconds``.

        Raises:
            ValueError: If the deadline is not positive (a caller error,
                raised before any fetch starts).
        """
        limit = deadline if deadline is not None else self.deadline_seconds
        if limit <= 0:
            raise ValueError(f"deadline must be positive, got {limit}")
        start = time.monotonic()
        try:
            detail = await run_with_deadline(
                self.transport.fetch(unit.target), limit, operation=unit.target
            )
        except UnitTimeoutError:
            elapsed = time.monotonic() - start
            logger.warning("unit.timed_out", unit=unit.target, deadline=limit)
            return Outcome.timeout(unit, limit, elapsed=elapsed)
        except Exception as e:
            elapsed = time.monotonic() - start
            reason = describe_error(e)
            logger.warning(
                "unit.failed",
                unit=unit.target,
                error=reason,
                error_type=type(e).__name__,
            )
            return Outcome.failure(
                unit,
                reason,
                error_type=type(root_cause(e)).__name__,
                elapsed=elapsed,
            )

        elapsed = time.monotonic() - start
        logger.debug("unit.completed", unit=unit.target, detail=detail, elapsed=elapsed)
        return Outcome.success(unit, str(detail), elapsed=elapsed)


__all__ = ["UnitExecutor", "DEFAULT_DEADLINE_SECONDS"]
