"""Run records - one execution of a strategy over the full unit set.

A Run moves through a strict state machine and ends with exactly one
Outcome per unit. The record doubles as the completion signal returned by
every dispatcher entry point.

Valid transition graph::

    PENDING   → RUNNING
    RUNNING   → COMPLETED
    COMPLETED → (terminal)

There is no FAILED state: unit failures are outcomes, not run failures, and
no retry path leads back to PENDING.
"""

from __future__ import annotations

import uuid
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from scatter.core.errors import InvalidTransitionError

from .outcome import Outcome, OutcomeStatus


class RunStatus(str, Enum):
    """Run lifecycle state."""

    PENDING = "pending"  # Created, no unit started
    RUNNING = "running"  # Some units in flight
    COMPLETED = "completed"  # Every unit produced an outcome


RUN_VALID_TRANSITIONS: dict[RunStatus, frozenset[RunStatus]] = {
    RunStatus.PENDING: frozenset({RunStatus.RUNNING}),
    RunStatus.RUNNING: frozenset({RunStatus.COMPLETED}),
    RunStatus.COMPLETED: frozenset(),  # terminal
}


def validate_run_transition(current: RunStatus, target: RunStatus) -> None:
    """Raise :class:`InvalidTransitionError` if *current → target* is illegal.

    Example:
        >>> validate_run_transition(RunStatus.RUNNING, RunStatus.COMPLETED)
        >>> validate_run_transition(RunStatus.COMPLETED, RunStatus.RUNNING)
        InvalidTransitionError: Invalid RunStatus transition: completed → running
    """
    allowed = RUN_VALID_TRANSITIONS.get(current, frozenset())
    if target not in allowed:
        raise InvalidTransitionError(current.value, target.value, "RunStatus")


@dataclass
class RunRecord:
    """Execution state of one Run.

    Example:
        >>> run = RunRecord.new("as_completed", total=6)
        >>> run.mark_started()
        >>> run.mark_completed(delivered)
        >>> run.succeeded, run.failed, run.timed_out
        (4, 1, 1)
    """

    run_id: str
    """Unique identifier for this run (UUID)"""

    strategy: str
    """Strategy name the run executed"""

    total: int
    """Number of units in the run"""

    status: RunStatus = RunStatus.PENDING

    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    started_at: datetime | None = None
    completed_at: datetime | None = None
    duration_seconds: float | None = None

    # === RESULTS ===
    outcomes: tuple[Outcome, ...] = ()
    """Ordered outcomes for collect strategies; empty for stream strategies"""

    delivered: int = 0
    succeeded: int = 0
    failed: int = 0
    timed_out: int = 0

    @classmethod
    def new(cls, strategy: str, total: int) -> RunRecord:
        return cls(run_id=str(uuid.uuid4()), strategy=strategy, total=total)

    def _transition_to(self, target: RunStatus) -> None:
        validate_run_transition(self.status, target)
        self.status = target

    def mark_started(self) -> None:
        """Mark run as started.

        Raises:
            InvalidTransitionError: If current status is not PENDING.
        """
        self._transition_to(RunStatus.RUNNING)
        self.started_at = datetime.now(UTC)

    def mark_completed(
        self,
        outcomes: Sequence[Outcome] = (),
        *,
        keep: bool = False,
        delivered: int | None = None,
    ) -> None:
        """Mark run as completed and tally its outcomes.

        Args:
            outcomes: Every outcome the run produced.
            keep: Store ``outcomes`` on the record (collect strategies).
            delivered: Number of pushes made to the sink, when it differs
                from ``len(outcomes)``.

        Raises:
            InvalidTransitionError: If current status is not RUNNING.
        """
        self._transition_to(RunStatus.COMPLETED)
        self.completed_at = datetime.now(UTC)
        if self.started_at:
            self.duration_seconds = (self.completed_at - self.started_at).total_seconds()
        self.delivered = len(outcomes) if delivered is None else delivered
        self.succeeded = sum(1 for o in outcomes if o.status is OutcomeStatus.SUCCESS)
        self.failed = sum(1 for o in outcomes if o.status is OutcomeStatus.FAILURE)
        self.timed_out = sum(1 for o in outcomes if o.status is OutcomeStatus.TIMEOUT)
        if keep:
            self.outcomes = tuple(outcomes)

    @property
    def is_complete(self) -> bool:
        return self.status is RunStatus.COMPLETED

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for JSON output."""
        return {
            "run_id": self.run_id,
            "strategy": self.strategy,
            "status": self.status.value,
            "total": self.total,
            "delivered": self.delivered,
            "succeeded": self.succeeded,
            "failed": self.failed,
            "timed_out": self.timed_out,
            "created_at": self.created_at.isoformat(),
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "duration_seconds": self.duration_seconds,
            "outcomes": [o.to_dict() for o in self.outcomes],
        }


__all__ = [
    "RunStatus",
    "RUN_VALID_TRANSITIONS",
    "validate_run_transition",
    "RunRecord",
]
