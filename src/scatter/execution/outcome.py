"""Outcomes - the terminal, non-raising result of executing one unit.

An Outcome is a value, never an exception: a success payload and a failure
description travel through sinks by exactly the same mechanism, and only
``status`` (and the text of ``detail``) tells them apart.

Listener format::

    http://www.google.com -> OK
    http://wwjs.badurlwillerror.netf -> [Errno -2] Name or service not known
    http://slow.example -> timed out after 5s
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from .units import Unit


class OutcomeStatus(str, Enum):
    """How a unit's execution ended."""

    SUCCESS = "success"
    FAILURE = "failure"
    TIMEOUT = "timeout"


@dataclass(frozen=True, slots=True)
class Outcome:
    """Result of executing one unit, keyed by the originating unit."""

    unit: str
    index: int
    status: OutcomeStatus
    detail: str
    error_type: str | None = None
    elapsed_seconds: float | None = None

    @classmethod
    def success(cls, unit: Unit, detail: str, elapsed: float | None = None) -> Outcome:
        return cls(
            unit=unit.target,
            index=unit.index,
            status=OutcomeStatus.SUCCESS,
            detail=detail,
            elapsed_seconds=elapsed,
        )

    @classmethod
    def failure(
        cls,
        unit: Unit,
        detail: str,
        error_type: str | None = None,
        elapsed: float | None = None,
    ) -> Outcome:
        return cls(
            unit=unit.target,
            index=unit.index,
            status=OutcomeStatus.FAILURE,
            detail=detail,
            error_type=error_type,
            elapsed_seconds=elapsed,
        )

    @classmethod
    def timeout(cls, unit: Unit, deadline: float, elapsed: float | None = None) -> Outcome:
        return cls(
            unit=unit.target,
            index=unit.index,
            status=OutcomeStatus.TIMEOUT,
            detail=f"timed out after {deadline:g}s",
            error_type="UnitTimeoutError",
            elapsed_seconds=elapsed,
        )

    @property
    def ok(self) -> bool:
        return self.status is OutcomeStatus.SUCCESS

    @property
    def message(self) -> str:
        """One listener message: ``"<unit> -> <detail>"``."""
        return f"{self.unit} -> {self.detail}"

    def to_dict(self) -> dict[str, Any]:
        """Serialize for logging / JSON output."""
        return {
            "unit": self.unit,
            "index": self.index,
            "status": self.status.value,
            "detail": self.detail,
            "error_type": self.error_type,
            "elapsed_seconds": self.elapsed_seconds,
        }

    def __str__(self) -> str:
        return self.message


__all__ = ["Outcome", "OutcomeStatus"]
