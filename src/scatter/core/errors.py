"""
Structured error types for scatter.

Provides a small hierarchy of typed errors carrying a category, a retryable
flag, structured context, and a chained cause.

Two families live here and they are handled very differently:

- **Unit-level errors** (``TransportError``, ``UnitTimeoutError``) describe a
  single fetch going wrong. They never escape the Unit Executor: they are
  caught at that boundary and turned into an ``Outcome`` carrying a failure
  description.
- **Caller errors** (``ConfigError``, ``SinkError`` and subclasses) describe
  misuse of the engine itself: an unknown strategy name, a stream strategy
  without a sink, draining a collecting sink before every unit reported.
  These do raise, because no Outcome can represent them.

Architecture:
    ::

        ScatterError (category, retryable, context, cause)
          ├── TransportError         (NETWORK, retryable)
          ├── UnitTimeoutError       (TIMEOUT, retryable)
          ├── ConfigError            (CONFIG)
          │     ├── UnknownStrategyError
          │     ├── SinkRequiredError
          │     └── DuplicateUnitError
          └── SinkError              (SINK)
                ├── IncompleteDrainError
                └── DuplicateOutcomeError

Examples:
    >>> try:
    ...     raise ConnectionRefusedError("connection refused")
    ... except ConnectionRefusedError as e:
    ...     error = TransportError("fetch failed", cause=e).with_context(unit="http://x")
    >>> error.to_dict()["category"]
    'NETWORK'
    >>> root_cause(error)
    ConnectionRefusedError('connection refused')
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Error categories for classification and log routing.

    Attributes:
        NETWORK: Connection, DNS, protocol errors from the transport
        TIMEOUT: A unit exceeded its deadline
        CONFIG: Invalid settings or facade misuse
        SINK: Outcome sink contract violations
        INTERNAL: Bugs, unexpected state
    """

    NETWORK = "NETWORK"
    TIMEOUT = "TIMEOUT"
    CONFIG = "CONFIG"
    SINK = "SINK"
    INTERNAL = "INTERNAL"


@dataclass
class ErrorContext:
    """Structured metadata attached to an error.

    Attributes:
        unit: Unit identifier being executed
        run_id: Run the error belongs to
        strategy: Strategy name of that run
        url: URL that was being fetched
        metadata: Additional key-value pairs
    """

    unit: str | None = None
    run_id: str | None = None
    strategy: str | None = None
    url: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {}
        for key in ["unit", "run_id", "strategy", "url"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class ScatterError(Exception):
    """Base exception for all scatter errors.

    Subclasses set ``default_category`` and ``default_retryable`` so that
    callers rarely pass them explicitly.
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL
    default_retryable: bool = False

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        retryable: bool | None = None,
        context: ErrorContext | None = None,
        cause: BaseException | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.retryable = retryable if retryable is not None else self.default_retryable
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> ScatterError:
        """Add context to this error (fluent API).

        Usage:
            raise TransportError("fetch failed").with_context(unit=url)
        """
        for key, value in kwargs.items():
            if hasattr(self.context, key) and key != "metadata":
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
            "retryable": self.retryable,
        }
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# UNIT-LEVEL ERRORS (converted to Outcomes, never propagated)
# =============================================================================


class TransportError(ScatterError):
    """The network operation could not complete (refused, DNS, protocol)."""

    default_category = ErrorCategory.NETWORK
    default_retryable = True


class UnitTimeoutError(ScatterError):
    """A unit did not complete within its deadline."""

    default_category = ErrorCategory.TIMEOUT
    default_retryable = True

    def __init__(self, timeout: float, elapsed: float | None = None, **kwargs: Any):
        self.timeout = timeout
        self.elapsed = elapsed
        super().__init__(f"timed out after {timeout:g}s", **kwargs)


# =============================================================================
# CALLER ERRORS (raised)
# =============================================================================


class ConfigError(ScatterError):
    """Invalid configuration or facade misuse."""

    default_category = ErrorCategory.CONFIG


class UnknownStrategyError(ConfigError):
    """No strategy is registered under the requested name."""

    def __init__(self, name: str, known: list[str] | None = None):
        self.name = name
        self.known = known or []
        msg = f"Unknown strategy: {name!r}"
        if self.known:
            msg += f" (expected one of: {', '.join(self.known)})"
        super().__init__(msg)


class SinkRequiredError(ConfigError):
    """A streaming strategy was requested without a sink to push into."""

    def __init__(self, strategy: str):
        self.strategy = strategy
        super().__init__(f"Strategy {strategy!r} streams outcomes and needs a sink")


class DuplicateUnitError(ConfigError):
    """The same unit identifier appears more than once in a unit set."""

    def __init__(self, unit: str):
        self.unit = unit
        super().__init__(f"Duplicate unit: {unit!r}")


class SinkError(ScatterError):
    """Outcome sink contract violation."""

    default_category = ErrorCategory.SINK


class IncompleteDrainError(SinkError):
    """``drain()`` was called before every slot received an outcome."""

    def __init__(self, missing: list[int]):
        self.missing = missing
        super().__init__(f"Cannot drain: no outcome for positions {missing}")


class DuplicateOutcomeError(SinkError):
    """A second outcome was pushed for a slot that is already filled."""

    def __init__(self, index: int, unit: str):
        self.index = index
        self.unit = unit
        super().__init__(f"Outcome for {unit!r} (position {index}) was already pushed")


class InvalidTransitionError(ValueError):
    """Raised when an illegal run state transition is attempted."""

    def __init__(self, current: str, target: str, enum_name: str = "RunStatus") -> None:
        self.current = current
        self.target = target
        self.enum_name = enum_name
        super().__init__(f"Invalid {enum_name} transition: {current} → {target}")


def root_cause(error: BaseException) -> BaseException:
    """Walk the ``__cause__`` / ``__context__`` chain to the innermost exception."""
    seen: set[int] = set()
    current = error
    while id(current) not in seen:
        seen.add(id(current))
        nxt = current.__cause__ or current.__context__
        if nxt is None:
            break
        current = nxt
    return current


def describe_error(error: BaseException) -> str:
    """Human-readable failure reason for an Outcome.

    Uses the root cause's message, falling back to its class name when the
    message is empty (some httpx errors carry no text).
    """
    cause = root_cause(error)
    text = str(cause).strip()
    return text or cause.__class__.__name__


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "ScatterError",
    "TransportError",
    "UnitTimeoutError",
    "ConfigError",
    "UnknownStrategyError",
    "SinkRequiredError",
    "DuplicateUnitError",
    "SinkError",
    "IncompleteDrainError",
    "DuplicateOutcomeError",
    "InvalidTransitionError",
    "root_cause",
    "describe_error",
]
