"""Outcome sinks - where dispatch strategies deliver outcomes.

A sink is a narrow ``push(outcome)`` capability. Pushes are fire-and-forget
and may arrive concurrently from several execution contexts (tasks on one
loop, or worker threads), so every implementation here serializes
internally.

ARCHITECTURE
────────────
::

    OutcomeSink (Protocol)
      └── push(outcome) -> None

    Implementations:
      RecordingSink   ─ in-memory recorder of delivery order (lock)
      CallbackSink    ─ forwards to a listener callable (lock)
      QueueSink       ─ thread-safe queue.Queue for a separate consumer
      LoggingSink     ─ one structured log event per outcome
      CollectingSink  ─ index-addressed buffer + drain() in unit order

Example::

    sink = CallbackSink(print, message_only=True)
    await dispatcher.stream_as_completed(sink)
"""

from __future__ import annotations

import queue
import threading
from collections.abc import Callable
from typing import Any, Protocol, runtime_checkable

from scatter.core.errors import DuplicateOutcomeError, IncompleteDrainError
from scatter.core.logging import get_logger

from .outcome import Outcome

logger = get_logger(__name__)


@runtime_checkable
class OutcomeSink(Protocol):
    """Push target for outcomes. Must tolerate concurrent ``push`` calls."""

    def push(self, outcome: Outcome) -> None: ...


class RecordingSink:
    """Records every pushed outcome in delivery order.

    Used by tests to assert on ordering and by the CLI to summarize.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._outcomes: list[Outcome] = []

    def push(self, outcome: Outcome) -> None:
        with self._lock:
            self._outcomes.append(outcome)

    @property
    def outcomes(self) -> list[Outcome]:
        """Snapshot of the outcomes received so far, in delivery order."""
        with self._lock:
            return list(self._outcomes)

    @property
    def units(self) -> list[str]:
        return [o.unit for o in self.outcomes]

    @property
    def messages(self) -> list[str]:
        return [o.message for o in self.outcomes]

    def __len__(self) -> int:
        with self._lock:
            return len(self._outcomes)


class CallbackSink:
    """Forwards each outcome to a listener callable.

    Args:
        listener: Called once per outcome. Receives the ``Outcome`` or, with
            ``message_only=True``, its ``"<unit> -> <detail>"`` string.
        message_only: Deliver the listener string instead of the outcome.

    Calls into the listener are serialized, so a listener that is not
    itself thread-safe still sees one call at a time.
    """

    def __init__(self, listener: Callable[[Any], None], *, message_only: bool = False) -> None:
        self._listener = listener
        self._message_only = message_only
        self._lock = threading.Lock()

    def push(self, outcome: Outcome) -> None:
        payload = outcome.message if self._message_only else outcome
        with self._lock:
            self._listener(payload)


class QueueSink:
    """Hands outcomes to a consumer through a thread-safe queue."""

    def __init__(self, maxsize: int = 0) -> None:
        self.queue: queue.Queue[Outcome] = queue.Queue(maxsize=maxsize)

    def push(self, outcome: Outcome) -> None:
        self.queue.put(outcome)

    def get(self, timeout: float | None = None) -> Outcome:
        """Block for the next outcome.

        Raises:
            queue.Empty: If nothing arrives within ``timeout``.
        """
        return self.queue.get(timeout=timeout)

    def drain_available(self) -> list[Outcome]:
        """Return every outcome currently queued without blocking."""
        items: list[Outcome] = []
        while True:
            try:
                items.append(self.queue.get_nowait())
            except queue.Empty:
                return items


class LoggingSink:
    """Emits one ``outcome.delivered`` log event per outcome."""

    def __init__(self, event: str = "outcome.delivered") -> None:
        self._event = event

    def push(self, outcome: Outcome) -> None:
        logger.info(self._event, **outcome.to_dict())


class CollectingSink:
    """Collect-all sink: buffers by unit position, drains in unit order.

    ``push`` writes into the slot of the outcome's original index, so
    concurrent pushes never collide and completion order is irrelevant.
    ``drain`` is called once every push for the run is complete.

    Example:
        >>> sink = CollectingSink(size=3)
        >>> for outcome in completed_out_of_order:
        ...     sink.push(outcome)
        >>> [o.index for o in sink.drain()]
        [0, 1, 2]
    """

    def __init__(self, size: int) -> None:
        if size < 0:
            raise ValueError(f"size must be non-negative, got {size}")
        self._slots: list[Outcome | None] = [None] * size
        self._lock = threading.Lock()

    def push(self, outcome: Outcome) -> None:
        """Store *outcome* at its unit's position.

        Raises:
            DuplicateOutcomeError: If that position is already filled.
            IndexError: If the outcome's index is outside the buffer.
        """
        if not 0 <= outcome.index < len(self._slots):
            raise IndexError(
                f"Outcome index {outcome.index} outside buffer of size {len(self._slots)}"
            )
        with self._lock:
            if self._slots[outcome.index] is not None:
                raise DuplicateOutcomeError(outcome.index, outcome.unit)
            self._slots[outcome.index] = outcome

    @property
    def filled(self) -> int:
        with self._lock:
            return sum(1 for slot in self._slots if slot is not None)

    def drain(self) -> list[Outcome]:
        """Return all outcomes in original unit order.

        Raises:
            IncompleteDrainError: If any position has no outcome yet.
        """
        with self._lock:
            missing = [i for i, slot in enumerate(self._slots) if slot is None]
            if missing:
                raise IncompleteDrainError(missing)
            return [slot for slot in self._slots if slot is not None]


__all__ = [
    "OutcomeSink",
    "RecordingSink",
    "CallbackSink",
    "QueueSink",
    "LoggingSink",
    "CollectingSink",
]
