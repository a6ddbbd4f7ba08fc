"""Scatter Execution — run a fixed unit set under one of several dispatch disciplines.

ARCHITECTURE
────────────
::

    Dispatcher (facade: one entry point per strategy)
      │
      ▼
    Strategy
      ├── serial_collect / serial_stream   (one at a time, unit order)
      ├── parallel_collect                 (all at once, unit order)
      ├── as_completed                     (all at once, completion order)
      └── concurrent                       (each context pushes, unordered)
      │
      ▼
    UnitExecutor (per-unit deadline, never raises)
      └── Transport (HttpTransport | StubTransport)
      │
      ▼
    OutcomeSink (push; RecordingSink, CallbackSink, QueueSink,
                 LoggingSink, CollectingSink)

MODULE MAP
──────────
  1. units.py       ─ Unit, UnitSet
  2. outcome.py     ─ Outcome, OutcomeStatus
  3. runs.py        ─ RunRecord, RunStatus state machine
  4. timeout.py     ─ with_deadline, run_with_deadline
  5. transports.py  ─ Transport protocol + implementations
  6. executor.py    ─ UnitExecutor
  7. sinks.py       ─ OutcomeSink protocol + implementations
  8. strategies.py  ─ Strategy, Realization, run_* functions
  9. dispatcher.py  ─ Dispatcher (THE public API)
"""

from .dispatcher import Dispatcher
from .executor import DEFAULT_DEADLINE_SECONDS, UnitExecutor
from .outcome import Outcome, OutcomeStatus
from .runs import RunRecord, RunStatus
from .sinks import (
    CallbackSink,
    CollectingSink,
    LoggingSink,
    OutcomeSink,
    QueueSink,
    RecordingSink,
)
from .strategies import (
    Realization,
    Strategy,
    run_as_completed,
    run_concurrent,
    run_parallel_collect,
    run_serial,
)
from .timeout import DeadlineContext, run_with_deadline, with_deadline
from .transports import HttpTransport, StubTransport, Transport
from .units import Unit, UnitSet

__all__ = [
    "Dispatcher",
    "DEFAULT_DEADLINE_SECONDS",
    "UnitExecutor",
    "Outcome",
    "OutcomeStatus",
    "RunRecord",
    "RunStatus",
    "CallbackSink",
    "CollectingSink",
    "LoggingSink",
    "OutcomeSink",
    "QueueSink",
    "RecordingSink",
    "Realization",
    "Strategy",
    "run_as_completed",
    "run_concurrent",
    "run_parallel_collect",
    "run_serial",
    "DeadlineContext",
    "run_with_deadline",
    "with_deadline",
    "HttpTransport",
    "StubTransport",
    "Transport",
    "Unit",
    "UnitSet",
]
