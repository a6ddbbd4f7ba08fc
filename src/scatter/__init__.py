"""
Scatter - scatter-gather dispatch of independent, fallible network fetches.

- scatter.core: errors, logging, settings
- scatter.execution: units, outcomes, sinks, strategies, dispatcher
- scatter.cli: Typer command-line interface
"""

__version__ = "0.1.0"

from scatter.execution import (  # noqa: E402
    Dispatcher,
    Outcome,
    OutcomeStatus,
    Realization,
    RecordingSink,
    Strategy,
    UnitExecutor,
)

__all__ = [
    "__version__",
    "Dispatcher",
    "Outcome",
    "OutcomeStatus",
    "Realization",
    "RecordingSink",
    "Strategy",
    "UnitExecutor",
]
