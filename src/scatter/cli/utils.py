"""
CLI utility helpers — output formatting.
"""

from __future__ import annotations

import json
from dataclasses import asdict
from typing import Any

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from scatter.execution import Outcome, OutcomeStatus, RunRecord

console = Console()
err_console = Console(stderr=True)

_STATUS_STYLE = {
    OutcomeStatus.SUCCESS: "green",
    OutcomeStatus.FAILURE: "red",
    OutcomeStatus.TIMEOUT: "yellow",
}


# ── Output helpers ───────────────────────────────────────────────────────


def _to_dict(obj: Any) -> dict[str, Any]:
    """Convert domain object / pydantic model / dataclass / dict to plain dict."""
    if hasattr(obj, "to_dict"):
        return obj.to_dict()
    if hasattr(obj, "model_dump"):
        return obj.model_dump()
    if hasattr(obj, "__dataclass_fields__"):
        return asdict(obj)
    if isinstance(obj, dict):
        return obj
    return {"value": str(obj)}


def print_json(payload: Any) -> None:
    console.print_json(json.dumps(payload, default=str))


def print_outcome(outcome: Outcome) -> None:
    """Print one listener line, coloured by status."""
    style = _STATUS_STYLE[outcome.status]
    console.print(f"[{style}]{escape(outcome.message)}[/{style}]")


def print_summary(record: RunRecord) -> None:
    """Print the one-line run summary."""
    duration = f"{record.duration_seconds:.2f}s" if record.duration_seconds is not None else "-"
    console.print(
        f"\n[bold]{record.strategy}[/bold] {record.status.value}: "
        f"{record.total} units, "
        f"[green]{record.succeeded} ok[/green], "
        f"[red]{record.failed} failed[/red], "
        f"[yellow]{record.timed_out} timed out[/yellow] "
        f"[dim]({duration})[/dim]"
    )


# ── Private helpers ──────────────────────────────────────────────────────


def _print_table(items: list, *, title: str = "") -> None:
    """Render a list of domain objects/dicts as a Rich table."""
    if not items:
        console.print("[dim]No items.[/dim]")
        return
    first = _to_dict(items[0])
    table = Table(title=title or None, show_lines=False, pad_edge=False)
    for col in first:
        table.add_column(col, overflow="fold")
    for item in items:
        d = _to_dict(item)
        table.add_row(*(escape(str(v)) for v in d.values()))
    console.print(table)


def _print_dict(data: dict[str, Any], *, title: str = "") -> None:
    """Render a single dict as key-value pairs."""
    if title:
        console.print(f"[bold]{title}[/bold]")
    for k, v in data.items():
        console.print(f"  [cyan]{k}[/cyan]: {escape(str(v))}")
