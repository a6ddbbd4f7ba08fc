"""
Root Typer application for the scatter CLI.

Commands::

    scatter run STRATEGY [--unit URL ...] [--deadline S] [--max-concurrency N]
                         [--realization tasks|callbacks|threads] [--json]
    scatter strategies
    scatter config [--json]
"""

from __future__ import annotations

import asyncio
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as pkg_version

import typer
from rich.table import Table
from typer import Typer

from scatter.cli.utils import (
    _print_dict,
    _print_table,
    console,
    err_console,
    print_json,
    print_outcome,
    print_summary,
)
from scatter.core.errors import ConfigError, UnknownStrategyError
from scatter.core.logging import configure_logging
from scatter.core.settings import ScatterSettings, get_settings
from scatter.execution import (
    CallbackSink,
    Dispatcher,
    HttpTransport,
    Realization,
    RecordingSink,
    Strategy,
    Transport,
    UnitExecutor,
)

app = Typer(
    name="scatter",
    help="scatter — scatter-gather dispatch of independent network fetches.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# ── Version callback ─────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        try:
            v = pkg_version("scatter-core")
        except PackageNotFoundError:
            from scatter import __version__ as v
        typer.echo(f"scatter {v}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(  # noqa: UP007
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """scatter CLI — run dispatch strategies against HTTP targets."""


def build_transport(settings: ScatterSettings) -> Transport:
    """Transport used by ``scatter run``."""
    return HttpTransport(
        user_agent=settings.user_agent,
        follow_redirects=settings.follow_redirects,
    )


# ── Commands ─────────────────────────────────────────────────────────────


@app.command("run")
def run_command(
    strategy: str = typer.Argument(
        ..., help="Strategy name (see `scatter strategies`)."
    ),
    unit: list[str] | None = typer.Option(  # noqa: UP007
        None, "--unit", "-u", help="Target URL; repeat for several. Defaults to settings.units."
    ),
    deadline: float | None = typer.Option(  # noqa: UP007
        None, "--deadline", "-d", help="Per-unit deadline in seconds."
    ),
    max_concurrency: int | None = typer.Option(  # noqa: UP007
        None, "--max-concurrency", "-c", help="Bound on in-flight units."
    ),
    realization: Realization = typer.Option(
        Realization.TASKS,
        "--realization",
        "-r",
        case_sensitive=False,
        help="Execution contexts for the concurrent strategy.",
    ),
    as_json: bool = typer.Option(False, "--json", help="Print the run record as JSON."),
) -> None:
    """Run STRATEGY over the unit set and print outcomes as they arrive."""
    try:
        selected = Strategy.parse(strategy)
    except UnknownStrategyError as e:
        err_console.print(f"[bold red]Error[/bold red]: {e.message}")
        raise typer.Exit(code=2) from None
    if deadline is not None and deadline <= 0:
        raise typer.BadParameter("must be positive", param_hint="--deadline")
    if max_concurrency is not None and max_concurrency < 1:
        raise typer.BadParameter("must be at least 1", param_hint="--max-concurrency")

    settings = get_settings()
    configure_logging(level=settings.log_level, json_format=settings.json_logs)

    executor = UnitExecutor(
        build_transport(settings),
        deadline_seconds=deadline or settings.deadline_seconds,
    )
    try:
        dispatcher = Dispatcher(
            unit or None, executor, settings=settings, max_concurrency=max_concurrency
        )
    except ConfigError as e:
        err_console.print(f"[bold red]Error[/bold red]: {e.message}")
        raise typer.Exit(code=2) from None

    sink = None
    if selected.streams:
        sink = RecordingSink() if as_json else CallbackSink(print_outcome)

    record = asyncio.run(dispatcher.run(selected, sink, realization=realization))

    if as_json:
        payload = record.to_dict()
        if isinstance(sink, RecordingSink):
            payload["outcomes"] = [o.to_dict() for o in sink.outcomes]
        print_json(payload)
        return

    if not selected.streams:
        _print_table(list(record.outcomes), title=f"{selected.value} ({selected.guarantee})")
    print_summary(record)


@app.command("strategies")
def list_strategies() -> None:
    """List dispatch strategies and their ordering guarantee."""
    table = Table(title="Strategies")
    table.add_column("Strategy", no_wrap=True)
    table.add_column("Delivery")
    table.add_column("Ordering")
    for item in Strategy:
        table.add_row(item.value, "stream" if item.streams else "collect", item.guarantee)
    console.print(table)


@app.command("config")
def show_config(
    as_json: bool = typer.Option(False, "--json", help="Print settings as JSON."),
) -> None:
    """Show effective settings."""
    settings = get_settings()
    if as_json:
        console.print_json(settings.model_dump_json())
        return
    _print_dict(settings.model_dump(), title="Settings (SCATTER_*)")
