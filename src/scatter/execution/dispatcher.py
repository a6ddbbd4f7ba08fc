"""Dispatcher - the public entry point for running a strategy.

The dispatcher holds the fixed unit set and the Unit Executor, creates one
:class:`~scatter.execution.runs.RunRecord` per call, and returns it as the
completion signal. Runs share nothing: calling several entry points
concurrently on one dispatcher is safe.

Example::

    dispatcher = Dispatcher(["http://a.example", "http://b.example"])

    results = await dispatcher.get_all_parallel()          # ordered list
    run = await dispatcher.stream_as_completed(sink)       # completion order
    run = await dispatcher.run("concurrent", sink, realization="threads")
"""

from __future__ import annotations

from collections.abc import Iterable

from scatter.core.errors import SinkRequiredError
from scatter.core.logging import LogContext, get_logger
from scatter.core.settings import ScatterSettings, get_settings

from .executor import UnitExecutor
from .outcome import Outcome
from .runs import RunRecord
from .sinks import OutcomeSink
from .strategies import (
    Realization,
    Strategy,
    run_as_completed,
    run_concurrent,
    run_parallel_collect,
    run_serial,
)
from .transports import HttpTransport
from .units import UnitSet

logger = get_logger(__name__)


class Dispatcher:
    """Scatter-gather facade over a fixed unit set.

    Args:
        units: Unit targets (or a prepared ``UnitSet``). Defaults to
            ``settings.units``.
        executor: Unit Executor to run units with. Defaults to an
            :class:`HttpTransport`-backed executor using
            ``settings.deadline_seconds``.
        settings: Settings to read defaults from (``get_settings()`` if
            omitted).
        max_concurrency: Bound on in-flight executions for the parallel
            strategies. Defaults to ``settings.max_concurrency``.
    """

    def __init__(
        self,
        units: Iterable[str] | UnitSet | None = None,
        executor: UnitExecutor | None = None,
        *,
        settings: ScatterSettings | None = None,
        max_concurrency: int | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        if isinstance(units, UnitSet):
            self.units = units
        else:
            self.units = UnitSet.of(self.settings.units if units is None else units)
        self.executor = executor or UnitExecutor(
            HttpTransport(
                user_agent=self.settings.user_agent,
                follow_redirects=self.settings.follow_redirects,
            ),
            deadline_seconds=self.settings.deadline_seconds,
        )
        self.max_concurrency = (
            max_concurrency if max_concurrency is not None else self.settings.max_concurrency
        )

    # ── Collect entry points ─────────────────────────────────────────

    async def get_all_serial(self) -> list[Outcome]:
        """Serial collect: run units one by one, return outcomes in unit order."""
        run = await self.run(Strategy.SERIAL_COLLECT)
        return list(run.outcomes)

    async def get_all_parallel(self) -> list[Outcome]:
        """Parallel collect: run all units concurrently, return outcomes in unit order."""
        run = await self.run(Strategy.PARALLEL_COLLECT)
        return list(run.outcomes)

    # ── Stream entry points ──────────────────────────────────────────

    async def stream_serial(self, sink: OutcomeSink) -> RunRecord:
        """Serial stream: push each outcome as soon as its unit finishes."""
        return await self.run(Strategy.SERIAL_STREAM, sink)

    async def stream_as_completed(self, sink: OutcomeSink) -> RunRecord:
        """As completed: run all units concurrently, push in completion order."""
        return await self.run(Strategy.AS_COMPLETED, sink)

    async def stream_concurrent(
        self,
        sink: OutcomeSink,
        realization: Realization | str = Realization.TASKS,
    ) -> RunRecord:
        """Concurrent: each unit's context pushes its own outcome, unordered."""
        return await self.run(Strategy.CONCURRENT, sink, realization=realization)

    # ── Generic entry point ──────────────────────────────────────────

    async def run(
        self,
        strategy: Strategy | str,
        sink: OutcomeSink | None = None,
        *,
        realization: Realization | str = Realization.TASKS,
    ) -> RunRecord:
        """Run *strategy* over the unit set and return the completed record.

        Stream strategies push into ``sink`` while running. Collect
        strategies keep their ordered outcomes on the record and, if a
        sink is given, deliver them to it as one batch after completion.

        Raises:
            UnknownStrategyError: If *strategy* names no strategy.
            SinkRequiredError: If a stream strategy is given no sink.
            ValueError: If *realization* is not a known realization.
        """
        strategy = Strategy.parse(strategy)
        realization = Realization(realization)
        if strategy.streams and sink is None:
            raise SinkRequiredError(strategy.value)

        record = RunRecord.new(strategy.value, total=len(self.units))
        async with LogContext(run_id=record.run_id, strategy=strategy.value):
            logger.info(
                "dispatch.run_started",
                units=len(self.units),
                max_concurrency=self.max_concurrency,
            )
            record.mark_started()
            outcomes = await self._dispatch(strategy, sink, realization)
            record.mark_completed(outcomes, keep=not strategy.streams)
            if not strategy.streams and sink is not None:
                for outcome in outcomes:
                    sink.push(outcome)
            logger.info(
                "dispatch.run_completed",
                succeeded=record.succeeded,
                failed=record.failed,
                timed_out=record.timed_out,
                duration_seconds=record.duration_seconds,
            )
        return record

    async def _dispatch(
        self,
        strategy: Strategy,
        sink: OutcomeSink | None,
        realization: Realization,
    ) -> list[Outcome]:
        if strategy is Strategy.SERIAL_COLLECT:
            return await run_serial(self.units, self.executor)
        if strategy is Strategy.SERIAL_STREAM:
            return await run_serial(self.units, self.executor, sink)
        if strategy is Strategy.PARALLEL_COLLECT:
            return await run_parallel_collect(
                self.units, self.executor, max_concurrency=self.max_concurrency
            )
        assert sink is not None
        if strategy is Strategy.AS_COMPLETED:
            return await run_as_completed(
                self.units, self.executor, sink, max_concurrency=self.max_concurrency
            )
        return await run_concurrent(
            self.units,
            self.executor,
            sink,
            max_concurrency=self.max_concurrency,
            realization=realization,
        )


__all__ = ["Dispatcher"]
