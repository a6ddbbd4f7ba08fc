"""Dispatch strategies - how units are executed and how outcomes are delivered.

All strategies run the same fixed unit set through the same
:class:`~scatter.execution.executor.UnitExecutor`; they differ only in
concurrency shape and delivery order.

ARCHITECTURE
────────────
::

    Strategy             concurrency            delivery
    ────────────────     ──────────────────     ──────────────────────────
    serial_collect       one at a time          ordered list on completion
    serial_stream        one at a time          push each, unit order
    parallel_collect     all at once            ordered list on completion
    as_completed         all at once            push each, completion order
    concurrent           all at once            each context pushes itself,
                                                no order at all

    as_completed: every execution posts its outcome onto one completion
    queue; the strategy dequeues N times.  Delivery detection is O(1)
    per completion instead of rescanning the pending set.

    concurrent: three interchangeable realizations of "an independent
    execution context pushes directly on completion":
      TASKS      one asyncio task per unit, push inside the task
      CALLBACKS  one task per unit, push from a done-callback
      THREADS    one worker thread per unit (own event loop), push from
                 the worker thread

Every function returns the outcomes it produced: in unit order for the
collect strategies, in delivery order for the stream strategies.
"""

from __future__ import annotations

import asyncio
import contextlib
import contextvars
from concurrent.futures import ThreadPoolExecutor
from enum import Enum

from scatter.core.errors import UnknownStrategyError

from .executor import UnitExecutor
from .outcome import Outcome
from .sinks import CollectingSink, OutcomeSink
from .units import Unit, UnitSet


class Strategy(str, Enum):
    """The dispatch disciplines."""

    SERIAL_COLLECT = "serial_collect"
    SERIAL_STREAM = "serial_stream"
    PARALLEL_COLLECT = "parallel_collect"
    AS_COMPLETED = "as_completed"
    CONCURRENT = "concurrent"

    @classmethod
    def parse(cls, value: Strategy | str) -> Strategy:
        """Resolve a strategy from its value, accepting ``-`` for ``_``.

        Raises:
            UnknownStrategyError: If *value* names no strategy.
        """
        if isinstance(value, Strategy):
            return value
        key = str(value).strip().lower().replace("-", "_")
        try:
            return cls(key)
        except ValueError:
            raise UnknownStrategyError(str(value), [s.value for s in cls]) from None

    @property
    def streams(self) -> bool:
        """True if outcomes are pushed while the run is still in progress."""
        return self in _STREAMING

    @property
    def guarantee(self) -> str:
        return _GUARANTEES[self]


_STREAMING = frozenset({Strategy.SERIAL_STREAM, Strategy.AS_COMPLETED, Strategy.CONCURRENT})

_GUARANTEES = {
    Strategy.SERIAL_COLLECT: "unit order, returned once all units finish",
    Strategy.SERIAL_STREAM: "unit order, pushed one by one",
    Strategy.PARALLEL_COLLECT: "unit order, returned once all units finish",
    Strategy.AS_COMPLETED: "completion order, pushed from one consumer",
    Strategy.CONCURRENT: "unordered, pushed concurrently by each context",
}


class Realization(str, Enum):
    """Execution-context flavour for the concurrent strategy."""

    TASKS = "tasks"
    CALLBACKS = "callbacks"
    THREADS = "threads"


def _limiter(max_concurrency: int | None) -> asyncio.Semaphore | contextlib.nullcontext:
    if max_concurrency is None:
        return contextlib.nullcontext()
    if max_concurrency < 1:
        raise ValueError(f"max_concurrency must be >= 1, got {max_concurrency}")
    return asyncio.Semaphore(max_concurrency)


def _check_deadline(deadline: float | None) -> None:
    if deadline is not None and deadline <= 0:
        raise ValueError(f"deadline must be positive, got {deadline}")


# ── serial ───────────────────────────────────────────────────────────────


async def run_serial(
    units: UnitSet,
    executor: UnitExecutor,
    sink: OutcomeSink | None = None,
    *,
    deadline: float | None = None,
) -> list[Outcome]:
    """Execute units one at a time in collection order.

    Without a sink this is the collect sub-mode: outcomes are only returned.
    With a sink each outcome is pushed as soon as its unit finishes, before
    the next unit starts.
    """
    _check_deadline(deadline)
    outcomes: list[Outcome] = []
    for unit in units:
        outcome = await executor.execute(unit, deadline)
        if sink is not None:
            sink.push(outcome)
        outcomes.append(outcome)
    return outcomes


# ── parallel collect-all ─────────────────────────────────────────────────


async def run_parallel_collect(
    units: UnitSet,
    executor: UnitExecutor,
    *,
    deadline: float | None = None,
    max_concurrency: int | None = None,
) -> list[Outcome]:
    """Launch every unit at once; return all outcomes in unit order.

    Nothing is visible to the caller until the last unit finishes.
    """
    _check_deadline(deadline)
    buffer = CollectingSink(len(units))
    limiter = _limiter(max_concurrency)

    async def _one(unit: Unit) -> None:
        async with limiter:
            outcome = await executor.execute(unit, deadline)
        buffer.push(outcome)

    await asyncio.gather(*(_one(unit) for unit in units))
    return buffer.drain()


# ── parallel stream-as-completed ─────────────────────────────────────────


async def run_as_completed(
    units: UnitSet,
    executor: UnitExecutor,
    sink: OutcomeSink,
    *,
    deadline: float | None = None,
    max_concurrency: int | None = None,
) -> list[Outcome]:
    """Launch every unit at once; push outcomes in completion order.

    Each execution posts to a shared completion queue when it finishes and
    this coroutine is the only consumer, so pushes reach the sink one at a
    time and in exactly the order units completed. An execution that raises
    instead of producing an outcome is posted as well and re-raised here.
    """
    _check_deadline(deadline)
    completed: asyncio.Queue[Outcome | Exception] = asyncio.Queue()
    limiter = _limiter(max_concurrency)

    async def _one(unit: Unit) -> None:
        try:
            async with limiter:
                outcome = await executor.execute(unit, deadline)
        except Exception as e:
            completed.put_nowait(e)
            return
        completed.put_nowait(outcome)

    tasks = [asyncio.create_task(_one(unit)) for unit in units]
    delivered: list[Outcome] = []
    try:
        for _ in range(len(tasks)):
            outcome = await completed.get()
            if isinstance(outcome, Exception):
                raise outcome
            sink.push(outcome)
            delivered.append(outcome)
    finally:
        for task in tasks:
            if not task.done():
                task.cancel()
    return delivered


# ── parallel stream-concurrent-dispatch ──────────────────────────────────


async def run_concurrent(
    units: UnitSet,
    executor: UnitExecutor,
    sink: OutcomeSink,
    *,
    deadline: float | None = None,
    max_concurrency: int | None = None,
    realization: Realization = Realization.TASKS,
) -> list[Outcome]:
    """One independent context per unit pushes its own outcome.

    There is no central funnel: the sink sees pushes in whatever order
    contexts finish, possibly overlapping (``THREADS``). The run completes
    once every context has pushed and exited.
    """
    _check_deadline(deadline)
    realization = Realization(realization)
    if realization is Realization.THREADS:
        return await _concurrent_threads(units, executor, sink, deadline, max_concurrency)
    if realization is Realization.CALLBACKS:
        return await _concurrent_callbacks(units, executor, sink, deadline, max_concurrency)
    return await _concurrent_tasks(units, executor, sink, deadline, max_concurrency)


async def _concurrent_tasks(
    units: UnitSet,
    executor: UnitExecutor,
    sink: OutcomeSink,
    deadline: float | None,
    max_concurrency: int | None,
) -> list[Outcome]:
    limiter = _limiter(max_concurrency)

    async def _one(unit: Unit) -> Outcome:
        async with limiter:
            outcome = await executor.execute(unit, deadline)
        sink.push(outcome)
        return outcome

    return list(await asyncio.gather(*(_one(unit) for unit in units)))


async def _concurrent_callbacks(
    units: UnitSet,
    executor: UnitExecutor,
    sink: OutcomeSink,
    deadline: float | None,
    max_concurrency: int | None,
) -> list[Outcome]:
    loop = asyncio.get_running_loop()
    limiter = _limiter(max_concurrency)

    async def _one(unit: Unit) -> Outcome:
        async with limiter:
            return await executor.execute(unit, deadline)

    def _continuation(done: asyncio.Future[Outcome]):
        # resolves once the push has happened, not merely once the fetch did
        def _push(task: asyncio.Task[Outcome]) -> None:
            if done.done():
                return
            if task.cancelled():
                done.cancel()
                return
            error = task.exception()
            if error is not None:
                done.set_exception(error)
                return
            outcome = task.result()
            try:
                sink.push(outcome)
            except Exception as e:
                done.set_exception(e)
                return
            done.set_result(outcome)

        return _push

    pushed: list[asyncio.Future[Outcome]] = []
    tasks: list[asyncio.Task[Outcome]] = []
    for unit in units:
        done: asyncio.Future[Outcome] = loop.create_future()
        task = asyncio.create_task(_one(unit))
        task.add_done_callback(_continuation(done))
        tasks.append(task)
        pushed.append(done)

    try:
        return list(await asyncio.gather(*pushed))
    finally:
        for task in tasks:
            if not task.done():
                task.cancel()


async def _concurrent_threads(
    units: UnitSet,
    executor: UnitExecutor,
    sink: OutcomeSink,
    deadline: float | None,
    max_concurrency: int | None,
) -> list[Outcome]:
    if not units:
        return []
    if max_concurrency is not None and max_concurrency < 1:
        raise ValueError(f"max_concurrency must be >= 1, got {max_concurrency}")

    def _worker(unit: Unit) -> Outcome:
        # each worker thread drives its own event loop
        outcome = asyncio.run(executor.execute(unit, deadline))
        sink.push(outcome)
        return outcome

    loop = asyncio.get_running_loop()
    workers = max_concurrency or len(units)
    pool = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="scatter-unit")
    try:
        futures = [
            loop.run_in_executor(pool, contextvars.copy_context().run, _worker, unit)
            for unit in units
        ]
        outcomes = await asyncio.gather(*futures)
    except BaseException:
        # queued units never start; running workers finish on their own
        pool.shutdown(wait=False, cancel_futures=True)
        raise
    pool.shutdown(wait=True)
    return list(outcomes)


__all__ = [
    "Strategy",
    "Realization",
    "run_serial",
    "run_parallel_collect",
    "run_as_completed",
    "run_concurrent",
]
