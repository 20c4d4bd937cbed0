"""Deferred fan-out of follow-up tasks with join-all semantics."""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

__all__ = [
    "TaskFailedError",
    "TaskOutcome",
    "run_after",
    "schedule_after",
    "values",
]

T = TypeVar("T")

TaskFactory = Callable[[], Awaitable[T] | T]

logger = logging.getLogger("dev_session.runner.scheduler")


class TaskFailedError(RuntimeError):
    """Raised by :func:`values` when at least one scheduled task failed."""

    def __init__(self, failures: Sequence[TaskOutcome[Any]]) -> None:
        details = ", ".join(f"#{outcome.index}: {outcome.error!r}" for outcome in failures)
        super().__init__(f"{len(failures)} scheduled task(s) failed ({details})")
        self.failures = list(failures)


@dataclass(slots=True, frozen=True)
class TaskOutcome(Generic[T]):
    """Result of one scheduled task, kept at the task's position."""

    index: int
    value: T | None = None
    error: BaseException | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


async def _invoke(task: TaskFactory[T]) -> T:
    result = task()
    if inspect.isawaitable(result):
        return await result
    return result


async def run_after(delay: float, tasks: Sequence[TaskFactory[T]]) -> list[TaskOutcome[T]]:
    """Wait ``delay`` seconds, then run every task once, concurrently.

    All tasks are awaited to completion even when some fail. The returned list
    is positional and reports every failure instead of raising it.
    """

    tasks = list(tasks)
    await asyncio.sleep(max(delay, 0))
    logger.debug("Dispatching %d scheduled task(s)", len(tasks))
    results = await asyncio.gather(*(_invoke(task) for task in tasks), return_exceptions=True)
    outcomes: list[TaskOutcome[T]] = []
    for index, result in enumerate(results):
        if isinstance(result, BaseException):
            if not isinstance(result, Exception):
                raise result
            outcomes.append(TaskOutcome(index=index, error=result))
        else:
            outcomes.append(TaskOutcome(index=index, value=result))
    return outcomes


def schedule_after(
    delay: float,
    tasks: Sequence[TaskFactory[T]],
    *,
    on_settled: Callable[[list[TaskOutcome[T]]], object] | None = None,
) -> asyncio.Task[list[TaskOutcome[T]]]:
    """Start :func:`run_after` in the background on the running loop.

    ``on_settled`` receives the outcomes once every task has settled. The
    returned task fires once and is not meant to be rescheduled.
    """

    async def _run() -> list[TaskOutcome[T]]:
        outcomes = await run_after(delay, tasks)
        if on_settled is not None:
            on_settled(outcomes)
        return outcomes

    return asyncio.get_running_loop().create_task(_run())


def values(outcomes: Sequence[TaskOutcome[T]]) -> list[T | None]:
    """Return the task results, raising :class:`TaskFailedError` on any failure."""

    failures = [outcome for outcome in outcomes if not outcome.ok]
    if failures:
        raise TaskFailedError(failures)
    return [outcome.value for outcome in outcomes]
