from __future__ import annotations

import asyncio
import time

import pytest

from dev_session.runner import MuteLatch, TaskFailedError, TaskOutcome, run_after, schedule_after, values


async def _value(result: int) -> int:
    return result


def test_resolves_positionally_after_delay() -> None:
    async def scenario() -> tuple[list[TaskOutcome[int]], float]:
        started = time.monotonic()
        outcomes = await run_after(0.05, [lambda: _value(1), lambda: _value(2)])
        return outcomes, time.monotonic() - started

    outcomes, elapsed = asyncio.run(scenario())
    assert values(outcomes) == [1, 2]
    assert [outcome.index for outcome in outcomes] == [0, 1]
    assert elapsed >= 0.045


def test_tasks_are_not_invoked_before_delay() -> None:
    invoked_at: list[float] = []

    async def scenario() -> float:
        started = time.monotonic()

        async def task() -> None:
            invoked_at.append(time.monotonic() - started)

        pending = asyncio.create_task(run_after(0.1, [task, task]))
        await asyncio.sleep(0.03)
        assert invoked_at == []
        await pending
        return time.monotonic() - started

    asyncio.run(scenario())
    assert len(invoked_at) == 2
    assert min(invoked_at) >= 0.09


def test_tasks_run_concurrently() -> None:
    async def scenario() -> list[TaskOutcome[str]]:
        ready = asyncio.Event()

        async def waiter() -> str:
            await asyncio.wait_for(ready.wait(), timeout=2)
            return "waited"

        async def setter() -> str:
            ready.set()
            return "set"

        return await run_after(0, [waiter, setter])

    assert values(asyncio.run(scenario())) == ["waited", "set"]


def test_failures_are_reported_per_task() -> None:
    completed: list[str] = []

    async def failing() -> int:
        raise ValueError("boom")

    async def slow() -> int:
        await asyncio.sleep(0.05)
        completed.append("slow")
        return 7

    outcomes = asyncio.run(run_after(0, [failing, slow]))
    assert completed == ["slow"]
    assert not outcomes[0].ok
    assert isinstance(outcomes[0].error, ValueError)
    assert outcomes[1].ok and outcomes[1].value == 7
    with pytest.raises(TaskFailedError) as excinfo:
        values(outcomes)
    assert [failure.index for failure in excinfo.value.failures] == [0]


def test_plain_callables_are_accepted() -> None:
    def sync_task() -> str:
        return "sync"

    def raising() -> str:
        raise RuntimeError("nope")

    outcomes = asyncio.run(run_after(0, [sync_task, raising]))
    assert outcomes[0].value == "sync"
    assert isinstance(outcomes[1].error, RuntimeError)


def test_empty_task_set() -> None:
    assert asyncio.run(run_after(0, [])) == []


def test_schedule_after_invokes_settled_callback_once() -> None:
    latch = MuteLatch(muted=True)
    settled: list[list[TaskOutcome[int]]] = []

    def on_settled(outcomes: list[TaskOutcome[int]]) -> None:
        settled.append(outcomes)
        latch.release()

    async def scenario() -> list[TaskOutcome[int]]:
        task = schedule_after(0.02, [lambda: _value(5)], on_settled=on_settled)
        assert not latch.released
        return await task

    outcomes = asyncio.run(scenario())
    assert values(outcomes) == [5]
    assert settled == [outcomes]
    assert latch.released
