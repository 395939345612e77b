"""Tests for batch execution."""

from __future__ import annotations

import asyncio
from datetime import timedelta

import pytest

from toolexec import (
    Context,
    Err,
    Executor,
    Input,
    Output,
    ToolExecution,
    ToolRegistry,
    is_cancelled,
    is_execution,
    tool,
)


class Gauge:
    """Tracks how many calls are in flight at once."""

    def __init__(self) -> None:
        self.current = 0
        self.peak = 0

    def enter(self) -> None:
        self.current += 1
        self.peak = max(self.peak, self.current)

    def exit(self) -> None:
        self.current -= 1


def make_tools(registry: ToolRegistry, gauge: Gauge | None = None) -> ToolRegistry:
    @tool(name="ok", description="Succeeds after a short nap")
    async def ok(ctx, input):
        if gauge is not None:
            gauge.enter()
        try:
            await asyncio.sleep(input.get_param("delay") or 0.01)
        finally:
            if gauge is not None:
                gauge.exit()
        return Output.ok(input.get_str("tag"))

    @tool(name="fail", description="Always fails")
    async def fail(ctx, input):
        return Err("boom")

    registry.register_all(ok, fail)
    return registry


def ok_call(tag: str = "", delay: float = 0.01) -> ToolExecution:
    return ToolExecution("ok", Input().with_param("tag", tag).with_param("delay", delay))


@pytest.mark.asyncio
async def test_first_failure_cancels_the_rest(registry: ToolRegistry) -> None:
    executor = Executor(make_tools(registry), max_concurrent=1)

    batch = await executor.execute_many(
        Context.background(),
        [ok_call("first"), ToolExecution("fail", Input()), ok_call("third")],
    )

    first, second, third = batch.results
    assert first.is_success and first.output.data == b"first"
    assert is_execution(second.error)
    assert is_cancelled(third.error)
    assert third.duration == timedelta(0)
    assert batch.error is second.error
    assert not batch.all_ok
    assert batch.concurrency == 1


@pytest.mark.asyncio
async def test_results_are_index_aligned(registry: ToolRegistry) -> None:
    executor = Executor(make_tools(registry), max_concurrent=0)
    delays = [0.05, 0.01, 0.03, 0.0, 0.02]

    batch = await executor.execute_many(None, [ok_call(str(i), d) for i, d in enumerate(delays)])

    assert [r.output.data for r in batch] == [b"0", b"1", b"2", b"3", b"4"]
    assert [r.tool_name for r in batch] == ["ok"] * 5
    assert batch.all_ok
    assert batch.error is None
    assert batch.success_rate == 1.0
    assert batch.to_result().unwrap() == batch.outputs()


@pytest.mark.asyncio
async def test_concurrency_cap(registry: ToolRegistry) -> None:
    gauge = Gauge()
    executor = Executor(make_tools(registry, gauge), max_concurrent=2)

    batch = await executor.execute_many(None, [ok_call(delay=0.02) for _ in range(6)])

    assert batch.all_ok
    assert gauge.peak == 2
    assert batch.concurrency == 2


@pytest.mark.asyncio
async def test_unbounded_runs_everything_at_once(registry: ToolRegistry) -> None:
    gauge = Gauge()
    executor = Executor(make_tools(registry, gauge), max_concurrent=-1)

    batch = await executor.execute_many(None, [ok_call(delay=0.05) for _ in range(5)])

    assert gauge.peak == 5
    assert batch.concurrency == 5


@pytest.mark.asyncio
async def test_empty_batch(registry: ToolRegistry) -> None:
    batch = await Executor(registry).execute_many(None, [])

    assert len(batch) == 0
    assert batch.error is None
    assert batch.all_ok
    assert batch.success_rate == 0.0


@pytest.mark.asyncio
async def test_cancelled_parent_fails_every_item(registry: ToolRegistry) -> None:
    executor = Executor(make_tools(registry), max_concurrent=2)
    ctx = Context.background().with_cancel()
    ctx.cancel()

    batch = await executor.execute_many(ctx, [ok_call(), ok_call(), ok_call()])

    assert all(is_cancelled(r.error) for r in batch)
    assert all(r.duration == timedelta(0) for r in batch)
    assert is_cancelled(batch.error)
    assert batch.to_result().is_err()
    assert len(batch.failures) == 3


@pytest.mark.asyncio
async def test_batch_failure_does_not_touch_parent(registry: ToolRegistry) -> None:
    executor = Executor(make_tools(registry), max_concurrent=1)
    parent = Context.background().with_cancel()

    await executor.execute_many(parent, [ToolExecution("fail"), ok_call()])

    assert not parent.done()


@pytest.mark.asyncio
async def test_unknown_tool_in_batch(registry: ToolRegistry) -> None:
    executor = Executor(make_tools(registry), max_concurrent=1)

    batch = await executor.execute_many(None, [ToolExecution("ghost"), ok_call()])

    assert batch.error is batch.results[0].error
    assert is_cancelled(batch.results[1].error)


def test_execute_many_sync(registry: ToolRegistry) -> None:
    executor = Executor(make_tools(registry), max_concurrent=2)

    batch = executor.execute_many_sync(None, [ok_call("a"), ok_call("b")])

    assert [o.data for o in batch.outputs()] == [b"a", b"b"]
