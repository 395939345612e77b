"""Tests for the cancellation scope."""

from __future__ import annotations

import asyncio
import threading
import time

import pytest

from toolexec import Cancelled, Context, DeadlineExceeded


def test_background_is_never_done() -> None:
    ctx = Context.background()
    assert not ctx.done()
    assert ctx.err() is None
    assert ctx.deadline is None
    assert ctx.remaining() is None


def test_cancel_propagates_to_descendants_only() -> None:
    root = Context.background()
    child = root.with_cancel()
    grandchild = child.with_values(request_id="r1")
    sibling = root.with_cancel()

    child.cancel()

    assert isinstance(child.err(), Cancelled)
    assert isinstance(grandchild.err(), Cancelled)
    assert not root.done()
    assert not sibling.done()


def test_deriving_from_finished_parent_is_born_done() -> None:
    parent = Context.background().with_cancel()
    parent.cancel()
    assert parent.with_timeout(10).done()


def test_child_deadline_never_exceeds_parent() -> None:
    parent = Context.background().with_timeout(0.5)
    child = parent.with_timeout(60)
    assert child.deadline == parent.deadline
    assert child.timeout == 0.5

    tighter = parent.with_timeout(0.1)
    assert tighter.deadline is not None and parent.deadline is not None
    assert tighter.deadline < parent.deadline


def test_deadline_is_observed_lazily() -> None:
    ctx = Context.background().with_timeout(0.01)
    time.sleep(0.02)
    assert isinstance(ctx.err(), DeadlineExceeded)
    assert ctx.remaining() is not None and ctx.remaining() < 0


def test_context_manager_cancels_on_exit() -> None:
    root = Context.background()
    with root.with_timeout(5) as ctx:
        assert not ctx.done()
    assert isinstance(ctx.err(), Cancelled)
    assert not root.done()


def test_values_are_inherited() -> None:
    ctx = Context.background().with_values(user="ada").with_values(request_id="r1")
    assert ctx["user"] == "ada"
    assert ctx.get("request_id") == "r1"
    assert "user" in ctx
    assert ctx.get("missing", 5) == 5
    with pytest.raises(KeyError):
        ctx["missing"]


@pytest.mark.asyncio
async def test_wait_returns_on_deadline() -> None:
    ctx = Context.background().with_timeout(0.05)
    err = await asyncio.wait_for(ctx.wait(), 2)
    assert isinstance(err, DeadlineExceeded)


@pytest.mark.asyncio
async def test_wait_wakes_on_cancel_from_another_thread() -> None:
    ctx = Context.background().with_cancel()
    timer = threading.Timer(0.05, ctx.cancel)
    timer.start()
    try:
        err = await asyncio.wait_for(ctx.wait(), 2)
    finally:
        timer.cancel()
    assert isinstance(err, Cancelled)


@pytest.mark.asyncio
async def test_sleep_runs_to_completion() -> None:
    ctx = Context.background()
    assert await ctx.sleep(0.01) is True


@pytest.mark.asyncio
async def test_sleep_is_interrupted_by_cancel() -> None:
    ctx = Context.background().with_cancel()
    asyncio.get_running_loop().call_later(0.02, ctx.cancel)

    start = time.perf_counter()
    completed = await ctx.sleep(5)

    assert completed is False
    assert time.perf_counter() - start < 1


@pytest.mark.asyncio
async def test_sleep_on_done_context_returns_immediately() -> None:
    ctx = Context.background().with_cancel()
    ctx.cancel()
    assert await ctx.sleep(5) is False
