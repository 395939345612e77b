"""Tests for confirmation handlers."""

from __future__ import annotations

from typing import Any

import pytest

from toolexec import (
    AutoApproveHandler,
    AutoDenyHandler,
    CallbackConfirmationHandler,
    ConfirmationHandler,
    Context,
    FunctionConfirmationHandler,
    Output,
    tool,
)


@tool(description="Delete a file", requires_confirmation=True)
async def delete_file(ctx, input):
    return Output.ok("deleted")


@pytest.mark.asyncio
async def test_auto_handlers(ctx: Context) -> None:
    assert await AutoApproveHandler().request(ctx, delete_file, {}) is True
    assert await AutoDenyHandler().request(ctx, delete_file, {}) is False


def test_handlers_satisfy_protocol() -> None:
    for handler in (
        AutoApproveHandler(),
        AutoDenyHandler(),
        FunctionConfirmationHandler(lambda ctx, t, args: True),
        CallbackConfirmationHandler(AutoApproveHandler()),
    ):
        assert isinstance(handler, ConfirmationHandler)


@pytest.mark.asyncio
async def test_function_handler_sync_and_async(ctx: Context) -> None:
    async def ask(ctx: Context, t: Any, args: dict[str, Any]) -> bool:
        return args.get("path") == "tmp.txt"

    sync_handler = FunctionConfirmationHandler(lambda ctx, t, args: t.name == "delete_file")
    async_handler = FunctionConfirmationHandler(ask)

    assert await sync_handler.request(ctx, delete_file, {}) is True
    assert await async_handler.request(ctx, delete_file, {"path": "tmp.txt"}) is True
    assert await async_handler.request(ctx, delete_file, {"path": "src"}) is False


@pytest.mark.asyncio
async def test_callback_reports_decision(ctx: Context) -> None:
    events: list[tuple[Any, ...]] = []
    handler = CallbackConfirmationHandler(
        AutoDenyHandler(),
        on_request=lambda ctx, t, args: events.append(("request", t.name, args)),
        on_response=lambda ctx, t, args, ok, err: events.append(("response", ok, err)),
    )

    assert await handler.request(ctx, delete_file, {"path": "a"}) is False
    assert events == [("request", "delete_file", {"path": "a"}), ("response", False, None)]


@pytest.mark.asyncio
async def test_callback_accepts_async_hooks(ctx: Context) -> None:
    seen: list[bool] = []

    async def on_response(ctx: Context, t: Any, args: dict[str, Any], ok: bool, err: BaseException | None) -> None:
        seen.append(ok)

    handler = CallbackConfirmationHandler(AutoApproveHandler(), on_response=on_response)
    assert await handler.request(ctx, delete_file, {}) is True
    assert seen == [True]


@pytest.mark.asyncio
async def test_callback_request_hook_failure_skips_handler(ctx: Context) -> None:
    asked: list[str] = []
    responses: list[tuple[bool, BaseException | None]] = []

    def on_request(ctx: Context, t: Any, args: dict[str, Any]) -> None:
        raise RuntimeError("audit log unavailable")

    inner = FunctionConfirmationHandler(lambda ctx, t, args: asked.append(t.name) or True)
    handler = CallbackConfirmationHandler(
        inner,
        on_request=on_request,
        on_response=lambda ctx, t, args, ok, err: responses.append((ok, err)),
    )

    with pytest.raises(RuntimeError, match="audit log unavailable"):
        await handler.request(ctx, delete_file, {})

    assert asked == []
    assert len(responses) == 1
    ok, err = responses[0]
    assert ok is False and isinstance(err, RuntimeError)


@pytest.mark.asyncio
async def test_callback_handler_failure_is_reported_and_raised(ctx: Context) -> None:
    responses: list[tuple[bool, BaseException | None]] = []

    class Broken:
        async def request(self, ctx: Context, t: Any, args: dict[str, Any]) -> bool:
            raise ConnectionError("prompt closed")

    handler = CallbackConfirmationHandler(Broken(), on_response=lambda ctx, t, args, ok, err: responses.append((ok, err)))

    with pytest.raises(ConnectionError):
        await handler.request(ctx, delete_file, {})

    assert responses[0][0] is False
    assert isinstance(responses[0][1], ConnectionError)
