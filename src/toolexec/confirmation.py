"""User-approval gate for sensitive tools.

The executor asks the configured handler only when a tool's
``requires_confirmation(args)`` says so. Handlers return True to approve and
False to deny; raising means the confirmation itself failed.
"""

from __future__ import annotations

import inspect
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Protocol, TypeAlias, runtime_checkable

if TYPE_CHECKING:
    from .context import Context
    from .core import Tool

ConfirmFunc: TypeAlias = "Callable[[Context, Tool, dict[str, Any]], bool | Awaitable[bool]]"
RequestHook: TypeAlias = "Callable[[Context, Tool, dict[str, Any]], None | Awaitable[None]]"
ResponseHook: TypeAlias = "Callable[[Context, Tool, dict[str, Any], bool, BaseException | None], None | Awaitable[None]]"


async def _resolve(value: Any) -> Any:
    return await value if inspect.isawaitable(value) else value


@runtime_checkable
class ConfirmationHandler(Protocol):
    async def request(self, ctx: Context, tool: Tool, args: dict[str, Any]) -> bool: ...


class AutoApproveHandler:
    """Approve everything. For tests and trusted automation."""

    __slots__ = ()

    async def request(self, ctx: Context, tool: Tool, args: dict[str, Any]) -> bool:
        return True


class AutoDenyHandler:
    """Deny everything. Effectively disables confirmation-gated tools."""

    __slots__ = ()

    async def request(self, ctx: Context, tool: Tool, args: dict[str, Any]) -> bool:
        return False


@dataclass(frozen=True, slots=True)
class FunctionConfirmationHandler:
    """Adapter for a plain (sync or async) confirmation function."""
    fn: ConfirmFunc

    async def request(self, ctx: Context, tool: Tool, args: dict[str, Any]) -> bool:
        return bool(await _resolve(self.fn(ctx, tool, args)))


@dataclass(slots=True)
class CallbackConfirmationHandler:
    """Wrap a handler with observation hooks.

    ``on_request`` runs first; if it raises, the inner handler is skipped,
    ``on_response`` sees ``(False, error)`` and the error propagates.
    Otherwise ``on_response`` sees the inner handler's decision (or error)
    before it is returned (or re-raised).

    Example:
        >>> audited = CallbackConfirmationHandler(
        ...     prompt_user,
        ...     on_response=lambda ctx, tool, args, ok, err: audit_log.append((tool.name, ok)),
        ... )
    """

    handler: ConfirmationHandler
    on_request: RequestHook | None = None
    on_response: ResponseHook | None = None

    async def request(self, ctx: Context, tool: Tool, args: dict[str, Any]) -> bool:
        if self.on_request is not None:
            try:
                await _resolve(self.on_request(ctx, tool, args))
            except Exception as e:
                await self._respond(ctx, tool, args, False, e)
                raise
        try:
            approved = await self.handler.request(ctx, tool, args)
        except Exception as e:
            await self._respond(ctx, tool, args, False, e)
            raise
        await self._respond(ctx, tool, args, approved, None)
        return approved

    async def _respond(
        self, ctx: Context, tool: Tool, args: dict[str, Any], approved: bool, error: BaseException | None,
    ) -> None:
        if self.on_response is not None:
            await _resolve(self.on_response(ctx, tool, args, approved, error))
