"""Function-based tools via the ``@tool`` decorator."""

from __future__ import annotations

import asyncio
import inspect
import re
from functools import update_wrapper
from typing import TYPE_CHECKING, Any, Awaitable, Callable, TypeAlias, overload

from .base import BaseTool, ToolMetadata, ToolOutcome

if TYPE_CHECKING:
    from ..context import Context
    from .types import Input

ToolFunc: TypeAlias = "Callable[[Context, Input | None], ToolOutcome | Awaitable[ToolOutcome]]"
ConfirmRule: TypeAlias = "Callable[[dict[str, Any]], bool]"


class FunctionTool(BaseTool):
    """BaseTool wrapping a plain ``(ctx, input) -> outcome`` function.

    Sync functions run in a worker thread so they never block the loop;
    they should still poll ``ctx.done()`` if they run long.
    """

    def __init__(self, func: ToolFunc, metadata: ToolMetadata, *, confirm: ConfirmRule | None = None) -> None:
        self._func = func
        self._is_async = inspect.iscoroutinefunction(func)
        self._confirm = confirm
        self.metadata = metadata  # type: ignore[misc]

    async def execute(self, ctx: Context, input: Input | None) -> ToolOutcome:
        if self._is_async:
            return await self._func(ctx, input)  # type: ignore[misc]
        return await asyncio.to_thread(self._func, ctx, input)  # type: ignore[arg-type]

    def requires_confirmation(self, args: dict[str, Any]) -> bool:
        if self._confirm is not None:
            return self._confirm(args)
        return self.metadata.requires_confirmation

    @property
    def func(self) -> ToolFunc:
        return self._func


@overload
def tool(func: ToolFunc) -> FunctionTool: ...

@overload
def tool(
    *,
    name: str | None = None,
    description: str | None = None,
    requires_confirmation: bool | ConfirmRule = False,
) -> Callable[[ToolFunc], FunctionTool]: ...


def tool(
    func: ToolFunc | None = None,
    *,
    name: str | None = None,
    description: str | None = None,
    requires_confirmation: bool | ConfirmRule = False,
) -> FunctionTool | Callable[[ToolFunc], FunctionTool]:
    """Turn a function into a registrable tool.

    Args:
        func: Function taking ``(ctx, input)`` (when used without parens)
        name: Tool name (defaults to the function name in snake_case)
        description: Defaults to the first docstring line
        requires_confirmation: Flag, or predicate over the call's args

    Example:
        >>> @tool(name="echo", description="Echo the text param")
        ... async def echo(ctx, input):
        ...     return Output.ok(input.get_str("text"))
        >>> get_registry().register(echo)
    """
    def decorator(fn: ToolFunc) -> FunctionTool:
        rule = requires_confirmation if callable(requires_confirmation) else None
        meta = ToolMetadata(
            name=name or _to_snake_case(fn.__name__),
            description=description or _extract_description(fn.__doc__) or "",
            requires_confirmation=bool(requires_confirmation) if rule is None else False,
        )
        instance = FunctionTool(fn, meta, confirm=rule)
        update_wrapper(instance, fn, updated=())  # type: ignore[arg-type]
        return instance

    if func is not None:
        return decorator(func)
    return decorator


def _to_snake_case(name: str) -> str:
    s1 = re.sub(r"(.)([A-Z][a-z]+)", r"\1_\2", name)
    return re.sub(r"([a-z0-9])([A-Z])", r"\1_\2", s1).lower()


def _extract_description(docstring: str | None) -> str | None:
    if not docstring:
        return None
    return docstring.strip().split("\n")[0].strip()
