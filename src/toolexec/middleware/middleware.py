"""Middleware types and chain composition.

An ``Op`` is one step of the execution pipeline: ``(ctx, tool_name, input)``
in, ``Result[Output, Exception]`` out. Middleware wraps an op into a new op.
Chains apply their members in reverse, so the first middleware added ends up
outermost and sees the call first.

Most middleware is easiest to write in continuation-passing style by
subclassing ``BaseMiddleware``:

    >>> @dataclass(slots=True)
    ... class Stamp(BaseMiddleware):
    ...     name: ClassVar[str] = "stamp"
    ...     async def __call__(self, ctx, tool_name, input, next):
    ...         result = await next(ctx, tool_name, input)
    ...         return result.map(lambda out: out.with_metadata("stamped", "yes"))
"""

from __future__ import annotations

from collections.abc import Awaitable, Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, ClassVar, Protocol, Self, TypeAlias, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Iterator

    from ..context import Context
    from ..core import Input, Output
    from ..errors import Result

Op: TypeAlias = "Callable[[Context, str, Input | None], Awaitable[Result[Output, BaseException]]]"


@runtime_checkable
class Middleware(Protocol):
    """Named transformer of pipeline ops."""

    @property
    def name(self) -> str: ...

    def wrap(self, next: Op) -> Op: ...


class BaseMiddleware:
    """Continuation-passing base: implement ``__call__`` and get ``wrap`` for free."""

    __slots__ = ()

    name: ClassVar[str] = "middleware"

    async def __call__(
        self,
        ctx: Context,
        tool_name: str,
        input: Input | None,
        next: Op,
    ) -> Result[Output, BaseException]:
        """Run around ``next``. Call it zero or one time."""
        raise NotImplementedError

    def wrap(self, next: Op) -> Op:
        async def wrapped(ctx: Context, tool_name: str, input: Input | None) -> Result[Output, BaseException]:
            return await self(ctx, tool_name, input, next)
        return wrapped


@dataclass(frozen=True, slots=True)
class FunctionMiddleware:
    """Adapter giving a plain ``Op -> Op`` function a middleware name."""
    name: str
    fn: Callable[[Op], Op]

    def wrap(self, next: Op) -> Op:
        return self.fn(next)


def compose(middlewares: Iterable[Middleware], op: Op) -> Op:
    """Wrap ``op`` so that the first middleware is outermost."""
    for mw in reversed(list(middlewares)):
        op = mw.wrap(op)
    return op


def apply_middleware(op: Op, *middlewares: Middleware) -> Op:
    return compose(middlewares, op)


class MiddlewareChain:
    """Ordered middleware list.

    ``middlewares`` hands out copies, so the chain only changes through
    ``add`` and ``prepend``.
    """

    __slots__ = ("_middlewares",)

    def __init__(self, *middlewares: Middleware) -> None:
        self._middlewares: list[Middleware] = list(middlewares)

    def add(self, middleware: Middleware) -> Self:
        """Append as the new innermost middleware."""
        self._middlewares.append(middleware)
        return self

    def prepend(self, middleware: Middleware) -> Self:
        """Insert as the new outermost middleware."""
        self._middlewares.insert(0, middleware)
        return self

    @property
    def middlewares(self) -> list[Middleware]:
        return list(self._middlewares)

    def names(self) -> list[str]:
        return [m.name for m in self._middlewares]

    def wrap(self, op: Op) -> Op:
        return compose(self._middlewares, op)

    def __len__(self) -> int:
        return len(self._middlewares)

    def __iter__(self) -> Iterator[Middleware]:
        return iter(list(self._middlewares))

    def __repr__(self) -> str:
        return f"MiddlewareChain({', '.join(self.names())})"


def combine(*chains: MiddlewareChain | None) -> MiddlewareChain:
    """Concatenate chains in order into a new chain; ``None`` entries are skipped."""
    return MiddlewareChain(*(m for chain in chains if chain is not None for m in chain))
