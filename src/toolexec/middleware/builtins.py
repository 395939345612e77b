"""Built-in middleware.

- RecoveryMiddleware: raised exception → PanicRecoveredError
- ContextCheckMiddleware: short-circuit when the scope is already done
- InputValidationMiddleware: reject a missing input
- TimingMiddleware: stamp execution time into output metadata
- LoggingMiddleware: before/after hooks, or a stdlib logger via ``for_logger``
"""

from __future__ import annotations

import logging
import time
import traceback
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING, Callable, ClassVar, TypeAlias

from ..errors import (
    Err,
    MiddlewareError,
    PanicRecoveredError,
    Result,
    ToolCancelledError,
    ToolValidationError,
)
from .middleware import BaseMiddleware, MiddlewareChain, Op

if TYPE_CHECKING:
    from ..context import Context
    from ..core import Input, Output

logger = logging.getLogger("toolexec.middleware")

BeforeHook: TypeAlias = "Callable[[str, Input | None], None]"
AfterHook: TypeAlias = "Callable[[str, Output | None, BaseException | None, timedelta], None]"


@dataclass(slots=True)
class RecoveryMiddleware(BaseMiddleware):
    """Turn an exception raised downstream into a PanicRecoveredError.

    Only ``Exception`` is caught; task cancellation and interpreter exits
    pass through untouched.
    """

    name: ClassVar[str] = "recovery"
    include_stack: bool = False

    async def __call__(self, ctx: Context, tool_name: str, input: Input | None, next: Op) -> Result[Output, BaseException]:
        try:
            return await next(ctx, tool_name, input)
        except Exception as e:
            stack = traceback.format_exc() if self.include_stack else ""
            logger.warning(f"[{tool_name}] recovered from {type(e).__name__}: {e}")
            return Err(PanicRecoveredError(tool_name, e, stack=stack))


@dataclass(slots=True)
class ContextCheckMiddleware(BaseMiddleware):
    """Refuse to call downstream once the scope is done. Never re-checks afterwards."""

    name: ClassVar[str] = "context-check"

    async def __call__(self, ctx: Context, tool_name: str, input: Input | None, next: Op) -> Result[Output, BaseException]:
        if (err := ctx.err()) is not None:
            return Err(ToolCancelledError(
                tool_name, "context cancelled before execution", operation="middleware", cause=err,
            ))
        return await next(ctx, tool_name, input)


@dataclass(slots=True)
class InputValidationMiddleware(BaseMiddleware):
    name: ClassVar[str] = "input-validation"

    async def __call__(self, ctx: Context, tool_name: str, input: Input | None, next: Op) -> Result[Output, BaseException]:
        if input is None:
            return Err(ToolValidationError(tool_name, "input cannot be nil"))
        return await next(ctx, tool_name, input)


@dataclass(slots=True)
class TimingMiddleware(BaseMiddleware):
    """Record ``execution_time_ms`` and ``execution_start`` on successful outputs.

    Both are strings: milliseconds with three decimals, and the UTC start
    time in ISO-8601 with microseconds. Failures are passed through as is.
    """

    name: ClassVar[str] = "timing"

    async def __call__(self, ctx: Context, tool_name: str, input: Input | None, next: Op) -> Result[Output, BaseException]:
        started_at = datetime.now(UTC)
        start = time.perf_counter()
        result = await next(ctx, tool_name, input)
        elapsed_ms = (time.perf_counter() - start) * 1000
        if result.is_ok() and (output := result.unwrap()) is not None:
            output.metadata["execution_time_ms"] = f"{elapsed_ms:.3f}"
            output.metadata["execution_start"] = started_at.isoformat(timespec="microseconds")
        return result


@dataclass(slots=True)
class LoggingMiddleware(BaseMiddleware):
    """Call ``before`` ahead of downstream and ``after`` with its outcome.

    Missing hooks are skipped. A hook that raises is reported as a
    MiddlewareError instead of the downstream outcome.

    Example:
        >>> chain = MiddlewareChain(LoggingMiddleware.for_logger(log_params=True))
    """

    name: ClassVar[str] = "logging"
    before: BeforeHook | None = None
    after: AfterHook | None = None

    @classmethod
    def for_logger(cls, log: logging.Logger | None = None, *, log_params: bool = False) -> LoggingMiddleware:
        """Hooks writing to a stdlib logger: INFO on success, WARNING on failure."""
        log = log or logger

        def before(tool_name: str, input: Input | None) -> None:
            params = f" params={input.params}" if log_params and input is not None else ""
            log.info(f"[{tool_name}] Starting{params}")

        def after(tool_name: str, output: Output | None, error: BaseException | None, duration: timedelta) -> None:
            ms = duration.total_seconds() * 1000
            if error is None:
                log.info(f"[{tool_name}] OK ({ms:.1f}ms)")
            else:
                log.warning(f"[{tool_name}] ERROR ({ms:.1f}ms): {error}")

        return cls(before, after)

    async def __call__(self, ctx: Context, tool_name: str, input: Input | None, next: Op) -> Result[Output, BaseException]:
        if self.before is not None:
            try:
                self.before(tool_name, input)
            except Exception as e:
                return Err(MiddlewareError(self.name, tool_name, "before hook failed", cause=e))
        start = time.perf_counter()
        result = await next(ctx, tool_name, input)
        if self.after is not None:
            try:
                self.after(tool_name, result.ok(), result.err(), timedelta(seconds=time.perf_counter() - start))
            except Exception as e:
                return Err(MiddlewareError(self.name, tool_name, "after hook failed", cause=e))
        return result


def default_middleware_chain() -> MiddlewareChain:
    """Recovery (with stack), context check, input validation, timing; outermost first."""
    return MiddlewareChain(
        RecoveryMiddleware(include_stack=True),
        ContextCheckMiddleware(),
        InputValidationMiddleware(),
        TimingMiddleware(),
    )
