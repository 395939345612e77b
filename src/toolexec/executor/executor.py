"""The tool executor.

``Executor.execute`` runs one call through a fixed pipeline:

1. look the tool up
2. bound the call with the default timeout unless the caller set a deadline
3. bail out if the scope is already done
4. security policy
5. confirmation (only for tools that ask for it)
6. middleware chain, first-added outermost
7. recovery frame turning raised exceptions into PanicRecoveredError
8. the tool itself

Every stage reports failure as an ``Err``; the first one wins and nothing
downstream of it runs.
"""

from __future__ import annotations

import asyncio
import logging
import time
import traceback
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any, Self

from ..context import Context
from ..core import Output
from ..errors import (
    Err,
    Ok,
    PanicRecoveredError,
    Result,
    ToolException,
    ToolExecutionError,
    ToolNotFoundError,
    UserDeniedError,
    error_from_context,
    wrap_error,
)
from ..registry import ToolRegistry, get_registry
from ..runtime import run_sync
from .config import ExecutorConfig, ExecutorConfigView
from .results import BatchResult, ExecutionResult, ToolExecution

if TYPE_CHECKING:
    from ..core import Input, Tool
    from ..middleware import Op
    from ..settings import ToolexecSettings

logger = logging.getLogger("toolexec.executor")


class Executor:
    """Runs registered tools with timeouts, screening, middleware and recovery.

    Safe to share: it holds no per-call state and reads its registry under
    the registry's own lock.

    Example:
        >>> executor = Executor(registry, timeout=10, max_concurrent=4)
        >>> result = await executor.execute(None, "echo", Input().with_param("text", "hi"))
        >>> result.unwrap().data
        b'hi'
    """

    __slots__ = ("_registry", "_config")

    def __init__(
        self,
        registry: ToolRegistry | None = None,
        config: ExecutorConfig | None = None,
        **overrides: Any,
    ) -> None:
        self._registry = registry if registry is not None else get_registry()
        config = config or ExecutorConfig()
        self._config = ExecutorConfig(**{**dict(config), **overrides}) if overrides else config

    @classmethod
    def from_settings(
        cls,
        registry: ToolRegistry | None = None,
        settings: ToolexecSettings | None = None,
        **overrides: Any,
    ) -> Self:
        return cls(registry, ExecutorConfig.from_settings(settings, **overrides))

    @property
    def registry(self) -> ToolRegistry:
        return self._registry

    @property
    def options(self) -> ExecutorConfig:
        return self._config

    @property
    def config(self) -> ExecutorConfigView:
        return ExecutorConfigView.of(self._config)

    # ─────────────────────────────────────────────────────────────────
    # Single execution
    # ─────────────────────────────────────────────────────────────────

    async def execute(
        self,
        ctx: Context | None,
        tool_name: str,
        input: Input | None = None,
    ) -> Result[Output, ToolException]:
        """Run one tool call. Failures come back as ``Err``, never raised.

        The one exception: with ``recover_panics=False`` an exception raised by
        a tool or middleware propagates to the caller.
        """
        if ctx is None:
            ctx = Context.background()
        try:
            tool = self._registry.get(tool_name)
        except ToolNotFoundError as e:
            logger.debug(f"[{tool_name}] not registered")
            return Err(e)
        with self._scope(ctx) as scoped:
            return await self._run(scoped, tool, tool_name, input)

    def execute_async(
        self,
        ctx: Context | None,
        tool_name: str,
        input: Input | None = None,
    ) -> asyncio.Task[ExecutionResult]:
        """Start ``execute`` in the background on the running loop.

        The task resolves to exactly one timed ``ExecutionResult``. Cancel the
        work through ``ctx``; cancelling the task itself abandons the result.
        """
        return asyncio.get_running_loop().create_task(
            self._execute_timed(ctx, tool_name, input), name=f"toolexec:{tool_name}",
        )

    def execute_sync(
        self,
        ctx: Context | None,
        tool_name: str,
        input: Input | None = None,
    ) -> Result[Output, ToolException]:
        """Blocking ``execute`` for synchronous callers."""
        return run_sync(self.execute(ctx, tool_name, input))

    # ─────────────────────────────────────────────────────────────────
    # Batch execution
    # ─────────────────────────────────────────────────────────────────

    async def execute_many(
        self,
        ctx: Context | None,
        executions: Iterable[ToolExecution],
    ) -> BatchResult:
        """Run a batch with at most ``max_concurrent`` calls in flight.

        The first failure cancels a scope shared by the batch: calls still
        waiting for a slot finish as cancelled without running, calls in
        flight are signalled and keep whatever they return. ``results[i]``
        always belongs to ``executions[i]``.
        """
        batch = list(executions)
        if not batch:
            return BatchResult([])
        if ctx is None:
            ctx = Context.background()

        n = len(batch)
        concurrency = self._config.max_concurrent if self._config.max_concurrent > 0 else n
        sem = asyncio.Semaphore(concurrency)
        results: list[ExecutionResult | None] = [None] * n
        first_error: ToolException | None = None
        start = time.perf_counter()

        with ctx.with_cancel() as group:

            async def run_one(idx: int, item: ToolExecution) -> None:
                nonlocal first_error
                async with sem:
                    if group.done():
                        result = self._not_started(group, item.tool_name)
                    else:
                        result = await self._execute_timed(group, item.tool_name, item.input)
                results[idx] = result
                if result.error is not None and first_error is None:
                    first_error = result.error
                    logger.debug(f"[{item.tool_name}] batch item {idx} failed, cancelling the rest: {result.error}")
                    group.cancel()

            tasks = [asyncio.create_task(run_one(i, item)) for i, item in enumerate(batch)]
            try:
                outcomes = await asyncio.gather(*tasks, return_exceptions=True)
            except asyncio.CancelledError:
                for t in tasks:
                    t.cancel()
                raise

            for outcome in outcomes:
                if isinstance(outcome, BaseException):
                    raise outcome

            filled = [
                r if r is not None else self._not_started(group, batch[i].tool_name)
                for i, r in enumerate(results)
            ]

        return BatchResult(filled, first_error, (time.perf_counter() - start) * 1000, concurrency)

    def execute_many_sync(self, ctx: Context | None, executions: Iterable[ToolExecution]) -> BatchResult:
        return run_sync(self.execute_many(ctx, executions))

    # ─────────────────────────────────────────────────────────────────
    # Pipeline
    # ─────────────────────────────────────────────────────────────────

    @contextmanager
    def _scope(self, ctx: Context) -> Iterator[Context]:
        """Derive the default-timeout scope, released on every exit path."""
        if self._config.timeout > 0 and ctx.deadline is None:
            with ctx.with_timeout(self._config.timeout) as scoped:
                yield scoped
        else:
            yield ctx

    async def _run(self, ctx: Context, tool: Tool, tool_name: str, input: Input | None) -> Result[Output, ToolException]:
        if ctx.done():
            return Err(self._context_error(ctx, tool_name))

        args: dict[str, Any] = input.params if input is not None else {}

        if (policy := self._config.security_policy) is not None:
            try:
                await policy.validate(ctx, tool_name, args)
            except Exception as e:
                logger.debug(f"[{tool_name}] rejected by security policy: {e}")
                return Err(wrap_error("security validation failed", e))

        if (handler := self._config.confirmation_handler) is not None:
            try:
                approved = not tool.requires_confirmation(args) or await handler.request(ctx, tool, args)
            except Exception as e:
                logger.debug(f"[{tool_name}] confirmation failed: {e}")
                return Err(wrap_error("confirmation failed", e))
            if not approved:
                logger.debug(f"[{tool_name}] denied by user")
                return Err(UserDeniedError(tool_name))

        op = self._invoker(tool)
        if self._config.middleware is not None:
            op = self._config.middleware.wrap(op)

        if not self._config.recover_panics:
            return self._settle(await op(ctx, tool_name, input), tool_name, input)
        try:
            result = await op(ctx, tool_name, input)
        except Exception as e:
            stack = traceback.format_exc() if self._config.capture_stack else ""
            logger.warning(f"[{tool_name}] recovered from {type(e).__name__}: {e}")
            return Err(PanicRecoveredError(tool_name, e, stack=stack))
        return self._settle(result, tool_name, input)

    def _invoker(self, tool: Tool) -> Op:
        async def invoke(ctx: Context, tool_name: str, input: Input | None) -> Result[Output, BaseException]:
            outcome = await tool.execute(ctx, input)
            if outcome is None:
                return Ok(Output())
            if isinstance(outcome, Output):
                return Ok(outcome)
            if not isinstance(outcome, Result):
                raise TypeError(f"tool '{tool_name}' returned {type(outcome).__name__}, expected Output or Result")
            if outcome.is_ok():
                return outcome
            if ctx.done():
                return Err(self._context_error(ctx, tool_name))
            error = outcome.unwrap_err()
            cause = error if isinstance(error, BaseException) else ToolException(str(error), tool_name=tool_name)
            return Err(ToolExecutionError(tool_name, cause, input=input))
        return invoke

    def _settle(
        self,
        result: Result[Output | None, BaseException],
        tool_name: str,
        input: Input | None,
    ) -> Result[Output, ToolException]:
        """Normalize what came out of the chain: empty Ok → Output(), foreign errors wrapped."""
        if result.is_ok():
            output = result.unwrap()
            return Ok(output if output is not None else Output())
        error = result.unwrap_err()
        if isinstance(error, ToolException):
            return Err(error)
        return Err(ToolExecutionError(tool_name, error, input=input))

    def _context_error(self, ctx: Context, tool_name: str) -> ToolException:
        return error_from_context(ctx, tool_name, timeout=self._config.timeout)

    async def _execute_timed(self, ctx: Context | None, tool_name: str, input: Input | None) -> ExecutionResult:
        start = datetime.now(UTC)
        result = await self.execute(ctx, tool_name, input)
        return ExecutionResult.from_result(tool_name, result).with_timing(start, datetime.now(UTC))

    def _not_started(self, ctx: Context, tool_name: str) -> ExecutionResult:
        now = datetime.now(UTC)
        return ExecutionResult.failure(tool_name, self._context_error(ctx, tool_name)).with_timing(now, now)

    def __repr__(self) -> str:
        return f"Executor(tools={len(self._registry)}, timeout={self._config.timeout}, max_concurrent={self._config.max_concurrent})"
