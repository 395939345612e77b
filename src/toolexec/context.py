"""Cancellation scope shared by every stage of an execution.

A ``Context`` carries an optional deadline, a cancellation signal and a few
request-scoped values. Scopes form a tree: cancelling a scope cancels every
scope derived from it, and a derived scope never outlives its parent's
deadline.

Cancellation is cooperative. Nothing is interrupted preemptively; tools are
expected to poll ``ctx.done()`` or await ``ctx.wait()`` / ``ctx.sleep()``.
``cancel()`` may be called from any thread.

Example:
    >>> root = Context.background()
    >>> with root.with_timeout(5.0) as ctx:
    ...     ctx.done()
    False
"""

from __future__ import annotations

import asyncio
import threading
import time
from typing import Any


class ContextError(Exception):
    """Why a context finished."""


class Cancelled(ContextError):
    def __init__(self) -> None:
        super().__init__("context canceled")


class DeadlineExceeded(ContextError):
    def __init__(self) -> None:
        super().__init__("context deadline exceeded")


def _resolve(fut: asyncio.Future[None]) -> None:
    if not fut.done():
        fut.set_result(None)


class Context:
    """Cancellable scope with an optional deadline (``time.monotonic`` seconds)."""

    __slots__ = ("_parent", "_deadline", "_timeout", "_values", "_lock", "_err", "_children", "_waiters")

    def __init__(
        self,
        *,
        parent: Context | None = None,
        deadline: float | None = None,
        timeout: float = 0.0,
        values: dict[str, Any] | None = None,
    ) -> None:
        self._parent = parent
        self._deadline = deadline
        self._timeout = timeout
        self._values = values or {}
        self._lock = threading.Lock()
        self._err: ContextError | None = None
        self._children: set[Context] = set()
        self._waiters: list[tuple[asyncio.AbstractEventLoop, asyncio.Future[None]]] = []

    @classmethod
    def background(cls) -> Context:
        """Root scope: no deadline, never done unless cancelled."""
        return cls()

    # ─────────────────────────────────────────────────────────────────
    # Derivation
    # ─────────────────────────────────────────────────────────────────

    def with_cancel(self) -> Context:
        return self._derive()

    def with_timeout(self, seconds: float) -> Context:
        return self._derive(deadline=time.monotonic() + seconds, timeout=seconds)

    def with_deadline(self, deadline: float) -> Context:
        return self._derive(deadline=deadline)

    def with_values(self, **values: Any) -> Context:
        return self._derive(values=values)

    def _derive(
        self,
        *,
        deadline: float | None = None,
        timeout: float = 0.0,
        values: dict[str, Any] | None = None,
    ) -> Context:
        if deadline is None or (self._deadline is not None and self._deadline <= deadline):
            deadline, timeout = self._deadline, self._timeout
        child = Context(parent=self, deadline=deadline, timeout=timeout, values=values)
        with self._lock:
            err = self._err
            if err is None:
                self._children.add(child)
        if err is not None:
            child._finish(err)
        return child

    # ─────────────────────────────────────────────────────────────────
    # State
    # ─────────────────────────────────────────────────────────────────

    @property
    def deadline(self) -> float | None:
        return self._deadline

    @property
    def timeout(self) -> float:
        """Duration the deadline was derived from, 0.0 when there is none."""
        return self._timeout

    def remaining(self) -> float | None:
        """Seconds left until the deadline (negative once passed), None without one."""
        return None if self._deadline is None else self._deadline - time.monotonic()

    def err(self) -> ContextError | None:
        if self._err is None and self._deadline is not None and time.monotonic() >= self._deadline:
            self._finish(DeadlineExceeded())
        return self._err

    def done(self) -> bool:
        return self.err() is not None

    def cancel(self) -> None:
        """Cancel this scope and its descendants, then detach from the parent."""
        self._finish(Cancelled())
        if self._parent is not None:
            with self._parent._lock:
                self._parent._children.discard(self)

    def _finish(self, err: ContextError) -> None:
        with self._lock:
            if self._err is not None:
                return
            self._err = err
            children, self._children = self._children, set()
            waiters, self._waiters = self._waiters, []
        for loop, fut in waiters:
            if not loop.is_closed():
                loop.call_soon_threadsafe(_resolve, fut)
        for child in children:
            child._finish(err)

    # ─────────────────────────────────────────────────────────────────
    # Waiting
    # ─────────────────────────────────────────────────────────────────

    async def wait(self) -> ContextError:
        """Block until the scope is done and return why."""
        loop = asyncio.get_running_loop()
        while (err := self.err()) is None:
            fut: asyncio.Future[None] = loop.create_future()
            entry = (loop, fut)
            with self._lock:
                if self._err is not None:
                    continue
                self._waiters.append(entry)
            try:
                remaining = self.remaining()
                await asyncio.wait((fut,), timeout=None if remaining is None else max(remaining, 0.0))
            finally:
                with self._lock:
                    if entry in self._waiters:
                        self._waiters.remove(entry)
                fut.cancel()
        return err

    async def sleep(self, seconds: float) -> bool:
        """Sleep for ``seconds`` unless the scope finishes first.

        Returns True when the full time elapsed, False when interrupted.
        """
        if self.done():
            return False
        try:
            await asyncio.wait_for(self.wait(), seconds)
        except TimeoutError:
            return True
        return False

    # ─────────────────────────────────────────────────────────────────
    # Values
    # ─────────────────────────────────────────────────────────────────

    def get(self, key: str, default: Any = None) -> Any:
        ctx: Context | None = self
        while ctx is not None:
            if key in ctx._values:
                return ctx._values[key]
            ctx = ctx._parent
        return default

    def __getitem__(self, key: str) -> Any:
        if (value := self.get(key, _MISSING)) is _MISSING:
            raise KeyError(key)
        return value

    def __contains__(self, key: str) -> bool:
        return self.get(key, _MISSING) is not _MISSING

    # ─────────────────────────────────────────────────────────────────
    # Scoping
    # ─────────────────────────────────────────────────────────────────

    def __enter__(self) -> Context:
        return self

    def __exit__(self, *exc: object) -> None:
        self.cancel()

    def __repr__(self) -> str:
        state = type(self._err).__name__ if self._err else "active"
        return f"Context(state={state}, remaining={self.remaining()})"


_MISSING = object()
