"""Sync/async interoperability.

``run_sync`` lets blocking callers drive the async executor, including from
inside an already running event loop (Jupyter, web handlers).
"""

from __future__ import annotations

import asyncio
import threading
from typing import Coroutine, TypeVar

T = TypeVar("T")


def run_sync(coro: Coroutine[object, object, T], *, loop: asyncio.AbstractEventLoop | None = None) -> T:
    """Run a coroutine to completion from synchronous code.

    1. Explicit ``loop`` → run there
    2. No running loop → ``asyncio.run``
    3. Inside a running loop → fresh loop on a helper thread
    """
    if loop is not None:
        return loop.run_until_complete(coro)
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(coro)
    return _run_in_thread_loop(coro)


def _run_in_thread_loop(coro: Coroutine[object, object, T]) -> T:
    result: T | None = None
    error: BaseException | None = None
    done = threading.Event()

    def runner() -> None:
        nonlocal result, error
        try:
            result = asyncio.run(coro)
        except BaseException as e:
            error = e
        finally:
            done.set()

    thread = threading.Thread(target=runner, name="toolexec-run-sync", daemon=True)
    thread.start()
    done.wait()

    if error is not None:
        raise error
    return result  # type: ignore[return-value]
