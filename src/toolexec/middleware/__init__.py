"""Middleware around tool invocation.

Middleware wraps the invocation op to add cross-cutting behavior (recovery,
timing, logging, validation) without touching the tools themselves.

Example:
    >>> chain = default_middleware_chain().add(LoggingMiddleware.for_logger())
    >>> executor = Executor(registry, ExecutorConfig(middleware=chain))
"""

from .builtins import (
    ContextCheckMiddleware,
    InputValidationMiddleware,
    LoggingMiddleware,
    RecoveryMiddleware,
    TimingMiddleware,
    default_middleware_chain,
)
from .middleware import (
    BaseMiddleware,
    FunctionMiddleware,
    Middleware,
    MiddlewareChain,
    Op,
    apply_middleware,
    combine,
    compose,
)

__all__ = [
    # Core
    "Op", "Middleware", "BaseMiddleware", "FunctionMiddleware", "MiddlewareChain",
    "compose", "apply_middleware", "combine",
    # Built-ins
    "RecoveryMiddleware", "ContextCheckMiddleware", "InputValidationMiddleware",
    "TimingMiddleware", "LoggingMiddleware", "default_middleware_chain",
]
