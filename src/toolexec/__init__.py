"""toolexec - embeddable tool execution runtime for AI agents.

Registers named tools and runs calls against them with timeouts,
cooperative cancellation, crash isolation, user approval, security
screening, middleware and bounded-concurrency batches. Includes the fenced
block protocol for pulling tool calls out of LLM text.

Quick Start:
    >>> from toolexec import Context, Executor, Input, Output, ToolRegistry, tool
    >>>
    >>> @tool(description="Echo the text param back")
    ... async def echo(ctx, input):
    ...     return Output.ok(input.get_str("text"))
    >>>
    >>> registry = ToolRegistry()
    >>> registry.register(echo)
    >>> executor = Executor(registry, timeout=5)
    >>> result = await executor.execute(Context.background(), "echo", Input().with_param("text", "hi"))
    >>> result.unwrap().data
    b'hi'

From LLM text to result blocks:
    >>> calls, prose = extract_tool_calls_lenient(llm_reply)
    >>> batch = await executor.execute_many(ctx, [ToolExecution(c.name, c.to_input()) for c in calls])
    >>> format_results(batch)
"""

from __future__ import annotations

__version__ = "0.1.0"

from .context import Cancelled, Context, ContextError, DeadlineExceeded

from .errors import (
    DuplicateToolError,
    Err,
    ErrorKind,
    MiddlewareError,
    NilToolError,
    Ok,
    PanicRecoveredError,
    Result,
    SecurityViolationError,
    ToolCancelledError,
    ToolException,
    ToolExecutionError,
    ToolNotFoundError,
    ToolTimeoutError,
    ToolValidationError,
    UserDeniedError,
    classify,
    get_tool_name,
    is_cancelled,
    is_duplicate_tool,
    is_execution,
    is_middleware_error,
    is_nil_tool,
    is_not_found,
    is_panic,
    is_security_violation,
    is_timeout,
    is_user_denied,
    is_validation,
    matches,
    wrap_error,
)

from .core import (
    DEFAULT_MAX_OUTPUT_SIZE,
    BaseTool,
    FunctionTool,
    Input,
    Output,
    Tool,
    ToolInfo,
    ToolMetadata,
    tool,
    truncate_output,
)

from .registry import (
    RegistrySnapshot,
    ToolRegistry,
    get_registry,
    register_default,
    reset_registry,
    set_registry,
)

from .middleware import (
    BaseMiddleware,
    ContextCheckMiddleware,
    FunctionMiddleware,
    InputValidationMiddleware,
    LoggingMiddleware,
    Middleware,
    MiddlewareChain,
    RecoveryMiddleware,
    TimingMiddleware,
    apply_middleware,
    combine,
    default_middleware_chain,
)

from .security import (
    CompositeSecurityPolicy,
    DenylistValidator,
    NoOpSecurityPolicy,
    PathValidator,
    SecurityPolicy,
    default_security_policy,
)

from .confirmation import (
    AutoApproveHandler,
    AutoDenyHandler,
    CallbackConfirmationHandler,
    ConfirmationHandler,
    FunctionConfirmationHandler,
)

from .executor import (
    BatchResult,
    ExecutionResult,
    Executor,
    ExecutorConfig,
    ExecutorConfigView,
    ToolExecution,
)

from .protocol import (
    ToolCall,
    ToolCallParseError,
    ToolCallResult,
    count_tool_calls,
    extract_tool_calls_lenient,
    format_results,
    has_tool_call,
    parse_tool_calls,
    parse_tool_calls_lenient,
)

from .settings import (
    ExecutorSettings,
    JsonFormatter,
    LoggingSettings,
    SecuritySettings,
    ToolexecSettings,
    clear_settings_cache,
    configure_logging,
    get_settings,
)

from .runtime import run_sync

__all__ = [
    # Context
    "Context", "ContextError", "Cancelled", "DeadlineExceeded",
    # Errors
    "Result", "Ok", "Err", "ErrorKind",
    "ToolException", "ToolNotFoundError", "DuplicateToolError", "NilToolError",
    "ToolValidationError", "ToolExecutionError", "ToolTimeoutError", "ToolCancelledError",
    "PanicRecoveredError", "MiddlewareError", "UserDeniedError", "SecurityViolationError",
    "wrap_error", "matches", "classify", "get_tool_name",
    "is_not_found", "is_duplicate_tool", "is_nil_tool", "is_validation", "is_execution",
    "is_timeout", "is_cancelled", "is_panic", "is_middleware_error", "is_user_denied",
    "is_security_violation",
    # Core
    "Tool", "BaseTool", "ToolMetadata", "FunctionTool", "tool",
    "Input", "Output", "ToolInfo", "DEFAULT_MAX_OUTPUT_SIZE", "truncate_output",
    # Registry
    "ToolRegistry", "RegistrySnapshot", "get_registry", "set_registry", "reset_registry",
    "register_default",
    # Middleware
    "Middleware", "BaseMiddleware", "FunctionMiddleware", "MiddlewareChain",
    "apply_middleware", "combine", "default_middleware_chain",
    "RecoveryMiddleware", "ContextCheckMiddleware", "InputValidationMiddleware",
    "TimingMiddleware", "LoggingMiddleware",
    # Security
    "SecurityPolicy", "DenylistValidator", "PathValidator", "CompositeSecurityPolicy",
    "NoOpSecurityPolicy", "default_security_policy",
    # Confirmation
    "ConfirmationHandler", "AutoApproveHandler", "AutoDenyHandler",
    "FunctionConfirmationHandler", "CallbackConfirmationHandler",
    # Executor
    "Executor", "ExecutorConfig", "ExecutorConfigView", "ExecutionResult", "ToolExecution",
    "BatchResult",
    # Protocol
    "ToolCall", "ToolCallParseError", "ToolCallResult", "parse_tool_calls",
    "parse_tool_calls_lenient", "extract_tool_calls_lenient", "has_tool_call",
    "count_tool_calls", "format_results",
    # Settings
    "ToolexecSettings", "ExecutorSettings", "SecuritySettings", "LoggingSettings",
    "get_settings", "clear_settings_cache", "configure_logging", "JsonFormatter",
    # Interop
    "run_sync",
]
