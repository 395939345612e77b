"""Error taxonomy and the Result type used across the runtime."""

from .errors import (
    DuplicateToolError,
    ErrorKind,
    MiddlewareError,
    NilToolError,
    PanicRecoveredError,
    SecurityViolationError,
    ToolCancelledError,
    ToolException,
    ToolExecutionError,
    ToolNotFoundError,
    ToolTimeoutError,
    ToolValidationError,
    UserDeniedError,
    classify,
    error_from_context,
    format_duration,
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
    iter_chain,
    matches,
    wrap_error,
)
from .result import Err, Ok, Result, collect_results

__all__ = [
    # Result
    "Result", "Ok", "Err", "collect_results",
    # Kinds
    "ErrorKind",
    # Exceptions
    "ToolException", "ToolNotFoundError", "DuplicateToolError", "NilToolError",
    "ToolValidationError", "ToolExecutionError", "ToolTimeoutError", "ToolCancelledError",
    "PanicRecoveredError", "MiddlewareError", "UserDeniedError", "SecurityViolationError",
    # Helpers
    "wrap_error", "iter_chain", "matches", "classify", "get_tool_name", "error_from_context",
    "format_duration",
    "is_not_found", "is_duplicate_tool", "is_nil_tool", "is_validation", "is_execution",
    "is_timeout", "is_cancelled", "is_panic", "is_middleware_error", "is_user_denied",
    "is_security_violation",
]
