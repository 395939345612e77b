"""Error taxonomy for tool execution.

Every failure the runtime reports is a ``ToolException``. Subclasses carry the
structured fields of one failure kind, and ``ErrorKind`` is the closed set of
sentinels callers match against. Wrapping uses ordinary exception chaining
(``__cause__``), so the predicates below look through wrappers:

    >>> err = wrap_error("security validation failed", SecurityViolationError("bash", "blocked"))
    >>> is_security_violation(err), get_tool_name(err)
    (True, 'bash')
"""

from __future__ import annotations

from enum import StrEnum
from typing import TYPE_CHECKING, Any, ClassVar

from ..context import DeadlineExceeded

if TYPE_CHECKING:
    from collections.abc import Iterator

    from ..context import Context


class ErrorKind(StrEnum):
    """Sentinel identities for the failure kinds the runtime produces."""
    NOT_FOUND = "not_found"
    DUPLICATE_TOOL = "duplicate_tool"
    NIL_TOOL = "nil_tool"
    VALIDATION = "validation"
    EXECUTION = "execution"
    TIMEOUT = "timeout"
    CANCELLED = "cancelled"
    PANIC = "panic"
    MIDDLEWARE = "middleware"
    USER_DENIED = "user_denied"
    SECURITY_VIOLATION = "security_violation"


_RETRYABLE_KINDS: frozenset[ErrorKind] = frozenset({ErrorKind.TIMEOUT, ErrorKind.CANCELLED})


def format_duration(seconds: float) -> str:
    """Compact human duration: ``250ms``, ``1.5s``."""
    if 0 < seconds < 1:
        return f"{seconds * 1000:g}ms"
    return f"{seconds:g}s"


class ToolException(Exception):
    """Base of every runtime failure.

    A bare ``ToolException`` (``kind is None``) is the generic wrapper used to
    tag a failure with the stage it came from, e.g. "confirmation failed".
    """

    kind: ClassVar[ErrorKind | None] = None

    def __init__(
        self,
        message: str = "",
        *,
        tool_name: str = "",
        operation: str = "",
        cause: BaseException | None = None,
    ) -> None:
        self.message = message
        self.tool_name = tool_name
        self.operation = operation
        super().__init__(message)
        if cause is not None:
            self.__cause__ = cause

    @property
    def cause(self) -> BaseException | None:
        return self.__cause__

    @property
    def is_retryable(self) -> bool:
        """Whether retrying the same call could plausibly succeed."""
        return self.kind in _RETRYABLE_KINDS

    def _render(self) -> str:
        if self.cause is None:
            return self.message
        return f"{self.message}: {self.cause}" if self.message else str(self.cause)

    def __str__(self) -> str:
        return self._render()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(tool_name={self.tool_name!r}, message={self.message!r})"


class ToolNotFoundError(ToolException):
    kind = ErrorKind.NOT_FOUND

    def __init__(self, tool_name: str) -> None:
        super().__init__("tool not found", tool_name=tool_name, operation="lookup")

    def _render(self) -> str:
        return f"tool not found: '{self.tool_name}'"


class DuplicateToolError(ToolException):
    kind = ErrorKind.DUPLICATE_TOOL

    def __init__(self, tool_name: str) -> None:
        super().__init__("duplicate tool registration", tool_name=tool_name, operation="register")

    def _render(self) -> str:
        return f"duplicate tool registration: '{self.tool_name}'"


class NilToolError(ToolException):
    kind = ErrorKind.NIL_TOOL

    def __init__(self) -> None:
        super().__init__("cannot register nil tool", operation="register")


class ToolValidationError(ToolException):
    """Input or registration data failed validation."""

    kind = ErrorKind.VALIDATION

    def __init__(self, tool_name: str, message: str, *, field: str = "", cause: BaseException | None = None) -> None:
        self.field = field
        super().__init__(message, tool_name=tool_name, operation="validate", cause=cause)

    def _render(self) -> str:
        where = f" field '{self.field}'" if self.field else ""
        return f"validation failed for tool '{self.tool_name}'{where}: {self.message}"


class ToolExecutionError(ToolException):
    """A tool returned a failure. ``cause`` is the tool's own error."""

    kind = ErrorKind.EXECUTION

    def __init__(self, tool_name: str, cause: BaseException, *, input: Any = None) -> None:
        self.input = input
        super().__init__(str(cause), tool_name=tool_name, operation="execute", cause=cause)

    def _render(self) -> str:
        return f"tool '{self.tool_name}' execution failed: {self.message}"


class ToolTimeoutError(ToolException):
    """The deadline of the execution scope passed. ``timeout`` is in seconds."""

    kind = ErrorKind.TIMEOUT

    def __init__(self, tool_name: str, timeout: float, *, cause: BaseException | None = None) -> None:
        self.timeout = timeout
        super().__init__("execution timed out", tool_name=tool_name, operation="execute", cause=cause)

    def _render(self) -> str:
        return f"tool '{self.tool_name}' timed out after {format_duration(self.timeout)}"


class ToolCancelledError(ToolException):
    kind = ErrorKind.CANCELLED

    def __init__(
        self,
        tool_name: str,
        message: str = "execution cancelled",
        *,
        operation: str = "execute",
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message, tool_name=tool_name, operation=operation, cause=cause)

    def _render(self) -> str:
        return f"{self.operation} failed for tool '{self.tool_name}': {self.message}"


class PanicRecoveredError(ToolException):
    """An exception escaped a tool or middleware and was caught by a recovery frame."""

    kind = ErrorKind.PANIC

    def __init__(self, tool_name: str, panic_value: object, *, stack: str = "") -> None:
        self.panic_value = panic_value
        self.stack = stack
        super().__init__(
            "panic recovered", tool_name=tool_name, operation="execute",
            cause=panic_value if isinstance(panic_value, BaseException) else None,
        )

    def _render(self) -> str:
        return f"panic recovered in tool '{self.tool_name}': {self.panic_value!r}"


class MiddlewareError(ToolException):
    kind = ErrorKind.MIDDLEWARE

    def __init__(
        self,
        middleware_name: str,
        tool_name: str,
        message: str = "",
        *,
        cause: BaseException | None = None,
    ) -> None:
        self.middleware_name = middleware_name
        super().__init__(message, tool_name=tool_name, operation="middleware", cause=cause)

    def _render(self) -> str:
        detail = self.message or str(self.cause)
        return f"middleware '{self.middleware_name}' failed for tool '{self.tool_name}': {detail}"


class UserDeniedError(ToolException):
    kind = ErrorKind.USER_DENIED

    def __init__(self, tool_name: str) -> None:
        super().__init__("user denied execution", tool_name=tool_name, operation="confirm")

    def _render(self) -> str:
        return f"user denied execution of tool '{self.tool_name}'"


class SecurityViolationError(ToolException):
    """A security policy rejected the call. ``pattern`` or ``path`` says which rule fired."""

    kind = ErrorKind.SECURITY_VIOLATION

    def __init__(self, tool_name: str, reason: str, *, pattern: str = "", path: str = "") -> None:
        self.reason = reason
        self.pattern = pattern
        self.path = path
        super().__init__(reason, tool_name=tool_name, operation="security")

    def _render(self) -> str:
        msg = f"security violation in tool '{self.tool_name}': {self.reason}"
        if self.pattern:
            msg += f" (pattern: {self.pattern})"
        if self.path:
            msg += f" (path: {self.path})"
        return msg


# ─────────────────────────────────────────────────────────────────────────────
# Wrapping & Classification
# ─────────────────────────────────────────────────────────────────────────────


def wrap_error(message: str, cause: BaseException) -> ToolException:
    """Tag ``cause`` with the stage it failed in, keeping it matchable."""
    return ToolException(message, tool_name=get_tool_name(cause), cause=cause)


def iter_chain(err: BaseException | None) -> Iterator[BaseException]:
    """Yield ``err`` and everything it wraps, outermost first."""
    seen: set[int] = set()
    while err is not None and id(err) not in seen:
        seen.add(id(err))
        yield err
        err = err.__cause__


def matches(err: BaseException | None, kind: ErrorKind) -> bool:
    """True when ``err`` or anything it wraps is of ``kind``."""
    return any(getattr(e, "kind", None) is kind for e in iter_chain(err))


def classify(err: BaseException | None) -> ErrorKind | None:
    """The outermost kind found along the chain, or None for foreign errors."""
    for e in iter_chain(err):
        if (kind := getattr(e, "kind", None)) is not None:
            return kind
    return None


def get_tool_name(err: BaseException | None) -> str:
    """Tool name from the first structured error in the chain that carries one."""
    for e in iter_chain(err):
        if isinstance(e, ToolException) and e.tool_name:
            return e.tool_name
    return ""


def is_not_found(err: BaseException | None) -> bool:
    return matches(err, ErrorKind.NOT_FOUND)


def is_duplicate_tool(err: BaseException | None) -> bool:
    return matches(err, ErrorKind.DUPLICATE_TOOL)


def is_nil_tool(err: BaseException | None) -> bool:
    return matches(err, ErrorKind.NIL_TOOL)


def is_validation(err: BaseException | None) -> bool:
    return matches(err, ErrorKind.VALIDATION)


def is_execution(err: BaseException | None) -> bool:
    return matches(err, ErrorKind.EXECUTION)


def is_timeout(err: BaseException | None) -> bool:
    return matches(err, ErrorKind.TIMEOUT)


def is_cancelled(err: BaseException | None) -> bool:
    return matches(err, ErrorKind.CANCELLED)


def is_panic(err: BaseException | None) -> bool:
    return matches(err, ErrorKind.PANIC)


def is_middleware_error(err: BaseException | None) -> bool:
    return matches(err, ErrorKind.MIDDLEWARE)


def is_user_denied(err: BaseException | None) -> bool:
    return matches(err, ErrorKind.USER_DENIED)


def is_security_violation(err: BaseException | None) -> bool:
    return matches(err, ErrorKind.SECURITY_VIOLATION)


def error_from_context(
    ctx: Context,
    tool_name: str,
    *,
    timeout: float = 0.0,
    operation: str = "execute",
    message: str = "execution cancelled",
) -> ToolException:
    """Translate a finished context into TIMEOUT or CANCELLED.

    The timeout reported is the time left if still positive, otherwise the
    timeout the scope was derived with, otherwise ``timeout``.
    """
    err = ctx.err()
    if isinstance(err, DeadlineExceeded):
        remaining = ctx.remaining()
        if remaining is None or remaining <= 0:
            remaining = ctx.timeout or timeout
        return ToolTimeoutError(tool_name, remaining, cause=err)
    return ToolCancelledError(tool_name, message, operation=operation, cause=err)
