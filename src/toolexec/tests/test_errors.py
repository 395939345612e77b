"""Tests for the error taxonomy and its predicates."""

from __future__ import annotations

import time

import pytest

from toolexec import (
    Cancelled,
    Context,
    DeadlineExceeded,
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
    get_tool_name,
    is_cancelled,
    is_execution,
    is_not_found,
    is_panic,
    is_security_violation,
    is_timeout,
    is_validation,
    matches,
    wrap_error,
)
from toolexec.errors import error_from_context, format_duration


# ═════════════════════════════════════════════════════════════════════════════
# Messages
# ═════════════════════════════════════════════════════════════════════════════


@pytest.mark.parametrize(("error", "expected"), [
    (ToolNotFoundError("ghost"), "tool not found: 'ghost'"),
    (DuplicateToolError("echo"), "duplicate tool registration: 'echo'"),
    (NilToolError(), "cannot register nil tool"),
    (ToolValidationError("read", "must be relative", field="path"),
     "validation failed for tool 'read' field 'path': must be relative"),
    (ToolValidationError("read", "input cannot be nil"), "validation failed for tool 'read': input cannot be nil"),
    (ToolExecutionError("read", OSError("disk full")), "tool 'read' execution failed: disk full"),
    (ToolTimeoutError("slow", 0.25), "tool 'slow' timed out after 250ms"),
    (ToolTimeoutError("slow", 30.0), "tool 'slow' timed out after 30s"),
    (UserDeniedError("rm"), "user denied execution of tool 'rm'"),
    (MiddlewareError("logging", "echo", "after hook failed"), "middleware 'logging' failed for tool 'echo': after hook failed"),
    (SecurityViolationError("bash", "blocked command pattern detected", pattern="mkfs"),
     "security violation in tool 'bash': blocked command pattern detected (pattern: mkfs)"),
    (SecurityViolationError("file_read", "access denied to sensitive path", path=".env"),
     "security violation in tool 'file_read': access denied to sensitive path (path: .env)"),
])
def test_error_messages(error: ToolException, expected: str) -> None:
    assert str(error) == expected


def test_panic_message_shows_value() -> None:
    err = PanicRecoveredError("boom", RuntimeError("kaput"), stack="Traceback...")
    assert str(err) == "panic recovered in tool 'boom': RuntimeError('kaput')"
    assert err.stack == "Traceback..."
    assert isinstance(err.cause, RuntimeError)


def test_panic_with_non_exception_value_has_no_cause() -> None:
    err = PanicRecoveredError("boom", "just a string")
    assert err.cause is None
    assert err.panic_value == "just a string"


def test_format_duration() -> None:
    assert format_duration(0.1) == "100ms"
    assert format_duration(1.5) == "1.5s"
    assert format_duration(0) == "0s"


# ═════════════════════════════════════════════════════════════════════════════
# Matching through wrappers
# ═════════════════════════════════════════════════════════════════════════════


def test_each_class_has_exactly_its_kind() -> None:
    assert ToolNotFoundError("x").kind is ErrorKind.NOT_FOUND
    assert ToolTimeoutError("x", 1).kind is ErrorKind.TIMEOUT
    assert ToolException("generic").kind is None


def test_predicates_see_through_wrap_error() -> None:
    inner = SecurityViolationError("bash", "blocked command pattern detected", pattern="rm -rf /")
    wrapped = wrap_error("security validation failed", inner)

    assert is_security_violation(wrapped)
    assert not is_timeout(wrapped)
    assert get_tool_name(wrapped) == "bash"
    assert wrapped.cause is inner
    assert str(wrapped).startswith("security validation failed: security violation in tool 'bash'")


def test_execution_error_keeps_tool_cause_matchable() -> None:
    cause = ToolValidationError("inner", "bad arg")
    err = ToolExecutionError("outer", cause, input={"a": 1})

    assert is_execution(err)
    assert is_validation(err)
    assert classify(err) is ErrorKind.EXECUTION
    assert err.input == {"a": 1}
    assert get_tool_name(err) == "outer"


def test_foreign_errors_are_unclassified() -> None:
    assert classify(ValueError("x")) is None
    assert classify(None) is None
    assert not matches(None, ErrorKind.NOT_FOUND)
    assert get_tool_name(ValueError("x")) == ""


def test_get_tool_name_skips_wrappers_without_name() -> None:
    err = ToolException("outer", cause=ToolException("middle", cause=ToolNotFoundError("deep")))
    assert get_tool_name(err) == "deep"
    assert is_not_found(err)


def test_retryable_kinds() -> None:
    assert ToolTimeoutError("x", 1).is_retryable
    assert ToolCancelledError("x").is_retryable
    assert not ToolNotFoundError("x").is_retryable


# ═════════════════════════════════════════════════════════════════════════════
# Context translation
# ═════════════════════════════════════════════════════════════════════════════


def test_error_from_cancelled_context() -> None:
    ctx = Context.background().with_cancel()
    ctx.cancel()

    err = error_from_context(ctx, "t")

    assert isinstance(err, ToolCancelledError)
    assert is_cancelled(err) and not is_timeout(err)
    assert isinstance(err.cause, Cancelled)
    assert str(err) == "execute failed for tool 't': execution cancelled"


def test_error_from_expired_context_reports_derived_timeout() -> None:
    ctx = Context.background().with_timeout(0.01)
    time.sleep(0.02)

    err = error_from_context(ctx, "t", timeout=30.0)

    assert isinstance(err, ToolTimeoutError)
    assert err.timeout == 0.01
    assert isinstance(err.cause, DeadlineExceeded)


def test_error_from_expired_deadline_falls_back_to_configured_timeout() -> None:
    ctx = Context.background().with_deadline(time.monotonic() - 1)

    err = error_from_context(ctx, "t", timeout=2.5)

    assert is_timeout(err)
    assert err.timeout == 2.5


def test_panic_predicate() -> None:
    assert is_panic(wrap_error("stage", PanicRecoveredError("t", ValueError())))
