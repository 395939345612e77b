"""Executor configuration."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import timedelta
from typing import TYPE_CHECKING, Any, Self

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..confirmation import ConfirmationHandler
from ..middleware import MiddlewareChain, default_middleware_chain
from ..security import SecurityPolicy, default_security_policy

if TYPE_CHECKING:
    from ..settings import ToolexecSettings

DEFAULT_TIMEOUT = 30.0
DEFAULT_MAX_CONCURRENT = 1


class ExecutorConfig(BaseModel):
    """Immutable executor options.

    Example:
        >>> config = ExecutorConfig(
        ...     timeout=timedelta(seconds=10),
        ...     max_concurrent=4,
        ...     middleware=[RecoveryMiddleware(), TimingMiddleware()],
        ...     security_policy=default_security_policy(),
        ... )
    """

    model_config = ConfigDict(frozen=True, extra="forbid", arbitrary_types_allowed=True)

    timeout: float = Field(default=DEFAULT_TIMEOUT, description="Seconds per execution; <= 0 disables the default")
    max_concurrent: int = Field(default=DEFAULT_MAX_CONCURRENT, description="Batch parallelism; <= 0 is unbounded")
    recover_panics: bool = True
    capture_stack: bool = Field(default=True, description="Attach a traceback to recovered panics")
    middleware: MiddlewareChain | None = None
    security_policy: SecurityPolicy | None = None
    confirmation_handler: ConfirmationHandler | None = None

    @field_validator("timeout", mode="before")
    @classmethod
    def _timeout_seconds(cls, v: Any) -> Any:
        return v.total_seconds() if isinstance(v, timedelta) else v

    @field_validator("middleware", mode="before")
    @classmethod
    def _coerce_chain(cls, v: Any) -> Any:
        if isinstance(v, Sequence) and not isinstance(v, MiddlewareChain):
            return MiddlewareChain(*v)
        return v

    @classmethod
    def from_settings(cls, settings: ToolexecSettings | None = None, **overrides: Any) -> Self:
        """Build from environment-driven settings; keyword overrides win."""
        if settings is None:
            from ..settings import get_settings
            settings = get_settings()
        ex = settings.executor
        values: dict[str, Any] = {
            "timeout": ex.timeout,
            "max_concurrent": ex.max_concurrent,
            "recover_panics": ex.recover_panics,
            "capture_stack": ex.capture_stack,
        }
        if ex.default_middleware:
            values["middleware"] = default_middleware_chain()
        if settings.security.enabled:
            values["security_policy"] = default_security_policy()
        return cls(**{**values, **overrides})


@dataclass(frozen=True, slots=True)
class ExecutorConfigView:
    """Read-only summary of an executor's configuration."""
    timeout: float
    max_concurrent: int
    recover_panics: bool
    has_middleware: bool
    middleware_count: int
    has_security_policy: bool
    has_confirmation_handler: bool

    @classmethod
    def of(cls, config: ExecutorConfig) -> Self:
        count = len(config.middleware) if config.middleware is not None else 0
        return cls(
            timeout=config.timeout,
            max_concurrent=config.max_concurrent,
            recover_panics=config.recover_panics,
            has_middleware=count > 0,
            middleware_count=count,
            has_security_policy=config.security_policy is not None,
            has_confirmation_handler=config.confirmation_handler is not None,
        )
