"""Environment-based configuration using pydantic-settings.

Nothing in the runtime reads the environment on its own; these settings are
picked up only through ``ExecutorConfig.from_settings`` / ``Executor.from_settings``
and ``configure_logging``.

Example environment:
    TOOLEXEC_EXECUTOR_TIMEOUT=10
    TOOLEXEC_EXECUTOR_MAX_CONCURRENT=4
    TOOLEXEC_SECURITY_ENABLED=true
    TOOLEXEC_LOG_LEVEL=DEBUG
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Literal

import orjson
from pydantic import Field, NonNegativeFloat
from pydantic_settings import BaseSettings, SettingsConfigDict


class ExecutorSettings(BaseSettings):
    """Executor defaults."""

    model_config = SettingsConfigDict(env_prefix="TOOLEXEC_EXECUTOR_", extra="ignore")

    timeout: NonNegativeFloat = Field(default=30.0, description="Default timeout in seconds, 0 disables it")
    max_concurrent: int = Field(default=1, description="Batch parallelism, <= 0 is unbounded")
    recover_panics: bool = True
    capture_stack: bool = True
    default_middleware: bool = Field(default=False, description="Install the default middleware chain")


class SecuritySettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="TOOLEXEC_SECURITY_", extra="ignore")

    enabled: bool = Field(default=False, description="Install the default security policy")


class LoggingSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="TOOLEXEC_LOG_", extra="ignore")

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    format: Literal["json", "text"] = "text"


class ToolexecSettings(BaseSettings):
    """Root settings, loaded from ``TOOLEXEC_*`` variables and an optional ``.env``."""

    model_config = SettingsConfigDict(
        env_prefix="TOOLEXEC_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
        validate_default=True,
    )

    executor: ExecutorSettings = Field(default_factory=ExecutorSettings)
    security: SecuritySettings = Field(default_factory=SecuritySettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


@lru_cache(maxsize=1)
def get_settings() -> ToolexecSettings:
    """Cached settings instance."""
    return ToolexecSettings()


def clear_settings_cache() -> None:
    """Force the next ``get_settings()`` to re-read the environment."""
    get_settings.cache_clear()


_TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class JsonFormatter(logging.Formatter):
    """One JSON object per record, serialized with orjson."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "time": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            entry["exc_info"] = self.formatException(record.exc_info)
        return orjson.dumps(entry).decode()


def configure_logging(settings: LoggingSettings | None = None) -> logging.Logger:
    """Attach one stream handler to the ``toolexec`` logger.

    Calling it again replaces the handler instead of stacking another one.
    """
    settings = settings or get_settings().logging
    log = logging.getLogger("toolexec")
    for handler in [h for h in log.handlers if getattr(h, "_toolexec", False)]:
        log.removeHandler(handler)
    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter() if settings.format == "json" else logging.Formatter(_TEXT_FORMAT))
    handler._toolexec = True  # type: ignore[attr-defined]
    log.addHandler(handler)
    log.setLevel(settings.level)
    return log
