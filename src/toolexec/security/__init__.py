"""Security policies screening tool calls before execution."""

from .policy import (
    DEFAULT_BLOCKED_COMMANDS,
    DEFAULT_BLOCKED_PATHS,
    DEFAULT_COMMAND_TOOLS,
    DEFAULT_PATH_TOOLS,
    CompositeSecurityPolicy,
    DenylistValidator,
    NoOpSecurityPolicy,
    PathValidator,
    SecurityPolicy,
    default_security_policy,
)

__all__ = [
    "SecurityPolicy", "DenylistValidator", "PathValidator", "CompositeSecurityPolicy",
    "NoOpSecurityPolicy", "default_security_policy",
    "DEFAULT_BLOCKED_COMMANDS", "DEFAULT_BLOCKED_PATHS", "DEFAULT_COMMAND_TOOLS", "DEFAULT_PATH_TOOLS",
]
