"""Advisory security screening of tool calls.

Policies look at the tool name and raw args before anything runs and raise
``SecurityViolationError`` to block the call. They are pattern filters for
obvious mistakes, not a sandbox.

Example:
    >>> policy = default_security_policy()
    >>> await policy.validate(ctx, "bash", {"command": "ls -la"})        # allowed
    >>> await policy.validate(ctx, "bash", {"command": "sudo rm -rf /"})  # raises
"""

from __future__ import annotations

import posixpath
from collections.abc import Iterable
from fnmatch import fnmatchcase
from typing import TYPE_CHECKING, Any, Protocol, Self, runtime_checkable

from ..errors import SecurityViolationError, error_from_context

if TYPE_CHECKING:
    from ..context import Context

DEFAULT_BLOCKED_COMMANDS: tuple[str, ...] = (
    "rm -rf /",
    "rm -rf /*",
    "rm -rf ~",
    "dd if=",
    "mkfs",
    ":(){:|:&};:",
    "> /dev/sda",
    "> /dev/hda",
    "chmod -R 777 /",
    "chown -R",
    "wget | sh",
    "curl | sh",
    "wget | bash",
    "curl | bash",
)

DEFAULT_BLOCKED_PATHS: tuple[str, ...] = (
    ".env",
    ".env.*",
    "*.env",
    ".ssh/*",
    "*.pem",
    "*.key",
    "*/.ssh/*",
    "/etc/passwd",
    "/etc/shadow",
    "~/.aws/*",
    "~/.config/gcloud/*",
    "*credentials*",
    "*secret*",
)

DEFAULT_COMMAND_TOOLS = frozenset({"bash"})
DEFAULT_PATH_TOOLS = frozenset({"file_read", "file_write", "file_edit"})


@runtime_checkable
class SecurityPolicy(Protocol):
    async def validate(self, ctx: Context, tool_name: str, args: dict[str, Any]) -> None:
        """Return normally to allow the call, raise to block it."""
        ...


class DenylistValidator:
    """Block shell commands containing a denied substring.

    Applies to ``tool_names`` only and reads the ``command`` arg; calls without
    a string command are left to other policies.
    """

    __slots__ = ("patterns", "tool_names")

    def __init__(self, patterns: Iterable[str], *, tool_names: Iterable[str] = DEFAULT_COMMAND_TOOLS) -> None:
        self.patterns = tuple(patterns)
        self.tool_names = frozenset(tool_names)

    @classmethod
    def default(cls) -> Self:
        return cls(DEFAULT_BLOCKED_COMMANDS)

    async def validate(self, ctx: Context, tool_name: str, args: dict[str, Any]) -> None:
        if tool_name not in self.tool_names:
            return
        cmd = args.get("command")
        if not isinstance(cmd, str):
            return
        for pattern in self.patterns:
            if pattern in cmd:
                raise SecurityViolationError(tool_name, "blocked command pattern detected", pattern=pattern)


class PathValidator:
    """Block file access to sensitive paths.

    Patterns are globs where ``*`` never crosses ``/``. A path is blocked when
    a pattern matches the normalized path or its leaf name, when a ``dir/*``
    pattern names one of its parent directories, or when a ``*/name/*``
    pattern matches any of its components.
    """

    __slots__ = ("patterns", "tool_names")

    def __init__(self, patterns: Iterable[str], *, tool_names: Iterable[str] = DEFAULT_PATH_TOOLS) -> None:
        self.patterns = tuple(patterns)
        self.tool_names = frozenset(tool_names)

    @classmethod
    def default(cls) -> Self:
        return cls(DEFAULT_BLOCKED_PATHS)

    def with_tool_names(self, *names: str) -> Self:
        self.tool_names = frozenset(names)
        return self

    async def validate(self, ctx: Context, tool_name: str, args: dict[str, Any]) -> None:
        if tool_name not in self.tool_names:
            return
        path = args.get("path")
        if not isinstance(path, str):
            return
        if reason := self.check(path):
            raise SecurityViolationError(tool_name, reason, path=path)

    def check(self, path: str) -> str | None:
        """Reason ``path`` is blocked, or None if it is allowed."""
        clean = posixpath.normpath(path)
        # normpath keeps a leading "//"; treat it as "/"
        if clean.startswith("//"):
            clean = "/" + clean.lstrip("/")
        base = posixpath.basename(clean) or clean
        for pattern in self.patterns:
            if _glob_match(pattern, clean) or _glob_match(pattern, base):
                return "access denied to sensitive path"
            if pattern.endswith("/*"):
                directory = pattern[:-2]
                if clean == directory or clean.startswith(directory + "/"):
                    return "access denied to sensitive directory"
            if pattern.startswith("*/") and pattern.endswith("/*"):
                name = pattern[2:-2]
                if any(_glob_match(name, part) for part in clean.split("/")):
                    return "access denied to sensitive directory component"
        return None


def _glob_match(pattern: str, name: str) -> bool:
    """Shell-style match in which wildcards stay within one path segment."""
    pattern_parts, name_parts = pattern.split("/"), name.split("/")
    return len(pattern_parts) == len(name_parts) and all(
        fnmatchcase(n, p) for p, n in zip(pattern_parts, name_parts)
    )


class CompositeSecurityPolicy:
    """Run policies in order; the first to raise wins.

    The scope is checked between policies so a cancelled execution stops
    screening early.
    """

    __slots__ = ("_policies",)

    def __init__(self, *policies: SecurityPolicy) -> None:
        self._policies: list[SecurityPolicy] = list(policies)

    def add(self, policy: SecurityPolicy | None) -> Self:
        if policy is not None:
            self._policies.append(policy)
        return self

    async def validate(self, ctx: Context, tool_name: str, args: dict[str, Any]) -> None:
        for policy in self._policies:
            if ctx.done():
                raise error_from_context(ctx, tool_name)
            await policy.validate(ctx, tool_name, args)

    def __len__(self) -> int:
        return len(self._policies)


class NoOpSecurityPolicy:
    """Allow everything."""

    __slots__ = ()

    async def validate(self, ctx: Context, tool_name: str, args: dict[str, Any]) -> None:
        return None


def default_security_policy() -> CompositeSecurityPolicy:
    return CompositeSecurityPolicy(DenylistValidator.default(), PathValidator.default())
