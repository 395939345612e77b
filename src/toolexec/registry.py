"""Thread-safe tool registry.

The registry maps unique names to tools. Lookups take a shared lock, so any
number of executions can resolve tools while registration stays exclusive.

Example:
    >>> registry = ToolRegistry()
    >>> registry.register(EchoTool())
    >>> registry.get("echo")
    <EchoTool name='echo'>
    >>> [info.name for info in registry.list()]
    ['echo']
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import TYPE_CHECKING

from .core import Tool, ToolInfo
from .errors import DuplicateToolError, NilToolError, ToolNotFoundError, ToolValidationError
from .runtime import ReadWriteLock

if TYPE_CHECKING:
    from collections.abc import Iterator

logger = logging.getLogger("toolexec.registry")


@dataclass(frozen=True, slots=True)
class RegistrySnapshot:
    """Point-in-time copy of a registry, both sequences sorted by name."""
    tools: tuple[Tool, ...]
    infos: tuple[ToolInfo, ...]


class ToolRegistry:
    """Name → tool map guarded by a readers-writer lock."""

    __slots__ = ("_tools", "_lock")

    def __init__(self) -> None:
        self._tools: dict[str, Tool] = {}
        self._lock = ReadWriteLock()

    def register(self, tool: Tool | None) -> None:
        """Add a tool.

        Raises:
            NilToolError: ``tool`` is None
            ToolValidationError: the tool has an empty name
            DuplicateToolError: the name is taken
        """
        if tool is None:
            raise NilToolError()
        name = tool.name
        if not name:
            raise ToolValidationError("", "tool name cannot be empty", field="name")
        with self._lock.write():
            if name in self._tools:
                raise DuplicateToolError(name)
            self._tools[name] = tool
        logger.debug(f"[{name}] registered")

    def register_all(self, *tools: Tool) -> None:
        for tool in tools:
            self.register(tool)

    def get(self, name: str) -> Tool:
        """Look up a tool, raising ToolNotFoundError when absent."""
        with self._lock.read():
            tool = self._tools.get(name)
        if tool is None:
            raise ToolNotFoundError(name)
        return tool

    def has(self, name: str) -> bool:
        with self._lock.read():
            return name in self._tools

    def count(self) -> int:
        with self._lock.read():
            return len(self._tools)

    def unregister(self, name: str) -> None:
        with self._lock.write():
            if self._tools.pop(name, None) is None:
                raise ToolNotFoundError(name)
        logger.debug(f"[{name}] unregistered")

    def clear(self) -> None:
        with self._lock.write():
            self._tools.clear()

    # ─────────────────────────────────────────────────────────────────
    # Querying
    # ─────────────────────────────────────────────────────────────────

    def list(self) -> list[ToolInfo]:
        """Descriptors of every tool, sorted by name."""
        return list(self.snapshot().infos)

    def snapshot(self) -> RegistrySnapshot:
        with self._lock.read():
            tools = sorted(self._tools.values(), key=lambda t: t.name)
        return RegistrySnapshot(tuple(tools), tuple(ToolInfo.from_tool(t) for t in tools))

    def describe(self) -> str:
        """Markdown bullet list of the tools, for system prompts."""
        return "\n".join(f"- **{i.name}**: {i.description}" for i in self.snapshot().infos)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.has(name)

    def __len__(self) -> int:
        return self.count()

    def __iter__(self) -> Iterator[Tool]:
        return iter(self.snapshot().tools)


# ─────────────────────────────────────────────────────────────────────────────
# Global Registry
# ─────────────────────────────────────────────────────────────────────────────

_registry: ToolRegistry | None = None
_registry_lock = threading.Lock()


def get_registry() -> ToolRegistry:
    """Process-wide default registry, created on first use."""
    global _registry
    if _registry is None:
        with _registry_lock:
            if _registry is None:
                _registry = ToolRegistry()
    return _registry


def register_default(tool: Tool) -> None:
    """Register into the default registry.

    Meant for import-time registration: failures are not caught, so a
    duplicate or nameless tool aborts start-up loudly.
    """
    get_registry().register(tool)


def set_registry(registry: ToolRegistry) -> None:
    global _registry
    with _registry_lock:
        _registry = registry


def reset_registry() -> None:
    """Drop the default registry (useful for testing)."""
    global _registry
    with _registry_lock:
        if _registry is not None:
            _registry.clear()
        _registry = None
