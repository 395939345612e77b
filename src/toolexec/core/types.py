"""Value types exchanged between callers, the executor and tools."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Self

from pydantic import BaseModel, ConfigDict, Field

from .truncation import truncate_output

if TYPE_CHECKING:
    from .base import Tool


class Input(BaseModel):
    """Arguments for one tool invocation.

    Built fluently; the runtime never mutates an input it is handed.

    Example:
        >>> inp = Input().with_param("command", "ls -la").with_param("timeout", 5)
        >>> inp.get_str("command"), inp.get_int("timeout"), inp.get_bool("missing")
        ('ls -la', 5, False)
    """

    name: str | None = None
    params: dict[str, Any] = Field(default_factory=dict)
    data: bytes = b""
    metadata: dict[str, str] = Field(default_factory=dict)

    # ─── Builders ────────────────────────────────────────────────────

    def with_name(self, name: str) -> Self:
        self.name = name
        return self

    def with_param(self, key: str, value: Any) -> Self:
        self.params[key] = value
        return self

    def with_data(self, data: bytes) -> Self:
        self.data = data
        return self

    def with_metadata(self, key: str, value: str) -> Self:
        self.metadata[key] = value
        return self

    # ─── Accessors (zero value on missing or mistyped) ───────────────

    def get_param(self, key: str) -> Any:
        return self.params.get(key)

    def get_str(self, key: str) -> str:
        v = self.params.get(key)
        return v if isinstance(v, str) else ""

    def get_int(self, key: str) -> int:
        v = self.params.get(key)
        return v if isinstance(v, int) and not isinstance(v, bool) else 0

    def get_bool(self, key: str) -> bool:
        v = self.params.get(key)
        return v if isinstance(v, bool) else False


class Output(BaseModel):
    """Result payload of a tool.

    ``success`` is informational; the authoritative failure signal is the
    error channel of the executor's result.
    """

    success: bool = True
    data: bytes = b""
    result: dict[str, Any] = Field(default_factory=dict)
    metadata: dict[str, str] = Field(default_factory=dict)
    message: str = ""
    truncated: bool = False

    @classmethod
    def ok(cls, data: bytes | str = b"") -> Self:
        return cls(data=data.encode() if isinstance(data, str) else data)

    @classmethod
    def failed(cls, message: str) -> Self:
        return cls(success=False, message=message)

    # ─── Builders ────────────────────────────────────────────────────

    def with_data(self, data: bytes | str) -> Self:
        self.data = data.encode() if isinstance(data, str) else data
        return self

    def with_result(self, key: str, value: Any) -> Self:
        self.result[key] = value
        return self

    def with_metadata(self, key: str, value: str) -> Self:
        self.metadata[key] = value
        return self

    def with_message(self, message: str) -> Self:
        self.message = message
        return self

    def with_truncated_data(self, data: bytes | str, max_bytes: int = 0) -> Self:
        """Set ``data`` and apply the size limit in one step."""
        self.with_data(data)
        self.truncated = False
        return self.truncate(max_bytes)

    # ─── Accessors ───────────────────────────────────────────────────

    def get_result(self, key: str) -> Any:
        return self.result.get(key)

    def get_result_str(self, key: str) -> str:
        v = self.result.get(key)
        return v if isinstance(v, str) else ""

    # ─── Truncation ──────────────────────────────────────────────────

    def truncate(self, max_bytes: int) -> Self:
        truncate_output(self, max_bytes)
        return self

    def truncate_default(self) -> Self:
        return self.truncate(0)

    @property
    def text(self) -> str:
        return self.data.decode("utf-8", errors="replace")


class ToolInfo(BaseModel):
    """Name and description of a registered tool."""

    model_config = ConfigDict(frozen=True)

    name: str
    description: str = ""

    @classmethod
    def from_tool(cls, tool: Tool) -> Self:
        return cls(name=tool.name, description=tool.description)
