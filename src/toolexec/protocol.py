"""Text protocol between an LLM and the runtime.

Models request tools with fenced blocks tagged ``tool`` (or ``json``, or
untagged) holding one JSON object each:

    ```tool
    {"name": "file_read", "args": {"path": "README.md"}, "reason": "need context"}
    ```

Results go back as fenced ``result`` blocks rendered by ``ToolCallResult``.
"""

from __future__ import annotations

import json
import re
from datetime import timedelta
from typing import TYPE_CHECKING, Any, Self

from pydantic import BaseModel, ValidationError

from .core import Input

if TYPE_CHECKING:
    from collections.abc import Iterable

    from .executor import ExecutionResult

TOOL_BLOCK_RE = re.compile(r"``` *(?:tool|json)? *\n(.+?)\n```", re.IGNORECASE | re.DOTALL)


class ToolCallParseError(ValueError):
    """A fenced block could not be turned into a tool call. ``index`` is 1-based."""

    def __init__(self, index: int, message: str) -> None:
        self.index = index
        super().__init__(message)


class ToolCall(BaseModel):
    """One tool request extracted from model output."""

    name: str = ""
    args: dict[str, Any] | None = None
    reason: str | None = None

    def validate_call(self) -> None:
        """Raise ValueError unless both ``name`` and ``args`` are present."""
        if not self.name:
            raise ValueError("tool call missing required field: name")
        if self.args is None:
            raise ValueError("tool call missing required field: args")

    def to_input(self) -> Input:
        inp = Input(name=self.name, params=dict(self.args or {}))
        if self.reason:
            inp.with_metadata("reason", self.reason)
        return inp

    def format(self) -> str:
        """Render as a ``tool`` block that ``parse_tool_calls`` reads back."""
        return f"```tool\n{self.model_dump_json(exclude_none=True)}\n```"


def _decode(block: str, index: int) -> ToolCall:
    try:
        call = ToolCall.model_validate(json.loads(block))
    except (json.JSONDecodeError, ValidationError) as e:
        raise ToolCallParseError(index, f"failed to parse tool call {index}: {e}") from e
    try:
        call.validate_call()
    except ValueError as e:
        raise ToolCallParseError(index, f"invalid tool call {index}: {e}") from e
    return call


def parse_tool_calls(text: str) -> list[ToolCall]:
    """Every tool call in ``text``, in order.

    Raises:
        ToolCallParseError: on the first block that is not valid JSON or not
            a complete call
    """
    return [_decode(m.group(1), i) for i, m in enumerate(TOOL_BLOCK_RE.finditer(text), start=1)]


def parse_tool_calls_lenient(text: str) -> list[ToolCall]:
    """Like ``parse_tool_calls`` but silently drops bad blocks."""
    calls: list[ToolCall] = []
    for i, m in enumerate(TOOL_BLOCK_RE.finditer(text), start=1):
        try:
            calls.append(_decode(m.group(1), i))
        except ToolCallParseError:
            continue
    return calls


def extract_tool_calls_lenient(text: str) -> tuple[list[ToolCall], str]:
    """Split ``text`` into valid tool calls and the prose around them.

    Valid blocks are cut out of the returned text; invalid blocks stay where
    they were. The remaining text is stripped of surrounding whitespace.
    """
    calls: list[ToolCall] = []
    pieces: list[str] = []
    last = 0
    for i, m in enumerate(TOOL_BLOCK_RE.finditer(text), start=1):
        try:
            call = _decode(m.group(1), i)
        except ToolCallParseError:
            continue
        calls.append(call)
        pieces.append(text[last:m.start()])
        last = m.end()
    pieces.append(text[last:])
    return calls, "".join(pieces).strip()


def has_tool_call(text: str) -> bool:
    return TOOL_BLOCK_RE.search(text) is not None


def count_tool_calls(text: str) -> int:
    """Number of fenced candidate blocks, valid or not."""
    return sum(1 for _ in TOOL_BLOCK_RE.finditer(text))


class ToolCallResult(BaseModel):
    """Execution outcome as reported back to the model."""

    tool_name: str
    success: bool
    output: str
    error: str = ""
    truncated: bool = False
    execution_time_ms: int = 0

    @classmethod
    def from_result(cls, result: ExecutionResult) -> Self:
        output, truncated = "", False
        if result.output is not None:
            output = result.output.text if result.output.data else result.output.message
            truncated = result.output.truncated
        return cls(
            tool_name=result.tool_name,
            success=result.error is None,
            output=output,
            error=str(result.error) if result.error is not None else "",
            truncated=truncated,
            execution_time_ms=result.duration // timedelta(milliseconds=1),
        )

    def to_json(self) -> str:
        """Compact JSON; empty ``error``, false ``truncated`` and zero time are omitted."""
        return self.model_dump_json(exclude_defaults=True)

    def format_as_block(self) -> str:
        return f"```result\n{self.to_json()}\n```"


def format_results(results: Iterable[ExecutionResult]) -> str:
    """Result blocks for a batch, separated by blank lines."""
    return "\n\n".join(ToolCallResult.from_result(r).format_as_block() for r in results)
