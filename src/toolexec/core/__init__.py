"""Core tool abstractions and value types.

- Tool / BaseTool / ToolMetadata: what a tool is
- FunctionTool / tool: function-based tools
- Input / Output / ToolInfo: what flows through an execution
- truncate_output: output size limiting
"""

from .base import BaseTool, Tool, ToolMetadata, ToolOutcome
from .decorator import FunctionTool, tool
from .truncation import DEFAULT_MAX_OUTPUT_SIZE, truncate_output
from .types import Input, Output, ToolInfo

__all__ = [
    "Tool", "BaseTool", "ToolMetadata", "ToolOutcome",
    "FunctionTool", "tool",
    "Input", "Output", "ToolInfo",
    "DEFAULT_MAX_OUTPUT_SIZE", "truncate_output",
]
