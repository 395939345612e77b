"""Tool execution: single, background and batch."""

from .config import DEFAULT_MAX_CONCURRENT, DEFAULT_TIMEOUT, ExecutorConfig, ExecutorConfigView
from .executor import Executor
from .results import BatchResult, ExecutionResult, ToolExecution

__all__ = [
    "Executor", "ExecutorConfig", "ExecutorConfigView",
    "ExecutionResult", "ToolExecution", "BatchResult",
    "DEFAULT_TIMEOUT", "DEFAULT_MAX_CONCURRENT",
]
