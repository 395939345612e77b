"""Execution records: requests, single results and batch aggregates."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Iterator, Self

from ..core import Output
from ..errors import Err, Ok, Result, ToolException

if TYPE_CHECKING:
    from ..core import Input


@dataclass(frozen=True, slots=True)
class ToolExecution:
    """One entry of a batch: which tool, with what input."""
    tool_name: str
    input: Input | None = None


@dataclass(slots=True)
class ExecutionResult:
    """Outcome of one execution with wall-clock timing (UTC)."""
    tool_name: str
    output: Output | None = None
    error: ToolException | None = None
    start_time: datetime | None = None
    end_time: datetime | None = None
    duration: timedelta = field(default_factory=timedelta)

    @classmethod
    def success(cls, tool_name: str, output: Output) -> Self:
        return cls(tool_name, output=output)

    @classmethod
    def failure(cls, tool_name: str, error: ToolException) -> Self:
        return cls(tool_name, error=error)

    @classmethod
    def from_result(cls, tool_name: str, result: Result[Output, ToolException]) -> Self:
        return cls.success(tool_name, result.unwrap()) if result.is_ok() else cls.failure(tool_name, result.unwrap_err())

    def with_timing(self, start: datetime, end: datetime) -> Self:
        self.start_time, self.end_time, self.duration = start, end, end - start
        return self

    @property
    def is_success(self) -> bool:
        return self.error is None and self.output is not None

    def to_result(self) -> Result[Output, ToolException]:
        if self.error is not None:
            return Err(self.error)
        return Ok(self.output if self.output is not None else Output())


@dataclass(slots=True)
class BatchResult:
    """Index-aligned results of ``execute_many`` plus the first error observed.

    ``error`` is the first failure in completion order, which is what
    cancelled the rest of the batch.
    """
    results: list[ExecutionResult]
    error: ToolException | None = None
    total_ms: float = 0.0
    concurrency: int = 0

    @property
    def successes(self) -> list[ExecutionResult]:
        return [r for r in self.results if r.is_success]

    @property
    def failures(self) -> list[ExecutionResult]:
        return [r for r in self.results if not r.is_success]

    @property
    def success_rate(self) -> float:
        return len(self.successes) / len(self.results) if self.results else 0.0

    @property
    def all_ok(self) -> bool:
        return self.error is None and all(r.is_success for r in self.results)

    def outputs(self) -> list[Output]:
        return [r.output for r in self.results if r.is_success and r.output is not None]

    def errors(self) -> list[ToolException]:
        return [r.error for r in self.results if r.error is not None]

    def to_result(self) -> Result[list[Output], list[ToolException]]:
        """Ok with every output if all succeeded, Err with every error otherwise."""
        return Ok(self.outputs()) if self.all_ok else Err(self.errors())

    def __len__(self) -> int:
        return len(self.results)

    def __iter__(self) -> Iterator[ExecutionResult]:
        return iter(self.results)

    def __getitem__(self, index: int) -> ExecutionResult:
        return self.results[index]
