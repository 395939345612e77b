"""Tool abstractions: the ``Tool`` protocol, ``ToolMetadata`` and ``BaseTool``.

Anything with a name, a description, an async ``execute`` and a
``requires_confirmation`` predicate can be registered. ``BaseTool`` is the
convenient way to get there:

    >>> class EchoTool(BaseTool):
    ...     metadata = ToolMetadata(name="echo", description="Echo the text param")
    ...
    ...     async def execute(self, ctx, input):
    ...         return Output.ok(input.get_str("text"))
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, ClassVar, Protocol, TypeAlias, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field

from ..errors import Err, Ok, Result
from .types import Output

if TYPE_CHECKING:
    from ..context import Context
    from .types import Input

ToolOutcome: TypeAlias = "Output | Result[Output, BaseException | str] | None"
"""What ``execute`` may hand back. ``None`` is accepted as an empty success."""


@runtime_checkable
class Tool(Protocol):
    """Capability set the registry and executor rely on."""

    @property
    def name(self) -> str: ...

    @property
    def description(self) -> str: ...

    async def execute(self, ctx: Context, input: Input | None) -> ToolOutcome:
        """Run the tool.

        Return an ``Output`` or ``Ok``/``Err``. Raising is treated as a crash
        and handled by the recovery frames, not as an ordinary failure.
        """
        ...

    def requires_confirmation(self, args: dict[str, Any]) -> bool: ...


class ToolMetadata(BaseModel):
    """Static description of a tool."""

    model_config = ConfigDict(frozen=True)

    name: str
    description: str = ""
    requires_confirmation: bool = Field(default=False, description="Ask the confirmation handler before every call")


class BaseTool(ABC):
    """Abstract base for class-based tools.

    Subclasses set ``metadata`` and implement ``execute``. Override
    ``requires_confirmation`` for argument-dependent approval rules.
    """

    metadata: ClassVar[ToolMetadata]

    @property
    def name(self) -> str:
        return self.metadata.name

    @property
    def description(self) -> str:
        return self.metadata.description

    @abstractmethod
    async def execute(self, ctx: Context, input: Input | None) -> ToolOutcome: ...

    def requires_confirmation(self, args: dict[str, Any]) -> bool:
        return self.metadata.requires_confirmation

    def _ok(self, data: bytes | str = b"") -> Result[Output, BaseException | str]:
        return Ok(Output.ok(data))

    def _err(self, error: BaseException | str) -> Result[Output, BaseException | str]:
        return Err(error)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} name={self.name!r}>"
