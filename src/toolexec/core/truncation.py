"""Output size limiting.

Tool output is usually fed back into an LLM context window, so oversized
payloads are cut to a byte budget and flagged rather than rejected.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, overload

if TYPE_CHECKING:
    from .types import Output

DEFAULT_MAX_OUTPUT_SIZE = 100 * 1024


@overload
def truncate_output(output: Output, max_bytes: int = 0) -> Output: ...
@overload
def truncate_output(output: None, max_bytes: int = 0) -> None: ...


def truncate_output(output: Output | None, max_bytes: int = 0) -> Output | None:
    """Cut ``output.data`` to ``max_bytes`` in place and mark it truncated.

    ``max_bytes <= 0`` means ``DEFAULT_MAX_OUTPUT_SIZE``. Data exactly at the
    limit is left alone.
    """
    if output is None:
        return None
    limit = max_bytes if max_bytes > 0 else DEFAULT_MAX_OUTPUT_SIZE
    if len(output.data) > limit:
        output.data = output.data[:limit]
        output.truncated = True
    return output
