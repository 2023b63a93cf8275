"""Error type and small formatting helpers shared across the package."""

from __future__ import annotations

from collections.abc import Iterable


class TensorGraphError(RuntimeError):
    """Raised when a graph, tensor or operator invariant is violated."""

    def __init__(self, message: str = "") -> None:
        super().__init__(message)
        self.info = message

    def __str__(self) -> str:
        return self.info


def vec_to_string(values: Iterable[object]) -> str:
    """Render a sequence as ``[a,b,c]`` with no spaces."""
    return "[" + ",".join(str(value) for value in values) + "]"