"""Operator kinds known to the graph."""

from __future__ import annotations

from enum import IntEnum


class OpType(IntEnum):
    """Kind of an operator."""

    UNKNOWN = 0
    ADD = 1
    CAST = 2
    CLIP = 3
    CONCAT = 4
    DIV = 5
    MUL = 6
    MATMUL = 7
    RELU = 8
    SUB = 9
    TRANSPOSE = 10

    def __str__(self) -> str:
        return _NAMES[self]

    @classmethod
    def name_of(cls, value: int) -> str:
        """Display name of an operator kind, ``"Unknown"`` for unknown values."""
        try:
            return _NAMES[cls(value)]
        except ValueError:
            return "Unknown"


_NAMES = {
    OpType.UNKNOWN: "Unknown",
    OpType.ADD: "Add",
    OpType.CAST: "Cast",
    OpType.CLIP: "Clip",
    OpType.CONCAT: "Concat",
    OpType.DIV: "Div",
    OpType.MUL: "Mul",
    OpType.MATMUL: "MatMul",
    OpType.RELU: "Relu",
    OpType.SUB: "Sub",
    OpType.TRANSPOSE: "Transpose",
}