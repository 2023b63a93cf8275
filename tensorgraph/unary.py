"""Single-input operators: activations, clipping and casts."""

from __future__ import annotations

from collections.abc import Sequence
from enum import IntEnum
from typing import Any

from tensorgraph.data_type import DataType
from tensorgraph.errors import TensorGraphError, vec_to_string
from tensorgraph.op_type import OpType
from tensorgraph.operator import Operator
from tensorgraph.tensor import Tensor


def _ensure_valid(op: Operator, graph: Any) -> None:
    if not op.check_valid(graph):
        raise TensorGraphError("Assertion failed (checkValid(graph))")


def _single_io_string(op: Operator) -> str:
    source = op.inputs[0]
    return (
        f"{op.op_type}[{op.guid}]({vec_to_string(source.dims)},"
        f"input={source.guid},output={op.outputs[0].guid})"
    )


class Unary(Operator):
    """Base of shape-preserving single-input operators."""

    def __init__(self, op_type: OpType, graph: Any, input: Tensor,
                 output: Tensor | None) -> None:
        super().__init__(op_type, [input], [output])
        _ensure_valid(self, graph)

    def infer_shape(self, inputs: Sequence[Tensor]) -> list[list[int]] | None:
        return [inputs[0].dims]

    def __str__(self) -> str:
        return _single_io_string(self)

    def num_inputs(self) -> int:
        return 1

    def num_outputs(self) -> int:
        return 1


class Relu(Unary):
    """Rectified linear unit."""

    def __init__(self, graph: Any, input: Tensor, output: Tensor | None) -> None:
        super().__init__(OpType.RELU, graph, input, output)


class Clip(Operator):
    """Limits values to ``[min_value, max_value]``; either bound may be None."""

    def __init__(self, graph: Any, input: Tensor, output: Tensor | None,
                 min_value: float | None = None,
                 max_value: float | None = None) -> None:
        super().__init__(OpType.CLIP, [input], [output])
        self.min_value = min_value
        self.max_value = max_value
        _ensure_valid(self, graph)

    def infer_shape(self, inputs: Sequence[Tensor]) -> list[list[int]] | None:
        return [tensor.dims for tensor in inputs]

    def __str__(self) -> str:
        return _single_io_string(self)

    def num_inputs(self) -> int:
        return 1

    def num_outputs(self) -> int:
        return 1


class CastType(IntEnum):
    """Source and target element types of a cast."""

    FLOAT2FLOAT16 = 0
    FLOAT2INT64 = 1
    FLOAT2INT32 = 2
    FLOAT2INT16 = 3
    FLOAT2INT8 = 4
    FLOAT2BFLOAT16 = 5
    INT322FLOAT = 6
    INT322INT8 = 7
    INT322INT16 = 8
    INT322INT64 = 9
    INT162FLOAT = 10
    INT162INT32 = 11
    INT82FLOAT = 12
    INT82INT16 = 13
    INT82INT32 = 14
    UINT82FLOAT = 15
    UINT82INT32 = 16
    UINT82INT64 = 17
    INT642INT32 = 18
    INT642UINT32 = 19
    INT642FLOAT = 20
    UINT322INT64 = 21
    FLOAT162FLOAT = 22
    BFLOAT162FLOAT = 23
    FLOAT2FLOAT = 24


_CAST_TARGETS = {
    CastType.FLOAT2FLOAT16: DataType.FLOAT16,
    CastType.FLOAT2INT64: DataType.INT64,
    CastType.FLOAT2INT32: DataType.INT32,
    CastType.FLOAT2INT16: DataType.INT16,
    CastType.FLOAT2INT8: DataType.INT8,
    CastType.FLOAT2BFLOAT16: DataType.BFLOAT16,
    CastType.INT322FLOAT: DataType.FLOAT32,
    CastType.INT322INT8: DataType.INT8,
    CastType.INT322INT16: DataType.INT16,
    CastType.INT322INT64: DataType.INT64,
    CastType.INT162FLOAT: DataType.FLOAT32,
    CastType.INT162INT32: DataType.INT32,
    CastType.INT82FLOAT: DataType.FLOAT32,
    CastType.INT82INT16: DataType.INT16,
    CastType.INT82INT32: DataType.INT32,
    CastType.UINT82FLOAT: DataType.FLOAT32,
    CastType.UINT82INT32: DataType.INT32,
    CastType.UINT82INT64: DataType.INT64,
    CastType.INT642INT32: DataType.INT32,
    CastType.INT642UINT32: DataType.UINT32,
    CastType.INT642FLOAT: DataType.FLOAT32,
    CastType.UINT322INT64: DataType.INT64,
    CastType.FLOAT162FLOAT: DataType.FLOAT32,
    CastType.BFLOAT162FLOAT: DataType.FLOAT32,
    CastType.FLOAT2FLOAT: DataType.FLOAT32,
}


class Cast(Operator):
    """Converts elements to another data type, keeping the shape."""

    def __init__(self, graph: Any, input: Tensor, output: Tensor | None,
                 cast_type: CastType) -> None:
        super().__init__(OpType.CAST, [input], [output])
        self.cast_type = CastType(cast_type)
        _ensure_valid(self, graph)

    def infer_shape(self, inputs: Sequence[Tensor]) -> list[list[int]] | None:
        return [inputs[0].dims]

    def infer_data_type(self, inputs: Sequence[Tensor]) -> list[DataType]:
        return [self.output_data_type()]

    def output_data_type(self) -> DataType:
        """Data type produced by this cast."""
        try:
            return _CAST_TARGETS[self.cast_type]
        except KeyError:
            raise TensorGraphError("Unimplemented") from None

    def __str__(self) -> str:
        return f"{self.op_type}[{self.guid}](output={self.outputs[0].guid})"

    def num_inputs(self) -> int:
        return 1

    def num_outputs(self) -> int:
        return 1