"""Reference CPU kernels for the built-in operators."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import numpy as np

from tensorgraph.data_type import DataType
from tensorgraph.errors import TensorGraphError
from tensorgraph.kernel import Kernel, register_kernel
from tensorgraph.op_type import OpType
from tensorgraph.runtime import Device

_SUPPORTED = (DataType.FLOAT32, DataType.UINT32)


def _require_supported(op: Any) -> None:
    if op.dtype not in _SUPPORTED:
        raise TensorGraphError("Unimplemented")


def _divide(left: np.ndarray, right: np.ndarray) -> np.ndarray:
    if np.issubdtype(left.dtype, np.integer):
        with np.errstate(divide="ignore"):
            return np.floor_divide(left, right)
    return np.divide(left, right)


_BINARY: dict[OpType, Callable[[np.ndarray, np.ndarray], np.ndarray]] = {
    OpType.ADD: np.add,
    OpType.SUB: np.subtract,
    OpType.MUL: np.multiply,
    OpType.DIV: _divide,
}


@register_kernel(Device.CPU, OpType.CONCAT, "ConcatNaive_CPU")
class NaiveConcat(Kernel):
    """Copies each input into its slice of the output along the concat axis."""

    def compute(self, op: Any, runtime: Any) -> None:
        _require_supported(op)
        output = op.output()
        pieces = [tensor.data.reshape(tensor.dims) for tensor in op.inputs]
        joined = np.concatenate(pieces, axis=op.dim)
        output.data[:] = joined.ravel()


@register_kernel(Device.CPU, OpType.DIV, "divNaive_CPU")
@register_kernel(Device.CPU, OpType.MUL, "mulNaive_CPU")
@register_kernel(Device.CPU, OpType.SUB, "subNaive_CPU")
@register_kernel(Device.CPU, OpType.ADD, "addNaive_CPU")
class NativeElementWise(Kernel):
    """Binary arithmetic with both inputs broadcast to the output shape."""

    def compute(self, op: Any, runtime: Any) -> None:
        _require_supported(op)
        try:
            function = _BINARY[op.op_type]
        except KeyError:
            raise TensorGraphError("Unimplemented") from None
        output = op.output()
        out_dims = output.dims
        rank = len(out_dims)
        first, second = op.inputs[0], op.inputs[1]
        left = first.data.reshape([1] * (rank - first.rank) + first.dims)
        right = second.data.reshape([1] * (rank - second.rank) + second.dims)
        result = function(left, right)
        output.data[:] = np.broadcast_to(result, out_dims).ravel()


@register_kernel(Device.CPU, OpType.TRANSPOSE, "TransposeNaive_CPU")
class NaiveTranspose(Kernel):
    """Writes the input with its axes reordered by the permutation."""

    def compute(self, op: Any, runtime: Any) -> None:
        _require_supported(op)
        source = op.inputs[0]
        moved = source.data.reshape(source.dims).transpose(op.permute)
        op.outputs[0].data[:] = moved.ravel()


@register_kernel(Device.CPU, OpType.RELU, "reluNaive_CPU")
class NativeUnary(Kernel):
    """Element-wise activations."""

    def compute(self, op: Any, runtime: Any) -> None:
        _require_supported(op)
        if op.op_type != OpType.RELU:
            raise TensorGraphError("Unimplemented")
        values = op.inputs[0].data
        output = op.output()
        output.data[:] = np.maximum(values.dtype.type(0), values)[: output.size]


@register_kernel(Device.CPU, OpType.CLIP, "Clip_CPU")
class ClipKernel(Kernel):
    """Clamps each element to the operator's optional bounds."""

    def compute(self, op: Any, runtime: Any) -> None:
        _require_supported(op)
        output = op.output()
        values = op.inputs[0].data[: output.size]
        result = values.copy()
        below = np.zeros(values.shape, dtype=bool)
        if op.min_value is not None:
            below = values < op.min_value
            result[below] = op.min_value
        if op.max_value is not None:
            above = ~below & (values > op.max_value)
            result[above] = op.max_value
        output.data[:] = result