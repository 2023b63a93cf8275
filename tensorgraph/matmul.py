"""Batched matrix multiplication."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from tensorgraph.errors import TensorGraphError
from tensorgraph.op_type import OpType
from tensorgraph.operator import Operator
from tensorgraph.shape_utils import infer_broadcast
from tensorgraph.tensor import Tensor


class Matmul(Operator):
    """Matrix product over the last two dimensions, broadcasting the batch.

    ``trans_a``/``trans_b`` mean the last two dimensions of that input are
    swapped before multiplying (row-major layout).
    """

    def __init__(self, graph: Any, a: Tensor, b: Tensor, c: Tensor | None,
                 trans_a: bool = False, trans_b: bool = False) -> None:
        super().__init__(OpType.MATMUL, [a, b], [c])
        self.trans_a = trans_a
        self.trans_b = trans_b
        self.m = 0
        self.n = 0
        self.k = 0
        if not self.check_valid(graph):
            raise TensorGraphError("Assertion failed (checkValid(graph))")

    def __str__(self) -> str:
        left = "A^T" if self.trans_a else "A"
        right = "B^T" if self.trans_b else "B]"
        return (
            f"Matmul([{left},{right},A={self.inputs[0].guid},"
            f"B={self.inputs[1].guid},C={self.outputs[0].guid},"
            f"mnk=[{self.m},{self.n},{self.k}])"
        )

    def infer_shape(self, inputs: Sequence[Tensor]) -> list[list[int]] | None:
        dims_a = inputs[0].dims
        dims_b = inputs[1].dims
        if len(dims_a) < 2 or len(dims_b) < 2:
            return None
        batch_a, batch_b = dims_a[:-2], dims_b[:-2]
        batch = infer_broadcast(batch_a, batch_b)
        if not batch and (batch_a or batch_b):
            return None
        m, k_a = dims_a[-2:]
        k_b, n = dims_b[-2:]
        if self.trans_a:
            m, k_a = k_a, m
        if self.trans_b:
            k_b, n = n, k_b
        if k_a != k_b:
            return None
        result = batch + [m, n]
        self.m, self.n, self.k = m, n, k_a
        if len(inputs) > 2:
            dims_c = inputs[2].dims
            if len(dims_c) > len(result):
                return None
            for dim_c, dim_r in zip(reversed(dims_c), reversed(result)):
                if dim_c != dim_r and dim_c != 1:
                    return None
        return [result]

    def num_inputs(self) -> int:
        return len(self.inputs)

    def num_outputs(self) -> int:
        return 1