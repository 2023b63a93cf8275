"""Permutation of tensor dimensions."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from tensorgraph.errors import TensorGraphError, vec_to_string
from tensorgraph.op_type import OpType
from tensorgraph.operator import Operator
from tensorgraph.tensor import Tensor


class Transpose(Operator):
    """Reorders dimensions like ``numpy.transpose``; empty permute is identity."""

    def __init__(self, graph: Any, input: Tensor, output: Tensor | None,
                 permute: Sequence[int] = ()) -> None:
        super().__init__(OpType.TRANSPOSE, [input], [output])
        rank = input.rank
        if not permute:
            self.permute = list(range(rank))
        else:
            if len(permute) != rank:
                raise TensorGraphError("Assertion failed (rank == permute.size())")
            self.permute = list(permute)
        if not self.check_valid(graph):
            raise TensorGraphError("Assertion failed (checkValid(graph))")

    def infer_shape(self, inputs: Sequence[Tensor]) -> list[list[int]] | None:
        dims = inputs[0].dims
        if len(dims) != len(self.permute):
            return None
        return [[dims[axis] for axis in self.permute]]

    def __str__(self) -> str:
        source = self.inputs[0]
        return (
            f"{self.op_type}[{self.guid}]({vec_to_string(source.dims)},"
            f"input={source.guid},output={self.outputs[0].guid})"
        )

    def num_inputs(self) -> int:
        return 1

    def num_outputs(self) -> int:
        return 1