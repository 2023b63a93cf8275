"""Concatenation of tensors along one axis."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from tensorgraph.errors import TensorGraphError, vec_to_string
from tensorgraph.op_type import OpType
from tensorgraph.operator import Operator
from tensorgraph.shape_utils import get_real_axis
from tensorgraph.tensor import Tensor


class Concat(Operator):
    """Joins tensors that agree in every dimension except ``dim``."""

    def __init__(self, graph: Any, inputs: Sequence[Tensor],
                 output: Tensor | None, dim: int) -> None:
        super().__init__(OpType.CONCAT, inputs, [output])
        self.dim = get_real_axis(dim, self.inputs[0].rank)
        if not self.check_valid(graph):
            raise TensorGraphError("Assertion failed (checkValid(graph))")

    def infer_shape(self, inputs: Sequence[Tensor]) -> list[list[int]] | None:
        dims = inputs[0].dims
        rank = inputs[0].rank
        for tensor in inputs[1:]:
            other = tensor.dims
            if len(other) != rank:
                return None
            for axis, (mine, theirs) in enumerate(zip(dims, other)):
                if axis == self.dim:
                    dims[axis] = mine + theirs
                elif mine != theirs:
                    return None
        return [dims]

    def __str__(self) -> str:
        shapes = "".join(vec_to_string(t.dims) + "," for t in self.inputs)
        ids = "".join(f"{t.guid}," for t in self.inputs)
        return (
            f"Concat[{self.guid}]({shapes}dim={self.dim},input={ids}"
            f"output={self.outputs[0].guid})"
        )

    def num_inputs(self) -> int:
        return len(self.inputs)

    def num_outputs(self) -> int:
        return 1