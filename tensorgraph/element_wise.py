"""Binary element-wise operators with broadcasting."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from tensorgraph.errors import TensorGraphError, vec_to_string
from tensorgraph.op_type import OpType
from tensorgraph.operator import Operator
from tensorgraph.shape_utils import infer_broadcast
from tensorgraph.tensor import Tensor


class ElementWise(Operator):
    """Base of binary element-wise operators."""

    def __init__(self, op_type: OpType, graph: Any, input0: Tensor,
                 input1: Tensor, output: Tensor | None) -> None:
        super().__init__(op_type, [input0, input1], [output])
        if not self.check_valid(graph):
            raise TensorGraphError("Assertion failed (checkValid(graph))")

    def infer_shape(self, inputs: Sequence[Tensor]) -> list[list[int]] | None:
        return [infer_broadcast(inputs[0].dims, inputs[1].dims)]

    def __str__(self) -> str:
        first, second = self.inputs
        return (
            f"{self.op_type}[{self.guid}]("
            f"{vec_to_string(first.dims)},{vec_to_string(second.dims)},"
            f"input0={first.guid},input1={second.guid},"
            f"output={self.outputs[0].guid})"
        )

    def num_inputs(self) -> int:
        return 2

    def num_outputs(self) -> int:
        return 1


class Add(ElementWise):
    """Element-wise sum."""

    def __init__(self, graph: Any, input0: Tensor, input1: Tensor,
                 output: Tensor | None) -> None:
        super().__init__(OpType.ADD, graph, input0, input1, output)


class Sub(ElementWise):
    """Element-wise difference."""

    def __init__(self, graph: Any, input0: Tensor, input1: Tensor,
                 output: Tensor | None) -> None:
        super().__init__(OpType.SUB, graph, input0, input1, output)


class Mul(ElementWise):
    """Element-wise product."""

    def __init__(self, graph: Any, input0: Tensor, input1: Tensor,
                 output: Tensor | None) -> None:
        super().__init__(OpType.MUL, graph, input0, input1, output)


class Div(ElementWise):
    """Element-wise quotient."""

    def __init__(self, graph: Any, input0: Tensor, input1: Tensor,
                 output: Tensor | None) -> None:
        super().__init__(OpType.DIV, graph, input0, input1, output)