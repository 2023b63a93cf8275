"""Base class of graph operators."""

from __future__ import annotations

import copy
from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import Any

from tensorgraph.data_type import DataType
from tensorgraph.errors import TensorGraphError
from tensorgraph.ids import next_guid
from tensorgraph.op_type import OpType
from tensorgraph.tensor import Tensor


class Operator(ABC):
    """A computation node reading input tensors and writing output tensors."""

    def __init__(self, op_type: OpType, inputs: Sequence[Tensor | None],
                 outputs: Sequence[Tensor | None]) -> None:
        self.guid = next_guid()
        self.op_type = OpType(op_type)
        self.inputs: list[Any] = list(inputs)
        self.outputs: list[Any] = list(outputs)
        self._predecessors: list[Operator] = []
        self._successors: list[Operator] = []

    @abstractmethod
    def __str__(self) -> str:
        """Describe the operator."""

    @abstractmethod
    def infer_shape(self, inputs: Sequence[Tensor]) -> list[list[int]] | None:
        """Output shapes for the given inputs, or None if they are invalid."""

    def infer_data_type(self, inputs: Sequence[Tensor]) -> list[DataType]:
        """Output data types: by default every output takes the first input's."""
        return [inputs[0].dtype] * self.num_outputs()

    def check_valid(self, graph: Any) -> bool:
        """Create missing outputs in ``graph``, or check existing output shapes."""
        shapes = self.infer_shape(self.inputs)
        if shapes is None or len(shapes) != len(self.outputs):
            return False
        if graph is not None:
            dtypes = self.infer_data_type(self.inputs)
            for index, (output, shape) in enumerate(zip(self.outputs, shapes)):
                if output is not None:
                    raise TensorGraphError(
                        "Find empty output while operator creation")
                self.outputs[index] = graph.add_tensor(shape, dtypes[index])
            return True
        return all(
            list(shape) == output.dims for shape, output in zip(shapes, self.outputs)
        )

    def output(self, index: int | None = None) -> Tensor:
        """The single output, or the output at ``index``."""
        if index is None:
            if len(self.outputs) != 1:
                raise TensorGraphError("Unimplemented")
            return self.outputs[0]
        if not 0 <= index < len(self.outputs):
            raise TensorGraphError("Index exceeded")
        return self.outputs[index]

    @property
    def predecessors(self) -> list[Operator]:
        return list(self._predecessors)

    @property
    def successors(self) -> list[Operator]:
        return list(self._successors)

    def add_predecessor(self, op: Operator) -> None:
        self._predecessors.append(op)

    def add_successor(self, op: Operator) -> None:
        self._successors.append(op)

    def remove_predecessor(self, op: Operator) -> None:
        self._predecessors = [pred for pred in self._predecessors if pred is not op]

    def remove_successor(self, op: Operator) -> None:
        self._successors = [succ for succ in self._successors if succ is not op]

    def replace_input(self, old: Tensor, new: Tensor) -> None:
        """Replace every occurrence of ``old`` among the inputs with ``new``."""
        self.inputs = [new if tensor is old else tensor for tensor in self.inputs]

    @property
    def dtype(self) -> DataType:
        """Data type of the first input."""
        return self.inputs[0].dtype

    @property
    def out_dtype(self) -> DataType:
        """Data type of the single output."""
        return self.output().dtype

    @abstractmethod
    def num_inputs(self) -> int:
        """Number of inputs the operator takes."""

    @abstractmethod
    def num_outputs(self) -> int:
        """Number of outputs the operator produces."""

    def clone(self, inputs: Sequence[Tensor], outputs: Sequence[Tensor]) -> Operator:
        """A copy with new inputs and outputs and no graph connections."""
        op = copy.copy(self)
        op.guid = next_guid()
        op.inputs = list(inputs)
        op.outputs = list(outputs)
        op._predecessors = []
        op._successors = []
        if not op.check_valid(None):
            raise TensorGraphError("Assertion failed (op->checkValid(nullptr))")
        return op