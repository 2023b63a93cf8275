"""Computation graph: tensors, operators and graph-level passes."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Any

from tensorgraph.allocator import Allocator
from tensorgraph.data_type import DataType
from tensorgraph.errors import TensorGraphError, vec_to_string
from tensorgraph.ids import next_guid
from tensorgraph.matmul import Matmul
from tensorgraph.op_type import OpType
from tensorgraph.operator import Operator
from tensorgraph.tensor import Blob, Tensor
from tensorgraph.transpose import Transpose


def _remove_first(items: list, item: Any) -> None:
    for position, candidate in enumerate(items):
        if candidate is item:
            del items[position]
            return


def _contains(items: Iterable, item: Any) -> bool:
    return any(candidate is item for candidate in items)


def _swaps_last_two(perm: Sequence[int]) -> bool:
    rank = len(perm)
    return (
        rank >= 2
        and list(perm[:-2]) == list(range(rank - 2))
        and perm[-2] == rank - 1
        and perm[-1] == rank - 2
    )


class Graph:
    """Owns tensors and operators and keeps their connections consistent."""

    def __init__(self, runtime: Any) -> None:
        self.guid = next_guid()
        self.runtime = runtime
        self._tensors: list[Tensor] = []
        self._ops: list[Operator] = []
        self.allocator = Allocator(runtime)
        self._sorted = False

    def __str__(self) -> str:
        lines = ["Graph Tensors:\n"]
        lines.extend(f"{tensor}\n" for tensor in self._tensors)
        lines.append("Graph operators:\n")
        for op in self._ops:
            preds = vec_to_string(pred.guid for pred in op.predecessors)
            succs = vec_to_string(succ.guid for succ in op.successors)
            lines.append(f"OP {op.guid}, pred {preds}, succ {succs}, {op}\n")
        return "".join(lines)

    @property
    def tensors(self) -> list[Tensor]:
        return list(self._tensors)

    @property
    def operators(self) -> list[Operator]:
        return list(self._ops)

    def add_tensor(self, shape: Sequence[int],
                   dtype: DataType = DataType.FLOAT32) -> Tensor:
        """Create a tensor in this graph."""
        tensor = Tensor(list(shape), dtype, self.runtime)
        self._tensors.append(tensor)
        return tensor

    def add_existing_tensor(self, tensor: Tensor | Iterable[Tensor]):
        """Add a tensor, or each of several, created elsewhere."""
        if not isinstance(tensor, Tensor):
            tensors = list(tensor)
            for item in tensors:
                self.add_existing_tensor(item)
            return tensors
        if tensor.runtime is not self.runtime:
            raise TensorGraphError(
                f"Tensor runtime mismatch: cannot add a tensor in "
                f"{tensor.runtime} to {self.runtime}")
        self._tensors.append(tensor)
        return tensor

    def add_op(self, op_class: type[Operator], *args: Any, **kwargs: Any) -> Operator:
        """Create an operator whose outputs this graph creates, and connect it."""
        op = op_class(self, *args, **kwargs)
        self._add_operator_and_connect(op)
        return op

    def add_op_with_outputs(self, op_class: type[Operator], *args: Any,
                            **kwargs: Any) -> Operator:
        """Create an operator with outputs already given, and connect it."""
        op = op_class(None, *args, **kwargs)
        self._add_operator_and_connect(op)
        return op

    def remove_operator(self, op: Operator) -> None:
        _remove_first(self._ops, op)

    def remove_tensor(self, tensor: Tensor) -> None:
        _remove_first(self._tensors, tensor)

    def get_tensor(self, fuid: int) -> Tensor | None:
        """The tensor with the given family id, or None."""
        return next((t for t in self._tensors if t.fuid == fuid), None)

    def _add_operator_and_connect(self, op: Operator) -> None:
        self._sorted = False
        self._ops.append(op)
        for tensor in op.inputs:
            if tensor is None:
                continue
            tensor.add_target(op)
            pred = tensor.source
            if pred is not None:
                pred.add_successor(op)
                op.add_predecessor(pred)
        for tensor in op.outputs:
            if tensor is None:
                continue
            tensor.set_source(op)
            for succ in tensor.targets:
                succ.add_predecessor(op)
                op.add_successor(succ)

    def topo_sort(self) -> bool:
        """Order operators topologically; False if the graph has a cycle."""
        if self._sorted:
            return True
        ordered: list[Operator] = []
        done: set[int] = set()
        while len(ordered) < len(self._ops):
            progressed = False
            for op in self._ops:
                if id(op) in done:
                    continue
                if all(t.source is None or id(t.source) in done for t in op.inputs):
                    progressed = True
                    ordered.append(op)
                    done.add(id(op))
            if not progressed:
                return False
        self._ops = ordered
        self._sorted = True
        return True

    def optimize(self) -> None:
        """Fold transpose pairs and absorb last-two-axes transposes into matmuls."""
        if not self.topo_sort():
            return
        # Operators are removed while scanning, so the position is adjusted
        # by hand; operators appended during the scan are not visited.
        index = 0
        limit = len(self._ops)
        while index < limit:
            op = self._ops[index]
            if op.op_type == OpType.TRANSPOSE and self._fold_transpose_pair(op):
                index -= 1
                limit -= 2
                continue
            if op.op_type == OpType.MATMUL:
                removed = self._absorb_transposes(op)
                index -= removed
                limit -= removed
            index += 1

    def _fold_transpose_pair(self, op: Transpose) -> bool:
        between = op.inputs[0]
        prev = between.source
        if (prev is None or prev.op_type != OpType.TRANSPOSE
                or len(between.targets) != 1):
            return False
        prev_input = prev.inputs[0]
        perm = [prev.permute[axis] for axis in op.permute]
        prev_input.remove_target(prev)
        if perm == list(range(len(perm))):
            output = op.output()
            for succ in op.successors:
                succ.replace_input(output, prev_input)
                prev_input.add_target(succ)
            self.remove_tensor(output)
        else:
            merged = Transpose(None, prev_input, op.output(), perm)
            self._add_operator_and_connect(merged)
        for pred in prev.predecessors:
            pred.remove_successor(prev)
        for succ in op.successors:
            succ.remove_predecessor(op)
        self.remove_tensor(between)
        self.remove_operator(op)
        self.remove_operator(prev)
        return True

    def _absorb_transposes(self, matmul: Matmul) -> int:
        removed = 0
        for position in (0, 1):
            between = matmul.inputs[position]
            prev = between.source
            if (prev is None or prev.op_type != OpType.TRANSPOSE
                    or len(between.targets) != 1):
                continue
            if not _swaps_last_two(prev.permute):
                break
            prev_input = prev.inputs[0]
            if position == 0:
                matmul.trans_a = not matmul.trans_a
            else:
                matmul.trans_b = not matmul.trans_b
            matmul.remove_predecessor(prev)
            for pred in prev.predecessors:
                pred.remove_successor(prev)
                pred.add_successor(matmul)
                matmul.add_predecessor(pred)
            prev_input.remove_target(prev)
            prev_input.add_target(matmul)
            matmul.inputs[position] = prev_input
            self.remove_tensor(between)
            self.remove_operator(prev)
            removed += 1
        return removed

    def shape_infer(self) -> None:
        """Recompute every operator's output shapes from its inputs."""
        for op in self._ops:
            shapes = op.infer_shape(op.inputs)
            if shapes is None:
                raise TensorGraphError("Assertion failed (ans.has_value())")
            if len(shapes) != len(op.outputs):
                raise TensorGraphError(
                    "Assertion failed (ans.value().size() == oldOutputs.size())")
            for shape, output in zip(shapes, op.outputs):
                if list(shape) != output.dims:
                    tensor = self.get_tensor(output.fuid)
                    if tensor is None:
                        raise TensorGraphError(
                            f"Tensor with fuid {output.fuid} is not in the graph")
                    tensor.set_shape(shape)

    def data_malloc(self) -> None:
        """Plan memory for every tensor, allocate it and bind the tensors."""
        if not self.topo_sort():
            raise TensorGraphError("Assertion failed (topo_sort() == true)")
        offsets = [self.allocator.alloc(tensor.bytes) for tensor in self._tensors]
        buffer = self.allocator.get_ptr()
        for tensor, offset in zip(self._tensors, offsets):
            tensor.set_data_blob(Blob(self.runtime, buffer, offset))
        self.allocator.info()

    @property
    def inputs(self) -> list[Tensor]:
        """Tensors no operator writes."""
        return [tensor for tensor in self._tensors if tensor.source is None]

    @property
    def outputs(self) -> list[Tensor]:
        """Tensors no operator reads."""
        return [tensor for tensor in self._tensors if not tensor.targets]

    def check_valid(self) -> bool:
        """Raise TensorGraphError if tensors and operators are inconsistent."""
        for tensor in self._tensors:
            if not tensor.targets and tensor.source is None:
                raise TensorGraphError(
                    f"Assertion failed: tensor {tensor.guid} is not connected")
            for op in tensor.targets:
                if not _contains(self._ops, op):
                    raise TensorGraphError(
                        f"Assertion failed: target {op.guid} is not in the graph")
            source = tensor.source
            if source is not None and not _contains(self._ops, source):
                raise TensorGraphError(
                    f"Assertion failed: source {source.guid} is not in the graph")
        for op in self._ops:
            for tensor in [*op.inputs, *op.outputs]:
                if not _contains(self._tensors, tensor):
                    raise TensorGraphError(
                        f"Assertion failed: tensor of operator {op.guid} "
                        "is not in the graph")
            for other in [*op.predecessors, *op.successors]:
                if not _contains(self._ops, other):
                    raise TensorGraphError(
                        f"Assertion failed: neighbour of operator {op.guid} "
                        "is not in the graph")
        seen: set[int] = set()
        for tensor in self._tensors:
            if tensor.fuid in seen:
                raise TensorGraphError(str(tensor.fuid))
            seen.add(tensor.fuid)
        return True