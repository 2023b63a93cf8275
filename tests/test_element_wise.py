import pytest

from tensorgraph.data_type import DataType
from tensorgraph.element_wise import Add, Div, Mul, Sub
from tensorgraph.errors import TensorGraphError
from tensorgraph.op_type import OpType
from tensorgraph.runtime import NativeCpuRuntime
from tensorgraph.tensor import Tensor


class _Graph:
    def __init__(self):
        self.runtime = NativeCpuRuntime.get_instance()
        self.tensors = []

    def add_tensor(self, shape, dtype=DataType.FLOAT32):
        tensor = Tensor(shape, dtype, self.runtime)
        self.tensors.append(tensor)
        return tensor


def test_shape_inference():
    g = _Graph()
    i0 = g.add_tensor([2, 3, 3, 4], DataType.UINT32)
    i1 = g.add_tensor([2, 3, 3, 4], DataType.UINT32)
    op = Add(g, i0, i1, None)
    assert op.output().dims == [2, 3, 3, 4]
    assert op.out_dtype == DataType.UINT32


@pytest.mark.parametrize(
    "shape0, shape1",
    [
        ([2, 3, 4, 5], []),
        ([2, 3, 4, 5], [5]),
        ([4, 5], [2, 3, 4, 5]),
        ([1, 4, 5], [2, 3, 1, 1]),
        ([3, 4, 5], [2, 1, 1, 1]),
    ],
)
def test_broadcasting(shape0, shape1):
    g = _Graph()
    i0 = g.add_tensor(shape0, DataType.UINT32)
    i1 = g.add_tensor(shape1, DataType.UINT32)
    op = Add(g, i0, i1, None)
    assert op.output().dims == [2, 3, 4, 5]


@pytest.mark.parametrize(
    "cls, op_type", [(Add, OpType.ADD), (Sub, OpType.SUB),
                     (Mul, OpType.MUL), (Div, OpType.DIV)]
)
def test_op_types(cls, op_type):
    g = _Graph()
    i0 = g.add_tensor([1, 2, 2, 3, 1])
    i1 = g.add_tensor([2, 1, 1])
    op = cls(g, i0, i1, None)
    assert op.op_type == op_type
    assert op.output().dims == [1, 2, 2, 3, 1]
    assert op.num_inputs() == 2
    assert op.num_outputs() == 1


def test_incompatible_shapes_give_empty_shape():
    g = _Graph()
    i0 = g.add_tensor([2, 3])
    i1 = g.add_tensor([4, 3])
    op = Add(g, i0, i1, None)
    assert op.infer_shape([i0, i1]) == [[]]
    assert op.output().dims == []


def test_existing_output_with_wrong_shape_fails():
    g = _Graph()
    i0 = g.add_tensor([2, 3])
    i1 = g.add_tensor([3])
    wrong = g.add_tensor([3, 2])
    with pytest.raises(TensorGraphError):
        Mul(None, i0, i1, wrong)
    right = g.add_tensor([2, 3])
    assert Mul(None, i0, i1, right).output() is right


def test_string_form():
    g = _Graph()
    i0 = g.add_tensor([2, 3])
    i1 = g.add_tensor([3])
    op = Sub(g, i0, i1, None)
    assert str(op) == (
        f"Sub[{op.guid}]([2,3],[3],input0={i0.guid},input1={i1.guid},"
        f"output={op.output().guid})"
    )


def test_clone_keeps_class():
    g = _Graph()
    i0 = g.add_tensor([2, 3])
    i1 = g.add_tensor([2, 3])
    op = Div(g, i0, i1, None)
    out = g.add_tensor([2, 3])
    copy = op.clone([i1, i0], [out])
    assert isinstance(copy, Div)
    assert copy.inputs == [i1, i0]
    assert copy.predecessors == []