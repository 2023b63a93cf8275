import pytest

from tensorgraph.errors import TensorGraphError
from tensorgraph.op_type import OpType
from tensorgraph.shape_utils import (
    delocate_index,
    get_real_axis,
    infer_broadcast,
    kernel_attrs_str,
    locate_index,
)


@pytest.mark.parametrize(
    "a, b, expected",
    [
        ([2, 3, 3, 4], [2, 3, 3, 4], [2, 3, 3, 4]),
        ([2, 3, 4, 5], [], [2, 3, 4, 5]),
        ([2, 3, 4, 5], [5], [2, 3, 4, 5]),
        ([4, 5], [2, 3, 4, 5], [2, 3, 4, 5]),
        ([1, 4, 5], [2, 3, 1, 1], [2, 3, 4, 5]),
        ([3, 4, 5], [2, 1, 1, 1], [2, 3, 4, 5]),
    ],
)
def test_broadcast_cases(a, b, expected):
    assert infer_broadcast(a, b) == expected
    assert infer_broadcast(b, a) == expected


def test_broadcast_incompatible_is_empty():
    assert infer_broadcast([2, 3], [4, 3]) == []


def test_broadcast_does_not_modify_inputs():
    a, b = [1, 4, 5], [2, 3, 1, 1]
    infer_broadcast(a, b)
    assert a == [1, 4, 5]
    assert b == [2, 3, 1, 1]


def test_real_axis_positive_unchanged():
    assert get_real_axis(3, 4) == 3
    assert get_real_axis(0, 1) == 0


@pytest.mark.parametrize("rank", [1, 2, 4, 6])
def test_real_axis_negative(rank):
    for axis in range(-rank, 0):
        assert get_real_axis(axis, rank) == axis + rank


@pytest.mark.parametrize("axis, rank", [(4, 4), (-5, 4), (0, 0)])
def test_real_axis_out_of_range(axis, rank):
    with pytest.raises(TensorGraphError):
        get_real_axis(axis, rank)


def _strides(shape):
    strides = []
    step = 1
    for dim in reversed(shape):
        strides.insert(0, step)
        step *= dim
    return strides


@pytest.mark.parametrize("shape", [[2, 3, 4], [1, 2, 2, 3, 1], [5]])
def test_locate_delocate_round_trip(shape):
    total = 1
    for dim in shape:
        total *= dim
    strides = _strides(shape)
    for flat in range(total):
        position = locate_index(flat, shape)
        assert all(0 <= p < d for p, d in zip(position, shape))
        assert delocate_index(position, shape, strides) == flat


def test_delocate_broadcasts_size_one_axes():
    shape = [1, 3]
    strides = _strides(shape)
    assert delocate_index([1, 2], shape, strides) == delocate_index(
        [0, 2], shape, strides
    )


def test_delocate_rank_mismatch():
    with pytest.raises(TensorGraphError):
        delocate_index([0, 0], [2, 2, 2], [4, 2, 1])
    with pytest.raises(TensorGraphError):
        delocate_index([0, 0], [2, 2], [1])


def test_kernel_attrs_str():
    assert kernel_attrs_str((1, OpType.ADD)) == "CPU, Add"
    assert kernel_attrs_str((1, int(OpType.MATMUL))) == "CPU, MatMul"


def test_kernel_attrs_unknown_device():
    with pytest.raises(TensorGraphError):
        kernel_attrs_str((7, OpType.ADD))