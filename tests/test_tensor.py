import math
from types import SimpleNamespace

import numpy as np
import pytest

from tensorgraph.data_type import DataType
from tensorgraph.errors import TensorGraphError
from tensorgraph.generators import IncrementalGenerator, one_generator
from tensorgraph.runtime import NativeCpuRuntime
from tensorgraph.tensor import Blob, Tensor


@pytest.fixture
def runtime():
    return NativeCpuRuntime.get_instance()


def bound(shape, dtype, runtime):
    tensor = Tensor(shape, dtype, runtime)
    tensor.set_data_blob(Blob(runtime, runtime.alloc(tensor.bytes)))
    return tensor


def test_size_and_bytes(runtime):
    shape = [1, 2, 2, 3]
    tensor = Tensor(shape, DataType.FLOAT32, runtime)
    assert tensor.size == math.prod(shape)
    assert tensor.bytes == tensor.size * DataType.FLOAT32.byte_size()
    assert tensor.dims == shape
    assert tensor.rank == len(shape)


def test_dims_is_a_copy(runtime):
    tensor = Tensor([2, 3], DataType.FLOAT32, runtime)
    dims = tensor.dims
    dims.append(7)
    assert tensor.dims == [2, 3]


def test_set_shape_updates_size(runtime):
    tensor = Tensor([2, 3], DataType.FLOAT32, runtime)
    tensor.set_shape([4, 5, 6])
    assert tensor.dims == [4, 5, 6]
    assert tensor.size == math.prod([4, 5, 6])
    assert tensor.rank == 3


def test_ids_are_unique(runtime):
    a = Tensor([1], DataType.FLOAT32, runtime)
    b = Tensor([1], DataType.FLOAT32, runtime)
    assert a.guid != b.guid
    assert a.fuid != b.fuid


def test_data_without_blob_raises(runtime):
    tensor = Tensor([2], DataType.FLOAT32, runtime)
    with pytest.raises(TensorGraphError):
        tensor.set_data(IncrementalGenerator())
    with pytest.raises(TensorGraphError):
        tensor.print_data()


def test_set_data_writes_through_blob(runtime):
    tensor = bound([2, 3], DataType.FLOAT32, runtime)
    tensor.set_data(IncrementalGenerator())
    assert tensor.data.tolist() == list(range(6))
    assert tensor.equal_data(list(range(6)))


def test_blob_offsets_do_not_overlap(runtime):
    buffer = runtime.alloc(64)
    a = Tensor([4], DataType.UINT32, runtime)
    b = Tensor([4], DataType.UINT32, runtime)
    a.set_data_blob(Blob(runtime, buffer, 0))
    b.set_data_blob(Blob(runtime, buffer, a.bytes))
    a.set_data(IncrementalGenerator())
    b.set_data(one_generator())
    assert a.data.tolist() == [0, 1, 2, 3]
    assert b.data.tolist() == [1, 1, 1, 1]


def test_small_blob_raises(runtime):
    tensor = Tensor([4], DataType.FLOAT32, runtime)
    tensor.set_data_blob(Blob(runtime, np.zeros(8, dtype=np.uint8)))
    with pytest.raises(TensorGraphError):
        _ = tensor.data
    tensor.set_data_blob(Blob(runtime, np.zeros(16, dtype=np.uint8)))
    assert tensor.data.tolist() == [0, 0, 0, 0]


def test_equal_data_between_tensors(runtime):
    a = bound([3], DataType.FLOAT32, runtime)
    b = bound([3], DataType.FLOAT32, runtime)
    a.set_data(IncrementalGenerator())
    b.set_data(IncrementalGenerator())
    assert a.equal_data(b)
    b.set_data(one_generator())
    assert not a.equal_data(b)


def test_equal_data_size_mismatch_is_false(runtime):
    a = bound([3], DataType.FLOAT32, runtime)
    b = bound([4], DataType.FLOAT32, runtime)
    assert a.equal_data(b) is False


def test_equal_data_dtype_mismatch_raises(runtime):
    a = bound([3], DataType.FLOAT32, runtime)
    b = bound([3], DataType.UINT32, runtime)
    with pytest.raises(TensorGraphError):
        a.equal_data(b)


def test_equal_data_sequence_length_mismatch_raises(runtime):
    tensor = bound([3], DataType.FLOAT32, runtime)
    with pytest.raises(TensorGraphError):
        tensor.equal_data([0, 1])


def test_equal_data_array_dtype_mismatch_raises(runtime):
    tensor = bound([3], DataType.FLOAT32, runtime)
    with pytest.raises(TensorGraphError):
        tensor.equal_data(np.zeros(3, dtype=np.int64))


def test_equal_data_relative_error(runtime):
    tensor = bound([1], DataType.FLOAT32, runtime)
    tensor.set_data(one_generator())
    assert not tensor.equal_data([1.001])
    assert tensor.equal_data([1.001], relative_error=1e-2)


def test_equal_data_near_zero_uses_absolute_error(runtime):
    tensor = bound([1], DataType.FLOAT32, runtime)
    assert tensor.equal_data([1e-7])
    assert not tensor.equal_data([1e-3])


def test_integer_comparison_is_exact(runtime):
    tensor = bound([2], DataType.UINT32, runtime)
    tensor.set_data(IncrementalGenerator())
    assert tensor.equal_data([0, 1])
    assert not tensor.equal_data([0, 2])


def test_data_string_layout(runtime):
    tensor = bound([2, 3], DataType.FLOAT32, runtime)
    tensor.set_data(IncrementalGenerator())
    expected = f"Tensor: {tensor.guid}\n[[0, 1, 2], \n[3, 4, 5]]\n"
    assert tensor.data_string() == expected


def test_print_data(runtime, capsys):
    tensor = bound([2], DataType.UINT32, runtime)
    tensor.set_data(IncrementalGenerator())
    tensor.print_data()
    assert capsys.readouterr().out == tensor.data_string() + "\n"


def test_str_without_data(runtime):
    tensor = Tensor([2, 3], DataType.FLOAT32, runtime)
    text = str(tensor)
    assert text.startswith(f"Tensor {tensor.guid}, Fuid {tensor.fuid}, shape [2,3]")
    assert "dtype Float32, CPU Runtime, nullptr data" in text
    assert text.endswith(", source None, targets []")


def test_str_with_source_and_targets(runtime):
    tensor = Tensor([1], DataType.FLOAT32, runtime)
    tensor.set_source(SimpleNamespace(guid=42))
    tensor.add_target(SimpleNamespace(guid=7))
    tensor.add_target(SimpleNamespace(guid=9))
    assert str(tensor).endswith(", source 42, targets [7,9]")


def test_targets_and_source(runtime):
    tensor = Tensor([1], DataType.FLOAT32, runtime)
    first, second = object(), object()
    tensor.add_target(first)
    tensor.add_target(second)
    tensor.add_target(first)
    tensor.remove_target(first)
    assert tensor.targets == [second]
    assert tensor.source is None
    tensor.set_source(first)
    assert tensor.source is first


def test_targets_returns_copy(runtime):
    tensor = Tensor([1], DataType.FLOAT32, runtime)
    tensor.targets.append(object())
    assert tensor.targets == []