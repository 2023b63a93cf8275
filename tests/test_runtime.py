from types import SimpleNamespace

import numpy as np
import pytest

from tensorgraph.errors import TensorGraphError
from tensorgraph.kernel import Kernel, KernelRegistry
from tensorgraph.op_type import OpType
from tensorgraph.runtime import Device, NativeCpuRuntime


class _RecordingKernel(Kernel):
    def __init__(self, log):
        self.log = log

    def compute(self, op, runtime):
        self.log.append((op, runtime))


def test_get_instance_is_shared():
    first = NativeCpuRuntime.get_instance()
    second = NativeCpuRuntime.get_instance()
    assert id(first) == id(second)
    assert str(second) == "CPU Runtime"


def test_name_and_device():
    runtime = NativeCpuRuntime()
    assert str(runtime) == "CPU Runtime"
    assert runtime.device is Device.CPU
    assert runtime.is_cpu() is True


def test_alloc_rounds_up_to_words():
    runtime = NativeCpuRuntime()
    assert runtime.alloc(10).nbytes == 16
    assert runtime.alloc(16).nbytes == 16
    assert runtime.alloc(0).nbytes == 0


def test_alloc_is_zeroed():
    buffer = NativeCpuRuntime().alloc(24)
    assert buffer.dtype == np.uint8
    assert not buffer.any()


def test_dealloc_releases_once():
    runtime = NativeCpuRuntime()
    buffer = runtime.alloc(8)
    runtime.dealloc(buffer)
    with pytest.raises(TensorGraphError):
        runtime.dealloc(buffer)


def test_dealloc_foreign_buffer_raises():
    with pytest.raises(TensorGraphError):
        NativeCpuRuntime().dealloc(np.zeros(8, dtype=np.uint8))


def test_run_dispatches_in_order():
    log = []
    registry = KernelRegistry()
    registry.register((Device.CPU, OpType.ADD), _RecordingKernel(log), "add")
    registry.register((Device.CPU, OpType.RELU), _RecordingKernel(log), "relu")
    runtime = NativeCpuRuntime(registry)
    first = SimpleNamespace(op_type=OpType.RELU)
    second = SimpleNamespace(op_type=OpType.ADD)
    runtime.run(SimpleNamespace(operators=[first, second]))
    assert log == [(first, runtime), (second, runtime)]


def test_run_without_kernel_raises():
    runtime = NativeCpuRuntime(KernelRegistry())
    graph = SimpleNamespace(operators=[SimpleNamespace(op_type=OpType.CAST)])
    with pytest.raises(TensorGraphError, match="Kernel not found"):
        runtime.run(graph)