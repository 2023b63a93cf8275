"""Runtimes: where memory lives and how graphs are executed."""

from __future__ import annotations

import weakref
from abc import ABC, abstractmethod
from enum import IntEnum
from typing import Any, ClassVar

import numpy as np

from tensorgraph.errors import TensorGraphError
from tensorgraph.kernel import KernelRegistry

_WORD = 8


class Device(IntEnum):
    """Kind of device a runtime drives."""

    CPU = 1


class Runtime(ABC):
    """Owns device memory and runs graphs."""

    def __init__(self, device: Device) -> None:
        self.device = device

    @abstractmethod
    def run(self, graph: Any) -> None:
        """Execute every operator of ``graph`` in order."""

    @abstractmethod
    def alloc(self, size: int) -> np.ndarray:
        """Allocate ``size`` zeroed bytes."""

    @abstractmethod
    def dealloc(self, buffer: np.ndarray) -> None:
        """Release memory returned by ``alloc``."""

    @abstractmethod
    def is_cpu(self) -> bool:
        """Whether the memory is host memory."""

    @abstractmethod
    def __str__(self) -> str:
        """Name of the runtime."""


def _builtin_registry() -> KernelRegistry:
    from tensorgraph import cpu_kernels  # noqa: F401  registers the CPU kernels

    return KernelRegistry.instance()


class NativeCpuRuntime(Runtime):
    """Runtime backed by host memory and the registered CPU kernels."""

    _instance: ClassVar[NativeCpuRuntime | None] = None

    def __init__(self, registry: KernelRegistry | None = None) -> None:
        super().__init__(Device.CPU)
        self._registry = registry
        self._live: weakref.WeakValueDictionary[int, np.ndarray] = (
            weakref.WeakValueDictionary())

    def __str__(self) -> str:
        return "CPU Runtime"

    @classmethod
    def get_instance(cls) -> NativeCpuRuntime:
        """The shared CPU runtime."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    def alloc(self, size: int) -> np.ndarray:
        """Zeroed bytes, rounded up to whole 8-byte words."""
        words = (size + _WORD - 1) // _WORD
        buffer = np.zeros(words * _WORD, dtype=np.uint8)
        self._live[id(buffer)] = buffer
        return buffer

    def dealloc(self, buffer: np.ndarray) -> None:
        """Forget a buffer obtained from this runtime."""
        if self._live.get(id(buffer)) is not buffer:
            raise TensorGraphError("Buffer was not allocated by this runtime")
        del self._live[id(buffer)]

    def is_cpu(self) -> bool:
        return self.device == Device.CPU

    def run(self, graph: Any) -> None:
        registry = self._registry if self._registry is not None else _builtin_registry()
        for op in graph.operators:
            kernel = registry.get_kernel((self.device, op.op_type))
            kernel.compute(op, self)