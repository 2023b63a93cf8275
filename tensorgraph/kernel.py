"""Kernels and the registry that maps operators to them."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any, ClassVar

from tensorgraph.errors import TensorGraphError
from tensorgraph.shape_utils import kernel_attrs_str


class Kernel(ABC):
    """Executes one kind of operator on a runtime."""

    @abstractmethod
    def compute(self, op: Any, runtime: Any) -> None:
        """Run ``op`` with memory already bound to its tensors."""


class KernelRegistry:
    """Maps ``(device, op_type)`` keys to kernels."""

    _instance: ClassVar[KernelRegistry | None] = None

    def __init__(self) -> None:
        self._kernels: dict[tuple, tuple[Kernel, str, int]] = {}
        self._count = 0

    @classmethod
    def instance(cls) -> KernelRegistry:
        """The process-wide registry."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    def register(self, key: tuple, kernel: Kernel, name: str) -> bool:
        """Register a kernel under a key; each key may be registered once."""
        if key in self._kernels:
            raise TensorGraphError("Kernel already registered")
        self._count += 1
        self._kernels[key] = (kernel, name, self._count)
        return True

    def get_kernel(self, key: tuple) -> Kernel:
        """The kernel registered under ``key``."""
        try:
            return self._kernels[key][0]
        except KeyError:
            raise TensorGraphError(
                "Kernel not found for key {" + kernel_attrs_str(key) + "}"
            ) from None

    def get_record(self, key: tuple) -> tuple[Kernel, str, int]:
        """The ``(kernel, name, id)`` record for ``key``; KeyError if absent."""
        return self._kernels[key]


def register_kernel(device: Any, op_type: Any,
                    name: str) -> Callable[[type[Kernel]], type[Kernel]]:
    """Class decorator registering an instance of a kernel class globally."""

    def decorate(kernel_class: type[Kernel]) -> type[Kernel]:
        KernelRegistry.instance().register((device, op_type), kernel_class(), name)
        return kernel_class

    return decorate