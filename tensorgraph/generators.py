"""Fillers that write test data into tensor buffers."""

from __future__ import annotations

import numpy as np

from tensorgraph.data_type import DataType
from tensorgraph.errors import TensorGraphError

_SUPPORTED = (DataType.UINT32, DataType.FLOAT32)


class DataGenerator:
    """Fills a flat buffer of UInt32 or Float32 elements."""

    def __call__(self, data: np.ndarray, dtype: DataType) -> None:
        if dtype not in _SUPPORTED:
            raise TensorGraphError("Unimplemented")
        self.fill(data)

    def fill(self, data: np.ndarray) -> None:
        raise TensorGraphError("Unimplemented")


class IncrementalGenerator(DataGenerator):
    """Writes 0, 1, 2, ... in element order."""

    def fill(self, data: np.ndarray) -> None:
        data.flat[:] = np.arange(data.size)


class ValueGenerator(DataGenerator):
    """Writes the same value into every element."""

    def __init__(self, value: int) -> None:
        self.value = value

    def fill(self, data: np.ndarray) -> None:
        data.flat[:] = self.value


def one_generator() -> ValueGenerator:
    """Generator that fills with ones."""
    return ValueGenerator(1)


def zero_generator() -> ValueGenerator:
    """Generator that fills with zeros."""
    return ValueGenerator(0)