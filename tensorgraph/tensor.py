"""Tensors and the memory blobs bound to them."""

from __future__ import annotations

import math
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from typing import Any

import numpy as np

from tensorgraph.data_type import DataType
from tensorgraph.errors import TensorGraphError, vec_to_string
from tensorgraph.ids import next_fuid, next_guid


@dataclass(frozen=True, eq=False)
class Blob:
    """A region of runtime memory: a flat byte buffer and an offset into it."""

    runtime: Any
    buffer: np.ndarray
    offset: int = 0


def _format_element(value: Any) -> str:
    if isinstance(value, np.floating):
        return f"{float(value):g}"
    return str(int(value))


def _values_match(mine: np.ndarray, theirs: np.ndarray, relative_error: float) -> bool:
    if not np.issubdtype(mine.dtype, np.floating):
        return bool(np.array_equal(mine, theirs))
    a = mine.astype(np.float64)
    b = theirs.astype(np.float64)
    diff = np.abs(a - b)
    low = np.minimum(np.abs(a), np.abs(b))
    high = np.maximum(np.abs(a), np.abs(b))
    with np.errstate(divide="ignore", invalid="ignore"):
        bad = np.where(low == 0, diff > relative_error, diff / high > relative_error)
    mismatches = np.flatnonzero(bad)
    if mismatches.size:
        index = int(mismatches[0])
        print(f"Error on {index}: {a[index]:f} {b[index]:f}")
        return False
    return True


class Tensor:
    """A node of the graph holding a shaped array of one data type."""

    def __init__(self, shape: Sequence[int], dtype: DataType, runtime: Any) -> None:
        self.guid = next_guid()
        self.fuid = next_fuid()
        self.dtype = DataType(dtype)
        self.runtime = runtime
        self._shape = list(shape)
        self._size = math.prod(self._shape)
        self._blob: Blob | None = None
        self._targets: list[Any] = []
        self._source: Any = None

    def __str__(self) -> str:
        if self._blob is None:
            address = "nullptr data"
        else:
            base = self._blob.buffer.__array_interface__["data"][0]
            address = f"0x{base + self._blob.offset:x}"
        text = (
            f"Tensor {self.guid}, Fuid {self.fuid}, shape {vec_to_string(self._shape)}, "
            f"dtype {self.dtype}, {self.runtime}, {address}\n"
        )
        source = self._source
        text += f", source {source.guid}" if source is not None else ", source None"
        text += ", targets " + vec_to_string(op.guid for op in self._targets)
        return text

    @property
    def size(self) -> int:
        """Number of elements."""
        return self._size

    @property
    def bytes(self) -> int:
        """Number of bytes the elements take."""
        return self._size * self.dtype.byte_size()

    @property
    def dims(self) -> list[int]:
        """A copy of the shape."""
        return list(self._shape)

    @property
    def rank(self) -> int:
        """Number of dimensions."""
        return len(self._shape)

    def set_shape(self, shape: Iterable[int]) -> None:
        """Replace the shape and recompute the element count."""
        self._shape = list(shape)
        self._size = math.prod(self._shape)

    def set_data_blob(self, blob: Blob) -> None:
        """Bind the tensor to a region of memory."""
        self._blob = blob

    @property
    def data(self) -> np.ndarray:
        """Flat view of the tensor's elements inside its blob."""
        if self._blob is None:
            raise TensorGraphError("Assertion failed (data != nullptr)")
        element = self.dtype.numpy_dtype()
        start = self._blob.offset
        stop = start + self._size * element.itemsize
        raw = self._blob.buffer[start:stop]
        if raw.nbytes != stop - start:
            raise TensorGraphError("Blob is smaller than the tensor it holds")
        return raw.view(element)

    def set_data(self, generator: Callable[[np.ndarray, DataType], None]) -> None:
        """Fill the tensor's memory with a data generator."""
        if self._blob is None:
            raise TensorGraphError("Assertion failed (data != nullptr)")
        generator(self.data, self.dtype)

    def data_string(self) -> str:
        """Render the elements nested by dimension, one row per line."""
        values = self.data
        shape = self._shape or [1]
        blocks = [1] * len(shape)
        blocks[-1] = shape[-1]
        for axis in range(len(shape) - 1, 0, -1):
            blocks[axis - 1] = blocks[axis] * shape[axis - 1]
        column = blocks[-1]
        parts = [f"Tensor: {self.guid}\n"]
        last = self._size - 1
        for index, value in enumerate(values):
            opens = sum(1 for block in blocks if index % block == 0)
            closes = sum(1 for block in blocks if index % block == block - 1)
            parts.append("[" * opens + _format_element(value) + "]" * closes)
            if index != last:
                parts.append(", ")
            if index % column == column - 1:
                parts.append("\n")
        return "".join(parts)

    def print_data(self) -> None:
        """Print the elements to standard output."""
        if self._blob is None:
            raise TensorGraphError("Assertion failed (data != nullptr)")
        if not self.runtime.is_cpu():
            raise TensorGraphError("Unimplemented")
        print(self.data_string())

    def equal_data(self, other: Tensor | Sequence[Any] | np.ndarray,
                   relative_error: float = 1e-6) -> bool:
        """Compare elements with another tensor or a sequence of values."""
        if isinstance(other, Tensor):
            mine = self.data
            theirs = other.data
            if self.dtype != other.dtype:
                raise TensorGraphError("Assertion failed (getDType() == rhs->getDType())")
            if not self.runtime.is_cpu() or not other.runtime.is_cpu():
                raise TensorGraphError("Assertion failed: tensors must live on the CPU")
            if self._size != other.size:
                return False
            return _values_match(mine, theirs, relative_error)
        values = np.asarray(other)
        if values.size != self._size:
            raise TensorGraphError("Assertion failed (size() == dataVector.size())")
        mine = self.data
        if isinstance(other, np.ndarray) and other.dtype != mine.dtype:
            raise TensorGraphError("Assertion failed: element type mismatch")
        return _values_match(mine, values.astype(mine.dtype).ravel(), relative_error)

    @property
    def targets(self) -> list[Any]:
        """Operators that read this tensor."""
        return list(self._targets)

    @property
    def source(self) -> Any:
        """Operator that writes this tensor, or None."""
        return self._source

    def add_target(self, op: Any) -> None:
        self._targets.append(op)

    def set_source(self, op: Any) -> None:
        self._source = op

    def remove_target(self, op: Any) -> None:
        """Drop every occurrence of an operator from the readers."""
        self._targets = [target for target in self._targets if target is not op]