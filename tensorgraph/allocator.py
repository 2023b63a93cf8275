"""Offset planner for a single contiguous block of runtime memory."""

from __future__ import annotations

from typing import Any

import numpy as np

from tensorgraph.errors import TensorGraphError

# The widest element type currently supported takes eight bytes.
_DEFAULT_ALIGNMENT = 8


class Allocator:
    """Plans offsets inside one buffer, then allocates that buffer once.

    ``alloc`` and ``free`` only move offsets around; ``get_ptr`` allocates
    a buffer as large as the peak usage.  After that, planning is frozen.
    """

    def __init__(self, runtime: Any) -> None:
        self.runtime = runtime
        self.used = 0
        self.peak = 0
        self.alignment = _DEFAULT_ALIGNMENT
        self._buffer: np.ndarray | None = None
        self._free_blocks: dict[int, int] = {}

    def _check_planning(self) -> None:
        if self._buffer is not None:
            raise TensorGraphError(
                "Assertion failed (this->ptr == nullptr): memory already allocated")

    def alloc(self, size: int) -> int:
        """Reserve ``size`` bytes (rounded up) and return their offset."""
        self._check_planning()
        size = self.aligned_size(size)
        self.used += size
        for addr, length in sorted(self._free_blocks.items()):
            if length >= size:
                del self._free_blocks[addr]
                if length > size:
                    self._free_blocks[addr + size] = length - size
                return addr
        self.peak += size
        return self.peak - size

    def free(self, addr: int, size: int) -> None:
        """Release ``size`` bytes (rounded up) starting at offset ``addr``."""
        self._check_planning()
        size = self.aligned_size(size)
        self.used -= size
        if addr + size == self.peak:
            self.peak -= size
            return
        for start, length in sorted(self._free_blocks.items()):
            if start + length == addr:
                self._free_blocks[start] = length + size
                return
            if start == addr + size:
                del self._free_blocks[start]
                self._free_blocks[addr] = size + length
                return
        self._free_blocks[addr] = size

    def get_ptr(self) -> np.ndarray:
        """Allocate the planned buffer on first call and return it."""
        if self._buffer is None:
            self._buffer = self.runtime.alloc(self.peak)
            address = self._buffer.__array_interface__["data"][0]
            print(f"Allocator really alloc: 0x{address:x} {self.peak} bytes")
        return self._buffer

    def info(self) -> None:
        """Print current and peak usage."""
        print(f"Used memory: {self.used}, peak memory: {self.peak}")

    def aligned_size(self, size: int) -> int:
        """``size`` rounded up to a multiple of the alignment."""
        return ((size - 1) // self.alignment + 1) * self.alignment