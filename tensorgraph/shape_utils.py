"""Shape arithmetic helpers used by operators and kernels."""

from __future__ import annotations

from collections.abc import Sequence

from tensorgraph.errors import TensorGraphError
from tensorgraph.op_type import OpType

_DEVICE_NAMES = {1: "CPU"}


def infer_broadcast(a: Sequence[int], b: Sequence[int]) -> list[int]:
    """Bidirectional broadcast of two shapes; an empty list if incompatible."""
    rank = max(len(a), len(b))
    padded_a = [1] * (rank - len(a)) + list(a)
    padded_b = [1] * (rank - len(b)) + list(b)
    result = []
    for dim_a, dim_b in zip(padded_a, padded_b):
        if dim_b == 1 or dim_a == dim_b:
            result.append(dim_a)
        elif dim_a == 1:
            result.append(dim_b)
        else:
            return []
    return result


def get_real_axis(axis: int, rank: int) -> int:
    """Map a possibly negative axis into ``range(rank)``."""
    if rank < 1:
        raise TensorGraphError(f"Assertion failed (rank >= 1): rank={rank}")
    if not -rank <= axis <= rank - 1:
        raise TensorGraphError(
            f"Assertion failed (axis >= -rank && axis <= rank - 1): "
            f"axis={axis}, rank={rank}"
        )
    return axis + rank if axis < 0 else axis


def locate_index(flat_index: int, shape: Sequence[int]) -> list[int]:
    """Turn a row-major flat index into a multi-dimensional index."""
    position = [0] * len(shape)
    rest = flat_index
    for axis in reversed(range(len(shape))):
        rest, position[axis] = divmod(rest, shape[axis])
    return position


def delocate_index(
    shape_index: Sequence[int], shape: Sequence[int], stride: Sequence[int]
) -> int:
    """Flat offset of an index into a (possibly broadcast) shape with strides."""
    if len(shape_index) != len(shape):
        raise TensorGraphError("Assertion failed: index rank differs from shape rank")
    if len(shape) != len(stride):
        raise TensorGraphError("Assertion failed: shape rank differs from stride rank")
    return sum(
        (index % dim) * step for index, dim, step in zip(shape_index, shape, stride)
    )


def kernel_attrs_str(attrs: tuple) -> str:
    """Describe a ``(device, op_type)`` kernel key as ``"CPU, Add"``."""
    device, op_type = attrs
    device_value = getattr(device, "value", device)
    try:
        device_name = _DEVICE_NAMES[device_value]
    except KeyError:
        raise TensorGraphError("Unimplemented") from None
    return f"{device_name}, {OpType.name_of(int(op_type))}"