"""Tensor computation graphs with shape inference, optimisation, memory planning and CPU kernels."""

__version__ = "0.1.0"

__all__ = [
    "allocator",
    "concat",
    "cpu_kernels",
    "data_type",
    "element_wise",
    "errors",
    "generators",
    "graph",
    "ids",
    "kernel",
    "matmul",
    "op_type",
    "operator",
    "runtime",
    "shape_utils",
    "tensor",
    "transpose",
    "unary",
]