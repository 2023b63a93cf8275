# tensorgraph

`tensorgraph` builds computation graphs of tensors and operators. It infers
output shapes and data types, simplifies the graph, plans one block of memory
for all tensors and runs the operators with plain CPU kernels built on numpy.

## Installation

```
pip install .
```

To also install what the test suite needs:

```
pip install ".[test]"
```

## What it offers

- **Tensors** (`tensorgraph.tensor.Tensor`). A tensor has a shape, a
  `DataType` (`tensorgraph.data_type.DataType`, numbered as ONNX element
  types, e.g. `DataType.FLOAT32`, `DataType.UINT32`), a unique `guid` and a
  family id `fuid`. Once memory is bound, `data` is a flat numpy view of its
  elements, `set_data(generator)` fills it, `equal_data(...)` compares it with
  another tensor or a list of values, and `data_string()` / `print_data()`
  render it.
- **Operators** (all subclasses of `tensorgraph.operator.Operator`):
  - `Add`, `Sub`, `Mul`, `Div` with ONNX-style broadcasting
    (`tensorgraph.element_wise`);
  - `Matmul` with `trans_a` / `trans_b` and batch broadcasting
    (`tensorgraph.matmul`);
  - `Transpose` (`tensorgraph.transpose`);
  - `Concat`, accepting negative axes (`tensorgraph.concat`);
  - `Relu`, `Clip` and `Cast` with `CastType` (`tensorgraph.unary`).
- **Graph** (`tensorgraph.graph.Graph`):
  - `add_tensor`, `add_existing_tensor`, `add_op` (the graph creates the
    outputs) and `add_op_with_outputs` (outputs are given), which connect
    tensors and operators in both directions;
  - `topo_sort`, `shape_infer`, `check_valid`, `inputs`, `outputs`;
  - `optimize`, which removes pairs of transposes that cancel out, merges
    pairs that do not into one transpose, and folds a transpose that swaps
    only the last two axes into the `trans_a` / `trans_b` flag of the
    `Matmul` it feeds;
  - `data_malloc`, which plans memory for every tensor and binds it.
- **Allocator** (`tensorgraph.allocator.Allocator`). Plans byte offsets in a
  single buffer. Sizes are rounded up to 8 bytes; freed blocks are reused
  first-fit, a block freed next to a free block is merged with it, and a block
  freed at the top lowers the peak. `get_ptr()` allocates the buffer once;
  after that, planning is no longer allowed.
- **Kernels** (`tensorgraph.cpu_kernels`). Reference CPU kernels for
  `Concat`, `Add`/`Sub`/`Mul`/`Div`, `Transpose`, `Relu` and `Clip`,
  registered in `tensorgraph.kernel.KernelRegistry` and run by
  `tensorgraph.runtime.NativeCpuRuntime`. They handle `FLOAT32` and `UINT32`
  data.
- **Generators** (`tensorgraph.generators`). Fill tensors with test data:
  `IncrementalGenerator`, `ValueGenerator`, `one_generator()` and
  `zero_generator()`.

## Example

```python
from tensorgraph.data_type import DataType
from tensorgraph.element_wise import Add
from tensorgraph.generators import IncrementalGenerator, one_generator
from tensorgraph.graph import Graph
from tensorgraph.runtime import NativeCpuRuntime

runtime = NativeCpuRuntime.get_instance()
graph = Graph(runtime)

a = graph.add_tensor([2, 3], DataType.FLOAT32)
b = graph.add_tensor([3], DataType.FLOAT32)
op = graph.add_op(Add, a, b, None)      # the output tensor is created for you

graph.data_malloc()                     # plan and bind memory
a.set_data(IncrementalGenerator())
b.set_data(one_generator())

runtime.run(graph)                      # uses the built-in CPU kernels
print(op.output().data_string())
```

### Optimising a graph

```python
from tensorgraph.matmul import Matmul
from tensorgraph.transpose import Transpose

g = Graph(runtime)
i1 = g.add_tensor([2, 3, 4, 5], DataType.UINT32)
i2 = g.add_tensor([2, 3, 4, 5], DataType.UINT32)
t1 = g.add_tensor([2, 3, 5, 4], DataType.UINT32)
t2 = g.add_tensor([2, 3, 4, 5], DataType.UINT32)
t3 = g.add_tensor([2, 3, 5, 4], DataType.UINT32)
o = g.add_tensor([2, 3, 4, 4], DataType.UINT32)
g.add_op_with_outputs(Transpose, i1, t1, [0, 1, 3, 2])
g.add_op_with_outputs(Transpose, t1, t2, [0, 1, 3, 2])
g.add_op_with_outputs(Transpose, i2, t3, [0, 1, 3, 2])
g.add_op_with_outputs(Matmul, t2, t3, o)

g.optimize()
# One Matmul is left, reading i1 and i2 directly, with trans_b set.
```

## Errors

Failed checks raise `tensorgraph.errors.TensorGraphError`: for example shapes
that do not fit an operator, an axis out of range, a kernel registered twice
or not found, or an unsupported data type in a kernel or generator.

## What it does not do

- There are no kernels for `Matmul` or `Cast`: their shapes and data types are
  inferred, but running a graph that contains them raises `TensorGraphError`.
- Only the CPU device (`Device.CPU`) exists.
- Graphs are built in code; there is no loading or saving of model files and
  no command-line tool.

## Running the tests

```
pytest
```