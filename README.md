# lunara

A compact tensor-graph toolkit: build a graph of tensor operations, check it,
infer shapes, fold constants, plan elementwise fusions and run it on the CPU.

## Install

```
pip install .
```

For running the tests:

```
pip install ".[test]"
pytest
```

## Building a graph

Values and ops are referred to by integer ids. `Graph.add_op` creates the
op's output values (with an unknown type until shape inference runs) and
records the op as a user of each input.

```python
from lunara.ir import DType, Module, OpKind, Shape, TensorType
from lunara.verifier import verify_module
from lunara.printer import dump_module

m = Module()
g = m.graph
t = TensorType(DType.f32, Shape((8,)))

x = g.add_value(t, "x")
b = g.add_value(t, "b")
g.inputs = [x, b]

y = g.op(g.add_op(OpKind.Add, [x, b], 1, "add0")).outputs[0]
w = g.op(g.add_op(OpKind.Mul, [y, b], 1, "mul0")).outputs[0]
z = g.op(g.add_op(OpKind.Relu, [w], 1, "relu0")).outputs[0]
g.set_graph_outputs([z])

verify_module(m)          # raises LunaraError if the graph is malformed
print(dump_module(m))
```

Every failure in the package is reported as `lunara.errors.LunaraError`.

## Passes

```python
from lunara.passes import ConstFoldPass, PassManager, ShapeInferPass

pm = PassManager()
pm.add(ShapeInferPass())
pm.add(ConstFoldPass())
pm.run(m)
```

`ShapeInferPass` fills in output types for `Add`, `Mul`, `Relu` and `MatMul`
(a matmul keeps unknown `-1` rows or columns, but needs a known, matching
inner dimension). `ConstFoldPass` replaces `Add`, `Mul`, `Relu` and `MatMul`
ops whose inputs are all `Constant` ops, and whose static f32 output has at
most 256 elements, with a `Constant` op carrying the computed values as a
comma-separated `data_f32` attribute. When a pass fails, `PassManager.run`
raises `LunaraError("Pass failed: <name> :: <message>")`.

## Running on the CPU

```python
import numpy as np
from lunara.interpreter import CpuInterpreter
from lunara.tensor import Tensor, TensorDType

feeds = {
    "x": Tensor.empty_host([8], TensorDType.f32),
    "b": Tensor.empty_host([8], TensorDType.f32),
}
feeds["x"].data[:] = np.arange(-4, 4)
feeds["b"].data[:] = np.arange(1, 9)

outputs = CpuInterpreter().run(m, feeds)
```

Run shape inference first, since the interpreter needs static f32 output
types. Inputs are looked up by value name and copied; outputs come back in a
dict keyed by value name, or `"%<id>"` for unnamed values. The kernels used
are in `lunara.cpu_ref` (`add`, `mul`, `relu`, `matmul`), which write into a
preallocated output tensor.

## Fusion planning and the kernel cache

`lunara.fusion.build_fusion_plans(m)` finds chains of at least two f32
elementwise ops (`Add`, `Mul`, `Relu`) of one static shape, where each op
consumes the previous result and that result has no other user. It returns
`FusionPlan` objects holding the `FusionRegion`, a `KernelIR` expression
tree (`lunara.kernel_ir.Expr`) over the region's external inputs, and a
stable signature string.

`lunara.ptx_cache` stores kernel text on disk under `$LUNARA_CACHE_DIR`, or
`$HOME/.cache/lunara` by default, with `store_ptx(key, text)` and
`load_ptx(key)`; `fnv1a_64_hex` gives a 16-digit hex key for a string.

## Loading graphs from JSON

```python
from lunara.graph_json import import_graph_json

m = import_graph_json("graph.json")
```

The file lists `inputs` (name, dtype, shape), `ops` (kind, inputs, name) and
`outputs`; an op's result is referred to as `"<op name>:0"`. `parse_graph`
and `build_module` expose the two steps separately. String values are read
literally, without escape sequences.

## Utilities

`lunara.timer.HostTimer` measures milliseconds between `start()` and
`stop()`. `lunara.log` provides `info`, `warn` and `error`, which write
`[TAG] message` lines to standard error with `%`-style formatting.

## What it does not do

There is no GPU support. Fusion plans are produced, but nothing turns them
into kernel source or compiles them; the kernel cache only stores and loads
text it is given. `Tensor.empty_cuda`, `Tensor.to_cuda` and `Tensor.to_host`
always raise `LunaraError`. The package has no command-line tool.