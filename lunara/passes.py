"""Graph passes: the pass interface, a pass manager, shape inference and constant folding."""

from __future__ import annotations

import abc
from typing import ClassVar, Iterable

import numpy as np

from lunara import cpu_ref
from lunara.errors import LunaraError
from lunara.ir import (
    Attribute,
    DType,
    Graph,
    Module,
    Op,
    OpKind,
    Shape,
    TensorType,
    is_valid,
    rank,
    same_shape,
)
from lunara.tensor import Tensor, TensorDType

_MAX_FOLD_NUMEL = 256
_DATA_ATTR = "data_f32"


class Pass(abc.ABC):
    """A transformation or analysis run over a module in place."""

    name: ClassVar[str] = "Pass"

    @abc.abstractmethod
    def run(self, m: Module) -> None:
        """Apply the pass to ``m``; raise :class:`LunaraError` on failure."""


class PassManager:
    """Runs a sequence of passes in the order they were added."""

    def __init__(self, passes: Iterable[Pass] = ()) -> None:
        self.passes: list[Pass] = list(passes)

    def add(self, p: Pass) -> None:
        self.passes.append(p)

    def run(self, m: Module) -> None:
        """Run every pass; the first failure stops the run and names the pass."""
        for p in self.passes:
            try:
                p.run(m)
            except LunaraError as exc:
                raise LunaraError(f"Pass failed: {p.name} :: {exc.message}") from exc


def _require(cond: bool, msg: str) -> None:
    if not cond:
        raise LunaraError(msg)


class ShapeInferPass(Pass):
    """Fills in output types of Add, Mul, Relu and MatMul ops."""

    name: ClassVar[str] = "ShapeInfer"

    def run(self, m: Module) -> None:
        g = m.graph
        for op in g.ops:
            _require(bool(op.outputs), "shape_infer: op has no outputs")

            if op.kind in (OpKind.Add, OpKind.Mul):
                _require(len(op.inputs) == 2, "shape_infer: add/mul expects 2 inputs")
                a = g.value(op.inputs[0])
                b = g.value(op.inputs[1])
                out = g.value(op.outputs[0])
                _require(a.type.dtype == b.type.dtype, "shape_infer: add/mul dtype mismatch")
                _require(same_shape(a.type, b.type), "shape_infer: add/mul shape mismatch")
                out.type = a.type

            elif op.kind is OpKind.Relu:
                _require(len(op.inputs) == 1, "shape_infer: relu expects 1 input")
                a = g.value(op.inputs[0])
                g.value(op.outputs[0]).type = a.type

            elif op.kind is OpKind.MatMul:
                _require(len(op.inputs) == 2, "shape_infer: matmul expects 2 inputs")
                a = g.value(op.inputs[0])
                b = g.value(op.inputs[1])
                c = g.value(op.outputs[0])
                _require(a.type.dtype == b.type.dtype, "shape_infer: matmul dtype mismatch")
                _require(
                    rank(a.type) == 2 and rank(b.type) == 2,
                    "shape_infer: matmul requires rank-2",
                )
                rows, k = a.type.shape.dims
                k2, cols = b.type.shape.dims
                _require(k >= 0 and k2 >= 0, "shape_infer: matmul requires known K")
                _require(k == k2, "shape_infer: matmul K mismatch")
                # rows or cols may stay unknown (-1)
                c.type = TensorType(a.type.dtype, Shape((rows, cols)))


def _is_const_value(g: Graph, vid: int) -> bool:
    producer = g.values[vid].producer
    return is_valid(producer) and g.ops[producer].kind is OpKind.Constant


def _get_attr(op: Op, key: str) -> str | None:
    return next((a.value for a in op.attrs if a.key == key), None)


def _parse_csv_f32(text: str) -> list[float]:
    try:
        return [float(item) for item in text.split(",") if item]
    except ValueError as exc:
        raise LunaraError(f"const_fold: bad {_DATA_ATTR} entry") from exc


def _materialize_const_tensor(g: Graph, vid: int) -> Tensor:
    v = g.values[vid]
    data = _get_attr(g.ops[v.producer], _DATA_ATTR)
    if data is None:
        raise LunaraError("const_fold: missing data_f32")
    if v.type.dtype is not DType.f32:
        raise LunaraError("const_fold: only f32")
    if not v.type.shape.is_static():
        raise LunaraError("const_fold: requires static shape")

    out = Tensor.empty_host(v.type.shape.dims, TensorDType.f32)
    values = _parse_csv_f32(data)
    if len(values) != out.data.size:
        raise LunaraError("const_fold: data size mismatch")
    out.data[...] = np.asarray(values, dtype=np.float32).reshape(out.data.shape)
    return out


def _format_f32(t: Tensor) -> str:
    return ",".join(f"{float(x):g}" for x in np.asarray(t.data).ravel())


def _write_const_attr(op: Op, t: Tensor) -> None:
    text = _format_f32(t)
    for attr in op.attrs:
        if attr.key == _DATA_ATTR:
            attr.value = text
            return
    op.attrs.append(Attribute(_DATA_ATTR, text))


_FOLDABLE = (OpKind.Add, OpKind.Mul, OpKind.Relu, OpKind.MatMul)


class ConstFoldPass(Pass):
    """Replaces small f32 ops whose inputs are all constants by Constant ops."""

    name: ClassVar[str] = "ConstFold"

    def run(self, m: Module) -> None:
        g = m.graph
        for op in g.ops:
            if op.kind not in _FOLDABLE:
                continue
            if not all(_is_const_value(g, vid) for vid in op.inputs):
                continue

            out_type = g.values[op.outputs[0]].type
            if out_type.dtype is not DType.f32:
                continue
            if not out_type.shape.is_static():
                continue
            if out_type.shape.numel_static() > _MAX_FOLD_NUMEL:
                continue

            ins = [_materialize_const_tensor(g, vid) for vid in op.inputs]
            out = Tensor.empty_host(out_type.shape.dims, TensorDType.f32)

            if op.kind is OpKind.Add:
                cpu_ref.add(ins[0], ins[1], out)
            elif op.kind is OpKind.Mul:
                cpu_ref.mul(ins[0], ins[1], out)
            elif op.kind is OpKind.Relu:
                cpu_ref.relu(ins[0], out)
            else:
                cpu_ref.matmul(ins[0], ins[1], out)

            op.kind = OpKind.Constant
            op.inputs.clear()
            op.attrs.clear()
            _write_const_attr(op, out)