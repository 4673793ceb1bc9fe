"""Reference interpreter that executes a module on host tensors."""

from __future__ import annotations

from typing import Mapping

import numpy as np

from lunara import cpu_ref
from lunara.errors import LunaraError
from lunara.ir import DType, Graph, Module, OpKind, Value
from lunara.tensor import Device, Tensor, TensorDType


def _value_key(g: Graph, vid: int) -> str:
    name = g.values[vid].name
    return name if name else f"%{vid}"


def _ensure_f32_host(t: Tensor) -> None:
    if t.device is not Device.Host:
        raise LunaraError("interpreter: expected Host tensor")
    if t.dtype is not TensorDType.f32:
        raise LunaraError("interpreter: expected f32 tensor")


def _alloc_for_value(v: Value) -> Tensor:
    if v.type.dtype is not DType.f32:
        raise LunaraError("interpreter: only f32 supported")
    if not v.type.shape.is_static():
        raise LunaraError("interpreter: requires static shapes")
    return Tensor.empty_host(v.type.shape.dims, TensorDType.f32)


class CpuInterpreter:
    """Runs every op of a module in order with the CPU reference kernels."""

    def run(self, m: Module, feeds: Mapping[str, Tensor]) -> dict[str, Tensor]:
        """Execute ``m`` with input tensors keyed by name; return outputs by name or ``%id``."""
        g = m.graph
        slots: dict[int, Tensor] = {}

        for vid in g.inputs:
            feed = feeds.get(g.values[vid].name)
            if feed is None:
                raise LunaraError("interpreter: missing input feed")
            _ensure_f32_host(feed)
            copy = Tensor.empty_host(feed.shape, feed.dtype)
            np.copyto(copy.data, feed.data)
            slots[vid] = copy

        def operand(vid: int) -> Tensor:
            try:
                return slots[vid]
            except KeyError:
                raise LunaraError("interpreter: value not computed") from None

        for op in g.ops:
            if op.kind in (OpKind.Add, OpKind.Mul, OpKind.MatMul):
                out_id = op.outputs[0]
                out = _alloc_for_value(g.values[out_id])
                a, b = operand(op.inputs[0]), operand(op.inputs[1])
                kernel = {
                    OpKind.Add: cpu_ref.add,
                    OpKind.Mul: cpu_ref.mul,
                    OpKind.MatMul: cpu_ref.matmul,
                }[op.kind]
                kernel(a, b, out)
                slots[out_id] = out
            elif op.kind is OpKind.Relu:
                out_id = op.outputs[0]
                out = _alloc_for_value(g.values[out_id])
                cpu_ref.relu(operand(op.inputs[0]), out)
                slots[out_id] = out
            else:
                raise LunaraError("interpreter: unsupported op kind")

        return {_value_key(g, vid): operand(vid) for vid in g.outputs}