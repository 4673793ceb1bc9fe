"""Discovery of fusible chains of elementwise ops and their kernel descriptions."""

from __future__ import annotations

from dataclasses import dataclass, field

from lunara.errors import LunaraError
from lunara.ir import INVALID_ID, DType, Graph, Module, Op, OpKind, is_valid
from lunara.kernel_ir import Expr, KernelIR

_ELEMWISE = (OpKind.Add, OpKind.Mul, OpKind.Relu)


@dataclass
class FusionRegion:
    """Ops fused together, the values they read from outside and their result."""

    ops: list[int] = field(default_factory=list)
    external_inputs: list[int] = field(default_factory=list)
    output: int = INVALID_ID


@dataclass
class FusionPlan:
    """A fusion region together with its kernel and a stable signature."""

    region: FusionRegion
    kir: KernelIR
    signature: str


def _sig_line(op: Op) -> str:
    ins = ",".join(str(v) for v in op.inputs)
    outs = ",".join(str(v) for v in op.outputs)
    return f"{int(op.kind)}({ins})->{outs}"


def _build_kernel_ir(g: Graph, r: FusionRegion) -> KernelIR:
    arg_index = {vid: i for i, vid in enumerate(r.external_inputs)}
    exprs: dict[int, Expr] = {}

    def get_expr(vid: int) -> Expr:
        if vid in exprs:
            return exprs[vid]
        if vid in arg_index:
            exprs[vid] = Expr.input(arg_index[vid])
            return exprs[vid]
        raise LunaraError("fusion: unresolved value expr")

    for oid in r.ops:
        op = g.ops[oid]
        if op.kind in (OpKind.Add, OpKind.Mul):
            a = get_expr(op.inputs[0])
            b = get_expr(op.inputs[1])
            make = Expr.add if op.kind is OpKind.Add else Expr.mul
            exprs[op.outputs[0]] = make(a.clone(), b.clone())
        elif op.kind is OpKind.Relu:
            a = get_expr(op.inputs[0])
            exprs[op.outputs[0]] = Expr.relu(a.clone())
        else:
            raise LunaraError("fusion: non-elementwise op in region")

    out = exprs.get(r.output)
    if out is None:
        raise LunaraError("fusion: missing output expr")
    return KernelIR(num_inputs=len(r.external_inputs), out_expr=out.clone())


def build_fusion_plans(m: Module) -> list[FusionPlan]:
    """Find chains of at least two f32 elementwise ops of one static shape.

    Ops are assumed to be in topological order. A chain grows while the next
    op consumes the current result, that result has no other user, and the
    next output has the anchor's dtype and shape.
    """
    g = m.graph
    plans: list[FusionPlan] = []
    claimed: set[int] = set()

    for i, op0 in enumerate(g.ops):
        if i in claimed or op0.kind not in _ELEMWISE or len(op0.outputs) != 1:
            continue
        anchor = g.values[op0.outputs[0]].type
        if anchor.dtype is not DType.f32 or not anchor.shape.is_static():
            continue

        region_ops = [i]
        cur = op0.outputs[0]
        for j in range(i + 1, len(g.ops)):
            if j in claimed:
                break
            op = g.ops[j]
            if op.kind not in _ELEMWISE or len(op.outputs) != 1:
                break
            if cur not in op.inputs:
                break
            out_type = g.values[op.outputs[0]].type
            if out_type.dtype is not DType.f32 or out_type.shape.dims != anchor.shape.dims:
                break
            if len(g.values[cur].users) != 1:
                break
            region_ops.append(j)
            cur = op.outputs[0]

        if len(region_ops) < 2:
            continue

        in_region = set(region_ops)
        external = set()
        for oid in region_ops:
            for vid in g.ops[oid].inputs:
                producer = g.values[vid].producer
                if not (is_valid(producer) and producer in in_region):
                    external.add(vid)

        region = FusionRegion(ops=region_ops, external_inputs=sorted(external), output=cur)
        kir = _build_kernel_ir(g, region)

        body = "".join(_sig_line(g.ops[oid]) + ";" for oid in region_ops)
        shape = ",".join(str(d) for d in anchor.shape.dims)
        signature = f"fuse{{{body}}} shape={shape} dtype=f32"

        claimed.update(region_ops)
        plans.append(FusionPlan(region=region, kir=kir, signature=signature))

    return plans