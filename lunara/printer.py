"""Human-readable text dump of an IR module."""

from __future__ import annotations

from lunara.ir import Module, Shape, Value


def _tensor(shape: Shape) -> str:
    return "[" + ",".join(str(d) for d in shape.dims) + "]"


def _typed(value: Value) -> str:
    return f"tensor{_tensor(value.type.shape)}<{value.type.dtype}>"


def dump_module(m: Module) -> str:
    g = m.graph
    lines = ["=== Lunara IR ===", "Inputs:"]
    for vid in g.inputs:
        v = g.values[vid]
        line = f"  %{vid} : {_typed(v)}"
        if v.name:
            line += f"  ; name={v.name}"
        lines.append(line)

    lines.append("Ops:")
    for op in g.ops:
        header = f"  @{op.id} {op.kind}"
        if op.name:
            header += f"  ; name={op.name}"
        lines.append(header)
        lines.append("    in: " + ", ".join(f"%{vid}" for vid in op.inputs))
        lines.append(
            "    out: "
            + ", ".join(f"%{vid}:{_typed(g.values[vid])}" for vid in op.outputs)
        )

    lines.append("Outputs:")
    lines.extend(f"  %{vid}" for vid in g.outputs)
    return "\n".join(lines) + "\n"