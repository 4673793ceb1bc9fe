"""Structural consistency checks for an IR module."""

from __future__ import annotations

from lunara.errors import LunaraError
from lunara.ir import Module, is_valid


def verify_module(m: Module) -> None:
    """Raise :class:`LunaraError` if the module's graph is inconsistent."""
    g = m.graph
    count = len(g.values)

    def in_range(vid: int) -> bool:
        return 0 <= vid < count

    if any(v.id != i for i, v in enumerate(g.values)):
        raise LunaraError("verify: Value.id mismatch")
    if any(op.id != i for i, op in enumerate(g.ops)):
        raise LunaraError("verify: Op.id mismatch")

    for vid in g.inputs:
        if not in_range(vid):
            raise LunaraError("verify: graph input out of range")
        if is_valid(g.values[vid].producer):
            raise LunaraError("verify: graph input has a producer")

    for op in g.ops:
        for vid in op.inputs:
            if not in_range(vid):
                raise LunaraError("verify: op input out of range")
            if op.id not in g.values[vid].users:
                raise LunaraError("verify: missing use-list entry")
        for vid in op.outputs:
            if not in_range(vid):
                raise LunaraError("verify: op output out of range")
            if g.values[vid].producer != op.id:
                raise LunaraError("verify: output producer mismatch")

    for vid in g.outputs:
        if not in_range(vid):
            raise LunaraError("verify: graph output out of range")
        if vid not in g.inputs and not is_valid(g.values[vid].producer):
            raise LunaraError("verify: graph output has no producer and is not an input")