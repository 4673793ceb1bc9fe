"""Expression trees describing the body of a fused elementwise kernel."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Optional


class ExprKind(enum.IntEnum):
    """Node kind of a kernel expression."""

    InputRef = 0
    Add = 1
    Mul = 2
    Relu = 3


@dataclass
class Expr:
    """A node of a kernel expression tree; ``a`` and ``b`` are its operands."""

    kind: ExprKind
    input_index: int = 0
    a: Optional[Expr] = None
    b: Optional[Expr] = None

    @classmethod
    def input(cls, idx: int) -> Expr:
        """Reference to kernel argument ``idx``."""
        return cls(ExprKind.InputRef, input_index=idx)

    @classmethod
    def add(cls, x: Expr, y: Expr) -> Expr:
        return cls(ExprKind.Add, a=x, b=y)

    @classmethod
    def mul(cls, x: Expr, y: Expr) -> Expr:
        return cls(ExprKind.Mul, a=x, b=y)

    @classmethod
    def relu(cls, x: Expr) -> Expr:
        return cls(ExprKind.Relu, a=x)

    def clone(self) -> Expr:
        """Deep copy of this node and all of its operands."""
        return Expr(
            self.kind,
            input_index=self.input_index,
            a=self.a.clone() if self.a is not None else None,
            b=self.b.clone() if self.b is not None else None,
        )


@dataclass
class KernelIR:
    """A fused kernel: its argument count and the expression for its output."""

    num_inputs: int = 0
    out_expr: Optional[Expr] = None