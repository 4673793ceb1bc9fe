"""Core graph intermediate representation: types, values, ops and graphs."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Iterable, Sequence

from lunara.errors import LunaraError

INVALID_ID = 0xFFFFFFFF


def is_valid(ident: int) -> bool:
    """Return whether a value or op id is not the invalid sentinel."""
    return ident != INVALID_ID


class DType(enum.Enum):
    """Element type of a tensor in the IR."""

    f16 = "f16"
    f32 = "f32"
    i32 = "i32"
    i64 = "i64"
    unknown = "unknown"

    def __str__(self) -> str:
        return self.value


class OpKind(enum.IntEnum):
    """Kind of operation held by an :class:`Op`."""

    Input = 0
    Constant = 1
    Add = 2
    Mul = 3
    Relu = 4
    MatMul = 5
    Fusion = 6

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class Shape:
    """Tensor shape; a negative dimension means unknown."""

    dims: tuple[int, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "dims", tuple(int(d) for d in self.dims))

    def is_static(self) -> bool:
        return all(d >= 0 for d in self.dims)

    def numel_static(self) -> int:
        """Number of elements, or -1 if any dimension is unknown."""
        if not self.is_static():
            return -1
        n = 1
        for d in self.dims:
            n *= d
        return n


@dataclass(frozen=True)
class TensorType:
    """Element type together with a shape."""

    dtype: DType = DType.unknown
    shape: Shape = field(default_factory=Shape)


def rank(tensor_type: TensorType) -> int:
    return len(tensor_type.shape.dims)


def same_shape(a: TensorType, b: TensorType) -> bool:
    return a.shape.dims == b.shape.dims


@dataclass
class Value:
    """A tensor value; graph inputs have no producer."""

    id: int = 0
    type: TensorType = field(default_factory=TensorType)
    producer: int = INVALID_ID
    users: list[int] = field(default_factory=list)
    name: str = ""


@dataclass
class Attribute:
    key: str
    value: str


@dataclass
class Op:
    """An operation consuming and producing values."""

    id: int = 0
    kind: OpKind = OpKind.Input
    inputs: list[int] = field(default_factory=list)
    outputs: list[int] = field(default_factory=list)
    attrs: list[Attribute] = field(default_factory=list)
    name: str = ""


@dataclass
class Graph:
    """A list of values and ops in topological order, with graph inputs and outputs."""

    values: list[Value] = field(default_factory=list)
    ops: list[Op] = field(default_factory=list)
    inputs: list[int] = field(default_factory=list)
    outputs: list[int] = field(default_factory=list)

    def add_value(self, type: TensorType, name: str = "") -> int:
        vid = len(self.values)
        self.values.append(Value(id=vid, type=type, name=name, producer=INVALID_ID))
        return vid

    def add_op(
        self,
        kind: OpKind,
        inputs: Sequence[int],
        out_count: int,
        name: str = "",
    ) -> int:
        """Append an op, register its uses and create its (untyped) outputs."""
        oid = len(self.ops)
        inputs = list(inputs)
        if any(not 0 <= vid < len(self.values) for vid in inputs):
            raise LunaraError("add_op: input ValueId out of range")
        for vid in inputs:
            self.values[vid].users.append(oid)

        outputs = []
        for _ in range(out_count):
            out = self.add_value(TensorType(DType.unknown))
            self.values[out].producer = oid
            outputs.append(out)

        self.ops.append(Op(id=oid, kind=kind, inputs=inputs, outputs=outputs, name=name))
        return oid

    def value(self, vid: int) -> Value:
        if not 0 <= vid < len(self.values):
            raise IndexError(f"value id {vid} out of range")
        return self.values[vid]

    def op(self, oid: int) -> Op:
        if not 0 <= oid < len(self.ops):
            raise IndexError(f"op id {oid} out of range")
        return self.ops[oid]

    def set_graph_outputs(self, outs: Iterable[int]) -> None:
        self.outputs = list(outs)


@dataclass
class Module:
    """Top-level container holding one graph."""

    graph: Graph = field(default_factory=Graph)