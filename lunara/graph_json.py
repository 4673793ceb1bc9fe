"""Import of graphs described in a small JSON dialect.

The document has three top-level keys: ``inputs`` (objects with ``name``,
``dtype`` and ``shape``), ``ops`` (objects with ``kind``, ``inputs`` and
``name``) and ``outputs`` (a list of references). A reference is either an
input name or ``"<op name>:0"`` for the single output of an op.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Iterator, TypeVar

from lunara.errors import LunaraError
from lunara.ir import DType, Module, OpKind, Shape, TensorType
from lunara.verifier import verify_module

_WHITESPACE = " \t\n\v\f\r"
_DIGITS = "0123456789"

_DTYPES = {
    "f16": DType.f16,
    "f32": DType.f32,
    "i32": DType.i32,
    "i64": DType.i64,
}

_OP_KINDS = {
    "Add": OpKind.Add,
    "Mul": OpKind.Mul,
    "Relu": OpKind.Relu,
    "MatMul": OpKind.MatMul,
}

T = TypeVar("T")


@dataclass
class JsonInput:
    """A graph input as written in the document."""

    name: str = ""
    dtype: str = ""
    shape: list[int] = field(default_factory=list)


@dataclass
class JsonOp:
    """An op as written in the document; ``inputs`` holds references."""

    kind: str = ""
    inputs: list[str] = field(default_factory=list)
    name: str = ""


@dataclass
class JsonGraph:
    """The parsed document before it is turned into IR."""

    inputs: list[JsonInput] = field(default_factory=list)
    ops: list[JsonOp] = field(default_factory=list)
    outputs: list[str] = field(default_factory=list)


class _Reader:
    """Cursor over the document text with the few token readers the format needs."""

    def __init__(self, text: str) -> None:
        self.text = text
        self.pos = 0

    def skip_ws(self) -> None:
        while self.pos < len(self.text) and self.text[self.pos] in _WHITESPACE:
            self.pos += 1

    def consume(self, char: str) -> bool:
        self.skip_ws()
        if self.text.startswith(char, self.pos):
            self.pos += 1
            return True
        return False

    def expect(self, char: str) -> None:
        if not self.consume(char):
            raise LunaraError("json: expected character")

    def string(self) -> str:
        self.skip_ws()
        if not self.text.startswith('"', self.pos):
            raise LunaraError("json: expected string")
        start = self.pos + 1
        end = self.text.find('"', start)
        if end < 0:
            self.pos = len(self.text)
            raise LunaraError("json: unterminated string")
        self.pos = end + 1
        return self.text[start:end]

    def integer(self) -> int:
        self.skip_ws()
        negative = self.text.startswith("-", self.pos)
        if negative:
            self.pos += 1
        start = self.pos
        while self.pos < len(self.text) and self.text[self.pos] in _DIGITS:
            self.pos += 1
        if self.pos == start:
            raise LunaraError("json: expected int")
        value = int(self.text[start:self.pos])
        return -value if negative else value

    def array(self, item: Callable[[], T]) -> list[T]:
        if not self.consume("["):
            raise LunaraError("json: expected [")
        out: list[T] = []
        if self.consume("]"):
            return out
        while True:
            out.append(item())
            if self.consume("]"):
                return out
            if not self.consume(","):
                raise LunaraError("json: expected ,")

    def key(self) -> str:
        name = self.string()
        self.expect(":")
        return name

    def fields(self) -> Iterator[str]:
        """Yield each key of an already opened object; the caller reads its value."""
        while not self.consume("}"):
            yield self.key()
            self.consume(",")

    def object_list(self, item: Callable[[], T]) -> list[T]:
        self.expect("[")
        out: list[T] = []
        if self.consume("]"):
            return out
        while True:
            self.expect("{")
            out.append(item())
            if self.consume("]"):
                return out
            self.expect(",")


def _read_input(reader: _Reader) -> JsonInput:
    result = JsonInput()
    for key in reader.fields():
        if key == "name":
            result.name = reader.string()
        elif key == "dtype":
            result.dtype = reader.string()
        elif key == "shape":
            result.shape = reader.array(reader.integer)
        else:
            raise LunaraError("json: unknown input field")
    return result


def _read_op(reader: _Reader) -> JsonOp:
    result = JsonOp()
    for key in reader.fields():
        if key == "kind":
            result.kind = reader.string()
        elif key == "inputs":
            result.inputs = reader.array(reader.string)
        elif key == "name":
            result.name = reader.string()
        else:
            raise LunaraError("json: unknown op field")
    return result


def parse_graph(text: str) -> JsonGraph:
    """Parse the document text; raise :class:`LunaraError` if it is malformed."""
    reader = _Reader(text)
    if not reader.consume("{"):
        raise LunaraError("json: expected {")

    graph = JsonGraph()
    for key in reader.fields():
        if key == "inputs":
            graph.inputs = reader.object_list(lambda: _read_input(reader))
        elif key == "ops":
            graph.ops = reader.object_list(lambda: _read_op(reader))
        elif key == "outputs":
            graph.outputs = reader.array(reader.string)
        else:
            raise LunaraError("json: unknown top-level key")
    return graph


def _resolve(ref: str, symbols: dict[str, int]) -> int:
    try:
        return symbols[ref]
    except KeyError:
        raise LunaraError("json: unresolved value ref") from None


def build_module(graph: JsonGraph) -> Module:
    """Turn a parsed document into a verified IR module."""
    module = Module()
    g = module.graph
    symbols: dict[str, int] = {}

    for entry in graph.inputs:
        tensor_type = TensorType(_DTYPES.get(entry.dtype, DType.unknown), Shape(tuple(entry.shape)))
        vid = g.add_value(tensor_type, entry.name)
        g.inputs.append(vid)
        symbols[entry.name] = vid

    for entry in graph.ops:
        inputs = [_resolve(ref, symbols) for ref in entry.inputs]
        kind = _OP_KINDS.get(entry.kind)
        if kind is None:
            raise LunaraError("json: unknown op kind")
        oid = g.add_op(kind, inputs, 1, entry.name)
        symbols[f"{entry.name}:0"] = g.op(oid).outputs[0]

    g.set_graph_outputs(_resolve(ref, symbols) for ref in graph.outputs)
    verify_module(module)
    return module


def import_graph_json(path: str) -> Module:
    """Read, parse and build the graph stored at ``path``."""
    try:
        with open(path, encoding="utf-8") as handle:
            text = handle.read()
    except OSError as exc:
        raise LunaraError(f"json: cannot read {path}") from exc
    return build_module(parse_graph(text))