import pytest

from lunara.errors import LunaraError
from lunara.ir import (
    INVALID_ID,
    DType,
    Graph,
    Module,
    OpKind,
    Shape,
    TensorType,
    is_valid,
    rank,
    same_shape,
)


def _build():
    m = Module()
    g = m.graph
    t = TensorType(DType.f32, Shape((4, 4)))
    x = g.add_value(t, "x")
    b = g.add_value(t, "b")
    g.inputs = [x, b]
    add0 = g.add_op(OpKind.Add, [x, b], 1, "add0")
    y = g.op(add0).outputs[0]
    relu0 = g.add_op(OpKind.Relu, [y], 1, "relu0")
    z = g.op(relu0).outputs[0]
    g.set_graph_outputs([z])
    return m, x, b, add0, y, relu0, z


def test_build_ids_and_links():
    m, x, b, add0, y, relu0, z = _build()
    g = m.graph
    assert (x, b, y, z) == (0, 1, 2, 3)
    assert (add0, relu0) == (0, 1)
    assert g.value(x).users == [add0]
    assert g.value(b).users == [add0]
    assert g.value(y).users == [relu0]
    assert g.value(y).producer == add0
    assert g.value(z).producer == relu0
    assert g.value(x).producer == INVALID_ID
    assert g.outputs == [z]


def test_op_outputs_start_untyped():
    m, *_, z = _build()
    assert m.graph.value(z).type.dtype is DType.unknown
    assert m.graph.value(z).type.shape.dims == ()


def test_add_op_rejects_out_of_range_input():
    g = Graph()
    with pytest.raises(LunaraError, match="out of range"):
        g.add_op(OpKind.Relu, [5], 1)
    assert g.ops == []


def test_value_and_op_lookup_out_of_range():
    g = Graph()
    with pytest.raises(IndexError):
        g.value(0)
    with pytest.raises(IndexError):
        g.op(0)


def test_shape_static_and_numel():
    assert Shape((2, 3, 4)).numel_static() == 24
    assert Shape((2, -1)).is_static() is False
    assert Shape((2, -1)).numel_static() == -1
    assert Shape(()).numel_static() == 1
    assert Shape([4, 4]).dims == (4, 4)


def test_is_valid_rank_same_shape():
    assert is_valid(0) is True
    assert is_valid(INVALID_ID) is False
    a = TensorType(DType.f32, Shape((2, 3)))
    b = TensorType(DType.i32, Shape((2, 3)))
    c = TensorType(DType.f32, Shape((3, 2)))
    assert rank(a) == 2
    assert same_shape(a, b) is True
    assert same_shape(a, c) is False


def test_enum_names_through_graph():
    g = Graph()
    v = g.add_value(TensorType(DType.f32, Shape((2, 2))), "a")
    oid = g.add_op(OpKind.MatMul, [v, v], 1, "mm")
    assert str(g.value(v).type.dtype) == "f32"
    assert str(g.op(oid).kind) == "MatMul"
    assert g.op(oid).name == "mm"
    assert int(OpKind.Fusion) == 6