import numpy as np
import pytest

from lunara import cpu_ref
from lunara.errors import LunaraError
from lunara.tensor import Device, Tensor, TensorDType


def _host(shape):
    return Tensor.empty_host(shape, TensorDType.f32)


def test_add_then_relu_in_place():
    a, b, o = _host([16]), _host([16]), _host([16])
    a.data[:] = np.arange(16, dtype=np.float32) - 8.0
    b.data[:] = 2.0
    cpu_ref.add(a, b, o)
    assert o.data[0] == -8.0 + 2.0
    assert o.data[15] == 7.0 + 2.0
    cpu_ref.relu(o, o)
    assert o.data[0] == 0.0
    assert o.data[15] == 9.0


def test_mul_elementwise():
    a, b, o = _host([4]), _host([4]), _host([4])
    a.data[:] = [1, 2, 3, 4]
    b.data[:] = [10, 20, 30, 40]
    cpu_ref.mul(a, b, o)
    assert list(o.data) == [10.0, 40.0, 90.0, 160.0]


def test_relu_nan_becomes_zero():
    a, o = _host([3]), _host([3])
    a.data[:] = [np.nan, -1.0, 2.0]
    cpu_ref.relu(a, o)
    assert list(o.data) == [0.0, 0.0, 2.0]


def test_matmul_identity():
    a, eye, o = _host([2, 2]), _host([2, 2]), _host([2, 2])
    a.data[...] = [[1, 2], [3, 4]]
    eye.data[...] = np.eye(2)
    cpu_ref.matmul(a, eye, o)
    assert o.data.tolist() == [[1.0, 2.0], [3.0, 4.0]]


def test_shape_mismatch():
    with pytest.raises(LunaraError, match="same shapes"):
        cpu_ref.add(_host([4]), _host([5]), _host([4]))


def test_device_check():
    a = _host([4])
    a.device = Device.Cuda
    with pytest.raises(LunaraError, match="Host tensors"):
        cpu_ref.relu(a, _host([4]))


def test_matmul_errors():
    with pytest.raises(LunaraError, match="rank-2"):
        cpu_ref.matmul(_host([4]), _host([4, 1]), _host([4, 1]))
    with pytest.raises(LunaraError, match="mismatch K"):
        cpu_ref.matmul(_host([2, 3]), _host([4, 2]), _host([2, 2]))
    with pytest.raises(LunaraError, match="output shape mismatch"):
        cpu_ref.matmul(_host([2, 3]), _host([3, 2]), _host([3, 2]))