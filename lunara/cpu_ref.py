"""Reference CPU implementations of the supported ops (f32, host only)."""

from __future__ import annotations

import numpy as np

from lunara.errors import LunaraError
from lunara.tensor import Device, Tensor, TensorDType


def _check_common(tensors: tuple[Tensor, ...], prefix: str = "cpu_ref") -> None:
    if any(t.device is not Device.Host for t in tensors):
        raise LunaraError(f"{prefix} requires Host tensors")
    if any(t.dtype is not TensorDType.f32 for t in tensors):
        raise LunaraError(f"{prefix} requires f32")


def _check_same(*tensors: Tensor) -> None:
    _check_common(tensors)
    first = tensors[0].shape
    if any(t.shape != first for t in tensors[1:]):
        raise LunaraError("cpu_ref requires same shapes")


def add(a: Tensor, b: Tensor, out: Tensor) -> None:
    """Elementwise ``out = a + b``."""
    _check_same(a, b, out)
    out.data[...] = a.data + b.data


def mul(a: Tensor, b: Tensor, out: Tensor) -> None:
    """Elementwise ``out = a * b``."""
    _check_same(a, b, out)
    out.data[...] = a.data * b.data


def relu(a: Tensor, out: Tensor) -> None:
    """Elementwise ``out = max(a, 0)``; NaN maps to zero."""
    _check_same(a, out)
    out.data[...] = np.where(a.data > 0, a.data, np.float32(0.0))


def matmul(a: Tensor, b: Tensor, out: Tensor) -> None:
    """Rank-2 matrix product ``out = a @ b``."""
    _check_common((a, b, out), "cpu_ref matmul")
    if len(a.shape) != 2 or len(b.shape) != 2 or len(out.shape) != 2:
        raise LunaraError("cpu_ref matmul requires rank-2 tensors")
    m, k = a.shape
    k2, n = b.shape
    if k != k2:
        raise LunaraError("cpu_ref matmul shape mismatch K")
    if out.shape != (m, n):
        raise LunaraError("cpu_ref matmul output shape mismatch")
    lhs = np.asarray(a.data, dtype=np.float32).reshape(m, k)
    rhs = np.asarray(b.data, dtype=np.float32).reshape(k, n)
    out.data[...] = np.matmul(lhs, rhs).reshape(out.data.shape)