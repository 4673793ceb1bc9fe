"""Host tensors backed by numpy arrays."""

from __future__ import annotations

import enum
import math
from dataclasses import dataclass, field
from typing import Iterable

import numpy as np

from lunara.errors import LunaraError

_NO_CUDA = "Built without CUDA support"


class Device(enum.Enum):
    """Where a tensor's storage lives."""

    Host = "host"
    Cuda = "cuda"


class TensorDType(enum.Enum):
    """Element type of a runtime tensor."""

    f32 = "f32"


_NUMPY_DTYPES = {TensorDType.f32: np.float32}


def dtype_size(dtype: TensorDType) -> int:
    """Size in bytes of one element of ``dtype``."""
    return np.dtype(_NUMPY_DTYPES[dtype]).itemsize


def numel(shape: Iterable[int]) -> int:
    """Number of elements in a tensor of ``shape`` (1 for a scalar shape)."""
    return math.prod(int(d) for d in shape)


@dataclass
class Tensor:
    """A contiguous tensor with a shape, an element type and a device."""

    shape: tuple[int, ...] = ()
    data: np.ndarray = field(default_factory=lambda: np.zeros((), dtype=np.float32))
    dtype: TensorDType = TensorDType.f32
    device: Device = Device.Host

    def __post_init__(self) -> None:
        self.shape = tuple(int(d) for d in self.shape)

    @property
    def bytes(self) -> int:
        return numel(self.shape) * dtype_size(self.dtype)

    @classmethod
    def empty_host(cls, shape: Iterable[int], dtype: TensorDType = TensorDType.f32) -> Tensor:
        """Allocate a zero-filled host tensor."""
        dims = tuple(int(d) for d in shape)
        if any(d < 0 for d in dims):
            raise LunaraError("tensor: negative dimension")
        data = np.zeros(dims, dtype=_NUMPY_DTYPES[dtype])
        return cls(shape=dims, data=data, dtype=dtype, device=Device.Host)

    @classmethod
    def empty_cuda(cls, shape: Iterable[int], dtype: TensorDType = TensorDType.f32) -> Tensor:
        """Allocate a device tensor; unavailable in this build."""
        raise LunaraError(_NO_CUDA)

    def to_cuda(self) -> None:
        """Move storage to the device; unavailable in this build."""
        raise LunaraError(_NO_CUDA)

    def to_host(self) -> None:
        """Move storage back to the host; unavailable in this build."""
        raise LunaraError(_NO_CUDA)