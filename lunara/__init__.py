"""Tensor-graph IR with verification, passes, fusion planning, JSON import and a CPU interpreter."""

__version__ = "0.1.0"