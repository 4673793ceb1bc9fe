"""Wall-clock timer based on a monotonic clock."""

from __future__ import annotations

import time


class HostTimer:
    """Measures the time between :meth:`start` and :meth:`stop`."""

    def __init__(self) -> None:
        self._t0 = 0
        self._t1 = 0

    def start(self) -> None:
        self._t0 = time.perf_counter_ns()

    def stop(self) -> None:
        self._t1 = time.perf_counter_ns()

    def ms(self) -> float:
        """Elapsed milliseconds between the last start and stop."""
        return (self._t1 - self._t0) / 1e6