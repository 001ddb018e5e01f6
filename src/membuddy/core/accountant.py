"""Memory accountant: the only size oracle the meter is allowed to consult.

An accountant exposes a single process-wide "live bytes" counter and a way
to force a full collection. Nothing else about the heap is visible to the
rest of membuddy.

// [LAW:locality-or-seam] tracemalloc and gc are touched only in this module.
"""

from __future__ import annotations

import gc
import logging
import tracemalloc
from typing import Protocol

from membuddy.errors import AccountantError

logger = logging.getLogger(__name__)


class MemoryAccountant(Protocol):
    """Capability consumed by AllocationMeter.

    Implementations must be cheap to call repeatedly and must not allocate
    between the moment they read the counter and the moment they return it.
    """

    def snapshot(self) -> int:
        """Return the current number of live heap bytes."""
        ...

    def collect(self) -> None:
        """Run one full collection pass."""
        ...


class TracemallocAccountant:
    """Accountant backed by tracemalloc's traced-memory counter.

    Tracing is started lazily on first use when it is not already running and
    stopped again by close() only if this accountant started it.
    """

    def __init__(self, nframes: int = 1):
        self._nframes = nframes
        self._started_here = False

    def _ensure_tracing(self) -> None:
        if tracemalloc.is_tracing():
            return
        try:
            tracemalloc.start(self._nframes)
        except (RuntimeError, ValueError) as exc:
            raise AccountantError(f"cannot start tracemalloc: {exc}") from exc
        self._started_here = True
        logger.debug("tracemalloc started nframes=%d", self._nframes)

    def snapshot(self) -> int:
        self._ensure_tracing()
        if not tracemalloc.is_tracing():
            raise AccountantError("tracemalloc stopped while measuring")
        return tracemalloc.get_traced_memory()[0]

    def collect(self) -> None:
        gc.collect()

    @property
    def started_here(self) -> bool:
        return self._started_here

    def close(self) -> None:
        if self._started_here and tracemalloc.is_tracing():
            tracemalloc.stop()
            logger.debug("tracemalloc stopped")
        self._started_here = False

    def __enter__(self) -> TracemallocAccountant:
        self._ensure_tracing()
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
