"""
Per-cell timing state: deferred update scheduling and insertion records.

UpdateScheduler  - next_eligible[x, y, z]: earliest time a cell may be re-evaluated
InsertionTracker - last_inserted[x, y, z]: time of the last external insertion

Both are dense float64 arrays over the whole lattice, so every coordinate
always has exactly one entry.
"""

import numpy as np
from numpy.random import Generator
from typing import Tuple

from .config import SchedulerTiming, InsertionWindows

Coordinate = Tuple[int, int, int]

# "Never inserted": elapsed time is +inf, normal rules apply
NEVER = -np.inf


class UpdateScheduler:
    """
    Jittered per-cell timers.

    A cell is due when now >= next_eligible. Re-arming sets
    next_eligible = now + BASE_INTERVAL + U(0, MAX_OFFSET).
    """

    def __init__(self, size: int, timing: SchedulerTiming, rng: Generator, now: float = 0.0):
        self.size = size
        self.timing = timing
        self.rng = rng
        # Staggered start: no two cells share a phase
        self.next_eligible = now + self._jitter((size, size, size))

    def _jitter(self, shape) -> np.ndarray:
        return self.rng.uniform(0.0, self.timing.MAX_OFFSET, shape)

    def is_due(self, coord: Coordinate, now: float) -> bool:
        return bool(now >= self.next_eligible[coord])

    def due_mask(self, now: float) -> np.ndarray:
        return now >= self.next_eligible

    def rearm(self, coord: Coordinate, now: float):
        self.next_eligible[coord] = now + self.timing.BASE_INTERVAL + float(self._jitter(None))

    def rearm_mask(self, mask: np.ndarray, now: float):
        """Re-arm every masked cell; jitter is drawn in C order."""
        n = int(np.count_nonzero(mask))
        self.next_eligible[mask] = now + self.timing.BASE_INTERVAL + self._jitter(n)

    def defer_with_jitter(self, coord: Coordinate, until: float):
        self.next_eligible[coord] = until + float(self._jitter(None))


class InsertionTracker:
    """
    Last-insertion timestamps and the windows derived from them.

    elapsed <  PROTECTED_WINDOW                 → protected (forced alive)
    PROTECTED_WINDOW <= elapsed < MEMORY_WINDOW → transition
    elapsed >= MEMORY_WINDOW                    → settled
    """

    def __init__(self, size: int, windows: InsertionWindows):
        self.size = size
        self.windows = windows
        self.last_inserted = np.full((size, size, size), NEVER, dtype=float)

    def record(self, coord: Coordinate, now: float):
        self.last_inserted[coord] = now

    def elapsed(self, coord: Coordinate, now: float) -> float:
        return float(now - self.last_inserted[coord])

    def elapsed_field(self, now: float) -> np.ndarray:
        return now - self.last_inserted

    def protected_mask(self, now: float) -> np.ndarray:
        return self.elapsed_field(now) < self.windows.PROTECTED_WINDOW

    def transition_mask(self, now: float) -> np.ndarray:
        e = self.elapsed_field(now)
        return (e >= self.windows.PROTECTED_WINDOW) & (e < self.windows.MEMORY_WINDOW)


def transition_progress(elapsed, windows: InsertionWindows):
    """
    Position inside the transition band, clipped to [0, 1].

    0 at the end of protection, 1 at the end of memory.
    """
    span = windows.MEMORY_WINDOW - windows.PROTECTED_WINDOW
    return np.clip((np.asarray(elapsed, dtype=float) - windows.PROTECTED_WINDOW) / span, 0.0, 1.0)
