"""
Double-buffered cubic lattice.

Two boolean (N, N, N) buffers; an index selects which one is current.
swap() flips that index, so promoting a tick's results never copies data.
"""

import numpy as np
from typing import Sequence, Tuple

from .errors import OutOfBounds

Coordinate = Tuple[int, int, int]


class Lattice:
    """Current/scratch pair of boolean grids indexed grid[x, y, z]."""

    def __init__(self, size: int):
        self.size = size
        self._buffers = (
            np.zeros((size, size, size), dtype=bool),
            np.zeros((size, size, size), dtype=bool),
        )
        self._current = 0

    @property
    def current(self) -> np.ndarray:
        return self._buffers[self._current]

    @property
    def scratch(self) -> np.ndarray:
        return self._buffers[1 - self._current]

    def check(self, coord: Sequence[int]) -> Coordinate:
        """Normalise coord to an int triple or raise OutOfBounds."""
        try:
            x, y, z = (int(c) for c in coord)
        except (TypeError, ValueError):
            raise OutOfBounds(f"not a coordinate triple: {coord!r}")
        if tuple(coord) != (x, y, z):
            raise OutOfBounds(f"coordinate components must be integers: {coord!r}")
        n = self.size
        if not (0 <= x < n and 0 <= y < n and 0 <= z < n):
            raise OutOfBounds(f"{(x, y, z)} outside [0, {n})^3")
        return x, y, z

    def get(self, coord: Sequence[int]) -> bool:
        return bool(self.current[self.check(coord)])

    def set_next(self, coord: Sequence[int], state: bool):
        """Write into scratch only; invisible until swap()."""
        self.scratch[self.check(coord)] = bool(state)

    def set_both(self, coord: Sequence[int], state: bool):
        """Write into both buffers (immediate insertion)."""
        c = self.check(coord)
        self._buffers[0][c] = bool(state)
        self._buffers[1][c] = bool(state)

    def copy_current_to_scratch(self):
        np.copyto(self.scratch, self.current)

    def swap(self):
        self._current = 1 - self._current

