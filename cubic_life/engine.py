"""
cubic_life/engine.py - Real-time stochastic 3D automaton (composition root)

Owns the lattice, the per-cell schedule, the insertion records and the
bias. Time is always supplied by the caller in milliseconds; the engine
never reads a clock on its own.

Tick ordering:
    bias snapshot → scratch := current → due cells → re-arm → count (current)
    → resolve → write scratch → swap
"""

import logging
from dataclasses import replace
import numpy as np
from numpy.random import Generator
from typing import Dict, List, Optional, Sequence, Tuple

from .bias import BiasController
from .config import EngineConfig, validate_config
from .errors import InvalidConfig
from .geometry import cells_within_radius, neighbor_counts
from .lattice import Lattice
from .rng_utils import make_rng
from .rules import N_DRAWS, resolve_next_state
from .scheduler import InsertionTracker, UpdateScheduler

logger = logging.getLogger(__name__)

Coordinate = Tuple[int, int, int]


class Engine:
    """
    Cubic lattice automaton driven by a real-time clock.

    Cells are not updated in synchronous generations: each one is
    re-evaluated only when its own jittered timer expires, which gives
    organic, non-uniform propagation.
    """

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        *,
        size: Optional[int] = None,
        seed: Optional[int] = None,
        rng: Optional[Generator] = None,
        now: float = 0.0
    ):
        if config is None:
            config = EngineConfig()
        if size is not None:
            config = replace(config, size=size)
        if seed is not None:
            config = replace(config, seed=seed)

        ok, msg = validate_config(config)
        if not ok:
            raise InvalidConfig(msg)

        self.config = config
        self.size = config.size
        self.timing = config.timing
        self.windows = config.windows
        self.rules = config.rules
        self.interaction = config.interaction

        # RNG streams; an injected generator serves both
        if rng is not None:
            self.rng_schedule = rng
            self.rng_rule = rng
        else:
            self.rng_schedule = make_rng(config.seed, "schedule")
            self.rng_rule = make_rng(config.seed, "rule")

        self.lattice = Lattice(self.size)
        self.scheduler = UpdateScheduler(self.size, self.timing, self.rng_schedule, now=now)
        self.tracker = InsertionTracker(self.size, self.windows)
        self.bias = BiasController(config.bias)

        self.last_tick: Optional[float] = None
        self.tick_count = 0
        self.dirty = False

    # ------------------------------------------------------------------
    # Tick
    # ------------------------------------------------------------------
    def tick(self, now: float) -> Dict:
        """
        Evaluate every due cell and swap buffers.

        Neighbour counts and states are read from the current buffer only;
        results go to scratch and become visible together at swap().
        """
        bias = self.bias.value
        lat = self.lattice
        current = lat.current

        lat.copy_current_to_scratch()
        due = self.scheduler.due_mask(now)
        n_due = int(np.count_nonzero(due))

        births = deaths = 0
        if n_due:
            self.scheduler.rearm_mask(due, now)

            state = current[due]
            neighbors = neighbor_counts(current)[due]
            elapsed = self.tracker.elapsed_field(now)[due]
            draws = self.rng_rule.random((n_due, N_DRAWS))

            nxt = resolve_next_state(
                state, neighbors, bias, elapsed, draws,
                windows=self.windows, weights=self.rules
            )
            lat.scratch[due] = nxt

            births = int(np.count_nonzero(nxt & ~state))
            deaths = int(np.count_nonzero(~nxt & state))

        lat.swap()

        changed = births + deaths
        self.dirty = self.dirty or changed > 0
        self.last_tick = now
        self.tick_count += 1

        rec = dict(
            t=float(now),
            evaluated=n_due,
            births=births,
            deaths=deaths,
            population=self.population,
            protected=int(np.count_nonzero(self.tracker.protected_mask(now) & lat.current)),
            dirty=changed > 0,
            bias=bias
        )
        logger.debug(
            "tick %d t=%.1f evaluated=%d births=%d deaths=%d population=%d",
            self.tick_count, now, n_due, births, deaths, rec["population"]
        )
        return rec

    def step(self, now: float) -> Optional[Dict]:
        """
        Frame-loop gate: tick only when more than BASE_INTERVAL has
        passed since the previous tick. Returns the tick record or None.
        """
        if self.last_tick is not None and now - self.last_tick <= self.timing.BASE_INTERVAL:
            return None
        return self.tick(now)

    # ------------------------------------------------------------------
    # Insertion
    # ------------------------------------------------------------------
    def insert_cell_at(self, coord: Sequence[int], now: float) -> bool:
        """
        Make a dead cell alive immediately, bypassing the next tick.

        The cell's timer is pushed to now + MEMORY_WINDOW + jitter so the
        base rule does not see it until its protection has run out.
        Returns False (and changes nothing) when the cell is already alive.
        """
        c = self.lattice.check(coord)
        if self.lattice.current[c]:
            return False

        self.lattice.set_both(c, True)
        self.tracker.record(c, now)
        self.scheduler.defer_with_jitter(c, now + self.windows.MEMORY_WINDOW)
        self.dirty = True
        return True

    def insert_near(self, point: Sequence[float], now: float, radius: Optional[float] = None) -> int:
        """Insert every cell within the interaction radius of a world-space point."""
        if radius is None:
            radius = self.interaction.INTERACTION_RADIUS
        cells = cells_within_radius(point, radius, self.size, self.interaction.CELL_SPACING)
        return sum(self.insert_cell_at(c, now) for c in cells)

    # ------------------------------------------------------------------
    # Bias
    # ------------------------------------------------------------------
    def set_bias(self, value: float) -> float:
        """Replace the bias; used from the next tick on."""
        return self.bias.set(value)

    def cycle_bias(self) -> float:
        return self.bias.cycle()

    # ------------------------------------------------------------------
    # Read side
    # ------------------------------------------------------------------
    def live_cells(self) -> List[Coordinate]:
        """Fresh list of every live coordinate, in C order."""
        return [(int(x), int(y), int(z)) for x, y, z in np.argwhere(self.lattice.current)]

    def state_at(self, coord: Sequence[int]) -> int:
        return int(self.lattice.get(coord))

    def snapshot(self) -> np.ndarray:
        return self.lattice.current.copy()

    @property
    def population(self) -> int:
        return int(np.count_nonzero(self.lattice.current))

    def clear_dirty(self):
        self.dirty = False
