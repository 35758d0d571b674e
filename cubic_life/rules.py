"""
Stochastic Transition Rule
==========================

Pure functions mapping (state, neighbour count, bias, time since insertion,
random draws) to the next cell state. Everything is elementwise, so the
same code resolves a single cell or every due cell of a tick.

Draw layout (trailing axis of length 3, independent U[0, 1) samples):
    draws[..., 0]  transition draw  (hold-alive inside the transition band)
    draws[..., 1]  base-rule draw   (survival / birth)
    draws[..., 2]  attrition draw   (background death of settled cells)

Each decision reads only its own column, so no draw is reused across
branches and a fixed draw block replays to the same result.

Rule (next state alive iff draw > threshold):
    alive, n == 4       → SURVIVE_STABLE  - survival_bias
    alive, n in {3, 5}  → SURVIVE_MARGIN  - survival_bias
    alive, otherwise    → SURVIVE_HOSTILE - survival_bias
    dead,  n == 4       → BIRTH_PRIMARY   - birth_bias
    dead,  n == 3       → BIRTH_SECONDARY - birth_bias / 2
    dead,  otherwise    → never born
"""

import numpy as np
from typing import Optional, Tuple

from .config import InsertionWindows, RuleWeights
from .scheduler import transition_progress

N_DRAWS = 3


def bias_terms(bias: float, weights: Optional[RuleWeights] = None) -> Tuple[float, float]:
    """
    Derive (survival_bias, birth_bias) from the bias scalar.

    bias_multiplier = (bias - 0.5) * 2 maps [0, 1] onto [-1, 1];
    both terms are clip(bias_multiplier * BIAS_GAIN, 0, BIAS_CAP).

    Below the neutral point the terms clamp at 0: a low bias never
    makes the rule harsher than its base thresholds.
    """
    w = weights or RuleWeights()
    bias_multiplier = (bias - 0.5) * 2.0
    survival_bias = float(np.clip(bias_multiplier * w.BIAS_GAIN, 0.0, w.BIAS_CAP))
    birth_bias = float(np.clip(bias_multiplier * w.BIAS_GAIN, 0.0, w.BIAS_CAP))
    return survival_bias, birth_bias


def rule_thresholds(
    state,
    neighbors,
    survival_bias: float,
    birth_bias: float,
    weights: Optional[RuleWeights] = None
) -> np.ndarray:
    """
    Threshold the base-rule draw must exceed for the cell to be alive next.

    Dead cells with a count other than 3 or 4 get +inf (no birth).
    """
    w = weights or RuleWeights()
    state = np.asarray(state, dtype=bool)
    n = np.asarray(neighbors)

    survive = np.select(
        [n == 4, (n == 3) | (n == 5)],
        [w.SURVIVE_STABLE, w.SURVIVE_MARGIN],
        default=w.SURVIVE_HOSTILE
    ) - survival_bias
    birth = np.select(
        [n == 4, n == 3],
        [w.BIRTH_PRIMARY - birth_bias, w.BIRTH_SECONDARY - birth_bias / 2.0],
        default=np.inf
    )
    return np.where(state, survive, birth)


def base_rule(
    state,
    neighbors,
    survival_bias: float,
    birth_bias: float,
    draw,
    weights: Optional[RuleWeights] = None
) -> np.ndarray:
    """Apply the base stochastic rule with one draw per cell."""
    return np.asarray(draw, dtype=float) > rule_thresholds(
        state, neighbors, survival_bias, birth_bias, weights
    )


def resolve_next_state(
    state,
    neighbors,
    bias: float,
    elapsed,
    draws,
    windows: Optional[InsertionWindows] = None,
    weights: Optional[RuleWeights] = None
) -> np.ndarray:
    """
    Resolve the next state of one or many cells.

    Args:
        state: Current state(s), bool or {0, 1}
        neighbors: Moore count(s) from the CURRENT buffer, in [0, 26]
        bias: Bias scalar snapshotted for this tick
        elapsed: Time since last insertion (ms); +inf if never inserted
        draws: Array with trailing axis N_DRAWS of U[0, 1) samples
        windows: Protection / memory windows
        weights: Rule constants

    Returns:
        Boolean array of next states (0-d for scalar inputs)

    Order of resolution:
        1. protected                → alive
        2. transition, hold draw    → alive
        3. otherwise                → base rule
        4. settled & alive          → attrition coin flip
    """
    windows = windows or InsertionWindows()
    w = weights or RuleWeights()

    draws = np.asarray(draws, dtype=float)
    if draws.shape[-1] != N_DRAWS:
        raise ValueError(f"draws must have a trailing axis of {N_DRAWS}, got {draws.shape}")
    elapsed = np.asarray(elapsed, dtype=float)
    survival_bias, birth_bias = bias_terms(bias, w)

    protected = elapsed < windows.PROTECTED_WINDOW
    settled = elapsed >= windows.MEMORY_WINDOW
    in_transition = ~protected & ~settled

    progress = transition_progress(elapsed, windows)
    hold = in_transition & (draws[..., 0] > progress * w.TRANSITION_SLOPE)

    base = base_rule(state, neighbors, survival_bias, birth_bias, draws[..., 1], w)
    nxt = protected | hold | base

    # Background attrition, kill probability max(0, 0.05 - survival_bias)
    attrition = nxt & settled & (draws[..., 2] > w.ATTRITION_THRESHOLD + survival_bias)
    return nxt & ~attrition


def resolve_cell(
    state: int,
    neighbors: int,
    bias: float,
    elapsed: float,
    draws,
    windows: Optional[InsertionWindows] = None,
    weights: Optional[RuleWeights] = None
) -> int:
    """Scalar convenience wrapper: returns 0 or 1."""
    return int(bool(resolve_next_state(state, neighbors, bias, elapsed, draws, windows, weights)))
