"""
Configuration & Rule Constants for the Cubic Life Automaton
============================================================

This module defines all timing, window, bias, rule and interaction
parameters for the real-time stochastic 3D cellular automaton.

Model Interpretation:
- Scheduling: every cell runs on its own jittered real-time clock
- Insertion: externally inserted cells get protection, then a fade-out
- Bias: one scalar skewing survival & birth toward permissive outcomes
- Rules: stochastic outer-totalistic thresholds on the 26-cell Moore count

All times are milliseconds on the caller's clock.
"""

from dataclasses import dataclass
from typing import Tuple

# ============================================================================
# Per-cell Scheduling
# ============================================================================

@dataclass
class SchedulerTiming:
    """
    Per-cell deferred update timing.

    Interpretation:
    - A cell is evaluated only once its own timer has expired
    - Each evaluation re-arms the timer with BASE_INTERVAL + jitter
    - Neighbouring cells therefore update at pseudo-independent rates
    """

    BASE_INTERVAL: float = 100.0
    """Minimum delay between two evaluations of the same cell (ms)

    Also the cadence used by the frame-loop gate in Engine.step
    """

    MAX_OFFSET: float = 50.0
    """Upper bound of the uniform jitter added to every timer (ms)

    Initial timers are now + U(0, MAX_OFFSET) so the population
    does not evaluate in lockstep
    """


# ============================================================================
# Insertion Protection
# ============================================================================

@dataclass
class InsertionWindows:
    """
    Windows measured from the last external insertion of a cell.

    Interpretation:
    - elapsed < PROTECTED_WINDOW: forced alive (full immunity)
    - PROTECTED_WINDOW <= elapsed < MEMORY_WINDOW: linear transition
    - elapsed >= MEMORY_WINDOW: normal rules, plus background attrition
    """

    PROTECTED_WINDOW: float = 500.0
    """Full immunity after insertion (ms)"""

    MEMORY_WINDOW: float = 1000.0
    """End of the transition band (ms)

    Must be strictly greater than PROTECTED_WINDOW
    """


# ============================================================================
# Bias Control
# ============================================================================

@dataclass
class BiasSettings:
    """
    Bias scalar and its discrete cycle.

    Interpretation:
    - bias = 0.5 is neutral; above it survival & birth become easier
    - Below 0.5 the derived biases clamp to zero (no extra harshness)
    - cycle_bias() walks the range [BIAS_MIN, BIAS_MAX] in BIAS_STEP steps
    """

    INITIAL_BIAS: float = 0.59
    """Bias at construction, must lie in [0, 1]"""

    BIAS_MIN: float = 0.25
    """Lower end of the cyclic range"""

    BIAS_MAX: float = 1.25
    """Upper end of the cyclic range

    Values above 1 are allowed while cycling; the derived biases
    saturate through RuleWeights.BIAS_CAP
    """

    BIAS_STEP: float = 0.25
    """Increment applied by one cycle step"""

    WRAP: str = "reset"
    """How the cycle wraps past BIAS_MAX

    - "reset":  b + step, back to BIAS_MIN once it exceeds BIAS_MAX
    - "modulo": ((b + step - BIAS_MIN) % (BIAS_MAX - BIAS_MIN)) + BIAS_MIN
    """


# ============================================================================
# Stochastic Rule Constants
# ============================================================================

@dataclass
class RuleWeights:
    """
    Thresholds of the stochastic transition rule.

    A cell's next state is alive when its uniform draw exceeds the
    threshold selected by (state, neighbour count):

        alive, n == 4       → SURVIVE_STABLE  - survival_bias
        alive, n in {3, 5}  → SURVIVE_MARGIN  - survival_bias
        alive, otherwise    → SURVIVE_HOSTILE - survival_bias
        dead,  n == 4       → BIRTH_PRIMARY   - birth_bias
        dead,  n == 3       → BIRTH_SECONDARY - birth_bias / 2
        dead,  otherwise    → never

    with survival_bias = birth_bias = clip((bias - 0.5) * 2 * BIAS_GAIN, 0, BIAS_CAP).
    """

    SURVIVE_STABLE: float = 0.1
    """Death probability (before bias) with exactly 4 neighbours"""

    SURVIVE_MARGIN: float = 0.4
    """Death probability (before bias) with 3 or 5 neighbours"""

    SURVIVE_HOSTILE: float = 0.99
    """Death probability (before bias) for over/under-population"""

    BIRTH_PRIMARY: float = 0.7
    """Non-birth probability (before bias) with exactly 4 neighbours"""

    BIRTH_SECONDARY: float = 0.95
    """Non-birth probability (before half bias) with exactly 3 neighbours"""

    BIAS_GAIN: float = 0.4
    """Scale from bias multiplier to survival/birth bias"""

    BIAS_CAP: float = 0.9
    """Upper clamp for the derived survival/birth bias"""

    TRANSITION_SLOPE: float = 0.8
    """Hold-alive draw must exceed progress * TRANSITION_SLOPE"""

    ATTRITION_THRESHOLD: float = 0.95
    """Settled live cells die when their attrition draw exceeds
    ATTRITION_THRESHOLD + survival_bias
    """


# ============================================================================
# Spatial Interaction
# ============================================================================

@dataclass
class InteractionGeometry:
    """
    World-space placement of the lattice for proximity insertion.

    Cell i sits at world coordinate (i - N/2) * CELL_SPACING on each axis;
    insert_near() inserts every cell strictly closer than
    INTERACTION_RADIUS to the tracked point.
    """

    CELL_SPACING: float = 0.011
    """Distance between neighbouring cell centres (world units)"""

    INTERACTION_RADIUS: float = 0.025
    """Radius around a tracked point inside which dead cells are inserted"""


# ============================================================================
# Preset Configurations
# ============================================================================

@dataclass
class EngineConfig:
    """
    Complete engine configuration combining all parameter groups.
    """

    # Lattice edge length
    size: int = 30

    # Parameter groups
    timing: SchedulerTiming = None
    windows: InsertionWindows = None
    bias: BiasSettings = None
    rules: RuleWeights = None
    interaction: InteractionGeometry = None

    # Random seed
    seed: int = 913

    def __post_init__(self):
        """Initialize parameter groups with defaults if not provided."""
        if self.timing is None:
            self.timing = SchedulerTiming()
        if self.windows is None:
            self.windows = InsertionWindows()
        if self.bias is None:
            self.bias = BiasSettings()
        if self.rules is None:
            self.rules = RuleWeights()
        if self.interaction is None:
            self.interaction = InteractionGeometry()


def config_default() -> EngineConfig:
    """
    Default configuration (500 ms protection, 1000 ms memory).

    Bias cycles 0.25 → 1.25 and resets to the bottom of the range.
    """
    return EngineConfig(
        size=30,
        windows=InsertionWindows(PROTECTED_WINDOW=500.0, MEMORY_WINDOW=1000.0),
        bias=BiasSettings(INITIAL_BIAS=0.59, WRAP="reset"),
        seed=913
    )


def config_brisk() -> EngineConfig:
    """
    Brisk configuration (500 ms protection, 700 ms memory).

    Shorter fade-out, tighter interaction radius and a modulo bias cycle.
    Inserted structures dissolve faster into the background rule.
    """
    return EngineConfig(
        size=30,
        windows=InsertionWindows(PROTECTED_WINDOW=500.0, MEMORY_WINDOW=700.0),
        bias=BiasSettings(INITIAL_BIAS=0.59, WRAP="modulo"),
        interaction=InteractionGeometry(INTERACTION_RADIUS=0.02),
        seed=913
    )


PRESETS = {
    "default": config_default,
    "brisk": config_brisk,
}


# ============================================================================
# Parameter Validation
# ============================================================================

def validate_config(config: EngineConfig) -> Tuple[bool, str]:
    """
    Check configuration for consistency.

    Returns:
        (is_valid, error_message)
    """
    errors = []

    # Lattice must be non-empty
    if not isinstance(config.size, int) or isinstance(config.size, bool) or config.size <= 0:
        errors.append("size must be a positive integer")

    # Scheduler timing (negated comparisons also reject nan)
    if not (config.timing.BASE_INTERVAL >= 0):
        errors.append("BASE_INTERVAL must be non-negative")
    if not (config.timing.MAX_OFFSET >= 0):
        errors.append("MAX_OFFSET must be non-negative")

    # Insertion windows
    if not (config.windows.PROTECTED_WINDOW >= 0):
        errors.append("PROTECTED_WINDOW must be non-negative")
    if not (config.windows.MEMORY_WINDOW > config.windows.PROTECTED_WINDOW):
        errors.append("MEMORY_WINDOW must be > PROTECTED_WINDOW")

    # Bias
    if not (0.0 <= config.bias.INITIAL_BIAS <= 1.0):
        errors.append("INITIAL_BIAS must be in [0, 1]")
    if not (config.bias.BIAS_MIN < config.bias.BIAS_MAX):
        errors.append("BIAS_MIN must be < BIAS_MAX")
    if not (config.bias.BIAS_STEP > 0):
        errors.append("BIAS_STEP must be positive")
    if config.bias.WRAP not in ("reset", "modulo"):
        errors.append("WRAP must be 'reset' or 'modulo'")

    # Interaction geometry
    if not (config.interaction.CELL_SPACING > 0):
        errors.append("CELL_SPACING must be positive")
    if not (config.interaction.INTERACTION_RADIUS > 0):
        errors.append("INTERACTION_RADIUS must be positive")

    if errors:
        return False, "; ".join(errors)
    return True, "OK"
