"""
Bias scalar and its discrete cycle.

The bias only changes on an explicit call; the engine reads it once at
the start of every tick, so a change never touches a tick already run.
"""

import logging

from .config import BiasSettings

logger = logging.getLogger(__name__)


class BiasController:
    """Holds the bias and walks it through [BIAS_MIN, BIAS_MAX]."""

    def __init__(self, settings: BiasSettings):
        self.settings = settings
        self.value = float(settings.INITIAL_BIAS)

    def set(self, value: float) -> float:
        self.value = float(value)
        logger.info("new bias %.2f", self.value)
        return self.value

    def cycle(self) -> float:
        """Advance one BIAS_STEP, wrapping per settings.WRAP."""
        s = self.settings
        if s.WRAP == "modulo":
            span = s.BIAS_MAX - s.BIAS_MIN
            nxt = (self.value + s.BIAS_STEP - s.BIAS_MIN) % span + s.BIAS_MIN
        else:
            nxt = self.value + s.BIAS_STEP
            if nxt > s.BIAS_MAX + 1e-9 or nxt < s.BIAS_MIN:
                nxt = s.BIAS_MIN
        # Keep repeated steps from accumulating float drift
        return self.set(round(nxt, 6))
