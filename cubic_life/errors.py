"""
Error taxonomy for the cubic_life engine.

Both errors are programmer/configuration errors: they are raised
immediately and never retried. The simulation loop itself has no
recoverable runtime errors.
"""


class OutOfBounds(IndexError):
    """Coordinate outside [0, N)^3, or not an integer triple."""


class InvalidConfig(ValueError):
    """Engine configuration rejected by validate_config at construction."""
