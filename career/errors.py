"""
Career simulation errors.

Placement failures during distribution are not errors: they are logged and
the person is left out of the turn.
"""


class CareerError(Exception):
    """Base class for career simulation errors."""
    pass


class InvalidLaneError(CareerError, ValueError):
    """Training lane index outside 0-4."""
    pass


class RosterError(CareerError):
    """Unknown trainee/card id or malformed roster data."""
    pass


class TrainerError(CareerError):
    """Trainer returned an index outside the offered options."""
    pass


class GameOverError(CareerError):
    """Raised when stepping a career that has already finished."""
    pass
