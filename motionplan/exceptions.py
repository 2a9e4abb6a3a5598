"""Exceptions raised by the motion planner."""


class MotionPlanError(Exception):
    """Base class for planner errors."""


class InvalidConfiguration(MotionPlanError, ValueError):
    """Raised when planner limits are rejected by configure()."""

    def __init__(self, errors):
        if isinstance(errors, str):
            errors = [errors]
        self.errors = list(errors)
        super().__init__("; ".join(self.errors))


class MoveStateError(MotionPlanError):
    """Raised when a move is used in the wrong planning state."""
