"""Per-axis speed limiter.

Limits the velocity and acceleration of a cartesian axis (typically Z).
"""
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from motionplan.config import AxisLimits
    from motionplan.models import Move


@dataclass
class AxisLimiter:
    """Limits moves that travel along a constrained axis.

    The axis limit is scaled by ``distance / |axis displacement|`` so that
    the axis itself never exceeds its limits while the toolhead follows
    the move direction.

    Attributes:
        limits: AxisLimits with the axis name, max_velocity and max_accel
    """
    limits: 'AxisLimits'

    def apply(self, move: 'Move') -> None:
        """Apply the axis limit to a kinematic move.

        Moves with no displacement along the axis are left unchanged.

        Args:
            move: Move to limit
        """
        if not move.is_kinematic:
            return
        axis_r = abs(move.axes_r[self.limits.index])
        if not axis_r:
            return
        ratio = 1. / axis_r
        move.limit_speed(self.limits.max_velocity * ratio,
                         self.limits.max_accel * ratio)

    def is_enabled(self) -> bool:
        """Enabled when both a velocity and an acceleration limit are set."""
        return self.limits.is_active
