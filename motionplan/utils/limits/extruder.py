"""Extruder speed limiter for extrude-only moves."""
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from motionplan.config import ExtruderLimits
    from motionplan.models import Move


@dataclass
class ExtruderLimiter:
    """Limits filament speed and acceleration of extrude-only moves.

    Moves that also travel are bound by the toolhead limits and the
    extrusion-rate junction limit instead.

    Attributes:
        limits: ExtruderLimits with max_extrude_only_velocity and
            max_extrude_only_accel
    """
    limits: 'ExtruderLimits'

    def apply(self, move: 'Move') -> None:
        if move.is_kinematic:
            return
        extrude_r = abs(move.extrusion_rate)
        if not extrude_r:
            return
        inv_extrude_r = 1. / extrude_r
        move.limit_speed(self.limits.max_extrude_only_velocity * inv_extrude_r,
                         self.limits.max_extrude_only_accel * inv_extrude_r)

    def is_enabled(self) -> bool:
        return self.limits.is_active
