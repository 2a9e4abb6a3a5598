"""Planner configuration.

Limits mirror the printer section of a Klipper-style config: a toolhead
acceleration and velocity ceiling, the square corner velocity used to
derive junction deviation, a minimum cruise ratio (or the legacy
``max_accel_to_decel``), optional per-axis limits and extruder limits.

Defaults can be overridden from the environment (``MOTIONPLAN_*``
variables, optionally loaded from a ``.env`` file).
"""
import math
import os
from dataclasses import dataclass, field, replace
from typing import Dict, List, Optional

from dotenv import load_dotenv

AXIS_INDEX: Dict[str, int] = {'x': 0, 'y': 1, 'z': 2}

DEFAULT_MAX_ACCEL = 3000.0
DEFAULT_MAX_VELOCITY = 300.0
DEFAULT_SQUARE_CORNER_VELOCITY = 5.0
DEFAULT_MINIMUM_CRUISE_RATIO = 0.5
DEFAULT_INSTANT_CORNER_VELOCITY = 1.0
DEFAULT_LOOKAHEAD_FLUSH_TIME = 0.250
DEFAULT_MAX_PENDING_MOVES = 512


def _is_positive(value) -> bool:
    return value is not None and math.isfinite(value) and value > 0


def _is_non_negative(value) -> bool:
    return value is not None and math.isfinite(value) and value >= 0


@dataclass
class AxisLimits:
    """Velocity/acceleration limits of a single cartesian axis.

    Both values must be set for the limit to take effect.
    """
    axis: str
    max_velocity: Optional[float] = None  # mm/s
    max_accel: Optional[float] = None     # mm/s^2

    @property
    def index(self) -> int:
        return AXIS_INDEX[self.axis.lower()]

    @property
    def is_active(self) -> bool:
        return self.max_velocity is not None and self.max_accel is not None


@dataclass
class ExtruderLimits:
    """Limits applied to extrude-only (and retract) moves."""
    max_extrude_only_velocity: Optional[float] = None  # mm/s of filament
    max_extrude_only_accel: Optional[float] = None     # mm/s^2 of filament

    @property
    def is_active(self) -> bool:
        return (self.max_extrude_only_velocity is not None
                and self.max_extrude_only_accel is not None)


@dataclass
class PlannerConfig:
    """Session-wide planner limits."""
    max_accel: float = DEFAULT_MAX_ACCEL
    max_velocity: float = DEFAULT_MAX_VELOCITY
    square_corner_velocity: float = DEFAULT_SQUARE_CORNER_VELOCITY
    minimum_cruise_ratio: Optional[float] = None
    max_accel_to_decel: Optional[float] = None  # legacy alternative to the ratio
    instant_corner_velocity: float = DEFAULT_INSTANT_CORNER_VELOCITY
    axis_limits: List[AxisLimits] = field(default_factory=list)
    extruder: ExtruderLimits = field(default_factory=ExtruderLimits)
    lookahead_flush_time: float = DEFAULT_LOOKAHEAD_FLUSH_TIME
    max_pending_moves: int = DEFAULT_MAX_PENDING_MOVES

    def cruise_ratio(self) -> float:
        """Effective minimum cruise ratio.

        An explicit ``minimum_cruise_ratio`` wins. Otherwise the legacy
        ``max_accel_to_decel`` is converted; a value at or above
        ``max_accel`` yields 0, which disables the constraint.
        """
        if self.minimum_cruise_ratio is not None:
            return self.minimum_cruise_ratio
        if self.max_accel_to_decel is not None:
            return 1.0 - min(1.0, self.max_accel_to_decel / self.max_accel)
        return DEFAULT_MINIMUM_CRUISE_RATIO

    def validate(self) -> List[str]:
        """
        Check the limits for values the planner cannot work with.

        Returns:
            List of error messages (empty if valid)
        """
        errors = []
        if not _is_positive(self.max_accel):
            errors.append(f"max_accel must be a finite positive number, got {self.max_accel}")
        if not _is_positive(self.max_velocity):
            errors.append(
                f"max_velocity must be a finite positive number, got {self.max_velocity}")
        if not _is_non_negative(self.square_corner_velocity):
            errors.append(
                f"square_corner_velocity must be a finite non-negative number, "
                f"got {self.square_corner_velocity}")
        if self.minimum_cruise_ratio is not None:
            if not 0.0 < self.minimum_cruise_ratio <= 1.0:
                errors.append(
                    f"minimum_cruise_ratio must be in (0, 1], got {self.minimum_cruise_ratio}")
        elif self.max_accel_to_decel is not None and not _is_positive(self.max_accel_to_decel):
            errors.append(
                f"max_accel_to_decel must be a finite positive number, "
                f"got {self.max_accel_to_decel}")
        if not _is_non_negative(self.instant_corner_velocity):
            errors.append(
                f"instant_corner_velocity must be a finite non-negative number, "
                f"got {self.instant_corner_velocity}")
        if not _is_positive(self.lookahead_flush_time):
            errors.append(
                f"lookahead_flush_time must be a finite positive number, "
                f"got {self.lookahead_flush_time}")
        if self.max_pending_moves < 1:
            errors.append(
                f"max_pending_moves must be at least 1, got {self.max_pending_moves}")

        seen = set()
        for limits in self.axis_limits:
            name = limits.axis.lower()
            if name not in AXIS_INDEX:
                errors.append(f"Unknown axis '{limits.axis}' in axis limits")
                continue
            if name in seen:
                errors.append(f"Duplicate limits for axis '{limits.axis}'")
            seen.add(name)
            for label, value in (('velocity', limits.max_velocity),
                                 ('accel', limits.max_accel)):
                if value is not None and not _is_positive(value):
                    errors.append(
                        f"max_{name}_{label} must be a finite positive number, got {value}")

        extruder = self.extruder
        for label, value in (('velocity', extruder.max_extrude_only_velocity),
                             ('accel', extruder.max_extrude_only_accel)):
            if value is not None and not _is_positive(value):
                errors.append(
                    f"max_extrude_only_{label} must be a finite positive number, got {value}")
        return errors

    def updated(self, **changes) -> 'PlannerConfig':
        """Return a copy with the given fields replaced (``None`` values ignored).

        Setting a new ``minimum_cruise_ratio`` clears a legacy
        ``max_accel_to_decel`` and vice versa.
        """
        changes = {k: v for k, v in changes.items() if v is not None}
        if 'minimum_cruise_ratio' in changes:
            changes.setdefault('max_accel_to_decel', None)
        elif 'max_accel_to_decel' in changes:
            changes['minimum_cruise_ratio'] = None
        return replace(self, **changes)

    @classmethod
    def from_env(cls) -> 'PlannerConfig':
        """Build a config from ``MOTIONPLAN_*`` environment variables."""
        load_dotenv()

        def _float(name, default):
            value = os.environ.get(f'MOTIONPLAN_{name}')
            return float(value) if value not in (None, '') else default

        extruder = ExtruderLimits(
            max_extrude_only_velocity=_float('MAX_EXTRUDE_ONLY_VELOCITY', None),
            max_extrude_only_accel=_float('MAX_EXTRUDE_ONLY_ACCEL', None),
        )
        axis_limits = []
        for axis in AXIS_INDEX:
            limits = AxisLimits(
                axis=axis,
                max_velocity=_float(f'MAX_{axis.upper()}_VELOCITY', None),
                max_accel=_float(f'MAX_{axis.upper()}_ACCEL', None),
            )
            if limits.max_velocity is not None or limits.max_accel is not None:
                axis_limits.append(limits)

        return cls(
            max_accel=_float('MAX_ACCEL', DEFAULT_MAX_ACCEL),
            max_velocity=_float('MAX_VELOCITY', DEFAULT_MAX_VELOCITY),
            square_corner_velocity=_float(
                'SQUARE_CORNER_VELOCITY', DEFAULT_SQUARE_CORNER_VELOCITY),
            minimum_cruise_ratio=_float('MINIMUM_CRUISE_RATIO', None),
            max_accel_to_decel=_float('MAX_ACCEL_TO_DECEL', None),
            instant_corner_velocity=_float(
                'INSTANT_CORNER_VELOCITY', DEFAULT_INSTANT_CORNER_VELOCITY),
            axis_limits=axis_limits,
            extruder=extruder,
            lookahead_flush_time=_float(
                'LOOKAHEAD_FLUSH_TIME', DEFAULT_LOOKAHEAD_FLUSH_TIME),
            max_pending_moves=int(_float('MAX_PENDING_MOVES', DEFAULT_MAX_PENDING_MOVES)),
        )
