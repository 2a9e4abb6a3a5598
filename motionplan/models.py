"""Move records and junction parameters shared by the planning modules.

Common suffixes: _d is distance (in mm), _v is velocity (in mm/second),
_v2 is velocity squared (mm^2/s^2), _t is time (in seconds), _r is a
ratio.
"""
import math
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence, Tuple

from .exceptions import MoveStateError
from .junction import calc_accel_to_decel, calc_junction_deviation
from .trapezoid import Trapezoid, resolve_trapezoid
from .utils.numeric import safe_div, safe_sqrt
from .utils.units import format_duration

# Moves shorter than this are no-ops
MIN_MOVE_DISTANCE = 1e-9
# Acceleration of extrude-only moves before an extruder limit applies
UNBOUNDED_ACCEL = 99999999.9


class MoveKind(Enum):
    KINEMATIC = 'kinematic'
    EXTRUDE_ONLY = 'extrude_only'


class MoveState(Enum):
    PENDING = 'pending'
    RESOLVED = 'resolved'


@dataclass(frozen=True)
class JunctionParams:
    """Junction constraint parameters in force for newly appended moves."""
    max_accel: float
    max_velocity: float
    junction_deviation: float
    accel_to_decel: float
    min_cruise_ratio: float
    instant_corner_velocity: float

    @classmethod
    def from_config(cls, config) -> 'JunctionParams':
        ratio = config.cruise_ratio()
        return cls(
            max_accel=config.max_accel,
            max_velocity=config.max_velocity,
            junction_deviation=calc_junction_deviation(
                config.square_corner_velocity, config.max_accel),
            accel_to_decel=calc_accel_to_decel(config.max_accel, ratio),
            min_cruise_ratio=ratio,
            instant_corner_velocity=config.instant_corner_velocity,
        )


def _pad_direction(direction: Sequence[float]) -> Tuple[float, float, float, float]:
    values = [float(v) for v in direction]
    if len(values) == 3:
        values.append(0.0)
    if len(values) != 4:
        raise ValueError(f"Direction needs 3 or 4 components, got {len(values)}")
    return values[0], values[1], values[2], values[3]


class Move:
    """One planned displacement.

    ``axes_r`` holds the spatial unit direction plus, as its last
    component, the extrusion per mm of travel. For extrude-only moves the
    spatial part is zero and the extrusion component is +/-1.

    The velocity-squared ceilings are only ever tightened: by limiters
    before the move is queued, by the junction calculation when it is
    appended and by the lookahead while it is pending. ``set_junction``
    resolves the move exactly once.
    """

    def __init__(self, distance: float, axes_r: Sequence[float],
                 requested_speed: float, kind: MoveKind, accel: float,
                 params: JunctionParams):
        self.distance = distance
        self.axes_r = tuple(axes_r)
        self.kind = kind
        self.requested_speed = requested_speed
        self.accel = accel
        # Snapshot so later configuration changes never act retroactively
        self.junction_deviation = params.junction_deviation
        self.min_cruise_ratio = params.min_cruise_ratio
        self.instant_corner_velocity = params.instant_corner_velocity
        # Junction speeds are tracked in velocity squared. max_dv2 is the
        # maximum amount of this squared-velocity that can change in
        # this move.
        self.max_start_v2 = 0.
        self.max_smoothed_v2 = 0.
        self.max_cruise_v2 = requested_speed ** 2
        self.max_dv2 = 2.0 * distance * accel
        self.smoothed_dv2 = min(2.0 * distance * params.accel_to_decel, self.max_dv2)
        self.min_move_t = safe_div(distance, requested_speed)
        self.state = MoveState.PENDING
        self.trapezoid: Optional[Trapezoid] = None

    @classmethod
    def from_direction(cls, distance: float, direction: Sequence[float],
                       requested_speed: float, params: JunctionParams,
                       kind: Optional[MoveKind] = None,
                       accel: Optional[float] = None) -> Optional['Move']:
        """
        Classify and build a move from a distance and a direction.

        The spatial part of ``direction`` is normalized; the extrusion
        component is scaled by the same factor so it stays a rate per mm.

        Args:
            distance: Length of the move (mm of travel, or mm of filament
                for extrude-only moves)
            direction: (x, y, z) or (x, y, z, e) direction
            requested_speed: Requested feedrate in mm/s
            params: Junction parameters in force
            kind: Force a classification (inferred from direction if None)
            accel: Per-move acceleration override

        Returns:
            The new Move, or None for a zero-length move or zero direction
        """
        if distance < MIN_MOVE_DISTANCE:
            return None
        x, y, z, e = _pad_direction(direction)
        norm = math.sqrt(x * x + y * y + z * z)
        if kind is None:
            kind = MoveKind.KINEMATIC if norm >= MIN_MOVE_DISTANCE else MoveKind.EXTRUDE_ONLY

        if kind is MoveKind.EXTRUDE_ONLY:
            if not e:
                return None
            axes_r = (0., 0., 0., math.copysign(1.0, e))
            # Extrude-only moves are not bound by the toolhead limits
            return cls(distance, axes_r, requested_speed, kind,
                       accel if accel is not None else UNBOUNDED_ACCEL, params)

        if norm < MIN_MOVE_DISTANCE:
            return None
        inv_norm = 1. / norm
        axes_r = (x * inv_norm, y * inv_norm, z * inv_norm, e * inv_norm)
        velocity = min(requested_speed, params.max_velocity)
        return cls(distance, axes_r, velocity, kind,
                   accel if accel is not None else params.max_accel, params)

    @classmethod
    def from_displacement(cls, axes_d: Sequence[float], requested_speed: float,
                          params: JunctionParams,
                          accel: Optional[float] = None) -> Optional['Move']:
        """Build a move from an (x, y, z, e) displacement."""
        x, y, z, e = _pad_direction(axes_d)
        move_d = math.sqrt(x * x + y * y + z * z)
        if move_d < MIN_MOVE_DISTANCE:
            return cls.from_direction(abs(e), (0., 0., 0., e), requested_speed,
                                      params, MoveKind.EXTRUDE_ONLY, accel)
        return cls.from_direction(move_d, (x, y, z, e), requested_speed, params,
                                  MoveKind.KINEMATIC, accel)

    @property
    def is_kinematic(self) -> bool:
        return self.kind is MoveKind.KINEMATIC

    @property
    def extrusion_rate(self) -> float:
        return self.axes_r[3]

    @property
    def ramp_dv2(self) -> float:
        """Largest v2 change across the move that still leaves room to cruise.

        The ramps of a move may cover at most ``1 - min_cruise_ratio`` of
        its distance, so its entry and exit v2 can differ by no more than
        ``2 * distance * accel * (1 - min_cruise_ratio)``.
        """
        return self.max_dv2 * (1. - self.min_cruise_ratio)

    @property
    def is_resolved(self) -> bool:
        return self.state is MoveState.RESOLVED

    @property
    def entry_speed(self) -> Optional[float]:
        return self.trapezoid.entry_speed if self.trapezoid else None

    @property
    def cruise_speed(self) -> Optional[float]:
        return self.trapezoid.cruise_speed if self.trapezoid else None

    @property
    def exit_speed(self) -> Optional[float]:
        return self.trapezoid.exit_speed if self.trapezoid else None

    def limit_speed(self, speed: float, accel: float) -> None:
        """Narrow the cruise ceiling and acceleration of this move."""
        speed2 = speed ** 2
        if speed2 < self.max_cruise_v2:
            self.max_cruise_v2 = speed2
            self.min_move_t = safe_div(self.distance, speed)
        self.accel = min(self.accel, accel)
        self.max_dv2 = 2.0 * self.distance * self.accel
        self.smoothed_dv2 = min(self.smoothed_dv2, self.max_dv2)

    def limit_start(self, start_v2: float) -> None:
        """Cap the entry speed ceilings (used when re-planning a window)."""
        self.max_start_v2 = min(self.max_start_v2, start_v2)
        self.max_smoothed_v2 = min(self.max_smoothed_v2, self.max_start_v2)

    def limit_cruise(self, cruise_v2: float) -> None:
        """Cap the cruise ceiling; entry can never exceed cruise."""
        if cruise_v2 < self.max_cruise_v2:
            self.max_cruise_v2 = cruise_v2
            self.min_move_t = safe_div(self.distance, safe_sqrt(cruise_v2))
        self.limit_start(cruise_v2)

    def set_junction(self, start_v2: float, cruise_v2: float, end_v2: float) -> Trapezoid:
        """Resolve the move's trapezoid from planned squared speeds."""
        if self.state is MoveState.RESOLVED:
            raise MoveStateError("Move already resolved")
        self.trapezoid = resolve_trapezoid(
            self.distance, self.accel,
            safe_sqrt(start_v2),
            safe_sqrt(cruise_v2),
            safe_sqrt(end_v2),
            self.min_cruise_ratio)
        self.state = MoveState.RESOLVED
        return self.trapezoid

    def __repr__(self):
        return (f"Move({self.kind.value}, d={self.distance:.4f}, "
                f"axes_r={tuple(round(r, 4) for r in self.axes_r)}, "
                f"state={self.state.value})")


@dataclass
class PrintTimeEstimate:
    """Summary of the resolved moves of a session."""
    total_time: float
    kinematic_time: float
    extrude_only_time: float
    travel_distance: float
    move_count: int
    pending_count: int = 0

    @property
    def average_speed(self) -> float:
        return safe_div(self.travel_distance, self.kinematic_time)

    def summary(self) -> str:
        lines = [
            f"Estimated time: {format_duration(self.total_time)}",
            f"Moves: {self.move_count} ({self.travel_distance:.1f} mm, "
            f"avg {self.average_speed:.1f} mm/s)",
            f"Extrude-only: {format_duration(self.extrude_only_time)}",
        ]
        if self.pending_count:
            lines.append(f"Pending (not yet planned): {self.pending_count}")
        return "\n".join(lines)
