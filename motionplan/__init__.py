"""Offline velocity planning and print-time estimation for 3D-printer toolpaths."""

from .config import (
    PlannerConfig,
    AxisLimits,
    ExtruderLimits
)
from .exceptions import (
    MotionPlanError,
    InvalidConfiguration,
    MoveStateError
)
from .models import (
    Move,
    MoveKind,
    MoveState,
    JunctionParams,
    PrintTimeEstimate
)
from .junction import (
    calc_junction,
    calc_junction_deviation,
    calc_accel_to_decel
)
from .lookahead import (
    LookaheadQueue,
    backward_pass
)
from .trapezoid import (
    Trapezoid,
    resolve_trapezoid
)
from .sampler import (
    speed_at,
    sample_speeds
)
from .session import (
    PlannerSession,
    plan_moves
)

__all__ = [
    # Configuration
    'PlannerConfig',
    'AxisLimits',
    'ExtruderLimits',
    # Errors
    'MotionPlanError',
    'InvalidConfiguration',
    'MoveStateError',
    # Moves
    'Move',
    'MoveKind',
    'MoveState',
    'JunctionParams',
    'PrintTimeEstimate',
    # Junctions
    'calc_junction',
    'calc_junction_deviation',
    'calc_accel_to_decel',
    # Lookahead
    'LookaheadQueue',
    'backward_pass',
    # Timing
    'Trapezoid',
    'resolve_trapezoid',
    # Sampling
    'speed_at',
    'sample_speeds',
    # Session
    'PlannerSession',
    'plan_moves',
]
