"""Constraint appliers for planned moves.

Each limiter narrows the cruise speed and acceleration of a move before
it enters the lookahead window.

Limiters:
- AxisLimiter: per-axis velocity/acceleration limits (e.g. a slow Z axis)
- ExtruderLimiter: filament velocity/acceleration of extrude-only moves

Usage:
    from motionplan.utils.limits import create_limiter_chain

    chain = create_limiter_chain(config)
    chain.apply(move)
"""
from .base import (
    SpeedLimiter,
    LimiterChain,
    create_limiter_chain,
)
from .axis import AxisLimiter
from .extruder import ExtruderLimiter

__all__ = [
    'SpeedLimiter',
    'LimiterChain',
    'create_limiter_chain',
    'AxisLimiter',
    'ExtruderLimiter',
]
