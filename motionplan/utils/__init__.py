"""Shared utility modules for motion planning."""

from .units import mm_min_to_mm_s, mm_s_to_mm_min, format_duration
from .numeric import clamp, clamp_nonneg, clamp_unit, safe_div, safe_sqrt
from .limits import (
    SpeedLimiter,
    LimiterChain,
    create_limiter_chain,
    AxisLimiter,
    ExtruderLimiter
)

__all__ = [
    # units
    'mm_min_to_mm_s',
    'mm_s_to_mm_min',
    'format_duration',
    # numeric
    'clamp',
    'clamp_nonneg',
    'clamp_unit',
    'safe_div',
    'safe_sqrt',
    # limits
    'SpeedLimiter',
    'LimiterChain',
    'create_limiter_chain',
    'AxisLimiter',
    'ExtruderLimiter',
]
