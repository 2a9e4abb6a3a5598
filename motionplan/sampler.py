"""Achievable speed along a resolved move, for preview rendering."""
import math
from typing import Tuple

import numpy as np

from .trapezoid import Trapezoid
from .utils.numeric import clamp, safe_sqrt


def speed_at(trapezoid: Trapezoid, distance_along: float) -> float:
    """
    Instantaneous speed at a distance from the start of a move.

    Args:
        trapezoid: Resolved profile of the move
        distance_along: Distance from the move start [mm], clamped to the move

    Returns:
        Speed [mm/s]
    """
    t = trapezoid
    x = clamp(distance_along, 0., t.distance)
    if x <= t.accel_distance:
        return safe_sqrt(t.entry_speed ** 2 + 2. * t.accel * x)
    if x >= t.distance - t.decel_distance:
        return safe_sqrt(t.exit_speed ** 2 + 2. * t.accel * (t.distance - x))
    return t.cruise_speed


def sample_speeds(trapezoid: Trapezoid,
                  max_chunk_length: float) -> Tuple[np.ndarray, np.ndarray]:
    """
    Subdivide a move into chunks no longer than ``max_chunk_length``.

    The phase boundaries are always included so the sampled profile keeps
    its corners.

    Args:
        trapezoid: Resolved profile of the move
        max_chunk_length: Maximum chunk length [mm]

    Returns:
        Tuple of (positions, speeds) arrays, both starting at 0 and ending
        at the move distance
    """
    if max_chunk_length <= 0:
        raise ValueError(f"max_chunk_length must be positive, got {max_chunk_length}")
    t = trapezoid
    count = max(1, int(math.ceil(t.distance / max_chunk_length)))
    positions = np.linspace(0., t.distance, count + 1)
    boundaries = [t.accel_distance, t.distance - t.decel_distance]
    positions = np.union1d(positions, np.clip(boundaries, 0., t.distance))

    accel_v = np.sqrt(np.maximum(t.entry_speed ** 2 + 2. * t.accel * positions, 0.))
    decel_v = np.sqrt(np.maximum(
        t.exit_speed ** 2 + 2. * t.accel * (t.distance - positions), 0.))
    speeds = np.where(
        positions <= t.accel_distance, accel_v,
        np.where(positions >= t.distance - t.decel_distance, decel_v, t.cruise_speed))
    return positions, speeds
