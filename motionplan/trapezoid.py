"""Trapezoidal velocity profile and timing of a single move.

A resolved move accelerates from its entry speed to its cruise speed,
cruises, then decelerates to its exit speed. Ramp distances follow from
v^2 = v0^2 + 2*a*d and ramp times from the average ramp speed.
"""
import math
from dataclasses import dataclass

from .utils.numeric import clamp, clamp_nonneg, safe_div


@dataclass(frozen=True)
class Trapezoid:
    """Resolved speed profile of one move."""
    distance: float
    accel: float
    entry_speed: float
    cruise_speed: float
    exit_speed: float
    accel_distance: float
    cruise_distance: float
    decel_distance: float
    accel_time: float
    cruise_time: float
    decel_time: float

    @property
    def total_time(self) -> float:
        return self.accel_time + self.cruise_time + self.decel_time

    @property
    def is_triangular(self) -> bool:
        return self.cruise_distance <= 0.


def triangular_peak_v2(distance: float, accel: float,
                       entry_v2: float, exit_v2: float) -> float:
    """Peak v2 of a profile whose two ramps exactly cover ``distance``."""
    return accel * distance + (entry_v2 + exit_v2) * .5


def cruise_ratio_cap_v2(distance: float, accel: float, entry_v2: float,
                        exit_v2: float, min_cruise_ratio: float) -> float:
    """
    Largest cruise v2 that keeps the ramps within ``(1 - ratio) * distance``.

    The ramps cover ``(2*cruise_v2 - entry_v2 - exit_v2) / (2*accel)``, so
    the bound is linear in ``cruise_v2``.

    Returns:
        The cap, or infinity when no ratio is active
    """
    if min_cruise_ratio <= 0.:
        return math.inf
    return triangular_peak_v2(distance * (1. - min_cruise_ratio), accel,
                              entry_v2, exit_v2)


def resolve_trapezoid(distance: float, accel: float, entry_speed: float,
                      cruise_speed: float, exit_speed: float,
                      min_cruise_ratio: float = 0.) -> Trapezoid:
    """
    Compute ramp/cruise distances and times for a move.

    The cruise speed is lowered when the ramps would not fit in the move
    (triangular profile) or would take more than ``1 - min_cruise_ratio``
    of it. Cruise never drops below the entry or exit speed.

    Args:
        distance: Move length [mm]
        accel: Move acceleration [mm/s^2]
        entry_speed: Planned speed at the start of the move [mm/s]
        cruise_speed: Planned peak speed [mm/s]
        exit_speed: Planned speed at the end of the move [mm/s]
        min_cruise_ratio: Fraction of the move that must be spent cruising

    Returns:
        Trapezoid with distances and times of each phase
    """
    if distance <= 0. or accel <= 0.:
        return Trapezoid(max(distance, 0.), accel, entry_speed, cruise_speed,
                         exit_speed, 0., 0., 0., 0., 0., 0.)

    entry_v2 = entry_speed ** 2
    exit_v2 = exit_speed ** 2
    cruise_v2 = max(cruise_speed ** 2, entry_v2, exit_v2)
    half_inv_accel = .5 / accel

    if (2. * cruise_v2 - entry_v2 - exit_v2) * half_inv_accel > distance:
        cruise_v2 = max(triangular_peak_v2(distance, accel, entry_v2, exit_v2),
                        entry_v2, exit_v2)
    ratio_cap_v2 = cruise_ratio_cap_v2(distance, accel, entry_v2, exit_v2,
                                       min_cruise_ratio)
    if cruise_v2 > ratio_cap_v2:
        cruise_v2 = max(ratio_cap_v2, entry_v2, exit_v2)
    if cruise_v2 <= 0.:
        # Nothing left to cruise at: fall back to the plain triangle
        cruise_v2 = triangular_peak_v2(distance, accel, entry_v2, exit_v2)

    cruise_v = math.sqrt(cruise_v2)
    accel_d = clamp((cruise_v2 - entry_v2) * half_inv_accel, 0., distance)
    decel_d = clamp((cruise_v2 - exit_v2) * half_inv_accel, 0., distance - accel_d)
    cruise_d = clamp_nonneg(distance - accel_d - decel_d)

    # Time is the distance divided by the average velocity
    accel_t = safe_div(accel_d, (entry_speed + cruise_v) * .5)
    decel_t = safe_div(decel_d, (exit_speed + cruise_v) * .5)
    cruise_t = safe_div(cruise_d, cruise_v)
    return Trapezoid(
        distance=distance,
        accel=accel,
        entry_speed=entry_speed,
        cruise_speed=cruise_v,
        exit_speed=exit_speed,
        accel_distance=accel_d,
        cruise_distance=cruise_d,
        decel_distance=decel_d,
        accel_time=accel_t,
        cruise_time=cruise_t,
        decel_time=decel_t,
    )
