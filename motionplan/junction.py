"""Junction (cornering) velocity calculation.

Uses the "approximated centripetal velocity" model: the corner between
two moves is replaced by a circle whose deviation from the corner is the
junction deviation, and the junction speed is the speed at which the
toolhead can follow that circle at the move's acceleration.
"""
import math

from .utils.numeric import COS_THETA_LIMIT, clamp_unit, safe_div


def calc_junction_deviation(square_corner_velocity: float, max_accel: float) -> float:
    """
    Junction deviation from the square corner velocity.

    Chosen so that a 90 degree corner is taken at exactly
    ``square_corner_velocity`` when accelerating at ``max_accel``.

    Args:
        square_corner_velocity: Speed allowed at a 90 degree corner [mm/s]
        max_accel: Acceleration ceiling [mm/s^2]

    Returns:
        Junction deviation [mm]
    """
    scv2 = square_corner_velocity ** 2
    return safe_div(scv2 * (math.sqrt(2.) - 1.), max_accel)


def calc_accel_to_decel(max_accel: float, min_cruise_ratio: float) -> float:
    """Acceleration used by the smoothing pass for a minimum cruise ratio."""
    return max_accel * (1. - min_cruise_ratio)


def calc_extruder_junction(move, prev_move) -> float:
    """Maximum junction v2 allowed by the change in extrusion rate."""
    diff_r = abs(move.extrusion_rate - prev_move.extrusion_rate)
    if diff_r > 0.:
        return (move.instant_corner_velocity / diff_r) ** 2
    return move.max_cruise_v2


def calc_junction(move, prev_move) -> None:
    """
    Set ``max_start_v2`` and ``max_smoothed_v2`` of a newly appended move.

    Only the direct predecessor is considered; propagation further back
    happens in the lookahead passes. Junctions involving an extrude-only
    move are left at zero, as are full reversals (the toolhead must stop).
    A straight continuation yields huge cornering terms, so only the
    cruise and reachability limits bind.

    Args:
        move: The move being appended
        prev_move: The move immediately before it
    """
    if not move.is_kinematic or not prev_move.is_kinematic:
        return
    extruder_v2 = calc_extruder_junction(move, prev_move)
    axes_r = move.axes_r
    prev_axes_r = prev_move.axes_r
    junction_cos_theta = -(axes_r[0] * prev_axes_r[0]
                           + axes_r[1] * prev_axes_r[1]
                           + axes_r[2] * prev_axes_r[2])
    if junction_cos_theta > COS_THETA_LIMIT:
        return
    junction_cos_theta = clamp_unit(junction_cos_theta)
    sin_theta_d2 = math.sqrt(0.5 * (1.0 - junction_cos_theta))
    r_jd = sin_theta_d2 / (1. - sin_theta_d2)
    # Approximated circle must contact moves no further away than mid-move
    tan_theta_d2 = sin_theta_d2 / math.sqrt(0.5 * (1.0 + junction_cos_theta))
    move_centripetal_v2 = .5 * move.distance * tan_theta_d2 * move.accel
    prev_move_centripetal_v2 = .5 * prev_move.distance * tan_theta_d2 * prev_move.accel
    move.max_start_v2 = min(
        extruder_v2,
        r_jd * move.junction_deviation * move.accel,
        r_jd * prev_move.junction_deviation * prev_move.accel,
        move_centripetal_v2, prev_move_centripetal_v2,
        move.max_cruise_v2, prev_move.max_cruise_v2,
        prev_move.max_start_v2 + prev_move.ramp_dv2)
    move.max_smoothed_v2 = min(
        move.max_start_v2,
        prev_move.max_smoothed_v2 + prev_move.smoothed_dv2)
