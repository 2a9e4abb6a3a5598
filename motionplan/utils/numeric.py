"""Guarded numeric helpers shared by the planning formulas.

Every formula that could divide by zero, take the square root of a
negative residue or feed acos-style values outside their domain goes
through one of these helpers instead of guarding at the call site.
"""
import math

# Largest |cos(theta)| used for junction angles
COS_THETA_LIMIT = 0.999999


def safe_div(numerator: float, denominator: float, default: float = 0.0) -> float:
    """Divide, returning ``default`` when the denominator is zero."""
    if not denominator:
        return default
    return numerator / denominator


def clamp_nonneg(value: float) -> float:
    """Floor a value at zero (removes negative floating residues)."""
    return value if value > 0.0 else 0.0


def clamp_unit(value: float, limit: float = COS_THETA_LIMIT) -> float:
    """Clamp a cosine-like value to ``[-limit, limit]``."""
    return max(-limit, min(limit, value))


def clamp(value: float, low: float, high: float) -> float:
    """Clamp a value to ``[low, high]``."""
    return max(low, min(high, value))


def safe_sqrt(value: float) -> float:
    """Square root of a value floored at zero."""
    return math.sqrt(clamp_nonneg(value))
