"""Unit conversion utilities."""


def mm_min_to_mm_s(value: float) -> float:
    """Convert a G-code feedrate (mm/min) to mm/s."""
    return value / 60.0


def mm_s_to_mm_min(value: float) -> float:
    """Convert mm/s to a G-code feedrate (mm/min)."""
    return value * 60.0


def format_duration(seconds: float) -> str:
    """Format a duration as ``1h 02m 03s`` (hours omitted when zero)."""
    total = int(round(max(0.0, seconds)))
    hours, rest = divmod(total, 3600)
    minutes, secs = divmod(rest, 60)
    if hours:
        return f"{hours}h {minutes:02d}m {secs:02d}s"
    return f"{minutes}m {secs:02d}s"
