"""Base classes and types for move speed limiters.

This module defines the protocol and chain for constraint appliers. Each
limiter narrows a move's cruise speed and acceleration ceiling through
``Move.limit_speed`` and is registered with a LimiterChain. Limits only
ever tighten, so the order of the chain does not change the result.
"""
from dataclasses import dataclass, field
from typing import Protocol, List, TYPE_CHECKING

if TYPE_CHECKING:
    from motionplan.config import PlannerConfig
    from motionplan.models import Move


class SpeedLimiter(Protocol):
    """Protocol for move constraint appliers.

    Methods:
        apply: Narrow the ceilings of a move that is about to be queued
        is_enabled: Check if this limiter should be active
    """

    def apply(self, move: 'Move') -> None:
        """Narrow the move's speed and acceleration ceilings.

        Args:
            move: Move to limit (mutated in place)
        """
        ...

    def is_enabled(self) -> bool:
        """Check if this limiter is enabled by the configuration.

        Returns:
            True if this limiter should be applied
        """
        ...


@dataclass
class LimiterChain:
    """Applies all enabled limiters to each new move.

    Example:
        chain = create_limiter_chain(config)
        chain.apply(move)
    """
    limiters: List[SpeedLimiter] = field(default_factory=list)

    def register(self, limiter: SpeedLimiter) -> None:
        """Register a limiter with the chain.

        Args:
            limiter: SpeedLimiter implementation to add to the chain
        """
        self.limiters.append(limiter)

    def apply(self, move: 'Move') -> None:
        """Apply all enabled limiters to a move.

        Args:
            move: Move to limit (mutated in place)
        """
        for limiter in self.limiters:
            if limiter.is_enabled():
                limiter.apply(move)


def create_limiter_chain(config: 'PlannerConfig') -> LimiterChain:
    """Factory function to create a LimiterChain for a configuration.

    One AxisLimiter is registered per configured axis, followed by the
    ExtruderLimiter.

    Args:
        config: PlannerConfig with axis and extruder limits

    Returns:
        LimiterChain with all limiters registered
    """
    # Import here to avoid circular imports
    from .axis import AxisLimiter
    from .extruder import ExtruderLimiter

    chain = LimiterChain()
    for limits in config.axis_limits:
        chain.register(AxisLimiter(limits))
    chain.register(ExtruderLimiter(config.extruder))
    return chain
