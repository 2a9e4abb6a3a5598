"""Planner session: the public entry point of the velocity planning engine.

A session owns an append-only arena of moves, the lookahead window over
the not-yet-resolved suffix of that arena and the junction parameters in
force. Sessions share no state, so several toolpaths can be planned side
by side.

Example:
    session = PlannerSession(PlannerConfig(max_accel=3000))
    handle = session.push_displacement((10., 0., 0., 0.5), speed=60.)
    session.finish()
    session.speed_at(handle, 5.)
"""
import logging
from typing import Iterable, List, Optional, Sequence, Tuple

import numpy as np

from .config import PlannerConfig
from .exceptions import InvalidConfiguration, MoveStateError
from .lookahead import LookaheadQueue
from .models import JunctionParams, Move, MoveKind, PrintTimeEstimate
from .sampler import sample_speeds, speed_at
from .trapezoid import Trapezoid
from .utils.limits import create_limiter_chain
from .utils.units import mm_min_to_mm_s

logger = logging.getLogger(__name__)


class PlannerSession:
    """Plans a sequence of moves and answers timing/speed queries."""

    def __init__(self, config: Optional[PlannerConfig] = None):
        """
        Initialize the session.

        Args:
            config: Planner limits (defaults to PlannerConfig())

        Raises:
            InvalidConfiguration: If the limits are rejected
        """
        self.moves: List[Move] = []
        self.config: Optional[PlannerConfig] = None
        self.params: Optional[JunctionParams] = None
        self.limiters = None
        self.lookahead: Optional[LookaheadQueue] = None
        self._finalized: List[int] = []
        self.configure(config if config is not None else PlannerConfig())

    # Configuration
    def configure(self, config: PlannerConfig) -> None:
        """
        Install new limits for moves appended from now on.

        Moves already in the lookahead window keep the limits they were
        created with.

        Raises:
            InvalidConfiguration: If the limits are rejected (the previous
                configuration stays in force)
        """
        errors = config.validate()
        if errors:
            raise InvalidConfiguration(errors)
        self.config = config
        self.params = JunctionParams.from_config(config)
        self.limiters = create_limiter_chain(config)
        if self.lookahead is None:
            self.lookahead = LookaheadQueue(self.moves, config.lookahead_flush_time,
                                            config.max_pending_moves)
        else:
            self.lookahead.set_limits(config.lookahead_flush_time,
                                      config.max_pending_moves)
        logger.info("Planner limits: max_velocity=%.3f max_accel=%.3f "
                    "minimum_cruise_ratio=%.6f square_corner_velocity=%.3f",
                    config.max_velocity, config.max_accel,
                    self.params.min_cruise_ratio, config.square_corner_velocity)

    def set_velocity_limit(self, velocity: Optional[float] = None,
                           accel: Optional[float] = None,
                           square_corner_velocity: Optional[float] = None,
                           minimum_cruise_ratio: Optional[float] = None,
                           accel_to_decel: Optional[float] = None) -> None:
        """Change a subset of the toolhead limits (M204 / SET_VELOCITY_LIMIT)."""
        self.configure(self.config.updated(
            max_velocity=velocity,
            max_accel=accel,
            square_corner_velocity=square_corner_velocity,
            minimum_cruise_ratio=minimum_cruise_ratio,
            max_accel_to_decel=accel_to_decel,
        ))

    # Move input
    def push_move(self, distance: float, direction: Sequence[float],
                  requested_speed: float, kind: Optional[MoveKind] = None,
                  accel: Optional[float] = None) -> Optional[int]:
        """
        Classify, limit and queue one move.

        Args:
            distance: Move length [mm]
            direction: (x, y, z) or (x, y, z, e) direction of the move
            requested_speed: Requested speed [mm/s]
            kind: Move classification (inferred from direction if None)
            accel: Per-move acceleration override [mm/s^2]

        Returns:
            Handle of the move, or None if it was a zero-length no-op
        """
        move = Move.from_direction(distance, direction, requested_speed,
                                   self.params, kind, accel)
        return self._queue(move)

    def push_displacement(self, axes_d: Sequence[float], speed: Optional[float] = None,
                          feedrate: Optional[float] = None,
                          accel: Optional[float] = None) -> Optional[int]:
        """
        Queue a move given as an (x, y, z, e) displacement.

        Args:
            axes_d: Displacement of each axis [mm]
            speed: Requested speed [mm/s]
            feedrate: Requested speed as a G-code feedrate [mm/min], used
                when ``speed`` is not given
            accel: Per-move acceleration override [mm/s^2]

        Returns:
            Handle of the move, or None if it was a zero-length no-op
        """
        if speed is None:
            if feedrate is None:
                raise ValueError("Either speed or feedrate is required")
            speed = mm_min_to_mm_s(feedrate)
        move = Move.from_displacement(axes_d, speed, self.params, accel)
        return self._queue(move)

    def _queue(self, move: Optional[Move]) -> Optional[int]:
        if move is None:
            return None
        self.limiters.apply(move)
        index = len(self.moves)
        self.moves.append(move)
        self._finalized.extend(self.lookahead.add_move(index))
        return index

    # Planning
    def flush(self, lazy: bool = False) -> List[int]:
        """
        Plan the pending window.

        Args:
            lazy: Only resolve moves that later moves can no longer affect

        Returns:
            Handles resolved since the previous call, including those
            resolved by automatic flushes
        """
        finalized = self._finalized + self.lookahead.flush(lazy)
        self._finalized = []
        return finalized

    def finish(self) -> List[int]:
        """Resolve every pending move, ending the sequence at a stop."""
        return self.flush(lazy=False)

    @property
    def pending_count(self) -> int:
        return len(self.lookahead.pending)

    # Queries
    def move(self, handle: int) -> Move:
        return self.moves[handle]

    def trapezoid(self, handle: int) -> Trapezoid:
        """
        Resolved profile of a move.

        Raises:
            MoveStateError: If the move is still pending
        """
        move = self.moves[handle]
        if move.trapezoid is None:
            raise MoveStateError(f"Move {handle} has not been planned yet")
        return move.trapezoid

    def total_time(self, handles: Optional[Iterable[int]] = None) -> float:
        """
        Sum of the move times.

        Args:
            handles: Moves to include (all resolved moves if None)

        Returns:
            Total time [s]
        """
        if handles is None:
            return sum(m.trapezoid.total_time for m in self.moves if m.trapezoid)
        return sum(self.trapezoid(h).total_time for h in handles)

    def speed_at(self, handle: int, distance_along: float) -> float:
        """Achievable speed [mm/s] at a distance along a resolved move."""
        return speed_at(self.trapezoid(handle), distance_along)

    def sample_speeds(self, handle: int,
                      max_chunk_length: float) -> Tuple[np.ndarray, np.ndarray]:
        """Positions and speeds along a resolved move in bounded chunks."""
        return sample_speeds(self.trapezoid(handle), max_chunk_length)

    def estimate(self) -> PrintTimeEstimate:
        """Summarize the resolved moves of the session."""
        kinematic_time = extrude_only_time = travel_distance = 0.
        count = 0
        for move in self.moves:
            if move.trapezoid is None:
                continue
            count += 1
            if move.is_kinematic:
                kinematic_time += move.trapezoid.total_time
                travel_distance += move.distance
            else:
                extrude_only_time += move.trapezoid.total_time
        return PrintTimeEstimate(
            total_time=kinematic_time + extrude_only_time,
            kinematic_time=kinematic_time,
            extrude_only_time=extrude_only_time,
            travel_distance=travel_distance,
            move_count=count,
            pending_count=self.pending_count,
        )


def plan_moves(moves: Iterable[Tuple[float, Sequence[float], float]],
               config: Optional[PlannerConfig] = None) -> PlannerSession:
    """
    Plan a complete sequence of ``(distance, direction, speed)`` moves.

    Returns:
        The finished session
    """
    session = PlannerSession(config)
    for distance, direction, speed in moves:
        session.push_move(distance, direction, speed)
    session.finish()
    return session
