"""Two-pass lookahead planning over the window of pending moves.

The backward pass walks the window from the last move to the first,
assuming the toolhead comes to a complete stop after the last move, and
determines the highest reachable junction speeds. Moves that end up
bounded by a later "peak" are delayed and resolved in a forward walk once
that peak's cruise speed is known.

A second, "smoothed" set of speeds computed with the reduced
accel-to-decel acceleration decides where the peaks are, which keeps
short zig-zag moves from accelerating and decelerating all the time.
"""
import logging
import math
from dataclasses import dataclass
from typing import Dict, List, Sequence, Tuple

from .junction import calc_junction
from .trapezoid import cruise_ratio_cap_v2
from .utils.numeric import clamp, clamp_nonneg

logger = logging.getLogger(__name__)

MAX_PLAN_ITERATIONS = 4
CONVERGENCE_TOLERANCE = 1e-9


@dataclass
class PlannedSpeeds:
    """Squared entry/cruise/exit speeds chosen for one move."""
    start_v2: float
    cruise_v2: float
    end_v2: float


def _planned(start_v2: float, cruise_v2: float, end_v2: float) -> PlannedSpeeds:
    cruise_v2 = clamp_nonneg(cruise_v2)
    return PlannedSpeeds(clamp(start_v2, 0., cruise_v2), cruise_v2,
                         clamp(end_v2, 0., cruise_v2))


def _resolve_delayed(delayed: List[Tuple[int, float, float]],
                     peak_cruise_v2: float,
                     plan: Dict[int, PlannedSpeeds]) -> None:
    # Walk forward in time; the cruise speed can only drop along the way
    mc_v2 = peak_cruise_v2
    for pos, ms_v2, me_v2 in reversed(delayed):
        mc_v2 = min(mc_v2, ms_v2)
        plan[pos] = _planned(min(ms_v2, mc_v2), mc_v2, min(me_v2, mc_v2))
    del delayed[:]


def backward_pass(moves: Sequence, lazy: bool = False) -> Tuple[int, Dict[int, PlannedSpeeds]]:
    """
    Plan junction speeds for a window of moves.

    Args:
        moves: Pending moves in order
        lazy: Only plan moves that later additions can no longer change

    Returns:
        Tuple of (flush_count, plan) where the first ``flush_count`` moves
        have an entry in ``plan`` keyed by their position in ``moves``
    """
    flush_count = len(moves)
    update_flush_count = lazy
    delayed: List[Tuple[int, float, float]] = []
    plan: Dict[int, PlannedSpeeds] = {}
    next_end_v2 = next_smoothed_v2 = peak_cruise_v2 = 0.
    for i in range(flush_count - 1, -1, -1):
        move = moves[i]
        reachable_start_v2 = next_end_v2 + move.ramp_dv2
        start_v2 = min(move.max_start_v2, reachable_start_v2)
        reachable_smoothed_v2 = next_smoothed_v2 + move.smoothed_dv2
        smoothed_v2 = min(move.max_smoothed_v2, reachable_smoothed_v2)
        if smoothed_v2 < reachable_smoothed_v2:
            # It's possible for this move to accelerate
            if smoothed_v2 + move.smoothed_dv2 > next_smoothed_v2 or delayed:
                # This move can decelerate or this is a full accel
                # move after a full decel move
                if update_flush_count and peak_cruise_v2:
                    flush_count = i
                    update_flush_count = False
                peak_cruise_v2 = min(move.max_cruise_v2,
                                     (smoothed_v2 + reachable_smoothed_v2) * .5)
                if delayed:
                    if not update_flush_count and i < flush_count:
                        _resolve_delayed(delayed, peak_cruise_v2, plan)
                    del delayed[:]
            if not update_flush_count and i < flush_count:
                cruise_v2 = min((start_v2 + reachable_start_v2) * .5,
                                move.max_cruise_v2, peak_cruise_v2)
                plan[i] = _planned(min(start_v2, cruise_v2), cruise_v2,
                                   min(next_end_v2, cruise_v2))
        else:
            # Delay calculating this move until peak_cruise_v2 is known
            delayed.append((i, start_v2, next_end_v2))
        next_end_v2 = start_v2
        next_smoothed_v2 = smoothed_v2

    if update_flush_count:
        return 0, {}
    if delayed:
        if lazy:
            # The front of the window is still undecided
            return 0, {}
        _resolve_delayed(delayed, math.inf, plan)
    return flush_count, plan


def propagate_start_limits(moves: Sequence) -> None:
    """
    Carry lowered entry ceilings forward through the window.

    Each entry ceiling may exceed the previous one by at most the previous
    move's ``ramp_dv2``. Re-planning and lazy flushes lower ceilings after
    the junctions were linked, so the bound is re-applied before each pass.
    """
    for prev_move, move in zip(moves, moves[1:]):
        move.limit_start(prev_move.max_start_v2 + prev_move.ramp_dv2)
        move.max_smoothed_v2 = min(move.max_smoothed_v2,
                                   prev_move.max_smoothed_v2 + prev_move.smoothed_dv2)


def limit_cruise_ratio(moves: Sequence, flush_count: int,
                       plan: Dict[int, PlannedSpeeds]) -> bool:
    """
    Tighten moves whose planned speeds break their minimum cruise ratio.

    A move whose entry and exit differ by more than its ``ramp_dv2`` has
    its faster junction lowered. Otherwise a cruise above the ratio cap is
    lowered to the cap.

    Returns:
        True if any move was tightened and the window must be re-planned
    """
    changed = False
    for pos in range(flush_count):
        move = moves[pos]
        planned = plan[pos]
        # The speed change alone must leave room to cruise
        junction_cap_v2 = min(planned.start_v2, planned.end_v2) + move.ramp_dv2
        excess_v2 = max(planned.start_v2, planned.end_v2) - junction_cap_v2
        if excess_v2 > CONVERGENCE_TOLERANCE * max(1., junction_cap_v2):
            if planned.start_v2 > planned.end_v2:
                move.limit_start(junction_cap_v2)
                changed = True
            elif pos + 1 < len(moves):
                moves[pos + 1].limit_start(junction_cap_v2)
                changed = True
            continue
        cap_v2 = max(cruise_ratio_cap_v2(move.distance, move.accel,
                                         planned.start_v2, planned.end_v2,
                                         move.min_cruise_ratio),
                     planned.start_v2, planned.end_v2)
        if planned.cruise_v2 - cap_v2 > CONVERGENCE_TOLERANCE * max(1., cap_v2):
            move.limit_cruise(cap_v2)
            if pos + 1 < len(moves):
                moves[pos + 1].limit_start(cap_v2)
            changed = True
    return changed


class LookaheadQueue:
    """Window of pending moves, addressed by index into the session's arena.

    Moves are flushed lazily once the accumulated minimum move time
    exceeds ``flush_time`` or the window holds more than ``max_pending``
    moves, and completely on an explicit ``flush()``.
    """

    def __init__(self, arena: List, flush_time: float, max_pending: int):
        self.arena = arena
        self.pending: List[int] = []
        self.flush_time = flush_time
        self.max_pending = max_pending
        self.junction_flush = flush_time

    def reset(self) -> None:
        del self.pending[:]
        self.junction_flush = self.flush_time

    def set_limits(self, flush_time: float, max_pending: int) -> None:
        self.flush_time = flush_time
        self.max_pending = max_pending
        self.junction_flush = min(self.junction_flush, flush_time)

    def get_last(self):
        if self.pending:
            return self.arena[self.pending[-1]]
        return None

    def add_move(self, index: int) -> List[int]:
        """
        Append a move and link it to its predecessor in the window.

        Returns:
            Indices of moves finalized by an automatic flush (may be empty)
        """
        move = self.arena[index]
        prev_move = self.get_last()
        self.pending.append(index)
        if prev_move is not None:
            calc_junction(move, prev_move)
        self.junction_flush -= move.min_move_t
        if len(self.pending) > self.max_pending:
            finalized = self.flush(lazy=True)
            if not finalized:
                logger.debug("Lookahead window full (%d moves) with no second peak "
                             "to flush up to, forcing a full flush (stop after move %d)",
                             len(self.pending), index)
                finalized = self.flush()
            return finalized
        if self.junction_flush <= 0.:
            # Enough moves have been queued to reach the target flush time
            return self.flush(lazy=True)
        return []

    def flush(self, lazy: bool = False) -> List[int]:
        """
        Plan the window and resolve every move that can be resolved.

        Returns:
            Arena indices of the moves resolved by this call
        """
        self.junction_flush = self.flush_time
        if not self.pending:
            return []
        moves = [self.arena[i] for i in self.pending]
        for iteration in range(1, MAX_PLAN_ITERATIONS + 1):
            propagate_start_limits(moves)
            flush_count, plan = backward_pass(moves, lazy)
            if not flush_count:
                return []
            if not limit_cruise_ratio(moves, flush_count, plan):
                break
        else:
            logger.debug("Lookahead stopped after %d iterations without converging",
                         MAX_PLAN_ITERATIONS)
        logger.debug("Flushing %d of %d pending moves (lazy=%s, iterations=%d)",
                     flush_count, len(moves), lazy, iteration)

        finalized = self.pending[:flush_count]
        for pos, index in enumerate(finalized):
            planned = plan[pos]
            self.arena[index].set_junction(planned.start_v2, planned.cruise_v2,
                                           planned.end_v2)
        del self.pending[:flush_count]
        if self.pending:
            # The next window must start at the speed already committed
            self.arena[self.pending[0]].limit_start(plan[flush_count - 1].end_v2)
        return finalized
