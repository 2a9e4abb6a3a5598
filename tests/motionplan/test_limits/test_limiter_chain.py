"""Tests for the limiter chain."""
import pytest
from dataclasses import dataclass

from motionplan import AxisLimits, ExtruderLimits, JunctionParams, Move, PlannerConfig
from motionplan.utils.limits import (
    AxisLimiter,
    ExtruderLimiter,
    LimiterChain,
    create_limiter_chain
)


@dataclass
class MockLimiter:
    """Limiter that records the moves it sees."""
    enabled: bool = True
    speed: float = 10.0

    def __post_init__(self):
        self.seen = []

    def apply(self, move):
        self.seen.append(move)
        move.limit_speed(self.speed, move.accel)

    def is_enabled(self):
        return self.enabled


@pytest.fixture
def params():
    return JunctionParams.from_config(PlannerConfig())


def make_move(params):
    return Move.from_direction(10.0, (1.0, 0.0, 0.0), 100.0, params)


class TestLimiterChain:
    """Tests for LimiterChain."""

    def test_register_limiter(self):
        chain = LimiterChain()

        chain.register(MockLimiter())

        assert len(chain.limiters) == 1

    def test_apply_all_enabled(self, params):
        first = MockLimiter(speed=50.0)
        second = MockLimiter(speed=20.0)
        chain = LimiterChain()
        chain.register(first)
        chain.register(second)
        move = make_move(params)

        chain.apply(move)

        assert first.seen == [move]
        assert second.seen == [move]
        assert move.max_cruise_v2 == pytest.approx(400.0)

    def test_disabled_limiter_skipped(self, params):
        disabled = MockLimiter(enabled=False, speed=1.0)
        chain = LimiterChain()
        chain.register(disabled)
        move = make_move(params)

        chain.apply(move)

        assert disabled.seen == []
        assert move.max_cruise_v2 == pytest.approx(10000.0)

    def test_order_does_not_matter(self, params):
        """Limits only tighten, so the chain order is irrelevant."""
        forward = LimiterChain([MockLimiter(speed=50.0), MockLimiter(speed=20.0)])
        backward = LimiterChain([MockLimiter(speed=20.0), MockLimiter(speed=50.0)])
        a, b = make_move(params), make_move(params)

        forward.apply(a)
        backward.apply(b)

        assert a.max_cruise_v2 == b.max_cruise_v2


class TestCreateLimiterChain:
    """Tests for the create_limiter_chain factory."""

    def test_default_config(self):
        chain = create_limiter_chain(PlannerConfig())

        assert len(chain.limiters) == 1
        assert isinstance(chain.limiters[0], ExtruderLimiter)

    def test_axis_limits_registered(self):
        config = PlannerConfig(
            axis_limits=[AxisLimits(axis='z', max_velocity=5.0, max_accel=100.0)],
            extruder=ExtruderLimits(max_extrude_only_velocity=25.0,
                                    max_extrude_only_accel=1500.0),
        )

        chain = create_limiter_chain(config)

        assert [type(limiter) for limiter in chain.limiters] == [AxisLimiter, ExtruderLimiter]
        assert all(limiter.is_enabled() for limiter in chain.limiters)
