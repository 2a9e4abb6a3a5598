"""Test configuration and fixtures."""
import pytest

from motionplan import PlannerConfig, PlannerSession, AxisLimits, ExtruderLimits


@pytest.fixture
def default_config():
    """Stock limits (3000 mm/s^2, 300 mm/s, cruise ratio 0.5)."""
    return PlannerConfig()


@pytest.fixture
def slow_config():
    """Low acceleration limits that make hand calculations easy."""
    return PlannerConfig(
        max_accel=100.0,
        max_velocity=300.0,
        square_corner_velocity=5.0,
        minimum_cruise_ratio=0.5,
    )


@pytest.fixture
def no_ratio_config():
    """Low acceleration limits with the cruise ratio disabled (legacy decel cap)."""
    return PlannerConfig(
        max_accel=100.0,
        max_velocity=300.0,
        square_corner_velocity=5.0,
        max_accel_to_decel=100.0,
    )


@pytest.fixture
def printer_config():
    """A typical printer with a slow Z axis and extruder limits."""
    return PlannerConfig(
        max_accel=3000.0,
        max_velocity=300.0,
        square_corner_velocity=5.0,
        minimum_cruise_ratio=0.5,
        instant_corner_velocity=1.0,
        axis_limits=[AxisLimits(axis='z', max_velocity=5.0, max_accel=100.0)],
        extruder=ExtruderLimits(max_extrude_only_velocity=25.0,
                                max_extrude_only_accel=1500.0),
    )


@pytest.fixture
def session(default_config):
    """A session with stock limits."""
    return PlannerSession(default_config)


@pytest.fixture
def slow_session(slow_config):
    """A session with low acceleration limits."""
    return PlannerSession(slow_config)
