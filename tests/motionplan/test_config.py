"""Tests for planner configuration."""
import pytest

from motionplan import (
    PlannerConfig, PlannerSession, AxisLimits, ExtruderLimits, InvalidConfiguration,
    JunctionParams
)


class TestCruiseRatio:
    """Tests for PlannerConfig.cruise_ratio."""

    def test_default_ratio(self):
        """Without ratio or legacy cap the default ratio is used."""
        assert PlannerConfig().cruise_ratio() == 0.5

    def test_explicit_ratio(self):
        """An explicit ratio wins."""
        config = PlannerConfig(minimum_cruise_ratio=0.3, max_accel_to_decel=100.0)
        assert config.cruise_ratio() == 0.3

    def test_legacy_accel_to_decel(self):
        """max_accel_to_decel is converted to a ratio."""
        config = PlannerConfig(max_accel=3000.0, max_accel_to_decel=1500.0)
        assert config.cruise_ratio() == pytest.approx(0.5)

    def test_legacy_cap_above_accel_disables_ratio(self):
        """A legacy cap at or above max_accel gives a ratio of 0."""
        config = PlannerConfig(max_accel=3000.0, max_accel_to_decel=5000.0)
        assert config.cruise_ratio() == 0.0


class TestValidate:
    """Tests for PlannerConfig.validate."""

    def test_defaults_are_valid(self):
        assert PlannerConfig().validate() == []

    def test_non_positive_accel(self):
        errors = PlannerConfig(max_accel=0.0).validate()
        assert len(errors) == 1
        assert 'max_accel' in errors[0]

    def test_negative_velocity(self):
        errors = PlannerConfig(max_velocity=-5.0).validate()
        assert any('max_velocity' in e for e in errors)

    @pytest.mark.parametrize('ratio', [0.0, -0.1, 1.5])
    def test_ratio_out_of_range(self, ratio):
        """Ratios outside (0, 1] are rejected."""
        errors = PlannerConfig(minimum_cruise_ratio=ratio).validate()
        assert any('minimum_cruise_ratio' in e for e in errors)

    def test_ratio_of_one_is_valid(self):
        assert PlannerConfig(minimum_cruise_ratio=1.0).validate() == []

    def test_bad_legacy_cap(self):
        errors = PlannerConfig(max_accel_to_decel=0.0).validate()
        assert any('max_accel_to_decel' in e for e in errors)

    def test_unknown_axis(self):
        config = PlannerConfig(axis_limits=[AxisLimits(axis='w', max_velocity=5.0, max_accel=10.0)])
        errors = config.validate()
        assert any("Unknown axis 'w'" in e for e in errors)

    def test_duplicate_axis(self):
        config = PlannerConfig(axis_limits=[
            AxisLimits(axis='z', max_velocity=5.0, max_accel=10.0),
            AxisLimits(axis='Z', max_velocity=6.0, max_accel=10.0),
        ])
        assert any('Duplicate' in e for e in config.validate())

    def test_bad_extruder_limits(self):
        config = PlannerConfig(extruder=ExtruderLimits(max_extrude_only_velocity=-1.0))
        assert any('max_extrude_only_velocity' in e for e in config.validate())

    @pytest.mark.parametrize('field', [
        'max_accel', 'max_velocity', 'square_corner_velocity',
        'minimum_cruise_ratio', 'max_accel_to_decel', 'instant_corner_velocity',
        'lookahead_flush_time',
    ])
    @pytest.mark.parametrize('value', [float('nan'), float('inf')])
    def test_non_finite_values(self, field, value):
        """NaN and infinite limits are rejected."""
        errors = PlannerConfig(**{field: value}).validate()
        assert any(field in e for e in errors)

    def test_non_finite_axis_and_extruder_limits(self):
        config = PlannerConfig(
            axis_limits=[AxisLimits(axis='z', max_velocity=float('nan'), max_accel=10.0)],
            extruder=ExtruderLimits(max_extrude_only_velocity=25.0,
                                    max_extrude_only_accel=float('inf')),
        )
        errors = config.validate()
        assert any('max_z_velocity' in e for e in errors)
        assert any('max_extrude_only_accel' in e for e in errors)

    def test_collects_multiple_errors(self):
        errors = PlannerConfig(max_accel=-1.0, max_velocity=0.0,
                               square_corner_velocity=-1.0).validate()
        assert len(errors) == 3


class TestConfigure:
    """Tests for configuring a session."""

    def test_invalid_configuration_raises(self):
        with pytest.raises(InvalidConfiguration) as excinfo:
            PlannerSession(PlannerConfig(max_accel=0.0))
        assert excinfo.value.errors
        assert 'max_accel' in str(excinfo.value)

    def test_nan_accel_rejected(self):
        """A NaN acceleration never reaches the planner."""
        with pytest.raises(InvalidConfiguration) as excinfo:
            PlannerSession(PlannerConfig(max_accel=float('nan')))
        assert 'max_accel' in str(excinfo.value)

    def test_invalid_configuration_is_a_value_error(self):
        with pytest.raises(ValueError):
            PlannerSession(PlannerConfig(minimum_cruise_ratio=2.0))

    def test_rejected_update_keeps_previous_config(self, session):
        previous = session.config
        with pytest.raises(InvalidConfiguration):
            session.set_velocity_limit(accel=-10.0)
        assert session.config is previous


class TestUpdated:
    """Tests for partial configuration updates."""

    def test_none_values_are_ignored(self):
        config = PlannerConfig(max_accel=1000.0)
        updated = config.updated(max_accel=None, max_velocity=100.0)
        assert updated.max_accel == 1000.0
        assert updated.max_velocity == 100.0

    def test_ratio_clears_legacy_cap(self):
        config = PlannerConfig(max_accel_to_decel=500.0)
        updated = config.updated(minimum_cruise_ratio=0.2)
        assert updated.max_accel_to_decel is None
        assert updated.cruise_ratio() == 0.2

    def test_legacy_cap_clears_ratio(self):
        config = PlannerConfig(minimum_cruise_ratio=0.2)
        updated = config.updated(max_accel_to_decel=1500.0)
        assert updated.minimum_cruise_ratio is None
        assert updated.cruise_ratio() == pytest.approx(0.5)


class TestFromEnv:
    """Tests for reading limits from the environment."""

    def test_reads_overrides(self, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv('MOTIONPLAN_MAX_ACCEL', '1500')
        monkeypatch.setenv('MOTIONPLAN_MINIMUM_CRUISE_RATIO', '0.25')
        monkeypatch.setenv('MOTIONPLAN_MAX_Z_VELOCITY', '10')
        monkeypatch.setenv('MOTIONPLAN_MAX_Z_ACCEL', '200')

        config = PlannerConfig.from_env()

        assert config.max_accel == 1500.0
        assert config.cruise_ratio() == 0.25
        assert len(config.axis_limits) == 1
        assert config.axis_limits[0].axis == 'z'
        assert config.axis_limits[0].is_active

    def test_defaults_without_environment(self, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)
        for name in ('MAX_ACCEL', 'MAX_VELOCITY', 'MINIMUM_CRUISE_RATIO',
                     'MAX_ACCEL_TO_DECEL', 'SQUARE_CORNER_VELOCITY'):
            monkeypatch.delenv(f'MOTIONPLAN_{name}', raising=False)

        config = PlannerConfig.from_env()

        assert config.max_accel == 3000.0
        assert config.minimum_cruise_ratio is None


class TestJunctionParams:
    """Tests for parameters derived from a configuration."""

    def test_derived_values(self):
        params = JunctionParams.from_config(
            PlannerConfig(max_accel=100.0, square_corner_velocity=5.0,
                          minimum_cruise_ratio=0.5))
        assert params.junction_deviation == pytest.approx(25.0 * 0.41421356 / 100.0)
        assert params.accel_to_decel == pytest.approx(50.0)
        assert params.min_cruise_ratio == 0.5
