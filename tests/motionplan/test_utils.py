"""Tests for motionplan.utils modules."""
import math

import pytest

from motionplan.utils.units import mm_min_to_mm_s, mm_s_to_mm_min, format_duration
from motionplan.utils.numeric import (
    clamp, clamp_nonneg, clamp_unit, safe_div, safe_sqrt, COS_THETA_LIMIT
)


class TestUnits:
    """Tests for unit conversion utilities."""

    def test_mm_min_to_mm_s(self):
        assert mm_min_to_mm_s(3000.0) == 50.0
        assert mm_min_to_mm_s(0.0) == 0.0

    def test_mm_s_to_mm_min(self):
        assert mm_s_to_mm_min(50.0) == 3000.0

    def test_format_minutes(self):
        assert format_duration(125.4) == "2m 05s"

    def test_format_hours(self):
        assert format_duration(3723.0) == "1h 02m 03s"

    def test_format_negative_is_zero(self):
        assert format_duration(-3.0) == "0m 00s"


class TestNumeric:
    """Tests for guarded numeric helpers."""

    def test_safe_div(self):
        assert safe_div(10.0, 4.0) == 2.5

    def test_safe_div_by_zero(self):
        assert safe_div(10.0, 0.0) == 0.0
        assert safe_div(10.0, 0.0, default=math.inf) == math.inf

    def test_clamp_nonneg(self):
        assert clamp_nonneg(-1e-12) == 0.0
        assert clamp_nonneg(2.0) == 2.0

    def test_clamp_unit(self):
        assert clamp_unit(1.0) == COS_THETA_LIMIT
        assert clamp_unit(-1.0) == -COS_THETA_LIMIT
        assert clamp_unit(0.25) == 0.25

    def test_clamp(self):
        assert clamp(5.0, 0.0, 2.0) == 2.0
        assert clamp(-5.0, 0.0, 2.0) == 0.0

    def test_safe_sqrt_of_negative_residue(self):
        assert safe_sqrt(-1e-15) == 0.0
        assert safe_sqrt(16.0) == pytest.approx(4.0)
