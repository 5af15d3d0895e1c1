"""
Tests for OLS linear regression.
"""

import numpy as np
import pytest

from perfsight.primitives.regression import linear_regression, linear_regression_xy


class TestLinearRegression:

    @pytest.mark.parametrize("values", [[], [5.0], [1.0, 2.0]])
    def test_too_short(self, values):
        r = linear_regression(values)
        assert r.slope == 0
        assert r.intercept == 0
        assert r.r_squared == 0
        assert r.correlation == 0
        assert r.is_significant is False

    def test_increasing_line(self):
        """
        x is the 0-based index, so a perfect line passes through its first
        value at x=0: the intercept is 10. An intercept of 7.5 would need
        x to start at 0.5 and cannot come from an exact fit here.
        """
        r = linear_regression([10, 15, 20, 25, 30, 35])
        assert r.slope == pytest.approx(5.0, abs=0.1)
        assert r.intercept == pytest.approx(10.0)
        assert r.r_squared == pytest.approx(1.0)
        assert r.is_significant

    def test_decreasing_line(self):
        r = linear_regression([100, 90, 80, 70, 60, 50])
        assert r.slope == pytest.approx(-10.0)
        assert r.correlation < 0
        assert r.r_squared == pytest.approx(1.0)

    def test_constant_series(self):
        r = linear_regression([50, 50, 50, 50, 50])
        assert r.slope == 0
        assert r.r_squared == 0
        assert r.correlation == 0
        assert r.is_significant is False

    def test_noise_not_significant(self):
        np.random.seed(42)
        r = linear_regression(np.random.randn(30))
        assert abs(r.slope) < 0.1
        assert r.r_squared < 0.2

    def test_p_value_in_range(self):
        np.random.seed(42)
        y = np.arange(20) * 0.5 + np.random.randn(20)
        r = linear_regression(y)
        assert 0.0 <= r.p_value <= 1.0
        assert r.is_significant


class TestLinearRegressionXY:

    def test_explicit_x(self):
        r = linear_regression_xy([0, 2, 4, 6], [1, 5, 9, 13])
        assert r.slope == pytest.approx(2.0)
        assert r.intercept == pytest.approx(1.0)

    def test_mismatched_lengths(self):
        r = linear_regression_xy([0, 1, 2], [1, 2])
        assert r.slope == 0
        assert r.p_value == 1.0

    def test_nan_pairs_dropped(self):
        r = linear_regression_xy([0, 1, 2, 3, 4], [0, 2, np.nan, 6, 8])
        assert r.slope == pytest.approx(2.0)
