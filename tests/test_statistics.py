"""
Tests for descriptive statistics.

Validates:
    1. Empty input gives an all-zero result
    2. Percentiles use linear interpolation
    3. Tukey fences flag outliers
"""

import numpy as np
import pytest

from perfsight.primitives.statistics import (
    calculate_statistics,
    moving_average,
    percentile,
    percentile_rank,
)


class TestCalculateStatistics:

    def test_empty(self):
        r = calculate_statistics([])
        assert r.mean == r.median == r.standard_deviation == 0
        assert r.min == r.max == 0
        assert r.outliers == []

    def test_linear_percentiles(self):
        """1..10 gives 3.25 / 7.75, not nearest-rank 3 / 8."""
        r = calculate_statistics(list(range(1, 11)))
        assert r.percentile_25 == pytest.approx(3.25)
        assert r.percentile_75 == pytest.approx(7.75)
        assert r.median == pytest.approx(5.5)
        assert r.mean == pytest.approx(5.5)

    def test_population_std(self):
        r = calculate_statistics([2, 4, 4, 4, 5, 5, 7, 9])
        assert r.standard_deviation == pytest.approx(2.0)

    def test_outlier_detected(self):
        r = calculate_statistics([10, 12, 13, 14, 15, 16, 17, 100])
        assert 100 in r.outliers
        assert 10 not in r.outliers

    def test_nan_ignored(self):
        r = calculate_statistics([1.0, np.nan, 3.0])
        assert r.mean == pytest.approx(2.0)
        assert r.max == 3.0

    def test_custom_iqr_multiplier(self):
        values = [10, 12, 13, 14, 15, 16, 17, 21]
        assert calculate_statistics(values).outliers == []
        strict = calculate_statistics(values, {'STATISTICS': {'iqr_multiplier': 0.5}})
        assert 21 in strict.outliers


class TestPercentileHelpers:

    def test_percentile_empty(self):
        assert percentile([], 50) == 0.0

    def test_percentile_rank(self):
        values = [10, 20, 30, 40]
        assert percentile_rank(30, values) == pytest.approx(50.0)
        assert percentile_rank(5, values) == 0.0
        assert percentile_rank(50, values) == 100.0

    def test_moving_average_centered(self):
        out = moving_average([1, 2, 3, 4, 5], 3)
        assert out[2] == pytest.approx(3.0)
        assert out[0] == pytest.approx(1.5)
        assert out[-1] == pytest.approx(4.5)

    def test_moving_average_window_too_large(self):
        assert moving_average([1, 2], 5) == [1.0, 2.0]
