"""
Tests for trend primitives and the trend analyzer.

Validates:
    1. Mann-Kendall direction and significance
    2. Robustness to a single injected outlier
    3. Exponential smoothing and forecasts
    4. analyze_trend direction classification and period labels
"""

import numpy as np
import pytest

from perfsight.core.trend import analyze_trend, describe_time_period
from perfsight.models.enums import MannKendallTrend, Significance, TrendDirection
from perfsight.models.results import MetricSample
from perfsight.primitives.trend import exponential_smoothing, mann_kendall_test


class TestMannKendall:

    def test_increasing(self):
        r = mann_kendall_test([1, 3, 5, 7, 9, 11, 13, 15])
        assert r.tau > 0.5
        assert r.trend == MannKendallTrend.INCREASING
        assert r.is_significant
        assert r.sen_slope == pytest.approx(2.0)

    def test_decreasing(self):
        r = mann_kendall_test([15, 13, 11, 9, 7, 5, 3, 1])
        assert r.trend == MannKendallTrend.DECREASING
        assert r.tau < -0.5

    def test_outlier_keeps_trend(self):
        r = mann_kendall_test([1, 2, 3, 100, 4, 5, 6, 7])
        assert r.trend == MannKendallTrend.INCREASING

    def test_too_short(self):
        r = mann_kendall_test([1, 2, 3])
        assert r.trend == MannKendallTrend.NO_TREND
        assert r.tau == 0
        assert not r.is_significant

    def test_constant_no_trend(self):
        r = mann_kendall_test([5.0] * 10)
        assert r.trend == MannKendallTrend.NO_TREND

    @pytest.mark.parametrize("n", [5, 6, 40])
    def test_sen_slope_is_median_of_pairwise_slopes(self, n):
        np.random.seed(42)
        y = np.cumsum(np.random.randn(n))
        pairwise = [(y[j] - y[i]) / (j - i) for i in range(n) for j in range(i + 1, n)]
        assert mann_kendall_test(y).sen_slope == pytest.approx(float(np.median(pairwise)))

    def test_long_series(self):
        r = mann_kendall_test(np.arange(2000, dtype=float) * 0.5)
        assert r.trend == MannKendallTrend.INCREASING
        assert r.sen_slope == pytest.approx(0.5)


class TestExponentialSmoothing:

    def test_levels(self):
        out = exponential_smoothing([10, 20], alpha=0.5)
        assert out == pytest.approx([10.0, 15.0])

    def test_forecast_appended(self):
        out = exponential_smoothing([10, 20, 30], alpha=0.3, forecast_periods=2)
        assert len(out) == 5
        assert out[-1] == out[-2] == out[2]

    def test_empty(self):
        assert exponential_smoothing([]) == []

    def test_bad_alpha(self):
        with pytest.raises(ValueError):
            exponential_smoothing([1, 2], alpha=0.0)


class TestAnalyzeTrend:

    def test_flat_series_is_stable(self):
        r = analyze_trend([30, 30.5, 29.8, 30.2, 29.9, 30.1, 30.3, 29.7], 'fps')
        assert r.direction == TrendDirection.STABLE
        assert abs(r.slope) < 0.1
        assert r.forecast is None

    def test_downward_fps(self):
        r = analyze_trend([60, 57, 54, 51, 48, 45], 'fps')
        assert r.direction == TrendDirection.DOWN
        assert r.significance == Significance.HIGH
        assert r.forecast == pytest.approx(42.0)
        assert r.data_points == 6

    def test_upward_memory(self):
        r = analyze_trend([200, 220, 240, 260, 280], 'memory_usage')
        assert r.direction == TrendDirection.UP
        assert r.confidence == pytest.approx(1.0)

    def test_too_few_points(self):
        r = analyze_trend([1, 2], 'fps')
        assert r.direction == TrendDirection.STABLE
        assert r.data_points == 2
        assert r.confidence == 0

    def test_numpy_array_input(self):
        r = analyze_trend(np.array([1.0, 2.0, 3.0, 4.0, 5.0]), 'fps')
        assert r.direction == TrendDirection.UP
        assert r.slope == pytest.approx(1.0)
        assert r.time_period == "unknown"
        assert r.data_points == 5

    def test_accepts_samples(self):
        samples = [MetricSample(timestamp=f"2024-01-0{d}T00:00:00Z", value=v)
                   for d, v in zip(range(1, 6), [10, 20, 30, 40, 50])]
        r = analyze_trend(samples, 'load_time')
        assert r.direction == TrendDirection.UP
        assert r.time_period == "5 days"


class TestDescribeTimePeriod:

    def _samples(self, first, last):
        return [{'timestamp': first, 'value': 1.0}, {'timestamp': last, 'value': 2.0}]

    def test_same_day(self):
        assert describe_time_period(self._samples("2024-01-01T00:00:00Z", "2024-01-01T05:00:00Z")) == "1 day"

    def test_weeks(self):
        assert describe_time_period(self._samples("2024-01-01T00:00:00Z", "2024-01-15T00:00:00Z")) == "2 weeks"

    def test_months(self):
        assert describe_time_period(self._samples("2024-01-01T00:00:00Z", "2024-03-01T00:00:00Z")) == "2 months"

    def test_unknown(self):
        assert describe_time_period([]) == "unknown"
        assert describe_time_period([1.0, 2.0]) == "unknown"
