"""
Tests for performance scoring.
"""

from datetime import datetime, timezone

import pytest

from perfsight.core.scoring import (
    calculate_grade,
    calculate_metric_score,
    calculate_performance_score,
    determine_trend_direction,
)
from perfsight.models.enums import Grade, PerformanceTrend, Significance, TrendDirection
from perfsight.models.results import PerformanceSummary, TrendAnalysis


def _clock():
    return datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


def _trend(direction, slope, significance=Significance.HIGH, confidence=0.9, points=10):
    return TrendAnalysis(direction=direction, slope=slope, confidence=confidence,
                         significance=significance, data_points=points)


class TestMetricScore:

    @pytest.mark.parametrize("value, metric, expected", [
        (60, 'fps', 100.0),
        (45, 'fps', 100.0),
        (40, 'fps', 90.0),
        (35, 'fps', 80.0),
        (15, 'fps', 40.0),
        (30, 'memory', 100.0),
        (60, 'memory_usage', 90.0),
        (200, 'memory', 40.0),
        (300, 'memory', 20.0),
        (70, 'cpu_usage', 40.0),
        (10, 'cpu', 100.0),
    ])
    def test_bands(self, value, metric, expected):
        assert calculate_metric_score(value, metric) == pytest.approx(expected)

    def test_below_poor_fps(self):
        assert calculate_metric_score(10, 'fps') == pytest.approx(10 / 15 * 40)

    def test_invalid_values(self):
        assert calculate_metric_score(float('nan'), 'fps') == 0.0
        assert calculate_metric_score(-5, 'memory') == 0.0

    def test_bounded(self):
        for v in [0, 1, 50, 500, 5000]:
            assert 0.0 <= calculate_metric_score(v, 'memory') <= 100.0


class TestGrade:

    @pytest.mark.parametrize("score, grade", [(95, Grade.A), (85, Grade.B), (70, Grade.C),
                                              (60, Grade.D), (59.9, Grade.F)])
    def test_grades(self, score, grade):
        assert calculate_grade(score) == grade


class TestTrendDirection:

    def test_fps_down_is_declining(self):
        trends = {'fps': _trend(TrendDirection.DOWN, -2.0)}
        assert determine_trend_direction(trends) == PerformanceTrend.DECLINING

    def test_memory_down_is_improving(self):
        trends = {'memory_usage': _trend(TrendDirection.DOWN, -20.0)}
        assert determine_trend_direction(trends) == PerformanceTrend.IMPROVING

    def test_low_significance_ignored(self):
        trends = {'fps': _trend(TrendDirection.DOWN, -2.0, Significance.LOW, 0.3)}
        assert determine_trend_direction(trends) == PerformanceTrend.STABLE


class TestPerformanceScore:

    def test_healthy(self):
        score = calculate_performance_score(PerformanceSummary(avg_fps=60, avg_memory=30, avg_cpu=5), clock=_clock)
        assert score.overall == 100.0
        assert score.grade == Grade.A
        assert score.trend == PerformanceTrend.STABLE
        assert score.breakdown == {'fps': 100.0, 'memory': 100.0, 'cpu': 100.0}
        assert score.last_calculated == "2024-06-01T12:00:00Z"

    def test_average(self):
        score = calculate_performance_score(PerformanceSummary(avg_fps=25, avg_memory=120, avg_cpu=45))
        assert score.overall == 60.0
        assert score.grade == Grade.D

    def test_declining_trend_adjusts(self):
        summary = PerformanceSummary(avg_fps=60, avg_memory=30, avg_cpu=5)
        score = calculate_performance_score(summary, {'fps': _trend(TrendDirection.DOWN, -2.0)})
        assert score.trend == PerformanceTrend.DECLINING
        assert score.overall == 90.0

    def test_short_trends_ignored(self):
        summary = PerformanceSummary(avg_fps=60, avg_memory=30, avg_cpu=5)
        score = calculate_performance_score(summary, {'fps': _trend(TrendDirection.DOWN, -2.0, points=3)})
        assert score.trend == PerformanceTrend.STABLE
        assert score.overall == 100.0
