"""
Tests for Pearson correlation.
"""

import numpy as np
import pytest

from perfsight.core.correlation import calculate_correlation, correlation_matrix
from perfsight.models.enums import CorrelationSignificance, Relationship, Strength


class TestCalculateCorrelation:

    def test_mismatched_lengths(self):
        r = calculate_correlation([1, 2, 3], [1, 2])
        assert r.correlation_coefficient == 0
        assert r.relationship == Relationship.NONE
        assert r.p_value == 1.0

    def test_perfect_positive(self):
        r = calculate_correlation([1, 2, 3, 4, 5], [2, 4, 6, 8, 10], 'fps', 'cpu_usage')
        assert r.correlation_coefficient == pytest.approx(1.0)
        assert r.relationship == Relationship.POSITIVE
        assert r.strength == Strength.STRONG
        assert r.significance == CorrelationSignificance.SIGNIFICANT
        assert (r.metric_a, r.metric_b) == ('fps', 'cpu_usage')

    def test_negative(self):
        np.random.seed(42)
        x = np.arange(50, dtype=float)
        y = -x + np.random.randn(50) * 5
        r = calculate_correlation(x, y)
        assert r.correlation_coefficient < -0.7
        assert r.relationship == Relationship.NEGATIVE

    def test_zero_variance(self):
        r = calculate_correlation([5, 5, 5, 5], [1, 2, 3, 4])
        assert r.correlation_coefficient == 0
        assert r.relationship == Relationship.NONE

    def test_strength_cutoffs_configurable(self):
        x = [1, 2, 3, 4, 5, 6]
        y = [2, 1, 4, 3, 6, 5]
        default = calculate_correlation(x, y)
        strict = calculate_correlation(x, y, thresholds={'CORRELATION': {'strong_above': 0.95}})
        assert default.strength == Strength.STRONG
        assert strict.strength == Strength.MODERATE

    def test_p_value_in_range(self):
        np.random.seed(42)
        r = calculate_correlation(np.random.randn(30), np.random.randn(30))
        assert 0.0 <= r.p_value <= 1.0
        assert -1.0 <= r.correlation_coefficient <= 1.0


class TestCorrelationMatrix:

    def test_all_pairs(self):
        series = {'fps': [1, 2, 3, 4], 'memory_usage': [4, 3, 2, 1], 'cpu_usage': [1, 3, 2, 4]}
        results = correlation_matrix(series)
        assert [(r.metric_a, r.metric_b) for r in results] == [
            ('fps', 'memory_usage'), ('fps', 'cpu_usage'), ('memory_usage', 'cpu_usage'),
        ]
        assert results[0].correlation_coefficient == pytest.approx(-1.0)
