"""
Tests for the package-level exports.
"""

import pytest

import perfsight
from perfsight.core.trend import analyze_trend
from perfsight.recommend.engine import RecommendationEngine


class TestRootExports:

    @pytest.mark.parametrize("name", perfsight.__all__)
    def test_exported(self, name):
        assert callable(getattr(perfsight, name))

    def test_entry_points_are_the_module_functions(self):
        assert perfsight.analyze_trend is analyze_trend
        assert perfsight.RecommendationEngine is RecommendationEngine

    def test_core_operations_exported(self):
        for name in ("calculate_statistics", "linear_regression", "mann_kendall_test",
                     "detect_anomalies", "identify_seasonal_patterns", "calculate_correlation"):
            assert name in perfsight.__all__

    def test_usable_from_root(self):
        r = perfsight.analyze_trend([60, 57, 54, 51, 48, 45], 'fps')
        assert r.forecast == pytest.approx(42.0)
