"""
Tests for the proactive recommendation pipeline.
"""

from datetime import datetime, timedelta, timezone
from itertools import count

import pytest

from perfsight.models.enums import (
    AlertType,
    Impact,
    PatternType,
    RecommendationCategory,
    Severity,
    TimeHorizon,
    severity_rank,
)
from perfsight.models.predictions import EarlyWarningAlert, PerformancePrediction
from perfsight.models.results import SeasonalPattern
from perfsight.recommend.engine import RecommendationEngine


NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


def _engine():
    ids = count(1)
    return RecommendationEngine(id_factory=lambda: f"rec-{next(ids)}", clock=lambda: NOW)


def _prediction(metric, value, probability, horizon=TimeHorizon.ONE_DAY, route=None):
    return PerformancePrediction(
        prediction_id=f"{metric}_{horizon.value}" + (f"_{route}" if route else ""),
        metric_type=metric, predicted_value=value, confidence_interval=(value * 0.9, value * 1.1),
        probability_of_issue=probability, time_horizon=horizon, route_pattern=route,
    )


def _pattern(hours_ahead, pattern_type=PatternType.DAILY, confidence=0.8, strength=0.6):
    peak = (NOW + timedelta(hours=hours_ahead)).isoformat().replace('+00:00', 'Z')
    return SeasonalPattern(pattern_id=f"fps_{pattern_type.value}_seasonal", pattern_type=pattern_type,
                           metric_type='fps', amplitude=10.0, confidence=confidence,
                           seasonal_strength=strength, next_predicted_peak=peak)


def _warning(confidence=0.9, severity=Severity.CRITICAL, time_to_issue="2 hours"):
    return EarlyWarningAlert(
        id="fps_drop_1", type=AlertType.FPS_DROP, predicted_issue_date="2024-06-01T14:00:00Z",
        time_to_issue=time_to_issue, confidence=confidence, severity=severity,
        prevention_recommendations=["Optimize rendering pipeline and draw calls"],
        monitoring_suggestions=["Monitor FPS metrics in real-time"],
    )


class TestFromPredictions:

    def test_fps_forecast(self):
        [rec] = _engine().generate_proactive_recommendations([_prediction('fps', 25, 0.9)], [], [])
        assert rec.title == "Proactive FPS Optimization"
        assert rec.impact == Impact.HIGH
        assert rec.prevention_priority == Severity.CRITICAL
        assert rec.priority_score == pytest.approx(8.3)
        assert rec.predicted_impact_date == "2024-06-02T12:00:00Z"
        assert rec.early_warning_threshold == pytest.approx(35.0)
        assert rec.estimated_improvement == "Maintain FPS above 45"
        assert rec.prediction_based
        assert rec.insight_id == "prediction_fps_24h"

    def test_memory_forecast(self):
        [rec] = _engine().generate_proactive_recommendations([_prediction('memory_usage', 600, 0.7)], [], [])
        assert rec.category == RecommendationCategory.MEMORY
        assert rec.prevention_priority == Severity.MEDIUM
        assert rec.early_warning_threshold == pytest.approx(480.0)
        assert "600MB" in rec.description

    def test_route_forecast(self):
        [rec] = _engine().generate_proactive_recommendations(
            [_prediction('performance_score', 40, 0.8, route="/checkout")], [], [])
        assert rec.title == "Proactive Route Optimization: /checkout"
        assert rec.prevention_priority == Severity.HIGH

    def test_unlikely_issue_skipped(self):
        assert _engine().generate_proactive_recommendations([_prediction('fps', 25, 0.5)], [], []) == []

    def test_score_weights_come_from_thresholds(self):
        engine = RecommendationEngine(clock=lambda: NOW, thresholds={'PROACTIVE': {
            'value_severity_bands': [(20, 3.0)], 'default_value_severity': 0.5, 'probability_weight': 1.0,
        }})
        [rec] = engine.generate_proactive_recommendations([_prediction('fps', 25, 0.9)], [], [])
        assert rec.priority_score == pytest.approx(5.9)


class TestFromSeasonalPatterns:

    def test_daily_peak(self):
        [rec] = _engine().generate_proactive_recommendations([], [_pattern(10)], [])
        assert rec.title == "Prepare for Seasonal Daily Peak"
        assert rec.impact == Impact.HIGH
        assert rec.priority_score == pytest.approx(4.3)
        assert rec.seasonal_context['pattern_type'] == 'daily'
        assert "today" in rec.description

    def test_hourly_peak_context(self):
        [rec] = _engine().generate_proactive_recommendations([], [_pattern(1, PatternType.HOURLY)], [])
        assert rec.title == "Prepare for Seasonal Hourly Peak"
        assert "this hour" in rec.description
        assert rec.seasonal_context['pattern_type'] == 'daily'

    def test_outside_window_or_weak(self):
        patterns = [_pattern(100), _pattern(10, confidence=0.6), _pattern(10, strength=0.2), _pattern(-2)]
        assert _engine().generate_proactive_recommendations([], patterns, []) == []


class TestFromEarlyWarnings:

    def test_critical_warning(self):
        [rec] = _engine().generate_proactive_recommendations([], [], [_warning()])
        assert rec.title == "Early Warning: Fps Drop"
        assert rec.category == RecommendationCategory.RENDERING
        assert rec.prevention_priority == Severity.CRITICAL
        assert rec.implementation_time == "Immediate"
        assert rec.priority_score == pytest.approx(9.8)
        assert rec.actionable_steps == ["Optimize rendering pipeline and draw calls"]

    def test_low_confidence_skipped(self):
        assert _engine().generate_proactive_recommendations([], [], [_warning(confidence=0.6)]) == []


class TestOrdering:

    def test_priority_then_score(self):
        recs = _engine().generate_proactive_recommendations(
            [_prediction('fps', 25, 0.9), _prediction('memory_usage', 600, 0.7),
             _prediction('performance_score', 40, 0.8, route="/checkout")],
            [_pattern(10)],
            [_warning()],
        )
        assert [r.title for r in recs] == [
            "Early Warning: Fps Drop",
            "Proactive FPS Optimization",
            "Proactive Route Optimization: /checkout",
            "Proactive Memory Optimization",
            "Prepare for Seasonal Daily Peak",
        ]
        keys = [(severity_rank(r.prevention_priority), r.priority_score) for r in recs]
        assert keys == sorted(keys, reverse=True)

    def test_capped_at_eight(self):
        predictions = [_prediction('performance_score', 30 + k, 0.9, route=f"/r{k}") for k in range(20)]
        assert len(_engine().generate_proactive_recommendations(predictions, [], [])) == 8

    def test_duplicates_removed(self):
        predictions = [_prediction('fps', 25, 0.9), _prediction('fps', 20, 0.95, horizon=TimeHorizon.ONE_WEEK)]
        recs = _engine().generate_proactive_recommendations(predictions, [], [])
        assert len(recs) == 1
        keys = [(r.category, r.title) for r in recs]
        assert len(keys) == len(set(keys))
