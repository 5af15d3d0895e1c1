"""
Tests for the rule-based recommendation pipeline.

Validates:
    1. Rule matching and drafts for fps, memory, cpu and route insights
    2. Priority: higher impact / lower effort always ranks higher
    3. Context multipliers and device factor
    4. Opportunity and route-optimization recommendations
    5. Deduplication, ordering and the result cap
"""

from datetime import datetime, timezone
from itertools import count

import pytest

from perfsight.models.enums import (
    Effort,
    Impact,
    InsightCategory,
    InsightType,
    OpportunityType,
    Complexity,
    RecommendationCategory,
    RecommendationStatus,
    Severity,
)
from perfsight.models.insights import DataContext, PerformanceInsight, RouteContext
from perfsight.models.recommendations import RecommendationDraft, RecommendationRule
from perfsight.models.results import OptimizationOpportunity, PerformanceSummary
from perfsight.models.routes import RoutePerformanceAnalysis, RoutePerformanceData, RouteSession
from perfsight.recommend.engine import RecommendationEngine, route_display_name, time_urgency
from perfsight.recommend.rules import DEFAULT_RULES, get_rule
from perfsight.recommend.scoring import calculate_opportunity_priority_score, calculate_priority_score


# ─────────────────────────────────────────────────────────────────────
# Fixtures
# ─────────────────────────────────────────────────────────────────────

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)
CONTEXT = PerformanceSummary(avg_fps=50, avg_memory=200, avg_cpu=30)


def _engine(rules=DEFAULT_RULES, **kwargs):
    ids = count(1)
    return RecommendationEngine(rules=rules, id_factory=lambda: f"rec-{next(ids)}",
                                clock=lambda: NOW, **kwargs)


def _insight(insight_id="i-1", type=InsightType.ANOMALY, severity=Severity.CRITICAL,
             category=InsightCategory.PERFORMANCE, confidence=0.8, impact=Impact.HIGH,
             value=20.0, route_context=None):
    return PerformanceInsight(
        id=insight_id,
        type=type,
        severity=severity,
        title=f"insight {insight_id}",
        description="",
        confidence=confidence,
        impact=impact,
        category=category,
        detected_at="2024-06-01T11:00:00Z",
        data_context=DataContext(metric_type='fps', value=value, route_context=route_context),
    )


def _tagged_rule(rule_id, insight_id, impact, effort, title=None):
    return RecommendationRule(
        id=rule_id,
        name=rule_id,
        description="",
        condition=lambda i: i.id == insight_id,
        build=lambda i: RecommendationDraft(title=title or rule_id, description="",
                                            category=RecommendationCategory.PERFORMANCE,
                                            impact=impact, effort=effort),
        priority_weight=1.0,
    )


def _route(pattern="/settings/profile", duration=6000.0, sessions=10, total=100, devices=20,
           memory=300.0, fps=55.0, score=70.0):
    return RoutePerformanceData(
        route_name=pattern.strip('/') or 'root',
        route_pattern=pattern,
        total_sessions=total,
        unique_devices=devices,
        avg_fps=fps,
        avg_memory=memory,
        performance_score=score,
        sessions=[
            RouteSession(session_id=f"s{k}", device_id=f"d{k}", route_name="r", route_pattern=pattern,
                         screen_duration=duration, timestamp=f"2024-05-{10 + k:02d}T00:00:00Z")
            for k in range(sessions)
        ],
    )


class TestRuleTable:

    def test_rule_ids_unique(self):
        ids = [r.id for r in DEFAULT_RULES]
        assert len(ids) == len(set(ids)) == 12
        assert {"fps_anomaly_critical", "fps_anomaly_high"} <= set(ids)

    def test_get_rule(self):
        assert get_rule('cpu_high_usage').priority_weight == 1.0
        with pytest.raises(KeyError):
            get_rule('nope')

    def test_rule_serializes_without_callables(self):
        data = get_rule('fps_trend_decline').to_dict()
        assert data['tags'] == ['performance', 'rendering']
        assert 'condition' not in data

    def test_critical_fps_anomaly(self):
        recs = _engine().generate_recommendations([_insight()], CONTEXT)
        titles = [r.title for r in recs]
        assert titles == ["Address Critical FPS Drop", "Low-End Device Compatibility"]
        top = recs[0]
        assert top.insight_id == "i-1"
        assert top.impact == Impact.HIGH
        assert top.status == RecommendationStatus.PENDING
        assert top.created_at == "2024-06-01T12:00:00Z"
        assert top.priority_score == pytest.approx(2.26)
        assert "20.0 FPS" in top.description

    def test_memory_trend(self):
        insight = _insight(type=InsightType.TREND_DECLINE, category=InsightCategory.MEMORY,
                           severity=Severity.HIGH, confidence=0.6, value=700.0)
        titles = {r.title for r in _engine().generate_recommendations([insight], CONTEXT)}
        assert titles == {"Implement Memory Optimization Strategy", "Proactive Memory Leak Prevention"}

    def test_cpu_high_usage(self):
        insight = _insight(category=InsightCategory.CPU, type=InsightType.ALERT, value=95.0,
                           impact=Impact.MEDIUM, confidence=0.6)
        recs = _engine().generate_recommendations([insight], CONTEXT)
        assert [r.title for r in recs] == ["Optimize CPU-Intensive Operations"]
        assert recs[0].impact == Impact.HIGH

    def test_route_anomaly_rules(self):
        context = RouteContext(route_name="checkout", route_pattern="/checkout", sessions_count=150,
                               unique_devices=30, avg_screen_duration=6000)
        insight = _insight(type=InsightType.ROUTE_PERFORMANCE_ANOMALY, severity=Severity.HIGH,
                           confidence=0.6, route_context=context)
        recs = _engine().generate_recommendations([insight], CONTEXT)
        categories = {r.category for r in recs}
        assert categories == {
            RecommendationCategory.ROUTE_NAVIGATION,
            RecommendationCategory.ROUTE_DEVICE_OPTIMIZATION,
            RecommendationCategory.ROUTE_PERFORMANCE_BUDGET,
        }


class TestPriority:

    def test_high_impact_low_effort_wins(self):
        rules = (
            _tagged_rule('quick_win', 'i-a', Impact.HIGH, Effort.LOW),
            _tagged_rule('slog', 'i-b', Impact.LOW, Effort.HIGH),
        )
        insights = [_insight('i-a'), _insight('i-b')]
        recs = _engine(rules).generate_recommendations(insights, CONTEXT)
        by_title = {r.title: r.priority_score for r in recs}
        assert by_title['quick_win'] > by_title['slog']
        assert recs[0].title == 'quick_win'

    def test_device_factor(self):
        rule = get_rule('fps_anomaly_critical')
        insight = _insight()
        draft = rule.build(insight)
        few = calculate_priority_score(draft, insight, CONTEXT, rule)
        many = calculate_priority_score(draft, insight, PerformanceSummary(avg_fps=50, device_count=500), rule)
        assert many == pytest.approx(few * 1.5)

    def test_low_fps_boosts_rendering(self):
        rule = get_rule('fps_trend_decline')
        insight = _insight(type=InsightType.TREND_DECLINE, severity=Severity.HIGH)
        draft = rule.build(insight)
        normal = calculate_priority_score(draft, insight, CONTEXT, rule)
        boosted = calculate_priority_score(draft, insight, PerformanceSummary(avg_fps=20), rule)
        assert boosted == pytest.approx(normal * 1.5)

    def test_low_scores_dropped(self):
        insight = _insight(severity=Severity.LOW, confidence=0.1, impact=Impact.LOW)
        rules = (_tagged_rule('weak', 'i-1', Impact.LOW, Effort.HIGH),)
        assert _engine(rules).generate_recommendations([insight], CONTEXT) == []


class TestOpportunities:

    def _opportunity(self, impact=Impact.HIGH, complexity=Complexity.MODERATE, improvement=50.0):
        return OptimizationOpportunity(
            id="memory_opt_1", type=OpportunityType.MEMORY_OPTIMIZATION, potential_impact=impact,
            affected_metric='memory_usage', current_value=700, target_value=490,
            improvement_potential=improvement, complexity=complexity, description="High memory usage",
        )

    def test_opportunity_score(self):
        assert calculate_opportunity_priority_score(self._opportunity()) == pytest.approx(2.5)

    def test_opportunity_recommendation(self):
        rec = _engine().recommend_opportunity(self._opportunity())
        assert rec.title == "Memory Optimization"
        assert rec.category == RecommendationCategory.MEMORY
        assert rec.effort == Effort.MEDIUM
        assert rec.implementation_time == "3-5 development days"
        assert rec.estimated_improvement == "50% improvement potential"
        assert rec.insight_id == "memory_opt_1"

    def test_weak_opportunity_dropped(self):
        weak = self._opportunity(Impact.LOW, Complexity.COMPLEX, 10.0)
        assert _engine().recommend_opportunity(weak) is None


class TestRouteRecommendations:

    def test_slow_busy_route(self):
        route_data = RoutePerformanceAnalysis(routes=[_route()])
        recs = _engine().generate_recommendations([], CONTEXT, route_data=route_data)
        titles = {r.title for r in recs}
        assert titles == {
            "Implement Preloading for settings profile",
            "Optimize Caching for settings profile",
            "Device Compatibility for settings profile",
            "Performance Budget for settings profile",
        }
        top = recs[0]
        assert top.title == "Implement Preloading for settings profile"
        assert top.priority_score == pytest.approx(4.7)
        assert top.insight_id == "route-optimization-/settings/profile"

    def test_fast_route_no_recommendations(self):
        route = _route(duration=500, total=5, devices=5, score=95)
        recs = _engine().generate_recommendations([], CONTEXT, route_data=RoutePerformanceAnalysis(routes=[route]))
        assert recs == []

    def test_display_name(self):
        assert route_display_name("/settings/profile") == "settings profile"
        assert route_display_name("/") == "route"


class TestResultShape:

    def test_capped_at_ten(self):
        insights = [_insight(f"i-{k}") for k in range(30)]
        rules = tuple(_tagged_rule(f"r{k}", f"i-{k}", Impact.HIGH, Effort.LOW, title=f"Fix {k}") for k in range(30))
        recs = _engine(rules).generate_recommendations(insights, CONTEXT)
        assert len(recs) == 10

    def test_no_duplicates(self):
        insights = [_insight(f"i-{k}") for k in range(25)]
        insights += [_insight(f"m-{k}", type=InsightType.ALERT, category=InsightCategory.MEMORY, value=800.0)
                     for k in range(10)]
        recs = _engine().generate_recommendations(insights, CONTEXT)
        keys = [(r.category, r.title) for r in recs]
        assert len(keys) == len(set(keys))
        assert len(recs) <= 10

    def test_sorted_descending(self):
        insights = [_insight("a"), _insight("b", type=InsightType.TREND_DECLINE, severity=Severity.HIGH)]
        scores = [r.priority_score for r in _engine().generate_recommendations(insights, CONTEXT)]
        assert scores == sorted(scores, reverse=True)

    def test_max_from_thresholds(self):
        insights = [_insight(f"i-{k}") for k in range(30)]
        rules = tuple(_tagged_rule(f"r{k}", f"i-{k}", Impact.HIGH, Effort.LOW, title=f"Fix {k}") for k in range(30))
        engine = _engine(rules, thresholds={'RECOMMENDATION': {'max_recommendations': 3}})
        assert len(engine.generate_recommendations(insights, CONTEXT)) == 3


class TestTimeUrgency:

    @pytest.mark.parametrize("text, expected", [
        ("2 hours", 2.0),
        ("6 hours", 1.5),
        ("20 hours", 1.0),
        ("1 day", 1.0),
        ("2 days and 5 hours", 0.5),
        ("7 days", 0.2),
        ("Less than 1 hour", 0.5),
    ])
    def test_urgency(self, text, expected):
        assert time_urgency(text) == expected
