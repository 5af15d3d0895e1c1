"""
Recommendation Engine.

Maps insights, optimization opportunities and route analyses to scored,
deduplicated, ranked recommendations, and forecasts, seasonal patterns and
early warnings to proactive recommendations.

Every call is a pure function of its inputs apart from the injected id
factory and clock. The rule tuple is read-only and safe to share.

Usage:
    from perfsight.recommend import RecommendationEngine

    engine = RecommendationEngine()
    recommendations = engine.generate_recommendations(insights, summary, opportunities)
"""

import logging
import re
from datetime import datetime, timedelta
from typing import Any, Callable, Iterable, List, Mapping, Optional, Sequence
from uuid import uuid4

from perfsight.config.thresholds import get_section
from perfsight.core._series import format_timestamp, parse_timestamp, utc_now
from perfsight.core.prediction import classify_issue_severity, horizon_hours
from perfsight.models.base import label_of
from perfsight.models.enums import (
    Effort,
    Impact,
    PatternType,
    RecommendationCategory,
    RouteOptimizationType,
    Severity,
    severity_rank,
)
from perfsight.models.insights import PerformanceInsight
from perfsight.models.predictions import EarlyWarningAlert, PerformancePrediction
from perfsight.models.recommendations import (
    PerformanceRecommendation,
    ProactiveRecommendation,
    RecommendationRule,
)
from perfsight.models.results import OptimizationOpportunity, PerformanceSummary, SeasonalPattern
from perfsight.models.routes import RouteOptimization, RouteOptimizationAnalysis, RoutePerformanceAnalysis
from perfsight.recommend.routes import analyze_route_optimization_opportunities
from perfsight.recommend.rules import DEFAULT_RULES
from perfsight.recommend.scoring import (
    calculate_opportunity_priority_score,
    calculate_priority_score,
    calculate_route_optimization_priority_score,
)

logger = logging.getLogger(__name__)

_COMPLEXITY_EFFORT = {
    'simple': Effort.LOW,
    'moderate': Effort.MEDIUM,
    'complex': Effort.HIGH,
}

_OPPORTUNITY_TIME = {
    'simple': "1-2 development days",
    'moderate': "3-5 development days",
    'complex': "1-2 weeks",
}

_ROUTE_TIME = {
    'simple': "1-2 development days",
    'moderate': "2-4 development days",
    'complex': "1-2 weeks",
}

_OPPORTUNITY_TITLE = {
    'memory_optimization': "Memory Optimization",
    'cpu_optimization': "CPU Optimization",
    'fps_improvement': "FPS Improvement",
}

_OPPORTUNITY_STEPS = {
    'memory_optimization': [
        "Profile memory allocation patterns",
        "Implement object pooling where appropriate",
        "Optimize texture and asset loading",
        "Review data structure efficiency",
    ],
    'cpu_optimization': [
        "Profile CPU usage hotspots",
        "Optimize computational algorithms",
        "Consider background processing for heavy tasks",
        "Implement frame rate adaptive processing",
    ],
    'fps_improvement': [
        "Analyze rendering pipeline bottlenecks",
        "Optimize draw calls and batching",
        "Review particle systems and effects",
        "Implement level-of-detail (LOD) systems",
    ],
}

_ROUTE_CATEGORY = {
    RouteOptimizationType.PRELOADING: RecommendationCategory.ROUTE_NAVIGATION,
    RouteOptimizationType.CACHING: RecommendationCategory.ROUTE_CACHING,
    RouteOptimizationType.DEVICE_OPTIMIZATION: RecommendationCategory.ROUTE_DEVICE_OPTIMIZATION,
    RouteOptimizationType.PERFORMANCE_BUDGET: RecommendationCategory.ROUTE_PERFORMANCE_BUDGET,
}

_ROUTE_TITLE = {
    RouteOptimizationType.PRELOADING: "Implement Preloading for {}",
    RouteOptimizationType.CACHING: "Optimize Caching for {}",
    RouteOptimizationType.DEVICE_OPTIMIZATION: "Device Compatibility for {}",
    RouteOptimizationType.PERFORMANCE_BUDGET: "Performance Budget for {}",
}

_ROUTE_STEPS = {
    RouteOptimizationType.PRELOADING: [
        "Implement route component preloading",
        "Add skeleton loaders for route transitions",
        "Cache critical route data during idle time",
        "Implement progressive loading for route assets",
    ],
    RouteOptimizationType.CACHING: [
        "Implement route-level data caching",
        "Add component-level memoization",
        "Cache route transition animations",
        "Implement intelligent cache invalidation",
    ],
    RouteOptimizationType.DEVICE_OPTIMIZATION: [
        "Analyze device-specific performance issues",
        "Implement device-tier based optimizations",
        "Add simplified UI for resource-constrained devices",
        "Consider alternative flows for low-end devices",
    ],
    RouteOptimizationType.PERFORMANCE_BUDGET: [
        "Set performance budget targets for route",
        "Implement route performance monitoring",
        "Add automated alerts for budget violations",
        "Create performance regression testing",
    ],
}

_ROUTE_METRICS = {
    RouteOptimizationType.PRELOADING: ["screen_duration", "user_experience", "perceived_performance"],
    RouteOptimizationType.CACHING: ["screen_duration", "memory_usage", "repeat_visit_performance"],
    RouteOptimizationType.DEVICE_OPTIMIZATION: ["fps", "memory_usage", "device_compatibility", "cpu_usage"],
    RouteOptimizationType.PERFORMANCE_BUDGET: ["screen_duration", "performance_budget", "user_experience"],
}

_ALERT_METRICS = {
    'performance_degradation': ["performance_score", "overall_health"],
    'memory_spike': ["memory_usage", "heap_size"],
    'fps_drop': ["fps", "frame_time", "rendering_performance"],
    'seasonal_peak': ["seasonal_metrics", "traffic_patterns"],
}

_SEASON_WORDS = {
    PatternType.HOURLY: "this hour",
    PatternType.DAILY: "today",
    PatternType.WEEKLY: "this week",
}


def _category_of(name: str, fps_category: RecommendationCategory) -> RecommendationCategory:
    if 'memory' in name:
        return RecommendationCategory.MEMORY
    if 'cpu' in name:
        return RecommendationCategory.CPU
    if 'fps' in name:
        return fps_category
    return RecommendationCategory.PERFORMANCE


def _title_words(label: str) -> str:
    return label.replace('_', ' ').title()


def route_display_name(route_pattern: str) -> str:
    """Route pattern as title words: leading slash dropped, other slashes become spaces."""
    return re.sub(r'^/', '', route_pattern).replace('/', ' ') or "route"


def time_urgency(time_to_issue: str) -> float:
    """Urgency weight of an alert lead time such as "6 hours" or "2 days"."""
    match = re.match(r'\s*(\d+)', time_to_issue)
    if 'day' in time_to_issue and match:
        days = int(match.group(1))
        if days <= 1:
            return 1.0
        return 0.5 if days <= 3 else 0.2
    if 'hour' in time_to_issue and match:
        hours = int(match.group(1))
        if hours <= 2:
            return 2.0
        if hours <= 12:
            return 1.5
        return 1.0 if hours <= 24 else 0.5
    return 0.5


def deduplicate(recommendations: Iterable[PerformanceRecommendation]) -> List[PerformanceRecommendation]:
    """Keep the first recommendation per (category, title)."""
    seen = set()
    unique = []
    for rec in recommendations:
        if rec.dedupe_key in seen:
            continue
        seen.add(rec.dedupe_key)
        unique.append(rec)
    return unique


class RecommendationEngine:
    """
    Rule-based recommendation engine.

    Args:
        rules: Rule table evaluated in order for each insight
        id_factory: Returns a fresh recommendation id
        clock: Returns the current UTC time
        thresholds: Optional threshold sections (see ``perfsight.config``)
    """

    def __init__(
        self,
        rules: Sequence[RecommendationRule] = DEFAULT_RULES,
        id_factory: Callable[[], Any] = uuid4,
        clock: Callable[[], datetime] = utc_now,
        thresholds: Optional[Mapping[str, Any]] = None,
    ):
        self.rules = tuple(rules)
        self.id_factory = id_factory
        self.clock = clock
        self.thresholds = thresholds

    def _new_id(self) -> str:
        return str(self.id_factory())

    # -------------------------------------------------------------------------
    # Standard pipeline
    # -------------------------------------------------------------------------

    def generate_recommendations(
        self,
        insights: Sequence[PerformanceInsight],
        context: PerformanceSummary,
        opportunities: Optional[Sequence[OptimizationOpportunity]] = None,
        route_data: Optional[RoutePerformanceAnalysis] = None,
    ) -> List[PerformanceRecommendation]:
        """
        Ranked recommendations from insights, opportunities and route data.

        Args:
            insights: Insights to match against the rule table
            context: Global averages and device count for priority boosts
            opportunities: Optimization opportunities, if any
            route_data: Route aggregates, if any

        Returns:
            At most ``max_recommendations`` recommendations, highest priority
            first, unique by (category, title)
        """
        cfg = get_section('RECOMMENDATION', self.thresholds)
        created_at = format_timestamp(self.clock())
        recommendations: List[PerformanceRecommendation] = []

        for insight in insights:
            matched = [rule for rule in self.rules if rule.matches(insight)]
            logger.debug("Insight '%s' (%s/%s/%s) matched %d rules", insight.title,
                         label_of(insight.type), label_of(insight.category), label_of(insight.severity),
                         len(matched))

            for rule in matched:
                draft = rule.build(insight)
                score = calculate_priority_score(draft, insight, context, rule, self.thresholds)
                logger.debug("Rule '%s' priority score: %.3f", rule.name, score)
                if score < cfg['min_insight_score']:
                    continue
                recommendations.append(PerformanceRecommendation(
                    id=self._new_id(),
                    insight_id=insight.id,
                    priority_score=score,
                    created_at=created_at,
                    **vars(draft),
                ))

        for opportunity in opportunities or []:
            rec = self.recommend_opportunity(opportunity, created_at)
            if rec is not None:
                recommendations.append(rec)

        if route_data is not None:
            analyses = analyze_route_optimization_opportunities(route_data, self.thresholds)
            recommendations.extend(self.recommend_routes(analyses, created_at))

        unique = deduplicate(recommendations)
        unique.sort(key=lambda r: r.priority_score, reverse=True)

        logger.debug("Recommendations: %d candidates, %d unique", len(recommendations), len(unique))
        return unique[:cfg['max_recommendations']]

    def recommend_opportunity(
        self,
        opportunity: OptimizationOpportunity,
        created_at: Optional[str] = None,
    ) -> Optional[PerformanceRecommendation]:
        """Recommendation for one opportunity, or None when it scores too low."""
        cfg = get_section('RECOMMENDATION', self.thresholds)
        score = calculate_opportunity_priority_score(opportunity, self.thresholds)
        if score < cfg['min_opportunity_score']:
            return None

        kind = label_of(opportunity.type)
        complexity = label_of(opportunity.complexity)
        return PerformanceRecommendation(
            id=self._new_id(),
            insight_id=opportunity.id,
            title=_OPPORTUNITY_TITLE.get(kind, f"{_title_words(kind)} Optimization"),
            description=opportunity.description,
            category=_category_of(kind, RecommendationCategory.RENDERING),
            impact=Impact(label_of(opportunity.potential_impact)),
            effort=_COMPLEXITY_EFFORT[complexity],
            priority_score=score,
            actionable_steps=list(_OPPORTUNITY_STEPS.get(
                kind, ["Analyze the performance issue", "Implement appropriate optimizations"])),
            estimated_improvement=f"{opportunity.improvement_potential:.0f}% improvement potential",
            related_metrics=[opportunity.affected_metric],
            implementation_time=_OPPORTUNITY_TIME[complexity],
            created_at=created_at or format_timestamp(self.clock()),
        )

    def recommend_routes(
        self,
        analyses: Sequence[RouteOptimizationAnalysis],
        created_at: Optional[str] = None,
    ) -> List[PerformanceRecommendation]:
        """Recommendations for route optimizations scoring at least ``min_route_score``."""
        cfg = get_section('RECOMMENDATION', self.thresholds)
        created_at = created_at or format_timestamp(self.clock())
        recommendations = []

        for analysis in analyses:
            name = route_display_name(analysis.route_pattern)
            for optimization in analysis.optimization_recommendations:
                score = calculate_route_optimization_priority_score(optimization, analysis, self.thresholds)
                if score < cfg['min_route_score']:
                    continue
                recommendations.append(self._route_recommendation(optimization, analysis, name, score, created_at))

        return recommendations

    def _route_recommendation(
        self,
        optimization: RouteOptimization,
        analysis: RouteOptimizationAnalysis,
        name: str,
        score: float,
        created_at: str,
    ) -> PerformanceRecommendation:
        kind = RouteOptimizationType(label_of(optimization.type))
        complexity = label_of(optimization.implementation_complexity)
        return PerformanceRecommendation(
            id=self._new_id(),
            insight_id=f"route-optimization-{analysis.route_pattern}",
            title=_ROUTE_TITLE[kind].format(name),
            description=optimization.description,
            category=_ROUTE_CATEGORY[kind],
            impact=Impact(label_of(optimization.priority)),
            effort=_COMPLEXITY_EFFORT[complexity],
            priority_score=score,
            actionable_steps=list(_ROUTE_STEPS[kind]),
            estimated_improvement=optimization.estimated_impact,
            related_metrics=list(_ROUTE_METRICS[kind]),
            implementation_time=_ROUTE_TIME[complexity],
            created_at=created_at,
        )

    # -------------------------------------------------------------------------
    # Proactive pipeline
    # -------------------------------------------------------------------------

    def generate_proactive_recommendations(
        self,
        predictions: Sequence[PerformancePrediction],
        seasonal_patterns: Sequence[SeasonalPattern],
        early_warnings: Sequence[EarlyWarningAlert],
    ) -> List[ProactiveRecommendation]:
        """
        Proactive recommendations from forecasts, seasonal patterns and alerts.

        Returns:
            At most ``PROACTIVE['max_recommendations']`` recommendations,
            ordered by prevention priority then score, unique by
            (category, title)
        """
        cfg = get_section('PROACTIVE', self.thresholds)
        created_at = format_timestamp(self.clock())

        candidates: List[ProactiveRecommendation] = []
        for prediction in predictions:
            candidates.extend(self._from_prediction(prediction, created_at))
        for pattern in seasonal_patterns:
            candidates.extend(self._from_seasonal_pattern(pattern, created_at))
        for warning in early_warnings:
            candidates.extend(self._from_early_warning(warning, created_at))

        candidates.sort(key=lambda r: (severity_rank(r.prevention_priority), r.priority_score), reverse=True)
        unique = deduplicate(candidates)

        logger.debug("Proactive recommendations: %d candidates, %d unique", len(candidates), len(unique))
        return unique[:cfg['max_recommendations']]

    def _proactive_score(self, prediction: PerformancePrediction) -> float:
        cfg = get_section('PROACTIVE', self.thresholds)
        value = prediction.predicted_value
        severity = next((score for ceiling, score in cfg['value_severity_bands'] if value < ceiling),
                        cfg['default_value_severity'])
        urgency = cfg['time_urgency'].get(label_of(prediction.time_horizon), 1.0)
        return cfg['base_score'] + prediction.probability_of_issue * cfg['probability_weight'] + severity + urgency

    def _from_prediction(self, prediction: PerformancePrediction, created_at: str) -> List[ProactiveRecommendation]:
        cfg = get_section('PROACTIVE', self.thresholds)
        if prediction.probability_of_issue <= cfg['min_probability']:
            return []

        value = prediction.predicted_value
        common = dict(
            insight_id=f"prediction_{prediction.prediction_id}",
            effort=Effort.MEDIUM,
            priority_score=self._proactive_score(prediction),
            created_at=created_at,
            predicted_impact_date=format_timestamp(
                self.clock() + timedelta(hours=horizon_hours(prediction.time_horizon, self.thresholds))),
            prevention_priority=classify_issue_severity(prediction.probability_of_issue, value),
        )
        recommendations = []

        if 'memory' in prediction.metric_type and value > cfg['memory_value_mb']:
            recommendations.append(ProactiveRecommendation(
                id=self._new_id(),
                title="Proactive Memory Optimization",
                description=(f"Prediction models indicate potential memory issues. Current trend suggests "
                             f"memory usage will reach {value:.0f}MB. Implement preventive measures now."),
                category=RecommendationCategory.MEMORY,
                impact=Impact.HIGH,
                actionable_steps=[
                    "Implement memory cleanup routines for predicted problem areas",
                    "Add memory usage monitoring with alerts at 75% of predicted spike",
                    "Review and optimize data structures in memory-intensive operations",
                    "Implement progressive loading to reduce memory pressure during peak times",
                ],
                estimated_improvement="Prevent predicted memory issues entirely",
                related_metrics=["memory_usage", "performance_score"],
                implementation_time="4-6 hours",
                early_warning_threshold=value * 0.8,
                monitoring_recommendations=[
                    "Set up memory usage alerts at 80% of predicted peak",
                    "Monitor memory allocation patterns hourly",
                    "Track memory cleanup effectiveness",
                    "Review memory-intensive operations during predicted timeframe",
                ],
                **common,
            ))

        if 'fps' in prediction.metric_type and value < cfg['fps_value']:
            recommendations.append(ProactiveRecommendation(
                id=self._new_id(),
                title="Proactive FPS Optimization",
                description=(f"Frame rate prediction indicates potential performance degradation. "
                             f"FPS may drop to {value:.1f}. Take preventive action now."),
                category=RecommendationCategory.PERFORMANCE,
                impact=Impact.HIGH if value < 30 else Impact.MEDIUM,
                actionable_steps=[
                    "Optimize rendering pipeline before predicted degradation occurs",
                    "Implement frame rate monitoring with early warning alerts",
                    "Review and optimize draw calls and GPU-intensive operations",
                    "Prepare adaptive quality settings for predicted low-performance periods",
                ],
                estimated_improvement=f"Maintain FPS above {max(45.0, value + 15):.0f}",
                related_metrics=["fps", "rendering_performance"],
                implementation_time="2-4 hours",
                early_warning_threshold=value + 10,
                monitoring_recommendations=[
                    "Monitor FPS metrics every 15 minutes during predicted timeframe",
                    "Set up automated alerts for FPS drops below 50",
                    "Track rendering performance optimization effectiveness",
                    "Monitor GPU usage patterns leading up to predicted issue",
                ],
                **common,
            ))

        route = prediction.route_pattern
        if route and value < cfg['route_score']:
            recommendations.append(ProactiveRecommendation(
                id=self._new_id(),
                title=f"Proactive Route Optimization: {route}",
                description=(f"Route performance prediction indicates potential issues for {route}. "
                             f"Performance score may drop to {value:.0f}. Optimize before impact occurs."),
                category=RecommendationCategory.PERFORMANCE,
                impact=Impact.MEDIUM,
                actionable_steps=[
                    f"Implement preloading for {route} route",
                    "Add route-specific performance monitoring",
                    "Optimize critical path for this route",
                    "Consider caching strategies for route-specific data",
                ],
                estimated_improvement="Prevent route performance degradation",
                related_metrics=["route_performance", "screen_duration"],
                implementation_time="3-5 hours",
                early_warning_threshold=value + 15,
                monitoring_recommendations=[
                    f"Monitor {route} route performance closely",
                    "Set up route-specific performance alerts",
                    "Track user experience metrics for this route",
                    "Monitor resource usage patterns specific to this route",
                ],
                **common,
            ))

        return recommendations

    def _from_seasonal_pattern(self, pattern: SeasonalPattern, created_at: str) -> List[ProactiveRecommendation]:
        cfg = get_section('PROACTIVE', self.thresholds)
        if not (pattern.confidence > cfg['seasonal_confidence']
                and pattern.seasonal_strength > cfg['seasonal_strength']
                and pattern.next_predicted_peak):
            return []

        hours = (parse_timestamp(pattern.next_predicted_peak) - self.clock()).total_seconds() / 3600.0
        if not 0 < hours <= cfg['seasonal_window_hours']:
            return []

        pattern_type = PatternType(label_of(pattern.pattern_type))
        metric = pattern.metric_type
        return [ProactiveRecommendation(
            id=self._new_id(),
            insight_id=f"seasonal_{pattern.pattern_id}",
            title=f"Prepare for Seasonal {pattern_type.value.title()} Peak",
            description=(f"Seasonal analysis predicts {metric} peak {_SEASON_WORDS[pattern_type]}. "
                         "Prepare optimization strategies now."),
            category=RecommendationCategory.PERFORMANCE,
            impact=Impact.HIGH if pattern.seasonal_strength > 0.5 else Impact.MEDIUM,
            effort=Effort.LOW,
            priority_score=cfg['seasonal_base_score'] + pattern.confidence,
            actionable_steps=[
                f"Prepare for increased {metric} during {pattern_type.value} peak",
                "Review server capacity for predicted peak period",
                "Pre-optimize high-traffic areas identified in seasonal patterns",
                "Set up enhanced monitoring during predicted peak times",
            ],
            estimated_improvement="Prevent 20-30% performance degradation during seasonal peaks",
            related_metrics=[metric],
            implementation_time="1-2 hours",
            created_at=created_at,
            predicted_impact_date=pattern.next_predicted_peak,
            prevention_priority=Severity.MEDIUM,
            early_warning_threshold=pattern.amplitude * 0.7,
            monitoring_recommendations=[
                f"Monitor {metric} closely during predicted peak period",
                "Set up automated scaling during peak windows",
                "Track seasonal optimization effectiveness",
                "Monitor user experience during seasonal variations",
            ],
            seasonal_context={
                'pattern_type': (PatternType.DAILY if pattern_type == PatternType.HOURLY else pattern_type).value,
                'next_occurrence': pattern.next_predicted_peak,
                'historical_impact': pattern.amplitude,
            },
        )]

    def _from_early_warning(self, warning: EarlyWarningAlert, created_at: str) -> List[ProactiveRecommendation]:
        cfg = get_section('PROACTIVE', self.thresholds)
        if warning.confidence <= cfg['warning_confidence']:
            return []

        kind = label_of(warning.type)
        critical = warning.severity == Severity.CRITICAL
        score = (cfg['warning_base_score'] + severity_rank(warning.severity)
                 + warning.confidence * 2 + time_urgency(warning.time_to_issue))

        return [ProactiveRecommendation(
            id=self._new_id(),
            insight_id=f"early_warning_{warning.id}",
            title=f"Early Warning: {_title_words(kind)}",
            description=(f"Early warning system detected potential {kind.replace('_', ' ')} "
                         f"in {warning.time_to_issue}. Take preventive action now."),
            category=_category_of(kind, RecommendationCategory.RENDERING),
            impact=Impact.HIGH if critical else Impact.MEDIUM,
            effort=Effort.MEDIUM,
            priority_score=score,
            actionable_steps=list(warning.prevention_recommendations),
            estimated_improvement="Prevent predicted performance issues",
            related_metrics=list(_ALERT_METRICS.get(kind, ["performance_score"])),
            implementation_time="Immediate" if critical else "2-4 hours",
            created_at=created_at,
            predicted_impact_date=warning.predicted_issue_date,
            prevention_priority=Severity.CRITICAL if critical else Severity.HIGH,
            early_warning_threshold=0.8,
            monitoring_recommendations=list(warning.monitoring_suggestions),
        )]
