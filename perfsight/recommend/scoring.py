"""
Recommendation Priority Scoring.

Three formulas, one per pipeline:

    insight:       (impact*0.3 + effort*0.2 + confidence*0.2 + severity*0.2
                    + rule_weight*0.1) * context_multiplier * device_factor
    opportunity:   (impact + complexity + min(3, improvement/20)) / 3
    route:         (priority + complexity) / 2 + budget/device/preloading/caching boosts

Effort and complexity weights are inverted: less work scores higher.
"""

from typing import Any, Mapping, Optional

from perfsight.config.thresholds import get_section
from perfsight.models.base import label_of
from perfsight.models.enums import CachingPotential, RecommendationCategory, RouteOptimizationType
from perfsight.models.insights import PerformanceInsight
from perfsight.models.recommendations import RecommendationDraft, RecommendationRule
from perfsight.models.results import OptimizationOpportunity, PerformanceSummary
from perfsight.models.routes import RouteOptimization, RouteOptimizationAnalysis


def context_multiplier(
    draft: RecommendationDraft,
    insight: PerformanceInsight,
    context: PerformanceSummary,
    thresholds: Optional[Mapping[str, Any]] = None,
) -> float:
    """Boosts for critically low fps, high memory and heavily used routes."""
    cfg = get_section('PRIORITY', thresholds)
    multiplier = 1.0

    if context.avg_fps < cfg['low_fps'] and draft.category == RecommendationCategory.RENDERING:
        multiplier += cfg['low_fps_boost']
    if context.avg_memory > cfg['high_memory_mb'] and draft.category == RecommendationCategory.MEMORY:
        multiplier += cfg['high_memory_boost']

    route = insight.data_context.route_context
    if route is not None:
        if route.sessions_count > cfg['route_sessions']:
            multiplier += cfg['route_sessions_boost']
        if route.avg_screen_duration > cfg['route_duration_ms']:
            multiplier += cfg['route_duration_boost']
        if route.unique_devices > cfg['route_devices']:
            multiplier += cfg['route_devices_boost']

    if label_of(draft.category).startswith('route_'):
        multiplier += cfg['route_category_boost']

    return multiplier


def calculate_priority_score(
    draft: RecommendationDraft,
    insight: PerformanceInsight,
    context: PerformanceSummary,
    rule: RecommendationRule,
    thresholds: Optional[Mapping[str, Any]] = None,
) -> float:
    """
    Priority of a rule-built recommendation.

    Args:
        draft: What the rule built
        insight: The insight the rule matched
        context: Global averages and device count
        rule: The matching rule (for its priority weight)
        thresholds: Optional threshold sections; uses ``PRIORITY``

    Returns:
        Non-negative score; higher impact and lower effort always score higher
        with everything else equal
    """
    cfg = get_section('PRIORITY', thresholds)
    w = cfg['factor_weights']

    base = (
        cfg['impact_weights'].get(label_of(draft.impact), 1) * w['impact']
        + cfg['effort_weights'].get(label_of(draft.effort), 1) * w['effort']
        + insight.confidence * w['confidence']
        + cfg['severity_weights'][label_of(insight.severity)] * w['severity']
        + rule.priority_weight * w['rule']
    )
    device_factor = min(cfg['max_device_factor'], 1 + context.device_count / cfg['device_divisor'])

    return base * context_multiplier(draft, insight, context, thresholds) * device_factor


def calculate_opportunity_priority_score(
    opportunity: OptimizationOpportunity,
    thresholds: Optional[Mapping[str, Any]] = None,
) -> float:
    cfg = get_section('PRIORITY', thresholds)
    impact = cfg['impact_weights'][label_of(opportunity.potential_impact)]
    complexity = cfg['complexity_weights'][label_of(opportunity.complexity)]
    improvement = min(cfg['max_improvement_weight'],
                      opportunity.improvement_potential / cfg['improvement_divisor'])
    return (impact + complexity + improvement) / 3


def calculate_route_optimization_priority_score(
    optimization: RouteOptimization,
    analysis: RouteOptimizationAnalysis,
    thresholds: Optional[Mapping[str, Any]] = None,
) -> float:
    cfg = get_section('PRIORITY', thresholds)
    score = (cfg['impact_weights'][label_of(optimization.priority)]
             + cfg['complexity_weights'][label_of(optimization.implementation_complexity)]) / 2

    score += cfg['budget_boosts'].get(label_of(analysis.performance_budget_status), 0.0)
    if analysis.device_compatibility_issues:
        score += cfg['device_issue_boost']
    if analysis.preloading_opportunity and optimization.type == RouteOptimizationType.PRELOADING:
        score += cfg['preloading_boost']
    if analysis.caching_potential == CachingPotential.HIGH and optimization.type == RouteOptimizationType.CACHING:
        score += cfg['caching_boost']

    return score
