"""
Route Optimization Analysis.

Per-route checks over pre-aggregated route data: preloading, caching,
device-tier compatibility and screen-duration budget. Each analysis carries
the route optimizations it implies; the recommendation engine scores them.
"""

from typing import Any, Dict, List, Mapping, Optional

from perfsight.config.thresholds import get_section
from perfsight.models.enums import (
    BudgetStatus,
    CachingPotential,
    Complexity,
    DeviceTier,
    Impact,
    RouteOptimizationType,
)
from perfsight.models.routes import (
    DeviceRouteCompatibility,
    RouteOptimization,
    RouteOptimizationAnalysis,
    RoutePerformanceAnalysis,
    RoutePerformanceData,
)

# (score offset, floor) per tier, applied to the route's performance score
_TIER_BASELINE = {
    DeviceTier.MID_RANGE: (15, 50),
    DeviceTier.LOW_END: (30, 30),
}
_HIGH_MEMORY_PENALTY = {DeviceTier.LOW_END: 25, DeviceTier.MID_RANGE: 10}
_LOW_FPS_PENALTY = {DeviceTier.LOW_END: 20, DeviceTier.MID_RANGE: 10, DeviceTier.HIGH_END: 5}


def identify_preloading_opportunity(
    route: RoutePerformanceData,
    thresholds: Optional[Mapping[str, Any]] = None,
) -> bool:
    """Slow routes, or busy routes that are moderately slow, benefit from preloading."""
    cfg = get_section('ROUTES', thresholds)
    duration = route.mean_screen_duration()
    busy = route.total_sessions > cfg['high_traffic_sessions']
    return duration > cfg['slow_duration_ms'] or (busy and duration > cfg['traffic_duration_ms'])


def assess_caching_potential(
    route: RoutePerformanceData,
    thresholds: Optional[Mapping[str, Any]] = None,
) -> CachingPotential:
    cfg = get_section('ROUTES', thresholds)
    if route.total_sessions > cfg['caching_high_sessions'] and \
            route.sessions_per_device() > cfg['caching_sessions_per_device']:
        return CachingPotential.HIGH
    if route.total_sessions > cfg['caching_medium_sessions'] and \
            route.avg_memory < cfg['caching_memory_ceiling_mb']:
        return CachingPotential.MEDIUM
    return CachingPotential.LOW


def assess_device_route_compatibility(
    route: RoutePerformanceData,
    thresholds: Optional[Mapping[str, Any]] = None,
) -> List[DeviceRouteCompatibility]:
    """
    Estimated per-tier scores for a route; tiers below the floor are issues.

    Tier scores are derived from the route's overall score: high-end devices
    start at 80, mid-range at max(50, score - 15), low-end at
    max(30, score - 30). High memory and low fps cost lower tiers more.
    """
    cfg = get_section('ROUTES', thresholds)
    issues = []
    for tier in (DeviceTier.HIGH_END, DeviceTier.MID_RANGE, DeviceTier.LOW_END):
        score = 80.0
        if tier in _TIER_BASELINE:
            offset, floor = _TIER_BASELINE[tier]
            score = max(floor, route.performance_score - offset)
        if route.avg_memory > cfg['high_memory_mb']:
            score -= _HIGH_MEMORY_PENALTY.get(tier, 0)
        if route.avg_fps < cfg['low_fps']:
            score -= _LOW_FPS_PENALTY[tier]

        if score < cfg['compatibility_floor']:
            issues.append(DeviceRouteCompatibility(
                device_tier=tier,
                route_pattern=route.route_pattern,
                performance_score=score,
                optimization_priority=100 - score,
            ))
    return issues


def calculate_performance_budget_status(
    route: RoutePerformanceData,
    budget_ms: Optional[float] = None,
    thresholds: Optional[Mapping[str, Any]] = None,
) -> BudgetStatus:
    cfg = get_section('ROUTES', thresholds)
    if budget_ms is None:
        budget_ms = cfg['budget_ms']
    duration = route.mean_screen_duration()
    if duration > budget_ms:
        return BudgetStatus.EXCEEDED
    if duration > budget_ms * cfg['approaching_ratio']:
        return BudgetStatus.APPROACHING
    return BudgetStatus.WITHIN_BUDGET


def generate_route_navigation_recommendations(analysis: RouteOptimizationAnalysis) -> List[RouteOptimization]:
    """Route optimizations implied by one route analysis."""
    optimizations = []

    if analysis.preloading_opportunity:
        optimizations.append(RouteOptimization(
            type=RouteOptimizationType.PRELOADING,
            priority=Impact.HIGH,
            description="Implement route preloading to reduce perceived load time",
            estimated_impact="30-50% reduction in perceived load time",
            implementation_complexity=Complexity.MODERATE,
        ))

    if analysis.caching_potential == CachingPotential.HIGH:
        optimizations.append(RouteOptimization(
            type=RouteOptimizationType.CACHING,
            priority=Impact.MEDIUM,
            description="Implement aggressive caching strategy for high-traffic route",
            estimated_impact="20-35% performance improvement for repeat visits",
            implementation_complexity=Complexity.SIMPLE,
        ))
    elif analysis.caching_potential == CachingPotential.MEDIUM:
        optimizations.append(RouteOptimization(
            type=RouteOptimizationType.CACHING,
            priority=Impact.LOW,
            description="Consider selective caching for route components",
            estimated_impact="10-20% performance improvement for repeat visits",
            implementation_complexity=Complexity.SIMPLE,
        ))

    if analysis.device_compatibility_issues:
        low_end = any(i.device_tier == DeviceTier.LOW_END for i in analysis.device_compatibility_issues)
        optimizations.append(RouteOptimization(
            type=RouteOptimizationType.DEVICE_OPTIMIZATION,
            priority=Impact.HIGH if low_end else Impact.MEDIUM,
            description="Optimize route for device compatibility issues",
            estimated_impact="40-60% improvement for affected device tiers",
            implementation_complexity=Complexity.MODERATE,
        ))

    if analysis.performance_budget_status == BudgetStatus.EXCEEDED:
        optimizations.append(RouteOptimization(
            type=RouteOptimizationType.PERFORMANCE_BUDGET,
            priority=Impact.HIGH,
            description="Route exceeds performance budget - immediate optimization required",
            estimated_impact="Restore within performance budget",
            implementation_complexity=Complexity.MODERATE,
        ))
    elif analysis.performance_budget_status == BudgetStatus.APPROACHING:
        optimizations.append(RouteOptimization(
            type=RouteOptimizationType.PERFORMANCE_BUDGET,
            priority=Impact.MEDIUM,
            description="Route approaching performance budget - preventive optimization recommended",
            estimated_impact="Maintain within performance budget",
            implementation_complexity=Complexity.SIMPLE,
        ))

    return optimizations


def analyze_route_optimization_opportunities(
    route_data: RoutePerformanceAnalysis,
    thresholds: Optional[Mapping[str, Any]] = None,
) -> List[RouteOptimizationAnalysis]:
    """
    Analyze every route in ``route_data``.

    Args:
        route_data: Per-route aggregates with sessions
        thresholds: Optional threshold sections; uses ``ROUTES``

    Returns:
        One RouteOptimizationAnalysis per route, in input order
    """
    analyses = []
    for route in route_data.routes:
        analysis = RouteOptimizationAnalysis(
            route_pattern=route.route_pattern,
            preloading_opportunity=identify_preloading_opportunity(route, thresholds),
            caching_potential=assess_caching_potential(route, thresholds),
            device_compatibility_issues=assess_device_route_compatibility(route, thresholds),
            performance_budget_status=calculate_performance_budget_status(route, thresholds=thresholds),
        )
        analysis.optimization_recommendations = generate_route_navigation_recommendations(analysis)
        analyses.append(analysis)
    return analyses


def categorize_routes_by_performance(
    routes: List[RoutePerformanceData],
    thresholds: Optional[Mapping[str, Any]] = None,
) -> Dict[str, List[RoutePerformanceData]]:
    """Split routes into 'heavy', 'normal' and 'light' by screen duration and memory."""
    cfg = get_section('ROUTES', thresholds)
    groups: Dict[str, List[RoutePerformanceData]] = {'heavy': [], 'normal': [], 'light': []}
    for route in routes:
        duration = route.mean_screen_duration()
        if duration > cfg['heavy_duration_ms'] or route.avg_memory > cfg['heavy_memory_mb']:
            groups['heavy'].append(route)
        elif duration > cfg['normal_duration_ms'] or route.avg_memory > cfg['normal_memory_mb']:
            groups['normal'].append(route)
        else:
            groups['light'].append(route)
    return groups


def calculate_route_optimization_impact_score(
    route: RoutePerformanceData,
    optimization_type: RouteOptimizationType,
    thresholds: Optional[Mapping[str, Any]] = None,
) -> float:
    """Expected impact of one optimization on a route, 0-100."""
    cfg = get_section('ROUTES', thresholds)
    optimization_type = RouteOptimizationType(optimization_type)

    if optimization_type == RouteOptimizationType.PRELOADING:
        score = route.mean_screen_duration() / 1000.0 * route.total_sessions * 0.1
    elif optimization_type == RouteOptimizationType.CACHING:
        score = route.sessions_per_device() * 20
    elif optimization_type == RouteOptimizationType.DEVICE_OPTIMIZATION:
        poor = route.avg_fps < cfg['low_fps'] or route.avg_memory > cfg['high_memory_mb']
        score = 80.0 if poor else 40.0
    else:
        duration = route.mean_screen_duration()
        if duration > cfg['budget_ms']:
            score = 90.0
        elif duration > cfg['slow_duration_ms']:
            score = 60.0
        else:
            score = 30.0

    return float(max(0.0, min(100.0, score)))
