"""
Recommendation Rules
====================

Static rule table evaluated in order against every insight. Each rule is a
predicate over a PerformanceInsight, a builder producing a
RecommendationDraft, a priority weight and category tags.

Rule groups:
    fps          - declining trend, critical/high anomalies
    memory       - high usage, upward trend
    cpu          - high usage
    general      - multiple issues, low-end devices
    route        - preloading, low-end route, budget, caching
"""

from perfsight.models.enums import Effort, Impact, InsightCategory, InsightType, RecommendationCategory, Severity
from perfsight.models.recommendations import RecommendationDraft, RecommendationRule


def _route_duration(insight) -> float:
    route = insight.data_context.route_context
    return route.avg_screen_duration if route is not None else 0.0


def _route_sessions(insight) -> int:
    route = insight.data_context.route_context
    return route.sessions_count if route is not None else 0


# =============================================================================
# FPS
# =============================================================================

def _fps_trend_decline(insight) -> RecommendationDraft:
    return RecommendationDraft(
        title="Optimize Rendering Pipeline",
        description=("FPS performance is declining. Focus on rendering optimizations "
                     "to restore smooth performance."),
        category=RecommendationCategory.RENDERING,
        impact=Impact.HIGH if insight.severity == Severity.CRITICAL else Impact.MEDIUM,
        effort=Effort.MEDIUM,
        actionable_steps=[
            "Profile GPU usage during heavy scenes to identify bottlenecks",
            "Implement object pooling for frequently spawned game objects",
            "Review and optimize texture compression settings",
            "Reduce particle effects complexity or implement LOD system",
            "Optimize shader complexity, especially fragment shaders",
            "Consider implementing frame rate limiting for battery savings",
        ],
        estimated_improvement="15-25% FPS improvement",
        related_metrics=["fps", "gpu_usage"],
        implementation_time="2-3 development days",
    )


def _fps_anomaly_critical(insight) -> RecommendationDraft:
    return RecommendationDraft(
        title="Address Critical FPS Drop",
        description=(f"Critical FPS anomaly detected ({insight.data_context.value:.1f} FPS). "
                     "Immediate investigation required."),
        category=RecommendationCategory.PERFORMANCE,
        impact=Impact.HIGH,
        effort=Effort.HIGH,
        actionable_steps=[
            "Immediately profile the affected session or device",
            "Check for memory leaks causing performance degradation",
            "Review recent code changes that might impact rendering",
            "Implement emergency frame rate monitoring and alerts",
            "Consider rolling back recent changes if performance regression identified",
        ],
        estimated_improvement="Restore normal FPS performance",
        related_metrics=["fps", "memory_usage", "cpu_usage"],
        implementation_time="1-2 days (urgent)",
    )


def _fps_anomaly_high(insight) -> RecommendationDraft:
    return RecommendationDraft(
        title="Investigate FPS Performance Anomaly",
        description=(f"High FPS anomaly detected ({insight.data_context.value:.1f} FPS). "
                     "Performance investigation recommended."),
        category=RecommendationCategory.PERFORMANCE,
        impact=Impact.MEDIUM,
        effort=Effort.MEDIUM,
        actionable_steps=[
            "Profile the affected session to identify performance bottlenecks",
            "Check for memory pressure during the anomaly period",
            "Review GPU and CPU usage patterns",
            "Implement additional monitoring for similar anomalies",
            "Consider performance optimization based on findings",
        ],
        estimated_improvement="10-15% FPS stability improvement",
        related_metrics=["fps", "memory_usage", "cpu_usage"],
        implementation_time="2-3 hours",
    )


# =============================================================================
# MEMORY & CPU
# =============================================================================

def _memory_high_usage(insight) -> RecommendationDraft:
    value = insight.data_context.value
    return RecommendationDraft(
        title="Implement Memory Optimization Strategy",
        description=(f"High memory usage detected ({value:.0f}MB). "
                     "Optimize memory allocation and usage patterns."),
        category=RecommendationCategory.MEMORY,
        impact=Impact.HIGH if value > 600 else Impact.MEDIUM,
        effort=Effort.MEDIUM,
        actionable_steps=[
            "Profile memory allocation patterns to identify hotspots",
            "Implement texture streaming to reduce memory footprint",
            "Review asset loading logic and implement proper unloading",
            "Optimize data structures and reduce redundant data storage",
            "Implement memory pooling for frequently allocated objects",
            "Consider asset compression and format optimization",
        ],
        estimated_improvement="20-40% memory reduction",
        related_metrics=["memory_usage", "fps"],
        implementation_time="3-5 development days",
    )


def _memory_trend_increase(insight) -> RecommendationDraft:
    return RecommendationDraft(
        title="Proactive Memory Leak Prevention",
        description=("Memory usage is trending upward. Implement preventive measures "
                     "to avoid future memory issues."),
        category=RecommendationCategory.MEMORY,
        impact=Impact.MEDIUM,
        effort=Effort.LOW,
        actionable_steps=[
            "Set up automated memory monitoring and alerting",
            "Implement memory usage logging for trend analysis",
            "Review code for potential memory leaks in recent changes",
            "Add memory pressure handling for low-memory devices",
            "Implement background memory cleanup routines",
        ],
        estimated_improvement="Prevent future memory issues",
        related_metrics=["memory_usage"],
        implementation_time="1-2 development days",
    )


def _cpu_high_usage(insight) -> RecommendationDraft:
    value = insight.data_context.value
    return RecommendationDraft(
        title="Optimize CPU-Intensive Operations",
        description=(f"High CPU usage detected ({value:.1f}%). "
                     "Optimize computational efficiency."),
        category=RecommendationCategory.CPU,
        impact=Impact.HIGH if value > 90 else Impact.MEDIUM,
        effort=Effort.MEDIUM,
        actionable_steps=[
            "Profile CPU usage to identify computational hotspots",
            "Optimize algorithms and data processing loops",
            "Implement multithreading for CPU-intensive tasks",
            "Consider moving heavy computations to background threads",
            "Optimize update loops and reduce unnecessary calculations",
            "Implement frame rate adaptive processing",
        ],
        estimated_improvement="15-30% CPU usage reduction",
        related_metrics=["cpu_usage", "battery_life"],
        implementation_time="2-4 development days",
    )


# =============================================================================
# GENERAL
# =============================================================================

def _multiple_issues(insight) -> RecommendationDraft:
    return RecommendationDraft(
        title="Comprehensive Performance Audit",
        description=("Multiple performance issues detected. Conduct comprehensive "
                     "optimization review."),
        category=RecommendationCategory.PERFORMANCE,
        impact=Impact.HIGH,
        effort=Effort.HIGH,
        actionable_steps=[
            "Conduct full performance profiling session",
            "Create performance optimization roadmap",
            "Prioritize fixes by user impact and implementation effort",
            "Implement performance monitoring and alerting",
            "Set up automated performance testing pipeline",
            "Consider performance budgets for future development",
        ],
        estimated_improvement="Comprehensive performance improvement",
        related_metrics=["fps", "memory_usage", "cpu_usage"],
        implementation_time="1-2 weeks",
    )


def _low_end_device(insight) -> RecommendationDraft:
    return RecommendationDraft(
        title="Low-End Device Compatibility",
        description="Optimize performance for lower-end devices to ensure broad compatibility.",
        category=RecommendationCategory.PERFORMANCE,
        impact=Impact.MEDIUM,
        effort=Effort.MEDIUM,
        actionable_steps=[
            "Implement device-tier based quality settings",
            "Add automatic graphics quality adjustment",
            "Reduce asset quality on lower-end devices",
            "Implement aggressive memory management for limited RAM",
            "Consider feature reduction for very low-end devices",
        ],
        estimated_improvement="Improved compatibility across device tiers",
        related_metrics=["fps", "memory_usage"],
        implementation_time="3-5 development days",
    )


# =============================================================================
# ROUTES
# =============================================================================

def _route_preloading(insight) -> RecommendationDraft:
    return RecommendationDraft(
        title="Implement Route Preloading",
        description="Long-duration route detected. Implement preloading for better UX.",
        category=RecommendationCategory.ROUTE_NAVIGATION,
        impact=Impact.MEDIUM,
        effort=Effort.MEDIUM,
        actionable_steps=[
            "Implement route component preloading for heavy screens",
            "Add skeleton loaders for route transitions",
            "Cache route data during idle time",
            "Implement progressive loading for route assets",
        ],
        estimated_improvement="30-50% reduction in perceived load time",
        related_metrics=["screen_duration", "user_experience"],
        implementation_time="2-3 development days",
    )


def _low_end_route(insight) -> RecommendationDraft:
    return RecommendationDraft(
        title="Optimize Route for Low-End Devices",
        description=("Route performs poorly on low-end devices. Implement "
                     "device-specific optimizations."),
        category=RecommendationCategory.ROUTE_DEVICE_OPTIMIZATION,
        impact=Impact.HIGH,
        effort=Effort.MEDIUM,
        actionable_steps=[
            "Reduce asset quality on low-end devices for this route",
            "Implement simplified UI components for resource-constrained devices",
            "Add device-specific route loading strategies",
            "Consider alternative route flows for low-end devices",
        ],
        estimated_improvement="Route-specific improvements: 40-60%",
        related_metrics=["fps", "memory_usage", "device_compatibility"],
        implementation_time="3-5 development days",
    )


def _route_budget_exceeded(insight) -> RecommendationDraft:
    return RecommendationDraft(
        title="Route Exceeds Performance Budget",
        description="Route loading time exceeds performance budget. Optimization required.",
        category=RecommendationCategory.ROUTE_PERFORMANCE_BUDGET,
        impact=Impact.HIGH,
        effort=Effort.MEDIUM,
        actionable_steps=[
            "Set performance budget targets for this route",
            "Implement route performance monitoring",
            "Add automated alerts for budget violations",
            "Create route performance regression testing",
        ],
        estimated_improvement="Restore within performance budget",
        related_metrics=["screen_duration", "performance_budget"],
        implementation_time="1-2 development days",
    )


def _route_caching(insight) -> RecommendationDraft:
    return RecommendationDraft(
        title="Implement Route Caching Strategy",
        description="High-traffic route detected. Implement caching for improved performance.",
        category=RecommendationCategory.ROUTE_CACHING,
        impact=Impact.MEDIUM,
        effort=Effort.LOW,
        actionable_steps=[
            "Implement route-level data caching",
            "Add component-level memoization for route components",
            "Cache route transition animations",
            "Implement intelligent cache invalidation strategies",
        ],
        estimated_improvement="20-35% performance improvement for repeat visits",
        related_metrics=["screen_duration", "memory_usage"],
        implementation_time="1-2 development days",
    )


DEFAULT_RULES = (
    RecommendationRule(
        id="fps_trend_decline",
        name="FPS Declining Trend",
        description="Recommendations for declining FPS performance",
        condition=lambda i: i.type == InsightType.TREND_DECLINE and i.category == InsightCategory.PERFORMANCE,
        build=_fps_trend_decline,
        priority_weight=1.2,
        tags=("performance", "rendering"),
    ),
    RecommendationRule(
        id="fps_anomaly_critical",
        name="Critical FPS Anomaly",
        description="Immediate action for critical FPS drops",
        condition=lambda i: (i.type == InsightType.ANOMALY and i.category == InsightCategory.PERFORMANCE
                             and i.severity == Severity.CRITICAL),
        build=_fps_anomaly_critical,
        priority_weight=2.0,
        tags=("performance", "critical"),
    ),
    RecommendationRule(
        id="fps_anomaly_high",
        name="High FPS Anomaly",
        description="Investigation needed for significant FPS drops",
        condition=lambda i: (i.type == InsightType.ANOMALY and i.category == InsightCategory.PERFORMANCE
                             and i.severity == Severity.HIGH),
        build=_fps_anomaly_high,
        priority_weight=1.5,
        tags=("performance",),
    ),
    RecommendationRule(
        id="memory_high_usage",
        name="High Memory Usage",
        description="Recommendations for excessive memory consumption",
        condition=lambda i: (i.category == InsightCategory.MEMORY
                             and i.type in (InsightType.ALERT, InsightType.TREND_DECLINE)),
        build=_memory_high_usage,
        priority_weight=1.1,
        tags=("memory", "optimization"),
    ),
    RecommendationRule(
        id="memory_trend_increase",
        name="Memory Usage Trending Up",
        description="Proactive memory optimization for increasing usage",
        condition=lambda i: i.type == InsightType.TREND_DECLINE and i.category == InsightCategory.MEMORY,
        build=_memory_trend_increase,
        priority_weight=0.8,
        tags=("memory", "preventive"),
    ),
    RecommendationRule(
        id="cpu_high_usage",
        name="High CPU Usage",
        description="Recommendations for excessive CPU consumption",
        condition=lambda i: i.category == InsightCategory.CPU and i.data_context.value > 70,
        build=_cpu_high_usage,
        priority_weight=1.0,
        tags=("cpu", "performance"),
    ),
    RecommendationRule(
        id="multiple_issues",
        name="Multiple Performance Issues",
        description="Holistic approach for multiple performance problems",
        condition=lambda i: i.type == InsightType.ALERT and i.impact == Impact.HIGH,
        build=_multiple_issues,
        priority_weight=1.5,
        tags=("performance", "comprehensive"),
    ),
    RecommendationRule(
        id="low_end_device_optimization",
        name="Low-End Device Optimization",
        description="Specific optimizations for lower-end devices",
        condition=lambda i: (i.category in (InsightCategory.PERFORMANCE, InsightCategory.MEMORY)
                             and i.data_context.value is not None and i.confidence > 0.7),
        build=_low_end_device,
        priority_weight=0.7,
        tags=("compatibility", "optimization"),
    ),
    RecommendationRule(
        id="route_preloading_optimization",
        name="Route Preloading Optimization",
        description="Implement preloading for heavy routes",
        condition=lambda i: i.type == InsightType.ROUTE_PERFORMANCE_ANOMALY and _route_duration(i) > 3000,
        build=_route_preloading,
        priority_weight=1.3,
        tags=("route_navigation", "performance"),
    ),
    RecommendationRule(
        id="low_end_device_route_optimization",
        name="Low-End Device Route Optimization",
        description="Optimize routes for low-end devices",
        condition=lambda i: i.type == InsightType.ROUTE_PERFORMANCE_ANOMALY and _route_duration(i) > 5000,
        build=_low_end_route,
        priority_weight=1.4,
        tags=("route_device_optimization", "compatibility"),
    ),
    RecommendationRule(
        id="route_performance_budget_exceeded",
        name="Route Performance Budget Exceeded",
        description="Route exceeds performance budget thresholds",
        condition=lambda i: (i.type == InsightType.ROUTE_PERFORMANCE_DEGRADATION
                             or (i.type == InsightType.ROUTE_PERFORMANCE_ANOMALY and _route_duration(i) > 5000)),
        build=_route_budget_exceeded,
        priority_weight=1.6,
        tags=("route_performance_budget", "monitoring"),
    ),
    RecommendationRule(
        id="route_caching_opportunity",
        name="Route Caching Opportunity",
        description="Implement caching strategies for frequently accessed routes",
        condition=lambda i: i.type == InsightType.ROUTE_VS_GLOBAL_PERFORMANCE and _route_sessions(i) > 50,
        build=_route_caching,
        priority_weight=1.1,
        tags=("route_caching", "optimization"),
    ),
)


def get_rule(rule_id: str) -> RecommendationRule:
    """Look up a default rule by id."""
    for rule in DEFAULT_RULES:
        if rule.id == rule_id:
            return rule
    available = ", ".join(r.id for r in DEFAULT_RULES)
    raise KeyError(f"Unknown rule: '{rule_id}'. Available: {available}")
