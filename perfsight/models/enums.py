"""
Classification Enums
====================

String-valued labels shared by every result type. Members compare equal to
their string values, so results serialize straight to JSON.
"""

from enum import Enum


class Severity(str, Enum):
    """Severity of an anomaly, insight or alert."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class TrendDirection(str, Enum):
    """Direction of a fitted linear trend."""
    UP = "up"
    DOWN = "down"
    STABLE = "stable"          # |slope| below the stable epsilon


class Significance(str, Enum):
    """Coarse confidence label for a trend."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class MannKendallTrend(str, Enum):
    """Outcome of the Mann-Kendall test."""
    INCREASING = "increasing"
    DECREASING = "decreasing"
    NO_TREND = "no_trend"


class Relationship(str, Enum):
    """Sign of a correlation."""
    POSITIVE = "positive"
    NEGATIVE = "negative"
    NONE = "none"              # |r| below the none cutoff


class Strength(str, Enum):
    """Magnitude bucket of a correlation."""
    WEAK = "weak"
    MODERATE = "moderate"
    STRONG = "strong"


class CorrelationSignificance(str, Enum):
    SIGNIFICANT = "significant"
    NOT_SIGNIFICANT = "not_significant"


class PatternType(str, Enum):
    """Cycle length of a seasonal pattern."""
    HOURLY = "hourly"          # minute-of-hour buckets
    DAILY = "daily"            # hour-of-day buckets
    WEEKLY = "weekly"          # day-of-week buckets


class Impact(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Effort(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Complexity(str, Enum):
    """Implementation complexity of an opportunity or route optimization."""
    SIMPLE = "simple"
    MODERATE = "moderate"
    COMPLEX = "complex"


class InsightType(str, Enum):
    TREND_DECLINE = "trend_decline"
    TREND_IMPROVEMENT = "trend_improvement"
    ANOMALY = "anomaly"
    OPPORTUNITY = "opportunity"
    ALERT = "alert"
    ROUTE_PERFORMANCE_ANOMALY = "route_performance_anomaly"
    ROUTE_VS_GLOBAL_PERFORMANCE = "route_vs_global_performance"
    ROUTE_PERFORMANCE_DEGRADATION = "route_performance_degradation"


class InsightCategory(str, Enum):
    PERFORMANCE = "performance"
    MEMORY = "memory"
    CPU = "cpu"
    RENDERING = "rendering"


class RecommendationCategory(str, Enum):
    PERFORMANCE = "performance"
    MEMORY = "memory"
    CPU = "cpu"
    RENDERING = "rendering"
    ROUTE_NAVIGATION = "route_navigation"
    ROUTE_CACHING = "route_caching"
    ROUTE_DEVICE_OPTIMIZATION = "route_device_optimization"
    ROUTE_PERFORMANCE_BUDGET = "route_performance_budget"


class RecommendationStatus(str, Enum):
    """Lifecycle state. Only PENDING is ever set here; the rest are driven externally."""
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    DISMISSED = "dismissed"


class OpportunityType(str, Enum):
    MEMORY_OPTIMIZATION = "memory_optimization"
    CPU_OPTIMIZATION = "cpu_optimization"
    FPS_IMPROVEMENT = "fps_improvement"


class RouteOptimizationType(str, Enum):
    PRELOADING = "preloading"
    CACHING = "caching"
    DEVICE_OPTIMIZATION = "device_optimization"
    PERFORMANCE_BUDGET = "performance_budget"


class CachingPotential(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class BudgetStatus(str, Enum):
    EXCEEDED = "exceeded"
    APPROACHING = "approaching"      # above 80% of budget
    WITHIN_BUDGET = "within_budget"


class DeviceTier(str, Enum):
    HIGH_END = "high_end"
    MID_RANGE = "mid_range"
    LOW_END = "low_end"


class PerformanceTrend(str, Enum):
    """Overall health direction, interpreted per metric polarity."""
    IMPROVING = "improving"
    STABLE = "stable"
    DECLINING = "declining"


class Grade(str, Enum):
    A = "A"
    B = "B"
    C = "C"
    D = "D"
    F = "F"


class TimeHorizon(str, Enum):
    ONE_HOUR = "1h"
    ONE_DAY = "24h"
    ONE_WEEK = "7d"
    ONE_MONTH = "30d"


class AlertType(str, Enum):
    PERFORMANCE_DEGRADATION = "performance_degradation"
    MEMORY_SPIKE = "memory_spike"
    FPS_DROP = "fps_drop"
    SEASONAL_PEAK = "seasonal_peak"


class PredictionBasis(str, Enum):
    TREND_ANALYSIS = "trend_analysis"
    SEASONAL_PATTERN = "seasonal_pattern"
    MODEL_ENSEMBLE = "model_ensemble"
    LINEAR_REGRESSION = "linear_regression"


# Ordinal weight of a severity-like label: critical > high > medium > low.
SEVERITY_RANK = {
    "critical": 4,
    "high": 3,
    "medium": 2,
    "low": 1,
}


def severity_rank(label) -> int:
    """Ordinal rank of a severity label or member."""
    return SEVERITY_RANK[Severity(label).value]
