"""
perfsight result and input types.
"""

from perfsight.models.enums import *  # noqa: F401,F403
from perfsight.models.results import (
    AnomalyRecord,
    CorrelationResult,
    MannKendallResult,
    MetricSample,
    OptimizationOpportunity,
    PerformanceScore,
    PerformanceSummary,
    RegressionResult,
    SeasonalPattern,
    StatisticalResult,
    TrendAnalysis,
)
from perfsight.models.insights import (
    DataContext,
    InsightsReport,
    PerformanceInsight,
    RouteContext,
)
from perfsight.models.recommendations import (
    PerformanceRecommendation,
    ProactiveRecommendation,
    RecommendationDraft,
    RecommendationRule,
)
from perfsight.models.routes import (
    DeviceRouteCompatibility,
    RouteOptimization,
    RouteOptimizationAnalysis,
    RoutePerformanceAnalysis,
    RoutePerformanceData,
    RouteSession,
)
from perfsight.models.predictions import (
    EarlyWarningAlert,
    PerformancePrediction,
    RoutePerformancePrediction,
)
