"""
Insight Types
=============

Categorized, severity-tagged observations derived from the statistical
results. Generated fresh per analysis run and never mutated.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from perfsight.models.base import Serializable
from perfsight.models.enums import Impact, InsightCategory, InsightType, Severity
from perfsight.models.results import (
    AnomalyRecord,
    CorrelationResult,
    OptimizationOpportunity,
    PerformanceScore,
    SeasonalPattern,
    TrendAnalysis,
)


@dataclass
class RouteContext(Serializable):
    route_name: str
    route_pattern: str
    affected_routes: List[str] = field(default_factory=list)
    sessions_count: int = 0
    unique_devices: int = 0
    avg_screen_duration: float = 0.0         # ms


@dataclass
class DataContext(Serializable):
    metric_type: str
    value: float = 0.0
    baseline: float = 0.0
    deviation: float = 0.0
    affected_sessions: Optional[int] = None
    affected_devices: Optional[int] = None
    time_window: Optional[Dict[str, str]] = None   # {'start': ..., 'end': ...}
    route_context: Optional[RouteContext] = None


@dataclass
class PerformanceInsight(Serializable):
    id: str
    type: InsightType
    severity: Severity
    title: str
    description: str
    confidence: float                        # 0-1
    impact: Impact
    category: InsightCategory
    detected_at: str
    data_context: DataContext


@dataclass
class InsightsReport(Serializable):
    """Assembled output of one analysis run."""
    id: str
    generated_at: str
    time_range: Dict[str, str]
    performance_score: PerformanceScore
    insights: List[PerformanceInsight] = field(default_factory=list)
    recommendations: List[Any] = field(default_factory=list)
    trends: Dict[str, TrendAnalysis] = field(default_factory=dict)
    anomalies: List[AnomalyRecord] = field(default_factory=list)
    optimization_opportunities: List[OptimizationOpportunity] = field(default_factory=list)
    correlations: List[CorrelationResult] = field(default_factory=list)
    seasonal_patterns: List[SeasonalPattern] = field(default_factory=list)
    summary: Dict[str, Any] = field(default_factory=dict)
    metadata: Dict[str, Any] = field(default_factory=dict)
