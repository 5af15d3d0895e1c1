"""
Statistical Result Types
========================

Plain structured results returned by the primitives and core analyzers.
All are JSON-serializable through ``to_dict()``.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from perfsight.models.base import Serializable
from perfsight.models.enums import (
    CorrelationSignificance,
    Complexity,
    Grade,
    Impact,
    MannKendallTrend,
    OpportunityType,
    PatternType,
    PerformanceTrend,
    Relationship,
    Severity,
    Significance,
    Strength,
    TrendDirection,
)


@dataclass(frozen=True)
class MetricSample(Serializable):
    """One observation of one metric for one session/screen."""
    timestamp: str                           # ISO-8601
    value: float
    metric_type: Optional[str] = None        # fps, memory_usage, cpu_usage, load_time
    screen_name: Optional[str] = None
    session_id: Optional[str] = None
    device_id: Optional[str] = None


@dataclass
class PerformanceSummary(Serializable):
    """
    Global context used by the priority heuristics.

    ``cpu_inferred`` is True when ``avg_cpu`` was approximated from other
    metrics upstream rather than measured.
    """
    avg_fps: float = 0.0
    avg_memory: float = 0.0                  # MB
    avg_cpu: float = 0.0                     # percent
    device_count: int = 0
    total_sessions: int = 0
    cpu_inferred: bool = False


@dataclass
class StatisticalResult(Serializable):
    mean: float = 0.0
    median: float = 0.0
    standard_deviation: float = 0.0
    min: float = 0.0
    max: float = 0.0
    percentile_25: float = 0.0
    percentile_75: float = 0.0
    percentile_90: float = 0.0
    percentile_95: float = 0.0
    outliers: List[float] = field(default_factory=list)


@dataclass
class RegressionResult(Serializable):
    slope: float = 0.0
    intercept: float = 0.0
    r_squared: float = 0.0
    correlation: float = 0.0                 # signed Pearson r
    p_value: float = 1.0
    is_significant: bool = False


@dataclass
class MannKendallResult(Serializable):
    tau: float = 0.0
    s: int = 0
    z_score: float = 0.0
    p_value: float = 1.0
    is_significant: bool = False
    trend: MannKendallTrend = MannKendallTrend.NO_TREND
    sen_slope: float = 0.0                   # Theil-Sen estimator


@dataclass
class CorrelationResult(Serializable):
    metric_a: str
    metric_b: str
    correlation_coefficient: float = 0.0
    p_value: float = 1.0
    significance: CorrelationSignificance = CorrelationSignificance.NOT_SIGNIFICANT
    relationship: Relationship = Relationship.NONE
    strength: Strength = Strength.WEAK


@dataclass
class AnomalyRecord(Serializable):
    """
    One sample whose z-score exceeded the detection threshold.

    ``z_score`` is signed; ``severity`` depends only on ``abs(z_score)``.
    """
    id: str
    metric_type: str
    value: float
    expected_value: float                    # series mean
    deviation: float                         # value - expected_value
    z_score: float
    severity: Severity
    timestamp: str
    context: Dict[str, Any] = field(default_factory=dict)


@dataclass
class TrendAnalysis(Serializable):
    direction: TrendDirection = TrendDirection.STABLE
    slope: float = 0.0
    confidence: float = 0.0                  # |r|, in [0, 1]
    significance: Significance = Significance.LOW
    r_squared: float = 0.0
    data_points: int = 0
    time_period: str = ""
    forecast: Optional[float] = None         # set only when direction != stable


@dataclass
class SeasonalPattern(Serializable):
    pattern_id: str
    pattern_type: PatternType
    metric_type: str
    peak_times: List[str] = field(default_factory=list)
    low_times: List[str] = field(default_factory=list)
    amplitude: float = 0.0
    confidence: float = 0.0                  # eta squared, in [0, 1]
    seasonal_strength: float = 0.0           # in [0, 1]
    next_predicted_peak: Optional[str] = None


@dataclass
class PerformanceScore(Serializable):
    overall: float
    breakdown: Dict[str, float]
    grade: Grade
    trend: PerformanceTrend
    last_calculated: str


@dataclass
class OptimizationOpportunity(Serializable):
    id: str
    type: OpportunityType
    potential_impact: Impact
    affected_metric: str
    current_value: float
    target_value: float
    improvement_potential: float             # percent
    complexity: Complexity
    description: str
