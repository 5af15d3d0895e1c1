"""
Prediction Types
================

Forecasts feeding the early-warning engine and the proactive
recommendation pipeline.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from perfsight.models.base import Serializable
from perfsight.models.enums import AlertType, Impact, PredictionBasis, Severity, TimeHorizon


@dataclass
class PerformancePrediction(Serializable):
    prediction_id: str
    metric_type: str
    predicted_value: float
    confidence_interval: Tuple[float, float]
    probability_of_issue: float              # 0-1
    time_horizon: TimeHorizon = TimeHorizon.ONE_DAY
    route_pattern: Optional[str] = None


@dataclass
class RoutePerformancePrediction(Serializable):
    route_pattern: str
    predicted_performance_score: float       # 0-100
    confidence_interval: Tuple[float, float]
    prediction_horizon: TimeHorizon = TimeHorizon.ONE_WEEK
    contributing_factors: List[str] = field(default_factory=list)
    recommendation_priority: Impact = Impact.LOW
    forecast_accuracy: float = 0.0           # 0-1
    trend_direction: str = "stable"          # improving / stable / degrading
    prediction_model: PredictionBasis = PredictionBasis.LINEAR_REGRESSION


@dataclass
class EarlyWarningAlert(Serializable):
    id: str
    type: AlertType
    predicted_issue_date: str
    time_to_issue: str
    confidence: float
    severity: Severity
    prevention_recommendations: List[str] = field(default_factory=list)
    monitoring_suggestions: List[str] = field(default_factory=list)
    prediction_basis: PredictionBasis = PredictionBasis.TREND_ANALYSIS
    affected_routes: Optional[List[str]] = None
