"""
perfsight - performance analytics for mobile app metrics.

Public API:
    from perfsight import InsightAnalyzer, analyze_trend, detect_anomalies
    trend = analyze_trend(fps_samples, "fps")
    report = InsightAnalyzer().generate_report(samples_by_metric, summary)

Layers:
    perfsight.primitives    Math - numpy arrays in, numbers out
    perfsight.core          Analyzers - samples in, result dataclasses out
    perfsight.recommend     Rules, priority scoring, route analysis, proactive pipeline
    perfsight.models        Result and input dataclasses, enums

Also:
    perfsight.io            Metric file reader (parquet/CSV via polars)
    perfsight.config        Threshold constants, profiles, YAML overrides
    perfsight.validation    ValidationError for schema problems
"""

from perfsight.primitives.statistics import calculate_statistics
from perfsight.primitives.regression import linear_regression
from perfsight.primitives.trend import mann_kendall_test
from perfsight.core.anomaly import detect_anomalies
from perfsight.core.correlation import calculate_correlation
from perfsight.core.seasonal import identify_seasonal_patterns
from perfsight.core.trend import analyze_trend
from perfsight.core.insights import InsightAnalyzer
from perfsight.core.prediction import EarlyWarningEngine, predict_metric, predict_route_performance
from perfsight.core.scoring import calculate_performance_score
from perfsight.recommend.engine import RecommendationEngine
from perfsight.io.reader import load_metric_frame, samples_by_metric

__all__ = [
    "calculate_statistics",
    "linear_regression",
    "mann_kendall_test",
    "detect_anomalies",
    "calculate_correlation",
    "identify_seasonal_patterns",
    "analyze_trend",
    "InsightAnalyzer",
    "RecommendationEngine",
    "EarlyWarningEngine",
    "predict_metric",
    "predict_route_performance",
    "calculate_performance_score",
    "load_metric_frame",
    "samples_by_metric",
]
