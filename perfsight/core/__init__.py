"""
perfsight Core
==============

Analyzers over metric samples. Samples in, result dataclasses out, no I/O.

Structure:
    anomaly.py      - Z-score anomaly detection with severity bands
    correlation.py  - Pearson correlation with relationship/strength labels
    seasonal.py     - Hourly/daily/weekly seasonal pattern detection
    trend.py        - Linear trend classification (direction-agnostic)
    scoring.py      - 0-100 metric scores, overall score and grade
    insights.py     - InsightAnalyzer: insights and full reports
    prediction.py   - Forecasts and the EarlyWarningEngine
"""

from perfsight.core.anomaly import classify_anomaly_severity, detect_anomalies
from perfsight.core.correlation import calculate_correlation, correlation_matrix
from perfsight.core.seasonal import identify_seasonal_patterns
from perfsight.core.trend import analyze_trend, describe_time_period
from perfsight.core.scoring import calculate_metric_score, calculate_performance_score
from perfsight.core.insights import InsightAnalyzer
from perfsight.core.prediction import EarlyWarningEngine, predict_metric, predict_route_performance
