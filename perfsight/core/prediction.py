"""
Performance Prediction & Early Warnings.

Linear forecasts of metric series and route scores, and an early-warning
engine that turns forecasts, seasonal patterns and memory history into
ranked alerts.

Forecast intervals are +/- ``interval_z`` residual standard errors.
Probability of issue is the normal probability that the forecast crosses
the metric's issue threshold.
"""

import logging
from datetime import datetime, timedelta
from typing import Any, Callable, List, Mapping, Optional, Sequence, Tuple

import numpy as np
from scipy import stats

from perfsight.config.thresholds import get_section
from perfsight.core._series import finite_samples, format_timestamp, parse_timestamp, sample_timestamp, utc_now
from perfsight.models.base import label_of
from perfsight.models.enums import AlertType, Impact, PatternType, PredictionBasis, Severity, TimeHorizon, severity_rank
from perfsight.models.predictions import EarlyWarningAlert, PerformancePrediction, RoutePerformancePrediction
from perfsight.models.results import PerformanceSummary, SeasonalPattern
from perfsight.models.routes import RoutePerformanceData, RouteSession
from perfsight.primitives.regression import linear_regression_xy
from perfsight.primitives.trend import exponential_smoothing

logger = logging.getLogger(__name__)


def horizon_hours(time_horizon, thresholds: Optional[Mapping[str, Any]] = None) -> int:
    """Hours in a horizon label ("1h", "24h", "7d", "30d"); unknown labels count as 24."""
    return get_section('PREDICTION', thresholds)['horizon_hours'].get(label_of(time_horizon), 24)


def classify_issue_severity(probability: float, predicted_value: float) -> Severity:
    """
    Severity of a forecast issue from its probability and predicted value.

    critical: p > 0.8 and value < 30; high: p > 0.6 and value < 50;
    medium: p > 0.4; otherwise low.
    """
    if probability > 0.8 and predicted_value < 30:
        return Severity.CRITICAL
    if probability > 0.6 and predicted_value < 50:
        return Severity.HIGH
    if probability > 0.4:
        return Severity.MEDIUM
    return Severity.LOW


def interval_confidence(interval: Sequence[float]) -> float:
    """Confidence from interval width relative to its midpoint, floored at 0.1."""
    low, high = float(interval[0]), float(interval[1])
    midpoint = (low + high) / 2.0
    if midpoint <= 0:
        return 0.1
    return max(0.1, 1.0 - min((high - low) / midpoint, 1.0))


def _standard_error(x: np.ndarray, y: np.ndarray, slope: float, intercept: float) -> float:
    n = len(x)
    residuals = y - (slope * x + intercept)
    return float(np.sqrt(np.sum(residuals ** 2) / (n - 2))) if n > 2 else 0.0


# =============================================================================
# METRIC FORECASTS
# =============================================================================

def predict_metric(
    samples: Sequence[Any],
    metric_type: str,
    time_horizon: str = "24h",
    route_pattern: Optional[str] = None,
    thresholds: Optional[Mapping[str, Any]] = None,
) -> Optional[PerformancePrediction]:
    """
    Forecast a metric at ``time_horizon`` past its last sample.

    Args:
        samples: Time-ordered samples; untimestamped samples are taken as
            hourly
        metric_type: fps, memory_usage, cpu_usage, ...
        time_horizon: "1h", "24h", "7d" or "30d"
        route_pattern: Route the series belongs to, if any
        thresholds: Optional threshold sections; uses ``PREDICTION``

    Returns:
        PerformancePrediction, or None with fewer than ``min_points`` values
    """
    cfg = get_section('PREDICTION', thresholds)
    horizon = TimeHorizon(label_of(time_horizon))

    kept, y = finite_samples(samples)
    n = len(y)
    if n < cfg['min_points']:
        return None

    stamps = [sample_timestamp(s) for s in kept]
    if None in stamps:
        x = np.arange(n, dtype=np.float64)
    else:
        times = [parse_timestamp(t) for t in stamps]
        x = np.array([(t - times[0]).total_seconds() / 3600.0 for t in times])

    fit = linear_regression_xy(x, y, thresholds)
    future_x = float(np.max(x)) + horizon_hours(horizon, thresholds)
    predicted = fit.slope * future_x + fit.intercept
    se = _standard_error(x, y, fit.slope, fit.intercept)
    margin = cfg['interval_z'] * se

    probability = 0.0
    issue = cfg['issue_thresholds'].get(metric_type)
    if issue is not None:
        if se > 0:
            z = (issue['value'] - predicted) / se
            probability = float(stats.norm.cdf(z) if issue['direction'] == 'below' else stats.norm.sf(z))
        elif issue['direction'] == 'below':
            probability = 1.0 if predicted < issue['value'] else 0.0
        else:
            probability = 1.0 if predicted > issue['value'] else 0.0

    logger.debug("%s forecast @%s: %.2f +/- %.2f (p_issue=%.2f)",
                 metric_type, horizon.value, predicted, margin, probability)

    return PerformancePrediction(
        prediction_id=f"{metric_type}_{horizon.value}" + (f"_{route_pattern}" if route_pattern else ""),
        metric_type=metric_type,
        predicted_value=float(max(0.0, predicted)),
        confidence_interval=(float(max(0.0, predicted - margin)), float(predicted + margin)),
        probability_of_issue=probability,
        time_horizon=horizon,
        route_pattern=route_pattern,
    )


# =============================================================================
# ROUTE FORECASTS
# =============================================================================

def session_score(session: RouteSession) -> float:
    """Composite 0-100 score of one route session."""
    fps_score = min(100.0, session.avg_fps / 60.0 * 100.0)
    memory_score = max(0.0, 100.0 - session.avg_memory / 1000.0 * 100.0)
    cpu_score = max(0.0, 100.0 - session.avg_cpu)
    return (fps_score + memory_score + cpu_score) / 3.0


def _route_factors(route: RoutePerformanceData, app_averages: Mapping[str, float]) -> List[str]:
    factors = []
    if route.avg_fps < app_averages.get('avg_fps', 0.0) * 0.8:
        factors.append("Below average FPS performance")
    if route.avg_memory > app_averages.get('avg_memory', 0.0) * 1.2:
        factors.append("High memory usage pattern")
    if route.avg_cpu > app_averages.get('avg_cpu', 0.0) * 1.2:
        factors.append("Elevated CPU usage")
    if route.performance_trend == "degrading":
        factors.append("Declining performance trend")
    if route.unique_devices < 3:
        factors.append("Limited device diversity in data")
    return factors or ["Stable performance pattern"]


def _forecast_accuracy(sessions: Sequence[RouteSession], days: Sequence[float]) -> float:
    n = len(sessions)
    if n < 5:
        return 0.6
    fps_std = float(np.std([s.avg_fps for s in sessions]))
    memory_std = float(np.std([s.avg_memory for s in sessions]))
    consistency = (max(0.0, 1 - fps_std / 30) + max(0.0, 1 - memory_std / 200)) / 2
    sample_size = min(1.0, n / 20)
    time_span = min(1.0, (days[-1] - days[0]) / 30)
    return (consistency + sample_size + time_span) / 3


def predict_route_performance(
    route: RoutePerformanceData,
    app_averages: Mapping[str, float],
    thresholds: Optional[Mapping[str, Any]] = None,
) -> RoutePerformancePrediction:
    """
    Forecast a route's session score ``route_horizon_days`` ahead.

    Args:
        route: Route aggregate with its sessions
        app_averages: App-wide avg_fps / avg_memory / avg_cpu
        thresholds: Optional threshold sections; uses ``PREDICTION``

    Returns:
        RoutePerformancePrediction. Fewer than ``route_min_sessions``
        sessions gives the fallback score and interval.
    """
    cfg = get_section('PREDICTION', thresholds)
    sessions = list(route.sessions)

    days: List[float] = []
    if len(sessions) < cfg['route_min_sessions']:
        predicted = cfg['route_fallback_score']
        interval: Tuple[float, float] = tuple(cfg['route_fallback_interval'])
    else:
        sessions.sort(key=lambda s: parse_timestamp(s.timestamp))
        first = parse_timestamp(sessions[0].timestamp)
        days = [(parse_timestamp(s.timestamp) - first).total_seconds() / 86400.0 for s in sessions]
        x = np.asarray(days)
        y = np.array([session_score(s) for s in sessions])
        fit = linear_regression_xy(x, y, thresholds)
        raw = fit.slope * (float(np.max(x)) + cfg['route_horizon_days']) + fit.intercept
        margin = cfg['interval_z'] * _standard_error(x, y, fit.slope, fit.intercept)
        predicted = max(0.0, min(100.0, raw))
        interval = (max(0.0, raw - margin), min(100.0, raw + margin))

    if predicted < 50 or route.risk_level == "high":
        priority = Impact.HIGH
    elif predicted < 70 or route.performance_trend == "degrading":
        priority = Impact.MEDIUM
    else:
        priority = Impact.LOW

    return RoutePerformancePrediction(
        route_pattern=route.route_pattern,
        predicted_performance_score=float(predicted),
        confidence_interval=(float(interval[0]), float(interval[1])),
        prediction_horizon=TimeHorizon.ONE_WEEK,
        contributing_factors=_route_factors(route, app_averages),
        recommendation_priority=priority,
        forecast_accuracy=float(_forecast_accuracy(sessions, days)) if days else 0.6,
        trend_direction=route.performance_trend,
        prediction_model=PredictionBasis.LINEAR_REGRESSION,
    )


# =============================================================================
# EARLY WARNINGS
# =============================================================================

_PREVENTION = {
    AlertType.PERFORMANCE_DEGRADATION: [
        "Review and optimize critical performance bottlenecks",
        "Implement caching strategies for frequently accessed data",
        "Consider horizontal scaling if possible",
        "Review recent deployments for performance regressions",
    ],
    AlertType.MEMORY_SPIKE: [
        "Implement memory cleanup procedures immediately",
        "Review memory-intensive operations and optimize",
        "Consider implementing memory pooling or recycling",
        "Monitor for memory leaks in recent code changes",
    ],
    AlertType.FPS_DROP: [
        "Optimize rendering pipeline and draw calls",
        "Review GPU-intensive operations",
        "Implement frame rate limiting or adaptive quality",
        "Check for background processes affecting rendering",
    ],
}

_SEASONAL_STEP = {
    PatternType.DAILY: "Implement time-based auto-scaling",
    PatternType.WEEKLY: "Plan weekend/weekday performance adjustments",
}


def prevention_recommendations(alert_type: AlertType, predicted: float, current: float) -> List[str]:
    """Base prevention steps, led by an urgent step when current exceeds twice the forecast."""
    steps = list(_PREVENTION[alert_type])
    if current > 2 * predicted:
        steps.insert(0, "URGENT: Immediate intervention required - predicted severe degradation")
    return steps


def format_time_to_issue(hours: float) -> str:
    """Human label for a lead time: less than 1 hour, N hours, or N day(s) and M hours."""
    if hours < 1:
        return "Less than 1 hour"
    if hours < 24:
        return f"{round(hours)} hours"
    days = int(hours // 24)
    remaining = round(hours % 24)
    plural = "s" if days > 1 else ""
    if remaining == 0:
        return f"{days} day{plural}"
    return f"{days} day{plural} and {remaining} hours"


def _trend_confidence(values: Sequence[float]) -> float:
    """Share of consecutive differences moving the dominant way, capped at 0.95."""
    if len(values) < 5:
        return 0.3
    diffs = np.diff(np.asarray(values, dtype=np.float64))
    consistency = max(np.sum(diffs > 0), np.sum(diffs < 0)) / len(diffs)
    return float(min(0.95, consistency))


class EarlyWarningEngine:
    """
    Generates early-warning alerts from forecasts and seasonal patterns.

    Args:
        thresholds: Optional threshold sections; uses ``EARLY_WARNING``
        clock: Returns the current UTC time; alert dates are relative to it
    """

    def __init__(
        self,
        thresholds: Optional[Mapping[str, Any]] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.thresholds = thresholds
        self.clock = clock
        self.config = get_section('EARLY_WARNING', thresholds)

    def _issue_date(self, time_horizon) -> str:
        return format_timestamp(self.clock() + timedelta(hours=horizon_hours(time_horizon, self.thresholds)))

    def _time_to_issue(self, time_horizon) -> str:
        hours = horizon_hours(time_horizon, self.thresholds)
        if hours < 24:
            return f"{hours} hours"
        days = hours // 24
        return f"{days} day{'s' if days > 1 else ''}"

    def _stamp(self) -> int:
        return int(self.clock().timestamp() * 1000)

    def generate_early_warnings(
        self,
        predictions: Sequence[PerformancePrediction],
        route_predictions: Sequence[RoutePerformancePrediction],
        seasonal_patterns: Sequence[SeasonalPattern],
        current: PerformanceSummary,
        memory_history: Optional[Sequence[Any]] = None,
    ) -> List[EarlyWarningAlert]:
        """
        Collect, validate and rank alerts.

        Alerts below the confidence threshold, of low severity, or dated
        at or before the clock are dropped.

        Returns:
            At most ``max_alerts`` alerts, by severity then confidence
        """
        alerts = (
            self.check_degradation(predictions)
            + self.check_routes(route_predictions)
            + self.check_seasonal_peaks(seasonal_patterns)
            + (self.check_memory_spike(memory_history, current) if memory_history is not None else [])
            + self.check_fps_drop(predictions, current)
        )

        now = self.clock()
        valid = [
            a for a in alerts
            if a.confidence >= self.config['confidence']
            and a.severity != Severity.LOW
            and parse_timestamp(a.predicted_issue_date) > now
        ]
        valid.sort(key=lambda a: (severity_rank(a.severity), a.confidence), reverse=True)

        logger.debug("Early warnings: %d candidates, %d valid", len(alerts), len(valid))
        return valid[:self.config['max_alerts']]

    def check_degradation(self, predictions: Sequence[PerformancePrediction]) -> List[EarlyWarningAlert]:
        cfg = self.config
        alerts = []
        for p in predictions:
            confidence = interval_confidence(p.confidence_interval)
            if not (p.probability_of_issue > cfg['min_probability']
                    and p.predicted_value < cfg['degradation_score']
                    and confidence > cfg['confidence']):
                continue
            alerts.append(EarlyWarningAlert(
                id=f"perf_degradation_{p.prediction_id}_{self._stamp()}",
                type=AlertType.PERFORMANCE_DEGRADATION,
                predicted_issue_date=self._issue_date(p.time_horizon),
                time_to_issue=self._time_to_issue(p.time_horizon),
                confidence=confidence,
                severity=classify_issue_severity(p.probability_of_issue, p.predicted_value),
                prevention_recommendations=prevention_recommendations(
                    AlertType.PERFORMANCE_DEGRADATION, p.predicted_value, p.predicted_value + 20),
                monitoring_suggestions=[
                    "Monitor performance metrics every hour until risk passes",
                    "Set up automated alerts for performance threshold breaches",
                    "Prepare rollback strategies for recent deployments",
                    "Review resource usage patterns for anomalies",
                ],
                prediction_basis=PredictionBasis.TREND_ANALYSIS,
                affected_routes=[p.route_pattern] if p.route_pattern else None,
            ))
        return alerts

    def check_routes(self, route_predictions: Sequence[RoutePerformancePrediction]) -> List[EarlyWarningAlert]:
        cfg = self.config
        alerts = []
        for rp in route_predictions:
            score = rp.predicted_performance_score
            if not (score < cfg['route_high_score'] and rp.forecast_accuracy > cfg['confidence']):
                continue

            steps = [
                f"Optimize performance for route: {rp.route_pattern}",
                "Review route-specific resource usage patterns",
                "Consider route-level caching or preloading strategies",
            ]
            for factor in rp.contributing_factors:
                if 'memory' in factor:
                    steps.append("Focus on memory optimization for this route")
                if 'FPS' in factor:
                    steps.append("Optimize rendering performance for this route")
                if 'CPU' in factor:
                    steps.append("Optimize CPU-intensive operations in this route")

            alerts.append(EarlyWarningAlert(
                id=f"route_perf_{rp.route_pattern}_{self._stamp()}",
                type=AlertType.PERFORMANCE_DEGRADATION,
                predicted_issue_date=self._issue_date(rp.prediction_horizon),
                time_to_issue=self._time_to_issue(rp.prediction_horizon),
                confidence=rp.forecast_accuracy,
                severity=Severity.CRITICAL if score < cfg['critical_score'] else Severity.HIGH,
                prevention_recommendations=steps,
                monitoring_suggestions=[
                    f"Focus monitoring on {rp.route_pattern} route",
                    "Check route-specific resource usage patterns",
                    "Review recent route-specific deployments or changes",
                    "Consider temporary route optimization measures",
                ],
                prediction_basis=PredictionBasis(label_of(rp.prediction_model)),
                affected_routes=[rp.route_pattern],
            ))
        return alerts

    def check_seasonal_peaks(self, patterns: Sequence[SeasonalPattern]) -> List[EarlyWarningAlert]:
        cfg = get_section('PROACTIVE', self.thresholds)
        window = self.config['seasonal_window_hours']
        now = self.clock()
        alerts = []
        for pattern in patterns:
            if not (pattern.confidence > cfg['seasonal_confidence']
                    and pattern.seasonal_strength > cfg['seasonal_strength']
                    and pattern.next_predicted_peak):
                continue
            hours = (parse_timestamp(pattern.next_predicted_peak) - now).total_seconds() / 3600.0
            if not 0 < hours <= window:
                continue

            pattern_type = PatternType(label_of(pattern.pattern_type))
            steps = [
                f"Prepare for predicted {pattern_type.value} peak in {pattern.metric_type}",
                "Scale resources in advance of peak period",
                "Review historical mitigation strategies from similar peaks",
            ]
            if pattern_type in _SEASONAL_STEP:
                steps.append(_SEASONAL_STEP[pattern_type])

            alerts.append(EarlyWarningAlert(
                id=f"seasonal_peak_{pattern.pattern_id}_{self._stamp()}",
                type=AlertType.SEASONAL_PEAK,
                predicted_issue_date=pattern.next_predicted_peak,
                time_to_issue=format_time_to_issue(hours),
                confidence=pattern.confidence,
                severity=Severity.HIGH if pattern.seasonal_strength > 0.5 else Severity.MEDIUM,
                prevention_recommendations=steps,
                monitoring_suggestions=[
                    f"Monitor {pattern.metric_type} closely during predicted peak period",
                    "Prepare additional resources for increased load",
                    "Review historical performance during similar peak periods",
                    "Set up enhanced alerting during peak window",
                ],
                prediction_basis=PredictionBasis.SEASONAL_PATTERN,
            ))
        return alerts

    def check_memory_spike(self, history: Sequence[Any], current: PerformanceSummary) -> List[EarlyWarningAlert]:
        """Smoothed memory forecast against the spike threshold and the current average."""
        cfg = self.config
        _, values = finite_samples(history)
        values = values[values > 0]
        if len(values) < cfg['memory_min_points']:
            return []

        forecast = exponential_smoothing(values, cfg['smoothing_alpha'], cfg['smoothing_periods'])[-1]
        spike = cfg['memory_spike_mb']
        if not (forecast > spike and forecast > current.avg_memory * cfg['memory_spike_ratio']):
            return []

        return [EarlyWarningAlert(
            id=f"memory_spike_{self._stamp()}",
            type=AlertType.MEMORY_SPIKE,
            predicted_issue_date=self._issue_date(TimeHorizon.ONE_DAY),
            time_to_issue="24 hours",
            confidence=_trend_confidence(values),
            severity=Severity.CRITICAL if forecast > spike * 1.5 else Severity.HIGH,
            prevention_recommendations=prevention_recommendations(
                AlertType.MEMORY_SPIKE, forecast, current.avg_memory),
            monitoring_suggestions=[
                "Monitor memory usage every 15 minutes",
                "Identify memory-intensive processes or routes",
                "Prepare memory cleanup procedures",
                "Review recent changes that might affect memory usage",
            ],
            prediction_basis=PredictionBasis.TREND_ANALYSIS,
        )]

    def check_fps_drop(self, predictions: Sequence[PerformancePrediction], current: PerformanceSummary) -> List[EarlyWarningAlert]:
        cfg = self.config
        alerts = []
        for p in predictions:
            if p.metric_type != 'fps':
                continue
            if not (p.predicted_value < cfg['fps_degradation']
                    and p.predicted_value < current.avg_fps * cfg['fps_drop_ratio']):
                continue
            confidence = interval_confidence(p.confidence_interval)
            if confidence <= cfg['confidence']:
                continue
            alerts.append(EarlyWarningAlert(
                id=f"fps_drop_{p.prediction_id}_{self._stamp()}",
                type=AlertType.FPS_DROP,
                predicted_issue_date=self._issue_date(p.time_horizon),
                time_to_issue=self._time_to_issue(p.time_horizon),
                confidence=confidence,
                severity=Severity.CRITICAL if p.predicted_value < cfg['critical_score'] else Severity.HIGH,
                prevention_recommendations=prevention_recommendations(
                    AlertType.FPS_DROP, p.predicted_value, current.avg_fps),
                monitoring_suggestions=[
                    "Monitor FPS metrics in real-time",
                    "Check GPU and rendering performance",
                    "Review draw call optimization opportunities",
                    "Prepare frame rate optimization strategies",
                ],
                prediction_basis=PredictionBasis.MODEL_ENSEMBLE,
                affected_routes=[p.route_pattern] if p.route_pattern else None,
            ))
        return alerts
