"""
Performance Scoring.

Piecewise-linear 0-100 scores per metric against benchmark thresholds,
combined into a weighted overall score with an optional trend adjustment
and a letter grade.
"""

import logging
import math
from datetime import datetime
from typing import Any, Callable, Dict, Mapping, Optional

from perfsight.config.thresholds import METRIC_POLARITY, get_section
from perfsight.core._series import format_timestamp, utc_now
from perfsight.models.enums import Grade, PerformanceTrend, Significance, TrendDirection
from perfsight.models.results import PerformanceScore, PerformanceSummary, TrendAnalysis

logger = logging.getLogger(__name__)

# Scoring keys for the metric names used elsewhere.
_METRIC_ALIASES = {
    'fps': 'fps',
    'memory': 'memory',
    'memory_usage': 'memory',
    'cpu': 'cpu',
    'cpu_usage': 'cpu',
}


def _interpolate(value, lo, hi, lo_score, hi_score) -> float:
    return lo_score + (value - lo) / (hi - lo) * (hi_score - lo_score)


def calculate_metric_score(
    value: float,
    metric: str,
    thresholds: Optional[Mapping[str, Any]] = None,
) -> float:
    """
    Score one metric value on 0-100.

    Args:
        value: Metric value (fps, MB or percent)
        metric: fps, memory(_usage) or cpu(_usage)
        thresholds: Optional threshold sections; uses ``SCORING['benchmarks']``

    Returns:
        100 at or beyond the excellent benchmark, 80/60/40 at good/average/poor,
        linear in between; 0 for NaN or negative values.
    """
    key = _METRIC_ALIASES[metric]
    if value is None or math.isnan(value) or value < 0:
        return 0.0

    b = get_section('SCORING', thresholds)['benchmarks'][key]
    exc, good, avg, poor = b['excellent'], b['good'], b['average'], b['poor']

    if METRIC_POLARITY[key] == 'lower_is_better':
        if value <= exc:
            return 100.0
        if value <= good:
            return _interpolate(value, exc, good, 100, 80)
        if value <= avg:
            return _interpolate(value, good, avg, 80, 60)
        if value <= poor:
            return _interpolate(value, avg, poor, 60, 40)
        return max(0.0, 40 - (value - poor) / poor * 40)

    if value >= exc:
        return 100.0
    if value >= good:
        return _interpolate(value, good, exc, 80, 100)
    if value >= avg:
        return _interpolate(value, avg, good, 60, 80)
    if value >= poor:
        return _interpolate(value, poor, avg, 40, 60)
    return max(0.0, value / poor * 40)


def calculate_grade(score: float, thresholds: Optional[Mapping[str, Any]] = None) -> Grade:
    grades = get_section('SCORING', thresholds)['grades']
    for letter in ('A', 'B', 'C', 'D'):
        if score >= grades[letter]:
            return Grade(letter)
    return Grade.F


def _trend_strength(trend: TrendAnalysis, cfg: Mapping[str, Any]) -> float:
    factor = cfg['significance_strength'][Significance(trend.significance).value]
    return min(1.0, abs(trend.confidence) * factor)


def determine_trend_direction(
    trends: Mapping[str, TrendAnalysis],
    thresholds: Optional[Mapping[str, Any]] = None,
) -> PerformanceTrend:
    """
    Weighted vote of per-metric trends, interpreted by metric polarity.

    Low-significance trends do not vote.
    """
    cfg = get_section('SCORING', thresholds)
    improving = declining = 0.0

    for metric, trend in trends.items():
        key = _METRIC_ALIASES.get(metric)
        if key is None or trend.significance == Significance.LOW:
            continue
        direction = TrendDirection(trend.direction)
        if direction == TrendDirection.STABLE:
            continue
        weight = cfg['weights'][key] * _trend_strength(trend, cfg)
        good = (direction == TrendDirection.UP) == (METRIC_POLARITY[key] == 'higher_is_better')
        if good:
            improving += weight
        else:
            declining += weight

    net = improving - declining
    if abs(net) < cfg['stable_net_score']:
        return PerformanceTrend.STABLE
    return PerformanceTrend.IMPROVING if net > 0 else PerformanceTrend.DECLINING


def calculate_trend_adjustment(
    trends: Mapping[str, TrendAnalysis],
    thresholds: Optional[Mapping[str, Any]] = None,
) -> float:
    """Signed score adjustment, capped at +/- ``max_trend_adjustment``."""
    cfg = get_section('SCORING', thresholds)
    direction = determine_trend_direction(trends, thresholds)
    if direction == PerformanceTrend.STABLE:
        return 0.0

    magnitude = 0.0
    for metric, trend in trends.items():
        key = _METRIC_ALIASES.get(metric)
        if key is None:
            continue
        magnitude += abs(trend.slope) * cfg['weights'][key] * _trend_strength(trend, cfg)

    adjustment = min(cfg['max_trend_adjustment'], magnitude * cfg['trend_weight'] * 100)
    return adjustment if direction == PerformanceTrend.IMPROVING else -adjustment


def calculate_performance_score(
    summary: PerformanceSummary,
    trends: Optional[Mapping[str, TrendAnalysis]] = None,
    clock: Callable[[], datetime] = utc_now,
    thresholds: Optional[Mapping[str, Any]] = None,
) -> PerformanceScore:
    """
    Weighted overall score with grade and trend direction.

    Args:
        summary: Global averages
        trends: Per-metric TrendAnalysis keyed by metric name; applied only
            when some trend has at least ``min_trend_points`` data points
        clock: Returns the ``last_calculated`` time
        thresholds: Optional threshold sections; uses ``SCORING``

    Returns:
        PerformanceScore with overall and breakdown rounded to integers
    """
    cfg = get_section('SCORING', thresholds)
    breakdown: Dict[str, float] = {
        'fps': calculate_metric_score(summary.avg_fps, 'fps', thresholds),
        'memory': calculate_metric_score(summary.avg_memory, 'memory', thresholds),
        'cpu': calculate_metric_score(summary.avg_cpu, 'cpu', thresholds),
    }
    overall = sum(breakdown[k] * cfg['weights'][k] for k in breakdown)

    trend = PerformanceTrend.STABLE
    if trends and max(t.data_points for t in trends.values()) >= cfg['min_trend_points']:
        trend = determine_trend_direction(trends, thresholds)
        overall = max(0.0, min(100.0, overall + calculate_trend_adjustment(trends, thresholds)))

    grade = calculate_grade(overall, thresholds)
    logger.debug("Performance score %.1f (%s), trend %s", overall, grade.value, trend.value)

    return PerformanceScore(
        overall=float(round(overall)),
        breakdown={k: float(round(v)) for k, v in breakdown.items()},
        grade=grade,
        trend=trend,
        last_calculated=format_timestamp(clock()),
    )
