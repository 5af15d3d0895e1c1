"""
Trend Analyzer.

Delegates to the OLS regression primitive and classifies direction and
significance. Direction-agnostic: whether "up" is good for a metric is
decided by the insight layer, not here.
"""

import logging
from typing import Any, Mapping, Optional, Sequence

import numpy as np

from perfsight.config.thresholds import get_section
from perfsight.core._series import finite_samples, parse_timestamp, sample_timestamp
from perfsight.models.enums import Significance, TrendDirection
from perfsight.models.results import TrendAnalysis
from perfsight.primitives.regression import linear_regression

logger = logging.getLogger(__name__)


def describe_time_period(samples: Sequence[Any]) -> str:
    """
    Human label for the span of a time-ordered series.

    Returns:
        "1 day", "N days", "N weeks", "N months", or "unknown" when the
        series is empty or carries no timestamps
    """
    if len(samples) == 0:
        return "unknown"
    first, last = sample_timestamp(samples[0]), sample_timestamp(samples[-1])
    if first is None or last is None:
        return "unknown"

    diff_days = int((parse_timestamp(last) - parse_timestamp(first)).total_seconds() // 86400)
    if diff_days <= 0:
        return "1 day"
    if diff_days < 7:
        return f"{diff_days + 1} days"
    if diff_days < 30:
        return f"{diff_days // 7} weeks"
    return f"{diff_days // 30} months"


def analyze_trend(
    samples: Sequence[Any],
    metric_type: str,
    time_period: Optional[str] = None,
    thresholds: Optional[Mapping[str, Any]] = None,
) -> TrendAnalysis:
    """
    Classify the linear trend of one metric series.

    Args:
        samples: Time-ordered MetricSamples, mappings, or numbers
        metric_type: Metric label (for logging and callers' bookkeeping)
        time_period: Label for the analyzed window; derived from the
            sample timestamps when omitted
        thresholds: Optional threshold sections; uses ``TREND`` and
            ``REGRESSION``

    Returns:
        TrendAnalysis. Fewer than ``min_points`` values gives stable with
        zero slope and confidence. ``direction`` is stable whenever
        |slope| < max(stable_slope_abs, stable_slope_rel * |mean|),
        regardless of statistical significance.
    """
    cfg = get_section('TREND', thresholds)
    if time_period is None:
        time_period = describe_time_period(samples)

    _, values = finite_samples(samples)
    n = len(values)
    if n < cfg['min_points']:
        return TrendAnalysis(data_points=n, time_period=time_period)

    regression = linear_regression(values, thresholds)
    epsilon = max(cfg['stable_slope_abs'], cfg['stable_slope_rel'] * abs(float(np.mean(values))))

    if abs(regression.slope) < epsilon:
        direction = TrendDirection.STABLE
    elif regression.slope > 0:
        direction = TrendDirection.UP
    else:
        direction = TrendDirection.DOWN

    confidence = abs(regression.correlation)
    if confidence >= cfg['high_confidence']:
        significance = Significance.HIGH
    elif confidence >= cfg['medium_confidence']:
        significance = Significance.MEDIUM
    else:
        significance = Significance.LOW

    forecast = None
    if direction != TrendDirection.STABLE:
        forecast = regression.slope * n + regression.intercept

    logger.debug("%s trend: %s slope=%.4f r=%.3f n=%d",
                 metric_type, direction.value, regression.slope, regression.correlation, n)

    return TrendAnalysis(
        direction=direction,
        slope=regression.slope,
        confidence=confidence,
        significance=significance,
        r_squared=regression.r_squared,
        data_points=n,
        time_period=time_period,
        forecast=forecast,
    )
