"""
Non-parametric trend primitives.

Mann-Kendall monotonic trend test with Theil-Sen slope, and simple
exponential smoothing.
"""

from typing import List, Optional, Mapping, Any

import numpy as np
from scipy import stats

from perfsight.config.thresholds import get_section
from perfsight.models.enums import MannKendallTrend
from perfsight.models.results import MannKendallResult


def _median_in_place(a: np.ndarray) -> float:
    """Median of ``a``, partitioning ``a`` itself instead of sorting a copy."""
    k = len(a) // 2
    a.partition(k)
    if len(a) % 2:
        return float(a[k])
    return float((a[:k].max() + a[k]) / 2.0)


def mann_kendall_test(
    values,
    thresholds: Optional[Mapping[str, Any]] = None,
) -> MannKendallResult:
    """
    Mann-Kendall test for a monotonic trend.

    Kendall's S from pairwise sign comparisons, tie-corrected variance and a
    continuity-corrected normal approximation. ``trend`` is increasing or
    decreasing only when the two-sided p-value is below ``TREND['mk_alpha']``,
    so the |tau| needed for a trend shrinks as n grows.

    Parameters
    ----------
    values : array-like
        Time-ordered samples. Non-finite entries are dropped first.
    thresholds : mapping, optional
        Threshold sections; uses ``TREND``.

    Returns
    -------
    MannKendallResult
        tau=0, no_trend, not significant for fewer than ``mk_min_points``.
    """
    cfg = get_section('TREND', thresholds)
    y = np.asarray(values, dtype=np.float64).ravel()
    y = y[np.isfinite(y)]
    n = len(y)

    if n < cfg['mk_min_points']:
        return MannKendallResult()

    s = 0
    # One buffer for all n(n-1)/2 pairwise slopes.
    slopes = np.empty(n * (n - 1) // 2, dtype=np.float64)
    pos = 0
    for i in range(n - 1):
        diffs = y[i + 1:] - y[i]
        s += int(np.sum(np.sign(diffs)))
        m = len(diffs)
        np.divide(diffs, np.arange(1, m + 1, dtype=np.float64), out=slopes[pos:pos + m])
        pos += m

    n_pairs = n * (n - 1) / 2.0
    tau = s / n_pairs

    _, tie_counts = np.unique(y, return_counts=True)
    tie_term = float(np.sum(tie_counts * (tie_counts - 1) * (2 * tie_counts + 5)))
    var_s = (n * (n - 1) * (2 * n + 5) - tie_term) / 18.0

    if var_s <= 0 or s == 0:
        z = 0.0
    elif s > 0:
        z = (s - 1) / np.sqrt(var_s)
    else:
        z = (s + 1) / np.sqrt(var_s)

    p_value = float(2.0 * stats.norm.sf(abs(z)))
    significant = p_value < cfg['mk_alpha'] and s != 0

    if significant:
        trend = MannKendallTrend.INCREASING if s > 0 else MannKendallTrend.DECREASING
    else:
        trend = MannKendallTrend.NO_TREND

    sen_slope = _median_in_place(slopes)

    return MannKendallResult(
        tau=float(tau),
        s=s,
        z_score=float(z),
        p_value=p_value,
        is_significant=bool(significant),
        trend=trend,
        sen_slope=sen_slope,
    )


def exponential_smoothing(values, alpha: float = 0.3, forecast_periods: int = 0) -> List[float]:
    """
    Simple exponential smoothing with flat forecasts appended.

    Parameters
    ----------
    values : array-like
        Time-ordered samples.
    alpha : float
        Smoothing factor in (0, 1].
    forecast_periods : int
        Number of forecast values appended (each equal to the last level).

    Returns
    -------
    list of float
        ``len(values) + forecast_periods`` values; empty for empty input.
    """
    if not 0.0 < alpha <= 1.0:
        raise ValueError(f"alpha must be in (0, 1], got {alpha}")

    y = np.asarray(values, dtype=np.float64).ravel()
    if len(y) == 0:
        return []

    level = float(y[0])
    smoothed = [level]
    for v in y[1:]:
        level = alpha * float(v) + (1.0 - alpha) * level
        smoothed.append(level)

    smoothed.extend([level] * max(0, int(forecast_periods)))
    return smoothed
