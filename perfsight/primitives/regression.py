"""
Ordinary least-squares linear regression.

Index-as-x by default; ``linear_regression_xy`` takes explicit abscissae.
Significance is a two-sided Student t test on the slope.
"""

from typing import Optional, Mapping, Any

import numpy as np
from scipy import stats

from perfsight.config.thresholds import get_section
from perfsight.models.results import RegressionResult


def linear_regression(
    values,
    thresholds: Optional[Mapping[str, Any]] = None,
) -> RegressionResult:
    """
    Fit ``value ~ slope * index + intercept``.

    Parameters
    ----------
    values : array-like
        Time-ordered samples. Non-finite entries are dropped first.
    thresholds : mapping, optional
        Threshold sections; uses ``REGRESSION``.

    Returns
    -------
    RegressionResult
        Zeroed with ``p_value=1`` for fewer than ``min_points`` values.
    """
    y = np.asarray(values, dtype=np.float64).ravel()
    y = y[np.isfinite(y)]
    x = np.arange(len(y), dtype=np.float64)
    return _fit(x, y, get_section('REGRESSION', thresholds))


def linear_regression_xy(
    x,
    y,
    thresholds: Optional[Mapping[str, Any]] = None,
) -> RegressionResult:
    """
    Fit ``y ~ slope * x + intercept`` for explicit abscissae.

    Pairs where either coordinate is non-finite are dropped. Mismatched
    lengths give the zeroed result.
    """
    x = np.asarray(x, dtype=np.float64).ravel()
    y = np.asarray(y, dtype=np.float64).ravel()
    if len(x) != len(y):
        return RegressionResult()
    mask = np.isfinite(x) & np.isfinite(y)
    return _fit(x[mask], y[mask], get_section('REGRESSION', thresholds))


def _fit(x: np.ndarray, y: np.ndarray, cfg: dict) -> RegressionResult:
    n = len(y)
    if n < cfg['min_points']:
        return RegressionResult()

    x_mean = float(np.mean(x))
    y_mean = float(np.mean(y))
    dx = x - x_mean
    dy = y - y_mean
    sxx = float(np.dot(dx, dx))
    syy = float(np.dot(dy, dy))
    sxy = float(np.dot(dx, dy))

    # Flat y or degenerate x: no slope to speak of
    if sxx <= 0.0 or syy <= 1e-12 * max(1.0, y_mean * y_mean) * n:
        return RegressionResult(intercept=y_mean)

    slope = sxy / sxx
    intercept = y_mean - slope * x_mean
    r = float(np.clip(sxy / np.sqrt(sxx * syy), -1.0, 1.0))
    r_squared = r * r

    df = n - 2
    ss_res = max(0.0, syy * (1.0 - r_squared))
    if df <= 0:
        p_value = 1.0
    elif ss_res <= 1e-12 * syy:
        p_value = 0.0                        # perfect fit
    else:
        se = np.sqrt(ss_res / df / sxx)
        t_stat = slope / se
        p_value = float(2.0 * stats.t.sf(abs(t_stat), df))

    return RegressionResult(
        slope=float(slope),
        intercept=float(intercept),
        r_squared=float(r_squared),
        correlation=r,
        p_value=p_value,
        is_significant=bool(p_value < cfg['alpha'] and r_squared > cfg['min_r_squared']),
    )
