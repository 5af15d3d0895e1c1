"""
Descriptive statistics over a numeric sample.

Population standard deviation, linear-interpolated percentiles and Tukey
(IQR) outlier fences. Empty input yields an all-zero result.
"""

from typing import List, Optional, Mapping, Any, Sequence

import numpy as np

from perfsight.config.thresholds import get_section
from perfsight.models.results import StatisticalResult


def finite_values(values) -> np.ndarray:
    """Coerce to a flat float array and drop NaN/inf."""
    y = np.asarray(values, dtype=np.float64).ravel()
    return y[np.isfinite(y)]


def percentile(values, q: float) -> float:
    """
    Linear-interpolated percentile.

    Parameters
    ----------
    values : array-like
        Sample.
    q : float
        Percentile in [0, 100].

    Returns
    -------
    float
        0.0 for an empty sample.
    """
    y = finite_values(values)
    if len(y) == 0:
        return 0.0
    return float(np.percentile(y, q, method='linear'))


def calculate_statistics(
    values,
    thresholds: Optional[Mapping[str, Any]] = None,
) -> StatisticalResult:
    """
    Summary statistics with IQR outliers.

    Parameters
    ----------
    values : array-like
        Numeric sample. Non-finite entries are ignored.
    thresholds : mapping, optional
        Threshold sections; uses ``STATISTICS['iqr_multiplier']``.

    Returns
    -------
    StatisticalResult
        All zeros with no outliers when the sample is empty.
    """
    y = finite_values(values)
    if len(y) == 0:
        return StatisticalResult()

    cfg = get_section('STATISTICS', thresholds)
    q25, q50, q75, q90, q95 = np.percentile(y, [25, 50, 75, 90, 95], method='linear')
    iqr = q75 - q25
    k = cfg['iqr_multiplier']
    lower, upper = q25 - k * iqr, q75 + k * iqr

    return StatisticalResult(
        mean=float(np.mean(y)),
        median=float(q50),
        standard_deviation=float(np.std(y)),
        min=float(np.min(y)),
        max=float(np.max(y)),
        percentile_25=float(q25),
        percentile_75=float(q75),
        percentile_90=float(q90),
        percentile_95=float(q95),
        outliers=[float(v) for v in y if v < lower or v > upper],
    )


def percentile_rank(value: float, values) -> float:
    """
    Percentage of the sample strictly below the first sorted value >= ``value``.

    Returns 100 when no value is >= ``value`` and 0 for an empty sample.
    """
    y = np.sort(finite_values(values))
    if len(y) == 0:
        return 0.0
    index = int(np.searchsorted(y, value, side='left'))
    if index >= len(y):
        return 100.0
    return index / len(y) * 100.0


def moving_average(values: Sequence[float], window: int) -> List[float]:
    """
    Centered moving average, truncated at the edges.

    Returns the input unchanged when ``window <= 0`` or exceeds its length.
    """
    y = np.asarray(values, dtype=np.float64).ravel()
    n = len(y)
    if window <= 0 or window > n:
        return [float(v) for v in y]

    half = window // 2
    out = []
    for i in range(n):
        lo = max(0, i - half)
        hi = min(n, i - half + window)
        out.append(float(np.mean(y[lo:hi])))
    return out
