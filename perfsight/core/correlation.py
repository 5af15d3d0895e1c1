"""
Correlation Analysis.

Pearson correlation between two metric series with relationship and
strength labels. Never raises on mismatched or degenerate input.
"""

from itertools import combinations
from typing import Any, List, Mapping, Optional

import numpy as np
from scipy import stats

from perfsight.config.thresholds import get_section
from perfsight.models.enums import CorrelationSignificance, Relationship, Strength
from perfsight.models.results import CorrelationResult


def _relationship(r: float, cfg: Mapping[str, Any]) -> Relationship:
    if abs(r) < cfg['none_below']:
        return Relationship.NONE
    return Relationship.POSITIVE if r > 0 else Relationship.NEGATIVE


def _strength(r: float, cfg: Mapping[str, Any]) -> Strength:
    if abs(r) > cfg['strong_above']:
        return Strength.STRONG
    if abs(r) > cfg['moderate_above']:
        return Strength.MODERATE
    return Strength.WEAK


def calculate_correlation(
    series_a,
    series_b,
    label_a: str = 'a',
    label_b: str = 'b',
    thresholds: Optional[Mapping[str, Any]] = None,
) -> CorrelationResult:
    """
    Pearson correlation of two equally long series.

    Args:
        series_a, series_b: Numeric sequences, paired by position
        label_a, label_b: Metric names carried into the result
        thresholds: Optional threshold sections; uses ``CORRELATION``

    Returns:
        CorrelationResult. Mismatched lengths or fewer than ``min_points``
        pairs give coefficient 0, p_value 1, none/weak/not_significant.
        Zero variance in either series gives coefficient 0.
    """
    cfg = get_section('CORRELATION', thresholds)
    a = np.asarray(series_a, dtype=np.float64).ravel()
    b = np.asarray(series_b, dtype=np.float64).ravel()

    empty = CorrelationResult(metric_a=label_a, metric_b=label_b)
    if len(a) != len(b):
        return empty

    mask = np.isfinite(a) & np.isfinite(b)
    a, b = a[mask], b[mask]
    n = len(a)
    if n < cfg['min_points']:
        return empty

    da = a - np.mean(a)
    db = b - np.mean(b)
    denom = float(np.sqrt(np.dot(da, da) * np.dot(db, db)))
    if denom <= 0.0:
        return empty

    r = float(np.clip(np.dot(da, db) / denom, -1.0, 1.0))

    df = n - 2
    if abs(r) >= 1.0:
        p_value = 0.0
    elif df <= 0:
        p_value = 1.0
    else:
        t_stat = r * np.sqrt(df / (1.0 - r * r))
        p_value = float(2.0 * stats.t.sf(abs(t_stat), df))

    return CorrelationResult(
        metric_a=label_a,
        metric_b=label_b,
        correlation_coefficient=r,
        p_value=p_value,
        significance=(CorrelationSignificance.SIGNIFICANT if p_value < cfg['alpha']
                      else CorrelationSignificance.NOT_SIGNIFICANT),
        relationship=_relationship(r, cfg),
        strength=_strength(r, cfg),
    )


def correlation_matrix(
    series_by_metric: Mapping[str, Any],
    thresholds: Optional[Mapping[str, Any]] = None,
) -> List[CorrelationResult]:
    """Pairwise correlations for every pair of metrics, in key order."""
    names = list(series_by_metric)
    return [
        calculate_correlation(series_by_metric[x], series_by_metric[y], x, y, thresholds)
        for x, y in combinations(names, 2)
    ]
