"""
Seasonal Pattern Detector.

Buckets samples by position within a cycle (minute-of-hour, hour-of-day,
day-of-week), then tests whether bucket means differ by more than the
within-bucket noise explains. Flat or noisy data yields no pattern.

Decision rule per pattern type:
    1. At least ``min_samples`` points covering one full cycle.
    2. Relative strength std(bucket means) / |mean| above
       ``min_relative_strength``.
    3. One-way ANOVA F-test p-value below ``alpha``.

Confidence is eta squared (between-bucket share of total variance).
"""

import calendar
import logging
from datetime import datetime, timedelta
from typing import Any, List, Mapping, Optional, Sequence

import numpy as np
from scipy import stats

from perfsight.config.thresholds import get_section
from perfsight.core._series import finite_samples, format_timestamp, parse_timestamp, sample_timestamp
from perfsight.models.enums import PatternType
from perfsight.models.results import SeasonalPattern

logger = logging.getLogger(__name__)


def _bucket_of(pattern_type: PatternType, dt: datetime) -> int:
    if pattern_type == PatternType.HOURLY:
        return dt.minute // 5
    if pattern_type == PatternType.DAILY:
        return dt.hour
    return dt.weekday()


def _bucket_label(pattern_type: PatternType, bucket: int) -> str:
    if pattern_type == PatternType.HOURLY:
        return f":{bucket * 5:02d}"
    if pattern_type == PatternType.DAILY:
        return f"{bucket:02d}:00"
    return calendar.day_name[bucket]


def _next_occurrence(pattern_type: PatternType, bucket: int, after: datetime) -> datetime:
    """First start of ``bucket`` strictly after ``after``."""
    if pattern_type == PatternType.HOURLY:
        candidate = after.replace(minute=bucket * 5, second=0, microsecond=0)
        step = timedelta(hours=1)
    elif pattern_type == PatternType.DAILY:
        candidate = after.replace(hour=bucket, minute=0, second=0, microsecond=0)
        step = timedelta(days=1)
    else:
        midnight = after.replace(hour=0, minute=0, second=0, microsecond=0)
        candidate = midnight + timedelta(days=bucket - after.weekday())
        step = timedelta(days=7)
    while candidate <= after:
        candidate += step
    return candidate


def _detect(
    pattern_type: PatternType,
    times: List[datetime],
    values: np.ndarray,
    metric_type: str,
    cfg: Mapping[str, Any],
) -> Optional[SeasonalPattern]:
    tcfg = cfg[pattern_type.value]
    n = len(values)
    if n < tcfg['min_samples']:
        return None

    span_hours = (max(times) - min(times)).total_seconds() / 3600.0
    if span_hours + tcfg['bucket_hours'] < tcfg['cycle_hours']:
        return None

    buckets = np.array([_bucket_of(pattern_type, t) for t in times])
    occupied = np.unique(buckets)
    k = len(occupied)
    if k < 2:
        return None

    grand_mean = float(np.mean(values))
    means = np.array([np.mean(values[buckets == b]) for b in occupied])
    counts = np.array([np.sum(buckets == b) for b in occupied])

    spread = float(np.std(means))
    if abs(grand_mean) > 1e-12:
        relative = spread / abs(grand_mean)
    else:
        relative = 1.0 if spread > 0 else 0.0

    ss_between = float(np.sum(counts * (means - grand_mean) ** 2))
    ss_within = float(sum(np.sum((values[buckets == b] - m) ** 2) for b, m in zip(occupied, means)))
    ss_total = ss_between + ss_within

    df_between, df_within = k - 1, n - k
    if ss_between <= 0.0:
        p_value = 1.0
    elif ss_within <= 1e-12 * ss_total:
        p_value = 0.0                        # every bucket is constant
    elif df_within > 0:
        f_stat = (ss_between / df_between) / (ss_within / df_within)
        p_value = float(stats.f.sf(f_stat, df_between, df_within))
    else:
        p_value = 1.0

    logger.debug("%s %s: relative=%.3f p=%.4f buckets=%d",
                 metric_type, pattern_type.value, relative, p_value, k)

    if relative <= cfg['min_relative_strength'] or p_value >= cfg['alpha']:
        return None

    band = cfg['peak_band'] * spread
    centre = float(np.mean(means))
    peaks = [_bucket_label(pattern_type, int(b)) for b, m in zip(occupied, means) if m > centre + band]
    lows = [_bucket_label(pattern_type, int(b)) for b, m in zip(occupied, means) if m < centre - band]
    top_bucket = int(occupied[int(np.argmax(means))])

    return SeasonalPattern(
        pattern_id=f"{metric_type}_{pattern_type.value}_seasonal",
        pattern_type=pattern_type,
        metric_type=metric_type,
        peak_times=peaks,
        low_times=lows,
        amplitude=float(np.max(means) - np.min(means)),
        confidence=float(np.clip(ss_between / ss_total, 0.0, 1.0)) if ss_total > 0 else 0.0,
        seasonal_strength=float(min(1.0, relative)),
        next_predicted_peak=format_timestamp(_next_occurrence(pattern_type, top_bucket, max(times))),
    )


def identify_seasonal_patterns(
    samples: Sequence[Any],
    metric_type: str = 'fps',
    pattern_types: Optional[Sequence[str]] = None,
    thresholds: Optional[Mapping[str, Any]] = None,
) -> List[SeasonalPattern]:
    """
    Detect hourly, daily and weekly cycles in a timestamped series.

    Args:
        samples: MetricSamples or mappings with ``timestamp`` and ``value``
        metric_type: Metric label carried into each pattern
        pattern_types: Subset of hourly/daily/weekly (default daily, weekly)
        thresholds: Optional threshold sections; uses ``SEASONAL``

    Returns:
        Declared patterns, possibly empty. Timestamps are bucketed in UTC;
        malformed timestamps raise ValueError.
    """
    cfg = get_section('SEASONAL', thresholds)
    kept, values = finite_samples(samples)
    if len(values) == 0:
        return []

    times = [parse_timestamp(sample_timestamp(s)) for s in kept]
    requested = pattern_types if pattern_types is not None else cfg['default_types']

    patterns = []
    for name in requested:
        pattern = _detect(PatternType(name), times, values, metric_type, cfg)
        if pattern is not None:
            patterns.append(pattern)
    return patterns
