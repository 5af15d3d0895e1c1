"""
Anomaly Detector.

Z-score outlier flagging against the series mean, with severity bands on |z|.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence

import numpy as np

from perfsight.config.thresholds import get_section
from perfsight.core._series import finite_samples, sample_screen, sample_timestamp
from perfsight.models.enums import Severity
from perfsight.models.results import AnomalyRecord
from perfsight.primitives.statistics import percentile_rank

logger = logging.getLogger(__name__)


def classify_anomaly_severity(
    abs_z: float,
    bands: Optional[Mapping[str, float]] = None,
) -> Severity:
    """
    Map |z| to a severity. Monotonic: a larger |z| never gets a lower severity.

    Args:
        abs_z: Absolute z-score
        bands: {'critical': c, 'high': h, 'medium': m} lower bounds (exclusive)

    Returns:
        Severity
    """
    if bands is None:
        bands = get_section('ANOMALY')['severity_bands']
    abs_z = abs(abs_z)
    if abs_z > bands['critical']:
        return Severity.CRITICAL
    if abs_z > bands['high']:
        return Severity.HIGH
    if abs_z > bands['medium']:
        return Severity.MEDIUM
    return Severity.LOW


def detect_anomalies(
    samples: Sequence[Any],
    metric_type: str,
    z_threshold: Optional[float] = None,
    thresholds: Optional[Mapping[str, Any]] = None,
) -> List[AnomalyRecord]:
    """
    Flag samples whose |z| exceeds ``z_threshold``.

    Args:
        samples: MetricSamples, mappings with ``value``/``timestamp``, or numbers
        metric_type: Metric label carried into each record
        z_threshold: Detection threshold (default ``ANOMALY['z_threshold']``)
        thresholds: Optional threshold sections

    Returns:
        Records in input order. Empty for fewer than ``min_samples`` finite
        values or a zero-variance series.
    """
    cfg = get_section('ANOMALY', thresholds)
    if z_threshold is None:
        z_threshold = cfg['z_threshold']

    kept, values = finite_samples(samples)
    if len(values) < cfg['min_samples']:
        return []

    mean = float(np.mean(values))
    std = float(np.std(values))
    if std <= 1e-12 * max(1.0, abs(mean)):
        return []

    z_scores = (values - mean) / std
    records = []
    for index, (sample, value, z) in enumerate(zip(kept, values, z_scores)):
        if abs(z) <= z_threshold:
            continue
        context: Dict[str, Any] = {
            'screen_name': sample_screen(sample),
            'percentile_rank': percentile_rank(value, values),
        }
        records.append(AnomalyRecord(
            id=f"anomaly_{metric_type}_{index}",
            metric_type=metric_type,
            value=float(value),
            expected_value=mean,
            deviation=float(value - mean),
            z_score=float(z),
            severity=classify_anomaly_severity(abs(z), cfg['severity_bands']),
            timestamp=str(sample_timestamp(sample) or ''),
            context=context,
        ))

    logger.debug("%s: %d anomalies over %d samples (|z| > %.2f)",
                 metric_type, len(records), len(values), z_threshold)
    return records
