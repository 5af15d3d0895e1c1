"""
Tests for z-score anomaly detection.
"""

import numpy as np
import pytest

from perfsight.core.anomaly import classify_anomaly_severity, detect_anomalies
from perfsight.models.enums import Severity, severity_rank
from perfsight.models.results import MetricSample


FPS_WITH_SPIKE = [28, 30, 32, 29, 31, 100, 30, 29]


class TestDetectAnomalies:

    def test_single_spike(self):
        anomalies = detect_anomalies(FPS_WITH_SPIKE, 'fps', z_threshold=2.0)
        assert len(anomalies) == 1
        a = anomalies[0]
        assert a.value == 100
        assert a.z_score > 2.0
        assert a.metric_type == 'fps'
        assert a.id == "anomaly_fps_5"
        assert a.expected_value == pytest.approx(np.mean(FPS_WITH_SPIKE))
        assert a.deviation == pytest.approx(100 - np.mean(FPS_WITH_SPIKE))

    def test_threshold_monotonic(self):
        np.random.seed(42)
        values = np.random.randn(200) * 5 + 50
        lenient = detect_anomalies(values, 'fps', z_threshold=1.0)
        strict = detect_anomalies(values, 'fps', z_threshold=3.0)
        assert len(lenient) >= len(strict)

    def test_signed_z_for_drop(self):
        values = [30.0] * 19 + [0.0]
        anomalies = detect_anomalies(values, 'fps')
        assert len(anomalies) == 1
        assert anomalies[0].z_score < 0
        assert anomalies[0].severity == Severity.CRITICAL
        assert anomalies[0].context['percentile_rank'] == 0.0

    def test_zero_variance(self):
        assert detect_anomalies([50, 50, 50, 50], 'fps') == []

    def test_too_few_samples(self):
        assert detect_anomalies([1, 100], 'fps') == []

    def test_sample_context(self):
        samples = [MetricSample(timestamp=f"2024-01-01T00:0{i}:00Z", value=v, screen_name="home")
                   for i, v in enumerate(FPS_WITH_SPIKE)]
        a = detect_anomalies(samples, 'fps')[0]
        assert a.timestamp == "2024-01-01T00:05:00Z"
        assert a.context['screen_name'] == "home"

    def test_threshold_from_profile(self):
        anomalies = detect_anomalies(FPS_WITH_SPIKE, 'fps', thresholds={'ANOMALY': {'z_threshold': 2.5}})
        assert anomalies == []


class TestSeverity:

    @pytest.mark.parametrize("z, expected", [
        (1.0, Severity.LOW),
        (2.6, Severity.MEDIUM),
        (3.5, Severity.HIGH),
        (4.5, Severity.CRITICAL),
        (-4.5, Severity.CRITICAL),
    ])
    def test_bands(self, z, expected):
        assert classify_anomaly_severity(z) == expected

    def test_monotonic(self):
        ranks = [severity_rank(classify_anomaly_severity(z)) for z in np.linspace(0, 6, 61)]
        assert ranks == sorted(ranks)
