"""
Tests for threshold configuration: profiles, explicit overrides, YAML files.
"""

import pytest

from perfsight.config.loader import load_config, load_threshold_file
from perfsight.config.thresholds import (
    ANOMALY,
    get_active_thresholds,
    get_section,
    get_thresholds,
    list_profiles,
)
from perfsight.core.anomaly import detect_anomalies
from perfsight.validation import ValidationError


class TestProfiles:

    def test_defaults_are_copies(self):
        t = get_thresholds()
        t['ANOMALY']['z_threshold'] = 99
        assert ANOMALY['z_threshold'] == 2.0

    def test_strict_profile(self):
        t = get_thresholds('strict')
        assert t['ANOMALY']['z_threshold'] == 1.5
        assert t['profile'] == 'strict'
        assert t['ANOMALY']['severity_bands'] == ANOMALY['severity_bands']

    def test_unknown_profile(self):
        with pytest.raises(KeyError):
            get_thresholds('reckless')

    def test_list_profiles(self):
        assert set(list_profiles()) == {'strict', 'lenient'}


class TestSectionResolution:

    def test_active_thresholds_with_overrides(self):
        t = get_active_thresholds('strict', {'ANOMALY': {'z_threshold': 2.7}})
        assert t['ANOMALY']['z_threshold'] == 2.7
        assert t['CORRELATION']['strong_above'] == 0.8
        assert get_section('ANOMALY')['z_threshold'] == 2.0

    def test_caller_thresholds_win(self):
        assert get_section('ANOMALY', {'ANOMALY': {'z_threshold': 1.1}})['z_threshold'] == 1.1

    def test_missing_section_falls_back(self):
        assert get_section('TREND', {'ANOMALY': {}})['min_points'] == 3

    def test_injected_mapping_is_the_only_override(self):
        values = [28, 30, 32, 29, 31, 100, 30, 29]
        get_active_thresholds(overrides={'ANOMALY': {'min_samples': 100}})
        assert len(detect_anomalies(values, 'fps', 2.0)) == 1

        needs_more = get_active_thresholds(overrides={'ANOMALY': {'min_samples': 100}})
        assert detect_anomalies(values, 'fps', 2.0, thresholds=needs_more) == []

    def test_defaults_not_mutated(self):
        get_section('ANOMALY', {'ANOMALY': {'z_threshold': 9.0}})
        assert ANOMALY['z_threshold'] == 2.0


class TestThresholdFile:

    def test_load(self, tmp_path):
        path = tmp_path / "thresholds.yaml"
        path.write_text("profile: lenient\nanomaly:\n  z_threshold: 2.2\nrecommendation:\n  max_recommendations: 5\n")
        t = load_threshold_file(path)
        assert t['ANOMALY']['z_threshold'] == 2.2
        assert t['RECOMMENDATION']['max_recommendations'] == 5
        assert t['TREND']['stable_slope_rel'] == 0.01

    def test_unknown_section(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("bogus:\n  x: 1\n")
        with pytest.raises(ValidationError) as exc:
            load_threshold_file(path)
        assert "bogus" in exc.value.errors[0]

    def test_non_mapping_section(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("anomaly: 3\n")
        with pytest.raises(ValidationError):
            load_threshold_file(path)

    def test_unknown_profile_in_file(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("profile: reckless\n")
        with pytest.raises(ValidationError):
            load_threshold_file(path)

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert load_threshold_file(path)['ANOMALY']['z_threshold'] == 2.0

    def test_load_config_missing_file(self, tmp_path):
        t = load_config(tmp_path / "perfsight.yaml")
        assert t['ANOMALY']['z_threshold'] == 2.0
