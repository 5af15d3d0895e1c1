"""
perfsight Analysis Thresholds
=============================

Centralized configuration for every cutoff, weight and band used by the
statistical primitives, the insight analyzer and the recommendation engine.

Principle: numeric boundaries are named constants, never inline literals.
Adjusting them changes classification sensitivity without code changes.

Usage:
    from perfsight.config.thresholds import (
        ANOMALY,
        CORRELATION,
        get_thresholds,
        get_section,
    )

Profile Overrides:
    thresholds = get_thresholds('strict')
    # Returns merged default + profile-specific thresholds

Every public analysis function accepts an optional ``thresholds`` mapping
shaped like ``get_thresholds()``; sections it lacks fall back to the active
defaults.
"""

from typing import Dict, Any, Optional, Mapping
from copy import deepcopy


# =============================================================================
# DESCRIPTIVE STATISTICS
# =============================================================================
# Used in: perfsight/primitives/statistics.py

STATISTICS = {
    'iqr_multiplier': 1.5,          # Tukey fences: Q1 - k*IQR, Q3 + k*IQR
}


# =============================================================================
# REGRESSION & CORRELATION
# =============================================================================
# Used in: perfsight/primitives/regression.py, perfsight/core/correlation.py

REGRESSION = {
    'min_points': 3,                # Fewer points -> zeroed result
    'alpha': 0.05,                  # Two-sided t test on the slope
    'min_r_squared': 0.1,           # Significant also requires r^2 above this
}

CORRELATION = {
    'min_points': 3,
    'alpha': 0.05,
    'none_below': 0.1,              # |r| below this -> relationship "none"
    'moderate_above': 0.3,          # |r| above this -> "moderate"
    'strong_above': 0.7,            # |r| above this -> "strong"
}


# =============================================================================
# ANOMALY DETECTION
# =============================================================================
# Used in: perfsight/core/anomaly.py

ANOMALY = {
    'min_samples': 3,
    'z_threshold': 2.0,             # Flag when |z| > threshold
    # Severity by |z|: checked from the top, first band exceeded wins
    'severity_bands': {
        'critical': 4.0,
        'high': 3.0,
        'medium': 2.5,
    },
}


# =============================================================================
# SEASONAL PATTERNS
# =============================================================================
# Used in: perfsight/core/seasonal.py
# A cycle is covered when (last - first + bucket_hours) >= cycle_hours.

SEASONAL = {
    'alpha': 0.05,                  # F-test on between/within bucket variance
    'min_relative_strength': 0.1,   # std(bucket means) / |mean| must exceed
    'peak_band': 0.5,               # peaks/lows beyond mean +/- band * std
    'default_types': ['daily', 'weekly'],
    'hourly': {'buckets': 12, 'min_samples': 12, 'bucket_hours': 5 / 60, 'cycle_hours': 1.0},
    'daily': {'buckets': 24, 'min_samples': 24, 'bucket_hours': 1.0, 'cycle_hours': 24.0},
    'weekly': {'buckets': 7, 'min_samples': 14, 'bucket_hours': 24.0, 'cycle_hours': 168.0},
}


# =============================================================================
# TREND ANALYSIS
# =============================================================================
# Used in: perfsight/core/trend.py, perfsight/primitives/trend.py

TREND = {
    'min_points': 3,
    'stable_slope_abs': 0.01,       # |slope| below max(abs, rel * |mean|) -> stable
    'stable_slope_rel': 0.005,
    'high_confidence': 0.8,         # |r| >= this -> significance "high"
    'medium_confidence': 0.5,       # |r| >= this -> significance "medium"
    'mk_min_points': 4,             # Mann-Kendall needs at least this many
    'mk_alpha': 0.05,
}


# =============================================================================
# PERFORMANCE SCORING
# =============================================================================
# Used in: perfsight/core/scoring.py
# fps is higher-is-better; memory (MB) and cpu (%) are lower-is-better.

SCORING = {
    'weights': {'fps': 0.4, 'memory': 0.3, 'cpu': 0.3},
    'benchmarks': {
        'fps': {'excellent': 45, 'good': 35, 'average': 25, 'poor': 15},
        'memory': {'excellent': 40, 'good': 80, 'average': 120, 'poor': 200},
        'cpu': {'excellent': 10, 'good': 25, 'average': 45, 'poor': 70},
    },
    'grades': {'A': 90, 'B': 80, 'C': 70, 'D': 60},
    'trend_weight': 0.15,
    'max_trend_adjustment': 10.0,
    'min_trend_points': 5,
    'stable_net_score': 0.1,        # |improving - declining| below -> stable
    'significance_strength': {'high': 1.0, 'medium': 0.7, 'low': 0.3},
}

# Which direction of change is good for each metric.
METRIC_POLARITY = {
    'fps': 'higher_is_better',
    'memory': 'lower_is_better',
    'memory_usage': 'lower_is_better',
    'cpu': 'lower_is_better',
    'cpu_usage': 'lower_is_better',
    'load_time': 'lower_is_better',
}


# =============================================================================
# INSIGHT GENERATION
# =============================================================================
# Used in: perfsight/core/insights.py

INSIGHTS = {
    'anomaly_z_threshold': 2.5,
    'trend_min_slope': {            # |slope| per period needed for a trend insight
        'fps': 0.1,
        'memory_usage': 5.0,
        'cpu_usage': 1.0,
        'load_time': 50.0,
    },
    'max_anomaly_insights': 5,
    'max_opportunity_insights': 3,
    'max_insights': 20,
    'opportunity_confidence': 0.8,
    'score_alert_confidence': 0.9,
    'score_baseline': 80,
    'anomaly_confidence_z': 5.0,    # confidence = min(1, |z| / this)
    'top_priority_score': 3.0,      # summary count of recommendations above
    'memory_opportunity_mb': 300,
    'fps_opportunity': 50,
    'cpu_opportunity_pct': 50,
    # Opportunity impact, complexity and target per metric
    'memory_high_impact_mb': 600,
    'memory_complex_mb': 800,
    'memory_target_floor_mb': 200,
    'memory_target_ratio': 0.7,
    'memory_max_improvement': 50,
    'fps_high_impact_below': 30,
    'fps_complex_below': 20,
    'fps_target': 60,
    'fps_target_ratio': 1.5,
    'fps_max_improvement': 100,
    'cpu_high_impact_pct': 80,
    'cpu_complex_pct': 90,
    'cpu_target_floor_pct': 30,
    'cpu_target_ratio': 0.7,
    'cpu_max_improvement': 50,
}


# =============================================================================
# RECOMMENDATION PRIORITY
# =============================================================================
# Used in: perfsight/recommend/scoring.py

PRIORITY = {
    'impact_weights': {'high': 3, 'medium': 2, 'low': 1},
    'effort_weights': {'low': 3, 'medium': 2, 'high': 1},      # inverted
    'severity_weights': {'critical': 4, 'high': 3, 'medium': 2, 'low': 1},
    'complexity_weights': {'simple': 3, 'moderate': 2, 'complex': 1},
    'factor_weights': {
        'impact': 0.3,
        'effort': 0.2,
        'confidence': 0.2,
        'severity': 0.2,
        'rule': 0.1,
    },
    # Context multiplier boosts
    'low_fps': 30,
    'low_fps_boost': 0.5,           # rendering recommendations
    'high_memory_mb': 600,
    'high_memory_boost': 0.3,       # memory recommendations
    'route_sessions': 100,
    'route_sessions_boost': 0.3,
    'route_duration_ms': 4000,
    'route_duration_boost': 0.4,
    'route_devices': 20,
    'route_devices_boost': 0.2,
    'route_category_boost': 0.25,
    # Device factor: min(max_device_factor, 1 + devices / device_divisor)
    'device_divisor': 100,
    'max_device_factor': 1.5,
    # Opportunity and route-optimization scoring
    'improvement_divisor': 20,
    'max_improvement_weight': 3.0,
    'budget_boosts': {'exceeded': 1.0, 'approaching': 0.5},
    'device_issue_boost': 0.5,
    'preloading_boost': 0.7,
    'caching_boost': 0.6,
}

RECOMMENDATION = {
    'min_insight_score': 1.5,
    'min_opportunity_score': 2.0,
    'min_route_score': 2.0,
    'max_recommendations': 10,
}

PROACTIVE = {
    'min_probability': 0.5,
    'memory_value_mb': 400,
    'fps_value': 45,
    'route_score': 60,
    'seasonal_confidence': 0.7,
    'seasonal_strength': 0.3,
    'seasonal_window_hours': 72,
    'warning_confidence': 0.6,
    'max_recommendations': 8,
    'base_score': 3.0,
    'probability_weight': 2.0,
    # Predicted-value severity: first band whose ceiling the value is under
    'value_severity_bands': [(30, 2.0), (50, 1.5)],
    'default_value_severity': 1.0,
    'seasonal_base_score': 3.5,
    'warning_base_score': 2.0,
    'time_urgency': {'1h': 2.0, '24h': 1.5, '7d': 1.0, '30d': 0.5},
}


# =============================================================================
# ROUTE OPTIMIZATION
# =============================================================================
# Used in: perfsight/recommend/routes.py

ROUTES = {
    'budget_ms': 5000,
    'approaching_ratio': 0.8,       # above ratio * budget -> approaching
    'slow_duration_ms': 3000,       # preloading when slower than this
    'high_traffic_sessions': 20,
    'traffic_duration_ms': 2000,    # ...or busy and slower than this
    'caching_high_sessions': 50,
    'caching_sessions_per_device': 2,
    'caching_medium_sessions': 20,
    'caching_memory_ceiling_mb': 400,
    'high_memory_mb': 500,
    'low_fps': 45,
    'compatibility_floor': 60,      # tier score below this is an issue
    'heavy_duration_ms': 4000,
    'heavy_memory_mb': 500,
    'normal_duration_ms': 2000,
    'normal_memory_mb': 300,
}


# =============================================================================
# PREDICTION & EARLY WARNING
# =============================================================================
# Used in: perfsight/core/prediction.py

PREDICTION = {
    'min_points': 3,
    'interval_z': 1.96,             # 95% interval
    'horizon_hours': {'1h': 1, '24h': 24, '7d': 168, '30d': 720},
    'issue_thresholds': {
        'fps': {'direction': 'below', 'value': 45},
        'memory_usage': {'direction': 'above', 'value': 500},
        'cpu_usage': {'direction': 'above', 'value': 80},
    },
    'route_horizon_days': 7,
    'route_min_sessions': 3,
    'route_fallback_interval': [30.0, 70.0],
    'route_fallback_score': 50.0,
}

EARLY_WARNING = {
    'min_probability': 0.5,
    'fps_degradation': 45,
    'memory_spike_mb': 500,
    'cpu_spike_pct': 80,
    'confidence': 0.6,
    'seasonal_window_hours': 48,
    'degradation_score': 60,        # predicted value below -> degradation alert
    'route_high_score': 50,
    'critical_score': 30,
    'fps_drop_ratio': 0.8,          # predicted < ratio * current avg fps
    'memory_spike_ratio': 1.5,      # predicted > ratio * current avg memory
    'memory_min_points': 10,
    'smoothing_alpha': 0.3,
    'smoothing_periods': 3,
    'max_alerts': 10,
}


_SECTIONS = {
    'STATISTICS': STATISTICS,
    'REGRESSION': REGRESSION,
    'CORRELATION': CORRELATION,
    'ANOMALY': ANOMALY,
    'SEASONAL': SEASONAL,
    'TREND': TREND,
    'SCORING': SCORING,
    'INSIGHTS': INSIGHTS,
    'PRIORITY': PRIORITY,
    'RECOMMENDATION': RECOMMENDATION,
    'PROACTIVE': PROACTIVE,
    'ROUTES': ROUTES,
    'PREDICTION': PREDICTION,
    'EARLY_WARNING': EARLY_WARNING,
}


# =============================================================================
# PROFILE OVERRIDES
# =============================================================================

PROFILE_OVERRIDES = {
    'strict': {
        'description': 'Flag more anomalies, surface fewer weak recommendations',
        'ANOMALY': {'z_threshold': 1.5},
        'CORRELATION': {'moderate_above': 0.4, 'strong_above': 0.8},
        'RECOMMENDATION': {'min_insight_score': 2.0},
        'TREND': {'stable_slope_rel': 0.0025},
    },
    'lenient': {
        'description': 'Only pronounced anomalies and trends',
        'ANOMALY': {'z_threshold': 3.0},
        'TREND': {'stable_slope_rel': 0.01},
        'SEASONAL': {'min_relative_strength': 0.2},
    },
}


def get_thresholds(profile: Optional[str] = None) -> Dict[str, Any]:
    """
    Get merged thresholds for a named profile.

    Args:
        profile: Profile name (strict, lenient) or None for defaults

    Returns:
        Dict with all threshold sections, with profile overrides applied
    """
    result = {name: deepcopy(values) for name, values in _SECTIONS.items()}

    if profile:
        profile_lower = profile.lower()
        if profile_lower not in PROFILE_OVERRIDES:
            raise KeyError(f"Unknown threshold profile: {profile}")
        for key, values in PROFILE_OVERRIDES[profile_lower].items():
            if key == 'description':
                result['description'] = values
            elif key in result and isinstance(values, dict):
                result[key].update(deepcopy(values))
        result['profile'] = profile_lower

    return result


def list_profiles() -> list:
    """List all available threshold profiles."""
    return list(PROFILE_OVERRIDES.keys())


# =============================================================================
# OVERRIDE SUPPORT
# =============================================================================
# Overrides are explicit: build a mapping here and pass it as ``thresholds``.


def get_active_thresholds(
    profile: Optional[str] = None,
    overrides: Optional[Mapping[str, Any]] = None,
) -> Dict[str, Any]:
    """
    Get thresholds with profile and caller overrides applied.

    Priority: overrides > profile_overrides > defaults

    Args:
        profile: Profile name or None for defaults
        overrides: Dict of section name -> values to override

    Returns:
        A new dict, ready to inject as ``thresholds``
    """
    result = get_thresholds(profile)

    for key, values in (overrides or {}).items():
        if key in result and isinstance(values, dict):
            result[key].update(deepcopy(values))

    return result


def get_section(name: str, thresholds: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
    """
    Resolve one threshold section.

    Keys present in ``thresholds[name]`` win over the module defaults, which
    are never mutated. Nested dicts are replaced whole, not merged.
    """
    merged = dict(_SECTIONS[name])
    if thresholds and name in thresholds:
        merged.update(thresholds[name])
    return merged
