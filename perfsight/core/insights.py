"""
Insight Analyzer.

Composes the statistical analyzers into a report: per-metric trends,
anomalies, optimization opportunities and score alerts become
PerformanceInsights, which the recommendation engine turns into ranked
recommendations.

The trend analyzer is direction-agnostic. Whether a trend is a decline
is decided here from ``METRIC_POLARITY`` (fps going down is a decline,
memory going up is a decline).

Usage:
    from perfsight.core.insights import InsightAnalyzer

    analyzer = InsightAnalyzer()
    report = analyzer.generate_report(samples_by_metric, summary)
"""

import logging
import time
from datetime import datetime, timedelta
from itertools import combinations
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence
from uuid import uuid4

from perfsight.config.thresholds import METRIC_POLARITY, get_section
from perfsight.core._series import (
    finite_samples,
    format_timestamp,
    parse_timestamp,
    sample_timestamp,
    utc_now,
)
from perfsight.core.anomaly import detect_anomalies
from perfsight.core.correlation import calculate_correlation
from perfsight.core.scoring import calculate_performance_score
from perfsight.core.seasonal import identify_seasonal_patterns
from perfsight.core.trend import analyze_trend, describe_time_period
from perfsight.models.base import label_of
from perfsight.models.enums import (
    Complexity,
    Grade,
    Impact,
    InsightCategory,
    InsightType,
    OpportunityType,
    Severity,
    Significance,
    TrendDirection,
    severity_rank,
)
from perfsight.models.insights import DataContext, InsightsReport, PerformanceInsight
from perfsight.models.results import (
    AnomalyRecord,
    CorrelationResult,
    OptimizationOpportunity,
    PerformanceScore,
    PerformanceSummary,
    TrendAnalysis,
)

logger = logging.getLogger(__name__)

_TREND_TITLES = {
    'fps': ("FPS Performance", "Declining", "Improving"),
    'memory_usage': ("Memory Usage", "Increasing", "Decreasing"),
    'cpu_usage': ("CPU Usage", "Increasing", "Decreasing"),
    'load_time': ("Load Time", "Increasing", "Decreasing"),
}

_IMPACT_ORDER = {'high': 3, 'medium': 2, 'low': 1}


def metric_category(metric_type: str) -> InsightCategory:
    """Insight category of a metric or opportunity name."""
    if 'memory' in metric_type:
        return InsightCategory.MEMORY
    if 'cpu' in metric_type:
        return InsightCategory.CPU
    return InsightCategory.PERFORMANCE


def _title_words(label: str) -> str:
    return label.replace('_', ' ').title()


def _time_range(samples_by_metric: Mapping[str, Sequence[Any]]) -> Optional[Dict[str, str]]:
    stamps = [
        parse_timestamp(ts)
        for samples in samples_by_metric.values()
        for ts in (sample_timestamp(s) for s in samples)
        if ts is not None
    ]
    if not stamps:
        return None
    return {'start': format_timestamp(min(stamps)), 'end': format_timestamp(max(stamps))}


def _aligned_values(samples_a: Sequence[Any], samples_b: Sequence[Any]):
    """Pair two series on shared timestamps, or by position when untimestamped."""
    kept_a, values_a = finite_samples(samples_a)
    kept_b, values_b = finite_samples(samples_b)

    stamps_a = [sample_timestamp(s) for s in kept_a]
    stamps_b = [sample_timestamp(s) for s in kept_b]
    if None in stamps_a or None in stamps_b:
        return values_a, values_b

    by_time = {parse_timestamp(t): v for t, v in zip(stamps_b, values_b)}
    pairs = [(v, by_time[parse_timestamp(t)]) for t, v in zip(stamps_a, values_a)
             if parse_timestamp(t) in by_time]
    return [p[0] for p in pairs], [p[1] for p in pairs]


class InsightAnalyzer:
    """
    Builds insights and full reports from grouped metric samples.

    Args:
        engine: Recommendation engine used by ``generate_report``; a default
            ``RecommendationEngine`` sharing the same clock and thresholds
            when omitted
        thresholds: Optional threshold sections (see ``perfsight.config``)
        clock: Returns the current UTC time
        id_factory: Returns a fresh report id
    """

    def __init__(
        self,
        engine: Any = None,
        thresholds: Optional[Mapping[str, Any]] = None,
        clock: Callable[[], datetime] = utc_now,
        id_factory: Callable[[], Any] = uuid4,
    ):
        if engine is None:
            from perfsight.recommend.engine import RecommendationEngine
            engine = RecommendationEngine(clock=clock, thresholds=thresholds)

        self.engine = engine
        self.thresholds = thresholds
        self.clock = clock
        self.id_factory = id_factory

    @property
    def _cfg(self) -> Dict[str, Any]:
        return get_section('INSIGHTS', self.thresholds)

    def _stamp(self) -> int:
        return int(self.clock().timestamp() * 1000)

    # -------------------------------------------------------------------------
    # Analysis
    # -------------------------------------------------------------------------

    def analyze_trends(self, samples_by_metric: Mapping[str, Sequence[Any]]) -> Dict[str, TrendAnalysis]:
        """Trend per metric, all sharing the span of the longest series."""
        longest = max(samples_by_metric.values(), key=len, default=[])
        period = describe_time_period(longest)
        return {
            metric: analyze_trend(samples, metric, period, self.thresholds)
            for metric, samples in samples_by_metric.items()
        }

    def detect_anomalies(self, samples_by_metric: Mapping[str, Sequence[Any]]) -> List[AnomalyRecord]:
        """All anomalies across metrics, largest |z| first."""
        anomalies: List[AnomalyRecord] = []
        for metric, samples in samples_by_metric.items():
            anomalies.extend(detect_anomalies(
                samples, metric, self._cfg['anomaly_z_threshold'], self.thresholds,
            ))
        return sorted(anomalies, key=lambda a: abs(a.z_score), reverse=True)

    def identify_opportunities(self, summary: PerformanceSummary) -> List[OptimizationOpportunity]:
        """
        Rule-based optimization opportunities from global averages.

        Returns:
            Memory, fps and cpu opportunities whose average crosses the
            configured level, highest potential impact first
        """
        cfg = self._cfg
        stamp = self._stamp()
        opportunities = []

        memory = summary.avg_memory
        if memory > cfg['memory_opportunity_mb']:
            opportunities.append(OptimizationOpportunity(
                id=f"memory_opt_{stamp}",
                type=OpportunityType.MEMORY_OPTIMIZATION,
                potential_impact=Impact.HIGH if memory > cfg['memory_high_impact_mb'] else Impact.MEDIUM,
                affected_metric='memory_usage',
                current_value=memory,
                target_value=max(float(cfg['memory_target_floor_mb']), memory * cfg['memory_target_ratio']),
                improvement_potential=min(float(cfg['memory_max_improvement']),
                                          (memory - cfg['memory_target_floor_mb']) / memory * 100),
                complexity=Complexity.COMPLEX if memory > cfg['memory_complex_mb'] else Complexity.MODERATE,
                description=(f"High memory usage detected ({memory:.0f}MB average). "
                             "Consider implementing memory optimization strategies."),
            ))

        fps = summary.avg_fps
        if fps < cfg['fps_opportunity']:
            opportunities.append(OptimizationOpportunity(
                id=f"fps_opt_{stamp}",
                type=OpportunityType.FPS_IMPROVEMENT,
                potential_impact=Impact.HIGH if fps < cfg['fps_high_impact_below'] else Impact.MEDIUM,
                affected_metric='fps',
                current_value=fps,
                target_value=min(float(cfg['fps_target']), fps * cfg['fps_target_ratio']),
                improvement_potential=min(float(cfg['fps_max_improvement']),
                                          (cfg['fps_target'] - fps) / cfg['fps_target'] * 100),
                complexity=Complexity.COMPLEX if fps < cfg['fps_complex_below'] else Complexity.MODERATE,
                description=(f"Low FPS performance detected ({fps:.1f} average). "
                             "Frame rate optimization could significantly improve user experience."),
            ))

        cpu = summary.avg_cpu
        if cpu > cfg['cpu_opportunity_pct']:
            opportunities.append(OptimizationOpportunity(
                id=f"cpu_opt_{stamp}",
                type=OpportunityType.CPU_OPTIMIZATION,
                potential_impact=Impact.HIGH if cpu > cfg['cpu_high_impact_pct'] else Impact.MEDIUM,
                affected_metric='cpu_usage',
                current_value=cpu,
                target_value=max(float(cfg['cpu_target_floor_pct']), cpu * cfg['cpu_target_ratio']),
                improvement_potential=min(float(cfg['cpu_max_improvement']),
                                          (cpu - cfg['cpu_target_floor_pct']) / cpu * 100),
                complexity=Complexity.COMPLEX if cpu > cfg['cpu_complex_pct'] else Complexity.MODERATE,
                description=(f"High CPU usage detected ({cpu:.1f}% average). "
                             "CPU optimization could improve battery life and performance."),
            ))

        return sorted(opportunities, key=lambda o: _IMPACT_ORDER[label_of(o.potential_impact)], reverse=True)

    # -------------------------------------------------------------------------
    # Insight builders
    # -------------------------------------------------------------------------

    def create_trend_insights(
        self,
        trends: Mapping[str, TrendAnalysis],
        time_window: Optional[Dict[str, str]] = None,
    ) -> List[PerformanceInsight]:
        """
        Insights for meaningful trends.

        A trend qualifies when its significance is not low and |slope|
        exceeds the metric's ``trend_min_slope``. Metrics with unknown
        polarity are skipped.
        """
        cfg = self._cfg
        now = self.clock()
        if time_window is None:
            time_window = {'start': format_timestamp(now - timedelta(days=7)), 'end': format_timestamp(now)}

        insights = []
        for metric, trend in trends.items():
            if metric not in METRIC_POLARITY or metric not in cfg['trend_min_slope']:
                continue
            if trend.significance == Significance.LOW or trend.direction == TrendDirection.STABLE:
                continue
            if abs(trend.slope) <= cfg['trend_min_slope'][metric]:
                continue

            going_up = trend.direction == TrendDirection.UP
            is_decline = going_up != (METRIC_POLARITY[metric] == 'higher_is_better')
            high = trend.significance == Significance.HIGH

            subject, up_word, down_word = _TREND_TITLES.get(
                metric, (_title_words(metric), "Increasing", "Decreasing"))
            if metric == 'fps':
                word = "Declining" if is_decline else "Improving"
            else:
                word = up_word if going_up else down_word

            direction = label_of(trend.direction)
            significance = label_of(trend.significance)
            insights.append(PerformanceInsight(
                id=f"{metric}_trend_{self._stamp()}",
                type=InsightType.TREND_DECLINE if is_decline else InsightType.TREND_IMPROVEMENT,
                severity=Severity.HIGH if is_decline and high else Severity.MEDIUM,
                title=f"{subject} {word} Trend",
                description=(f"{subject} shows a {significance} {direction}ward trend "
                             f"({trend.slope:+.2f} per period) with {trend.confidence * 100:.0f}% confidence."),
                confidence=trend.confidence,
                impact=Impact.HIGH if high else Impact.MEDIUM,
                category=metric_category(metric),
                detected_at=format_timestamp(now),
                data_context=DataContext(
                    metric_type=metric,
                    value=trend.forecast or 0.0,
                    baseline=0.0,
                    deviation=trend.slope,
                    time_window=dict(time_window),
                ),
            ))
        return insights

    def create_anomaly_insights(self, anomalies: Sequence[AnomalyRecord]) -> List[PerformanceInsight]:
        """Top non-low anomalies as insights, in input order."""
        cfg = self._cfg
        impact_of = {'critical': Impact.HIGH, 'high': Impact.MEDIUM}

        selected = [a for a in anomalies if a.severity != Severity.LOW][:cfg['max_anomaly_insights']]
        return [
            PerformanceInsight(
                id=f"anomaly_{a.id}",
                type=InsightType.ANOMALY,
                severity=a.severity,
                title=f"{a.metric_type.upper()} Anomaly Detected",
                description=(f"Unusual {a.metric_type} value detected: {a.value:.1f} "
                             f"(expected ~{a.expected_value:.1f}, deviation: {a.deviation:+.1f})"),
                confidence=min(1.0, abs(a.z_score) / cfg['anomaly_confidence_z']),
                impact=impact_of.get(label_of(a.severity), Impact.LOW),
                category=metric_category(a.metric_type),
                detected_at=a.timestamp or format_timestamp(self.clock()),
                data_context=DataContext(
                    metric_type=a.metric_type,
                    value=a.value,
                    baseline=a.expected_value,
                    deviation=a.deviation,
                    affected_sessions=1,
                ),
            )
            for a in selected
        ]

    def create_opportunity_insights(self, opportunities: Sequence[OptimizationOpportunity]) -> List[PerformanceInsight]:
        cfg = self._cfg
        detected_at = format_timestamp(self.clock())
        return [
            PerformanceInsight(
                id=f"opportunity_{o.id}",
                type=InsightType.OPPORTUNITY,
                severity=Severity.HIGH if o.potential_impact == Impact.HIGH else Severity.MEDIUM,
                title=f"{_title_words(label_of(o.type))} Opportunity",
                description=o.description,
                confidence=cfg['opportunity_confidence'],
                impact=o.potential_impact,
                category=metric_category(label_of(o.type)),
                detected_at=detected_at,
                data_context=DataContext(
                    metric_type=o.affected_metric,
                    value=o.current_value,
                    baseline=o.target_value,
                    deviation=o.current_value - o.target_value,
                ),
            )
            for o in opportunities[:cfg['max_opportunity_insights']]
        ]

    def create_score_insights(self, score: PerformanceScore) -> List[PerformanceInsight]:
        """Alert insight for a D or F grade."""
        if score.grade not in (Grade.D, Grade.F):
            return []
        cfg = self._cfg
        baseline = cfg['score_baseline']
        grade = label_of(score.grade)
        return [PerformanceInsight(
            id=f"performance_grade_{self._stamp()}",
            type=InsightType.ALERT,
            severity=Severity.CRITICAL if score.grade == Grade.F else Severity.HIGH,
            title=f"Poor Performance Score ({grade})",
            description=(f"Overall performance score is {score.overall:.0f}/100 (Grade {grade}). "
                         "Multiple performance issues detected requiring attention."),
            confidence=cfg['score_alert_confidence'],
            impact=Impact.HIGH,
            category=InsightCategory.PERFORMANCE,
            detected_at=format_timestamp(self.clock()),
            data_context=DataContext(
                metric_type='overall_score',
                value=score.overall,
                baseline=baseline,
                deviation=score.overall - baseline,
            ),
        )]

    # -------------------------------------------------------------------------
    # Report
    # -------------------------------------------------------------------------

    def find_correlations(self, samples_by_metric: Mapping[str, Sequence[Any]]) -> List[CorrelationResult]:
        """Pairwise correlations, pairing samples on shared timestamps."""
        return [
            calculate_correlation(*_aligned_values(samples_by_metric[a], samples_by_metric[b]),
                                  label_a=a, label_b=b, thresholds=self.thresholds)
            for a, b in combinations(list(samples_by_metric), 2)
        ]

    def find_seasonal_patterns(self, samples_by_metric: Mapping[str, Sequence[Any]]):
        """Seasonal patterns for every fully timestamped metric."""
        patterns = []
        for metric, samples in samples_by_metric.items():
            if len(samples) == 0 or any(sample_timestamp(s) is None for s in samples):
                continue
            patterns.extend(identify_seasonal_patterns(samples, metric, thresholds=self.thresholds))
        return patterns

    def summarize(self, insights: Sequence[PerformanceInsight], recommendations: Sequence[Any]) -> Dict[str, Any]:
        cfg = self._cfg
        high = sum(1 for i in insights if i.impact == Impact.HIGH)
        medium = sum(1 for i in insights if i.impact == Impact.MEDIUM)
        if high >= 3:
            estimated = "High potential impact"
        elif high >= 1 or medium >= 3:
            estimated = "Medium potential impact"
        else:
            estimated = "Low potential impact"

        return {
            'total_insights': len(insights),
            'critical_issues': sum(1 for i in insights if i.severity == Severity.CRITICAL),
            'improvement_opportunities': sum(1 for i in insights if i.type == InsightType.OPPORTUNITY),
            'estimated_impact': estimated,
            'top_priority_recommendations': sum(
                1 for r in recommendations if r.priority_score > cfg['top_priority_score']),
        }

    def generate_report(
        self,
        samples_by_metric: Mapping[str, Sequence[Any]],
        summary: PerformanceSummary,
        route_data: Any = None,
    ) -> InsightsReport:
        """
        Run every analyzer and assemble an InsightsReport.

        Args:
            samples_by_metric: Time-ordered samples keyed by metric type
                (fps, memory_usage, cpu_usage, load_time)
            summary: Global averages used for scoring, opportunities and
                recommendation priority
            route_data: Optional RoutePerformanceAnalysis for route
                recommendations

        Returns:
            InsightsReport with insights capped at ``max_insights``
        """
        started = time.perf_counter()
        cfg = self._cfg

        trends = self.analyze_trends(samples_by_metric)
        anomalies = self.detect_anomalies(samples_by_metric)
        opportunities = self.identify_opportunities(summary)
        score = calculate_performance_score(summary, trends, self.clock, self.thresholds)
        time_range = _time_range(samples_by_metric)

        insights = (
            self.create_trend_insights(trends, time_range)
            + self.create_anomaly_insights(anomalies)
            + self.create_opportunity_insights(opportunities)
            + self.create_score_insights(score)
        )
        insights = insights[:cfg['max_insights']]

        recommendations = self.engine.generate_recommendations(insights, summary, opportunities, route_data)

        now = format_timestamp(self.clock())
        data_points = sum(len(s) for s in samples_by_metric.values())
        confidence = sum(i.confidence for i in insights) / len(insights) if insights else 0.0

        logger.info("Report: %d insights, %d recommendations, %d anomalies over %d points",
                    len(insights), len(recommendations), len(anomalies), data_points)
        logger.debug("Insight severities: %s",
                     sorted((label_of(i.severity) for i in insights), key=severity_rank, reverse=True))

        return InsightsReport(
            id=str(self.id_factory()),
            generated_at=now,
            time_range=time_range or {'start': now, 'end': now},
            performance_score=score,
            insights=insights,
            recommendations=recommendations,
            trends=trends,
            anomalies=anomalies,
            optimization_opportunities=opportunities,
            correlations=self.find_correlations(samples_by_metric),
            seasonal_patterns=self.find_seasonal_patterns(samples_by_metric),
            summary=self.summarize(insights, recommendations),
            metadata={
                'analysis_duration_ms': (time.perf_counter() - started) * 1000.0,
                'data_points_analyzed': data_points,
                'metrics_analyzed': sorted(samples_by_metric),
                'confidence_level': confidence,
            },
        )
