"""
Recommendation Types
====================

Rules are static records evaluated in order: a predicate over an insight, a
builder producing a draft, a priority weight and category tags. The engine
turns matching drafts into scored recommendations.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple

from perfsight.models.base import Serializable, to_plain
from perfsight.models.enums import (
    Effort,
    Impact,
    RecommendationCategory,
    RecommendationStatus,
    Severity,
)


@dataclass
class RecommendationDraft(Serializable):
    """Everything a rule builder decides; identity and score come from the engine."""
    title: str
    description: str
    category: RecommendationCategory
    impact: Impact
    effort: Effort
    actionable_steps: List[str] = field(default_factory=list)
    estimated_improvement: str = ""
    related_metrics: List[str] = field(default_factory=list)
    implementation_time: str = ""


@dataclass(frozen=True)
class RecommendationRule:
    id: str
    name: str
    description: str
    condition: Callable[[Any], bool]         # PerformanceInsight -> bool
    build: Callable[[Any], RecommendationDraft]
    priority_weight: float
    tags: Tuple[str, ...] = ()

    def matches(self, insight) -> bool:
        return bool(self.condition(insight))

    def to_dict(self) -> Dict[str, Any]:
        """Convert to serializable dict (callables omitted)."""
        return {
            'id': self.id,
            'name': self.name,
            'description': self.description,
            'priority_weight': self.priority_weight,
            'tags': list(self.tags),
        }


@dataclass
class PerformanceRecommendation(Serializable):
    id: str
    insight_id: str
    title: str
    description: str
    category: RecommendationCategory
    impact: Impact
    effort: Effort
    priority_score: float
    actionable_steps: List[str] = field(default_factory=list)
    estimated_improvement: str = ""
    related_metrics: List[str] = field(default_factory=list)
    implementation_time: str = ""
    status: RecommendationStatus = RecommendationStatus.PENDING
    created_at: str = ""

    @property
    def dedupe_key(self) -> Tuple[str, str]:
        return (to_plain(self.category), self.title)


@dataclass
class ProactiveRecommendation(PerformanceRecommendation):
    prediction_based: bool = True
    predicted_impact_date: Optional[str] = None
    prevention_priority: Severity = Severity.MEDIUM
    early_warning_threshold: Optional[float] = None
    monitoring_recommendations: List[str] = field(default_factory=list)
    seasonal_context: Optional[Dict[str, Any]] = None
