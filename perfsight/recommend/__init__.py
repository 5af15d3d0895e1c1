"""
perfsight Recommend
===================

Turns insights, opportunities, route analyses and forecasts into ranked
recommendations.

Structure:
    rules.py    - Default rule table (condition + builder per rule)
    scoring.py  - Priority formulas for the three pipelines
    routes.py   - Per-route preloading/caching/device/budget analysis
    engine.py   - RecommendationEngine: standard and proactive pipelines
"""

from perfsight.recommend.rules import DEFAULT_RULES, get_rule
from perfsight.recommend.scoring import (
    calculate_opportunity_priority_score,
    calculate_priority_score,
    calculate_route_optimization_priority_score,
)
from perfsight.recommend.routes import (
    analyze_route_optimization_opportunities,
    calculate_route_optimization_impact_score,
    categorize_routes_by_performance,
)
from perfsight.recommend.engine import RecommendationEngine, deduplicate, time_urgency
