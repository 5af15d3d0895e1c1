"""
Route Performance Types
=======================

Pre-aggregated per-route performance records consumed by the route
recommendation pipeline, and the optimization analyses derived from them.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from perfsight.models.base import Serializable
from perfsight.models.enums import (
    BudgetStatus,
    CachingPotential,
    Complexity,
    DeviceTier,
    Impact,
    RouteOptimizationType,
)


@dataclass
class RouteSession(Serializable):
    session_id: str
    device_id: str
    route_name: str
    route_pattern: str
    screen_duration: Optional[float] = None  # ms, None when not captured
    avg_fps: float = 0.0
    avg_memory: float = 0.0
    avg_cpu: float = 0.0
    device_type: str = ""
    timestamp: str = ""


@dataclass
class RoutePerformanceData(Serializable):
    route_name: str
    route_pattern: str
    total_sessions: int = 0
    unique_devices: int = 0
    avg_fps: float = 0.0
    avg_memory: float = 0.0
    avg_cpu: float = 0.0
    avg_screen_duration: float = 0.0
    performance_score: float = 0.0           # 0-100
    risk_level: str = "low"                  # low / medium / high
    sessions: List[RouteSession] = field(default_factory=list)
    performance_trend: str = "stable"        # improving / stable / degrading

    def mean_screen_duration(self) -> float:
        """Mean screen duration over sessions; missing durations count as 0."""
        if not self.sessions:
            return 0.0
        total = sum(s.screen_duration or 0.0 for s in self.sessions)
        return total / len(self.sessions)

    def sessions_per_device(self) -> float:
        if self.unique_devices <= 0:
            return 0.0
        return self.total_sessions / self.unique_devices


@dataclass
class RoutePerformanceAnalysis(Serializable):
    routes: List[RoutePerformanceData] = field(default_factory=list)
    app_averages: Dict[str, float] = field(default_factory=dict)   # avg_fps / avg_memory / avg_cpu


@dataclass
class DeviceRouteCompatibility(Serializable):
    device_tier: DeviceTier
    route_pattern: str
    performance_score: float
    optimization_priority: float             # 100 - performance_score


@dataclass
class RouteOptimization(Serializable):
    type: RouteOptimizationType
    priority: Impact
    description: str
    estimated_impact: str
    implementation_complexity: Complexity


@dataclass
class RouteOptimizationAnalysis(Serializable):
    route_pattern: str
    preloading_opportunity: bool = False
    caching_potential: CachingPotential = CachingPotential.LOW
    device_compatibility_issues: List[DeviceRouteCompatibility] = field(default_factory=list)
    performance_budget_status: BudgetStatus = BudgetStatus.WITHIN_BUDGET
    optimization_recommendations: List[RouteOptimization] = field(default_factory=list)
