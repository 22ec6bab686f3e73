"""
CPM (Critical Path Method) calculator for construction task lists.

This module provides:
- Task graph construction with reference and cycle validation
- Stable topological ordering
- Forward/backward pass CPM calculations over day offsets
- Slack and critical path identification, or the fallback heuristic
"""

from .errors import ScheduleError, DuplicateTaskId, InvalidReference, CyclicDependency
from .models import (
    AnalysisMode,
    DependencyEdge,
    ScheduleMetrics,
    CPMResult,
    TaskImpactResult,
    CriticalPathReport,
)
from .network import TaskGraph
from .engine import CriticalPathAnalyzer, AnalysisCache

__all__ = [
    'ScheduleError',
    'DuplicateTaskId',
    'InvalidReference',
    'CyclicDependency',
    'AnalysisMode',
    'DependencyEdge',
    'ScheduleMetrics',
    'CPMResult',
    'TaskImpactResult',
    'CriticalPathReport',
    'TaskGraph',
    'CriticalPathAnalyzer',
    'AnalysisCache',
]
