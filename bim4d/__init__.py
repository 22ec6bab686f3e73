"""
Scheduling and 4D simulation engine for BIM-linked construction schedules.

Provides critical path analysis over task dependency graphs and a
deterministic playback clock that recolors BIM elements by construction phase.
"""

from .schemas import ElementLink, Task, TaskStatus, load_tasks, parse_tasks
from .cpm import (
    AnalysisCache,
    AnalysisMode,
    CPMResult,
    CriticalPathAnalyzer,
    CyclicDependency,
    DuplicateTaskId,
    InvalidReference,
    ScheduleError,
    ScheduleMetrics,
    TaskGraph,
)
from .simulation import (
    DateRange,
    ElementStateResolver,
    ElementVisualState,
    SimulationClock,
    SimulationSession,
    SimulationState,
    TimelineIndex,
    resolve,
)

__version__ = '0.1.0'

__all__ = [
    # Records
    'ElementLink',
    'Task',
    'TaskStatus',
    'load_tasks',
    'parse_tasks',
    # Critical path
    'AnalysisCache',
    'AnalysisMode',
    'CPMResult',
    'CriticalPathAnalyzer',
    'CyclicDependency',
    'DuplicateTaskId',
    'InvalidReference',
    'ScheduleError',
    'ScheduleMetrics',
    'TaskGraph',
    # Simulation
    'DateRange',
    'ElementStateResolver',
    'ElementVisualState',
    'SimulationClock',
    'SimulationSession',
    'SimulationState',
    'TimelineIndex',
    'resolve',
]
