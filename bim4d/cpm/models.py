"""
Data models for CPM calculations.

Defines dataclasses for dependency edges, per-task schedule metrics and
analysis results.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta
from enum import Enum
from typing import Optional

from bim4d.schemas.tasks import TaskId


class AnalysisMode(str, Enum):
    """How critical tasks are determined."""

    STRICT = 'strict'          # slack-based forward/backward pass
    HEURISTIC = 'heuristic'    # "has a successor or lacks an end date"


@dataclass(frozen=True)
class DependencyEdge:
    """Represents a predecessor -> successor relationship (finish-to-start)."""

    predecessor: TaskId
    successor: TaskId


@dataclass(frozen=True)
class ScheduleMetrics:
    """
    CPM values for one task.

    Offsets are fractional days from the project start. is_critical is None
    when the task could not be analysed (indeterminate). Immutable;
    AnalysisCache hands the same instances to every caller.
    """

    task_id: TaskId
    duration_days: Optional[float] = None
    early_start: Optional[float] = None
    early_finish: Optional[float] = None
    late_start: Optional[float] = None
    late_finish: Optional[float] = None
    slack: Optional[float] = None
    is_critical: Optional[bool] = None

    # Calendar projection of the offsets (set when the project start is known)
    early_start_date: Optional[datetime] = None
    early_finish_date: Optional[datetime] = None
    late_start_date: Optional[datetime] = None
    late_finish_date: Optional[datetime] = None

    @property
    def is_indeterminate(self) -> bool:
        return self.is_critical is None

    def project_onto(self, project_start: datetime) -> 'ScheduleMetrics':
        """Copy with the *_date fields filled from the day offsets."""
        dates = {}
        for name in ('early_start', 'early_finish', 'late_start', 'late_finish'):
            offset = getattr(self, name)
            if offset is not None:
                dates[f'{name}_date'] = project_start + timedelta(days=offset)
        return replace(self, **dates)


@dataclass
class CPMResult:
    """Results from a critical path calculation."""

    mode: AnalysisMode
    metrics: dict[TaskId, ScheduleMetrics]
    critical_path: list[TaskId]            # critical task ids in topological order
    project_duration: Optional[float]      # project finish offset in days; None in heuristic mode
    project_start: Optional[datetime] = None
    unscheduled: list[TaskId] = field(default_factory=list)
    defaulted: list[TaskId] = field(default_factory=list)

    @property
    def project_finish(self) -> Optional[datetime]:
        """Project finish as a date, when both start and duration are known."""
        if self.project_start is None or self.project_duration is None:
            return None
        return self.project_start + timedelta(days=self.project_duration)

    def critical_ids(self) -> set[TaskId]:
        """Task ids flagged critical, for highlighting."""
        return set(self.critical_path)

    def get_critical_metrics(self) -> list[ScheduleMetrics]:
        """Get metrics of tasks on the critical path."""
        return [self.metrics[tid] for tid in self.critical_path if tid in self.metrics]

    def get_tasks_by_slack(self, max_slack_days: float = None) -> list[ScheduleMetrics]:
        """Get analysed task metrics sorted by slack (ascending)."""
        metrics = [m for m in self.metrics.values() if m.slack is not None]
        if max_slack_days is not None:
            metrics = [m for m in metrics if m.slack <= max_slack_days]
        return sorted(metrics, key=lambda m: m.slack)


@dataclass
class TaskImpactResult:
    """Results from single task what-if analysis."""

    task_id: TaskId
    task_name: str
    duration_delta_days: float
    original_project_duration: float
    new_project_duration: float
    slip_days: float
    affected_task_ids: list[TaskId]     # tasks whose early finish moved
    original_critical_path: list[TaskId]
    new_critical_path: list[TaskId]
    critical_path_changed: bool

    def get_slip_summary(self) -> str:
        """Get human-readable slip summary."""
        if self.slip_days <= 0:
            return "No impact on project finish"
        return f"{self.slip_days:.1f} days slip"


@dataclass
class CriticalPathReport:
    """Critical and near-critical tasks with slack statistics."""

    critical_path: list[ScheduleMetrics]
    near_critical_tasks: list[ScheduleMetrics]
    slack_distribution: dict[str, int]     # slack bucket -> count
    project_duration: Optional[float]
    project_finish: Optional[datetime]
    near_critical_threshold_days: float
    total_tasks: int
    indeterminate_tasks: list[TaskId] = field(default_factory=list)

    def get_critical_path_length(self) -> int:
        """Number of tasks on critical path."""
        return len(self.critical_path)

    def get_risk_summary(self) -> str:
        """Get summary of schedule risk."""
        critical = len(self.critical_path)
        near_critical = len(self.near_critical_tasks)
        return (f"{critical} critical tasks, {near_critical} near-critical "
                f"(<= {self.near_critical_threshold_days:g} days slack)")
