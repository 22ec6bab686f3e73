"""
Single Task Impact Analysis.

Analyze the schedule impact of changing a single task's duration.
Used for what-if scenarios and sensitivity analysis.
"""

from bim4d.schemas.tasks import Task, TaskId
from ..cpm.models import TaskImpactResult
from ..cpm.network import TaskGraph
from ..cpm.engine import CriticalPathAnalyzer


def analyze_task_impact(
    tasks: list[Task],
    task_id: TaskId,
    duration_delta_days: float,
    default_duration_days: float = None,
) -> TaskImpactResult:
    """
    Calculate impact of changing one task's duration.

    Args:
        tasks: Task list (will not be modified)
        task_id: ID of task to modify
        duration_delta_days: Change in duration (positive = increase)
        default_duration_days: Passed through to the strict analyzer

    Returns:
        TaskImpactResult with original vs new project duration and affected tasks
    """
    baseline_graph = TaskGraph.build(tasks)
    task = baseline_graph.get_task(task_id)
    if task is None:
        raise ValueError(f"Task {task_id!r} not found in task list")

    # Run baseline CPM
    baseline = CriticalPathAnalyzer(baseline_graph, default_duration_days=default_duration_days).run()
    original = baseline.metrics[task_id].duration_days
    if original is None:
        raise ValueError(f"Task {task_id!r} has no schedule data to modify")

    # Tasks are frozen; swap in a copy with the new explicit duration
    new_duration = max(0.0, original + duration_delta_days)
    modified_tasks = [
        t.model_copy(update={'duration_days': new_duration}) if t.id == task_id else t
        for t in tasks
    ]
    modified = CriticalPathAnalyzer(
        TaskGraph.build(modified_tasks), default_duration_days=default_duration_days
    ).run()

    # Find affected tasks (tasks whose early finish changed)
    affected = [
        tid for tid, m in modified.metrics.items()
        if m.early_finish != baseline.metrics[tid].early_finish
    ]

    return TaskImpactResult(
        task_id=task_id,
        task_name=task.name,
        duration_delta_days=duration_delta_days,
        original_project_duration=baseline.project_duration,
        new_project_duration=modified.project_duration,
        slip_days=modified.project_duration - baseline.project_duration,
        affected_task_ids=affected,
        original_critical_path=baseline.critical_path,
        new_critical_path=modified.critical_path,
        critical_path_changed=set(baseline.critical_path) != set(modified.critical_path),
    )


def analyze_task_sensitivity(
    tasks: list[Task],
    task_ids: list[TaskId] = None,
    duration_delta_days: float = 5.0,
) -> list[TaskImpactResult]:
    """
    Analyze sensitivity of multiple tasks.

    Tests the impact of increasing each task's duration by the same amount.
    Tasks without schedule data are skipped.

    Returns:
        Results sorted by slip (largest first)
    """
    if task_ids is None:
        task_ids = [t.id for t in tasks if t.is_scheduled()]

    results = [analyze_task_impact(tasks, tid, duration_delta_days) for tid in task_ids]
    results.sort(key=lambda r: -r.slip_days)
    return results
