"""
Critical Path Analysis.

Identifies critical and near-critical tasks, analyzes slack distribution,
and flattens per-task metrics into a table for Gantt collaborators.
"""

from collections import defaultdict
from typing import Optional

import pandas as pd

from bim4d.config.settings import settings
from bim4d.schemas.tasks import Task
from ..cpm.models import CPMResult, CriticalPathReport, ScheduleMetrics

METRIC_COLUMNS = [
    'task_id',
    'name',
    'duration_days',
    'early_start',
    'early_finish',
    'late_start',
    'late_finish',
    'slack',
    'is_critical',
    'early_start_date',
    'early_finish_date',
    'late_start_date',
    'late_finish_date',
]


def _slack_bucket(slack: float) -> str:
    if slack <= 0:
        return '0 (critical)'
    if slack <= 1:
        return '<= 1 day'
    if slack <= 5:
        return '1-5 days'
    if slack <= 10:
        return '5-10 days'
    if slack <= 20:
        return '10-20 days'
    return '> 20 days'


def analyze_critical_path(
    result: CPMResult,
    near_critical_threshold_days: float = None,
) -> CriticalPathReport:
    """
    Analyze critical path and near-critical tasks.

    Args:
        result: Output of CriticalPathAnalyzer.run (either mode)
        near_critical_threshold_days: Slack threshold for near-critical
                                      classification (settings default: 5 days)

    Returns:
        CriticalPathReport with critical path, near-critical tasks, and statistics
    """
    if near_critical_threshold_days is None:
        near_critical_threshold_days = settings.NEAR_CRITICAL_DAYS

    near_critical = []
    indeterminate = []
    slack_buckets = defaultdict(int)

    for m in result.metrics.values():
        if m.is_critical is None:
            indeterminate.append(m.task_id)
            slack_buckets['unknown'] += 1
            continue

        if m.slack is None:
            # Heuristic mode carries no slack
            slack_buckets['critical (heuristic)' if m.is_critical else 'not critical (heuristic)'] += 1
            continue

        slack_buckets[_slack_bucket(m.slack)] += 1
        if 0 < m.slack <= near_critical_threshold_days:
            near_critical.append(m)

    near_critical.sort(key=lambda m: m.slack)

    return CriticalPathReport(
        critical_path=result.get_critical_metrics(),
        near_critical_tasks=near_critical,
        slack_distribution=dict(slack_buckets),
        project_duration=result.project_duration,
        project_finish=result.project_finish,
        near_critical_threshold_days=near_critical_threshold_days,
        total_tasks=len(result.metrics),
        indeterminate_tasks=indeterminate,
    )


def identify_risk_tasks(
    result: CPMResult,
    tasks: list[Task],
    slack_threshold_days: float = 5.0,
    min_duration_days: float = 5.0,
) -> list[ScheduleMetrics]:
    """
    Identify high-risk tasks that could become critical.

    Criteria:
    - Near-critical (0 < slack <= threshold)
    - Significant duration (duration >= min_duration)
    - Not already completed

    Returns:
        List of risk task metrics sorted by (slack, duration desc)
    """
    by_id = {t.id: t for t in tasks}

    risk = []
    for m in result.metrics.values():
        task = by_id.get(m.task_id)
        if task is None or task.is_completed():
            continue
        if m.slack is None or m.slack <= 0 or m.slack > slack_threshold_days:
            continue
        if (m.duration_days or 0) < min_duration_days:
            continue
        risk.append(m)

    risk.sort(key=lambda m: (m.slack, -(m.duration_days or 0)))
    return risk


def metrics_to_frame(result: CPMResult, tasks: Optional[list[Task]] = None) -> pd.DataFrame:
    """
    Flatten per-task metrics into a DataFrame.

    Rows follow the metrics order (original task order). Task names are
    joined in when the task list is supplied.
    """
    names = {t.id: t.name for t in tasks} if tasks else {}

    rows = []
    for m in result.metrics.values():
        rows.append({
            'task_id': m.task_id,
            'name': names.get(m.task_id),
            'duration_days': m.duration_days,
            'early_start': m.early_start,
            'early_finish': m.early_finish,
            'late_start': m.late_start,
            'late_finish': m.late_finish,
            'slack': m.slack,
            'is_critical': m.is_critical,
            'early_start_date': m.early_start_date,
            'early_finish_date': m.early_finish_date,
            'late_start_date': m.late_start_date,
            'late_finish_date': m.late_finish_date,
        })

    return pd.DataFrame(rows, columns=METRIC_COLUMNS)


def print_critical_path_report(report: CriticalPathReport, tasks: Optional[list[Task]] = None) -> None:
    """Print a formatted critical path report."""
    names = {t.id: t.name for t in tasks} if tasks else {}

    print("=" * 80)
    print("CRITICAL PATH ANALYSIS REPORT")
    print("=" * 80)

    if report.project_duration is not None:
        print(f"\nProject Duration: {report.project_duration:g} days")
    if report.project_finish is not None:
        print(f"Project Finish: {report.project_finish.date()}")
    print(f"Total Tasks: {report.total_tasks}")
    print(f"Critical Tasks: {len(report.critical_path)}")
    print(f"Near-Critical Tasks (<= {report.near_critical_threshold_days:g} days slack): "
          f"{len(report.near_critical_tasks)}")
    if report.indeterminate_tasks:
        print(f"Indeterminate (unscheduled) Tasks: {len(report.indeterminate_tasks)}")

    print("\n--- Slack Distribution ---")
    for bucket, count in sorted(report.slack_distribution.items()):
        pct = count / report.total_tasks * 100 if report.total_tasks else 0
        bar = '#' * int(pct / 2)
        print(f"  {bucket:25s}: {count:5d} ({pct:5.1f}%) {bar}")

    print("\n--- Critical Path (first 20 tasks) ---")
    for i, m in enumerate(report.critical_path[:20]):
        name = str(names.get(m.task_id, ''))[:40]
        duration = f"{m.duration_days:.1f}d" if m.duration_days is not None else '-'
        print(f"  {i+1:3d}. {str(m.task_id):20s} | {name:40s} | {duration}")

    if len(report.critical_path) > 20:
        print(f"  ... and {len(report.critical_path) - 20} more critical tasks")

    if report.near_critical_tasks:
        print("\n--- Near-Critical Tasks (first 10) ---")
        for i, m in enumerate(report.near_critical_tasks[:10]):
            name = str(names.get(m.task_id, ''))[:35]
            print(f"  {i+1:3d}. {str(m.task_id):20s} | Slack: {m.slack:5.1f}d | {name:35s}")

    print("\n" + "=" * 80)
