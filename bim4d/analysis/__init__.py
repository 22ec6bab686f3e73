"""
Analysis modules for schedule reporting and what-if scenarios.
"""

from .critical_path import analyze_critical_path, identify_risk_tasks, metrics_to_frame, print_critical_path_report
from .single_task_impact import analyze_task_impact, analyze_task_sensitivity

__all__ = [
    'analyze_critical_path',
    'identify_risk_tasks',
    'metrics_to_frame',
    'print_critical_path_report',
    'analyze_task_impact',
    'analyze_task_sensitivity',
]
