"""
Record schemas for task lists supplied by external collaborators.
"""

from .tasks import ElementLink, Task, TaskId, TaskStatus, load_tasks, parse_tasks

__all__ = [
    'ElementLink',
    'Task',
    'TaskId',
    'TaskStatus',
    'load_tasks',
    'parse_tasks',
]
