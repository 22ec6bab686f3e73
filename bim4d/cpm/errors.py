"""
Errors raised while building a task graph.

All derive from ScheduleError, itself a ValueError, so callers that treated
the old network validation failures as ValueError keep working.
"""

from typing import Sequence


class ScheduleError(ValueError):
    """Base class for task graph construction failures."""


class DuplicateTaskId(ScheduleError):
    """Two tasks share the same id."""

    def __init__(self, task_id):
        self.task_id = task_id
        super().__init__(f"Duplicate task id: {task_id!r}")


class InvalidReference(ScheduleError):
    """A depends_on entry does not match any task id."""

    def __init__(self, task_id, missing_id):
        self.task_id = task_id
        self.missing_id = missing_id
        super().__init__(f"Task {task_id!r} depends on unknown task {missing_id!r}")


class CyclicDependency(ScheduleError):
    """The dependency graph contains a cycle."""

    def __init__(self, cycle: Sequence):
        # First and last entries are the same task
        self.cycle = list(cycle)
        path = ' -> '.join(repr(tid) for tid in self.cycle)
        super().__init__(f"Circular dependency detected: {path}")
