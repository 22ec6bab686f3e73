"""Pytest configuration and fixtures."""
import pytest
from datetime import datetime
from typing import List

from bim4d.schemas.tasks import Task


@pytest.fixture
def make_task():
    """Factory for Task records with sensible defaults."""
    def _make(task_id, name: str = None, **fields) -> Task:
        return Task(id=task_id, name=name or f'Task {task_id}', **fields)
    return _make


@pytest.fixture
def linear_chain(make_task) -> List[Task]:
    """Four tasks, each depending on the previous one (10 days total)."""
    return [
        make_task('T1', duration_days=2),
        make_task('T2', duration_days=3, depends_on=['T1']),
        make_task('T3', duration_days=1, depends_on=['T2']),
        make_task('T4', duration_days=4, depends_on=['T3']),
    ]


@pytest.fixture
def diamond(make_task) -> List[Task]:
    """A -> B -> D and A -> C -> D with duration(B) > duration(C)."""
    return [
        make_task('A', duration_days=2),
        make_task('B', duration_days=5, depends_on=['A']),
        make_task('C', duration_days=3, depends_on=['A']),
        make_task('D', duration_days=1, depends_on=['B', 'C']),
    ]


@pytest.fixture
def dated_tasks(make_task) -> List[Task]:
    """Two back-to-back dated tasks, each linked to one element (2024-01-01 to 2024-01-21)."""
    return [
        make_task(
            1,
            start_date=datetime(2024, 1, 1),
            end_date=datetime(2024, 1, 11),
            element_links=['E1'],
        ),
        make_task(
            2,
            start_date=datetime(2024, 1, 11),
            end_date=datetime(2024, 1, 21),
            depends_on=[1],
            element_links=['E2'],
        ),
    ]
