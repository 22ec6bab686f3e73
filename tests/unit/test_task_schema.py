"""
Unit tests for task record schemas.

Tests field normalization and record-level validation without any graph.
"""

import json
from datetime import date, datetime

import pytest
from pydantic import ValidationError

from bim4d.schemas.tasks import ElementLink, Task, TaskStatus, load_tasks, parse_tasks


class TestTaskFields:
    """Test Task construction from collaborator-shaped dicts."""

    def test_camel_case_aliases(self):
        """Collaborator camelCase keys populate snake_case fields."""
        task = Task.model_validate({
            'id': 1,
            'name': 'Pour slab',
            'startDate': '2024-01-01',
            'endDate': '2024-01-10',
            'durationDays': 9,
            'dependsOn': [2],
            'elementLinks': ['E1'],
        })
        assert task.start_date == datetime(2024, 1, 1)
        assert task.end_date == datetime(2024, 1, 10)
        assert task.duration_days == 9
        assert task.depends_on == [2]
        assert task.element_ids() == ['E1']

    def test_date_objects_become_datetimes(self):
        task = Task(id=1, name='x', start_date=date(2024, 3, 1))
        assert task.start_date == datetime(2024, 3, 1)

    def test_utc_strings_become_naive_utc(self):
        task = Task.model_validate({
            'id': 1,
            'name': 'x',
            'startDate': '2024-01-01T00:00:00.000Z',
            'endDate': '2024-01-10T08:00:00+02:00',
            'elementLinks': [{'elementId': 'E1', 'startDate': '2024-01-02T00:00:00Z'}],
        })
        assert task.start_date == datetime(2024, 1, 1)
        assert task.start_date.tzinfo is None
        assert task.end_date == datetime(2024, 1, 10, 6)
        assert task.element_links[0].start_date == datetime(2024, 1, 2)

    def test_defaults(self):
        task = Task(id='T1', name='x')
        assert task.status == TaskStatus.NOT_STARTED
        assert task.progress == 0
        assert task.depends_on == []
        assert task.element_links == []
        assert task.priority is None

    @pytest.mark.parametrize("raw,expected", [
        ('not-started', TaskStatus.NOT_STARTED),
        ('NOT_STARTED', TaskStatus.NOT_STARTED),
        ('todo', TaskStatus.NOT_STARTED),
        ('in_progress', TaskStatus.IN_PROGRESS),
        ('In Progress', TaskStatus.IN_PROGRESS),
        ('completed', TaskStatus.COMPLETED),
        ('done', TaskStatus.COMPLETED),
        (None, TaskStatus.NOT_STARTED),
    ])
    def test_status_normalization(self, raw, expected):
        assert Task(id=1, name='x', status=raw).status == expected

    def test_unknown_status_rejected(self):
        with pytest.raises(ValidationError):
            Task(id=1, name='x', status='exploded')

    def test_predecessor_objects(self):
        """Nested predecessor references become depends_on ids."""
        task = Task.model_validate({
            'id': 2,
            'name': 'Frame walls',
            'predecessors': [{'predecessor': {'id': 1}}, {'predecessor': {'id': 3}}],
        })
        assert task.depends_on == [1, 3]

    def test_dependencies_deduplicated_in_order(self):
        task = Task(id=5, name='x', depends_on=[3, 1, 3, 2, 1])
        assert task.depends_on == [3, 1, 2]

    def test_extra_properties_preserved(self):
        task = Task.model_validate({'id': 1, 'name': 'x', 'color': 'red', 'assignee': {'id': 9}})
        assert task.extra_properties() == {'color': 'red', 'assignee': {'id': 9}}
        assert task.model_dump()['color'] == 'red'

    def test_tasks_are_frozen(self):
        task = Task(id=1, name='x')
        with pytest.raises(ValidationError):
            task.name = 'y'


class TestTaskValidation:
    """Test record-level validation."""

    def test_start_after_end_rejected(self):
        with pytest.raises(ValidationError):
            Task(id=1, name='x', start_date='2024-01-10', end_date='2024-01-01')

    def test_same_start_and_end_allowed(self):
        task = Task(id=1, name='x', start_date='2024-01-10', end_date='2024-01-10')
        assert task.effective_duration() == 0.0

    @pytest.mark.parametrize("progress", [-1, 100.5, 250])
    def test_progress_out_of_range_rejected(self, progress):
        with pytest.raises(ValidationError):
            Task(id=1, name='x', progress=progress)

    def test_negative_duration_rejected(self):
        with pytest.raises(ValidationError):
            Task(id=1, name='x', duration_days=-2)


class TestTaskHelpers:
    """Test derived scheduling helpers."""

    def test_explicit_duration_wins(self):
        task = Task(id=1, name='x', start_date='2024-01-01', end_date='2024-01-10', duration_days=4)
        assert task.effective_duration() == 4.0

    def test_duration_from_dates(self):
        task = Task(id=1, name='x', start_date='2024-01-01', end_date='2024-01-10')
        assert task.effective_duration() == 9.0
        assert task.is_scheduled()

    def test_duration_default_when_unscheduled(self):
        task = Task(id=1, name='x', start_date='2024-01-01')
        assert not task.is_scheduled()
        assert task.effective_duration() is None
        assert task.effective_duration(default=1.0) == 1.0

    def test_planned_end_from_duration(self):
        task = Task(id=1, name='x', start_date='2024-01-01', duration_days=3)
        assert task.planned_end() == datetime(2024, 1, 4)

    def test_completed_by_progress(self):
        assert Task(id=1, name='x', progress=100).is_completed()
        assert Task(id=1, name='x', status='completed').is_completed()
        assert not Task(id=1, name='x', progress=99).is_completed()


class TestElementLink:
    """Test element link shapes."""

    def test_plain_string(self):
        link = ElementLink.model_validate('GUID-1')
        assert link.element_id == 'GUID-1'
        assert link.start_date is None

    def test_nested_element_guid_with_override(self):
        link = ElementLink.model_validate({
            'element': {'guid': 'GUID-2'},
            'startDate': '2024-02-01',
            'endDate': '2024-02-05',
        })
        assert link.element_id == 'GUID-2'
        assert link.start_date == datetime(2024, 2, 1)
        assert link.end_date == datetime(2024, 2, 5)

    def test_override_dates_must_be_ordered(self):
        with pytest.raises(ValidationError):
            ElementLink(element_id='E1', start_date='2024-02-05', end_date='2024-02-01')

    def test_duplicate_links_collapse_to_first(self):
        task = Task(id=1, name='x', element_links=[
            {'element_id': 'E1', 'start_date': '2024-01-02'},
            'E2',
            'E1',
        ])
        assert task.element_ids() == ['E1', 'E2']
        assert task.element_links[0].start_date == datetime(2024, 1, 2)


class TestLoading:
    """Test task list parsing and file loading."""

    def test_parse_tasks(self):
        tasks = parse_tasks([{'id': 1, 'name': 'a'}, {'id': 2, 'name': 'b', 'dependsOn': [1]}])
        assert [t.id for t in tasks] == [1, 2]
        assert tasks[1].depends_on == [1]

    def test_parse_tasks_rejects_missing_name(self):
        with pytest.raises(ValidationError):
            parse_tasks([{'id': 1}])

    def test_load_tasks_list(self, tmp_path):
        path = tmp_path / 'tasks.json'
        path.write_text(json.dumps([{'id': 1, 'name': 'a'}]), encoding='utf-8')
        assert len(load_tasks(path)) == 1

    def test_load_tasks_wrapped(self, tmp_path):
        path = tmp_path / 'tasks.json'
        path.write_text(json.dumps({'tasks': [{'id': 1, 'name': 'a'}, {'id': 2, 'name': 'b'}]}), encoding='utf-8')
        assert [t.id for t in load_tasks(path)] == [1, 2]
