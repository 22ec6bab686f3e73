"""
Schedule task record schemas.

Tasks arrive from the persistence/API collaborator as loosely-shaped dicts.
These models pin down required vs. optional fields, normalize the spellings
the collaborator uses (camelCase, legacy status codes, nested predecessor and
element shapes) and keep unknown properties opaquely.
"""

import json
import logging
from datetime import date, datetime, timedelta
from enum import Enum
from pathlib import Path
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator, model_validator

from bim4d.utils.helpers import days_between, to_naive_utc

logger = logging.getLogger(__name__)

TaskId = Union[int, str]


class TaskStatus(str, Enum):
    """Lifecycle status of a schedule task."""

    NOT_STARTED = 'not-started'
    IN_PROGRESS = 'in-progress'
    COMPLETED = 'completed'


_STATUS_ALIASES = {
    'not-started': TaskStatus.NOT_STARTED,
    'notstarted': TaskStatus.NOT_STARTED,
    'todo': TaskStatus.NOT_STARTED,
    'planned': TaskStatus.NOT_STARTED,
    'pending': TaskStatus.NOT_STARTED,
    'in-progress': TaskStatus.IN_PROGRESS,
    'inprogress': TaskStatus.IN_PROGRESS,
    'active': TaskStatus.IN_PROGRESS,
    'started': TaskStatus.IN_PROGRESS,
    'completed': TaskStatus.COMPLETED,
    'complete': TaskStatus.COMPLETED,
    'done': TaskStatus.COMPLETED,
    'finished': TaskStatus.COMPLETED,
}


def _coerce_datetime(value: Any) -> Any:
    """
    Accept date objects and bare YYYY-MM-DD strings as midnight datetimes.

    Offset-carrying values (e.g. the API's "...Z" strings) are parsed by
    pydantic and then normalized to naive UTC by _normalize_timezone, so every
    task date compares with every other.
    """
    if value is None or value == '':
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, str) and len(value) == 10:
        return datetime.fromisoformat(value)
    return value


class ElementLink(BaseModel):
    """
    Association between a task and one BIM element.

    A link may carry its own start/end dates, which take priority over the
    task's dates when the element is colored.
    """
    model_config = ConfigDict(extra='allow', frozen=True, populate_by_name=True)

    element_id: str = Field(alias='elementId', description="BIM element identifier (GUID, dbId, ...)")
    start_date: Optional[datetime] = Field(default=None, alias='startDate', description="Link-level start override")
    end_date: Optional[datetime] = Field(default=None, alias='endDate', description="Link-level end override")

    @model_validator(mode='before')
    @classmethod
    def _accept_shorthand(cls, data: Any) -> Any:
        # "E1" or {"element": {"guid": "E1"}} as stored by the viewer tabs
        if isinstance(data, (str, int)):
            return {'element_id': str(data)}
        if isinstance(data, dict) and 'element_id' not in data and 'elementId' not in data:
            element = data.get('element')
            if isinstance(element, dict) and element.get('guid') is not None:
                return {**data, 'element_id': str(element['guid'])}
            if data.get('guid') is not None:
                return {**data, 'element_id': str(data['guid'])}
        return data

    @field_validator('start_date', 'end_date', mode='before')
    @classmethod
    def _parse_dates(cls, value: Any) -> Any:
        return _coerce_datetime(value)

    @field_validator('start_date', 'end_date')
    @classmethod
    def _normalize_timezone(cls, value: Optional[datetime]) -> Optional[datetime]:
        return to_naive_utc(value)

    @model_validator(mode='after')
    def _check_date_order(self) -> 'ElementLink':
        if self.start_date and self.end_date and self.start_date > self.end_date:
            raise ValueError(
                f"element link {self.element_id}: start_date {self.start_date} is after end_date {self.end_date}"
            )
        return self


class Task(BaseModel):
    """
    A schedule task/activity as supplied by the task-list collaborator.

    File: any JSON list of task objects (see load_tasks)
    """
    model_config = ConfigDict(extra='allow', frozen=True, populate_by_name=True)

    id: TaskId = Field(description="Unique task identifier")
    name: str = Field(description="Task name")
    start_date: Optional[datetime] = Field(default=None, alias='startDate', description="Planned start")
    end_date: Optional[datetime] = Field(default=None, alias='endDate', description="Planned finish")
    duration_days: Optional[float] = Field(default=None, alias='durationDays', ge=0, description="Explicit duration in days")
    progress: float = Field(default=0.0, ge=0, le=100, description="Percent complete (0-100)")
    status: TaskStatus = Field(default=TaskStatus.NOT_STARTED, description="Lifecycle status")
    priority: Optional[Any] = Field(default=None, description="Priority, opaque to the engine")
    depends_on: list[TaskId] = Field(default_factory=list, alias='dependsOn', description="Predecessor task ids")
    element_links: list[ElementLink] = Field(default_factory=list, alias='elementLinks', description="Linked BIM elements")

    @model_validator(mode='before')
    @classmethod
    def _accept_predecessor_objects(cls, data: Any) -> Any:
        # [{"predecessor": {"id": 3}}] is how the schedule API returns dependencies
        if isinstance(data, dict) and 'depends_on' not in data and 'dependsOn' not in data:
            predecessors = data.get('predecessors')
            if isinstance(predecessors, list):
                ids = []
                for ref in predecessors:
                    if isinstance(ref, dict):
                        inner = ref.get('predecessor', ref)
                        ids.append(inner['id'] if isinstance(inner, dict) else inner)
                    else:
                        ids.append(ref)
                return {**data, 'depends_on': ids}
        return data

    @field_validator('start_date', 'end_date', mode='before')
    @classmethod
    def _parse_dates(cls, value: Any) -> Any:
        return _coerce_datetime(value)

    @field_validator('start_date', 'end_date')
    @classmethod
    def _normalize_timezone(cls, value: Optional[datetime]) -> Optional[datetime]:
        return to_naive_utc(value)

    @field_validator('status', mode='before')
    @classmethod
    def _normalize_status(cls, value: Any) -> Any:
        if value is None:
            return TaskStatus.NOT_STARTED
        if isinstance(value, TaskStatus):
            return value
        key = str(value).strip().lower().replace('_', '-').replace(' ', '-')
        if key in _STATUS_ALIASES:
            return _STATUS_ALIASES[key]
        compact = key.replace('-', '')
        if compact in _STATUS_ALIASES:
            return _STATUS_ALIASES[compact]
        return value

    @field_validator('depends_on')
    @classmethod
    def _dedupe_dependencies(cls, value: list) -> list:
        return list(dict.fromkeys(value))

    @field_validator('element_links')
    @classmethod
    def _dedupe_links(cls, value: list) -> list:
        seen = set()
        links = []
        for link in value:
            if link.element_id in seen:
                continue
            seen.add(link.element_id)
            links.append(link)
        return links

    @model_validator(mode='after')
    def _check_date_order(self) -> 'Task':
        if self.start_date and self.end_date and self.start_date > self.end_date:
            raise ValueError(
                f"task {self.id}: start_date {self.start_date} is after end_date {self.end_date}"
            )
        return self

    def has_dates(self) -> bool:
        """Check if both planned dates are present."""
        return self.start_date is not None and self.end_date is not None

    def is_completed(self) -> bool:
        """Check if task is completed."""
        return self.status == TaskStatus.COMPLETED or self.progress >= 100

    def is_scheduled(self) -> bool:
        """Check if a duration can be derived without falling back to a default."""
        return self.duration_days is not None or self.has_dates()

    def effective_duration(self, default: float = None) -> Optional[float]:
        """
        Get duration in days to use for calculations.

        Explicit duration_days wins, then end - start, then the default.
        """
        if self.duration_days is not None:
            return float(self.duration_days)
        if self.has_dates():
            return max(0.0, days_between(self.start_date, self.end_date))
        return default

    def planned_end(self) -> Optional[datetime]:
        """End date, or start + explicit duration when the end is missing."""
        if self.end_date is not None:
            return self.end_date
        if self.start_date is not None and self.duration_days is not None:
            return self.start_date + timedelta(days=self.duration_days)
        return None

    def element_ids(self) -> list[str]:
        """Linked element ids in link order."""
        return [link.element_id for link in self.element_links]

    def extra_properties(self) -> dict[str, Any]:
        """Unknown properties carried through from the collaborator."""
        return dict(self.model_extra or {})


_TASK_LIST = TypeAdapter(list[Task])


def parse_tasks(records: list[dict]) -> list[Task]:
    """
    Validate a list of task dicts into Task models.

    Raises pydantic.ValidationError on malformed records.
    """
    return _TASK_LIST.validate_python(records)


def load_tasks(path: Path) -> list[Task]:
    """
    Load tasks from a JSON file.

    Accepts either a top-level list or an object with a "tasks" list, which is
    how the project API returns them.
    """
    with open(path, 'r', encoding='utf-8') as f:
        payload = json.load(f)

    if isinstance(payload, dict):
        payload = payload.get('tasks', [])

    tasks = parse_tasks(payload)
    logger.info(f"Loaded {len(tasks)} tasks from {path}")
    return tasks
