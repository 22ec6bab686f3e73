"""
Timeline index over a task list.

Derives the project date range that bounds the simulation clock and the
Gantt view, and answers the date queries the playback controls need.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Optional

from bim4d.schemas.tasks import Task
from bim4d.utils.helpers import add_days, clamp, clamp_date, days_between, to_naive_utc

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DateRange:
    """Closed interval [start, end] of simulated dates."""

    start: datetime
    end: datetime

    def __post_init__(self):
        if self.start > self.end:
            raise ValueError(f"DateRange start {self.start} is after end {self.end}")

    @property
    def days(self) -> float:
        """Length in fractional days."""
        return days_between(self.start, self.end)

    def contains(self, moment: datetime) -> bool:
        return self.start <= to_naive_utc(moment) <= self.end

    def clamp(self, moment: datetime) -> datetime:
        return clamp_date(to_naive_utc(moment), self.start, self.end)


class TimelineIndex:
    """
    Date lookups for one task list.

    The range spans every planned start and end date and, by default, every
    element-link date override, since those move element coloring too.
    """

    def __init__(self, tasks: Iterable[Task], include_link_dates: bool = True):
        self.tasks = list(tasks)
        self.include_link_dates = include_link_dates
        self.date_range = self._compute_range()

    def _compute_range(self) -> Optional[DateRange]:
        dates = []
        for task in self.tasks:
            dates.extend(d for d in (task.start_date, task.end_date) if d is not None)
            if self.include_link_dates:
                for link in task.element_links:
                    dates.extend(d for d in (link.start_date, link.end_date) if d is not None)

        if not dates:
            logger.warning(f"No dated tasks among {len(self.tasks)}; timeline has no range")
            return None

        return DateRange(start=min(dates), end=max(dates))

    def milestones(self) -> list[Task]:
        """Tasks with a start date, ordered by it (ties keep input order)."""
        return sorted((t for t in self.tasks if t.start_date is not None), key=lambda t: t.start_date)

    def active_tasks(self, moment: datetime) -> list[Task]:
        """Tasks whose planned [start, end] contains the date, in input order."""
        moment = to_naive_utc(moment)
        return [
            t for t in self.tasks
            if t.has_dates() and t.start_date <= moment <= t.end_date
        ]

    def fraction_at(self, moment: datetime) -> float:
        """Slider position (0-1) of a date within the range."""
        if self.date_range is None or self.date_range.days == 0:
            return 0.0
        return clamp(days_between(self.date_range.start, to_naive_utc(moment)) / self.date_range.days, 0.0, 1.0)

    def date_at(self, fraction: float) -> Optional[datetime]:
        """Date at a slider position (0-1), clamped to the range."""
        if self.date_range is None:
            return None
        return add_days(self.date_range.start, clamp(fraction, 0.0, 1.0) * self.date_range.days)

    def __len__(self) -> int:
        return len(self.tasks)

    def __repr__(self) -> str:
        return f"TimelineIndex({len(self.tasks)} tasks, range={self.date_range})"
