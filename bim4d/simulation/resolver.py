"""
Element state resolution for the 4D simulation.

Maps a simulated date and a task list to the visual state of every linked
BIM element. Pure: the same (date, tasks) always yields the same map.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Iterable, Optional

from bim4d.schemas.tasks import ElementLink, Task, TaskId
from bim4d.utils.helpers import clamp, days_between, to_naive_utc

# Progress thresholds for the in-progress bands (a boundary value starts the next band)
EARLY_BAND_END = 0.3
MID_BAND_END = 0.7


class Phase(str, Enum):
    NOT_STARTED = 'not-started'
    IN_PROGRESS = 'in-progress'
    COMPLETED = 'completed'


class Band(str, Enum):
    EARLY = 'early'
    MID = 'mid'
    LATE = 'late'
    DONE = 'done'


@dataclass(frozen=True)
class Palette:
    """Display colors per phase/band."""

    not_started: str = '#9CA3AF'   # grey
    early: str = '#FCD34D'         # yellow
    mid: str = '#F59E0B'           # orange
    late: str = '#10B981'          # green, near completion
    done: str = '#10B981'          # green
    critical: str = '#DC2626'      # red, critical path highlight

    def color_for(self, phase: Phase, band: Optional[Band]) -> str:
        if phase == Phase.NOT_STARTED or band is None:
            return self.not_started
        return getattr(self, band.value)


DEFAULT_PALETTE = Palette()


@dataclass(frozen=True)
class ElementVisualState:
    """Resolved look of one element at one date."""

    element_id: str
    task_id: TaskId          # task that determined this state
    phase: Phase
    band: Optional[Band]     # None while not started
    progress: float          # 0-1 through the governing date window
    color_hex: str
    critical: bool = False


def band_for(progress: float) -> Band:
    """Bucket in-progress completion into early/mid/late."""
    if progress < EARLY_BAND_END:
        return Band.EARLY
    if progress < MID_BAND_END:
        return Band.MID
    return Band.LATE


class ElementStateResolver:
    """
    Resolves per-element visual state at a simulated date.

    When several tasks link the same element, the last task in the input
    order wins outright (no merging).
    """

    def __init__(self, palette: Palette = None):
        self.palette = palette or DEFAULT_PALETTE

    def resolve_link(self, moment: datetime, task: Task, link: ElementLink,
                     critical: bool = False) -> ElementVisualState:
        """State of one element as governed by one task."""
        moment = to_naive_utc(moment)
        # Link-level dates override the task's own
        start = link.start_date or task.start_date
        end = link.end_date or task.end_date

        if start is None or end is None or moment < start:
            return ElementVisualState(
                element_id=link.element_id,
                task_id=task.id,
                phase=Phase.NOT_STARTED,
                band=None,
                progress=0.0,
                color_hex=self.palette.not_started,
            )

        if moment > end:
            return ElementVisualState(
                element_id=link.element_id,
                task_id=task.id,
                phase=Phase.COMPLETED,
                band=Band.DONE,
                progress=1.0,
                color_hex=self.palette.done,
            )

        span = days_between(start, end)
        progress = clamp(days_between(start, moment) / span, 0.0, 1.0) if span > 0 else 0.0
        band = band_for(progress)
        return ElementVisualState(
            element_id=link.element_id,
            task_id=task.id,
            phase=Phase.IN_PROGRESS,
            band=band,
            progress=progress,
            color_hex=self.palette.critical if critical else self.palette.color_for(Phase.IN_PROGRESS, band),
            critical=critical,
        )

    def resolve(self, moment: datetime, tasks: Iterable[Task],
                critical_ids: Optional[set] = None) -> dict[str, ElementVisualState]:
        """
        Resolve every linked element at a date.

        Args:
            moment: Simulated date
            tasks: Tasks in iteration order; later tasks overwrite earlier ones
            critical_ids: Optional critical task ids; their in-progress
                          elements take the critical color

        Returns:
            Dict of element id -> state, for linked elements only
        """
        moment = to_naive_utc(moment)
        critical_ids = critical_ids or set()
        states = {}

        for task in tasks:
            if not task.element_links:
                continue
            critical = task.id in critical_ids
            for link in task.element_links:
                states[link.element_id] = self.resolve_link(moment, task, link, critical)

        return states

    def colors(self, moment: datetime, tasks: Iterable[Task],
               critical_ids: Optional[set] = None) -> dict[str, str]:
        """Element id -> color hex, the shape a viewer consumes."""
        return {eid: s.color_hex for eid, s in self.resolve(moment, tasks, critical_ids).items()}


def resolve(moment: datetime, tasks: Iterable[Task],
            critical_ids: Optional[set] = None) -> dict[str, ElementVisualState]:
    """Resolve element states with the default palette."""
    return ElementStateResolver().resolve(moment, tasks, critical_ids)
