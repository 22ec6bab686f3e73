"""
Simulation session.

Wires one task list, its timeline, a playback clock, the element resolver and
an injected viewer together for the lifetime of one viewing session.
"""

import logging
import time
from datetime import datetime
from typing import Callable, Iterable, Optional

from bim4d.schemas.tasks import Task
from .clock import ClockState, SimulationClock, SimulationState
from .ports import FrameScheduler, ViewerAdapter
from .resolver import ElementStateResolver, ElementVisualState, Palette
from .timeline import TimelineIndex

logger = logging.getLogger(__name__)


class SimulationSession:
    """
    Drives 4D playback against a viewer.

    The scheduler runs only while the clock is playing. After every date
    change the resolved colors are pushed to the viewer.
    """

    def __init__(self, viewer: ViewerAdapter, scheduler: FrameScheduler,
                 palette: Palette = None, time_source: Callable[[], float] = time.monotonic):
        self.viewer = viewer
        self.scheduler = scheduler
        self.resolver = ElementStateResolver(palette)
        self._time_source = time_source

        self.tasks: list[Task] = []
        self.timeline: Optional[TimelineIndex] = None
        self.clock: Optional[SimulationClock] = None
        self.critical_ids: set = set()
        self.element_states: dict[str, ElementVisualState] = {}
        self.ended_count = 0
        self._last_colors: Optional[dict[str, str]] = None

    def load_tasks(self, tasks: Iterable[Task], critical_ids: Optional[set] = None) -> Optional[SimulationState]:
        """
        Replace the task list and reset playback.

        Speed carries over from the previous clock. Returns the new snapshot,
        or None when no task carries a date.
        """
        self.scheduler.stop()
        previous_speed = self.clock.speed if self.clock else None

        self.tasks = list(tasks)
        self.critical_ids = set(critical_ids or ())
        self.timeline = TimelineIndex(self.tasks)
        self.element_states = {}
        self._last_colors = None

        if self.timeline.date_range is None:
            self.clock = None
            logger.warning("Task list has no dates; simulation disabled")
            return None

        self.clock = SimulationClock(self.timeline.date_range, previous_speed, self._time_source)
        self.clock.add_listener(self._on_state_change)
        logger.info(f"Loaded {len(self.tasks)} tasks, range "
                    f"{self.timeline.date_range.start} - {self.timeline.date_range.end}")
        self._render()
        return self.clock.snapshot()

    def set_critical_ids(self, critical_ids: Optional[set]) -> None:
        """Change which tasks are highlighted as critical and re-render."""
        self.critical_ids = set(critical_ids or ())
        if self.clock:
            self._render()

    def _on_state_change(self, old_state: ClockState, new_state: ClockState) -> None:
        if new_state != ClockState.PLAYING and self.scheduler.running:
            self.scheduler.stop()
        if new_state == ClockState.ENDED:
            self.ended_count += 1
            logger.info(f"Playback ended at {self.clock.current_date}")

    def _on_frame(self, delta_seconds: float) -> None:
        self.tick(delta_seconds)

    def _render(self) -> dict[str, ElementVisualState]:
        self.element_states = self.resolver.resolve(self.clock.current_date, self.tasks, self.critical_ids)
        colors = {eid: state.color_hex for eid, state in self.element_states.items()}
        if colors != self._last_colors:
            self.viewer.set_element_colors(colors)
            self._last_colors = colors
        return self.element_states

    # Playback control surface

    def play(self) -> None:
        if self.clock is None:
            return
        self.clock.play()
        if self.clock.playing and not self.scheduler.running:
            self.scheduler.start(self._on_frame)

    def pause(self) -> None:
        if self.clock is None:
            return
        self.clock.pause()

    def reset(self) -> None:
        if self.clock is None:
            return
        self.clock.reset()
        self._render()

    def scrub(self, moment: datetime) -> None:
        if self.clock is None:
            return
        self.clock.scrub(moment)
        self._render()

    def scrub_to_fraction(self, fraction: float) -> None:
        if self.clock is None:
            return
        self.clock.scrub_to_fraction(fraction)
        self._render()

    def skip(self, days: float = None) -> None:
        if self.clock is None:
            return
        self.clock.skip(days)
        self._render()

    def set_speed(self, days_per_second: float) -> Optional[float]:
        if self.clock is None:
            return None
        return self.clock.set_speed(days_per_second)

    def tick(self, elapsed_seconds: float) -> None:
        if self.clock is None or not self.clock.playing:
            return
        self.clock.tick(elapsed_seconds)
        self._render()

    # Queries

    def snapshot(self) -> Optional[SimulationState]:
        return self.clock.snapshot() if self.clock else None

    def active_tasks(self) -> list[Task]:
        """Tasks in progress at the current simulated date."""
        if self.clock is None:
            return []
        return self.timeline.active_tasks(self.clock.current_date)

    def focus_active(self) -> list[str]:
        """Isolate and frame the elements of the active tasks."""
        element_ids = []
        for task in self.active_tasks():
            element_ids.extend(eid for eid in task.element_ids() if eid not in element_ids)
        if element_ids:
            self.viewer.isolate(element_ids)
            self.viewer.fit_to_view(element_ids)
        return element_ids
