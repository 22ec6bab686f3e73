"""
Playback clock for the 4D simulation.

A small state machine (idle, playing, paused, ended) over a bounded date
range. The simulated date only moves through explicit tick deltas and scrub
calls, so a sequence of calls always reproduces the same dates.
"""

import logging
import math
import time
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Callable, Optional

from bim4d.config.settings import settings
from bim4d.utils.helpers import add_days, clamp, days_between, to_naive_utc
from .timeline import DateRange

logger = logging.getLogger(__name__)

# Ticks landing within this of the range end count as reaching it
END_TOLERANCE = timedelta(milliseconds=1)


class ClockState(str, Enum):
    """Playback states."""

    IDLE = 'idle'
    PLAYING = 'playing'
    PAUSED = 'paused'
    ENDED = 'ended'


@dataclass(frozen=True)
class SimulationState:
    """Snapshot of the clock for playback controls."""

    current_date: datetime
    playing: bool
    speed: float
    date_range: DateRange
    state: ClockState
    position: float          # 0-1 slider fraction


StateListener = Callable[[ClockState, ClockState], None]


class SimulationClock:
    """
    Simulated-date clock driven by external ticks.

    Speed is in simulated days per real second and is clamped to
    [MIN_SPEED, MAX_SPEED]. tick is expected once per animation frame and is
    ignored unless the clock is playing.
    """

    MIN_SPEED = settings.MIN_SPEED
    MAX_SPEED = settings.MAX_SPEED

    def __init__(self, date_range: DateRange, speed: float = None,
                 time_source: Callable[[], float] = time.monotonic):
        """
        Args:
            date_range: Bounds of the simulation
            speed: Initial speed (settings default when None)
            time_source: Wall clock used only to record the play anchor
        """
        self.date_range = date_range
        self._time_source = time_source
        self._speed = self._clamp_speed(settings.DEFAULT_SPEED if speed is None else speed)
        self._state = ClockState.IDLE
        self._current = date_range.start
        self._anchor: Optional[float] = None
        self._listeners: list[StateListener] = []

    @property
    def state(self) -> ClockState:
        return self._state

    @property
    def current_date(self) -> datetime:
        return self._current

    @property
    def speed(self) -> float:
        return self._speed

    @property
    def playing(self) -> bool:
        return self._state == ClockState.PLAYING

    @property
    def anchor(self) -> Optional[float]:
        """Wall-clock reading taken by the last play()."""
        return self._anchor

    @property
    def position(self) -> float:
        """Current date as a 0-1 fraction of the range."""
        span = self.date_range.days
        if span == 0:
            return 0.0
        return clamp(days_between(self.date_range.start, self._current) / span, 0.0, 1.0)

    def add_listener(self, listener: StateListener) -> None:
        """Register fn(old_state, new_state), called on every transition."""
        self._listeners.append(listener)

    def remove_listener(self, listener: StateListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _transition(self, new_state: ClockState) -> None:
        old_state = self._state
        if old_state == new_state:
            return
        self._state = new_state
        logger.debug(f"Clock {old_state.value} -> {new_state.value} at {self._current}")
        for listener in list(self._listeners):
            listener(old_state, new_state)

    def reset(self) -> None:
        """Return to idle at the start of the range."""
        self._current = self.date_range.start
        self._anchor = None
        self._transition(ClockState.IDLE)

    def play(self) -> None:
        """Start or resume playback. No-op when playing or ended."""
        if self._state not in (ClockState.IDLE, ClockState.PAUSED):
            logger.debug(f"play() ignored in state {self._state.value}")
            return
        self._anchor = self._time_source()
        self._transition(ClockState.PLAYING)

    def pause(self) -> None:
        """Pause playback. No-op unless playing."""
        if self._state == ClockState.PLAYING:
            self._transition(ClockState.PAUSED)

    def scrub(self, moment: datetime) -> datetime:
        """
        Jump to a date, clamped to the range, and pause.

        Reaching the range end by scrubbing pauses rather than ends; ended is
        reserved for playback running out. Aware datetimes are taken in UTC,
        like task dates.
        """
        self._current = self.date_range.clamp(to_naive_utc(moment))
        self._transition(ClockState.PAUSED)
        return self._current

    def scrub_to_fraction(self, fraction: float) -> datetime:
        """Scrub to a 0-1 slider position."""
        return self.scrub(add_days(self.date_range.start, clamp(fraction, 0.0, 1.0) * self.date_range.days))

    def skip(self, days: float = None) -> datetime:
        """Scrub forward (or back, when negative) by a number of days."""
        if days is None:
            days = settings.SKIP_DAYS
        return self.scrub(add_days(self._current, days))

    def _clamp_speed(self, days_per_second: float) -> float:
        return clamp(float(days_per_second), self.MIN_SPEED, self.MAX_SPEED)

    def set_speed(self, days_per_second: float) -> float:
        """
        Set playback speed, clamped to the allowed range.

        Takes effect on the next tick. Returns the applied speed; NaN leaves
        the speed unchanged.
        """
        if math.isnan(days_per_second):
            logger.warning("Ignoring NaN playback speed")
            return self._speed
        self._speed = self._clamp_speed(days_per_second)
        return self._speed

    def tick(self, elapsed_seconds: float) -> datetime:
        """
        Advance by elapsed real seconds times speed.

        Only meaningful while playing. Negative deltas count as zero so the
        date never runs backwards. Reaching the range end clamps to it and
        ends playback.
        """
        if self._state != ClockState.PLAYING:
            return self._current

        advanced = add_days(self._current, max(0.0, elapsed_seconds) * self._speed)
        if advanced >= self.date_range.end - END_TOLERANCE:
            self._current = self.date_range.end
            self._transition(ClockState.ENDED)
        else:
            self._current = advanced

        return self._current

    def snapshot(self) -> SimulationState:
        """Current state for playback UI controls."""
        return SimulationState(
            current_date=self._current,
            playing=self.playing,
            speed=self._speed,
            date_range=self.date_range,
            state=self._state,
            position=self.position,
        )

    def __repr__(self) -> str:
        return f"SimulationClock({self._state.value}, {self._current}, speed={self._speed:g})"
