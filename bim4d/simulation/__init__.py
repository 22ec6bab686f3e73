"""
4D simulation: timeline, playback clock and element state resolution.
"""

from .timeline import DateRange, TimelineIndex
from .clock import ClockState, SimulationClock, SimulationState
from .resolver import Band, ElementStateResolver, ElementVisualState, Palette, Phase, band_for, resolve
from .ports import FrameScheduler, ManualScheduler, ViewerAdapter
from .session import SimulationSession

__all__ = [
    'DateRange',
    'TimelineIndex',
    'ClockState',
    'SimulationClock',
    'SimulationState',
    'Band',
    'ElementStateResolver',
    'ElementVisualState',
    'Palette',
    'Phase',
    'band_for',
    'resolve',
    'FrameScheduler',
    'ManualScheduler',
    'ViewerAdapter',
    'SimulationSession',
]
