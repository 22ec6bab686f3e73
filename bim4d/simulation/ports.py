"""Interfaces the simulation core talks to instead of reaching for globals."""
from abc import ABC, abstractmethod
from typing import Callable, Iterable, Optional

FrameCallback = Callable[[float], None]


class ViewerAdapter(ABC):
    """
    Capability interface onto a 3D viewer.

    Injected into whatever consumes resolved element states. Implementations
    wrap a concrete viewer (IFC, Forge, Speckle, ...).
    """

    @abstractmethod
    def set_element_colors(self, colors: dict[str, str]) -> None:
        """
        Overwrite the coloring of exactly the listed elements.

        Args:
            colors: Element id -> color hex
        """
        pass

    @abstractmethod
    def isolate(self, element_ids: Iterable[str]) -> None:
        """Show only the given elements."""
        pass

    @abstractmethod
    def fit_to_view(self, element_ids: Iterable[str]) -> None:
        """Frame the camera on the given elements."""
        pass


class FrameScheduler(ABC):
    """
    Source of animation frames.

    Once started, calls the callback with the real seconds elapsed since
    the previous frame until stopped.
    """

    @abstractmethod
    def start(self, callback: FrameCallback) -> None:
        pass

    @abstractmethod
    def stop(self) -> None:
        pass

    @property
    @abstractmethod
    def running(self) -> bool:
        pass


class ManualScheduler(FrameScheduler):
    """
    Frame scheduler stepped by hand.

    Tests and headless replays call advance() with explicit deltas instead of
    waiting on real frame timing.
    """

    def __init__(self):
        self._callback: Optional[FrameCallback] = None
        self.frames = 0

    def start(self, callback: FrameCallback) -> None:
        self._callback = callback

    def stop(self) -> None:
        self._callback = None

    @property
    def running(self) -> bool:
        return self._callback is not None

    def advance(self, delta_seconds: float) -> bool:
        """
        Deliver one frame.

        Returns:
            True if a callback received the frame, False when stopped
        """
        if self._callback is None:
            return False
        self.frames += 1
        self._callback(delta_seconds)
        return True

    def run(self, deltas: Iterable[float]) -> int:
        """Deliver frames until the deltas run out or the scheduler is stopped."""
        delivered = 0
        for delta in deltas:
            if not self.advance(delta):
                break
            delivered += 1
        return delivered
