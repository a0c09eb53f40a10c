"""
Viewport capability consumed by the scroll engine.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Protocol


class ViewportController(Protocol):
    """
    Everything the engine needs from a page: extents, the current offset,
    the position of a target element, and three ways to move.
    """

    def scroll_offset(self) -> float:
        ...

    def viewport_height(self) -> float:
        ...

    def document_height(self) -> float:
        ...

    def element_top(self, target: Any) -> float:
        """Top edge of ``target`` relative to the top of the viewport."""
        ...

    def scroll_to(self, offset: float) -> None:
        """Jump to ``offset`` without animation."""
        ...

    def scroll_by(self, delta: float) -> None:
        """Move by ``delta`` without easing."""
        ...

    def animate_to(self, offset: float) -> None:
        """Smoothly scroll to ``offset``."""
        ...


@dataclass(frozen=True)
class ScrollTarget:
    name: str
    document_top: float


@dataclass(frozen=True)
class ViewportEvent:
    kind: str
    offset: float


@dataclass
class SimulatedViewport:
    """
    In-memory page used for simulation.

    Offsets are clamped to the scrollable range the way a browser clamps
    ``window.scrollTo``. ``animate_to`` lands on its destination at once.
    """

    page_height: float
    window_height: float
    offset: float = 0.0
    history: List[ViewportEvent] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.offset = self._clamp(self.offset)

    def _clamp(self, offset: float) -> float:
        max_offset = max(0.0, float(self.page_height) - float(self.window_height))
        return max(0.0, min(max_offset, float(offset)))

    def _move(self, kind: str, offset: float) -> None:
        self.offset = self._clamp(offset)
        self.history.append(ViewportEvent(kind=kind, offset=self.offset))

    def scroll_offset(self) -> float:
        return self.offset

    def viewport_height(self) -> float:
        return float(self.window_height)

    def document_height(self) -> float:
        return float(self.page_height)

    def element_top(self, target: ScrollTarget) -> float:
        return float(target.document_top) - self.offset

    def scroll_to(self, offset: float) -> None:
        self._move("jump", offset)

    def scroll_by(self, delta: float) -> None:
        self._move("step", self.offset + float(delta))

    def animate_to(self, offset: float) -> None:
        self._move("animate", offset)

    def events(self, kind: str) -> List[ViewportEvent]:
        return [event for event in self.history if event.kind == kind]
