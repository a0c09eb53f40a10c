"""
songscroll: lyrics auto-scroll engine.

The engine scrolls a viewport at a configurable speed after an optional start
delay, supports pause/resume and live reconfiguration, and stops by itself at
the bottom of the page. Pages and timers are injected, see
:mod:`songscroll.viewport` and :mod:`songscroll.scheduling`.
"""

from __future__ import annotations

from .errors import InvalidCommand, ScrollError
from .scheduling import AsyncioScheduler, Scheduler, TimerHandle, VirtualScheduler
from .scroll import ScrollEngine, ScrollSnapshot
from .settings import InvalidProfile, ScrollProfile, UnknownProfile, get_profile, load_profiles
from .viewport import ScrollTarget, SimulatedViewport, ViewportController

__version__ = "0.1.0"

__all__ = [
    "AsyncioScheduler",
    "InvalidCommand",
    "InvalidProfile",
    "Scheduler",
    "ScrollEngine",
    "ScrollError",
    "ScrollProfile",
    "ScrollSnapshot",
    "ScrollTarget",
    "SimulatedViewport",
    "TimerHandle",
    "UnknownProfile",
    "ViewportController",
    "VirtualScheduler",
    "get_profile",
    "load_profiles",
]
