"""
Time-based auto-scroll engine for lyrics.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Mapping, Optional

from .errors import InvalidCommand
from .scheduling import Scheduler, TimerHandle
from .schemas import (
    DEFAULT_SPEED,
    DEFAULT_START_DELAY_SECONDS,
    MAX_SPEED,
    ScrollConfigUpdate,
    SongScrollSettings,
    clamp_speed,
    clamp_start_delay,
)
from .settings import ScrollProfile
from .viewport import ViewportController

LOG = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScrollSnapshot:
    """
    Immutable copy of the engine configuration.
    """

    start_delay_seconds: int
    speed: int
    is_active: bool
    is_paused: bool

    @property
    def is_playing(self) -> bool:
        return self.is_active and not self.is_paused

    def to_dict(self) -> dict:
        return {
            "startDelay": int(self.start_delay_seconds),
            "speed": int(self.speed),
            "isActive": bool(self.is_active),
            "isPaused": bool(self.is_paused),
        }

    def describe(self) -> str:
        status = f"Delay: {self.start_delay_seconds}s | Speed: {self.speed}/{MAX_SPEED}"
        if self.is_playing:
            status += " | Playing"
        if self.is_paused:
            status += " | Paused"
        return status


class ScrollEngine:
    """
    Drives a viewport downwards at a fixed tick rate.

    States: idle, scheduled (start timer armed), running (tick timer armed)
    and paused. ``stop()``, ``destroy()`` and reaching the bottom of the page
    return to idle.
    """

    def __init__(
        self,
        viewport: ViewportController,
        scheduler: Scheduler,
        *,
        start_delay_seconds: int = DEFAULT_START_DELAY_SECONDS,
        speed: int = DEFAULT_SPEED,
        profile: Optional[ScrollProfile] = None,
    ) -> None:
        self._viewport = viewport
        self._scheduler = scheduler
        self._profile = profile or ScrollProfile()

        self._start_delay_seconds = clamp_start_delay(start_delay_seconds)
        self._speed = clamp_speed(speed)
        self._active = False
        self._paused = False
        # True once the tick timer has been started in the current session.
        self._scrolling = False

        self._tick_timer: Optional[TimerHandle] = None
        self._start_timer: Optional[TimerHandle] = None

        self._observer_counter = 0
        self._observers: Dict[int, Callable[[ScrollSnapshot], None]] = {}

    @classmethod
    def from_song(
        cls,
        song: Mapping[str, Any],
        viewport: ViewportController,
        scheduler: Scheduler,
        *,
        profile: Optional[ScrollProfile] = None,
    ) -> "ScrollEngine":
        settings = SongScrollSettings.model_validate(dict(song))
        return cls(
            viewport,
            scheduler,
            start_delay_seconds=settings.scroll_start_delay,
            speed=settings.scroll_speed,
            profile=profile,
        )

    @property
    def profile(self) -> ScrollProfile:
        return self._profile

    # ------------------------------------------------------------------ helpers

    def _snapshot(self) -> ScrollSnapshot:
        return ScrollSnapshot(
            start_delay_seconds=self._start_delay_seconds,
            speed=self._speed,
            is_active=self._active,
            is_paused=self._paused,
        )

    def _notify(self) -> ScrollSnapshot:
        snapshot = self._snapshot()
        for token, callback in list(self._observers.items()):
            try:
                callback(snapshot)
            except Exception:
                LOG.exception("Scroll observer %s failed.", token)
        return snapshot

    def _clear_timers(self) -> None:
        if self._tick_timer is not None:
            self._tick_timer.cancel()
            self._tick_timer = None
        if self._start_timer is not None:
            self._start_timer.cancel()
            self._start_timer = None

    def _pixels_per_tick(self) -> float:
        return self._speed * self._profile.pixels_per_speed_step

    def _begin(self, target: Any = None) -> None:
        self._active = True
        self._paused = False
        self._clear_timers()

        if self._scrolling:
            LOG.debug("Resuming scroll without delay")
            self._start_scrolling()
            return

        delay_ms = self._start_delay_seconds * 1000
        if target is not None:
            target_offset = self._viewport.scroll_offset() + self._viewport.element_top(target)
            self._viewport.scroll_to(target_offset)
            delay_ms += self._profile.positioning_delay_ms
            LOG.debug("Jumped to %.1f; starting in %d ms", target_offset, delay_ms)
        elif delay_ms <= 0:
            self._start_scrolling()
            return

        self._start_timer = self._scheduler.call_later(delay_ms, self._on_start_delay_elapsed)

    def _halt(self) -> None:
        self._clear_timers()
        self._active = False
        self._paused = False
        self._scrolling = False
        self._viewport.animate_to(0)

    def _on_start_delay_elapsed(self) -> None:
        self._start_timer = None
        LOG.debug("Start delay elapsed")
        self._start_scrolling()

    def _start_scrolling(self) -> None:
        if self._tick_timer is not None:
            self._tick_timer.cancel()
        self._scrolling = True
        self._tick_timer = self._scheduler.call_repeating(self._profile.tick_interval_ms, self._tick)

    def _tick(self) -> None:
        if not self._active or self._paused:
            return

        offset = self._viewport.scroll_offset()
        bottom = self._viewport.document_height() - self._profile.bottom_threshold_px
        if offset + self._viewport.viewport_height() >= bottom:
            LOG.info("Reached end of scrollable content at %.1f; stopping", offset)
            self._halt()
            self._notify()
            return

        self._viewport.scroll_by(self._pixels_per_tick())

    # ------------------------------------------------------------------ public API

    def subscribe(self, callback: Callable[[ScrollSnapshot], None]) -> int:
        if not callable(callback):
            raise TypeError("callback must be callable")
        self._observer_counter += 1
        token = self._observer_counter
        self._observers[token] = callback
        try:
            callback(self._snapshot())
        except Exception:
            LOG.exception("Scroll observer %s failed during initial snapshot.", token)
        return token

    def unsubscribe(self, token: int) -> None:
        self._observers.pop(token, None)

    def play(self, target: Any = None) -> ScrollSnapshot:
        """
        Start or resume scrolling.

        A fresh session with ``target`` first jumps to the target and waits
        for the positioning delay on top of the configured start delay.
        Resuming after :meth:`pause` continues immediately from the current
        offset.
        """

        if self.is_playing():
            return self._snapshot()
        self._begin(target)
        return self._notify()

    def pause(self) -> ScrollSnapshot:
        if not self._active:
            return self._snapshot()
        self._clear_timers()
        self._paused = True
        LOG.debug("Scroll paused")
        return self._notify()

    def stop(self) -> ScrollSnapshot:
        """Stop scrolling and animate back to the top."""

        self._halt()
        LOG.debug("Scroll stopped")
        return self._notify()

    def update_config(self, changes: Optional[Mapping[str, Any]] = None, **fields: Any) -> ScrollSnapshot:
        """
        Merge a partial configuration.

        While playing, the new configuration takes effect by stopping (which
        returns to the top) and playing again without a target. An update that
        itself switches an idle or paused engine to playing (``isActive=True``
        or ``isPaused=False``) starts or resumes it as :meth:`play` would.
        """

        payload = dict(changes or {})
        payload.update(fields)
        update = ScrollConfigUpdate.model_validate(payload)
        was_playing = self.is_playing()

        if update.start_delay_seconds is not None:
            self._start_delay_seconds = update.start_delay_seconds
        if update.speed is not None:
            self._speed = update.speed
        if update.is_active is not None:
            self._active = update.is_active
        if update.is_paused is not None:
            self._paused = update.is_paused
        if not self._active:
            self._paused = False

        if was_playing:
            LOG.debug("Restarting scroll with speed=%d delay=%ds", self._speed, self._start_delay_seconds)
            self._halt()
            self._begin()
        elif self.is_playing() and self._tick_timer is None and self._start_timer is None:
            # Flags flipped to playing by the update itself; arm timers like play().
            self._begin()
        return self._notify()

    def get_config(self) -> ScrollSnapshot:
        return self._snapshot()

    def is_playing(self) -> bool:
        return self._active and not self._paused

    def is_paused(self) -> bool:
        return self._paused

    def is_active(self) -> bool:
        return self._active

    def destroy(self) -> None:
        self._clear_timers()
        self._active = False
        self._paused = False
        self._scrolling = False
        self._observers.clear()

    def apply(self, op: str, *, target: Any = None, **params: Any) -> ScrollSnapshot:
        command = str(op or "").strip().lower()
        if command in {"play", "resume", "start"}:
            return self.play(target)
        if command == "pause":
            return self.pause()
        if command == "stop":
            return self.stop()
        if command in {"update", "configure", "update_config"}:
            return self.update_config(params)
        raise InvalidCommand(f"Unsupported scroll op '{op}'")
