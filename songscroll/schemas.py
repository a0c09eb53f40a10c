"""
Pydantic schemas for scroll configuration payloads.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

MIN_SPEED = 1
MAX_SPEED = 10
DEFAULT_SPEED = 5
DEFAULT_START_DELAY_SECONDS = 0
# One day; keeps an infinite delay convertible to a timer duration.
MAX_START_DELAY_SECONDS = 86_400

START_DELAY_ERROR = "Start delay must be a non-negative integer (0 or greater)"
SPEED_ERROR = "Speed must be an integer between 1 and 10"


def _bounded(value: Any, low: int, high: Optional[int] = None) -> int:
    # Bound before converting so infinities clamp instead of overflowing int().
    number = value if isinstance(value, int) else float(value)
    if number != number:
        raise ValueError("value must not be NaN")
    number = max(low, number)
    if high is not None:
        number = min(high, number)
    return int(number)


def clamp_speed(value: Any) -> int:
    return _bounded(value, MIN_SPEED, MAX_SPEED)


def clamp_start_delay(value: Any) -> int:
    return _bounded(value, 0, MAX_START_DELAY_SECONDS)


class ScrollConfigUpdate(BaseModel):
    """
    Partial engine update. Out-of-range numbers are clamped, not rejected.
    """

    start_delay_seconds: Optional[int] = Field(
        default=None,
        validation_alias=AliasChoices("start_delay_seconds", "startDelaySeconds", "startDelay", "delay"),
    )
    speed: Optional[int] = None
    is_active: Optional[bool] = Field(
        default=None,
        validation_alias=AliasChoices("is_active", "isActive"),
    )
    is_paused: Optional[bool] = Field(
        default=None,
        validation_alias=AliasChoices("is_paused", "isPaused"),
    )
    model_config = ConfigDict(extra="ignore")

    @field_validator("speed", mode="before")
    @classmethod
    def _clamp_speed(cls, value: Any) -> Optional[int]:
        if value is None:
            return None
        try:
            return clamp_speed(value)
        except TypeError as exc:
            raise ValueError(f"speed must be numeric, got {value!r}") from exc

    @field_validator("start_delay_seconds", mode="before")
    @classmethod
    def _clamp_start_delay(cls, value: Any) -> Optional[int]:
        if value is None:
            return None
        try:
            return clamp_start_delay(value)
        except TypeError as exc:
            raise ValueError(f"start delay must be numeric, got {value!r}") from exc


class SongScrollSettings(BaseModel):
    """Scroll settings persisted alongside a song."""

    scroll_start_delay: int = Field(
        default=DEFAULT_START_DELAY_SECONDS,
        validation_alias=AliasChoices("scrollStartDelay", "scroll_start_delay"),
    )
    scroll_speed: int = Field(
        default=DEFAULT_SPEED,
        validation_alias=AliasChoices("scrollSpeed", "scroll_speed"),
    )
    model_config = ConfigDict(extra="ignore")


class ScrollSettingsForm(BaseModel):
    """
    Values submitted from the scroll configuration dialog.

    Unlike :class:`ScrollConfigUpdate` the form rejects invalid values so the
    caller can surface a message instead of silently saving a clamped value.
    """

    start_delay: int = Field(validation_alias=AliasChoices("startDelay", "start_delay"))
    speed: int
    model_config = ConfigDict(extra="ignore")

    @field_validator("start_delay", mode="before")
    @classmethod
    def _check_start_delay(cls, value: Any) -> int:
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            raise ValueError(START_DELAY_ERROR)
        return value

    @field_validator("speed", mode="before")
    @classmethod
    def _check_speed(cls, value: Any) -> int:
        if isinstance(value, bool) or not isinstance(value, int) or not MIN_SPEED <= value <= MAX_SPEED:
            raise ValueError(SPEED_ERROR)
        return value

    def to_update(self) -> ScrollConfigUpdate:
        return ScrollConfigUpdate(start_delay_seconds=self.start_delay, speed=self.speed)
