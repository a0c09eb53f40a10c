"""
Timing profiles for the scroll engine.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from .errors import ScrollError

ENV_PROFILES_VAR = "SONGSCROLL_PROFILES"
CONFIG_DIR = Path(__file__).resolve().parent / "configs"
PROFILES_PATH = CONFIG_DIR / "profiles.yaml"
DEFAULT_PROFILE = "default"

LOG = logging.getLogger(__name__)


class UnknownProfile(ScrollError):
    """Raised when a profile name is not present in the profiles file."""


class InvalidProfile(ScrollError):
    """Raised when the profiles file or one of its profiles is malformed."""


@dataclass(frozen=True)
class ScrollProfile:
    tick_interval_ms: int = 16
    pixels_per_speed_step: float = 0.2
    positioning_delay_ms: int = 800
    bottom_threshold_px: float = 10

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any], name: str = DEFAULT_PROFILE) -> "ScrollProfile":
        if not isinstance(payload, Mapping):
            raise InvalidProfile(f"Profile '{name}' must be a mapping, got {type(payload).__name__}")
        known = {item.name for item in fields(cls)}
        values = {key: value for key, value in payload.items() if key in known}
        ignored = sorted(str(key) for key in set(payload) - known)
        if ignored:
            LOG.warning("Ignoring unknown profile keys: %s", ", ".join(ignored))
        profile = cls(**values)
        try:
            return cls(
                tick_interval_ms=max(1, int(profile.tick_interval_ms)),
                pixels_per_speed_step=max(0.0, float(profile.pixels_per_speed_step)),
                positioning_delay_ms=max(0, int(profile.positioning_delay_ms)),
                bottom_threshold_px=max(0.0, float(profile.bottom_threshold_px)),
            )
        except (TypeError, ValueError, OverflowError) as exc:
            raise InvalidProfile(f"Profile '{name}' has an invalid value: {exc}") from exc


def profiles_path() -> Path:
    override = os.environ.get(ENV_PROFILES_VAR)
    if override:
        return Path(override).expanduser()
    return PROFILES_PATH


def load_profiles(path: Optional[Path] = None) -> Dict[str, ScrollProfile]:
    """
    Load every profile from ``path`` (or the configured profiles file).

    The built-in defaults are always available under ``"default"``.
    """

    path = Path(path) if path is not None else profiles_path()
    profiles: Dict[str, ScrollProfile] = {DEFAULT_PROFILE: ScrollProfile()}
    try:
        with path.open("r", encoding="utf-8") as handle:
            raw = yaml.safe_load(handle) or {}
    except FileNotFoundError:
        LOG.debug("Profiles file %s not found; using built-in defaults", path)
        return profiles
    except yaml.YAMLError as exc:
        raise InvalidProfile(f"Cannot parse profiles file {path}: {exc}") from exc

    if not isinstance(raw, Mapping):
        raise InvalidProfile(f"Profiles file {path} must contain a mapping of profile names")

    for name, payload in raw.items():
        profiles[str(name)] = ScrollProfile.from_mapping(payload or {}, name=str(name))
    return profiles


def get_profile(name: str = DEFAULT_PROFILE, path: Optional[Path] = None) -> ScrollProfile:
    profiles = load_profiles(path)
    try:
        return profiles[name]
    except KeyError:
        raise UnknownProfile(f"Unknown scroll profile '{name}'") from None
