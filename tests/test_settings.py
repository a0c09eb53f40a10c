from __future__ import annotations

import pytest

from songscroll.errors import ScrollError
from songscroll.settings import (
    ENV_PROFILES_VAR,
    InvalidProfile,
    ScrollProfile,
    UnknownProfile,
    get_profile,
    load_profiles,
)


def test_builtin_defaults() -> None:
    profile = ScrollProfile()

    assert profile.tick_interval_ms == 16
    assert profile.pixels_per_speed_step == pytest.approx(0.2)
    assert profile.positioning_delay_ms == 800
    assert profile.bottom_threshold_px == 10


def test_packaged_profiles_merge_over_defaults() -> None:
    profiles = load_profiles()

    assert profiles["default"] == ScrollProfile()
    assert profiles["low_power"].tick_interval_ms == 32
    assert profiles["low_power"].positioning_delay_ms == 800
    assert profiles["stage"].positioning_delay_ms == 1500


def test_custom_profiles_file(tmp_path) -> None:
    path = tmp_path / "profiles.yaml"
    path.write_text(
        "rehearsal:\n"
        "  tick_interval_ms: 20\n"
        "  bottom_threshold_px: -5\n"
        "  colour: blue\n"
        "empty:\n",
        encoding="utf-8",
    )

    profiles = load_profiles(path)

    assert set(profiles) == {"default", "rehearsal", "empty"}
    assert profiles["rehearsal"].tick_interval_ms == 20
    assert profiles["rehearsal"].bottom_threshold_px == 0
    assert profiles["empty"] == ScrollProfile()


def test_missing_file_falls_back_to_default(tmp_path) -> None:
    profiles = load_profiles(tmp_path / "missing.yaml")

    assert profiles == {"default": ScrollProfile()}


def test_environment_override(tmp_path, monkeypatch) -> None:
    path = tmp_path / "override.yaml"
    path.write_text("slow:\n  pixels_per_speed_step: 0.1\n", encoding="utf-8")
    monkeypatch.setenv(ENV_PROFILES_VAR, str(path))

    assert get_profile("slow").pixels_per_speed_step == pytest.approx(0.1)


def test_unknown_profile() -> None:
    with pytest.raises(UnknownProfile) as excinfo:
        get_profile("does-not-exist")
    assert isinstance(excinfo.value, ScrollError)


@pytest.mark.parametrize(
    "content",
    [
        "- a\n- b\n",
        "default: 5\n",
        "default:\n  tick_interval_ms: fast\n",
        "default:\n  positioning_delay_ms: .inf\n",
        "default: [unclosed\n",
    ],
)
def test_malformed_profiles_file(tmp_path, content) -> None:
    path = tmp_path / "profiles.yaml"
    path.write_text(content, encoding="utf-8")

    with pytest.raises(InvalidProfile) as excinfo:
        load_profiles(path)
    assert isinstance(excinfo.value, ScrollError)
