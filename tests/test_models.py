"""Tests for domain models."""

import dataclasses

import pytest

from models import (
    ApplicationSettings,
    KeyboardBackend,
    RunConfiguration,
    RunState,
    ValidationError,
    parse_series,
)


def test_parse_series_splits_on_any_whitespace() -> None:
    raw = "12345 67890\n11111\t22222   12345\n"
    assert parse_series(raw) == ["12345", "67890", "11111", "22222", "12345"]


def test_parse_series_blank_text() -> None:
    assert parse_series("  \n\t ") == []


def test_configuration_from_text() -> None:
    config = RunConfiguration.from_text("111 222", " 15052025 ", countdown_seconds=1)

    assert config.series == ("111", "222")
    assert config.companion_value == "15052025"
    assert config.total == 2
    assert config.warmup_seconds == 3.0
    assert config.settle_delay == pytest.approx(0.06)


def test_configuration_is_immutable() -> None:
    config = RunConfiguration(series=["1"], companion_value="x")
    assert isinstance(config.series, tuple)
    with pytest.raises(dataclasses.FrozenInstanceError):
        config.companion_value = "y"  # type: ignore[misc]


@pytest.mark.parametrize(
    "kwargs, message",
    [
        ({"series": [], "companion_value": "15052025"}, "empty series list"),
        ({"series": ["1"], "companion_value": "   "}, "missing companion value"),
        ({"series": ["1"], "companion_value": ""}, "missing companion value"),
        ({"series": ["1"], "companion_value": "d", "countdown_seconds": -1}, "countdown"),
        ({"series": ["1"], "companion_value": "d", "per_step_delay": -0.1}, "per step delay"),
    ],
)
def test_configuration_validation(kwargs, message) -> None:
    with pytest.raises(ValidationError, match=message):
        RunConfiguration(**kwargs)


def test_validation_error_is_value_error() -> None:
    assert issubclass(ValidationError, ValueError)


def test_terminal_states() -> None:
    assert {state for state in RunState if state.is_terminal()} == {
        RunState.FINISHED,
        RunState.CANCELLED,
        RunState.FAILED,
    }


def test_settings_round_trip_keeps_unknown_keys() -> None:
    data = ApplicationSettings(per_step_delay_ms=120, keyboard_backend=KeyboardBackend.PYAUTOGUI).to_dict()
    data["window_geometry"] = "800x600"

    restored = ApplicationSettings.from_dict(data)

    assert restored.per_step_delay_ms == 120
    assert restored.keyboard_backend == KeyboardBackend.PYAUTOGUI
    assert restored.to_dict()["window_geometry"] == "800x600"


def test_settings_from_dict_sanitizes_values() -> None:
    settings = ApplicationSettings.from_dict(
        {"keyboard_backend": "xdotool", "countdown_seconds": -4, "cancel_hotkey": ""}
    )

    assert settings.keyboard_backend == KeyboardBackend.AUTO
    assert settings.countdown_seconds == 0
    assert settings.cancel_hotkey == "esc"
    assert settings.notepad_path == "bloc_notas.txt"


def test_settings_build_run_configuration_converts_milliseconds() -> None:
    settings = ApplicationSettings(per_step_delay_ms=90, keystroke_interval_ms=2, countdown_seconds=5)

    config = settings.build_run_configuration("a b c", "15052025")

    assert config.per_step_delay == pytest.approx(0.09)
    assert config.keystroke_interval == pytest.approx(0.002)
    assert config.countdown_seconds == 5
    assert config.series == ("a", "b", "c")
