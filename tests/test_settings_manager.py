"""Tests for settings persistence."""

import json
from pathlib import Path
from unittest.mock import patch

from models import ApplicationSettings, KeyboardBackend
from settings_manager import APP_FOLDER, SETTINGS_FILENAME, SettingsManager, default_settings_path


def test_default_path_is_under_appdata(tmp_path) -> None:
    with patch.dict("os.environ", {"APPDATA": str(tmp_path)}):
        assert default_settings_path() == tmp_path / APP_FOLDER / SETTINGS_FILENAME
        assert SettingsManager().path == tmp_path / APP_FOLDER / SETTINGS_FILENAME


def test_default_path_falls_back_to_home(tmp_path) -> None:
    with patch.dict("os.environ", {"APPDATA": ""}), patch("os.path.expanduser", return_value=str(tmp_path)):
        assert default_settings_path() == Path(tmp_path) / APP_FOLDER / SETTINGS_FILENAME


def test_missing_file_returns_defaults(tmp_path) -> None:
    manager = SettingsManager(tmp_path / "settings.json")

    assert manager.load() == ApplicationSettings()
    assert manager.last_error is None


def test_save_then_load(tmp_path) -> None:
    path = tmp_path / "nested" / "settings.json"
    manager = SettingsManager(path)
    settings = ApplicationSettings(
        per_step_delay_ms=150,
        countdown_seconds=2,
        keyboard_backend=KeyboardBackend.PYNPUT,
        last_companion_value="15052025",
    )

    manager.save(settings)

    assert list(path.parent.iterdir()) == [path]
    assert json.loads(path.read_text(encoding="utf-8"))["per_step_delay_ms"] == 150
    assert manager.load() == settings


def test_invalid_json_is_set_aside(tmp_path) -> None:
    path = tmp_path / "settings.json"
    path.write_text("{\n  not json", encoding="utf-8")
    manager = SettingsManager(path)

    assert manager.load() == ApplicationSettings()
    assert not path.exists()
    assert manager.backup_path == tmp_path / "settings.json.bak"
    assert manager.backup_path.read_text(encoding="utf-8") == "{\n  not json"
    assert "invalid JSON at line 2" in manager.last_error
    assert "kept as settings.json.bak" in manager.last_error


def test_non_object_json_is_set_aside(tmp_path) -> None:
    path = tmp_path / "settings.json"
    path.write_text("[1, 2, 3]", encoding="utf-8")
    manager = SettingsManager(path)

    assert manager.load() == ApplicationSettings()
    assert "expected an object, found list" in manager.last_error
    assert manager.backup_path.exists()


def test_bad_value_is_set_aside(tmp_path) -> None:
    path = tmp_path / "settings.json"
    path.write_text('{"countdown_seconds": "soon"}', encoding="utf-8")
    manager = SettingsManager(path)

    assert manager.load() == ApplicationSettings()
    assert "bad value" in manager.last_error
    assert not path.exists()


def test_non_utf8_file_is_set_aside(tmp_path) -> None:
    path = tmp_path / "settings.json"
    path.write_bytes(b'{"cancel_hotkey": "\xff"}')
    manager = SettingsManager(path)

    assert manager.load() == ApplicationSettings()
    assert "not UTF-8" in manager.last_error
    assert manager.backup_path.exists()


def test_unreadable_file_is_left_in_place(tmp_path) -> None:
    path = tmp_path / "settings.json"
    path.mkdir()
    manager = SettingsManager(path)

    assert manager.load() == ApplicationSettings()
    assert manager.last_error.startswith("Cannot read")
    assert path.is_dir()
    assert not manager.backup_path.exists()


def test_failed_backup_is_reported(tmp_path) -> None:
    path = tmp_path / "settings.json"
    path.write_text("{", encoding="utf-8")
    manager = SettingsManager(path)

    with patch("settings_manager.os.replace", side_effect=OSError("locked")):
        assert manager.load() == ApplicationSettings()

    assert "could not be moved aside: locked" in manager.last_error
    assert path.exists()


def test_successful_load_clears_previous_error(tmp_path) -> None:
    path = tmp_path / "settings.json"
    path.write_text("{", encoding="utf-8")
    manager = SettingsManager(path)
    manager.load()

    manager.save(ApplicationSettings(countdown_seconds=1))

    assert manager.load().countdown_seconds == 1
    assert manager.last_error is None


def test_reset_removes_stored_settings(tmp_path) -> None:
    manager = SettingsManager(tmp_path / "settings.json")
    manager.save(ApplicationSettings(cancel_hotkey="f8"))

    assert manager.reset() == ApplicationSettings()
    assert not manager.path.exists()
    assert manager.load() == ApplicationSettings()
    # Resetting twice is harmless
    assert manager.reset() == ApplicationSettings()
