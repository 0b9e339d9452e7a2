"""Tests for the global cancel hotkey."""

from unittest.mock import MagicMock, patch

import pytest

from hotkey_manager import HotkeyManager


@pytest.mark.parametrize(
    "hotkey, expected",
    [
        ("esc", "<esc>"),
        ("Escape", "<esc>"),
        ("F7", "<f7>"),
        ("ctrl+shift+x", "<ctrl>+<shift>+x"),
        ("Ctrl + Pause", "<ctrl>+<pause>"),
    ],
)
def test_hotkey_translation(hotkey, expected) -> None:
    assert HotkeyManager()._to_pynput_hotkey(hotkey) == expected


@pytest.mark.parametrize("hotkey", ["", "   ", "ctrl+banana"])
def test_invalid_hotkeys_are_rejected(hotkey) -> None:
    with pytest.raises(ValueError):
        HotkeyManager()._to_pynput_hotkey(hotkey)


@patch("hotkey_manager.keyboard")
def test_enable_registers_cancel_callback(mock_keyboard: MagicMock) -> None:
    callback = MagicMock()
    manager = HotkeyManager(cancel_hotkey="esc")
    manager.register_cancel_callback(callback)

    assert manager.enable_hotkeys() is True
    assert manager.is_enabled()

    mock_keyboard.GlobalHotKeys.assert_called_once_with({"<esc>": callback})
    mock_keyboard.GlobalHotKeys.return_value.start.assert_called_once()


@patch("hotkey_manager.keyboard")
def test_enable_without_callback_fails(mock_keyboard: MagicMock) -> None:
    manager = HotkeyManager()

    assert manager.enable_hotkeys() is False
    mock_keyboard.GlobalHotKeys.assert_not_called()
    assert manager.last_error


@patch("hotkey_manager.keyboard", None)
def test_enable_without_pynput_reports_error() -> None:
    manager = HotkeyManager()
    manager.register_cancel_callback(lambda: None)

    assert manager.enable_hotkeys() is False
    assert "pynput" in manager.last_error


@patch("hotkey_manager.keyboard")
def test_update_hotkey_reregisters_listener(mock_keyboard: MagicMock) -> None:
    manager = HotkeyManager(cancel_hotkey="esc")
    manager.register_cancel_callback(lambda: None)
    manager.enable_hotkeys()
    first_listener = mock_keyboard.GlobalHotKeys.return_value

    assert manager.update_hotkey("F9") is True

    first_listener.stop.assert_called_once()
    assert manager.get_cancel_hotkey() == "F9"
    assert list(mock_keyboard.GlobalHotKeys.call_args.args[0]) == ["<f9>"]


@patch("hotkey_manager.keyboard")
def test_disable_stops_listener(mock_keyboard: MagicMock) -> None:
    manager = HotkeyManager()
    manager.register_cancel_callback(lambda: None)
    manager.enable_hotkeys()

    manager.disable_hotkeys()
    manager.disable_hotkeys()

    mock_keyboard.GlobalHotKeys.return_value.stop.assert_called_once()
    assert not manager.is_enabled()
