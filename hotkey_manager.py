"""Global cancel hotkey built on top of pynput."""

from __future__ import annotations

from typing import Callable, Dict, Optional

try:
    from pynput import keyboard  # type: ignore
except Exception as _e:  # pragma: no cover - environment dependent
    keyboard = None  # type: ignore


class HotkeyManager:
    """Listens for the cancel hotkey across Windows, macOS, and Linux.

    The listener runs in pynput's own thread for as long as it is enabled,
    so the registered callback must be thread safe.
    """

    _MODIFIER_ALIASES: Dict[str, str] = {
        "ctrl": "ctrl",
        "control": "ctrl",
        "alt": "alt",
        "shift": "shift",
        "win": "cmd",
        "cmd": "cmd",
        "command": "cmd",
        "option": "alt",
        "super": "cmd",
    }

    _NAMED_KEYS: Dict[str, str] = {
        "esc": "esc",
        "escape": "esc",
        "pause": "pause",
        "break": "pause",
        "tab": "tab",
        "enter": "enter",
        "return": "enter",
        "space": "space",
        "end": "end",
        "home": "home",
        "insert": "insert",
        "delete": "delete",
        "scroll_lock": "scroll_lock",
    }

    def __init__(self, cancel_hotkey: str = "esc") -> None:
        self._cancel_hotkey = cancel_hotkey
        self._cancel_callback: Optional[Callable[[], None]] = None
        self._listener: Optional[object] = None
        self._is_registered = False
        self.last_error: Optional[str] = None

    def register_cancel_callback(self, callback: Callable[[], None]) -> None:
        self._cancel_callback = callback

    def is_enabled(self) -> bool:
        return self._is_registered

    def enable_hotkeys(self) -> bool:
        if self._is_registered:
            return True

        if not self._cancel_callback:
            self.last_error = "No cancel callback registered"
            return False

        try:
            hotkey = self._to_pynput_hotkey(self._cancel_hotkey)
        except ValueError as exc:
            self.last_error = f"Invalid hotkey definition: {exc}"
            return False

        if keyboard is None:
            self.last_error = "pynput/keyboard backend not available; global hotkeys disabled"
            self._listener = None
            self._is_registered = False
            return False
        try:
            self._listener = keyboard.GlobalHotKeys({hotkey: self._cancel_callback})
            self._listener.start()
            self._is_registered = True
            self.last_error = None
            return True
        except Exception as exc:  # pragma: no cover - system specific
            self.last_error = f"Failed to register hotkeys: {exc}"
            self._listener = None
            self._is_registered = False
            return False

    def disable_hotkeys(self) -> None:
        if not self._is_registered:
            return

        if self._listener is not None:
            try:
                self._listener.stop()  # type: ignore[attr-defined]
            except Exception as exc:  # pragma: no cover - system specific
                self.last_error = f"Failed to stop hotkey listener: {exc}"
            self._listener = None

        self._is_registered = False

    def get_cancel_hotkey(self) -> str:
        return self._cancel_hotkey

    def update_hotkey(self, cancel_hotkey: str) -> bool:
        was_registered = self._is_registered
        if was_registered:
            self.disable_hotkeys()

        self._cancel_hotkey = cancel_hotkey

        if was_registered:
            return self.enable_hotkeys()
        return True

    def _to_pynput_hotkey(self, hotkey: str) -> str:
        if not hotkey:
            raise ValueError("Empty hotkey string")

        tokens = [token.strip() for token in hotkey.replace("+", " ").split() if token.strip()]
        if not tokens:
            raise ValueError("Hotkey contains no tokens")

        parsed: list[str] = []
        for token in tokens:
            lower_token = token.lower()

            if lower_token in self._MODIFIER_ALIASES:
                parsed.append(f"<{self._MODIFIER_ALIASES[lower_token]}>")
                continue

            if lower_token in self._NAMED_KEYS:
                parsed.append(f"<{self._NAMED_KEYS[lower_token]}>")
                continue

            if lower_token.startswith("f") and lower_token[1:].isdigit():
                parsed.append(f"<{lower_token}>")
                continue

            if len(lower_token) == 1:
                parsed.append(lower_token)
                continue

            raise ValueError(f"Unknown key {token!r}")

        return "+".join(parsed)
