"""
Keystroke emitters: type text and press keys in whatever window has focus.

Supported backends
------------------
- pynput:     cross-platform default, presses and releases each character
- pyautogui:  ``pyautogui.write`` / ``pyautogui.press``
- pywinauto:  Windows only, ``pywinauto.keyboard.send_keys``

Notes
-----
- Backend libraries are imported lazily so the application starts (and the
  tests run) on machines without a display server.
- Emitters never know which window receives the input. Whatever has the
  OS input focus gets the keystrokes.
"""

from __future__ import annotations

import sys
import time
from typing import Any, Callable, Dict, Optional, Tuple, Union

from models import KeyboardBackend


class KeyboardBackendError(RuntimeError):
    pass


# Canonical key names accepted by press_key()
KEY_NAMES = (
    "tab", "down", "up", "left", "right", "enter", "esc", "space",
    "backspace", "delete", "home", "end", "page_up", "page_down",
)

_KEY_ALIASES: Dict[str, str] = {
    "return": "enter",
    "escape": "esc",
    "pageup": "page_up",
    "pgup": "page_up",
    "pagedown": "page_down",
    "pgdn": "page_down",
    "del": "delete",
    "arrow_down": "down",
    "arrow_up": "up",
}

_PYAUTOGUI_KEYS: Dict[str, str] = {
    "page_up": "pageup",
    "page_down": "pagedown",
}

_PYWINAUTO_KEYS: Dict[str, str] = {
    "tab": "{TAB}",
    "down": "{DOWN}",
    "up": "{UP}",
    "left": "{LEFT}",
    "right": "{RIGHT}",
    "enter": "{ENTER}",
    "esc": "{ESC}",
    "space": "{SPACE}",
    "backspace": "{BACKSPACE}",
    "delete": "{DELETE}",
    "home": "{HOME}",
    "end": "{END}",
    "page_up": "{PGUP}",
    "page_down": "{PGDN}",
}

# send_keys treats these as modifiers or grouping characters
_PYWINAUTO_SPECIAL_CHARS = "+^%~(){}[]"


def normalize_key(key: str) -> str:
    """Map a user supplied key name to one of KEY_NAMES."""
    name = key.strip().lower().replace(" ", "_").replace("-", "_")
    name = _KEY_ALIASES.get(name, name)
    if name not in KEY_NAMES:
        raise ValueError(f"Unsupported key: {key!r}")
    return name


class BaseEmitter:
    """Common interface for all keystroke backends."""

    backend = KeyboardBackend.AUTO

    def type_text(self, text: str, interval: float = 0.0) -> None:  # pragma: no cover - interface
        raise NotImplementedError

    def press_key(self, key: str) -> None:  # pragma: no cover - interface
        raise NotImplementedError


class PynputEmitter(BaseEmitter):
    backend = KeyboardBackend.PYNPUT

    def __init__(self, sleep: Callable[[float], None] = time.sleep) -> None:
        kb_cls, key_mod = _get_pynput()
        if kb_cls is None or key_mod is None:
            raise KeyboardBackendError("No keyboard backend available (install pynput)")
        self._keyboard = kb_cls()
        self._keys = key_mod
        self._sleep = sleep

    def type_text(self, text: str, interval: float = 0.0) -> None:
        for ch in text:
            self._keyboard.press(ch)
            self._keyboard.release(ch)
            if interval > 0:
                self._sleep(interval)

    def press_key(self, key: str) -> None:
        name = normalize_key(key)
        mapped = getattr(self._keys, name, None)
        if mapped is None:
            raise KeyboardBackendError(f"pynput has no key named {name!r}")
        self._keyboard.press(mapped)
        self._keyboard.release(mapped)


class PyAutoGuiEmitter(BaseEmitter):
    backend = KeyboardBackend.PYAUTOGUI

    def __init__(self) -> None:
        module = _get_pyautogui()
        if module is None:
            raise KeyboardBackendError("No keyboard backend available (install pyautogui)")
        # Move mouse to a screen corner to abort
        module.FAILSAFE = True
        # Pacing is handled by the injection loop
        module.PAUSE = 0.0
        self._gui = module

    def type_text(self, text: str, interval: float = 0.0) -> None:
        self._gui.write(text, interval=max(0.0, interval))

    def press_key(self, key: str) -> None:
        name = normalize_key(key)
        self._gui.press(_PYAUTOGUI_KEYS.get(name, name))


class PywinautoEmitter(BaseEmitter):
    backend = KeyboardBackend.PYWINAUTO

    def __init__(self) -> None:
        send_keys = _get_pywinauto_send_keys()
        if send_keys is None:
            raise KeyboardBackendError("pywinauto is only available on Windows (install pywinauto)")
        self._send_keys = send_keys

    def type_text(self, text: str, interval: float = 0.0) -> None:
        # A tiny non-zero pause avoids dropped characters in some apps
        self._send_keys(
            escape_send_keys(text),
            with_spaces=True,
            with_newlines=True,
            pause=max(0.0, float(interval)),
        )

    def press_key(self, key: str) -> None:
        self._send_keys(_PYWINAUTO_KEYS[normalize_key(key)], pause=0.0)


def escape_send_keys(text: str) -> str:
    """Wrap pywinauto modifier characters in braces so they are typed literally."""
    return "".join("{%s}" % ch if ch in _PYWINAUTO_SPECIAL_CHARS else ch for ch in text)


def create_emitter(
    backend: Union[KeyboardBackend, str] = KeyboardBackend.AUTO,
    sleep: Callable[[float], None] = time.sleep,
) -> BaseEmitter:
    """Instantiate the requested backend.

    ``auto`` prefers pywinauto on Windows and uses pynput everywhere else.
    """
    if isinstance(backend, str):
        backend = KeyboardBackend(backend.strip().lower())

    if backend == KeyboardBackend.PYNPUT:
        return PynputEmitter(sleep=sleep)
    if backend == KeyboardBackend.PYAUTOGUI:
        return PyAutoGuiEmitter()
    if backend == KeyboardBackend.PYWINAUTO:
        return PywinautoEmitter()

    if sys.platform.startswith("win") and _get_pywinauto_send_keys() is not None:
        return PywinautoEmitter()
    return PynputEmitter(sleep=sleep)


def _get_pynput() -> Tuple[Optional[Any], Optional[Any]]:
    """Import pynput lazily and return (KeyboardControllerClass, KeyModule)."""
    try:
        from pynput.keyboard import Controller as KeyboardController, Key as KeyModule  # type: ignore
        return KeyboardController, KeyModule
    except Exception:
        return None, None


def _get_pyautogui() -> Optional[Any]:
    try:
        import pyautogui  # type: ignore
        return pyautogui
    except Exception:
        return None


def _get_pywinauto_send_keys() -> Optional[Callable[..., None]]:
    if not sys.platform.startswith("win"):
        return None
    try:
        from pywinauto.keyboard import send_keys  # type: ignore
        return send_keys
    except Exception:
        return None
