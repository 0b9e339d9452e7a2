"""
Automation package: types series lists into other programs.

Key parts
---------
- keystrokes:   Keyboard backends (pynput, pyautogui, pywinauto)
- cancellation: Single-use cancellation token shared with the hotkey listener
- engine:       Controller that runs the countdown + injection loop in a thread
"""

from .cancellation import CancellationToken
from .engine import InjectionController, InjectionRun
from .keystrokes import BaseEmitter, KeyboardBackendError, create_emitter

__all__ = [
    "BaseEmitter",
    "CancellationToken",
    "InjectionController",
    "InjectionRun",
    "KeyboardBackendError",
    "create_emitter",
]
