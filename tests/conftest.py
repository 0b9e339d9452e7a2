"""Shared fakes for the injection engine tests."""

import threading
from typing import Callable, List, Optional, Tuple

import pytest

from automation.keystrokes import BaseEmitter


class RecordingEmitter(BaseEmitter):
    """Records every emission instead of touching the real keyboard."""

    def __init__(self, events: Optional[List[Tuple]] = None) -> None:
        self.events: List[Tuple] = events if events is not None else []
        self.on_emit: Optional[Callable[[Tuple], None]] = None
        self._lock = threading.Lock()

    def type_text(self, text: str, interval: float = 0.0) -> None:
        self._record(("type", text))

    def press_key(self, key: str) -> None:
        self._record(("key", key))

    def _record(self, event: Tuple) -> None:
        with self._lock:
            self.events.append(event)
        if self.on_emit:
            self.on_emit(event)


class RecordingSleep:
    """Sleep hook that returns immediately and remembers the requested pauses."""

    def __init__(self) -> None:
        self.calls: List[float] = []
        self.on_sleep: Optional[Callable[[int, float], None]] = None

    def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)
        if self.on_sleep:
            self.on_sleep(len(self.calls), seconds)


@pytest.fixture
def emitter() -> RecordingEmitter:
    return RecordingEmitter()


@pytest.fixture
def sleeper() -> RecordingSleep:
    return RecordingSleep()
