"""
Domain models for the Workdesk Toolkit application.
Each class follows the Single Responsibility Principle (SRP).
"""

from enum import Enum
from dataclasses import dataclass, field
from typing import Tuple, List, Dict, Any


class ValidationError(ValueError):
    """Raised when a run configuration cannot be started."""


class BusyError(RuntimeError):
    """Raised when a run is requested while another one is still active."""


class InjectionFailed(RuntimeError):
    """The keystroke backend failed while a run was injecting."""


class RunState(Enum):
    """Lifecycle of a single autocopier run."""
    IDLE = "idle"
    COUNTING_DOWN = "counting_down"
    INJECTING = "injecting"
    FINISHED = "finished"
    CANCELLED = "cancelled"
    FAILED = "failed"

    def is_terminal(self) -> bool:
        return self in (RunState.FINISHED, RunState.CANCELLED, RunState.FAILED)


class KeyboardBackend(Enum):
    """Libraries that can emit keystrokes."""
    AUTO = "auto"
    PYNPUT = "pynput"
    PYAUTOGUI = "pyautogui"
    PYWINAUTO = "pywinauto"


def parse_series(raw_text: str) -> List[str]:
    """
    Split a block of pasted text into series items.

    Any run of whitespace (spaces, tabs, newlines) separates items.
    Order is kept and duplicates are allowed.
    """
    return raw_text.split()


@dataclass(frozen=True)
class RunConfiguration:
    """
    Everything a single autocopier run needs.

    Immutable once built so a running worker never sees it change.
    All durations are in seconds.
    """
    series: Tuple[str, ...]
    companion_value: str
    per_step_delay: float = 0.09
    countdown_seconds: int = 5
    warmup_seconds: float = 3.0
    keystroke_interval: float = 0.002
    settle_delay: float = 0.06

    def __post_init__(self):
        """Validate configuration parameters."""
        # Accept lists from callers but store a tuple
        object.__setattr__(self, "series", tuple(self.series))

        if not self.series:
            raise ValidationError("empty series list")

        if not self.companion_value or not self.companion_value.strip():
            raise ValidationError("missing companion value")

        if self.countdown_seconds < 0:
            raise ValidationError("countdown cannot be negative")

        for name in ("per_step_delay", "warmup_seconds", "keystroke_interval", "settle_delay"):
            if getattr(self, name) < 0:
                raise ValidationError(f"{name.replace('_', ' ')} cannot be negative")

    @property
    def total(self) -> int:
        """Number of series items in this run."""
        return len(self.series)

    @staticmethod
    def from_text(raw_series: str, companion_value: str, **kwargs: Any) -> "RunConfiguration":
        """Build a configuration from the raw series text box contents."""
        return RunConfiguration(
            series=tuple(parse_series(raw_series)),
            companion_value=companion_value.strip(),
            **kwargs,
        )


@dataclass
class InjectionProgress:
    """Completed items out of the total for one run."""
    completed: int = 0
    total: int = 0

    def as_tuple(self) -> Tuple[int, int]:
        return (self.completed, self.total)

    def __str__(self) -> str:
        return f"{self.completed} / {self.total}"


@dataclass
class ApplicationSettings:
    """Persisted application preferences."""

    per_step_delay_ms: int = 90
    countdown_seconds: int = 5
    warmup_seconds: float = 3.0
    keystroke_interval_ms: int = 2
    keyboard_backend: KeyboardBackend = KeyboardBackend.AUTO
    cancel_hotkey: str = "esc"
    last_companion_value: str = ""
    notepad_path: str = "bloc_notas.txt"
    notepad_autosave_seconds: int = 5
    notepad_idle_seconds: float = 2.0
    extra: Dict[str, Any] = field(default_factory=dict)

    def build_run_configuration(self, raw_series: str, companion_value: str) -> RunConfiguration:
        """Combine the stored timings with the user's input for one run."""
        return RunConfiguration.from_text(
            raw_series,
            companion_value,
            per_step_delay=self.per_step_delay_ms / 1000.0,
            countdown_seconds=self.countdown_seconds,
            warmup_seconds=self.warmup_seconds,
            keystroke_interval=self.keystroke_interval_ms / 1000.0,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Serialize settings to primitive types for JSON storage."""
        data = dict(self.extra)
        data.update({
            "per_step_delay_ms": self.per_step_delay_ms,
            "countdown_seconds": self.countdown_seconds,
            "warmup_seconds": self.warmup_seconds,
            "keystroke_interval_ms": self.keystroke_interval_ms,
            "keyboard_backend": self.keyboard_backend.value,
            "cancel_hotkey": self.cancel_hotkey,
            "last_companion_value": self.last_companion_value,
            "notepad_path": self.notepad_path,
            "notepad_autosave_seconds": self.notepad_autosave_seconds,
            "notepad_idle_seconds": self.notepad_idle_seconds,
        })
        return data

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "ApplicationSettings":
        """Create settings instance from JSON dictionary."""
        defaults = ApplicationSettings()
        known = set(defaults.to_dict())
        extra = {key: value for key, value in data.items() if key not in known}

        backend_raw = str(data.get("keyboard_backend", KeyboardBackend.AUTO.value)).strip().lower()
        try:
            backend = KeyboardBackend(backend_raw)
        except ValueError:
            backend = KeyboardBackend.AUTO

        return ApplicationSettings(
            per_step_delay_ms=max(0, int(data.get("per_step_delay_ms", 90) or 0)),
            countdown_seconds=max(0, int(data.get("countdown_seconds", 5) or 0)),
            warmup_seconds=max(0.0, float(data.get("warmup_seconds", 3.0) or 0.0)),
            keystroke_interval_ms=max(0, int(data.get("keystroke_interval_ms", 2) or 0)),
            keyboard_backend=backend,
            cancel_hotkey=str(data.get("cancel_hotkey", "esc") or "esc"),
            last_companion_value=str(data.get("last_companion_value", "") or ""),
            notepad_path=str(data.get("notepad_path", "bloc_notas.txt") or "bloc_notas.txt"),
            notepad_autosave_seconds=max(1, int(data.get("notepad_autosave_seconds", 5) or 5)),
            notepad_idle_seconds=max(0.0, float(data.get("notepad_idle_seconds", 2.0) or 0.0)),
            extra=extra,
        )
