"""
Settings persistence for Workdesk Toolkit.

Settings live in one JSON file in the user's profile (``%APPDATA%`` on
Windows, the home directory elsewhere) so the program folder can stay
read-only. A damaged file never blocks startup: it is set aside next to the
original and defaults are used instead.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Dict, Optional, Union

from models import ApplicationSettings

APP_FOLDER = "WorkdeskToolkit"
SETTINGS_FILENAME = "settings.json"


def default_settings_path() -> Path:
    """Per-user settings file location."""
    base = os.getenv("APPDATA") or os.path.expanduser("~")
    return Path(base) / APP_FOLDER / SETTINGS_FILENAME


class SettingsManager:
    """Loads and stores ApplicationSettings; ``last_error`` explains any fallback."""

    def __init__(self, path: Union[str, Path, None] = None) -> None:
        self.path = Path(path) if path is not None else default_settings_path()
        self.last_error: Optional[str] = None

    @property
    def backup_path(self) -> Path:
        return self.path.with_name(self.path.name + ".bak")

    def load(self) -> ApplicationSettings:
        self.last_error = None
        try:
            text = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return ApplicationSettings()
        except UnicodeDecodeError:
            return self._set_aside("not UTF-8 text")
        except OSError as exc:
            # Leave a file we cannot read where it is; it may only be locked
            self.last_error = f"Cannot read {self.path} ({exc}); using defaults"
            return ApplicationSettings()

        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            return self._set_aside(f"invalid JSON at line {exc.lineno}")

        if not isinstance(data, dict):
            return self._set_aside(f"expected an object, found {type(data).__name__}")

        try:
            return ApplicationSettings.from_dict(data)
        except (TypeError, ValueError) as exc:
            return self._set_aside(f"bad value: {exc}")

    def save(self, settings: ApplicationSettings) -> None:
        """Write the settings through a temporary file so a crash never truncates them."""
        self._write(settings.to_dict())

    def reset(self) -> ApplicationSettings:
        """Forget the stored settings and return the defaults."""
        self.last_error = None
        self.path.unlink(missing_ok=True)
        return ApplicationSettings()

    def _write(self, data: Dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        staging = self.path.with_name(self.path.name + ".tmp")
        with open(staging, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=4, ensure_ascii=False)
        os.replace(staging, self.path)

    def _set_aside(self, problem: str) -> ApplicationSettings:
        self.last_error = f"{self.path.name} is damaged ({problem}); using defaults"
        try:
            os.replace(self.path, self.backup_path)
        except OSError as exc:
            self.last_error += f", and it could not be moved aside: {exc}"
        else:
            self.last_error += f", the old file was kept as {self.backup_path.name}"
        return ApplicationSettings()
