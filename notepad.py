"""
Plain-text notepad model: persistence, autosave decisions and timestamp refresh.

The text file starts with a ``# Saved: <timestamp>`` header line which is
stripped again when loading, as is the ``# Guardado:`` header of older files.
Clock times such as ``15:30`` in the text are rewritten to the current time
whenever the user has stopped typing for a moment, so lists like
"REPOSICION 15:30 JRIOS" always show the time of day.
"""

from __future__ import annotations

import re
from datetime import datetime, timedelta
from pathlib import Path
from typing import Callable, Optional, Union

SAVE_HEADER_PREFIX = "# Saved:"
# Files written by the older Spanish build
LEGACY_HEADER_PREFIXES = ("# Guardado:",)
TIME_PATTERN = re.compile(r"\b\d{1,2}:\d{2}\b", re.ASCII)

DEFAULT_CONTENT = """***********REPOSITION LIST*********
......9999 REPOSICION 15:04 MGAVINO
......9999 REPOSICION 15:04 JRIOS
......9999 REPOSICION 15:04 BTAIPE
......9999 REPOSICION 15:04 MQUINTANA

**************ZETTACOM**********
......0154 LGARCIA 15:04 MGAVINO
......0154 LGARCIA 15:04 JRIOS
......0083 JVILCATOMA 15:04 MGAVINO
......0017 NCRISOSTOMO 15:04 JRIOS

# Times are refreshed to the current time every second
# Edit the text freely
# The refresh waits until you stop typing for a couple of seconds"""


class NotepadDocument:
    """Tracks the notepad contents, the last user edit and the last save."""

    def __init__(
        self,
        path: Union[str, Path],
        idle_seconds: float = 2.0,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._path = Path(path)
        self._idle = timedelta(seconds=idle_seconds)
        self._clock = clock
        self._content = ""
        self._last_edit: Optional[datetime] = None
        self._dirty = False

    @property
    def path(self) -> Path:
        return self._path

    @property
    def content(self) -> str:
        return self._content

    def now(self) -> datetime:
        return self._clock()

    @property
    def is_dirty(self) -> bool:
        """True when there are edits that have not been written yet."""
        return self._dirty

    def load(self) -> str:
        """Read the file, or return the default template if it does not exist yet."""
        if not self._path.exists():
            self._content = DEFAULT_CONTENT
            self._dirty = False
            return self._content

        text = self._path.read_text(encoding="utf-8")
        first_line, sep, rest = text.partition("\n")
        if first_line.startswith((SAVE_HEADER_PREFIX,) + LEGACY_HEADER_PREFIXES):
            text = rest if sep else ""

        self._content = text
        self._dirty = False
        return text

    def save(self, text: Optional[str] = None) -> bool:
        """Write the text with a timestamp header. Empty text is never written."""
        if text is None:
            text = self._content
        if not text:
            return False

        self._path.parent.mkdir(parents=True, exist_ok=True)
        stamp = self._clock().strftime("%Y-%m-%d %H:%M:%S")
        self._path.write_text(f"{SAVE_HEADER_PREFIX} {stamp}\n{text}", encoding="utf-8")

        self._content = text
        self._dirty = False
        return True

    def mark_edited(self, text: str) -> None:
        """Record a change typed by the user."""
        self._content = text
        self._last_edit = self._clock()
        self._dirty = True

    def user_is_idle(self) -> bool:
        if self._last_edit is None:
            return True
        return self._clock() - self._last_edit >= self._idle

    def needs_autosave(self) -> bool:
        return self._dirty and bool(self._content) and self.user_is_idle()

    def refresh_timestamps(self, text: str) -> Optional[str]:
        """
        Replace every clock time in the text with the current HH:MM.

        Returns:
            The updated text, or None if the user is typing or nothing changed
        """
        if not self.user_is_idle():
            return None

        current = self._clock().strftime("%H:%M")
        updated = TIME_PATTERN.sub(current, text)
        if updated == text:
            return None

        self._content = updated
        self._dirty = True
        return updated
