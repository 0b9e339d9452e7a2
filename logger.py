"""
Status Logger - keeps the run history shown in the log pane.

SRP: This class has one responsibility - keeping the log history.
Entries arrive from the Tk thread, the injection worker and the hotkey
listener, so every mutation happens under a lock.
"""

import threading
from datetime import datetime
from typing import Callable, List, Optional
from dataclasses import dataclass


@dataclass
class LogEntry:
    """A single log line."""
    timestamp: datetime
    message: str
    level: str = "INFO"

    def __str__(self) -> str:
        time_str = self.timestamp.strftime("%H:%M:%S")
        return f"[{time_str}] {self.level}: {self.message}"


LogListener = Callable[[LogEntry], None]


class StatusLogger:
    """
    Maintains a bounded log history.

    Listeners are called synchronously on the thread that logged the entry;
    GUI listeners must hop to the Tk thread themselves.
    """

    def __init__(self, max_entries: int = 500, clock: Callable[[], datetime] = datetime.now):
        """
        Initialize the logger.

        Args:
            max_entries: Maximum number of log entries to keep in memory
            clock: Source of entry timestamps
        """
        self._log_entries: List[LogEntry] = []
        self._max_entries = max_entries
        self._clock = clock
        self._lock = threading.RLock()
        self._listeners: List[LogListener] = []

    def subscribe(self, listener: LogListener) -> None:
        """Receive every new entry."""
        with self._lock:
            self._listeners.append(listener)

    def log_info(self, message: str) -> None:
        self._add_entry(message, "INFO")

    def log_warning(self, message: str) -> None:
        """Log a warning message."""
        self._add_entry(message, "WARNING")

    def log_error(self, message: str) -> None:
        """Log an error message."""
        self._add_entry(message, "ERROR")

    def get_all_logs(self) -> List[LogEntry]:
        """Returns all log entries."""
        with self._lock:
            return self._log_entries.copy()

    def clear_logs(self) -> None:
        """Clear all log entries."""
        with self._lock:
            self._log_entries.clear()
        self.log_info("Log history cleared")

    def _add_entry(self, message: str, level: str) -> None:
        entry = LogEntry(
            timestamp=self._clock(),
            message=message,
            level=level
        )

        with self._lock:
            self._log_entries.append(entry)

            # Trim old entries if we exceed max
            if len(self._log_entries) > self._max_entries:
                self._log_entries = self._log_entries[-self._max_entries:]

            listeners = list(self._listeners)

        for listener in listeners:
            try:
                listener(entry)
            except Exception:
                # A broken view must not stop the worker that logged
                pass

    def export_logs_to_file(self, filepath: str) -> Optional[str]:
        """
        Export all logs to a text file.

        Args:
            filepath: Path where the log file should be saved

        Returns:
            None on success, otherwise the reason the export failed
        """
        entries = self.get_all_logs()
        try:
            with open(filepath, 'w', encoding='utf-8') as f:
                f.write("Workdesk Toolkit - Log Export\n")
                f.write(f"Generated: {self._clock()}\n")
                f.write("=" * 50 + "\n\n")

                for entry in entries:
                    time_str = entry.timestamp.strftime("%Y-%m-%d %H:%M:%S")
                    f.write(f"[{time_str}] {entry.level}: {entry.message}\n")

            return None
        except OSError as e:
            return str(e)
