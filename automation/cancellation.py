"""
Single-use cancellation signal shared between a run and whoever may stop it.
"""

from __future__ import annotations

import threading
from typing import Optional


class CancellationToken:
    """Closes at most once; every reader sees the closed state afterwards.

    One token belongs to exactly one run. Starting a new run allocates a new
    token instead of resetting this one.
    """

    def __init__(self) -> None:
        self._event = threading.Event()
        self._lock = threading.Lock()
        self._reason: Optional[str] = None

    def cancel(self, reason: str = "cancelled") -> bool:
        """Close the token.

        Returns True only for the call that actually closed it, so callers
        can run their one-time side effects without racing each other.
        """
        with self._lock:
            if self._event.is_set():
                return False
            self._reason = reason
            self._event.set()
            return True

    def is_cancelled(self) -> bool:
        return self._event.is_set()

    @property
    def reason(self) -> Optional[str]:
        """Who closed the token, e.g. "button" or "hotkey"."""
        return self._reason

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until cancelled or until timeout; returns the cancelled flag."""
        return self._event.wait(timeout)
