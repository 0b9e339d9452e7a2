"""
Injection engine: types a series list into the focused window from a worker thread.

A run has two phases. The countdown gives the user time to focus the target
field, then the injection phase types every item followed by ``tab``, the
companion value and ``down``. Both phases stop as soon as the run's
cancellation token is closed.
"""

from __future__ import annotations

import threading
import time
from typing import Callable, Optional

from models import (
    BusyError,
    InjectionFailed,
    InjectionProgress,
    RunConfiguration,
    RunState,
)

from .cancellation import CancellationToken
from .keystrokes import BaseEmitter


StatusCallback = Callable[[str], None]
ProgressCallback = Callable[[int, int], None]

STATUS_STARTING = "starting in {}..."
STATUS_INJECTING = "injecting"
STATUS_CANCELLED = "cancelled"
STATUS_FINISHED = "finished successfully"
STATUS_FAILED = "failed: {}"

NEXT_FIELD_KEY = "tab"
CONFIRM_KEY = "down"
COUNTDOWN_TICK_SECONDS = 1.0


class _RunCancelled(Exception):
    """Unwinds the worker when the token is found closed."""


class InjectionRun:
    """Handle for one run: state, progress, cancellation and join."""

    def __init__(self, config: RunConfiguration) -> None:
        self.config = config
        self.token = CancellationToken()
        self.progress = InjectionProgress(completed=0, total=config.total)
        self.error: Optional[InjectionFailed] = None
        self._state = RunState.IDLE
        self._state_lock = threading.Lock()
        self._thread: Optional[threading.Thread] = None
        self._done = threading.Event()

    @property
    def state(self) -> RunState:
        with self._state_lock:
            return self._state

    def is_active(self) -> bool:
        """True while the worker thread has not reached a terminal state."""
        return self._thread is not None and not self._done.is_set()

    def cancel(self, reason: str = "cancelled") -> bool:
        """Close this run's token; False if it was already closed."""
        return self.token.cancel(reason)

    def wait(self, timeout: Optional[float] = None) -> RunState:
        """Join the run and return its state (non-terminal if timeout expired)."""
        self._done.wait(timeout)
        return self.state

    def _set_state(self, state: RunState) -> None:
        with self._state_lock:
            if self._state.is_terminal():
                return
            self._state = state

    def _launch(self, target: Callable[["InjectionRun"], None]) -> None:
        self._thread = threading.Thread(
            target=target, args=(self,), name="injection-run", daemon=True
        )
        self._thread.start()

    def _finish(self) -> None:
        self._done.set()


class InjectionController:
    """
    Starts, tracks and cancels autocopier runs.

    Only one run may be active at a time. The controller does not know about
    the UI or the hotkey listener; both talk to it through start/cancel and
    the registered callbacks.
    """

    def __init__(self, emitter: BaseEmitter, sleep: Callable[[float], None] = time.sleep) -> None:
        self._emitter = emitter
        self._sleep = sleep
        self._lock = threading.Lock()
        self._current: Optional[InjectionRun] = None
        self._status_callback: Optional[StatusCallback] = None
        self._progress_callback: Optional[ProgressCallback] = None

    def register_status_callback(self, callback: StatusCallback) -> None:
        self._status_callback = callback

    def register_progress_callback(self, callback: ProgressCallback) -> None:
        self._progress_callback = callback

    @property
    def current_run(self) -> Optional[InjectionRun]:
        with self._lock:
            return self._current

    def is_running(self) -> bool:
        run = self.current_run
        return bool(run and run.is_active())

    def get_state(self) -> RunState:
        run = self.current_run
        return run.state if run else RunState.IDLE

    def start(self, config: RunConfiguration) -> InjectionRun:
        """
        Launch a run in a background thread and return its handle.

        Raises:
            BusyError: if the previous run has not finished yet
        """
        with self._lock:
            if self._current is not None and self._current.is_active():
                raise BusyError("a run is already in progress")
            run = InjectionRun(config)
            self._current = run
            run._launch(self._worker)
        return run

    def cancel(self, reason: str = "cancelled") -> bool:
        """
        Cancel the active run.

        Returns True only if this call closed the token. Calling it with no
        active run, or a second time, is a no-op.
        """
        run = self.current_run
        if run is None or not run.is_active():
            return False
        return run.cancel(reason)

    def stop(self, timeout: float = 2.0) -> RunState:
        """Cancel the active run and wait briefly for the worker to exit."""
        run = self.current_run
        if run is None:
            return RunState.IDLE
        run.cancel("shutdown")
        return run.wait(timeout)

    def _worker(self, run: InjectionRun) -> None:
        try:
            self._execute(run)
        except _RunCancelled:
            run._set_state(RunState.CANCELLED)
            self._notify_status(STATUS_CANCELLED)
        except Exception as exc:
            failure = InjectionFailed(str(exc) or exc.__class__.__name__)
            failure.__cause__ = exc
            run.error = failure
            run._set_state(RunState.FAILED)
            self._notify_status(STATUS_FAILED.format(failure))
        finally:
            run._finish()

    def _execute(self, run: InjectionRun) -> None:
        config = run.config
        token = run.token

        run._set_state(RunState.COUNTING_DOWN)
        self._sleep(config.warmup_seconds)

        for remaining in range(config.countdown_seconds, 0, -1):
            self._notify_status(STATUS_STARTING.format(remaining))
            self._check(token)
            self._sleep(COUNTDOWN_TICK_SECONDS)
        self._check(token)

        run._set_state(RunState.INJECTING)
        self._notify_status(STATUS_INJECTING)

        for item in config.series:
            self._inject_item(item, config, token)
            run.progress.completed += 1
            self._notify_progress(run.progress.completed, run.progress.total)

        run._set_state(RunState.FINISHED)
        self._notify_status(STATUS_FINISHED)

    def _inject_item(self, item: str, config: RunConfiguration, token: CancellationToken) -> None:
        # The token is checked before every emission so nothing is typed
        # once cancellation has been observed, and once more after the
        # settle pause so a cancelled item is never counted.
        self._check(token)
        self._emitter.type_text(item, config.keystroke_interval)
        self._sleep(config.per_step_delay)

        self._check(token)
        self._emitter.press_key(NEXT_FIELD_KEY)
        self._sleep(config.per_step_delay)

        self._check(token)
        self._emitter.type_text(config.companion_value, config.keystroke_interval)
        self._sleep(config.per_step_delay)

        self._check(token)
        self._emitter.press_key(CONFIRM_KEY)
        self._sleep(config.settle_delay)
        self._check(token)

    @staticmethod
    def _check(token: CancellationToken) -> None:
        if token.is_cancelled():
            raise _RunCancelled()

    def _notify_status(self, message: str) -> None:
        if self._status_callback:
            try:
                self._status_callback(message)
            except Exception:
                pass

    def _notify_progress(self, completed: int, total: int) -> None:
        if self._progress_callback:
            try:
                self._progress_callback(completed, total)
            except Exception:
                pass
