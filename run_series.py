"""
Small CLI to type a series file into the focused window without the GUI.

Usage (PowerShell):
    python run_series.py .\\series.txt 15052025 --delay-ms 90 --countdown 5
"""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import List, Optional

from automation import InjectionController, InjectionRun, KeyboardBackendError, create_emitter
from hotkey_manager import HotkeyManager
from models import KeyboardBackend, RunConfiguration, RunState, ValidationError

EXIT_OK = 0
EXIT_STOPPED = 1
EXIT_USAGE = 2

POLL_SECONDS = 0.2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Type a list of series into the focused window.")
    parser.add_argument("series_file", type=Path, help="Text file with series separated by whitespace")
    parser.add_argument("companion", help="Value typed after each series, e.g. a date like 15052025")
    parser.add_argument("--delay-ms", type=int, default=90, help="Pause after each keystroke group")
    parser.add_argument("--countdown", type=int, default=5, help="Seconds to count down before typing")
    parser.add_argument("--warmup", type=float, default=3.0, help="Seconds to wait before the countdown")
    parser.add_argument(
        "--backend",
        choices=[backend.value for backend in KeyboardBackend],
        default=KeyboardBackend.AUTO.value,
    )
    parser.add_argument("--cancel-key", default="esc", help="Global hotkey that cancels the run")
    return parser


def _wait_interruptibly(run: InjectionRun) -> RunState:
    # A bare Event.wait() is not interrupted by Ctrl+C on Windows
    state = run.wait(POLL_SECONDS)
    while not state.is_terminal():
        state = run.wait(POLL_SECONDS)
    return state


def main(argv: Optional[List[str]] = None, controller: Optional[InjectionController] = None) -> int:
    args = build_parser().parse_args(argv)

    if not args.series_file.exists():
        print(f"File not found: {args.series_file}")
        return EXIT_USAGE

    try:
        raw = args.series_file.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        print(f"Cannot read {args.series_file}: {exc}")
        return EXIT_USAGE

    try:
        config = RunConfiguration.from_text(
            raw,
            args.companion,
            per_step_delay=max(args.delay_ms, 0) / 1000.0,
            countdown_seconds=args.countdown,
            warmup_seconds=args.warmup,
        )
    except ValidationError as exc:
        print(f"Invalid input: {exc}")
        return EXIT_USAGE

    if controller is None:
        try:
            controller = InjectionController(create_emitter(args.backend))
        except KeyboardBackendError as exc:
            print(str(exc))
            return EXIT_USAGE

    controller.register_status_callback(lambda msg: print(f"Status: {msg}"))
    controller.register_progress_callback(lambda done, total: print(f"Copied: {done} / {total}"))

    hotkeys = HotkeyManager(cancel_hotkey=args.cancel_key)
    hotkeys.register_cancel_callback(lambda: controller.cancel("hotkey"))
    if not hotkeys.enable_hotkeys():
        print(f"Cancel hotkey unavailable ({hotkeys.last_error}); use Ctrl+C to stop.")

    run = controller.start(config)
    try:
        state = _wait_interruptibly(run)
    except KeyboardInterrupt:
        controller.cancel("interrupt")
        state = _wait_interruptibly(run)
    finally:
        hotkeys.disable_hotkeys()

    if state == RunState.FINISHED:
        return EXIT_OK
    if state == RunState.CANCELLED:
        print(f"Cancelled ({run.token.reason})")
    elif run.error is not None:
        print(f"Run failed: {run.error}")
    return EXIT_STOPPED


if __name__ == "__main__":
    raise SystemExit(main())
