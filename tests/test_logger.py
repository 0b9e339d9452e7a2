"""Tests for the status logger."""

from datetime import datetime

from logger import LogEntry, StatusLogger

FIXED = datetime(2025, 5, 15, 14, 3, 9)


def make_logger(max_entries: int = 100) -> StatusLogger:
    return StatusLogger(max_entries=max_entries, clock=lambda: FIXED)


def test_entry_formatting() -> None:
    entry = LogEntry(timestamp=FIXED, message="injecting", level="INFO")
    assert str(entry) == "[14:03:09] INFO: injecting"


def test_levels() -> None:
    logger = make_logger()
    logger.log_warning("hotkey unavailable")
    logger.log_error("failed: display closed")
    logger.log_info("finished successfully")

    assert [entry.level for entry in logger.get_all_logs()] == ["WARNING", "ERROR", "INFO"]


def test_history_is_bounded() -> None:
    logger = make_logger(max_entries=3)
    for n in range(5):
        logger.log_info(f"message {n}")

    assert [entry.message for entry in logger.get_all_logs()] == ["message 2", "message 3", "message 4"]


def test_listeners_receive_entries_and_failures_are_contained() -> None:
    logger = make_logger()
    received = []

    def broken(_entry):
        raise RuntimeError("widget destroyed")

    logger.subscribe(broken)
    logger.subscribe(received.append)
    logger.log_info("cancelled")
    logger.log_warning("hotkey unavailable")

    assert [(entry.level, entry.message) for entry in received] == [
        ("INFO", "cancelled"),
        ("WARNING", "hotkey unavailable"),
    ]


def test_clear_logs_leaves_marker() -> None:
    logger = make_logger()
    logger.log_info("one")
    logger.clear_logs()

    assert [entry.message for entry in logger.get_all_logs()] == ["Log history cleared"]


def test_export(tmp_path) -> None:
    logger = make_logger()
    logger.log_info("run started")
    target = tmp_path / "log.txt"

    assert logger.export_logs_to_file(str(target)) is None

    content = target.read_text(encoding="utf-8")
    assert content.startswith("Workdesk Toolkit - Log Export\n")
    assert "[2025-05-15 14:03:09] INFO: run started" in content


def test_export_failure_returns_reason(tmp_path) -> None:
    logger = make_logger()
    assert logger.export_logs_to_file(str(tmp_path / "missing" / "log.txt")) is not None
