"""Tests for logging helpers."""

from __future__ import annotations

import logging

from core.logging import clip, redact_url, set_level, logger


def test_redact_url_hides_api_key() -> None:
    url = "https://generativelanguage.googleapis.com/v1beta/models/m:generateContent?key=secret"

    redacted = redact_url(url)

    assert "secret" not in redacted
    assert redacted.startswith("https://generativelanguage.googleapis.com/v1beta/models/")


def test_redact_url_without_query_is_unchanged() -> None:
    assert redact_url("https://example.com/path") == "https://example.com/path"


def test_clip_truncates_long_text() -> None:
    assert clip("short") == "short"
    assert clip("x" * 10, limit=5) == "xxxx…"


def test_set_level_accepts_names() -> None:
    previous = logger.level
    try:
        assert set_level("debug") == logging.DEBUG
        assert set_level("nonsense") == logging.INFO
    finally:
        logger.setLevel(previous)


def test_file_logging_writes_through_queue(tmp_path) -> None:
    from core import logging as core_logging

    log_path = tmp_path / "var" / "log" / "sightassist.log"
    try:
        core_logging.enable_file_logging(log_path)
        logger.warning("[Test] file sink ready")
    finally:
        core_logging._shutdown_file_logging()
        core_logging._remove_queue_handlers()
        core_logging._file_log_path = None

    assert "[Test] file sink ready" in log_path.read_text(encoding="utf-8")
