"""Unit tests for logging configuration."""

from __future__ import annotations

import json
import logging
import logging.handlers
from io import StringIO
from pathlib import Path
from typing import Any

import pytest
import structlog

from contentreview.config import LoggingConfig
from contentreview.logging import (
    add_correlation_id,
    bind_review_context,
    get_correlation_id,
    get_logger,
    set_correlation_id,
    setup_logging,
)


@pytest.fixture(autouse=True)
def reset_logging() -> None:
    """Reset stdlib handlers, structlog and context before each test."""
    logging.getLogger().handlers.clear()
    structlog.reset_defaults()
    structlog.contextvars.clear_contextvars()
    set_correlation_id(None)


@pytest.fixture
def stream() -> StringIO:
    return StringIO()


def _last_entry(stream: StringIO) -> dict[str, Any]:
    lines = [line for line in stream.getvalue().splitlines() if line.strip()]
    return json.loads(lines[-1])


def test_json_output_format(stream: StringIO) -> None:
    setup_logging(LoggingConfig(level="INFO", format="json"), stream=stream)

    get_logger("contentreview.test").info("review_logged", page_id="p-1", has_note=True)

    entry = _last_entry(stream)
    assert entry["event"] == "review_logged"
    assert entry["page_id"] == "p-1"
    assert entry["has_note"] is True
    assert entry["level"] == "info"
    assert entry["logger"] == "contentreview.test"
    assert "timestamp" in entry


def test_console_output_format(stream: StringIO) -> None:
    setup_logging(LoggingConfig(level="DEBUG", format="console"), stream=stream)

    get_logger("contentreview.test").debug("report_page_skipped", title="About")

    output = stream.getvalue()
    assert "report_page_skipped" in output
    assert "About" in output
    with pytest.raises(json.JSONDecodeError):
        json.loads(output.strip())


def test_log_level_filtering(stream: StringIO) -> None:
    setup_logging(LoggingConfig(level="WARNING", format="json"), stream=stream)
    logger = get_logger("contentreview.test")

    logger.info("hidden_event")
    assert stream.getvalue() == ""

    logger.warning("visible_event")
    assert _last_entry(stream)["event"] == "visible_event"


def test_correlation_id_in_output(stream: StringIO) -> None:
    setup_logging(LoggingConfig(format="json"), stream=stream)
    logger = get_logger("contentreview.test")

    set_correlation_id("corr-123")
    assert get_correlation_id() == "corr-123"
    logger.info("with_correlation")
    assert _last_entry(stream)["correlation_id"] == "corr-123"

    set_correlation_id(None)
    logger.info("without_correlation")
    assert "correlation_id" not in _last_entry(stream)


def test_correlation_id_processor() -> None:
    event_dict: dict[str, Any] = {"event": "test"}

    assert "correlation_id" not in add_correlation_id(None, "", event_dict.copy())

    set_correlation_id("abc")
    assert add_correlation_id(None, "", event_dict.copy())["correlation_id"] == "abc"


def test_review_context_binding(stream: StringIO) -> None:
    setup_logging(LoggingConfig(format="json"), stream=stream)

    bind_review_context(page_id="page-9", member_id="member-4")
    get_logger("contentreview.test").info("review_denied")

    entry = _last_entry(stream)
    assert entry["page_id"] == "page-9"
    assert entry["member_id"] == "member-4"


def test_review_context_without_member(stream: StringIO) -> None:
    setup_logging(LoggingConfig(format="json"), stream=stream)

    bind_review_context(page_id="page-9")
    get_logger("contentreview.test").info("review_report_built")

    entry = _last_entry(stream)
    assert entry["page_id"] == "page-9"
    assert "member_id" not in entry


def test_uvicorn_access_log_quieted(stream: StringIO) -> None:
    setup_logging(LoggingConfig(level="DEBUG"), stream=stream)

    assert logging.getLogger("uvicorn.access").level == logging.WARNING


def test_file_rotation_handler(tmp_path: Path) -> None:
    log_file = tmp_path / "logs" / "contentreview.log"
    setup_logging(
        LoggingConfig(file=log_file, rotation_size_mb=2, retention_count=4),
    )

    handler = logging.getLogger().handlers[0]
    assert isinstance(handler, logging.handlers.RotatingFileHandler)
    assert handler.maxBytes == 2 * 1024 * 1024
    assert handler.backupCount == 4
    assert log_file.parent.exists()

    get_logger("contentreview.test").info("file_event")
    handler.flush()
    assert "file_event" in log_file.read_text()
    handler.close()
