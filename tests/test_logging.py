"""Tests for logging setup, structured events and redaction helpers."""

from __future__ import annotations

import json
import logging

from news_brief.config import LoggingConfig
from news_brief.utils.logging import (
    JsonlFormatter,
    log_event,
    redact_secret,
    redact_text,
    setup_llm_logger,
    setup_logging,
    truncate_text,
)


def test_jsonl_formatter_includes_extra_fields():
    record = logging.LogRecord("news_brief.test", logging.INFO, __file__, 1, "Content resolved", None, None)
    record.event = "content_resolved"
    record.length = 512

    payload = json.loads(JsonlFormatter().format(record))

    assert payload["message"] == "Content resolved"
    assert payload["level"] == "INFO"
    assert payload["event"] == "content_resolved"
    assert payload["length"] == 512
    assert "lineno" not in payload


def test_setup_logging_writes_jsonl_file(tmp_path):
    cfg = LoggingConfig(console=False, file=True, format="jsonl", filename="run.jsonl")
    logger = setup_logging(cfg, tmp_path)

    log_event(logging.getLogger("news_brief.resolve.pipeline"), "Content resolved", event="content_resolved")
    for handler in logger.handlers:
        handler.flush()

    lines = (tmp_path / "run.jsonl").read_text(encoding="utf-8").splitlines()
    assert json.loads(lines[-1])["event"] == "content_resolved"


def test_setup_llm_logger_requires_directory(tmp_path):
    assert setup_llm_logger(LoggingConfig(), None) is None
    assert setup_llm_logger(LoggingConfig(llm_log_enabled=False), tmp_path) is None

    llm_logger = setup_llm_logger(LoggingConfig(), tmp_path)

    assert llm_logger is not None
    assert llm_logger.name == "news_brief_llm"


def test_log_event_ignores_missing_logger():
    log_event(None, "nothing happens", event="noop")


def test_redaction_helpers():
    text = "See https://publisher.example/story for details"

    assert redact_text(text, "none") == text
    assert redact_text(text, "redact_content") == ""
    assert redact_text(text, "redact_urls") == "See [REDACTED_URL] for details"


def test_redact_secret_and_truncate():
    assert redact_secret("key sk-1 and sk-1 again", "sk-1") == "key [REDACTED] and [REDACTED] again"
    assert redact_secret("untouched", None) == "untouched"
    assert truncate_text("abcdef", 3) == "abc...(truncated)"
    assert truncate_text("abc", 3) == "abc"


def test_setup_logging_replaces_previous_handlers(tmp_path):
    cfg = LoggingConfig(console=False, file=True, format="text", filename="run.log")

    setup_logging(cfg, tmp_path)
    logger = setup_logging(cfg, tmp_path / "second")

    assert len(logger.handlers) == 1
    assert logger.handlers[0].baseFilename == str(tmp_path / "second" / "run.log")
    assert logger.propagate is False


def test_jsonl_timestamp_comes_from_the_record():
    record = logging.LogRecord("news_brief.test", logging.WARNING, __file__, 1, "late", None, None)
    record.created = 0.0

    payload = json.loads(JsonlFormatter().format(record))

    assert payload["timestamp"] == "1970-01-01T00:00:00+00:00"
    assert payload["logger"] == "news_brief.test"
