"""
Logging for news-brief runs.

Two loggers are configured from ``LoggingConfig``:
- ``news_brief``: every module logger hangs off it. Records go to a rich
  console handler and, when a log directory is given, to a file in JSONL
  or plain text.
- ``news_brief_llm``: raw provider responses, JSONL only, written only
  when a log directory is given.

Structured fields travel as ``extra`` keys through ``log_event`` and end
up as top-level JSON keys. Text bound for these logs or for trace
payloads passes through ``redact_text``/``redact_secret`` first so URLs
and API keys stay out of them.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
import re
from typing import Any

from rich.logging import RichHandler

from ..config import LoggingConfig

ROOT_LOGGER = "news_brief"
LLM_LOGGER = "news_brief_llm"

_URL_RE = re.compile(r"https?://\S+")
_PLAIN_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def setup_logging(cfg: LoggingConfig, log_dir: Path | None) -> logging.Logger:
    """Configure the package logger; file output needs ``log_dir``."""
    level = _level(cfg.level)
    logger = _fresh_logger(ROOT_LOGGER, level)

    if cfg.console:
        console = RichHandler(rich_tracebacks=True, show_time=False, show_level=True)
        console.setLevel(level)
        console.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(console)

    if cfg.file and log_dir is not None:
        formatter = JsonlFormatter() if cfg.format == "jsonl" else logging.Formatter(_PLAIN_FORMAT)
        logger.addHandler(_file_handler(log_dir / cfg.filename, formatter, level))

    return logger


def setup_llm_logger(cfg: LoggingConfig, log_dir: Path | None) -> logging.Logger | None:
    if not cfg.llm_log_enabled or log_dir is None:
        return None
    level = _level(cfg.level)
    logger = _fresh_logger(LLM_LOGGER, level)
    logger.addHandler(_file_handler(log_dir / cfg.llm_log_file, JsonlFormatter(), level))
    return logger


def log_event(logger: logging.Logger | None, message: str, level: int = logging.INFO, **fields: Any) -> None:
    """Log ``message`` with ``fields`` attached as structured extras."""
    if logger is None:
        return
    logger.log(level, message, extra=fields)


def redact_text(text: str, mode: str) -> str:
    """Apply a ``LoggingConfig``/``LangfuseConfig`` redaction mode to text.

    ``redact_content`` blanks the text, ``redact_urls`` masks every
    http(s) URL. Unknown modes leave the text as is.
    """
    if mode == "redact_content":
        return ""
    if mode == "redact_urls":
        return _URL_RE.sub("[REDACTED_URL]", text)
    return text


def redact_secret(text: str, secret: str | None) -> str:
    """Remove every occurrence of a credential from text bound for logs or errors."""
    if not secret:
        return text
    return text.replace(secret, "[REDACTED]")


def truncate_text(text: str, max_chars: int = 20000) -> str:
    if len(text) <= max_chars:
        return text
    return f"{text[:max_chars]}...(truncated)"


class JsonlFormatter(logging.Formatter):
    """One JSON object per record; ``extra`` fields become top-level keys."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key, value in record.__dict__.items():
            if key not in _RECORD_ATTRS:
                payload[key] = value
        return json.dumps(payload, ensure_ascii=True, default=str)


# Attributes every LogRecord carries; anything else came in through ``extra``.
_RECORD_ATTRS = frozenset(logging.LogRecord("", logging.INFO, "", 0, "", None, None).__dict__) | {
    "message",
    "asctime",
    "taskName",
}


def _fresh_logger(name: str, level: int) -> logging.Logger:
    logger = logging.getLogger(name)
    logger.setLevel(level)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = False
    return logger


def _file_handler(path: Path, formatter: logging.Formatter, level: int) -> logging.FileHandler:
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def _level(name: str) -> int:
    return getattr(logging, name.upper(), logging.INFO)
