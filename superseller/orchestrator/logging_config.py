"""
SuperSeller Structured Logging Configuration
============================================

Root logger setup for the CLI and for callers embedding the evaluation core.

The console handler writes to stderr: stdout carries the JSON results of the
CLI. In JSON mode every line carries the evaluation context (listing, stage,
hack, category, score) that the core passes through `extra=`.

Usage:
    from superseller.orchestrator.logging_config import setup_logging

    setup_logging(json_output=True, log_file="logs/superseller.log")
"""

import json
import logging
import logging.handlers
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

from ..data.config import DEFAULT_LOG_MAX_BYTES, LoggingSettings


EXTRA_KEYS = ("listing_id", "hack_id", "category_id", "stage", "score")

TEXT_FORMAT = "%(asctime)s %(levelname)-7s %(name)s [%(stage)s] %(message)s"
TEXT_DATEFMT = "%H:%M:%S"


class JSONFormatter(logging.Formatter):
    """
    One JSON object per record.

    Keys: ts (record time, UTC), level, logger, msg, exception when present,
    then whichever EXTRA_KEYS the record carries.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info and record.exc_info[0] is not None:
            entry["exception"] = self.formatException(record.exc_info)
        entry.update({key: getattr(record, key) for key in EXTRA_KEYS if getattr(record, key, None) is not None})
        return json.dumps(entry, default=str, ensure_ascii=False)


class _StageDefault(logging.Filter):
    """Text mode: records logged without a stage show '-'."""

    def filter(self, record: logging.LogRecord) -> bool:
        if getattr(record, "stage", None) is None:
            record.stage = "-"
        return True


def _handlers(stream, log_file: Optional[str], max_bytes: int, backup_count: int) -> List[logging.Handler]:
    handlers: List[logging.Handler] = [logging.StreamHandler(stream or sys.stderr)]
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.handlers.RotatingFileHandler(
            log_file, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8",
        ))
    return handlers


def setup_logging(
    level: str = "INFO",
    json_output: bool = False,
    log_file: Optional[str] = None,
    max_bytes: int = DEFAULT_LOG_MAX_BYTES,
    backup_count: int = 5,
    stream=None,
):
    """
    Replace the root handlers.

    Args:
        level: Root log level name
        json_output: JSONFormatter instead of the text format
        log_file: Also write to this file, rotated at max_bytes
        max_bytes: Rotation size of log_file
        backup_count: Rotated files kept
        stream: Console stream (default: stderr)
    """
    root = logging.getLogger()
    root.setLevel(logging.getLevelName(level.upper()))
    root.handlers.clear()

    formatter = JSONFormatter() if json_output else logging.Formatter(TEXT_FORMAT, datefmt=TEXT_DATEFMT)
    for handler in _handlers(stream, log_file, max_bytes, backup_count):
        handler.setFormatter(formatter)
        if not json_output:
            handler.addFilter(_StageDefault())
        root.addHandler(handler)

    root.debug("Logging configured: level=%s json=%s file=%s", level, json_output, log_file or "none")


def setup_logging_from_settings(settings: LoggingSettings, verbose: bool = False):
    """Configure logging from environment-driven settings; verbose forces DEBUG."""
    setup_logging(
        level="DEBUG" if verbose else settings.level,
        json_output=settings.json_output,
        log_file=settings.log_file,
        max_bytes=settings.max_bytes,
        backup_count=settings.backup_count,
    )
