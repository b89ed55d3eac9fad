# formhooks/logging.py
"""
Operational log stream for formhooks.

This is where delivery failures and registry changes are reported; it
is separate from the delivery log, which records each attempt as data.
Records are written one JSON object per line:

    {"timestamp": ..., "level": "WARNING", "logger": "formhooks.webhooks.dispatcher",
     "message": "webhook_delivery_failed", "url": "...", "error": "..."}

Call sites pass an event name plus keyword fields:
    logger = get_logger(__name__)
    logger.info("webhook_mappings_replaced", mapping_count=3)
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional

# Loggers whose per-request chatter would drown out delivery events
_QUIET_LOGGERS = ("httpx", "httpcore", "uvicorn")


class StructuredLogFormatter(logging.Formatter):
    """Render a record and its event fields as a single JSON line."""

    def format(self, record: logging.LogRecord) -> str:
        line: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        line.update(getattr(record, "structured_data", {}))

        if record.exc_info:
            line["exception"] = self.formatException(record.exc_info)

        # Point at the failing call site for errors (e.g. log store writes)
        if record.levelno >= logging.ERROR:
            line["source"] = {
                "file": record.filename,
                "line": record.lineno,
                "function": record.funcName,
            }

        # Payload values and form ids can be anything; fall back to str()
        return json.dumps(line, default=str)


class StructuredLogger:
    """
    Event-style front end for a stdlib logger.

    Keyword fields travel on the record as ``structured_data`` so the
    formatter (and tests using caplog) can read them back.
    """

    def __init__(self, name: str):
        self._logger = logging.getLogger(name)

    @property
    def name(self) -> str:
        return self._logger.name

    def _emit(self, level: int, event: str, exc_info: bool = False, **fields):
        self._logger.log(level, event, exc_info=exc_info, extra={"structured_data": fields})

    def debug(self, event: str, **fields):
        self._emit(logging.DEBUG, event, **fields)

    def info(self, event: str, **fields):
        self._emit(logging.INFO, event, **fields)

    def warning(self, event: str, **fields):
        self._emit(logging.WARNING, event, **fields)

    def error(self, event: str, exc_info: bool = False, **fields):
        self._emit(logging.ERROR, event, exc_info=exc_info, **fields)

    def exception(self, event: str, **fields):
        """ERROR with the traceback of the exception being handled."""
        self._emit(logging.ERROR, event, exc_info=True, **fields)


_configured = False


def configure_logging(
    level: str = "INFO",
    json_output: bool = True,
    log_file: Optional[str] = None,
):
    """
    Install formhooks' handlers on the root logger. Later calls are no-ops.

    Args:
        level: Root level name; unknown names fall back to INFO
        json_output: JSON lines on stdout, or plain text for local runs
        log_file: Also append JSON lines to this file
    """
    global _configured
    if _configured:
        return
    _configured = True

    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    for handler in root.handlers[:]:
        root.removeHandler(handler)

    stdout_handler = logging.StreamHandler(sys.stdout)
    stdout_handler.setFormatter(
        StructuredLogFormatter()
        if json_output
        else logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s")
    )
    root.addHandler(stdout_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(StructuredLogFormatter())
        root.addHandler(file_handler)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> StructuredLogger:
    """Event logger for a module; the first call configures from settings."""
    if not _configured:
        from .settings import settings
        configure_logging(
            level=settings.log_level,
            json_output=settings.log_json,
            log_file=settings.log_file,
        )
    return StructuredLogger(name)
