"""
Logging setup for the legmatch CLI.

setup_logging() installs four sinks:
- console (stderr, colored unless LEGMATCH_NO_COLOR is set)
- legmatch.log: everything at file_level and above
- legmatch-error.log: ERROR and above
- legmatch-audit.log: the "legmatch.audit" logger only, one line per run

Every record carries the current session id. Files rotate at midnight.
"""

from __future__ import annotations

import json
import logging
import logging.handlers
import os
import sys
import threading
import uuid
from datetime import datetime
from pathlib import Path
from typing import Any

LOG_DIR = Path(os.getenv("LEGMATCH_LOG_DIR", "logs"))

AUDIT_LOGGER = "legmatch.audit"
LINE_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_session_context = threading.local()


class ContextFilter(logging.Filter):
    """Stamp the thread's session id onto each record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.session_id = get_session_id() or "N/A"
        return True


class FlushingTimedRotatingFileHandler(logging.handlers.TimedRotatingFileHandler):
    """Rotating file handler that flushes every record so short CLI runs lose nothing."""

    def emit(self, record: logging.LogRecord) -> None:
        super().emit(record)
        self.flush()


class ColoredFormatter(logging.Formatter):
    """Color the level name for terminal output."""

    LEVEL_COLORS = {
        logging.DEBUG: "36",
        logging.INFO: "32",
        logging.WARNING: "33",
        logging.ERROR: "31",
        logging.CRITICAL: "35",
    }

    def format(self, record: logging.LogRecord) -> str:
        color = self.LEVEL_COLORS.get(record.levelno)
        if color is None:
            return super().format(record)
        plain = record.levelname
        record.levelname = f"\033[{color}m{plain}\033[0m"
        try:
            return super().format(record)
        finally:
            record.levelname = plain


class JSONFormatter(logging.Formatter):
    """One JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "logger": record.name,
            "line": record.lineno,
            "message": record.getMessage(),
            "session_id": getattr(record, "session_id", None),
        }
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry)


def _level(name: str, default: int) -> int:
    return getattr(logging, name.upper(), default)


def _file_handler(
    filename: str, level: int, backup_count: int, formatter: logging.Formatter
) -> logging.Handler:
    handler = FlushingTimedRotatingFileHandler(
        LOG_DIR / filename,
        when="midnight",
        backupCount=backup_count,
        encoding="utf-8",
    )
    handler.suffix = "%Y-%m-%d"
    handler.setLevel(level)
    handler.setFormatter(formatter)
    handler.addFilter(ContextFilter())
    return handler


def _console_handler(level: int) -> logging.Handler:
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    formatter_cls = logging.Formatter if os.getenv("LEGMATCH_NO_COLOR") else ColoredFormatter
    handler.setFormatter(formatter_cls(LINE_FORMAT, datefmt=DATE_FORMAT))
    handler.addFilter(ContextFilter())
    return handler


def setup_logging(
    console_level: str = "INFO",
    file_level: str = "DEBUG",
    *,
    json_format: bool = False,
) -> None:
    """
    Configure process-wide logging. Calling it again replaces earlier handlers.

    Args:
        console_level: Minimum level printed to stderr
        file_level: Minimum level written to legmatch.log
        json_format: Write legmatch.log as JSON lines
    """
    LOG_DIR.mkdir(parents=True, exist_ok=True)
    line_formatter = logging.Formatter(LINE_FORMAT, datefmt=DATE_FORMAT)

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)
    root_logger.handlers.clear()
    root_logger.addHandler(_console_handler(_level(console_level, logging.INFO)))
    root_logger.addHandler(
        _file_handler(
            "legmatch.log",
            _level(file_level, logging.DEBUG),
            backup_count=30,
            formatter=JSONFormatter() if json_format else line_formatter,
        )
    )
    root_logger.addHandler(
        _file_handler("legmatch-error.log", logging.ERROR, backup_count=90, formatter=line_formatter)
    )

    audit_logger = logging.getLogger(AUDIT_LOGGER)
    audit_logger.handlers.clear()
    audit_logger.addHandler(
        _file_handler(
            "legmatch-audit.log",
            logging.INFO,
            backup_count=365,
            formatter=logging.Formatter("%(asctime)s | %(message)s", datefmt=DATE_FORMAT),
        )
    )
    audit_logger.setLevel(logging.INFO)
    audit_logger.propagate = False

    # Match-level debug lines are opt-in
    logging.getLogger("legmatch.classification").setLevel(logging.INFO)

    root_logger.debug("Logging configured (console=%s, file=%s)", console_level, file_level)


def set_session_id(session_id: str) -> None:
    _session_context.session_id = session_id


def get_session_id() -> str | None:
    return getattr(_session_context, "session_id", None)


def generate_session_id() -> str:
    """Return an id like sess_20250117_093000_1a2b3c4d."""
    return f"sess_{datetime.now():%Y%m%d_%H%M%S}_{uuid.uuid4().hex[:8]}"


def audit_log(message: str, **context: Any) -> None:
    """
    Write one line to the audit log, with context as key=value pairs.

    Example:
        audit_log("Classification completed", groups=12, unclassified=1)
    """
    fields = [message, *(f"{key}={value}" for key, value in context.items())]
    logging.getLogger(AUDIT_LOGGER).info(" | ".join(fields))
