"""
Structured logging configuration.

Debug and testing runs log one readable line per record; every other run
logs JSON, one object per line, on stderr. ``LOG_LEVEL`` overrides the level.

Services attach context through ``extra={...}``. The keys in
``EXTRA_FIELDS`` become JSON keys, and the entity keys are appended to the
readable line. Once the datastore exists, ``attach_store_context`` stamps
the active data tag on every record the app handler emits.
"""

import json
import logging
import os
import sys
from datetime import datetime, timezone

EXTRA_FIELDS = (
    "method",
    "path",
    "status",
    "duration_ms",
    "remote_addr",
    "request_id",
    "user_id",
    "operation",
    "entity",
    "entity_id",
    "tag",
    "error_code",
)
READABLE_FIELDS = ("operation", "entity", "entity_id", "tag")

LEVEL_COLORS = {
    "DEBUG": "\033[36m",
    "INFO": "\033[32m",
    "WARNING": "\033[33m",
    "ERROR": "\033[31m",
    "CRITICAL": "\033[35m",
}
RESET = "\033[0m"


def context_fields(record: logging.LogRecord, keys=EXTRA_FIELDS) -> dict:
    """Context attributes set on ``record``, skipping unset ones."""
    return {key: getattr(record, key) for key in keys if getattr(record, key, None) is not None}


class JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        entry.update(context_fields(record))
        if record.exc_info and record.exc_info[0] is not None:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False, default=str)


class ReadableFormatter(logging.Formatter):
    """One line per record: time, level, logger, message, then ``key=value`` context."""

    def __init__(self, color: bool = False):
        super().__init__()
        self.color = color

    def format(self, record: logging.LogRecord) -> str:
        level = f"{record.levelname:<8}"
        if self.color:
            level = f"{LEVEL_COLORS.get(record.levelname, '')}{level}{RESET}"
        line = f"{datetime.now():%H:%M:%S} {level} {record.name}: {record.getMessage()}"
        context = context_fields(record, READABLE_FIELDS)
        if context:
            line += " (" + " ".join(f"{key}={value}" for key, value in context.items()) + ")"
        duration = getattr(record, "duration_ms", None)
        if duration is not None:
            line += f" [{duration:.0f}ms]"
        if record.exc_info and record.exc_info[0] is not None:
            line += "\n" + self.formatException(record.exc_info)
        return line


class DataTagFilter(logging.Filter):
    """Sets ``record.tag`` to the store's current data tag unless the caller set one."""

    def __init__(self, store):
        super().__init__()
        self.store = store

    def filter(self, record: logging.LogRecord) -> bool:
        if getattr(record, "tag", None) is None:
            record.tag = getattr(self.store, "current_tag", None)
        return True


def configure_logging(app):
    """
    Install a single stderr handler on the root logger.

    The root handlers are replaced, so creating several apps in one process
    (the test suite does) never duplicates output.
    """
    is_testing = app.config.get("TESTING", False)
    is_prod = not app.config.get("DEBUG", False) and not is_testing

    level_name = os.getenv("LOG_LEVEL", "INFO" if is_prod else "DEBUG")
    level = getattr(logging, level_name.upper(), logging.INFO)

    if is_prod:
        formatter = JSONFormatter()
    else:
        formatter = ReadableFormatter(color=sys.stderr.isatty())

    root = logging.getLogger()
    root.handlers.clear()
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)
    handler.setLevel(level)
    root.addHandler(handler)
    root.setLevel(level)

    logging.getLogger("werkzeug").setLevel(logging.WARNING)
    app.logger.setLevel(level)

    if not is_testing:
        app.logger.info("Logging configured: level=%s format=%s",
                        level_name, "JSON" if is_prod else "readable")


def attach_store_context(store) -> None:
    """Add a ``DataTagFilter`` for ``store`` to every root handler."""
    for handler in logging.getLogger().handlers:
        handler.addFilter(DataTagFilter(store))
