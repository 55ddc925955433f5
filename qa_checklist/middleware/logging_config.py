"""
Structured logging configuration.

Production writes one JSON object per line; development and testing write a
short colored line. ``LOG_FORMAT`` (json | readable) overrides the choice and
``LOG_LEVEL`` sets the level.

Services pass tracker ids through ``extra``::

    logger.info("Tester assigned", extra={"project_id": pid, "tester_id": tid})

Both formatters pick those up.
"""

import json
import logging
import os
import sys
from datetime import datetime, timezone

# Set by the request timing middleware
REQUEST_FIELDS = ("request_id", "method", "path", "status", "duration_ms", "remote_addr")
# Tracker entities a log line may be about
ENTITY_FIELDS = ("project_id", "module_id", "tester_id", "checklist_module_id")
EVENT_FIELD = "event_type"


def _present(record, fields):
    return {k: getattr(record, k) for k in fields if getattr(record, k, None) is not None}


class JSONFormatter(logging.Formatter):
    """One JSON document per record for log aggregation."""

    def __init__(self, service="qa-checklist"):
        super().__init__()
        self.service = service

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "ts": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "service": self.service,
            "logger": record.name,
            "msg": record.getMessage(),
            "at": f"{record.module}:{record.lineno}",
        }
        entry.update(_present(record, REQUEST_FIELDS + ENTITY_FIELDS + (EVENT_FIELD,)))
        if record.exc_info and record.exc_info[0] is not None:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False, default=str)


class ReadableFormatter(logging.Formatter):
    """``12:00:01 INFO     qa_checklist.services...: msg project=.. [12ms]``"""

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def __init__(self, color=True):
        super().__init__()
        self.color = color

    def format(self, record: logging.LogRecord) -> str:
        ts = datetime.fromtimestamp(record.created).strftime("%H:%M:%S")
        level = f"{record.levelname:<8}"
        if self.color:
            level = f"{self.COLORS.get(record.levelname, '')}{level}{self.RESET}"

        parts = [f"{ts} {level} {record.name}: {record.getMessage()}"]
        parts += [f"{k}={v}" for k, v in _present(record, ENTITY_FIELDS).items()]
        duration = getattr(record, "duration_ms", None)
        if duration is not None:
            parts.append(f"[{duration:.0f}ms]")

        line = " ".join(parts)
        if record.exc_info and record.exc_info[0] is not None:
            line += "\n" + self.formatException(record.exc_info)
        return line


def _use_json(app) -> bool:
    forced = os.getenv("LOG_FORMAT", "").strip().lower()
    if forced in ("json", "readable"):
        return forced == "json"
    return not app.config.get("DEBUG", False) and not app.config.get("TESTING", False)


def configure_logging(app):
    """Install a single stderr handler on the root logger for ``app``."""
    as_json = _use_json(app)
    level_name = os.getenv("LOG_LEVEL", "INFO" if as_json else "DEBUG").upper()
    level = getattr(logging, level_name, logging.INFO)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(JSONFormatter() if as_json else ReadableFormatter(color=sys.stderr.isatty()))
    handler.setLevel(level)

    # Tests build more than one app; replace rather than stack handlers
    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)

    for noisy in ("urllib3", "werkzeug", "sqlalchemy.engine"):
        logging.getLogger(noisy).setLevel(logging.WARNING)
    app.logger.setLevel(level)

    if not app.config.get("TESTING", False):
        app.logger.info("Logging configured: level=%s format=%s",
                        level_name, "json" if as_json else "readable")
    return handler
