"""
Logging setup for the document service.
Call setup_logging() once at process startup (the API lifespan does it).
"""
from __future__ import annotations

import json
import logging
import os
from datetime import datetime, timezone

# merged into JSON lines when passed via `extra=`
EXTRA_FIELDS = ("kind", "number", "stage", "tenant_id", "duration_ms", "bytes", "pages", "html_length", "route")


class JSONFormatter(logging.Formatter):
    """One JSON object per line, for log shipping."""

    def format(self, record):
        entry = {
            "ts": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
            "module": record.module,
            "func": record.funcName,
            "line": record.lineno,
        }
        if record.exc_info and record.exc_info[0]:
            entry["exception"] = self.formatException(record.exc_info)
        for key in EXTRA_FIELDS:
            if hasattr(record, key):
                entry[key] = getattr(record, key)
        return json.dumps(entry, default=str)


class HumanFormatter(logging.Formatter):
    """Readable console format with color."""

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def format(self, record):
        color = self.COLORS.get(record.levelname, "")
        ts = datetime.now(timezone.utc).strftime("%H:%M:%S")
        line = f"{color}{ts} [{record.levelname[0]}] {record.name}: {record.getMessage()}{self.RESET}"
        if record.exc_info and record.exc_info[0]:
            line += "\n" + self.formatException(record.exc_info)
        return line


def setup_logging(level: str | None = None, json_logs: bool | None = None) -> None:
    """
    Configure root logging.

    Args:
        level: override log level (default: LOG_LEVEL env or INFO)
        json_logs: force JSON lines (default: LOG_JSON env)
    """
    if level is None:
        level = os.environ.get("LOG_LEVEL", "INFO").upper()
    if json_logs is None:
        json_logs = os.environ.get("LOG_JSON", "").lower() in {"1", "true", "yes"}

    root = logging.getLogger()
    root.setLevel(getattr(logging, level, logging.INFO))
    root.handlers.clear()

    console = logging.StreamHandler()
    console.setFormatter(JSONFormatter() if json_logs else HumanFormatter())
    root.addHandler(console)

    # Quiet noisy libs
    for name in ("asyncio", "playwright", "urllib3", "multipart"):
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger("bizdocs").info("Logging initialized", extra={"stage": "startup"})
