# elementquery/utils/logger.py
from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from typing import Any, Dict, Optional

from rich.console import Console
from rich.logging import RichHandler

from elementquery.utils.config import LogLevel, Settings, get_settings


__all__ = [
    "get_logger",
    "log_with_context",
    "configure_logging",
]

ROOT_LOGGER = "elementquery"

# Library code never configures handlers; entry points call configure_logging().
logging.getLogger(ROOT_LOGGER).addHandler(logging.NullHandler())


# ------------- JSON Formatter (for file logs) -------------

class JsonFormatter(logging.Formatter):
    """One JSON object per line: time, level, logger, message and any bound context."""

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        context = getattr(record, "context", None)
        if isinstance(context, dict):
            payload.update(context)
        # Concurrent queries share one process; the task name tells them apart
        payload["task"] = getattr(record, "taskName", None)
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


# ------------- Public API -------------

def get_logger(name: Optional[str] = None) -> logging.LoggerAdapter:
    """Logger for library modules. Never touches handlers or levels."""
    return logging.LoggerAdapter(logging.getLogger(name or ROOT_LOGGER), extra={"context": {}})


def log_with_context(logger: logging.LoggerAdapter, **kwargs: Any) -> logging.LoggerAdapter:
    """
    Return a new LoggerAdapter carrying extra context for a scoped section.
    Usage:
        scoped = log_with_context(log, selectors="[css=#main]")
        scoped.debug("attempt 3 found nothing")
    """
    context = dict((logger.extra or {}).get("context", {}))
    context.update(kwargs)
    return logging.LoggerAdapter(logger.logger, extra={"context": context})


def configure_logging(settings: Optional[Settings] = None, level: Optional[str] = None) -> None:
    """
    Set up console (Rich) and optional JSON file logging for an application
    entry point (the CLI, scripts). Safe to call more than once; the handlers
    it installed earlier are replaced.
    """
    s = settings or get_settings()
    name = (level or s.LOG_LEVEL.value).upper()
    py_level = getattr(logging, name, logging.INFO) if name in LogLevel.__members__ else logging.INFO

    root = logging.getLogger()
    for h in list(root.handlers):
        if getattr(h, "_elementquery", False):
            root.removeHandler(h)
    root.setLevel(py_level)

    console = RichHandler(
        console=Console(stderr=True),
        show_time=True,
        show_path=False,
        rich_tracebacks=True,
        markup=s.COLORIZED_OUTPUT,
    )
    console.setFormatter(logging.Formatter("%(message)s"))
    handlers: list[logging.Handler] = [console]

    if s.LOG_TO_FILE:
        s.LOG_FILE.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            filename=str(s.LOG_FILE),
            maxBytes=5 * 1024 * 1024,  # 5MB per file
            backupCount=5,
            encoding="utf-8",
            delay=True,
        )
        file_handler.setFormatter(JsonFormatter())
        handlers.append(file_handler)

    for h in handlers:
        h.setLevel(py_level)
        h._elementquery = True  # type: ignore[attr-defined]
        root.addHandler(h)

    # Reduce noise from third-party modules unless debugging
    for n in ("asyncio", "playwright"):
        logging.getLogger(n).setLevel(max(py_level, logging.WARNING))
