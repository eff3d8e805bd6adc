"""Structured logging configuration for the helpdesk core."""

import json
import logging
import logging.config
import logging.handlers
import os
from datetime import datetime, timezone
from pathlib import Path

from .config import DEFAULT_LOG_PATH

# Third-party loggers that are chatty at DEBUG/INFO (frame dumps, request lines)
NOISY_LOGGERS = ("websockets", "httpx", "httpcore", "aiosqlite")


class JSONFormatter(logging.Formatter):
    """One JSON object per log line."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        # Passed as logger.info(..., extra={"context": {...}})
        if hasattr(record, "context"):
            log_data["context"] = record.context

        return json.dumps(log_data, default=str)


def setup_logging(
    log_level: str | None = None,
    log_file: str | None = None,
    console: bool = True,
) -> None:
    """
    Configure logging for the dashboard process.

    Args:
        log_level: DEBUG, INFO, WARNING, ERROR or CRITICAL.
                   Defaults to the LOG_LEVEL env var or INFO.
        log_file: Rotating log file path. Defaults to 04_logs/app.log.
        console: Also write JSON lines to stdout.
    """
    if log_level is None:
        log_level = os.getenv("LOG_LEVEL", "INFO")

    if log_file is None:
        log_file = str(DEFAULT_LOG_PATH)

    Path(log_file).parent.mkdir(parents=True, exist_ok=True)

    handlers = {
        "file": {
            "class": "logging.handlers.RotatingFileHandler",
            "filename": log_file,
            "maxBytes": 10 * 1024 * 1024,  # 10 MB
            "backupCount": 5,
            "formatter": "json",
            "encoding": "utf-8",
        },
    }
    if console:
        handlers["console"] = {
            "class": "logging.StreamHandler",
            "formatter": "json",
            "stream": "ext://sys.stdout",
        }

    logging_config = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "json": {
                "()": "helpdesk.logging_config.JSONFormatter",
            },
        },
        "handlers": handlers,
        "loggers": {
            name: {"level": "WARNING"} for name in NOISY_LOGGERS
        },
        "root": {
            "level": log_level.upper(),
            "handlers": list(handlers),
        },
    }

    logging.config.dictConfig(logging_config)


def get_logger(name: str) -> logging.Logger:
    """Get a module logger (pass __name__)."""
    return logging.getLogger(name)
