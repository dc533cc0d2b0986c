"""
Structured logging configuration.

Log lines carry the same ``...Z`` millisecond timestamps as stored rows, so
a request log and the audit row it produced line up exactly.
"""
import logging
import sys
import json
from typing import Any, Dict
from core import dates
from core.config import settings

NOISY_LOGGERS = ("sqlalchemy.engine", "uvicorn.access", "multipart", "python_multipart")


class JSONFormatter(logging.Formatter):
    """One JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": dates.now_timestamp(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "location": f"{record.module}.{record.funcName}:{record.lineno}",
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        # extra={"extra_fields": {...}} is merged flat
        extra_fields = getattr(record, "extra_fields", None)
        if isinstance(extra_fields, dict):
            log_data.update(extra_fields)

        return json.dumps(log_data, default=str)


class TextFormatter(logging.Formatter):
    """Human-readable lines for local development, with any extra fields appended."""

    def format(self, record: logging.LogRecord) -> str:
        line = f"{dates.now_timestamp()} {record.levelname:<7} {record.name}: {record.getMessage()}"
        extra_fields = getattr(record, "extra_fields", None)
        if extra_fields:
            line += " " + " ".join(f"{key}={value}" for key, value in extra_fields.items())
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


def setup_logging() -> logging.Logger:
    """
    Configure the root logger from LOG_LEVEL / LOG_FORMAT.

    Production always logs JSON. Safe to call more than once.
    """
    log_level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)

    if settings.LOG_FORMAT == "json" or settings.ENVIRONMENT == "production":
        formatter: logging.Formatter = JSONFormatter()
    else:
        formatter = TextFormatter()

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return root_logger


setup_logging()
