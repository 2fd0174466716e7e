# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Structured JSON logging — one JSON object per line on stdout.

Module loggers under ``rotation_scheduler`` share a single handler on the
package logger. Ids passed through ``extra=`` (request, group, user,
rotation) become top-level keys so log lines can be joined to API calls.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

from rotation_scheduler.core.config import settings

PACKAGE_LOGGER = "rotation_scheduler"
CONTEXT_FIELDS: tuple[str, ...] = ("request_id", "group_id", "user_id", "rotation_id")


class JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "service": settings.SERVICE_NAME,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for field in CONTEXT_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                log_data[field] = value
        if record.exc_info and record.exc_info[1]:
            log_data["error"] = str(record.exc_info[1])
            log_data["error_type"] = type(record.exc_info[1]).__name__
        return json.dumps(log_data, default=str)


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a logger whose records reach exactly one JSON handler."""
    logger_name = name or settings.SERVICE_NAME
    logger = logging.getLogger(logger_name)
    owner = (
        logging.getLogger(PACKAGE_LOGGER)
        if logger_name.startswith(PACKAGE_LOGGER + ".")
        else logger
    )
    if not owner.handlers:
        owner.setLevel(getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(JSONFormatter())
        owner.addHandler(handler)
        owner.propagate = False
    return logger
