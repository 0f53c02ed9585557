"""JSON-lines logging for the service.

Import as ``from bytebros.logger import logger``. ``configure_logging`` is
called by the app factory; keys that may carry secrets are dropped from the
structured output.
"""
import json
import logging
import sys
import traceback
from datetime import datetime, timezone
from typing import Any

LOGGER_NAME = "bytebros"

# LogRecord attributes that are not user-supplied ``extra`` fields
_RESERVED = set(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {"message", "asctime", "taskName"}


class JSONFormatter(logging.Formatter):
    SENSITIVE_KEYS = {"password", "senha", "secret", "token", "authorization", "jwt_secret"}

    def format(self, record: logging.LogRecord) -> str:
        log_obj: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key, value in record.__dict__.items():
            if key in _RESERVED or key.lower() in self.SENSITIVE_KEYS:
                continue
            log_obj[key] = value

        if record.exc_info:
            log_obj["exception"] = {
                "type": record.exc_info[0].__name__ if record.exc_info[0] else None,
                "message": str(record.exc_info[1]) if record.exc_info[1] else None,
                "stacktrace": traceback.format_exception(*record.exc_info),
            }
        return json.dumps(log_obj, default=str)


def configure_logging(level: str = "INFO") -> logging.Logger:
    log = logging.getLogger(LOGGER_NAME)
    log.setLevel(level)
    # avoid duplicate handlers when the app factory runs more than once
    if not log.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(JSONFormatter())
        log.addHandler(handler)
    return log


logger = logging.getLogger(LOGGER_NAME)
