from __future__ import annotations

import json
import logging
from datetime import datetime, timezone

from flask import has_request_context, request

_ROOT_LOGGER = "workhub"


class JsonFormatter(logging.Formatter):
    """One JSON object per line; adds the request path when inside a request."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "time": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if has_request_context():
            payload["method"] = request.method
            payload["path"] = request.path
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


def configure_logging(level: str = "INFO") -> logging.Logger:
    """Attach a single JSON stream handler to the package logger.

    Safe to call more than once (the app factory runs per test).
    """

    logger = logging.getLogger(_ROOT_LOGGER)
    logger.setLevel(level.upper())
    if not any(getattr(h, "_workhub", False) for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(JsonFormatter())
        handler._workhub = True  # type: ignore[attr-defined]
        logger.addHandler(handler)
    return logger
