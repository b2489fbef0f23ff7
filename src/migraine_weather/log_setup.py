"""JSON console logging for library callers and the diagnostic CLI."""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from typing import Any

from .config import Settings
from .redaction import sanitize_text

# Structured fields attached via ``extra=`` by the weather client.
_CONTEXT_FIELDS = ("fetch_kind", "cause_category", "status_code")


class JsonConsoleFormatter(logging.Formatter):
    """One JSON object per record, with credentials redacted."""

    def format(self, record: logging.LogRecord) -> str:
        event: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": sanitize_text(record.getMessage()),
        }
        for field in _CONTEXT_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                event[field] = value
        if record.exc_info:
            event["exception"] = sanitize_text(self.formatException(record.exc_info))
        return json.dumps(event, default=str)


def setup_logger(
    name: str = "migraine_weather",
    level: int | str = logging.INFO,
    *,
    settings: Settings | None = None,
) -> logging.Logger:
    """Configure the package logger; ``settings.log_level`` wins over ``level``.

    Safe to call again once settings are loaded: the level is updated and no
    second handler is added.
    """
    logger = logging.getLogger(name)
    logger.setLevel(settings.log_level if settings is not None else level)
    logger.propagate = False
    if logger.handlers:
        return logger

    handler = logging.StreamHandler()
    handler.setFormatter(JsonConsoleFormatter())
    logger.addHandler(handler)
    return logger
