"""Structured logging utilities."""
from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import IO, Any, Dict, Optional

import orjson

_HANDLER_TAG = "_pt_handler"


class JsonFormatter(logging.Formatter):
    """Render log records as JSON."""

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "level": record.levelname,
            "message": record.getMessage(),
            "name": record.name,
            "time": self.formatTime(record, "%Y-%m-%dT%H:%M:%S%z"),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        for key, value in record.__dict__.items():
            if key.startswith("_extra_"):
                payload[key[7:]] = value
        return orjson.dumps(payload, default=str).decode()


def configure_logging(
    level: str = "INFO", log_path: Path | None = None, stream: Optional[IO[str]] = None
) -> logging.Logger:
    """Configure root logging handlers.

    Calling this more than once replaces the handlers installed by a previous
    call instead of stacking duplicates.
    """

    logger = logging.getLogger()
    logger.setLevel(getattr(logging, str(level).upper(), logging.INFO))
    for handler in list(logger.handlers):
        if getattr(handler, _HANDLER_TAG, False):
            logger.removeHandler(handler)
            handler.close()

    handlers: list[logging.Handler] = [logging.StreamHandler(stream or sys.stdout)]
    if log_path is not None:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(RotatingFileHandler(log_path, maxBytes=5_000_000, backupCount=3))
    for handler in handlers:
        handler.setFormatter(JsonFormatter())
        setattr(handler, _HANDLER_TAG, True)
        logger.addHandler(handler)
    return logger
