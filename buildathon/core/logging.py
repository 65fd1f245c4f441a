"""JSON logging for the buildathon backend."""
from __future__ import annotations

import logging
from typing import Optional

from pythonjsonlogger.json import JsonFormatter

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def build_formatter() -> JsonFormatter:
    """One JSON object per line; ``extra={...}`` keys become top-level fields."""

    return JsonFormatter(LOG_FORMAT, rename_fields={"levelname": "level", "name": "logger"})


def setup_logging(level: str = "INFO") -> None:
    """Route the root logger to stderr through the JSON formatter."""

    root_logger = logging.getLogger()
    # Uvicorn reloads call this again; keep a single handler.
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
    root_logger.setLevel(level.upper())

    handler = logging.StreamHandler()
    handler.setFormatter(build_formatter())
    root_logger.addHandler(handler)


def get_logger(name: str, level: Optional[str] = None) -> logging.Logger:
    logger = logging.getLogger(name)
    if level is not None:
        logger.setLevel(level.upper())
    return logger


__all__ = ["LOG_FORMAT", "build_formatter", "get_logger", "setup_logging"]
