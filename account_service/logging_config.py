"""Structured JSON logging configuration."""

from __future__ import annotations

import logging

from pythonjsonlogger import jsonlogger


def build_formatter() -> jsonlogger.JsonFormatter:
    """Return the JSON formatter used for every handler; ``extra`` fields become keys."""
    return jsonlogger.JsonFormatter(
        "%(asctime)s %(levelname)s %(name)s %(message)s",
        rename_fields={"levelname": "level", "asctime": "timestamp", "name": "logger"},
    )


def configure_logging(level: str = "INFO") -> None:
    """Route the root logger and uvicorn's access logger through the JSON formatter."""
    handler = logging.StreamHandler()
    handler.setFormatter(build_formatter())
    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers = [handler]

    uvicorn_access = logging.getLogger("uvicorn.access")
    uvicorn_access.handlers = [handler]
    uvicorn_access.setLevel(logging.WARNING)
