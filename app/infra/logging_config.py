"""Process-wide logging setup for the API and Celery workers."""

from __future__ import annotations

import logging
import sys

from app.config import get_settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
ROOT_LOGGER_NAME = "pageinbox"


class LoggingConfig:
    """Configure stdlib logging once; later instantiations are no-ops."""

    _configured = False

    def __init__(self) -> None:
        if LoggingConfig._configured:
            return
        settings = get_settings()
        level = logging.getLevelName(settings.log_level.upper())
        if not isinstance(level, int):
            level = logging.INFO

        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))

        root = logging.getLogger()
        root.handlers = [handler]
        root.setLevel(level)

        # Keep third-party loggers on the same handler
        for name in ("uvicorn", "uvicorn.error", "uvicorn.access", "celery"):
            logger = logging.getLogger(name)
            logger.handlers = []
            logger.propagate = True
        logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

        LoggingConfig._configured = True


def get_logger(name: str) -> logging.Logger:
    """Return a logger namespaced under the application logger."""
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")
