"""Logging configuration helpers."""

from __future__ import annotations

import logging
import sys

from loguru import logger

_LOGGING_CONFIGURED = False

# Libraries whose stdlib loggers are routed through loguru.
_INTERCEPTED = ("sqlalchemy.engine", "uvicorn", "uvicorn.error", "uvicorn.access")


class InterceptHandler(logging.Handler):
    """Forward stdlib log records to loguru, keeping the caller's frame."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno
        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1
        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def configure_logging(level: str = "INFO", serialize: bool = False) -> None:
    global _LOGGING_CONFIGURED
    if _LOGGING_CONFIGURED:
        return

    logging.basicConfig(handlers=[InterceptHandler()], level=logging.getLevelName(level), force=True)
    for name in _INTERCEPTED:
        stdlib_logger = logging.getLogger(name)
        stdlib_logger.handlers = [InterceptHandler()]
        stdlib_logger.propagate = False

    logger.remove()
    logger.add(
        sys.stderr,
        level=level,
        serialize=serialize,
        enqueue=True,
        backtrace=True,
        diagnose=False,
    )

    _LOGGING_CONFIGURED = True


__all__ = ["configure_logging", "logger", "InterceptHandler"]
