"""Loguru as the only log backend.

Every record carries a ``thread`` extra: the conversation id while a chat
turn is being handled (bound with ``logger.contextualize``) and ``-``
otherwise.  Records from stdlib loggers are forwarded into loguru.
"""

from __future__ import annotations

import logging
import sys

from loguru import logger

NO_THREAD = "-"

_TEXT_FORMAT = (
    "<green>{time:HH:mm:ss.SSS}</green> <level>{level: <7}</level> "
    "<magenta>[{extra[thread]}]</magenta> "
    "<cyan>{name}:{line}</cyan> {message}"
)

# Forwarded at their own level; the chatty HTTP clients only from WARNING up.
_FORWARDED = {"uvicorn": None, "uvicorn.error": None, "uvicorn.access": None, "fastapi": None}
_QUIET = {"httpx": logging.WARNING, "openai": logging.WARNING, "opentelemetry": logging.WARNING}


class InterceptHandler(logging.Handler):
    """Re-emit a stdlib record through loguru from the original call site."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back  # type: ignore[assignment]
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def route_stdlib_logging() -> InterceptHandler:
    """Send root and library loggers through loguru; returns the handler installed."""
    handler = InterceptHandler()
    logging.root.handlers = [handler]
    logging.root.setLevel(logging.DEBUG)
    for name, level in {**_FORWARDED, **_QUIET}.items():
        stdlib_logger = logging.getLogger(name)
        stdlib_logger.handlers = [handler]
        stdlib_logger.propagate = False
        if level is not None:
            stdlib_logger.setLevel(level)
    return handler


def setup_logging(*, level: str = "INFO", json: bool = False) -> None:
    """Replace loguru's default sink.

    Args:
        level: Minimum level for the stderr sink.
        json: Serialize each record (extras included) as one JSON line.
    """
    logger.remove()
    logger.configure(extra={"thread": NO_THREAD})
    if json:
        logger.add(sys.stderr, level=level, serialize=True)
    else:
        logger.add(sys.stderr, level=level, format=_TEXT_FORMAT, colorize=True)
    route_stdlib_logging()
