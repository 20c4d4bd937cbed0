"""Structured console logging for the session driver and supervised scripts."""

from __future__ import annotations

import logging
import os
import sys
from datetime import UTC, datetime
from typing import TextIO

__all__ = [
    "ConsoleFormatter",
    "ERROR_SOURCE",
    "SYSTEM_SOURCE",
    "configure_logging",
    "highlight",
    "log_line",
]

SYSTEM_SOURCE = "SYS"
ERROR_SOURCE = "ERROR"

_BLUE = "\x1b[34m"
_RED = "\x1b[31m"
_RESET = "\x1b[0m"
_ROOT_LOGGER = "dev_session"


def highlight(text: object) -> str:
    """Wrap ``text`` in the blue escape used for script and profile names."""

    return f"{_BLUE}{text}{_RESET}"


class ConsoleFormatter(logging.Formatter):
    """Render ``[<UTC timestamp>] [<pid>] [<source>] <message>`` lines.

    Records may carry ``source`` and ``pid`` through ``extra=``; records
    without them are attributed to this process, as ``SYS`` or ``ERROR``
    depending on level.
    """

    def __init__(self, *, color: bool = True) -> None:
        super().__init__()
        self.color = color

    def format(self, record: logging.LogRecord) -> str:
        pid = getattr(record, "pid", None) or os.getpid()
        source = getattr(record, "source", None)
        if source is None:
            source = ERROR_SOURCE if record.levelno >= logging.ERROR else SYSTEM_SOURCE
        timestamp = datetime.fromtimestamp(record.created, UTC).isoformat(timespec="milliseconds")
        message = record.getMessage().rstrip("\r\n")
        if record.exc_info:
            message = f"{message}\n{self.formatException(record.exc_info)}"
        if self.color:
            tag_color = _RED if source == ERROR_SOURCE else _BLUE
            return f"[{timestamp}] [{_BLUE}{pid}{_RESET}] [{tag_color}{source}{_RESET}] {message}"
        return f"[{timestamp}] [{pid}] [{source}] {message}"


def configure_logging(
    *, verbose: bool = False, stream: TextIO | None = None, color: bool | None = None
) -> logging.Logger:
    """Install a single console handler on the ``dev_session`` logger."""

    target = stream or sys.stderr
    if color is None:
        color = target.isatty() and "NO_COLOR" not in os.environ
    logger = logging.getLogger(_ROOT_LOGGER)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    handler = logging.StreamHandler(target)
    handler.setFormatter(ConsoleFormatter(color=color))
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    logger.propagate = False
    return logger


def log_line(
    logger: logging.Logger,
    message: str,
    *,
    source: str,
    pid: int | None,
    level: int = logging.INFO,
) -> None:
    logger.log(level, message, extra={"source": source, "pid": pid})
