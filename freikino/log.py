"""Levelled logging to the standard streams."""

from __future__ import annotations

import enum
import sys
from typing import Any

_FORMAT_ERROR = "[log format error]"


class Level(enum.IntEnum):
    """Severity of a log line."""

    TRACE = 0
    DEBUG = 1
    INFO = 2
    WARN = 3
    ERROR = 4

    @property
    def tag(self) -> str:
        """The fixed-width prefix written before the message."""
        return _TAGS[self]


_TAGS = {
    Level.TRACE: "[TRACE] ",
    Level.DEBUG: "[DEBUG] ",
    Level.INFO: "[INFO ] ",
    Level.WARN: "[WARN ] ",
    Level.ERROR: "[ERROR] ",
}


def safe_format(fmt: str, *args: Any, **kwargs: Any) -> str:
    """Format ``fmt`` with ``str.format``; never raises."""
    try:
        return fmt.format(*args, **kwargs)
    except Exception:
        return _FORMAT_ERROR


def write(level: Level, msg: str) -> None:
    """Write one tagged line; warnings and errors go to stderr. Never raises."""
    stream = sys.stderr if level in (Level.WARN, Level.ERROR) else sys.stdout
    if stream is None:
        return
    try:
        stream.write(f"{level.tag}{msg}\n")
        stream.flush()
    except (OSError, ValueError):
        pass


def trace(fmt: str, *args: Any, **kwargs: Any) -> None:
    write(Level.TRACE, safe_format(fmt, *args, **kwargs))


def debug(fmt: str, *args: Any, **kwargs: Any) -> None:
    write(Level.DEBUG, safe_format(fmt, *args, **kwargs))


def info(fmt: str, *args: Any, **kwargs: Any) -> None:
    write(Level.INFO, safe_format(fmt, *args, **kwargs))


def warn(fmt: str, *args: Any, **kwargs: Any) -> None:
    write(Level.WARN, safe_format(fmt, *args, **kwargs))


def error(fmt: str, *args: Any, **kwargs: Any) -> None:
    write(Level.ERROR, safe_format(fmt, *args, **kwargs))