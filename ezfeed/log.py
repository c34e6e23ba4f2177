"""Leveled logging to standard error, filtered by a verbosity setting."""

from __future__ import annotations

import enum
import logging
import os

__all__ = [
    "LogLevel",
    "init",
    "shutdown",
    "set_verbosity",
    "syserr",
    "alert",
    "error",
    "warning",
    "notice",
    "info",
    "debug",
]


class LogLevel(enum.IntEnum):
    """Message severities, most severe first."""

    ALERT = 0
    ERROR = 1
    WARNING = 2
    NOTICE = 3
    INFO = 4
    DEBUG = 5


# Minimum verbosity needed for a level to be emitted.
_THRESHOLDS = {
    LogLevel.ALERT: 0,
    LogLevel.ERROR: 0,
    LogLevel.WARNING: 0,
    LogLevel.NOTICE: 1,
    LogLevel.INFO: 2,
    LogLevel.DEBUG: 3,
}

_PY_LEVELS = {
    LogLevel.ALERT: logging.CRITICAL,
    LogLevel.ERROR: logging.ERROR,
    LogLevel.WARNING: logging.WARNING,
    LogLevel.NOTICE: logging.INFO,
    LogLevel.INFO: logging.INFO,
    LogLevel.DEBUG: logging.DEBUG,
}

_logger = logging.getLogger("ezfeed")
_logger.setLevel(logging.DEBUG)


class _State:
    verbosity = 0
    handler: logging.Handler | None = None


def _emit(level: LogLevel, fmt: str, args: tuple) -> int:
    level = LogLevel(level)
    if _State.verbosity < _THRESHOLDS[level]:
        return 0
    message = fmt % args if args else fmt
    _logger.log(_PY_LEVELS[level], message)
    return 1


def init(program_name: str | None) -> None:
    """Start logging to standard error, tagging lines with the program name and pid."""
    shutdown()
    name = (program_name or "").replace("%", "%%")
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(f"{name}[{os.getpid()}]: %(message)s"))
    _logger.addHandler(handler)
    _logger.propagate = False
    _State.handler = handler


def shutdown() -> None:
    """Stop logging through the handler installed by init()."""
    if _State.handler is not None:
        _logger.removeHandler(_State.handler)
        _State.handler.close()
        _State.handler = None
    _logger.propagate = True


def set_verbosity(verbosity: int) -> None:
    """Set how many of the lower-priority levels are emitted (0 to 3)."""
    _State.verbosity = verbosity


def syserr(level: LogLevel, error: int, prefix: str | None) -> int:
    """Log the description of an errno value; return 1 if logged, else 0."""
    if not error:
        return 0
    text = os.strerror(error)
    if prefix is not None:
        text = f"{prefix}: {text}"
    return _emit(level, "%s", (text,))


def alert(fmt: str, *args) -> int:
    """Log an alert; return 1 if emitted."""
    return _emit(LogLevel.ALERT, fmt, args)


def error(fmt: str, *args) -> int:
    """Log an error; return 1 if emitted."""
    return _emit(LogLevel.ERROR, fmt, args)


def warning(fmt: str, *args) -> int:
    """Log a warning; return 1 if emitted."""
    return _emit(LogLevel.WARNING, fmt, args)


def notice(fmt: str, *args) -> int:
    """Log a notice (verbosity 1 or more); return 1 if emitted."""
    return _emit(LogLevel.NOTICE, fmt, args)


def info(fmt: str, *args) -> int:
    """Log an informational message (verbosity 2 or more); return 1 if emitted."""
    return _emit(LogLevel.INFO, fmt, args)


def debug(fmt: str, *args) -> int:
    """Log a debug message (verbosity 3 or more); return 1 if emitted."""
    return _emit(LogLevel.DEBUG, fmt, args)