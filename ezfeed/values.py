"""Parsing and checking of configuration values."""

from __future__ import annotations

import re

__all__ = [
    "ConfigValueError",
    "PLACEHOLDER_METADATA",
    "PLACEHOLDER_TRACK",
    "PLACEHOLDER_STRING",
    "PLACEHOLDER_ARTIST",
    "PLACEHOLDER_ALBUM",
    "PLACEHOLDER_TITLE",
    "UCREDS_SIZE",
    "CSUITE_SIZE",
    "parse_string",
    "parse_boolean",
    "parse_uint",
    "parse_int",
    "check_prohibited",
    "check_duplicate",
    "check_required",
]

PLACEHOLDER_METADATA = "@M@"
PLACEHOLDER_TRACK = "@T@"
PLACEHOLDER_STRING = "@s@"
PLACEHOLDER_ARTIST = "@a@"
PLACEHOLDER_ALBUM = "@b@"
PLACEHOLDER_TITLE = "@t@"

UCREDS_SIZE = 256
CSUITE_SIZE = 2048

UINT_MAX = 2**32 - 1
INT_MIN = -(2**31)
INT_MAX = 2**31 - 1

_TRUE_WORDS = frozenset({"true", "yes", "1"})
_FALSE_WORDS = frozenset({"false", "no", "0"})
_NUMBER = re.compile(r"\s*[+-]?\d+")


class ConfigValueError(ValueError):
    """A configuration value was rejected; the message says why."""


def _require(value: str | None) -> str:
    if not value:
        raise ConfigValueError("empty")
    return value


def parse_string(value: str | None, max_size: int | None = None) -> str:
    """Accept a non-empty string that, if max_size is given, fits a buffer of that size."""
    value = _require(value)
    if max_size is not None and len(value.encode("utf-8")) >= max_size:
        raise ConfigValueError("too long")
    return value


def parse_boolean(value: str | None) -> bool:
    """Parse true/yes/1 or false/no/0, ignoring case."""
    word = _require(value).lower()
    if word in _TRUE_WORDS:
        return True
    if word in _FALSE_WORDS:
        return False
    raise ConfigValueError("invalid")


def _parse_ranged(value: str | None, low: int, high: int) -> int:
    text = _require(value)
    if not _NUMBER.fullmatch(text):
        raise ConfigValueError("invalid")
    number = int(text)
    if number < low:
        raise ConfigValueError("too small")
    if number > high:
        raise ConfigValueError("too large")
    return number


def parse_uint(value: str | None) -> int:
    """Parse a decimal number in the unsigned 32-bit range."""
    return _parse_ranged(value, 0, UINT_MAX)


def parse_int(value: str | None) -> int:
    """Parse a decimal number in the signed 32-bit range."""
    return _parse_ranged(value, INT_MIN, INT_MAX)


def check_prohibited(text: str, placeholder: str) -> None:
    """Reject text that contains the placeholder."""
    if placeholder in text:
        raise ConfigValueError(f"prohibited placeholder {placeholder}")


def check_duplicate(text: str, placeholder: str) -> None:
    """Reject text that contains the placeholder more than once."""
    first = text.find(placeholder)
    if first >= 0 and placeholder in text[first + len(placeholder):]:
        raise ConfigValueError(f"duplicate placeholder {placeholder}")


def check_required(text: str, placeholder: str) -> None:
    """Reject text that lacks the placeholder."""
    if placeholder not in text:
        raise ConfigValueError(f"missing placeholder {placeholder}")