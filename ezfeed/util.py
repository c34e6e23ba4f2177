"""Small string, encoding and pid-file helpers."""

from __future__ import annotations

import atexit
import contextlib
import fcntl
import locale
import os
from collections.abc import Iterable, Mapping

__all__ = [
    "DEFAULT_PROGNAME",
    "get_progname",
    "write_pid_file",
    "strrcmp",
    "strrcasecmp",
    "char2utf8",
    "utf82char",
    "expand_words",
    "shellquote",
]

DEFAULT_PROGNAME = "ezfeed"
SHELLQUOTE_OUTLEN_MAX = 8191


class _PidFile:
    def __init__(self) -> None:
        self.path: str | None = None
        self.file = None
        self.pid = 0
        self.registered = False

    def cleanup(self) -> None:
        if self.path is not None and os.getpid() == self.pid:
            with contextlib.suppress(OSError):
                os.unlink(self.path)
            if self.file is not None:
                self.file.close()
                self.file = None


_pidfile = _PidFile()


def get_progname(argv0: str | None) -> str:
    """Return the last path component of argv0, or the default program name."""
    if argv0 is None:
        return DEFAULT_PROGNAME
    return argv0.rsplit("/", 1)[-1]


def write_pid_file(path: str | None) -> None:
    """Write and exclusively lock a pid file, removed again at exit.

    Raises OSError if the file cannot be written or locked.
    """
    if path is None:
        return
    state = _pidfile
    state.path = path
    if state.file is not None:
        state.file.close()
        state.file = None
    try:
        state.file = open(path, "w", encoding="ascii")
    except OSError:
        state.path = None
        raise

    pid = os.getpid()
    try:
        state.file.write(f"{pid}\n")
        state.file.flush()
        fcntl.flock(state.file.fileno(), fcntl.LOCK_EX | fcntl.LOCK_NB)
    except OSError:
        with contextlib.suppress(OSError):
            os.unlink(path)
        state.path = None
        state.file.close()
        state.file = None
        state.pid = 0
        raise

    state.pid = pid
    if not state.registered:
        atexit.register(state.cleanup)
        state.registered = True


def strrcmp(s: str, sub: str) -> int:
    """Return 0 if s ends with sub, 1 otherwise."""
    if len(sub) > len(s):
        return 1
    return 0 if s.endswith(sub) else 1


def strrcasecmp(s: str, sub: str) -> int:
    """Case-insensitive strrcmp()."""
    return strrcmp(s.lower(), sub.lower())


def _decode_substituting(data: bytes, encoding: str) -> str:
    """Decode bytes, replacing each undecodable byte with '?'."""
    parts = []
    while data:
        try:
            parts.append(data.decode(encoding))
            break
        except UnicodeDecodeError as exc:
            parts.append(data[: exc.start].decode(encoding))
            parts.append("?")
            data = data[exc.start + 1:]
    return "".join(parts)


def _codeset() -> str:
    return locale.getpreferredencoding(False) or "ascii"


def char2utf8(text: str | bytes | None) -> str:
    """Convert text in the locale's character set to a Unicode string."""
    if text is None:
        return ""
    if isinstance(text, bytes):
        return _decode_substituting(text, _codeset())
    return text


def utf82char(text: str | bytes | None) -> str:
    """Convert UTF-8 text to a string representable in the locale's character set.

    Characters the locale cannot represent become '?'.
    """
    if text is None:
        return ""
    if isinstance(text, bytes):
        text = _decode_substituting(text, "utf-8")
    codeset = _codeset()
    return text.encode(codeset, errors="replace").decode(codeset, errors="replace")


def expand_words(
    text: str,
    replacements: Mapping[str, str | None] | Iterable[tuple[str, str | None]] | None,
) -> str | None:
    """Replace placeholders in text, scanning from the end towards the start.

    At each position the first matching placeholder wins. Returns None for
    empty input.
    """
    if not text:
        return None
    if replacements is None:
        pairs: list[tuple[str, str | None]] = []
    elif isinstance(replacements, Mapping):
        pairs = list(replacements.items())
    else:
        pairs = list(replacements)

    out = text
    for i in reversed(range(len(text))):
        for old, new in pairs:
            if not old:
                break
            if out.startswith(old, i):
                out = out[:i] + (new or "") + out[i + len(old):]
                break
    return out


def shellquote(text: str, outlen_max: int = 0) -> str:
    """Quote text for a POSIX shell within single quotes.

    The result holds at most outlen_max characters (0 or anything above
    8191 means 8191); input that does not fit is cut off.
    """
    if not outlen_max or outlen_max > SHELLQUOTE_OUTLEN_MAX:
        outlen_max = SHELLQUOTE_OUTLEN_MAX
    remaining = outlen_max - 1
    out = ["'"]
    for ch in text:
        if remaining <= 1:
            break
        if ch == "'":
            if remaining <= 4:
                break
            out.append("'\\'")
            remaining -= 3
        out.append(ch)
        remaining -= 1
    out.append("'")
    return "".join(out)