"""Playlists read from files or produced one entry at a time by a program."""

from __future__ import annotations

import os
import random
import stat
import subprocess
import sys
from typing import BinaryIO

from . import log

__all__ = ["PlaylistError", "Playlist"]

# Longest accepted playlist line, matching a path buffer of 4096 bytes.
_LINE_MAX = 4095
# Longest accepted line of program output.
_PROGRAM_LINE_MAX = 4096


class PlaylistError(Exception):
    """A playlist could not be read or its program cannot be used."""


def _strip_eol(line: bytes) -> bytes:
    return line.split(b"\n", 1)[0].split(b"\r", 1)[0]


class Playlist:
    """An ordered list of tracks with a current position, or a track program."""

    def __init__(self, filename: str, entries=None, *, program: bool = False) -> None:
        self.filename = filename
        self._entries: list[str] = list(entries or [])
        self._index = 0
        self._program = program
        self._program_track: str | None = None

    @property
    def is_program(self) -> bool:
        """Whether entries come from running a program."""
        return self._program

    @classmethod
    def read(cls, filename: str | None = None) -> Playlist:
        """Read a playlist file (one path per line, '#' starts a comment).

        With no filename the playlist is read from standard input.
        """
        if filename is None:
            return cls._parse("stdin", sys.stdin.buffer)
        try:
            fh = open(filename, "rb")
        except OSError as exc:
            raise PlaylistError(f"{filename}: {exc.strerror}") from exc
        with fh:
            return cls._parse(filename, fh)

    @classmethod
    def _parse(cls, name: str, stream: BinaryIO) -> Playlist:
        entries = []
        try:
            for line_no, raw in enumerate(iter(lambda: stream.readline(_LINE_MAX), b""), 1):
                buf = raw.split(b"\0", 1)[0]
                if len(buf) == _LINE_MAX:
                    log.error("%s[%d]: file or path name too long", name, line_no)
                    for char in iter(lambda: stream.readline(1), b""):
                        if char == b"\n":
                            break
                    continue
                if not buf or buf.startswith(b"#"):
                    continue
                buf = _strip_eol(buf)
                if buf:
                    entries.append(os.fsdecode(buf))
        except OSError as exc:
            raise PlaylistError(f"playlist_read: {name}: {exc.strerror}") from exc
        return cls(name, entries)

    @classmethod
    def program(cls, filename: str) -> Playlist:
        """Use a program that prints the next track's path each time it runs."""
        try:
            st = os.stat(filename)
        except OSError as exc:
            raise PlaylistError(f"{filename}: {exc.strerror}") from exc
        if st.st_mode & stat.S_IWOTH:
            raise PlaylistError(f"{filename}: world writeable")
        if not st.st_mode & (stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH):
            raise PlaylistError(f"{filename}: not an executable program")
        return cls(filename, program=True)

    def _run_program(self) -> str | None:
        sys.stdout.flush()
        sys.stderr.flush()
        log.debug("running command: %s", self.filename)
        try:
            proc = subprocess.Popen(self.filename, shell=True, stdout=subprocess.PIPE)
        except OSError as exc:
            log.error("execution error: %s: %s", self.filename, exc.strerror)
            return None
        output, _ = proc.communicate()

        newline = output.find(b"\n")
        line = output[:newline + 1] if newline >= 0 else output
        line = line[:_PROGRAM_LINE_MAX]
        if not line:
            log.error("%s: output read error: EOF", self.filename)
            return None
        line = line.split(b"\0", 1)[0]
        if len(line) == _PROGRAM_LINE_MAX:
            log.error("%s: output too long", self.filename)
            return None
        line = _strip_eol(line)
        if not line:
            return None
        self._program_track = os.fsdecode(line)
        return self._program_track

    def get_next(self) -> str | None:
        """Return the next entry, or None at the end of the playlist."""
        if self._program:
            return self._run_program()
        if self._index >= len(self._entries):
            return None
        entry = self._entries[self._index]
        self._index += 1
        return entry

    def skip_next(self) -> None:
        """Skip the entry that would be returned next."""
        if self._program:
            return
        if self._index < len(self._entries):
            self._index += 1

    def num_items(self) -> int:
        """Number of entries; 0 for a program playlist."""
        return 0 if self._program else len(self._entries)

    def position(self) -> int:
        """Number of entries already handed out; 0 for a program playlist."""
        return 0 if self._program else self._index

    def goto_entry(self, entry: str) -> bool:
        """Position at the first entry equal to entry, so get_next() returns it."""
        if self._program:
            return False
        try:
            self._index = self._entries.index(entry)
        except ValueError:
            return False
        return True

    def rewind(self) -> None:
        """Go back to the first entry without rereading the file."""
        if not self._program:
            self._index = 0

    def reread(self) -> bool:
        """Read the playlist file again and rewind.

        Returns False for a program playlist; raises PlaylistError if the
        file cannot be read, leaving the playlist as it was.
        """
        if self._program:
            return False
        fresh = Playlist.read(self.filename)
        self._entries = fresh._entries
        self._index = 0
        return True

    def shuffle(self) -> None:
        """Put the entries in a random order."""
        if self._program or len(self._entries) < 2:
            return
        random.SystemRandom().shuffle(self._entries)