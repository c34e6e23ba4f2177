"""Track metadata from tags embedded in media files or from an external program."""

from __future__ import annotations

import errno
import os
import stat
import struct
import subprocess
import sys
from dataclasses import dataclass, field

from . import log
from .util import char2utf8, expand_words
from .values import (
    PLACEHOLDER_ALBUM,
    PLACEHOLDER_ARTIST,
    PLACEHOLDER_STRING,
    PLACEHOLDER_TITLE,
    PLACEHOLDER_TRACK,
)

__all__ = ["MetadataError", "Metadata", "UNKNOWN_NAME"]

UNKNOWN_NAME = "[unknown]"

# Longest line read from a metadata program's output.
_LINE_MAX = 8191


class MetadataError(Exception):
    """Metadata could not be obtained; the message says why."""


@dataclass
class _Tags:
    artist: str
    album: str
    title: str
    length: int


def _vorbis_comments(data: bytes, offset: int) -> dict[str, str]:
    (vendor_len,) = struct.unpack_from("<I", data, offset)
    offset += 4 + vendor_len
    (count,) = struct.unpack_from("<I", data, offset)
    offset += 4
    fields: dict[str, str] = {}
    for _ in range(count):
        (size,) = struct.unpack_from("<I", data, offset)
        offset += 4
        entry = data[offset:offset + size].decode("utf-8", "replace")
        offset += size
        key, sep, value = entry.partition("=")
        if sep:
            fields.setdefault(key.upper(), value)
    return fields


def _tags_from_fields(fields: dict[str, str], length: int) -> _Tags:
    return _Tags(
        artist=fields.get("ARTIST", ""),
        album=fields.get("ALBUM", ""),
        title=fields.get("TITLE", ""),
        length=length,
    )


def _read_ogg(data: bytes) -> _Tags | None:
    pos = 0
    serial = None
    packets: list[bytes] = []
    partial = bytearray()
    granule_end = -1
    while data.startswith(b"OggS", pos):
        header = struct.unpack_from("<4sBBqIIIB", data, pos)
        granule, page_serial, nseg = header[3], header[4], header[7]
        lacing = data[pos + 27:pos + 27 + nseg]
        body = pos + 27 + nseg
        if serial is None:
            serial = page_serial
        if page_serial == serial:
            if granule != -1:
                granule_end = granule
            offset = body
            for lace in lacing:
                if len(packets) < 2:
                    partial += data[offset:offset + lace]
                    if lace < 255:
                        packets.append(bytes(partial))
                        partial.clear()
                offset += lace
        pos = body + sum(lacing)

    if len(packets) < 2:
        return None
    ident, comment = packets
    if ident.startswith(b"\x01vorbis") and comment.startswith(b"\x03vorbis"):
        (rate,) = struct.unpack_from("<I", ident, 12)
        length = granule_end // rate if rate and granule_end > 0 else 0
        return _tags_from_fields(_vorbis_comments(comment, 7), length)
    if ident.startswith(b"OpusHead") and comment.startswith(b"OpusTags"):
        (pre_skip,) = struct.unpack_from("<H", ident, 10)
        length = max(0, granule_end - pre_skip) // 48000
        return _tags_from_fields(_vorbis_comments(comment, 8), length)
    return None


def _read_flac(data: bytes) -> _Tags | None:
    if not data.startswith(b"fLaC"):
        return None
    pos = 4
    length = 0
    fields: dict[str, str] = {}
    while pos + 4 <= len(data):
        header = data[pos]
        size = int.from_bytes(data[pos + 1:pos + 4], "big")
        block = data[pos + 4:pos + 4 + size]
        kind = header & 0x7F
        if kind == 0 and len(block) >= 18:
            rate = (block[10] << 12) | (block[11] << 4) | (block[12] >> 4)
            total = ((block[13] & 0x0F) << 32) | int.from_bytes(block[14:18], "big")
            if rate:
                length = total // rate
        elif kind == 4:
            fields = _vorbis_comments(block, 0)
        pos += 4 + size
        if header & 0x80:
            break
    return _tags_from_fields(fields, length)


def _read_id3v1(data: bytes) -> _Tags | None:
    if len(data) < 128:
        return None
    tail = data[-128:]
    if not tail.startswith(b"TAG"):
        return None

    def text(start: int, end: int) -> str:
        return tail[start:end].split(b"\0", 1)[0].decode("latin-1").strip()

    return _Tags(artist=text(33, 63), album=text(63, 93), title=text(3, 33), length=0)


def _read_tags(filename: str) -> _Tags | None:
    """Read embedded tags, or return None if the file is not understood."""
    try:
        with open(filename, "rb") as fh:
            data = fh.read()
        for reader in (_read_ogg, _read_flac, _read_id3v1):
            tags = reader(data)
            if tags is not None:
                return tags
    except (OSError, struct.error, ValueError, IndexError):
        return None
    return None


def _name_from_filename(filename: str) -> str:
    base = os.path.basename(filename.rstrip("/")) or filename
    head, sep, tail = base.rpartition(".")
    stem = head if sep else tail
    return char2utf8(stem) if stem else UNKNOWN_NAME


def _normalize(text: str | None) -> str | None:
    if text is None:
        return None
    return " ".join(word for word in text.split(" ") if word)


def _first_line(data: bytes, limit: int) -> bytes:
    newline = data.find(b"\n")
    line = data[:newline + 1] if newline >= 0 else data
    return line[:limit].split(b"\0", 1)[0]


def _strip_eol(line: bytes) -> bytes:
    return line.split(b"\n", 1)[0].split(b"\r", 1)[0]


def _check_program(program: str, error_type: type[Exception]) -> None:
    try:
        st = os.stat(program)
    except OSError as exc:
        raise error_type(f"{program}: {exc.strerror}") from exc
    if st.st_mode & stat.S_IWOTH:
        raise error_type(f"{program}: world writeable")
    if not st.st_mode & (stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH):
        raise error_type(f"{program}: not an executable program")


def _run(program: str, request: str | None) -> str:
    cmd = f"{program} {request}" if request else program
    sys.stdout.flush()
    sys.stderr.flush()
    log.debug("running metadata command: %s", cmd)
    try:
        proc = subprocess.Popen(cmd, shell=True, stdout=subprocess.PIPE)
    except OSError as exc:
        raise MetadataError(f"{cmd}: execution error: {exc.strerror}") from exc
    output, _ = proc.communicate()
    if proc.returncode < 0:
        raise MetadataError(f"{program}: exited with signal {-proc.returncode}")
    if proc.returncode > 0:
        raise MetadataError(f"{program}: exited with error code {proc.returncode}")

    line = _first_line(output, _LINE_MAX)
    if len(line) == _LINE_MAX:
        log.warning("metadata output truncated: %s", cmd)
    return _strip_eol(line).decode("utf-8", "replace")


@dataclass
class Metadata:
    """Artist, album, title and related information about one track."""

    filename: str | None = None
    name: str | None = None
    artist: str | None = None
    album: str | None = None
    title: str | None = None
    songinfo: str | None = None
    length: int = -1
    normalize_strings: bool = False
    _from_program: bool = field(default=False, repr=False)

    def _clear(self) -> None:
        self.filename = None
        self.name = None
        self.artist = None
        self.album = None
        self.title = None
        self.songinfo = None
        self.length = -1
        self._from_program = False

    def _normalize_all(self) -> None:
        self.artist = _normalize(self.artist)
        self.album = _normalize(self.album)
        self.title = _normalize(self.title)
        self.songinfo = _normalize(self.songinfo)

    def _generate_songinfo(self) -> None:
        info = ""
        for part in (self.artist, self.title, self.album):
            if part is not None:
                if info:
                    info += " - "
                info += part
        self.songinfo = info or None

    def parse_file(self, filename: str) -> None:
        """Fill in metadata from the tags embedded in a media file.

        Raises MetadataError if the file is not readable; a file without
        recognisable tags gets its name as song information.
        """
        if not os.access(filename, os.R_OK):
            code = errno.EACCES if os.path.lexists(filename) else errno.ENOENT
            raise MetadataError(f"{filename}: {os.strerror(code)}")

        self._clear()
        self.filename = filename
        self.name = _name_from_filename(filename)

        tags = _read_tags(filename)
        if tags is None:
            log.info("%s: unable to extract metadata", filename)
            self.songinfo = self.name
            return

        self.artist = tags.artist or None
        self.album = tags.album or None
        self.title = tags.title or None
        self.length = tags.length
        if self.normalize_strings:
            self._normalize_all()
        self._generate_songinfo()
        self._from_program = False

    def run_program(self, program: str) -> None:
        """Fill in metadata from the output of an external program.

        The program is run once each with the arguments "artist", "album"
        and "title", and once without arguments for the song information.
        On failure MetadataError is raised and nothing is changed.
        """
        _check_program(program, MetadataError)

        artist = _run(program, "artist")
        album = _run(program, "album")
        title = _run(program, "title")
        songinfo = _run(program, None)

        self._clear()
        self.filename = program
        self.name = UNKNOWN_NAME
        self.artist = artist or None
        self.album = album or None
        self.title = title or None
        self.songinfo = songinfo or None
        if self.normalize_strings:
            self._normalize_all()
        self._from_program = True

    def refresh(self) -> None:
        """Obtain the metadata again from the same file or program."""
        if self.filename is None:
            raise MetadataError("no metadata source to refresh from")
        source = self.filename
        if self._from_program:
            self.run_program(source)
        else:
            self.parse_file(source)

    def strformat(self, fmt: str | None) -> str:
        """Expand the metadata placeholders in a format string."""
        if fmt is None:
            raise ValueError("no format string")
        replacements = [
            (PLACEHOLDER_ARTIST, self.artist or ""),
            (PLACEHOLDER_ALBUM, self.album or ""),
            (PLACEHOLDER_TITLE, self.title or ""),
            (PLACEHOLDER_TRACK, self.filename),
            (PLACEHOLDER_STRING, self.songinfo or ""),
        ]
        return expand_words(fmt, replacements) or ""