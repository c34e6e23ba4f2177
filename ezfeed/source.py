"""Pieces of the streaming source client: signals, status times and command building."""

from __future__ import annotations

import signal
from dataclasses import dataclass

from .mdata import Metadata
from .util import expand_words, shellquote, strrcasecmp, utf82char
from .values import (
    PLACEHOLDER_ALBUM,
    PLACEHOLDER_ARTIST,
    PLACEHOLDER_METADATA,
    PLACEHOLDER_TITLE,
    PLACEHOLDER_TRACK,
)

__all__ = [
    "HANDLED_SIGNALS",
    "PLAYLIST_EXTENSIONS",
    "SignalState",
    "get_time_string",
    "build_reencode_command",
    "is_playlist_mode",
]

HANDLED_SIGNALS = (
    signal.SIGTERM,
    signal.SIGINT,
    signal.SIGHUP,
    signal.SIGUSR1,
    signal.SIGUSR2,
)

PLAYLIST_EXTENSIONS = (".m3u", ".txt")


@dataclass
class SignalState:
    """Requests raised by signals and acted upon by the streaming loop."""

    quit: bool = False
    reread_playlist: bool = False
    reread_playlist_notify: bool = False
    skip_track: bool = False
    query_metadata: bool = False

    def handle(self, signum, frame) -> None:
        """Record the request a signal stands for; usable with signal.signal()."""
        if signum in (signal.SIGTERM, signal.SIGINT):
            self.quit = True
        elif signum == signal.SIGHUP:
            self.reread_playlist = True
            self.reread_playlist_notify = True
        elif signum == signal.SIGUSR1:
            self.skip_track = True
        elif signum == signal.SIGUSR2:
            self.query_metadata = True


def get_time_string(seconds: int) -> str | None:
    """Format a duration as hours, minutes and seconds; None if negative."""
    if seconds < 0:
        return None
    hours, rest = divmod(int(seconds), 3600)
    minutes, secs = divmod(rest, 60)
    return f"{hours}h{minutes:02d}m{secs:02d}s"


def _quoted(text: str | None) -> str:
    return shellquote(utf82char(text), 0)


def build_reencode_command(
    extension: str,
    filename: str,
    metadata: Metadata,
    decoder_program: str | None,
    encoder_program: str | None,
    metadata_program: str | None,
    metadata_format: str | None,
) -> str:
    """Build the shell pipeline that decodes a file and re-encodes it.

    Placeholders in the decoder and encoder programs are replaced by the
    shell-quoted metadata values. Raises ValueError if there is no decoder
    program for the file's extension.
    """
    if not decoder_program:
        raise ValueError(
            f"cannot decode: {filename}: unsupported file extension {extension}"
        )

    artist = _quoted(metadata.artist)
    album = _quoted(metadata.album)
    title = _quoted(metadata.title)
    songinfo = _quoted(metadata.songinfo)
    filename_quoted = shellquote(filename, 0)

    if metadata_program and metadata_format:
        custom_songinfo = _quoted(metadata.strformat(metadata_format))
    elif not metadata_program and PLACEHOLDER_TITLE in decoder_program:
        custom_songinfo = ""
    else:
        custom_songinfo = songinfo

    if (
        not metadata_program
        and encoder_program
        and PLACEHOLDER_TITLE in encoder_program
    ):
        custom_songinfo = ""

    replacements = [
        (PLACEHOLDER_ARTIST, artist),
        (PLACEHOLDER_ALBUM, album),
        (PLACEHOLDER_TITLE, title),
        (PLACEHOLDER_TRACK, filename_quoted),
        (PLACEHOLDER_METADATA, custom_songinfo),
    ]

    decoder = expand_words(decoder_program, replacements) or ""
    if encoder_program:
        encoder = expand_words(encoder_program, replacements) or ""
        return f"{decoder} | {encoder}"
    return decoder


def is_playlist_mode(intake_type: str, filename: str | None) -> bool:
    """Whether an intake is played as a playlist rather than a single file.

    Program and playlist intakes always are; an autodetected intake is if
    its filename ends in .m3u or .txt, ignoring case.
    """
    kind = (intake_type or "").lower()
    if kind in ("program", "playlist"):
        return True
    if kind == "autodetect" and filename is not None:
        return any(strrcasecmp(filename, ext) == 0 for ext in PLAYLIST_EXTENSIONS)
    return False