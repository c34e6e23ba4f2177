import signal

import pytest

from ezfeed.mdata import Metadata
from ezfeed.source import (
    SignalState,
    build_reencode_command,
    get_time_string,
    is_playlist_mode,
)
from ezfeed.util import shellquote


def _metadata():
    return Metadata(
        filename="x.ogg",
        name="x",
        artist="A",
        album="B",
        title="T",
        songinfo="A - T - B",
    )


def test_signal_quit():
    for sig in (signal.SIGTERM, signal.SIGINT):
        state = SignalState()
        state.handle(sig, None)
        assert state == SignalState(quit=True)


def test_signal_hup_rereads():
    state = SignalState()
    state.handle(signal.SIGHUP, None)
    assert state == SignalState(reread_playlist=True, reread_playlist_notify=True)


def test_signal_usr1_usr2():
    state = SignalState()
    state.handle(signal.SIGUSR1, None)
    assert state.skip_track is True
    assert state.query_metadata is False
    state.handle(signal.SIGUSR2, None)
    assert state.query_metadata is True


def test_signal_other_ignored():
    state = SignalState()
    state.handle(signal.SIGALRM, None)
    assert state == SignalState()


def test_time_string_zero():
    assert get_time_string(0) == "0h00m00s"


def test_time_string_negative():
    assert get_time_string(-1) is None


@pytest.mark.parametrize("seconds", [0, 59, 60, 3599, 3600, 3661, 86399, 360000])
def test_time_string_round_trip(seconds):
    text = get_time_string(seconds)
    hours, rest = text.split("h")
    minutes, rest = rest.split("m")
    secs = rest.rstrip("s")
    assert len(minutes) == 2 and len(secs) == 2
    assert int(hours) * 3600 + int(minutes) * 60 + int(secs) == seconds


def test_decoder_only():
    cmd = build_reencode_command(".ogg", "x.ogg", _metadata(), "dec @T@", None, None, None)
    assert cmd == "dec 'x.ogg'"


def test_decoder_and_encoder_metadata():
    cmd = build_reencode_command(
        ".ogg", "x.ogg", _metadata(), "dec @T@", "enc @M@ @a@ @b@", None, None
    )
    assert cmd == "dec 'x.ogg' | enc 'A - T - B' 'A' 'B'"


def test_title_in_decoder_empties_metadata():
    cmd = build_reencode_command(
        ".ogg", "x.ogg", _metadata(), "dec @T@ @t@ @M@", None, None, None
    )
    assert cmd == "dec 'x.ogg' 'T' "


def test_title_in_encoder_empties_metadata():
    cmd = build_reencode_command(
        ".ogg", "x.ogg", _metadata(), "dec @T@ @M@", "enc @t@", None, None
    )
    assert cmd == "dec 'x.ogg'  | enc 'T'"


def test_metadata_program_with_format():
    cmd = build_reencode_command(
        ".ogg", "x.ogg", _metadata(), "dec @T@ @M@", None, "/bin/meta", "@a@ - @t@"
    )
    assert cmd == "dec 'x.ogg' 'A - T'"


def test_metadata_program_without_format_keeps_songinfo():
    cmd = build_reencode_command(
        ".ogg", "x.ogg", _metadata(), "dec @T@ @t@ @M@", None, "/bin/meta", None
    )
    assert cmd == "dec 'x.ogg' 'T' 'A - T - B'"


def test_filename_is_quoted():
    name = "it's.ogg"
    cmd = build_reencode_command(".ogg", name, _metadata(), "dec @T@", None, None, None)
    assert cmd == "dec " + shellquote(name, 0)


def test_missing_values_quote_empty():
    md = Metadata(filename="x.ogg")
    cmd = build_reencode_command(".ogg", "x.ogg", md, "dec @T@ @a@", None, None, None)
    assert cmd == "dec 'x.ogg' ''"


def test_missing_decoder_raises():
    with pytest.raises(ValueError, match="unsupported file extension .xyz"):
        build_reencode_command(".xyz", "a.xyz", _metadata(), None, "enc", None, None)


@pytest.mark.parametrize(
    "intake, filename, expected",
    [
        ("program", None, True),
        ("playlist", "a.ogg", True),
        ("autodetect", "list.M3U", True),
        ("autodetect", "list.txt", True),
        ("autodetect", "song.ogg", False),
        ("file", "list.m3u", False),
        ("stdin", "list.txt", False),
    ],
)
def test_is_playlist_mode(intake, filename, expected):
    assert is_playlist_mode(intake, filename) is expected