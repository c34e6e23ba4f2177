# ezfeed

Building blocks for a streaming source client that feeds media files to a
streaming server through external decoder and encoder programs. The package
uses only the standard library and runs on POSIX systems.

## Modules

- **`ezfeed.playlist`** – `Playlist.read(filename)` reads a playlist file, or
  standard input when no filename is given: one path per line, lines starting
  with `#` and empty lines are skipped, over-long lines are logged and
  dropped. `Playlist.program(filename)` instead runs an executable program
  each time `get_next()` is called and takes the first line it prints as the
  next track; the program must not be world-writeable. A playlist can be
  walked with `get_next()` (returning `None` at the end), stepped over with
  `skip_next()`, inspected with `num_items()` and `position()`, repositioned
  with `goto_entry()` and `rewind()`, read again with `reread()` and put in
  random order with `shuffle()`. These are no-ops for program playlists.
  Failures raise `PlaylistError`.
- **`ezfeed.mdata`** – `Metadata` holds filename, name, artist, album, title,
  song information and length of a track. `parse_file()` reads tags embedded
  in Ogg Vorbis, Ogg Opus and FLAC files and ID3v1 tags; files without
  recognisable tags get their base name as song information. `run_program()`
  runs a metadata program with the arguments `artist`, `album`, `title` and
  then with none, taking the first output line each time. `refresh()` repeats
  the last of the two, and `normalize_strings` collapses runs of spaces.
  `strformat()` expands the placeholders `@a@` (artist), `@b@` (album),
  `@t@` (title), `@T@` (filename) and `@s@` (song information). Failures
  raise `MetadataError`.
- **`ezfeed.source`** – pieces of the streaming loop. `SignalState.handle()`
  can be installed with `signal.signal()` for the signals in
  `HANDLED_SIGNALS` and records quit (TERM, INT), playlist reread (HUP),
  track skip (USR1) and metadata query (USR2) requests.
  `build_reencode_command()` builds the `decoder | encoder` shell pipeline,
  replacing placeholders with shell-quoted metadata (`@M@` for the song
  information or the formatted metadata). `get_time_string()` formats a
  duration as `1h02m03s`. `is_playlist_mode()` tells whether an intake of
  type `program`, `playlist` or `autodetect` (with an `.m3u` or `.txt` name)
  is played as a playlist.
- **`ezfeed.values`** – parsing of configuration values (`parse_string()`
  with an optional size limit, `parse_boolean()`, `parse_int()`,
  `parse_uint()`) and placeholder checks (`check_prohibited()`,
  `check_duplicate()`, `check_required()`), raising `ConfigValueError` with
  a short reason such as `"empty"`, `"invalid"` or
  `"duplicate placeholder @T@"`.
- **`ezfeed.util`** – `shellquote()`, `expand_words()`, `strrcmp()` and
  `strrcasecmp()` suffix comparison, `char2utf8()` and `utf82char()`
  character-set conversion, `get_progname()`, and `write_pid_file()`, which
  writes and locks a pid file removed at exit and raises `OSError` on
  failure.
- **`ezfeed.log`** – `init()` logs to standard error tagged with program
  name and pid; `alert()`, `error()` and `warning()` always log, while
  `notice()`, `info()` and `debug()` need a verbosity of 1, 2 and 3 set with
  `set_verbosity()`. Each returns 1 when the message was emitted, else 0.

## Example

```python
from ezfeed.playlist import Playlist
from ezfeed.util import shellquote

playlist = Playlist.read("music.m3u")
playlist.shuffle()
while (track := playlist.get_next()) is not None:
    print(shellquote(track, 0))
```

Shell quoting wraps text in single quotes and escapes embedded quotes, so
`shellquote("foo'bar", 0)` gives `'foo'\''bar'`.

## What it does not do

The package has no command to run and no configuration file reader, and it
does not connect to or send data to a streaming server. Callers supply the
decoder, encoder and metadata programs themselves and drive the streaming
loop with these pieces.

Tests use pytest and are available through the `test` extra.