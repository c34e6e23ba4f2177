"""Playlists, track metadata, pipeline commands and logging for a streaming source client."""

__version__ = "1.0.0"

__all__ = ["log", "mdata", "playlist", "source", "util", "values"]