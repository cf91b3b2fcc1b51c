"""Chill Radio - continuous playback scheduler for playlist-backed radio stations."""

__version__ = "0.1.0"
