"""
Playlist domain module.

Playlists are the catalogs that radio stations rotate through. Editing them
happens elsewhere; this module only reads them and keeps their play
statistics.
"""

from .models import Playlist
from .rotation import get_least_played_tracks, get_playlist, record_play

__all__ = [
    "Playlist",
    "get_playlist",
    "get_least_played_tracks",
    "record_play",
]
