"""
Play statistics for playlist rotation.

Least-recently-played selection and play recording against playlist_tracks.
"""

import sqlite3
from datetime import datetime
from typing import Optional

from loguru import logger

from chill_radio.core.database import format_timestamp, parse_timestamp
from chill_radio.domain.library.catalog import row_to_track
from chill_radio.domain.library.models import Track

from .models import Playlist


def get_playlist(conn: sqlite3.Connection, playlist_id: int) -> Optional[Playlist]:
    """Get a playlist by ID.

    Args:
        conn: Database connection
        playlist_id: Playlist ID

    Returns:
        Playlist or None if not found
    """
    cursor = conn.execute("SELECT * FROM playlists WHERE id = ?", (playlist_id,))
    row = cursor.fetchone()
    if not row:
        return None
    return Playlist(id=row["id"], name=row["name"], date=parse_timestamp(row["date"]))


def get_least_played_tracks(
    conn: sqlite3.Connection,
    playlist_id: int,
    limit: int,
    not_played_since: datetime,
) -> list[Track]:
    """Get the least played tracks of a playlist that are rested enough.

    Tracks whose last play is at or after not_played_since are excluded.
    Ties on play count are broken randomly.

    Args:
        conn: Database connection
        playlist_id: Playlist (station) ID
        limit: Number of tracks to return
        not_played_since: Tracks played at or after this time are excluded

    Returns:
        Tracks ordered by play count ascending
    """
    if limit <= 0:
        return []

    cursor = conn.execute(
        """
        SELECT t.*
        FROM playlist_tracks pt
        JOIN tracks t ON t.id = pt.track_id
        WHERE pt.playlist_id = ?
          AND (pt.last_play IS NULL OR pt.last_play < ?)
        ORDER BY pt.play_count ASC, RANDOM()
        LIMIT ?
        """,
        (playlist_id, format_timestamp(not_played_since), limit),
    )
    return [row_to_track(row) for row in cursor.fetchall()]


def record_play(
    conn: sqlite3.Connection,
    playlist_id: int,
    track_id: int,
    played_at: datetime,
) -> None:
    """Increment a track's play count and set its last play time.

    Args:
        conn: Database connection
        playlist_id: Playlist (station) ID
        track_id: Track ID
        played_at: Scheduled start of the play
    """
    cursor = conn.execute(
        """
        UPDATE playlist_tracks
        SET play_count = play_count + 1, last_play = ?
        WHERE playlist_id = ? AND track_id = ?
        """,
        (format_timestamp(played_at), playlist_id, track_id),
    )
    conn.commit()
    if cursor.rowcount == 0:
        logger.warning(
            f"Play of track {track_id} not recorded: not in playlist {playlist_id}"
        )
