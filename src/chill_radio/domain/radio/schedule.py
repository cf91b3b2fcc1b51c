"""
Scheduled track persistence for radio.

Each row is one track placed on a station's timeline with absolute
start and end times.
"""

import sqlite3
from typing import Any, Mapping

from loguru import logger

from chill_radio.core.database import format_timestamp, parse_timestamp
from chill_radio.core.exceptions import InvariantViolation
from chill_radio.domain.library.catalog import row_to_track

from .models import ScheduledTrack


def _row_to_scheduled_track(row: Mapping[str, Any]) -> ScheduledTrack:
    """Convert a joined station_tracks/tracks row to ScheduledTrack."""
    return ScheduledTrack(
        track=row_to_track(row),
        station_id=row["station_id"],
        start_time=parse_timestamp(row["start_time"]),
        end_time=parse_timestamp(row["end_time"]),
    )


def get_scheduled_tracks(
    conn: sqlite3.Connection, station_id: int
) -> list[ScheduledTrack]:
    """Load a station's timeline.

    Rows with an empty play window are skipped with a warning.

    Args:
        conn: Database connection
        station_id: Station ID

    Returns:
        Scheduled tracks ordered by start time ascending
    """
    cursor = conn.execute(
        """
        SELECT st.station_id, st.start_time, st.end_time, t.*
        FROM station_tracks st
        JOIN tracks t ON t.id = st.track_id
        WHERE st.station_id = ?
        ORDER BY st.start_time ASC
        """,
        (station_id,),
    )

    entries = []
    for row in cursor.fetchall():
        try:
            entries.append(_row_to_scheduled_track(row))
        except InvariantViolation as e:
            logger.warning(f"Ignoring invalid schedule row: {e}")
    return entries


def insert_scheduled_track(conn: sqlite3.Connection, entry: ScheduledTrack) -> None:
    """Store a new scheduled track."""
    conn.execute(
        """
        INSERT INTO station_tracks (station_id, track_id, start_time, end_time)
        VALUES (?, ?, ?, ?)
        """,
        (
            entry.station_id,
            entry.track.id,
            format_timestamp(entry.start_time),
            format_timestamp(entry.end_time),
        ),
    )
    conn.commit()


def delete_scheduled_track(
    conn: sqlite3.Connection, station_id: int, track_id: int
) -> None:
    """Delete a scheduled track."""
    conn.execute(
        "DELETE FROM station_tracks WHERE station_id = ? AND track_id = ?",
        (station_id, track_id),
    )
    conn.commit()
