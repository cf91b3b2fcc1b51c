"""
Station persistence for radio.

CRUD operations for station rows using functional patterns.
"""

import sqlite3
from typing import Any, Mapping

from loguru import logger

from .models import StationRecord


def _row_to_station(row: Mapping[str, Any]) -> StationRecord:
    """Convert database row to StationRecord."""
    return StationRecord(id=row["id"], name=row["name"])


def get_all_stations(conn: sqlite3.Connection) -> list[StationRecord]:
    """Get all radio stations.

    Returns:
        List of all stations, ordered by id
    """
    cursor = conn.execute("SELECT * FROM stations ORDER BY id")
    return [_row_to_station(row) for row in cursor.fetchall()]


def insert_station(conn: sqlite3.Connection, station: StationRecord) -> None:
    """Store a new station.

    Args:
        conn: Database connection
        station: Station identity (id is the playlist id)
    """
    conn.execute(
        "INSERT INTO stations (id, name) VALUES (?, ?)",
        (station.id, station.name),
    )
    conn.commit()
    logger.info(f"Created station '{station.name}' with id {station.id}")


def update_station(conn: sqlite3.Connection, station: StationRecord) -> bool:
    """Rename an existing station.

    Returns:
        True if updated, False if station not found
    """
    cursor = conn.execute(
        "UPDATE stations SET name = ? WHERE id = ?",
        (station.name, station.id),
    )
    conn.commit()
    updated = cursor.rowcount > 0
    if updated:
        logger.info(f"Renamed station {station.id} to '{station.name}'")
    return updated


def delete_station(conn: sqlite3.Connection, station_id: int) -> bool:
    """Delete a station.

    This will cascade delete its scheduled tracks.

    Returns:
        True if deleted, False if station not found
    """
    cursor = conn.execute("DELETE FROM stations WHERE id = ?", (station_id,))
    conn.commit()
    deleted = cursor.rowcount > 0
    if deleted:
        logger.info(f"Deleted station {station_id}")
    return deleted
