"""
SQLite database operations for Chill Radio
"""

import sqlite3
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Any, Iterator, Optional

from loguru import logger

# Database schema version for migrations
SCHEMA_VERSION = 1


def format_timestamp(value: datetime) -> str:
    """Serialize a timestamp with fixed millisecond precision (sortable as text)."""
    return value.isoformat(sep=" ", timespec="milliseconds")


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse datetime from either string (SQLite) or datetime object."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(value)


@contextmanager
def get_db_connection(db_path: Path) -> Iterator[sqlite3.Connection]:
    """Get a database connection with proper cleanup and concurrency support."""
    # WAL mode enables concurrent reads during writes
    conn = sqlite3.connect(db_path, timeout=30.0)
    conn.row_factory = sqlite3.Row  # Enable dict-like access
    conn.execute("PRAGMA journal_mode=WAL")
    conn.execute("PRAGMA foreign_keys=ON")

    try:
        yield conn
    finally:
        conn.close()


def migrate_database(conn: sqlite3.Connection, current_version: int) -> None:
    """Migrate database from current_version to latest schema."""
    if current_version < 1:
        conn.execute("""
            CREATE TABLE IF NOT EXISTS tracks (
                id INTEGER PRIMARY KEY,
                file_id INTEGER,
                artist TEXT,
                title TEXT NOT NULL,
                featured TEXT,
                likes INTEGER NOT NULL DEFAULT 0,
                img TEXT,
                duration INTEGER NOT NULL -- milliseconds
            )
        """)

        conn.execute("""
            CREATE TABLE IF NOT EXISTS playlists (
                id INTEGER PRIMARY KEY,
                name TEXT NOT NULL,
                date TIMESTAMP
            )
        """)

        conn.execute("""
            CREATE TABLE IF NOT EXISTS playlist_tracks (
                playlist_id INTEGER NOT NULL,
                track_id INTEGER NOT NULL,
                position INTEGER,
                play_count INTEGER NOT NULL DEFAULT 0,
                last_play TIMESTAMP,
                PRIMARY KEY (playlist_id, track_id),
                FOREIGN KEY (playlist_id) REFERENCES playlists (id) ON DELETE CASCADE,
                FOREIGN KEY (track_id) REFERENCES tracks (id) ON DELETE CASCADE
            )
        """)

        # A station's id is the id of the playlist it rotates
        conn.execute("""
            CREATE TABLE IF NOT EXISTS stations (
                id INTEGER PRIMARY KEY,
                name TEXT NOT NULL
            )
        """)

        conn.execute("""
            CREATE TABLE IF NOT EXISTS station_tracks (
                station_id INTEGER NOT NULL,
                track_id INTEGER NOT NULL,
                start_time TIMESTAMP NOT NULL,
                end_time TIMESTAMP NOT NULL,
                PRIMARY KEY (station_id, track_id),
                FOREIGN KEY (station_id) REFERENCES stations (id) ON DELETE CASCADE,
                FOREIGN KEY (track_id) REFERENCES tracks (id) ON DELETE CASCADE
            )
        """)

        conn.execute(
            "CREATE INDEX IF NOT EXISTS idx_station_tracks_start ON station_tracks (station_id, start_time)"
        )
        conn.execute(
            "CREATE INDEX IF NOT EXISTS idx_playlist_tracks_plays ON playlist_tracks (playlist_id, play_count)"
        )

        conn.commit()


def init_database(db_path: Path) -> None:
    """Initialize the database with required tables."""
    db_path.parent.mkdir(parents=True, exist_ok=True)

    with get_db_connection(db_path) as conn:
        conn.execute("""
            CREATE TABLE IF NOT EXISTS schema_version (
                version INTEGER PRIMARY KEY
            )
        """)

        cursor = conn.execute("SELECT MAX(version) AS version FROM schema_version")
        row = cursor.fetchone()
        current_version = row["version"] if row and row["version"] is not None else 0

        if current_version < SCHEMA_VERSION:
            migrate_database(conn, current_version)
            conn.execute(
                "INSERT OR REPLACE INTO schema_version (version) VALUES (?)",
                (SCHEMA_VERSION,),
            )
            conn.commit()
            logger.info(
                f"Migrated database {db_path} from v{current_version} to v{SCHEMA_VERSION}"
            )
