"""
Persistence boundary of the radio scheduler.

RadioStore is what the rotation engine and the station registry talk to.
SqliteRadioStore implements it over the SQLite schema, running each query
in a worker thread so the event loop never blocks on disk.
"""

import asyncio
import sqlite3
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Optional, Protocol, TypeVar

from chill_radio.core.database import get_db_connection
from chill_radio.core.exceptions import PersistenceError
from chill_radio.domain.library.models import Track
from chill_radio.domain.playlists import rotation as plays

from . import schedule, stations
from .models import ScheduledTrack, StationRecord

T = TypeVar("T")


class RadioStore(Protocol):
    """Persistence operations consumed by the scheduler."""

    async def load_all_stations(self) -> list[StationRecord]: ...

    async def load_scheduled_tracks(self, station_id: int) -> list[ScheduledTrack]: ...

    async def insert_scheduled_track(self, entry: ScheduledTrack) -> None: ...

    async def delete_scheduled_track(self, station_id: int, track_id: int) -> None: ...

    async def select_least_played_tracks(
        self, station_id: int, count: int, not_played_since: datetime
    ) -> list[Track]: ...

    async def record_play(
        self, station_id: int, track_id: int, played_at: datetime
    ) -> None: ...

    async def insert_station(self, station: StationRecord) -> None: ...

    async def update_station(self, station: StationRecord) -> None: ...

    async def delete_station(self, station_id: int) -> None: ...


class SqliteRadioStore:
    """RadioStore backed by the Chill Radio SQLite database."""

    def __init__(self, db_path: Path) -> None:
        self.db_path = db_path

    def _run(
        self,
        operation: Callable[..., T],
        *args: Any,
        station_id: Optional[int] = None,
    ) -> T:
        try:
            with get_db_connection(self.db_path) as conn:
                return operation(conn, *args)
        except sqlite3.Error as e:
            raise PersistenceError(
                f"{operation.__name__} failed: {e}", station_id=station_id
            ) from e

    async def _call(
        self,
        operation: Callable[..., T],
        *args: Any,
        station_id: Optional[int] = None,
    ) -> T:
        return await asyncio.to_thread(
            self._run, operation, *args, station_id=station_id
        )

    async def load_all_stations(self) -> list[StationRecord]:
        return await self._call(stations.get_all_stations)

    async def load_scheduled_tracks(self, station_id: int) -> list[ScheduledTrack]:
        return await self._call(
            schedule.get_scheduled_tracks, station_id, station_id=station_id
        )

    async def insert_scheduled_track(self, entry: ScheduledTrack) -> None:
        await self._call(
            schedule.insert_scheduled_track, entry, station_id=entry.station_id
        )

    async def delete_scheduled_track(self, station_id: int, track_id: int) -> None:
        await self._call(
            schedule.delete_scheduled_track,
            station_id,
            track_id,
            station_id=station_id,
        )

    async def select_least_played_tracks(
        self, station_id: int, count: int, not_played_since: datetime
    ) -> list[Track]:
        return await self._call(
            plays.get_least_played_tracks,
            station_id,
            count,
            not_played_since,
            station_id=station_id,
        )

    async def record_play(
        self, station_id: int, track_id: int, played_at: datetime
    ) -> None:
        await self._call(
            plays.record_play, station_id, track_id, played_at, station_id=station_id
        )

    async def insert_station(self, station: StationRecord) -> None:
        await self._call(stations.insert_station, station, station_id=station.id)

    async def update_station(self, station: StationRecord) -> None:
        await self._call(stations.update_station, station, station_id=station.id)

    async def delete_station(self, station_id: int) -> None:
        await self._call(stations.delete_station, station_id, station_id=station_id)
