"""Shared fixtures: an in-memory RadioStore, a controllable clock, sample tracks."""

import asyncio
from datetime import datetime, timedelta
from typing import Optional

import pytest

from chill_radio.core.config import RadioConfig
from chill_radio.core.exceptions import PersistenceError
from chill_radio.domain.library.models import Track
from chill_radio.domain.radio.models import ScheduledTrack, StationRecord

T0 = datetime(2024, 4, 2, 12, 0, 0)


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


class FakeClock:
    """Clock whose time only moves when told to."""

    def __init__(self, now: datetime = T0) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, milliseconds: int) -> None:
        self.now += timedelta(milliseconds=milliseconds)


class FakeRadioStore:
    """RadioStore keeping everything in dicts and recording every call.

    candidates: track queue returned by select_least_played_tracks (in order,
    truncated to the requested count unless return_all_candidates is set).
    fail: maps an operation name to the exception it should raise.
    """

    def __init__(self) -> None:
        self.stations: dict[int, StationRecord] = {}
        self.schedule: dict[int, list[ScheduledTrack]] = {}
        self.candidates: dict[int, list[Track]] = {}
        self.return_all_candidates = False
        self.plays: list[tuple[int, int, datetime]] = []
        self.deleted: list[tuple[int, int]] = []
        self.inserted: list[ScheduledTrack] = []
        self.select_calls: list[tuple[int, int, datetime]] = []
        self.fail: dict[str, Exception] = {}

    def _check(self, operation: str, station_id: Optional[int] = None) -> None:
        error = self.fail.get(operation)
        if error is not None:
            raise error

    def add_station(self, station_id: int, name: str, tracks=()) -> None:
        self.stations[station_id] = StationRecord(id=station_id, name=name)
        self.schedule[station_id] = list(tracks)

    async def load_all_stations(self) -> list[StationRecord]:
        self._check("load_all_stations")
        return list(self.stations.values())

    async def load_scheduled_tracks(self, station_id: int) -> list[ScheduledTrack]:
        self._check("load_scheduled_tracks")
        return sorted(self.schedule.get(station_id, []), key=lambda t: t.start_time)

    async def insert_scheduled_track(self, entry: ScheduledTrack) -> None:
        self._check("insert_scheduled_track")
        self.inserted.append(entry)
        self.schedule.setdefault(entry.station_id, []).append(entry)

    async def delete_scheduled_track(self, station_id: int, track_id: int) -> None:
        self._check("delete_scheduled_track")
        self.deleted.append((station_id, track_id))
        self.schedule[station_id] = [
            t for t in self.schedule.get(station_id, []) if t.track.id != track_id
        ]

    async def select_least_played_tracks(
        self, station_id: int, count: int, not_played_since: datetime
    ) -> list[Track]:
        self._check("select_least_played_tracks")
        self.select_calls.append((station_id, count, not_played_since))
        queue = self.candidates.get(station_id, [])
        if self.return_all_candidates:
            return list(queue)
        return list(queue[:count])

    async def record_play(
        self, station_id: int, track_id: int, played_at: datetime
    ) -> None:
        self._check("record_play")
        self.plays.append((station_id, track_id, played_at))

    async def insert_station(self, station: StationRecord) -> None:
        self._check("insert_station")
        # Yield like a real store would, then enforce the primary key
        await asyncio.sleep(0)
        if station.id in self.stations:
            raise PersistenceError(f"station {station.id} already exists", station_id=station.id)
        self.stations[station.id] = station
        self.schedule.setdefault(station.id, [])

    async def update_station(self, station: StationRecord) -> None:
        self._check("update_station")
        self.stations[station.id] = station

    async def delete_station(self, station_id: int) -> None:
        self._check("delete_station")
        self.stations.pop(station_id, None)
        self.schedule.pop(station_id, None)


def make_track(track_id: int, duration: int = 60_000, artist: str = "Artist") -> Track:
    return Track(
        id=track_id,
        title=f"Track {track_id}",
        artist=f"{artist} {track_id}",
        duration=duration,
    )


def scheduled(track: Track, station_id: int, start: datetime, end: datetime) -> ScheduledTrack:
    return ScheduledTrack(track=track, station_id=station_id, start_time=start, end_time=end)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store() -> FakeRadioStore:
    return FakeRadioStore()


@pytest.fixture
def radio_config() -> RadioConfig:
    return RadioConfig(playlist_length=3, polling_interval_ms=0, min_shuffle_timeout_ms=600_000)


@pytest.fixture
def persistence_error() -> PersistenceError:
    return PersistenceError("database is locked")
