"""
Station registry and poll loop.

Holds every live station in memory and drives the rotation engine over them
on a fixed-rate timer. Stations reconcile independently: a slow station is
skipped on later ticks until its pass completes, without holding up the rest.
"""

import asyncio
from dataclasses import replace
from datetime import datetime
from typing import Optional

from loguru import logger

from chill_radio.core.config import RadioConfig
from chill_radio.domain.playlists.models import Playlist

from .models import ScheduledTrack, Station
from .notifier import StationChangeNotifier, Subscription
from .rotation import Clock, RotationEngine
from .store import RadioStore


class StationRegistry:
    """Process-wide set of live stations.

    Args:
        store: Persistence collaborator
        config: Rotation settings, validated on start()
        notifier: Change feed; a private one is created when omitted
        clock: Source of "now" for the rotation engine
    """

    def __init__(
        self,
        store: RadioStore,
        config: RadioConfig,
        notifier: Optional[StationChangeNotifier] = None,
        clock: Clock = datetime.now,
    ) -> None:
        self.store = store
        self.config = config
        self.notifier = notifier if notifier is not None else StationChangeNotifier()
        self.clock = clock
        self.engine = RotationEngine(store, config, self.notifier, clock)

        self._stations: dict[int, Station] = {}
        self._in_flight: dict[int, asyncio.Task] = {}
        self._retiring: set[int] = set()
        self._manage_lock = asyncio.Lock()
        self._loop_task: Optional[asyncio.Task] = None
        self._stopping = asyncio.Event()
        self.running = False

    # === Lifecycle ===

    async def start(self) -> "StationRegistry":
        """Load stations, reconcile them once, then arm the poll loop.

        Raises:
            ConfigurationError: If the rotation settings are invalid
            PersistenceError: If the initial load fails
        """
        if self.running:
            return self

        self.config.validate()
        self._stations = await self._load_stations()
        self._stopping.clear()
        self.running = True
        logger.info(f"Loaded {len(self._stations)} station(s)")

        await self.reconcile_all()

        if self.config.polling_interval_ms and not self._stopping.is_set():
            self._loop_task = asyncio.create_task(self._poll_loop(), name="station-poll-loop")
        return self

    async def stop(self) -> None:
        """Stop scheduling passes, let in-flight ones finish, clear stations.

        Persisted schedules are left untouched.
        """
        self._stopping.set()
        if self._loop_task is not None:
            await self._loop_task
            self._loop_task = None

        in_flight = list(self._in_flight.values())
        if in_flight:
            await asyncio.gather(*in_flight, return_exceptions=True)

        self._stations.clear()
        self._in_flight.clear()
        self.running = False
        logger.info("Station registry stopped")

    async def _load_stations(self) -> dict[int, Station]:
        records = await self.store.load_all_stations()
        timelines = await asyncio.gather(
            *(self.store.load_scheduled_tracks(record.id) for record in records)
        )
        return {
            record.id: Station.from_record(record, tracks)
            for record, tracks in zip(records, timelines)
        }

    # === Reconciliation ===

    async def reconcile_all(self) -> None:
        """Run one pass over every station that is not already reconciling."""
        tasks = self._launch_pass()
        if tasks:
            await asyncio.gather(*tasks)

    def _launch_pass(self) -> list[asyncio.Task]:
        tasks = []
        for station in list(self._stations.values()):
            if station.id in self._retiring:
                continue
            running = self._in_flight.get(station.id)
            if running is not None and not running.done():
                logger.debug(f"Station {station.id} still reconciling, skipping tick")
                continue
            task = asyncio.create_task(
                self._reconcile_station(station), name=f"reconcile-station-{station.id}"
            )
            self._in_flight[station.id] = task
            task.add_done_callback(
                lambda t, station_id=station.id: self._forget(station_id, t)
            )
            tasks.append(task)
        return tasks

    def _forget(self, station_id: int, task: asyncio.Task) -> None:
        if self._in_flight.get(station_id) is task:
            del self._in_flight[station_id]

    async def _reconcile_station(self, station: Station) -> None:
        try:
            await self.engine.reconcile(station)
        except Exception:
            logger.exception(f"Unexpected error reconciling station {station.id}")

    async def _poll_loop(self) -> None:
        loop = asyncio.get_running_loop()
        interval = self.config.polling_interval_ms / 1000
        next_tick = loop.time()

        while not self._stopping.is_set():
            next_tick += interval
            now = loop.time()
            if now - next_tick > interval:
                # Fell behind by more than a whole tick; re-base the schedule
                next_tick = now
            try:
                await asyncio.wait_for(
                    self._stopping.wait(), timeout=max(0.0, next_tick - now)
                )
            except asyncio.TimeoutError:
                pass
            if self._stopping.is_set():
                break
            self._launch_pass()

    # === Read access ===

    def get_station(self, station_id: int) -> Optional[Station]:
        station = self._stations.get(station_id)
        return station.snapshot() if station else None

    def list_stations(self) -> list[Station]:
        return [station.snapshot() for station in self._stations.values()]

    def current_track(self, station_id: int) -> Optional[ScheduledTrack]:
        station = self._stations.get(station_id)
        return station.current_track(self.clock()) if station else None

    def subscribe(self) -> Subscription:
        return self.notifier.subscribe()

    # === Station management ===
    # Create, update and delete run one at a time under _manage_lock

    async def create_station(self, playlist: Playlist) -> Optional[Station]:
        """Create an empty station for playlist.

        Returns:
            The new station, or None if the playlist has no id or the
            station already exists
        """
        if not playlist.id:
            return None

        async with self._manage_lock:
            if playlist.id in self._stations:
                return None

            station = Station(id=playlist.id, name=playlist.name)
            await self.store.insert_station(station.record)
            self._stations[station.id] = station
            return station.snapshot()

    async def update_station(self, playlist: Playlist) -> Optional[Station]:
        """Rename the station of playlist.

        Returns:
            The renamed station, or None if it does not exist
        """
        if not playlist.id:
            return None

        async with self._manage_lock:
            station = self._stations.get(playlist.id)
            if station is None:
                return None

            await self.store.update_station(replace(station.record, name=playlist.name))
            station.name = playlist.name
            return station.snapshot()

    async def delete_station(self, station_id: int) -> bool:
        """Remove a station from the registry and from persistence.

        A pass already running for the station is allowed to finish first;
        no new pass is started for it meanwhile.

        Returns:
            True if deleted, False if the station does not exist
        """
        async with self._manage_lock:
            if station_id not in self._stations:
                return False

            self._retiring.add(station_id)
            try:
                running = self._in_flight.get(station_id)
                if running is not None:
                    await asyncio.wait({running})
                await self.store.delete_station(station_id)
                self._stations.pop(station_id, None)
            finally:
                self._retiring.discard(station_id)
            logger.info(f"Station {station_id} removed from registry")
            return True
