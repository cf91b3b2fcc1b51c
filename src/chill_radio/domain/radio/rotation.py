"""
Rotation engine: per-station timeline reconciliation.

One pass over a station expires tracks whose window has elapsed, tops the
timeline back up to the configured length with the least recently played
tracks of the station's playlist, and announces a change of the current
track.
"""

import asyncio
from datetime import datetime, timedelta
from typing import Callable, Optional

from loguru import logger

from chill_radio.core.config import RadioConfig
from chill_radio.core.exceptions import InvariantViolation, PersistenceError

from .models import ScheduledTrack, Station, StationChange
from .notifier import StationChangeNotifier
from .store import RadioStore

Clock = Callable[[], datetime]


def _track_key(entry: Optional[ScheduledTrack]) -> Optional[tuple[int, datetime]]:
    return (entry.track.id, entry.start_time) if entry else None


class RotationEngine:
    """Keeps station timelines filled and contiguous."""

    def __init__(
        self,
        store: RadioStore,
        config: RadioConfig,
        notifier: Optional[StationChangeNotifier] = None,
        clock: Clock = datetime.now,
    ) -> None:
        self.store = store
        self.config = config
        self.notifier = notifier
        self.clock = clock

    async def reconcile(self, station: Station) -> Optional[StationChange]:
        """Run one reconciliation pass over station.

        Persistence failures abort the remaining steps of this pass; whatever
        was already applied in memory stays and the next pass picks up from
        there.

        Returns:
            The change event if the current track changed, else None
        """
        now = self.clock()
        previous = station.current_track(now)

        try:
            await self._expire(station, now)
            await self._refill(station, now)
        except PersistenceError as e:
            logger.warning(f"Reconciliation of station {station.id} aborted: {e}")

        current = station.current_track(now)
        if _track_key(previous) == _track_key(current):
            return None

        change = StationChange(
            station=station.snapshot(),
            previous=previous,
            current=current,
            changed_at=now,
        )
        if self.notifier is not None:
            self.notifier.publish(change)
        return change

    async def _expire(self, station: Station, now: datetime) -> None:
        expired = [t for t in station.tracks if t.end_time < now]
        if not expired:
            return

        results = await asyncio.gather(
            *(
                self.store.delete_scheduled_track(station.id, entry.track.id)
                for entry in expired
            ),
            return_exceptions=True,
        )

        deleted = []
        failures: list[BaseException] = []
        for entry, result in zip(expired, results):
            if isinstance(result, BaseException):
                failures.append(result)
            else:
                deleted.append(entry)

        station.remove(deleted)
        if deleted:
            logger.debug(f"Expired {len(deleted)} track(s) on station {station.id}")

        for failure in failures:
            if not isinstance(failure, PersistenceError):
                raise failure
        if failures:
            raise PersistenceError(
                f"{len(failures)} of {len(expired)} expired track(s) could not be "
                f"deleted: {failures[0]}",
                station_id=station.id,
            ) from failures[0]

    async def _refill(self, station: Station, now: datetime) -> None:
        deficit = self.config.playlist_length - len(station.tracks)
        if deficit <= 0:
            return

        last = station.last_track
        last_end = last.end_time if last else now
        not_played_since = last_end - timedelta(
            milliseconds=self.config.min_shuffle_timeout_ms
        )

        candidates = await self.store.select_least_played_tracks(
            station.id, deficit, not_played_since
        )

        plays: list[asyncio.Task] = []
        filled = 0
        try:
            for track in candidates:
                if filled >= deficit:
                    break
                if station.has_track(track.id):
                    logger.debug(
                        f"Track {track.id} already scheduled on station {station.id}, skipping"
                    )
                    continue
                try:
                    entry = ScheduledTrack.schedule(track, station.id, last_end)
                except InvariantViolation as e:
                    logger.warning(f"Skipping candidate on station {station.id}: {e}")
                    continue

                await self.store.insert_scheduled_track(entry)
                station.append(entry)
                last_end = entry.end_time
                filled += 1
                logger.debug(
                    f"Scheduled '{track.track_name}' on station {station.id} "
                    f"at {entry.start_time:%H:%M:%S}"
                )

                plays.append(
                    asyncio.create_task(
                        self.store.record_play(station.id, track.id, entry.start_time)
                    )
                )
        finally:
            if plays:
                await self._settle_plays(station, plays)

        if filled < deficit:
            logger.debug(
                f"Station {station.id} short by {deficit - filled} track(s) after refill"
            )

    @staticmethod
    async def _settle_plays(station: Station, plays: list[asyncio.Task]) -> None:
        # Play statistics are best-effort; the schedule itself is already stored
        results = await asyncio.gather(*plays, return_exceptions=True)
        for result in results:
            if isinstance(result, PersistenceError):
                logger.warning(
                    f"Failed to record play on station {station.id}: {result}"
                )
            elif isinstance(result, BaseException):
                raise result
