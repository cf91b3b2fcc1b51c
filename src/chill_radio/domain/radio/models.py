"""
Radio domain models.

Contains data structures for representing stations, their scheduled
timelines, and now-playing transitions.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Optional

from chill_radio.core.exceptions import InvariantViolation
from chill_radio.domain.library.models import Track


@dataclass(frozen=True)
class ScheduledTrack:
    """A catalog track placed on a station's timeline.

    The play window is half-open: the track is playing from start_time until
    end_time, and end_time is always after start_time.
    """

    track: Track
    station_id: int
    start_time: datetime
    end_time: datetime

    def __post_init__(self) -> None:
        if self.end_time <= self.start_time:
            raise InvariantViolation(
                f"Track {self.track.id} on station {self.station_id} ends "
                f"({self.end_time}) before it starts ({self.start_time})"
            )

    @classmethod
    def schedule(
        cls, track: Track, station_id: int, start_time: datetime
    ) -> "ScheduledTrack":
        """Place a track at start_time for its full duration.

        Raises:
            InvariantViolation: If the track has no positive duration
        """
        if not track.duration or track.duration <= 0:
            raise InvariantViolation(
                f"Track {track.id} has non-positive duration {track.duration!r}"
            )
        return cls(
            track=track,
            station_id=station_id,
            start_time=start_time,
            end_time=start_time + timedelta(milliseconds=track.duration),
        )

    @property
    def duration(self) -> timedelta:
        return self.end_time - self.start_time

    def play_time(self, now: datetime) -> timedelta:
        """Time elapsed since the track started, clamped to its window."""
        return min(max(now - self.start_time, timedelta(0)), self.duration)

    def remaining_time(self, now: datetime) -> timedelta:
        """Time left until the track ends, clamped to its window."""
        return min(max(self.end_time - now, timedelta(0)), self.duration)


@dataclass(frozen=True)
class StationRecord:
    """Persisted identity of a station."""

    id: int
    name: str


@dataclass
class Station:
    """A live radio station and its forward-looking timeline.

    Tracks are ordered by start_time. Only the rotation engine mutates the
    timeline of a registered station; everything handed out to callers is a
    snapshot.
    """

    id: int
    name: str
    tracks: list[ScheduledTrack] = field(default_factory=list)

    @classmethod
    def from_record(
        cls, record: StationRecord, tracks: Optional[list[ScheduledTrack]] = None
    ) -> "Station":
        ordered = sorted(tracks or [], key=lambda t: t.start_time)
        return cls(id=record.id, name=record.name, tracks=ordered)

    @property
    def record(self) -> StationRecord:
        return StationRecord(id=self.id, name=self.name)

    @property
    def last_track(self) -> Optional[ScheduledTrack]:
        return self.tracks[-1] if self.tracks else None

    def current_track(self, now: datetime) -> Optional[ScheduledTrack]:
        """Return the head of the timeline if it has started by now."""
        if self.tracks and self.tracks[0].start_time <= now:
            return self.tracks[0]
        return None

    def next_track(self, now: datetime) -> Optional[ScheduledTrack]:
        """Return the track that follows the current one (or the first upcoming)."""
        if self.current_track(now) is None:
            return self.tracks[0] if self.tracks else None
        return self.tracks[1] if len(self.tracks) > 1 else None

    def has_track(self, track_id: int) -> bool:
        return any(t.track.id == track_id for t in self.tracks)

    def append(self, entry: ScheduledTrack) -> None:
        """Add an entry at the tail, keeping the timeline ordered."""
        if self.tracks and entry.start_time < self.tracks[-1].start_time:
            self.tracks.append(entry)
            self.tracks.sort(key=lambda t: t.start_time)
        else:
            self.tracks.append(entry)

    def remove(self, entries: list[ScheduledTrack]) -> None:
        gone = {id(e) for e in entries}
        self.tracks = [t for t in self.tracks if id(t) not in gone]

    def snapshot(self) -> "Station":
        """Copy whose timeline can be read without observing later mutations."""
        return Station(id=self.id, name=self.name, tracks=list(self.tracks))


@dataclass(frozen=True)
class StationChange:
    """Emitted whenever the current track of a station changes."""

    station: Station  # Snapshot taken when the change was detected
    previous: Optional[ScheduledTrack]
    current: Optional[ScheduledTrack]
    changed_at: datetime
