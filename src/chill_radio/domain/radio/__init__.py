"""
Radio domain module.

Keeps a forward-looking, contiguous timeline of tracks for every station,
replenishes it from the least recently played tracks of the station's
playlist, and broadcasts now-playing changes.
"""

from .models import ScheduledTrack, Station, StationChange, StationRecord
from .notifier import StationChangeNotifier, Subscription
from .registry import StationRegistry
from .rotation import RotationEngine
from .store import RadioStore, SqliteRadioStore

__all__ = [
    # Models
    "ScheduledTrack",
    "Station",
    "StationChange",
    "StationRecord",
    # Persistence
    "RadioStore",
    "SqliteRadioStore",
    # Scheduling
    "RotationEngine",
    "StationRegistry",
    # Change feed
    "StationChangeNotifier",
    "Subscription",
]
