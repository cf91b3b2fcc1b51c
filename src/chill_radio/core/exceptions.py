"""Error taxonomy shared by the scheduler and its persistence layer."""

from typing import Optional


class ChillRadioError(Exception):
    """Base exception for radio operations."""

    pass


class ConfigurationError(ChillRadioError):
    """Raised when radio configuration is missing or invalid."""

    pass


class PersistenceError(ChillRadioError):
    """Raised when a schedule, station or catalog read/write fails."""

    def __init__(self, message: str, station_id: Optional[int] = None):
        self.station_id = station_id
        super().__init__(message)


class InvariantViolation(ChillRadioError):
    """Raised when a track cannot be placed on a timeline without corrupting it."""

    pass
