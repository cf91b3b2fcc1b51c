"""Music catalog domain module."""

from .catalog import row_to_track
from .models import Track

__all__ = ["Track", "row_to_track"]
