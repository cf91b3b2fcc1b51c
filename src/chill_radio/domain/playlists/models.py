"""
Playlist domain models.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class Playlist:
    """An externally managed playlist that a station is created from."""

    id: Optional[int]
    name: str
    date: Optional[datetime] = None
