"""
Music library domain models.

Contains data structures for representing catalog tracks.
"""

from typing import NamedTuple, Optional


class Track(NamedTuple):
    """Represents a catalog track with metadata.

    Owned by the catalog persistence layer and never mutated once loaded.
    """

    id: int
    title: str
    artist: Optional[str] = None
    featured: Optional[str] = None  # Featured artist name
    img: Optional[str] = None  # URL of track image
    duration: int = 0  # in milliseconds
    file_id: Optional[int] = None  # Defaults to id when absent
    likes: int = 0

    @property
    def track_name(self) -> str:
        """Artist and title, as announced on air."""
        return f"{self.artist or 'Unknown artist'} - {self.title}"

    @property
    def file_name(self) -> str:
        """Name of the stored media file."""
        file_id = self.file_id if self.file_id is not None else self.id
        return f"{file_id}.mp3"
