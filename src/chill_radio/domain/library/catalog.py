"""
Catalog row conversion.
"""

from typing import Any, Mapping

from .models import Track


def row_to_track(row: Mapping[str, Any]) -> Track:
    """Convert database row to Track."""
    return Track(
        id=row["id"],
        title=row["title"],
        artist=row["artist"],
        featured=row["featured"],
        img=row["img"],
        duration=row["duration"],
        file_id=row["file_id"],
        likes=row["likes"] or 0,
    )
