"""Database package: SQLite persistence of tagged tracks."""

from .models import Base, TaggedTrack
from .service import StoreError, TrackStoreService

__all__ = [
    "Base",
    "TaggedTrack",
    "StoreError",
    "TrackStoreService",
]
