"""Core reconciliation logic.

- interfaces: protocols for the music service and track store collaborators
- set_ops: keyed set differences shared by the reconciliation steps
- reconciler: track sync, tag editing and tag-driven playlists
"""

from .interfaces import MusicService, TrackStore
from .reconciler import Reconciler, ReconcilerError, TracksNotFoundError
from .set_ops import difference_by, difference_by_id, key_by_id, unique, unique_by_id

__all__ = [
    "MusicService",
    "TrackStore",
    "Reconciler",
    "ReconcilerError",
    "TracksNotFoundError",
    "difference_by",
    "difference_by_id",
    "key_by_id",
    "unique",
    "unique_by_id",
]
