"""Playlist Tagger.

Keeps a local tag store in step with a music streaming service and builds
playlists on the service from tag queries.
"""

__version__ = "1.0.0"
__author__ = "Anton"

from .config import Config
from .core import Reconciler, ReconcilerError, TracksNotFoundError
from .models import PlaylistMetadata, PlaylistWithTracks, Track, TrackWithTags, User

__all__ = [
    "Config",
    "Reconciler",
    "ReconcilerError",
    "TracksNotFoundError",
    "Track",
    "TrackWithTags",
    "PlaylistMetadata",
    "PlaylistWithTracks",
    "User",
]
