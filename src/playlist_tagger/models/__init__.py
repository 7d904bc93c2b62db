"""Models for the playlist tagger."""

from .models import PlaylistMetadata, PlaylistWithTracks, Track, TrackWithTags, User

__all__ = [
    "Track",
    "TrackWithTags",
    "PlaylistMetadata",
    "PlaylistWithTracks",
    "User",
]
