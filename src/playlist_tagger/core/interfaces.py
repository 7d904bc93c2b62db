"""Collaborator protocols consumed by the reconciler.

Concrete implementations live in ``playlist_tagger.services`` (music
services) and ``playlist_tagger.database`` (track store). Anything with the
same async methods can be plugged in.
"""

from typing import List, Protocol, Sequence

from ..models import PlaylistMetadata, Track, TrackWithTags, User


class MusicService(Protocol):
    """Authoritative catalogue of a user's tracks and playlists."""

    @property
    def type(self) -> str:
        """Stable discriminator of the backend, e.g. ``"tidal"``."""
        ...

    async def get_all_songs(self, user: User) -> List[Track]: ...

    async def get_playlists_metadata(self, user: User) -> List[PlaylistMetadata]: ...

    async def get_playlist_tracks(
        self, user: User, playlist_id: str
    ) -> List[Track]: ...

    async def create_playlist(self, user: User, name: str) -> str: ...

    async def update_playlist_tracks(
        self, user: User, playlist_id: str, track_ids: Sequence[str]
    ) -> None: ...


class TrackStore(Protocol):
    """Local persistence of tracks and their tags.

    Rows are partitioned by user and service type.
    """

    async def get_user_tracks(
        self, user: User, service_type: str
    ) -> List[TrackWithTags]: ...

    async def get_tracks_by_ids(
        self, user: User, service_type: str, ids: Sequence[str]
    ) -> List[TrackWithTags]: ...

    async def get_tracks_by_tags(
        self, user: User, service_type: str, tags: Sequence[str]
    ) -> List[TrackWithTags]:
        """Get the tracks carrying every one of ``tags``."""
        ...

    async def upsert_tracks(
        self, user: User, service_type: str, tracks: Sequence[TrackWithTags]
    ) -> None: ...

    async def delete_tracks(
        self, user: User, service_type: str, ids: Sequence[str]
    ) -> None: ...
