"""Shared fixtures: in-memory collaborators that record every call."""

import asyncio
from typing import Dict, List, Optional, Sequence, Set, Tuple

import pytest

from playlist_tagger.core import Reconciler
from playlist_tagger.models import PlaylistMetadata, Track, TrackWithTags, User


@pytest.fixture
def anyio_backend():
    """Run async tests on asyncio only."""
    return "asyncio"


class FakeMusicService:
    """Music service keeping its library and playlists in memory."""

    type = "fake"

    def __init__(self, tracks: Optional[List[Track]] = None) -> None:
        """Initialize with the user's library."""
        self.tracks: List[Track] = list(tracks or [])
        self.playlists: Dict[str, Tuple[PlaylistMetadata, List[Track]]] = {}
        self.calls: List[Tuple] = []
        self.events: List[str] = []
        self.fail_on: Set[str] = set()

    def add_playlist(self, playlist_id: str, name: str, track_ids: Sequence[str]):
        """Add a playlist holding the given track ids."""
        self.playlists[playlist_id] = (
            PlaylistMetadata(id=playlist_id, name=name),
            [Track(id=track_id) for track_id in track_ids],
        )

    async def _enter(self, name: str, *args) -> None:
        self.calls.append((name, *args))
        self.events.append(f"{name}:start")
        await asyncio.sleep(0)
        if name in self.fail_on:
            raise RuntimeError(f"music service {name} failed")
        self.events.append(f"{name}:end")

    async def get_all_songs(self, user: User) -> List[Track]:
        await self._enter("get_all_songs", user.id)
        return list(self.tracks)

    async def get_playlists_metadata(self, user: User) -> List[PlaylistMetadata]:
        await self._enter("get_playlists_metadata", user.id)
        return [metadata for metadata, _ in self.playlists.values()]

    async def get_playlist_tracks(self, user: User, playlist_id: str) -> List[Track]:
        await self._enter("get_playlist_tracks", user.id, playlist_id)
        return list(self.playlists[playlist_id][1])

    async def create_playlist(self, user: User, name: str) -> str:
        await self._enter("create_playlist", user.id, name)
        playlist_id = f"pl-{len(self.playlists) + 1}"
        self.add_playlist(playlist_id, name, [])
        return playlist_id

    async def update_playlist_tracks(
        self, user: User, playlist_id: str, track_ids: Sequence[str]
    ) -> None:
        await self._enter(
            "update_playlist_tracks", user.id, playlist_id, list(track_ids)
        )
        self.playlists[playlist_id][1].extend(Track(id=i) for i in track_ids)


class FakeTrackStore:
    """Track store keeping rows in memory, partitioned by user and service."""

    def __init__(self) -> None:
        """Initialize an empty store."""
        self.rows: Dict[Tuple[str, str], Dict[str, TrackWithTags]] = {}
        self.upserts: List[List[TrackWithTags]] = []
        self.deletes: List[List[str]] = []
        self.calls: List[Tuple] = []
        self.events: List[str] = []
        self.fail_on: Set[str] = set()

    def partition(self, user: User, service_type: str) -> Dict[str, TrackWithTags]:
        """Get the rows of one user and service type."""
        return self.rows.setdefault((user.id, service_type), {})

    def seed(self, user: User, service_type: str, *tracks: TrackWithTags) -> None:
        """Store tracks without recording a write."""
        rows = self.partition(user, service_type)
        for track in tracks:
            rows[track.id] = track

    async def _enter(self, name: str, *args) -> None:
        self.calls.append((name, *args))
        self.events.append(f"{name}:start")
        await asyncio.sleep(0)
        if name in self.fail_on:
            raise RuntimeError(f"store {name} failed")
        self.events.append(f"{name}:end")

    async def get_user_tracks(self, user: User, service_type: str):
        await self._enter("get_user_tracks", user.id, service_type)
        return list(self.partition(user, service_type).values())

    async def get_tracks_by_ids(self, user: User, service_type: str, ids):
        await self._enter("get_tracks_by_ids", user.id, service_type, list(ids))
        rows = self.partition(user, service_type)
        return [rows[track_id] for track_id in dict.fromkeys(ids) if track_id in rows]

    async def get_tracks_by_tags(self, user: User, service_type: str, tags):
        await self._enter("get_tracks_by_tags", user.id, service_type, list(tags))
        return [
            track
            for track in self.partition(user, service_type).values()
            if all(tag in track.tags for tag in tags)
        ]

    async def upsert_tracks(self, user: User, service_type: str, tracks) -> None:
        await self._enter("upsert_tracks", user.id, service_type)
        self.upserts.append(list(tracks))
        rows = self.partition(user, service_type)
        for track in tracks:
            rows[track.id] = track

    async def delete_tracks(self, user: User, service_type: str, ids) -> None:
        await self._enter("delete_tracks", user.id, service_type)
        self.deletes.append(list(ids))
        rows = self.partition(user, service_type)
        for track_id in ids:
            rows.pop(track_id, None)


@pytest.fixture
def user():
    """Create the user under test."""
    return User(id="user-1", name="Test User")


@pytest.fixture
def music_service():
    """Create an empty fake music service."""
    return FakeMusicService()


@pytest.fixture
def store():
    """Create an empty fake track store."""
    return FakeTrackStore()


@pytest.fixture
def reconciler(music_service, store):
    """Create Reconciler over the fake collaborators."""
    return Reconciler(music_service, store)


def tagged(track_id: str, *tags: str, **fields) -> TrackWithTags:
    """Build a stored track."""
    return TrackWithTags(id=track_id, tags=list(tags), **fields)
