"""Reconciliation between a music service and the local tag store.

The reconciler keeps the store's track set in step with the music service,
edits tags on stored tracks, and turns tag queries into playlist membership
on the service. It holds no state of its own: every operation reads both
sides, computes the delta by track id and writes only what changed.
"""

import asyncio
import logging
from typing import List, Sequence, Tuple

from ..models import PlaylistMetadata, PlaylistWithTracks, Track, TrackWithTags, User
from .interfaces import MusicService, TrackStore
from .set_ops import difference_by, difference_by_id, key_by_id, unique, unique_by_id

logger = logging.getLogger(__name__)


class ReconcilerError(Exception):
    """Base exception for reconciliation failures raised by the core."""

    pass


class TracksNotFoundError(ReconcilerError):
    """Raised when requested track ids are not present in the store."""

    def __init__(self, missing_ids: Sequence[str]) -> None:
        """Initialize with the ids that could not be found.

        Args:
            missing_ids: Track ids absent from the store
        """
        self.missing_ids = list(missing_ids)
        super().__init__(
            f"{len(self.missing_ids)} track(s) not found in store: "
            f"{', '.join(self.missing_ids)}"
        )


class Reconciler:
    """Converges the tag store with a music service for one service type."""

    def __init__(self, music_service: MusicService, store: TrackStore) -> None:
        """Initialize reconciler.

        Args:
            music_service: Authoritative source of tracks and playlists
            store: Persistence of tracks and their tags
        """
        self.music_service = music_service
        self.store = store

    @property
    def service_type(self) -> str:
        """Partition key of the bound music service."""
        return self.music_service.type

    # =========================================================================
    # Track synchronization
    # =========================================================================

    async def sync_tracks(self, user: User) -> None:
        """Make the store's track set equal to the music service's.

        New service tracks are stored without tags, tracks that vanished from
        the service are deleted. Tags of tracks present on both sides are left
        untouched, so running it again without upstream changes writes nothing.

        Args:
            user: Owner of the library
        """
        service_tracks, stored_tracks = await asyncio.gather(
            self.music_service.get_all_songs(user),
            self.store.get_user_tracks(user, self.service_type),
        )
        logger.info(
            "Syncing %s tracks for user %s: %d in service, %d in store",
            self.service_type,
            user.id,
            len(service_tracks),
            len(stored_tracks),
        )

        await asyncio.gather(
            self._add_new_tracks(user, service_tracks, stored_tracks),
            self._delete_removed_tracks(user, service_tracks, stored_tracks),
        )

    async def _add_new_tracks(
        self,
        user: User,
        service_tracks: Sequence[Track],
        stored_tracks: Sequence[TrackWithTags],
    ) -> None:
        tracks_to_add = difference_by_id(unique_by_id(service_tracks), stored_tracks)
        if not tracks_to_add:
            logger.debug("No new tracks to store")
            return

        logger.info("Adding %d new tracks to store", len(tracks_to_add))
        await self.store.upsert_tracks(
            user,
            self.service_type,
            [TrackWithTags.from_track(track) for track in tracks_to_add],
        )

    async def _delete_removed_tracks(
        self,
        user: User,
        service_tracks: Sequence[Track],
        stored_tracks: Sequence[TrackWithTags],
    ) -> None:
        ids_to_delete = [
            track.id for track in difference_by_id(stored_tracks, service_tracks)
        ]
        if not ids_to_delete:
            logger.debug("No removed tracks to delete")
            return

        logger.info("Deleting %d tracks no longer in service", len(ids_to_delete))
        await self.store.delete_tracks(user, self.service_type, ids_to_delete)

    # =========================================================================
    # Tag mutation
    # =========================================================================

    async def add_tags_to_tracks(
        self, user: User, track_ids: Sequence[str], tags: Sequence[str]
    ) -> None:
        """Add tags to stored tracks.

        Existing tags keep their order; new ones are appended in the order
        given. Tracks that already carry every tag are not written.

        Args:
            user: Owner of the tracks
            track_ids: Ids of the tracks to tag
            tags: Tags to add

        Raises:
            TracksNotFoundError: If any id is missing from the store
        """
        tags_to_apply = unique(tags)
        tracks = await self._get_stored_tracks(user, track_ids)

        tracks_to_update: List[TrackWithTags] = []
        for track in tracks:
            tags_to_add = difference_by(tags_to_apply, track.tags)
            if tags_to_add:
                tracks_to_update.append(track.with_tags([*track.tags, *tags_to_add]))

        await self._save_tag_changes(user, tracks_to_update)

    async def remove_tags_from_tracks(
        self, user: User, track_ids: Sequence[str], tags: Sequence[str]
    ) -> None:
        """Remove tags from stored tracks.

        Args:
            user: Owner of the tracks
            track_ids: Ids of the tracks to untag
            tags: Tags to remove

        Raises:
            TracksNotFoundError: If any id is missing from the store
        """
        tracks = await self._get_stored_tracks(user, track_ids)

        tracks_to_update: List[TrackWithTags] = []
        for track in tracks:
            reduced_tags = difference_by(track.tags, tags)
            if len(reduced_tags) < len(track.tags):
                tracks_to_update.append(track.with_tags(reduced_tags))

        await self._save_tag_changes(user, tracks_to_update)

    async def _get_stored_tracks(
        self, user: User, track_ids: Sequence[str]
    ) -> List[TrackWithTags]:
        """Fetch stored tracks in request order, failing on unknown ids."""
        requested_ids = unique(track_ids)
        stored = key_by_id(
            await self.store.get_tracks_by_ids(user, self.service_type, requested_ids)
        )

        missing_ids = [track_id for track_id in requested_ids if track_id not in stored]
        if missing_ids:
            raise TracksNotFoundError(missing_ids)

        return [stored[track_id] for track_id in requested_ids]

    async def _save_tag_changes(
        self, user: User, tracks_to_update: List[TrackWithTags]
    ) -> None:
        if not tracks_to_update:
            logger.debug("Tags unchanged, nothing to save")
            return

        logger.info("Updating tags on %d tracks", len(tracks_to_update))
        await self.store.upsert_tracks(user, self.service_type, tracks_to_update)

    # =========================================================================
    # Playlists
    # =========================================================================

    async def get_playlists(self, user: User) -> List[PlaylistWithTracks]:
        """Get every playlist of the user with tag-annotated tracks.

        Tracks the store does not know yet are returned with no tags.

        Args:
            user: Owner of the playlists

        Returns:
            Playlists in service order, each with its tracks in service order
        """
        playlists_metadata = await self.music_service.get_playlists_metadata(user)
        playlist_tracks = await asyncio.gather(
            *(
                self.music_service.get_playlist_tracks(user, playlist.id)
                for playlist in playlists_metadata
            )
        )
        logger.info("Retrieved %d playlists", len(playlists_metadata))

        return await self._attach_tags(
            user, list(zip(playlists_metadata, playlist_tracks))
        )

    async def _attach_tags(
        self,
        user: User,
        playlists: List[Tuple[PlaylistMetadata, List[Track]]],
    ) -> List[PlaylistWithTracks]:
        """Join playlist tracks against the store with a single lookup."""
        all_track_ids = unique(track.id for _, tracks in playlists for track in tracks)
        stored = key_by_id(
            await self.store.get_tracks_by_ids(user, self.service_type, all_track_ids)
        )

        return [
            PlaylistWithTracks(
                playlist=playlist,
                tracks=[
                    stored.get(track.id) or TrackWithTags.from_track(track)
                    for track in tracks
                ],
            )
            for playlist, tracks in playlists
        ]

    async def create_playlist_by_tags(
        self, user: User, name: str, tags: Sequence[str]
    ) -> str:
        """Create a playlist and fill it with the tracks carrying all ``tags``.

        Args:
            user: Owner of the playlist
            name: Name of the new playlist
            tags: Tags every added track must carry

        Returns:
            Id of the created playlist
        """
        playlist_id = await self.music_service.create_playlist(user, name)
        logger.info("Created playlist %s (%s)", name, playlist_id)

        await self.update_playlist_by_tags(user, playlist_id, tags)
        return playlist_id

    async def update_playlist_by_tags(
        self, user: User, playlist_id: str, tags: Sequence[str]
    ) -> None:
        """Add to a playlist the tagged tracks it does not contain yet.

        The update is sent even when nothing is missing; tracks already in
        the playlist are never removed.

        Args:
            user: Owner of the playlist
            playlist_id: Playlist to update
            tags: Tags every added track must carry
        """
        tagged_tracks, playlist_tracks = await asyncio.gather(
            self.store.get_tracks_by_tags(user, self.service_type, list(tags)),
            self.music_service.get_playlist_tracks(user, playlist_id),
        )

        track_ids_to_add = [
            track.id for track in difference_by_id(tagged_tracks, playlist_tracks)
        ]
        logger.info(
            "Adding %d of %d tracks tagged %s to playlist %s",
            len(track_ids_to_add),
            len(tagged_tracks),
            ", ".join(tags) or "(any)",
            playlist_id,
        )

        await self.music_service.update_playlist_tracks(
            user, playlist_id, track_ids_to_add
        )

