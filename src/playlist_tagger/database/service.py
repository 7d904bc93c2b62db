"""SQLite-backed track store.

Implements the ``TrackStore`` protocol on top of SQLAlchemy. The ORM work is
blocking, so each async method runs its query in a worker thread; a fresh
session is used per call.
"""

import asyncio
import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Sequence

from sqlalchemy import create_engine, delete, func, inspect, select, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from ..core.set_ops import key_by_id, unique
from ..models import TrackWithTags, User
from .models import Base, TaggedTrack, utc_now

logger = logging.getLogger(__name__)

# Stay well below SQLite's bound-parameter limit in IN (...) clauses
ID_CHUNK_SIZE = 500

_HAS_TAG_SQL = (
    "EXISTS (SELECT 1 FROM json_each(tracks.tags) "
    "WHERE json_each.value = :{param})"
)


class StoreError(Exception):
    """Raised when the track store cannot complete an operation."""

    pass


def _chunks(items: Sequence[str], size: int = ID_CHUNK_SIZE) -> Iterator[Sequence[str]]:
    for start in range(0, len(items), size):
        yield items[start : start + size]


def _to_track(row: TaggedTrack) -> TrackWithTags:
    data = dict(row.data or {})
    data["id"] = row.track_id
    data["tags"] = list(row.tags or [])
    return TrackWithTags.model_validate(data)


def _track_data(track: TrackWithTags) -> Dict[str, Any]:
    return track.model_dump(mode="json", exclude={"id", "tags"})


class TrackStoreService:
    """Persists tagged tracks in a SQLite database."""

    def __init__(self, db_path: Optional[Path] = None) -> None:
        """Initialize track store.

        Args:
            db_path: Path to SQLite database file.
                    If None, uses default ~/.playlist-tagger/tags.db
        """
        if db_path is None:
            db_path = Path.home() / ".playlist-tagger" / "tags.db"

        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        db_url = f"sqlite:///{self.db_path}"
        # Sessions are opened from worker threads
        self.engine = create_engine(
            db_url, echo=False, connect_args={"check_same_thread": False}
        )
        self.SessionLocal = sessionmaker(
            autocommit=False, autoflush=False, bind=self.engine
        )

        logger.info("Database initialized at: %s", self.db_path)
        self.init_db()

    def init_db(self) -> None:
        """Create missing tables."""
        Base.metadata.create_all(bind=self.engine)
        logger.debug("Database schema ready")

    def get_session(self) -> Session:
        """Get a new database session.

        Returns:
            SQLAlchemy Session object

        Note:
            Caller is responsible for closing the session
        """
        return self.SessionLocal()

    @contextmanager
    def _session_scope(self, action: str) -> Iterator[Session]:
        """Yield a session, translating database errors into StoreError."""
        with self.get_session() as session:
            try:
                yield session
            except SQLAlchemyError as e:
                session.rollback()
                logger.error("Failed to %s: %s", action, e)
                raise StoreError(f"Cannot {action}: {e}") from e

    def is_initialized(self) -> bool:
        """Check if the tracks table exists."""
        return inspect(self.engine).has_table(TaggedTrack.__tablename__)

    # =========================================================================
    # TrackStore protocol
    # =========================================================================

    async def get_user_tracks(
        self, user: User, service_type: str
    ) -> List[TrackWithTags]:
        """Get every stored track of a user for one service type."""
        return await asyncio.to_thread(self._get_user_tracks, user.id, service_type)

    async def get_tracks_by_ids(
        self, user: User, service_type: str, ids: Sequence[str]
    ) -> List[TrackWithTags]:
        """Get the stored tracks among ``ids``; unknown ids are left out."""
        return await asyncio.to_thread(
            self._get_tracks_by_ids, user.id, service_type, list(ids)
        )

    async def get_tracks_by_tags(
        self, user: User, service_type: str, tags: Sequence[str]
    ) -> List[TrackWithTags]:
        """Get the stored tracks carrying every one of ``tags``.

        An empty ``tags`` matches every track of the user.
        """
        return await asyncio.to_thread(
            self._get_tracks_by_tags, user.id, service_type, list(tags)
        )

    async def upsert_tracks(
        self, user: User, service_type: str, tracks: Sequence[TrackWithTags]
    ) -> None:
        """Insert tracks, or replace the data and tags of existing ones."""
        await asyncio.to_thread(self._upsert_tracks, user.id, service_type, tracks)

    async def delete_tracks(
        self, user: User, service_type: str, ids: Sequence[str]
    ) -> None:
        """Delete tracks by id; unknown ids are ignored."""
        await asyncio.to_thread(self._delete_tracks, user.id, service_type, list(ids))

    # =========================================================================
    # Blocking implementations
    # =========================================================================

    def _get_user_tracks(self, user_id: str, service_type: str) -> List[TrackWithTags]:
        with self._session_scope("read user tracks") as session:
            stmt = select(TaggedTrack).where(
                TaggedTrack.user_id == user_id,
                TaggedTrack.service_type == service_type,
            )
            return [_to_track(row) for row in session.scalars(stmt)]

    def _get_tracks_by_ids(
        self, user_id: str, service_type: str, ids: List[str]
    ) -> List[TrackWithTags]:
        tracks: List[TrackWithTags] = []
        with self._session_scope("read tracks by id") as session:
            for chunk in _chunks(unique(ids)):
                stmt = select(TaggedTrack).where(
                    TaggedTrack.user_id == user_id,
                    TaggedTrack.service_type == service_type,
                    TaggedTrack.track_id.in_(chunk),
                )
                tracks.extend(_to_track(row) for row in session.scalars(stmt))
        return tracks

    def _get_tracks_by_tags(
        self, user_id: str, service_type: str, tags: List[str]
    ) -> List[TrackWithTags]:
        stmt = select(TaggedTrack).where(
            TaggedTrack.user_id == user_id,
            TaggedTrack.service_type == service_type,
        )
        for index, tag in enumerate(unique(tags)):
            param = f"tag_{index}"
            stmt = stmt.where(
                text(_HAS_TAG_SQL.format(param=param)).bindparams(**{param: tag})
            )

        with self._session_scope("read tracks by tags") as session:
            return [_to_track(row) for row in session.scalars(stmt)]

    def _upsert_tracks(
        self, user_id: str, service_type: str, tracks: Sequence[TrackWithTags]
    ) -> None:
        tracks_by_id = key_by_id(tracks)
        created = 0

        with self._session_scope("upsert tracks") as session:
            existing: Dict[str, TaggedTrack] = {}
            for chunk in _chunks(list(tracks_by_id)):
                stmt = select(TaggedTrack).where(
                    TaggedTrack.user_id == user_id,
                    TaggedTrack.service_type == service_type,
                    TaggedTrack.track_id.in_(chunk),
                )
                existing.update((row.track_id, row) for row in session.scalars(stmt))

            for track_id, track in tracks_by_id.items():
                row = existing.get(track_id)
                if row is None:
                    session.add(
                        TaggedTrack(
                            user_id=user_id,
                            service_type=service_type,
                            track_id=track_id,
                            data=_track_data(track),
                            tags=list(track.tags),
                        )
                    )
                    created += 1
                else:
                    row.data = _track_data(track)
                    row.tags = list(track.tags)
                    row.updated_at = utc_now()

            session.commit()

        logger.debug(
            "Upserted %d tracks (%d created, %d updated)",
            len(tracks_by_id),
            created,
            len(tracks_by_id) - created,
        )

    def _delete_tracks(self, user_id: str, service_type: str, ids: List[str]) -> None:
        deleted = 0
        with self._session_scope("delete tracks") as session:
            for chunk in _chunks(unique(ids)):
                result = session.execute(
                    delete(TaggedTrack).where(
                        TaggedTrack.user_id == user_id,
                        TaggedTrack.service_type == service_type,
                        TaggedTrack.track_id.in_(chunk),
                    )
                )
                deleted += result.rowcount or 0
            session.commit()

        logger.debug("Deleted %d tracks", deleted)

    # =========================================================================
    # Maintenance
    # =========================================================================

    def get_statistics(self) -> Dict[str, Any]:
        """Get track and tag counts per user and service type.

        Returns:
            Dictionary with totals and a ``partitions`` list
        """
        with self._session_scope("read statistics") as session:
            stmt = (
                select(
                    TaggedTrack.user_id,
                    TaggedTrack.service_type,
                    func.count(),
                )
                .group_by(TaggedTrack.user_id, TaggedTrack.service_type)
                .order_by(TaggedTrack.user_id, TaggedTrack.service_type)
            )
            partitions = [
                {"user_id": user_id, "service_type": service_type, "tracks": count}
                for user_id, service_type, count in session.execute(stmt)
            ]

            tag_counts: Dict[str, int] = {}
            for tags in session.scalars(select(TaggedTrack.tags)):
                for tag in tags or []:
                    tag_counts[tag] = tag_counts.get(tag, 0) + 1

        return {
            "tracks": sum(p["tracks"] for p in partitions),
            "tags": tag_counts,
            "partitions": partitions,
            "database_path": str(self.db_path),
        }

    def close(self) -> None:
        """Close database connection."""
        if hasattr(self, "engine"):
            self.engine.dispose()
            logger.info("Database connection closed")
