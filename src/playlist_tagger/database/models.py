"""SQLAlchemy database models for tagged tracks."""

from datetime import datetime, timezone
from typing import Any, Dict, List

from sqlalchemy import JSON, DateTime, Index, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def utc_now() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """Base class for all database models."""

    pass


class TaggedTrack(Base):
    """A music service track and the tags the user gave it.

    Rows are partitioned by user and service type; ``track_id`` is the id
    the music service uses for the track.
    """

    __tablename__ = "tracks"

    # Composite primary key
    user_id: Mapped[str] = mapped_column(String(255), primary_key=True)
    service_type: Mapped[str] = mapped_column(String(50), primary_key=True)
    track_id: Mapped[str] = mapped_column(String(255), primary_key=True)

    # Service-provided metadata, stored as returned
    data: Mapped[Dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)

    # Ordered, duplicate-free list of tag names
    tags: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now, onupdate=utc_now
    )

    __table_args__ = (Index("idx_user_service", "user_id", "service_type"),)

    def __repr__(self) -> str:
        """String representation of TaggedTrack."""
        return (
            f"<TaggedTrack(user_id='{self.user_id}', "
            f"service_type='{self.service_type}', track_id='{self.track_id}', "
            f"tags={self.tags})>"
        )
