"""Data models for the playlist tagger."""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, field_validator


class User(BaseModel):
    """Identity of the account whose library is being reconciled."""

    id: str
    name: Optional[str] = None

    model_config = ConfigDict(frozen=True)


class Track(BaseModel):
    """Represents a track as known to the music service.

    Only ``id`` takes part in identity. Any other field the service provides
    is kept as an extra attribute and round-trips through the store.
    """

    id: str
    title: Optional[str] = None
    artist: Optional[str] = None
    album: Optional[str] = None
    duration: Optional[int] = None  # Duration in seconds
    isrc: Optional[str] = None

    @property
    def display_name(self) -> str:
        """Get "artist - title" for display, falling back to the id."""
        if self.artist and self.title:
            return f"{self.artist} - {self.title}"
        return self.title or self.id

    @property
    def duration_formatted(self) -> str:
        """Get formatted duration string (mm:ss)."""
        if self.duration is None:
            return "Unknown"
        minutes = self.duration // 60
        seconds = self.duration % 60
        return f"{minutes}:{seconds:02d}"

    @field_validator("id", mode="before")
    @classmethod
    def validate_id(cls, v: object) -> str:
        """Service ids may arrive as integers."""
        return str(v)

    model_config = ConfigDict(extra="allow")


class TrackWithTags(Track):
    """A track augmented with the user's tags."""

    tags: List[str] = []

    @field_validator("tags", mode="after")
    @classmethod
    def validate_tags(cls, v: List[str]) -> List[str]:
        """Collapse duplicate tags, keeping the first occurrence."""
        return list(dict.fromkeys(v))

    @classmethod
    def from_track(
        cls, track: Track, tags: Optional[List[str]] = None
    ) -> "TrackWithTags":
        """Attach a tag list to a plain track.

        Args:
            track: Track as returned by the music service
            tags: Tags to attach (empty when omitted)

        Returns:
            TrackWithTags carrying every field of ``track``
        """
        data = track.model_dump()
        data["tags"] = list(tags or [])
        return cls.model_validate(data)

    def with_tags(self, tags: List[str]) -> "TrackWithTags":
        """Return a copy of this track carrying ``tags`` instead."""
        return self.model_copy(update={"tags": list(dict.fromkeys(tags))})


class PlaylistMetadata(BaseModel):
    """Represents a playlist owned by the music service."""

    id: str
    name: str
    description: Optional[str] = None
    num_tracks: Optional[int] = None

    @field_validator("id", mode="before")
    @classmethod
    def validate_id(cls, v: object) -> str:
        """Service ids may arrive as integers."""
        return str(v)

    model_config = ConfigDict(extra="allow")


class PlaylistWithTracks(BaseModel):
    """A playlist together with its tag-annotated tracks."""

    playlist: PlaylistMetadata
    tracks: List[TrackWithTags] = []

    @property
    def track_count(self) -> int:
        """Get number of tracks in playlist."""
        return len(self.tracks)

    @property
    def total_duration(self) -> int:
        """Get total duration of all tracks in seconds."""
        return sum(track.duration or 0 for track in self.tracks)
