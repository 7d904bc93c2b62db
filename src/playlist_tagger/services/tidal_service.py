"""Tidal music service built on tidalapi.

The session belongs to a single Tidal account, so the ``user`` argument of
the music service methods is only used for logging. tidalapi is blocking;
every async method runs its calls in a worker thread.
"""

import asyncio
import json
import logging
import time
from pathlib import Path
from typing import Any, Callable, List, Optional, Sequence, TypeVar

import tidalapi
from tidalapi.exceptions import AuthenticationError

from ..models import PlaylistMetadata, Track, User

logger = logging.getLogger(__name__)

T = TypeVar("T")


class TidalConnectionError(Exception):
    """Custom exception for Tidal connection issues."""

    pass


class TidalService:
    """Music service backed by the Tidal API."""

    type = "tidal"

    def __init__(self, token_file: Path, login_timeout: int = 60) -> None:
        """Initialize Tidal service.

        Args:
            token_file: Path to the token file for session persistence
            login_timeout: Seconds to wait for the OAuth device login
        """
        self.token_file = token_file
        self.login_timeout = login_timeout
        self.session: Optional[Any] = None  # tidalapi.Session
        self._authenticated = False

    # =========================================================================
    # Session management
    # =========================================================================

    def connect(self) -> None:
        """Establish connection to Tidal API."""
        try:
            self._load_existing_session()
            if not self._authenticated:
                self._create_new_session()
        except TidalConnectionError:
            raise
        except Exception as e:
            logger.error(f"Failed to connect to Tidal: {e}")
            raise TidalConnectionError(f"Cannot connect to Tidal API: {e}") from e

    def _load_existing_session(self) -> None:
        """Load existing session from token file."""
        if not self.token_file.exists():
            logger.info("No existing token file found")
            return

        try:
            logger.info("Loading existing Tidal session...")
            with open(self.token_file, "r") as file:
                data = json.load(file)

            self.session = tidalapi.Session()
            self.session.load_oauth_session(
                data["token_type"], data["access_token"], data["refresh_token"]
            )

            if self.session.check_login():
                logger.info("Successfully authenticated with existing session")
                self._authenticated = True
            else:
                logger.warning("Existing session is invalid")
                self._remove_invalid_token()

        except (AuthenticationError, KeyError, json.JSONDecodeError) as e:
            logger.warning(f"Failed to load existing session: {e}")
            self._remove_invalid_token()

    def _create_new_session(self) -> None:
        """Create new Tidal session with OAuth."""
        logger.info("Creating new Tidal session...")
        self.session = tidalapi.Session()

        print("Please scan the QR code or open the link to authenticate:")
        self.session.login_oauth_simple()

        for _ in range(self.login_timeout):
            if self.session.check_login():
                logger.info("Successfully authenticated with new session")
                self._authenticated = True
                self._save_session()
                return
            time.sleep(1)

        raise TidalConnectionError(
            f"Authentication timeout after {self.login_timeout} seconds"
        )

    def _save_session(self) -> None:
        """Save session data to token file."""
        if self.session is None:
            raise TidalConnectionError("No active session to save")

        session_data = {
            "token_type": self.session.token_type,
            "access_token": self.session.access_token,
            "refresh_token": self.session.refresh_token,
        }

        self.token_file.parent.mkdir(parents=True, exist_ok=True)
        with open(self.token_file, "w") as file:
            json.dump(session_data, file, indent=2)

        logger.info(f"Session saved to {self.token_file}")

    def _remove_invalid_token(self) -> None:
        """Remove invalid token file."""
        if self.token_file.exists():
            self.token_file.unlink()
            logger.info("Removed invalid token file")

    def is_authenticated(self) -> bool:
        """Check if service is authenticated."""
        return self._authenticated and self.session is not None

    def current_user(self) -> User:
        """Get the account the session is logged in as.

        Raises:
            TidalConnectionError: If not authenticated
        """
        session = self._require_session()
        tidal_user = session.user
        name = getattr(tidal_user, "username", None) or getattr(
            tidal_user, "first_name", None
        )
        return User(id=str(tidal_user.id), name=name)

    def _require_session(self) -> Any:
        if not self.is_authenticated():
            raise TidalConnectionError("Not authenticated with Tidal")
        return self.session

    async def _call(self, action: str, func: Callable[[], T]) -> T:
        """Run a blocking tidalapi call in a worker thread.

        Raises:
            TidalConnectionError: If the call fails
        """
        self._require_session()
        try:
            return await asyncio.to_thread(func)
        except Exception as e:
            logger.error(f"Failed to {action}: {e}")
            raise TidalConnectionError(f"Cannot {action}: {e}") from e

    # =========================================================================
    # MusicService protocol
    # =========================================================================

    async def get_all_songs(self, user: User) -> List[Track]:
        """Get the user's favourite tracks."""

        def fetch() -> List[Track]:
            favorites = self.session.user.favorites.tracks()
            return [self._extract_track_metadata(t) for t in favorites]

        tracks = await self._call("retrieve favourite tracks", fetch)
        logger.info(f"Retrieved {len(tracks)} favourite tracks for user {user.id}")
        return tracks

    async def get_playlists_metadata(self, user: User) -> List[PlaylistMetadata]:
        """Get all playlists of the user."""

        def fetch() -> List[PlaylistMetadata]:
            return [
                self._extract_playlist_metadata(p)
                for p in self.session.user.playlists()
            ]

        playlists = await self._call("retrieve playlists", fetch)
        logger.info(f"Retrieved {len(playlists)} playlists for user {user.id}")
        return playlists

    async def get_playlist_tracks(self, user: User, playlist_id: str) -> List[Track]:
        """Get tracks for a specific playlist."""

        def fetch() -> List[Track]:
            playlist = self.session.playlist(playlist_id)
            return [self._extract_track_metadata(t) for t in playlist.tracks()]

        tracks = await self._call(f"retrieve tracks for playlist {playlist_id}", fetch)
        logger.debug(f"Retrieved {len(tracks)} tracks from playlist {playlist_id}")
        return tracks

    async def create_playlist(self, user: User, name: str) -> str:
        """Create an empty playlist and return its id."""

        def create() -> str:
            playlist = self.session.user.create_playlist(name, "")
            return str(playlist.id)

        playlist_id = await self._call(f"create playlist {name}", create)
        logger.info(f"Created playlist {name} ({playlist_id}) for user {user.id}")
        return playlist_id

    async def update_playlist_tracks(
        self, user: User, playlist_id: str, track_ids: Sequence[str]
    ) -> None:
        """Append tracks to a playlist.

        Tidal playlists only grow here; an empty ``track_ids`` is a no-op.
        """
        if not track_ids:
            logger.debug(f"No tracks to add to playlist {playlist_id}")
            return

        def update() -> None:
            playlist = self.session.playlist(playlist_id)
            playlist.add(list(track_ids))

        await self._call(f"update playlist {playlist_id}", update)
        logger.info(f"Added {len(track_ids)} tracks to playlist {playlist_id}")

    # =========================================================================
    # Metadata extraction
    # =========================================================================

    def _extract_track_metadata(self, tidal_track: Any) -> Track:
        """Extract metadata from a Tidal track.

        Args:
            tidal_track: Tidal track object from tidalapi

        Returns:
            Track object keyed by the Tidal track id
        """
        artist_name = None
        if getattr(tidal_track, "artist", None):
            artist_name = getattr(tidal_track.artist, "name", None)

        album_name = None
        if getattr(tidal_track, "album", None):
            album_name = getattr(tidal_track.album, "name", None)

        return Track(
            id=str(tidal_track.id),
            title=tidal_track.name,
            artist=artist_name,
            album=album_name,
            duration=getattr(tidal_track, "duration", None),
            isrc=getattr(tidal_track, "isrc", None),
            version=getattr(tidal_track, "version", None),
            explicit=getattr(tidal_track, "explicit", None),
            audio_quality=getattr(tidal_track, "audio_quality", None),
        )

    def _extract_playlist_metadata(self, tidal_playlist: Any) -> PlaylistMetadata:
        """Extract metadata from a Tidal playlist."""
        creator_name = None
        creator = getattr(tidal_playlist, "creator", None)
        if creator is not None:
            creator_name = getattr(creator, "name", None)

        return PlaylistMetadata(
            id=str(tidal_playlist.id),
            name=tidal_playlist.name,
            description=getattr(tidal_playlist, "description", None),
            num_tracks=getattr(tidal_playlist, "num_tracks", None),
            creator_name=creator_name,
            share_url=getattr(tidal_playlist, "share_url", None),
        )
