"""Service initialization shared by the CLI commands.

- init_store() -> TrackStoreService
- init_tidal_api() -> TidalService
- TaggerApp: lazily builds the services and the reconciler for a command
"""

import logging
from typing import Any, Dict, Optional

from ...config import Config
from ...core import Reconciler
from ...database import TrackStoreService
from ...models import User
from ...services import TidalService

logger = logging.getLogger(__name__)


class InitializationError(Exception):
    """Raised when initialization fails."""

    pass


def init_store(config: Optional[Config] = None) -> TrackStoreService:
    """Open the track store.

    Args:
        config: Application configuration (creates new if not provided)

    Returns:
        TrackStoreService instance

    Raises:
        InitializationError: If the database cannot be opened
    """
    if config is None:
        config = Config()

    try:
        store = TrackStoreService(db_path=config.database_path)
        stats = store.get_statistics()
        logger.debug(f"Database connected: {stats['tracks']} tracks")
        return store

    except Exception as e:
        logger.exception("Database initialization failed")
        raise InitializationError(f"Database initialization failed: {e}") from e


def init_tidal_api(config: Optional[Config] = None) -> TidalService:
    """Connect to Tidal, logging in when no valid session is stored.

    Args:
        config: Application configuration (creates new if not provided)

    Returns:
        Authenticated TidalService instance

    Raises:
        InitializationError: If Tidal API authentication fails
    """
    if config is None:
        config = Config()

    try:
        tidal_service = TidalService(config.tidal_token_file)
        if not tidal_service.is_authenticated():
            logger.info("Authenticating with Tidal API...")
            tidal_service.connect()
        return tidal_service

    except Exception as e:
        logger.exception("Tidal API initialization failed")
        raise InitializationError(f"Tidal API initialization failed: {e}") from e


class TaggerApp:
    """Holds configuration and lazily created services for CLI commands."""

    def __init__(self, config_override: Optional[Dict[str, Any]] = None) -> None:
        """Initialize the application context.

        Args:
            config_override: Attribute values replacing those of Config
        """
        self.config = Config()
        for key, value in (config_override or {}).items():
            setattr(self.config, key, value)

        self._store: Optional[TrackStoreService] = None
        self._music_service: Optional[TidalService] = None

    @property
    def store(self) -> TrackStoreService:
        """Track store, opened on first use."""
        if self._store is None:
            self._store = init_store(self.config)
        return self._store

    @property
    def music_service(self) -> TidalService:
        """Tidal service, connected on first use."""
        if self._music_service is None:
            self._music_service = init_tidal_api(self.config)
        return self._music_service

    def reconciler(self) -> Reconciler:
        """Build a reconciler over the music service and the store."""
        return Reconciler(self.music_service, self.store)

    def user(self) -> User:
        """Get the account the music service is logged in as."""
        return self.music_service.current_user()

    def close(self) -> None:
        """Release the database connection if it was opened."""
        if self._store is not None:
            self._store.close()
            self._store = None
