"""CLI command modules."""

from .init import InitializationError, TaggerApp, init_store, init_tidal_api
from .playlists import playlist, playlists_command
from .sync import status_command, sync_command
from .tags import tag

__all__ = [
    "TaggerApp",
    "InitializationError",
    "init_store",
    "init_tidal_api",
    "playlist",
    "playlists_command",
    "status_command",
    "sync_command",
    "tag",
]
