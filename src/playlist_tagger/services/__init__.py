"""Music service implementations."""

from .tidal_service import TidalConnectionError, TidalService

__all__ = [
    "TidalService",
    "TidalConnectionError",
]
