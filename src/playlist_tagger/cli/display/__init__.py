"""CLI display and formatting utilities."""

from .formatters import display_playlists, display_statistics, format_tags

__all__ = [
    "display_playlists",
    "display_statistics",
    "format_tags",
]
