"""Configuration management for the playlist tagger."""

import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Load .env file from config directory or project root
config_env = Path(__file__).parent.parent.parent / "config" / ".env"
if config_env.exists():
    load_dotenv(config_env)
else:
    load_dotenv()


class Config:
    """Application configuration."""

    def __init__(self) -> None:
        """Initialize configuration from environment variables."""
        app_dir = Path.home() / ".playlist-tagger"

        # Tidal API settings
        self.tidal_token_file = Path(
            os.getenv(
                "PLAYLIST_TAGGER_TIDAL_TOKEN_FILE",
                str(app_dir / "tidal_session.json"),
            )
        )

        # Database settings
        self.database_path = Path(
            os.getenv("PLAYLIST_TAGGER_DATABASE_PATH", str(app_dir / "tags.db"))
        )

        # Logging settings
        self.log_level = os.getenv("PLAYLIST_TAGGER_LOG_LEVEL", "INFO").upper()
        log_file = os.getenv("PLAYLIST_TAGGER_LOG_FILE")
        self.log_file: Optional[Path] = Path(log_file) if log_file else None

        # Ensure directories exist
        self._ensure_directories()

    def _ensure_directories(self) -> None:
        """Ensure required directories exist."""
        self.database_path.parent.mkdir(parents=True, exist_ok=True)
        self.tidal_token_file.parent.mkdir(parents=True, exist_ok=True)


def get_config() -> Config:
    """Get application configuration."""
    return Config()
