"""Command-line interface for the playlist tagger.

This is the main entry point that delegates to command modules.
"""

from pathlib import Path
from typing import Any, Optional

import click

from .. import __version__
from ..utils.logging_config import configure_third_party_loggers, setup_logging
from .commands import (
    TaggerApp,
    playlist,
    playlists_command,
    status_command,
    sync_command,
    tag,
)


@click.group()
@click.version_option(__version__, prog_name="playlist-tagger")
@click.option(
    "--log-level",
    default=None,
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]),
    help="Set logging level (default: PLAYLIST_TAGGER_LOG_LEVEL or INFO)",
)
@click.option("--log-file", type=click.Path(), help="Log to file")
@click.pass_context
def cli(ctx: Any, log_level: Optional[str], log_file: Optional[str]) -> None:
    """Playlist Tagger.

    Tag the tracks of your music service library and build playlists from
    those tags.
    """
    app = TaggerApp()

    setup_logging(
        log_level=log_level or app.config.log_level,
        log_file=Path(log_file) if log_file else app.config.log_file,
    )
    configure_third_party_loggers()

    ctx.obj = app


# Register command groups and commands
cli.add_command(sync_command)
cli.add_command(status_command)
cli.add_command(playlists_command)
cli.add_command(tag)
cli.add_command(playlist)


if __name__ == "__main__":
    cli()
