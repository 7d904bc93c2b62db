"""Commands for listing playlists and building them from tags."""

import asyncio
import logging
from typing import Tuple

import click
from rich.console import Console
from rich.markup import escape

from ..display import display_playlists
from .init import TaggerApp

console = Console()
logger = logging.getLogger(__name__)

_tag_option = click.option(
    "--tag",
    "-t",
    "tags",
    multiple=True,
    required=True,
    help="Tag every track in the playlist must carry (repeatable)",
)


@click.command("playlists")
@click.pass_obj
def playlists_command(app: TaggerApp) -> None:
    """Show every playlist with the tags of its tracks."""
    try:
        reconciler = app.reconciler()
        playlists = asyncio.run(reconciler.get_playlists(app.user()))
        display_playlists(playlists)

    except Exception as e:
        logger.exception("Listing playlists failed")
        console.print(
            f"[bold red]❌ Listing playlists failed: {escape(str(e))}[/bold red]"
        )
        raise click.ClickException(str(e)) from e

    finally:
        app.close()


@click.group("playlist")
def playlist() -> None:
    """Build playlists from tagged tracks."""
    pass


@playlist.command("create")
@click.argument("name")
@_tag_option
@click.pass_obj
def create_command(app: TaggerApp, name: str, tags: Tuple[str, ...]) -> None:
    """Create playlist NAME holding the tracks tagged with every --tag."""
    try:
        reconciler = app.reconciler()
        playlist_id = asyncio.run(
            reconciler.create_playlist_by_tags(app.user(), name, tags)
        )
        console.print(
            f"[green]✓ Created playlist '{escape(name)}' "
            f"({escape(playlist_id)})[/green]"
        )

    except Exception as e:
        logger.exception("Creating playlist failed")
        console.print(
            f"[bold red]❌ Creating playlist failed: {escape(str(e))}[/bold red]"
        )
        raise click.ClickException(str(e)) from e

    finally:
        app.close()


@playlist.command("update")
@click.argument("playlist_id")
@_tag_option
@click.pass_obj
def update_command(app: TaggerApp, playlist_id: str, tags: Tuple[str, ...]) -> None:
    """Add to PLAYLIST_ID the tracks tagged with every --tag it lacks."""
    try:
        reconciler = app.reconciler()
        asyncio.run(reconciler.update_playlist_by_tags(app.user(), playlist_id, tags))
        console.print(f"[green]✓ Updated playlist {escape(playlist_id)}[/green]")

    except Exception as e:
        logger.exception("Updating playlist failed")
        console.print(
            f"[bold red]❌ Updating playlist failed: {escape(str(e))}[/bold red]"
        )
        raise click.ClickException(str(e)) from e

    finally:
        app.close()
