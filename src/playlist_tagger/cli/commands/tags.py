"""Commands for adding and removing track tags."""

import asyncio
import logging
from typing import Tuple

import click
from rich.console import Console
from rich.markup import escape

from .init import TaggerApp

console = Console()
logger = logging.getLogger(__name__)

_track_option = click.option(
    "--track",
    "-i",
    "track_ids",
    multiple=True,
    required=True,
    help="Id of a track to change (repeatable)",
)


@click.group("tag")
def tag() -> None:
    """Add or remove tags on stored tracks."""
    pass


@tag.command("add")
@click.argument("tags", nargs=-1, required=True)
@_track_option
@click.pass_obj
def add_command(
    app: TaggerApp, tags: Tuple[str, ...], track_ids: Tuple[str, ...]
) -> None:
    """Add TAGS to the given tracks."""
    try:
        reconciler = app.reconciler()
        asyncio.run(reconciler.add_tags_to_tracks(app.user(), track_ids, tags))
        console.print(
            f"[green]✓ Tagged {len(set(track_ids))} track(s) with "
            f"{escape(', '.join(tags))}[/green]"
        )

    except Exception as e:
        logger.exception("Adding tags failed")
        console.print(f"[bold red]❌ Adding tags failed: {escape(str(e))}[/bold red]")
        raise click.ClickException(str(e)) from e

    finally:
        app.close()


@tag.command("remove")
@click.argument("tags", nargs=-1, required=True)
@_track_option
@click.pass_obj
def remove_command(
    app: TaggerApp, tags: Tuple[str, ...], track_ids: Tuple[str, ...]
) -> None:
    """Remove TAGS from the given tracks."""
    try:
        reconciler = app.reconciler()
        asyncio.run(reconciler.remove_tags_from_tracks(app.user(), track_ids, tags))
        console.print(
            f"[green]✓ Removed {escape(', '.join(tags))} from "
            f"{len(set(track_ids))} track(s)[/green]"
        )

    except Exception as e:
        logger.exception("Removing tags failed")
        console.print(
            f"[bold red]❌ Removing tags failed: {escape(str(e))}[/bold red]"
        )
        raise click.ClickException(str(e)) from e

    finally:
        app.close()
