"""Track sync and store status commands."""

import asyncio
import logging

import click
from rich.console import Console
from rich.markup import escape

from ..display import display_statistics
from .init import TaggerApp

console = Console()
logger = logging.getLogger(__name__)


@click.command("sync")
@click.pass_obj
def sync_command(app: TaggerApp) -> None:
    """Sync the track store with the music service library.

    New tracks are stored without tags; tracks no longer in the library are
    removed together with their tags.
    """
    try:
        console.print("[bold blue]🔄 Syncing tracks...[/bold blue]")
        reconciler = app.reconciler()
        user = app.user()

        asyncio.run(reconciler.sync_tracks(user))

        stats = app.store.get_statistics()
        console.print(
            f"[bold green]✅ Sync complete![/bold green] "
            f"{stats['tracks']} tracks in store"
        )

    except Exception as e:
        logger.exception("Sync failed")
        console.print(f"[bold red]❌ Sync failed: {escape(str(e))}[/bold red]")
        raise click.ClickException(str(e)) from e

    finally:
        app.close()


@click.command("status")
@click.pass_obj
def status_command(app: TaggerApp) -> None:
    """Show track and tag counts of the track store."""
    try:
        display_statistics(app.store.get_statistics())

    except Exception as e:
        logger.exception("Status failed")
        console.print(f"[bold red]❌ Status failed: {escape(str(e))}[/bold red]")
        raise click.ClickException(str(e)) from e

    finally:
        app.close()
