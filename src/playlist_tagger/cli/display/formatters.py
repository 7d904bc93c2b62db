"""Display formatters and UI helpers for CLI."""

from typing import Any, Dict, List

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ...models import PlaylistWithTracks

console = Console()


def format_tags(tags: List[str]) -> str:
    """Render a tag list for a table cell."""
    if not tags:
        return "[dim]-[/dim]"
    return ", ".join(f"[cyan]{escape(tag)}[/cyan]" for tag in tags)


def display_playlists(playlists: List[PlaylistWithTracks]) -> None:
    """Display playlists with their tag-annotated tracks.

    Args:
        playlists: Result of Reconciler.get_playlists
    """
    if not playlists:
        console.print("[yellow]No playlists found[/yellow]")
        return

    for entry in playlists:
        table = Table(
            title=f"{escape(entry.playlist.name)} ({entry.track_count} tracks)",
            title_justify="left",
            show_header=True,
            header_style="bold magenta",
        )
        table.add_column("ID", style="dim")
        table.add_column("Track")
        table.add_column("Duration", justify="right")
        table.add_column("Tags")

        for track in entry.tracks:
            table.add_row(
                escape(track.id),
                escape(track.display_name),
                track.duration_formatted,
                format_tags(track.tags),
            )

        console.print(table)
        console.print()


def display_statistics(stats: Dict[str, Any]) -> None:
    """Display track store statistics.

    Args:
        stats: Result of TrackStoreService.get_statistics
    """
    console.print("\n[bold green]📊 Track Store[/bold green]")
    console.print(f"[dim]{stats['database_path']}[/dim]\n")

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("User", style="cyan")
    table.add_column("Service", style="cyan")
    table.add_column("Tracks", style="green", justify="right")

    for partition in stats["partitions"]:
        table.add_row(
            escape(partition["user_id"]),
            escape(partition["service_type"]),
            str(partition["tracks"]),
        )
    console.print(table)

    if stats["tags"]:
        tag_table = Table(show_header=True, header_style="bold magenta")
        tag_table.add_column("Tag", style="cyan")
        tag_table.add_column("Tracks", style="green", justify="right")
        for tag, count in sorted(stats["tags"].items(), key=lambda item: -item[1]):
            tag_table.add_row(escape(tag), str(count))
        console.print(tag_table)
    else:
        console.print("[dim]No tags yet[/dim]")
