"""
Commandes CLI de gestion de la bibliotheque : liste, import/export et
actions utilisateur (statut, episodes, notes, suppression).

Chaque action relit l'instantane local, applique l'operation du service de
bibliotheque et reecrit l'instantane.
"""

import asyncio
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.table import Table

from watchlog.adapters.cli.helpers import (
    console,
    fetch_catalog_item,
    load_library,
    parse_media_type,
    save_library,
    with_container,
)
from watchlog.container import Container
from watchlog.core.entities.library import LibraryEntry
from watchlog.core.value_objects.statuses import MediaType, WatchStatus
from watchlog.services.importer import (
    ImportFormatError,
    export_library,
    merge_import,
    read_library_file,
)
from watchlog.services.library import entry_progress

STATUS_STYLES = {
    WatchStatus.PLANNED: "blue",
    WatchStatus.WATCHING: "cyan",
    WatchStatus.COMPLETED: "green",
    WatchStatus.DROPPED: "red",
    WatchStatus.ON_HOLD: "yellow",
}


def _format_progress(entry: LibraryEntry) -> str:
    if not entry.is_tv:
        return ""
    progress = entry_progress(entry)
    text = f"{progress.watched_count}/{progress.target_episodes}"
    if progress.is_waiting_for_new_episodes:
        text += " [yellow](en attente)[/yellow]"
    return text


def _report_change(before: list[LibraryEntry], after: list[LibraryEntry], label: str) -> None:
    if before == after:
        console.print(f"[yellow]Aucun changement[/yellow] ({label})")
    else:
        console.print(f"[green]✓[/green] {label}")


def list_library(
    media_type: Annotated[
        Optional[str],
        typer.Option("--type", "-t", help="Filtrer par type (movie ou tv)"),
    ] = None,
    status: Annotated[
        Optional[str],
        typer.Option("--status", "-s", help="Filtrer par statut"),
    ] = None,
) -> None:
    """Affiche la bibliotheque avec la progression des series."""
    container = Container()
    library = load_library(container)

    if media_type is not None:
        wanted_type = parse_media_type(media_type)
        library = [e for e in library if e.media_type == wanted_type]
    if status is not None:
        wanted_status = WatchStatus.parse(status)
        if wanted_status is None:
            raise typer.BadParameter(f"Statut inconnu: {status!r}")
        library = [e for e in library if e.status == wanted_status]

    if not library:
        console.print("[yellow]Bibliotheque vide.[/yellow]")
        return

    table = Table(title=f"Bibliotheque ({len(library)})")
    table.add_column("Type", style="dim")
    table.add_column("ID", justify="right")
    table.add_column("Titre")
    table.add_column("Statut")
    table.add_column("Note", justify="right")
    table.add_column("Progression")

    for entry in library:
        style = STATUS_STYLES[entry.status]
        table.add_row(
            entry.media_type.value,
            str(entry.id),
            entry.title,
            f"[{style}]{entry.status.value}[/{style}]",
            str(entry.rating) if entry.rating else "-",
            _format_progress(entry),
        )
    console.print(table)


def import_library(
    file: Annotated[Path, typer.Argument(help="Fichier JSON a importer")],
    replace: Annotated[
        bool,
        typer.Option("--replace", help="Remplacer la bibliotheque au lieu de fusionner"),
    ] = False,
) -> None:
    """Importe un export JSON (fusion par defaut, le plus recent gagne)."""
    container = Container()
    try:
        imported = read_library_file(file)
    except ImportFormatError as e:
        console.print(f"[red]Fichier invalide:[/red] {e}")
        raise typer.Exit(code=1)
    except OSError as e:
        console.print(f"[red]Lecture impossible:[/red] {e}")
        raise typer.Exit(code=1)

    if replace:
        library = imported
    else:
        library = merge_import(load_library(container), imported)
    save_library(container, library)

    console.print(
        f"[green]{len(imported)}[/green] entree(s) importee(s), "
        f"bibliotheque: [bold]{len(library)}[/bold] entree(s)"
    )


def export_command(
    file: Annotated[Path, typer.Argument(help="Fichier JSON de destination")],
) -> None:
    """Exporte la bibliotheque en JSON."""
    container = Container()
    count = export_library(load_library(container), file)
    console.print(f"[green]{count}[/green] entree(s) exportee(s) vers {file}")


def set_status(
    media_type: Annotated[str, typer.Argument(help="Type de media (movie ou tv)")],
    tmdb_id: Annotated[int, typer.Argument(help="ID TMDB")],
    status: Annotated[str, typer.Argument(help="planned, watching, completed, dropped, on_hold")],
    rating: Annotated[
        int, typer.Option("--rating", "-r", help="Note du film (0-10)")
    ] = 0,
) -> None:
    """Ajoute un titre ou change son statut."""
    asyncio.run(_set_status_async(media_type, tmdb_id, status, rating))


@with_container()
async def _set_status_async(
    container, media_type: str, tmdb_id: int, status: str, rating: int
) -> None:
    kind = parse_media_type(media_type)
    if WatchStatus.parse(status) is None:
        raise typer.BadParameter(f"Statut inconnu: {status!r}")

    service = container.library_service()
    library = load_library(container)
    existing = service.get_entry(library, kind, tmdb_id)

    item = await fetch_catalog_item(container, kind, tmdb_id)
    if item is None:
        item = dict(existing.metadata) if existing else {}
    item = {**item, "mediaType": kind.value, "id": tmdb_id}

    updated = service.add_to_library(library, item, status, rating=rating)
    save_library(container, updated)
    _report_change(library, updated, f"{kind.value} {tmdb_id} -> {status}")


def toggle_episode(
    tmdb_id: Annotated[int, typer.Argument(help="ID TMDB de la serie")],
    season: Annotated[int, typer.Argument(help="Numero de saison")],
    episode: Annotated[int, typer.Argument(help="Numero d'episode")],
) -> None:
    """Coche ou decoche un episode vu."""
    asyncio.run(_toggle_episode_async(tmdb_id, season, episode))


@with_container()
async def _toggle_episode_async(container, tmdb_id: int, season: int, episode: int) -> None:
    service = container.library_service()
    library = load_library(container)

    item = await fetch_catalog_item(container, MediaType.TV, tmdb_id)
    snapshots = [item] if item else []
    if item is None and service.get_entry(library, MediaType.TV, tmdb_id) is None:
        item = {"mediaType": MediaType.TV.value, "id": tmdb_id}

    updated = service.toggle_episode(
        library, tmdb_id, season, episode, *snapshots, item=item
    )
    save_library(container, updated)
    _report_change(library, updated, f"S{season:02d}E{episode:02d}")

    entry = service.get_entry(updated, MediaType.TV, tmdb_id)
    if entry is not None:
        console.print(f"  Statut: {entry.status.value}, progression: {_format_progress(entry)}")


def rate_season(
    tmdb_id: Annotated[int, typer.Argument(help="ID TMDB de la serie")],
    season: Annotated[int, typer.Argument(help="Numero de saison")],
    rating: Annotated[int, typer.Argument(help="Note 0-10 (0 retire la note)")],
) -> None:
    """Note une saison ; la note de la serie est la moyenne des saisons."""
    container = Container()
    service = container.library_service()
    library = load_library(container)
    if service.get_entry(library, MediaType.TV, tmdb_id) is None:
        console.print(f"[red]Serie absente de la bibliotheque:[/red] {tmdb_id}")
        raise typer.Exit(code=1)

    updated = service.set_season_rating(library, tmdb_id, season, rating)
    save_library(container, updated)
    entry = service.get_entry(updated, MediaType.TV, tmdb_id)
    console.print(
        f"[green]✓[/green] Saison {season}: {rating}, note de la serie: {entry.rating}"
    )


def remove(
    media_type: Annotated[str, typer.Argument(help="Type de media (movie ou tv)")],
    tmdb_id: Annotated[int, typer.Argument(help="ID TMDB")],
) -> None:
    """Retire un titre de la bibliotheque."""
    container = Container()
    service = container.library_service()
    library = load_library(container)
    updated = service.remove_from_library(library, parse_media_type(media_type), tmdb_id)
    save_library(container, updated)
    _report_change(library, updated, f"{media_type} {tmdb_id} retire")
