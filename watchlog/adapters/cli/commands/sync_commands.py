"""
Commandes CLI reseau : rafraichissement TMDB et synchronisation distante.
"""

import asyncio
from typing import Annotated, Optional

import typer
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TaskProgressColumn,
    TextColumn,
)

from watchlog.adapters.cli.helpers import (
    console,
    load_library,
    save_library,
    suppress_loguru,
    with_container,
)
from watchlog.core.entities.library import LibraryEntry


def refresh(
    limit: Annotated[
        Optional[int],
        typer.Option("--limit", "-l", help="Nombre maximum de series a rafraichir"),
    ] = None,
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Ignorer le cache TMDB"),
    ] = False,
) -> None:
    """Recharge les metadonnees TMDB des series et revalide leur statut."""
    asyncio.run(_refresh_async(limit, force))


@with_container()
async def _refresh_async(container, limit: Optional[int], force: bool = False) -> None:
    """Implementation async de la commande refresh."""
    if not container.config().tmdb_enabled:
        console.print("[red]API TMDB non configuree[/red] (WATCHLOG_TMDB_API_KEY)")
        raise typer.Exit(code=1)

    library = load_library(container)
    if not any(entry.is_tv for entry in library):
        console.print("[yellow]Aucune serie a rafraichir.[/yellow]")
        return

    service = container.metadata_refresh_service()
    client = container.tmdb_client()

    try:
        with suppress_loguru():
            with Progress(
                SpinnerColumn(),
                TextColumn("[progress.description]{task.description}"),
                BarColumn(),
                TaskProgressColumn(),
                console=console,
                transient=True,
            ) as progress:
                task = progress.add_task("[cyan]Rafraichissement...", total=None)

                def on_progress(current: int, total: int, entry: LibraryEntry) -> None:
                    progress.update(
                        task, total=total, completed=current - 1, description=entry.title
                    )

                updated, stats = await service.refresh_library(
                    library, limit=limit, on_progress=on_progress, force=force
                )
    finally:
        await client.close()

    save_library(container, updated)

    console.print("\n[bold]Resume:[/bold]")
    console.print(f"  [green]{stats.refreshed}[/green] serie(s) rafraichie(s)")
    if stats.status_changed > 0:
        console.print(f"  [cyan]{stats.status_changed}[/cyan] statut(s) revalide(s)")
    if stats.failed > 0:
        console.print(f"  [red]{stats.failed}[/red] echec(s)")


def sync() -> None:
    """Synchronise la bibliotheque locale avec la base distante."""
    asyncio.run(_sync_async())


@with_container(requires_db=True)
async def _sync_async(container) -> None:
    """
    Implementation async de la commande sync.

    La version distante n'est adoptee que si la bibliotheque locale est vide.
    Sinon la bibliotheque locale fait foi et seul son diff par rapport a la
    version distante est ecrit.
    """
    service = container.cloud_sync_service()

    remote = await service.load_remote()
    if service.last_error:
        console.print(f"[yellow]Synchronisation indisponible:[/yellow] {service.last_error}")
        return

    library = load_library(container)
    if not library and remote is not None:
        save_library(container, remote)
        console.print(
            f"[green]✓[/green] Bibliotheque locale initialisee depuis la version distante "
            f"({len(remote)} entree(s))"
        )
        return

    plan = await service.flush(library)
    if service.last_error:
        console.print(f"[yellow]Synchronisation echouee:[/yellow] {service.last_error}")
        return
    if plan.is_empty:
        console.print("[dim]Rien a synchroniser.[/dim]")
        return
    console.print(
        f"[green]✓[/green] {len(plan.upserts)} ecriture(s), "
        f"{plan.delete_count} suppression(s)"
    )
