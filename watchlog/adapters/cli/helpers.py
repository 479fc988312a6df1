"""
Utilitaires partages pour les commandes CLI de watchlog.

Ce module fournit :
- suppress_loguru : context manager pour desactiver/reactiver les logs loguru
- with_container : decorateur injectant un container initialise
- console : instance Rich Console partagee
- load_library / save_library : lecture et ecriture de l'instantane local
- parse_media_type : validation de l'argument TYPE
"""

from contextlib import contextmanager
from functools import wraps
from typing import Any, Optional

import httpx
import typer
from loguru import logger as loguru_logger
from rich.console import Console

from watchlog.adapters.api.retry import RateLimitError
from watchlog.container import Container
from watchlog.core.entities.library import LibraryEntry
from watchlog.core.value_objects.statuses import MediaType
from watchlog.services.reconciler import sanitize_collection

console = Console()


@contextmanager
def suppress_loguru():
    """
    Context manager pour desactiver les logs loguru pendant l'affichage Rich.

    Usage:
        with suppress_loguru():
            console.print(...)
    """
    loguru_logger.disable("watchlog")
    try:
        yield
    finally:
        loguru_logger.enable("watchlog")


def with_container(requires_db: bool = False):
    """
    Decorateur qui injecte un container initialise en premier argument.

    Args:
        requires_db: Si True, cree les tables de la base distante.

    Usage:
        @with_container(requires_db=True)
        async def my_command(container, ...):
            config = container.config()
    """
    def decorator(func):
        @wraps(func)
        async def wrapper(*args, **kwargs):
            container = Container()
            if requires_db:
                container.database.init()
            return await func(container, *args, **kwargs)
        return wrapper
    return decorator


def parse_media_type(value: str) -> MediaType:
    """Convertit l'argument TYPE (movie/tv) ou leve typer.BadParameter."""
    media_type = MediaType.parse(value)
    if media_type is None:
        raise typer.BadParameter(f"Type inconnu: {value!r} (movie ou tv)")
    return media_type


def load_library(container: Container) -> list[LibraryEntry]:
    """Relit et normalise l'instantane local."""
    return sanitize_collection(container.snapshot_store().load())


def save_library(container: Container, library: list[LibraryEntry]) -> None:
    """Ecrit l'instantane local."""
    container.snapshot_store().save([entry.to_payload() for entry in library])


async def fetch_catalog_item(
    container: Container, media_type: MediaType, tmdb_id: int
) -> Optional[dict[str, Any]]:
    """
    Recupere l'element de catalogue TMDB si l'API est configuree.

    Returns:
        Les details TMDB, ou None (API desactivee, titre inconnu, erreur reseau)
    """
    if not container.config().tmdb_enabled:
        return None
    client = container.tmdb_client()
    try:
        return await client.get_details(media_type, tmdb_id)
    except (RateLimitError, httpx.HTTPError) as e:
        loguru_logger.warning("TMDB indisponible pour {} {}: {}", media_type.value, tmdb_id, e)
        return None
    finally:
        await client.close()
