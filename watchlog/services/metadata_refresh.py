"""
Service de rafraichissement des metadonnees TMDB des series suivies.

Une serie en cours de diffusion change : nouveaux episodes, nouvelle saison,
fin de serie. Ce service recharge les details depuis TMDB, les superpose a
l'instantane stocke dans l'entree et revalide le statut de suivi.
"""

import asyncio
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, replace
from typing import Any, Callable, Optional

import httpx
from loguru import logger

from watchlog.adapters.api.retry import RateLimitError
from watchlog.core.entities.library import USER_FIELD_KEYS, LibraryEntry
from watchlog.core.ports.api_clients import IMetadataClient
from watchlog.core.value_objects.statuses import MediaType
from watchlog.services.tv_progress import resolve_status


@dataclass
class RefreshStats:
    """Statistiques de rafraichissement."""

    total: int = 0
    refreshed: int = 0
    failed: int = 0
    skipped: int = 0
    status_changed: int = 0


def overlay_metadata(
    cached: Mapping[str, Any], fresh: Mapping[str, Any]
) -> dict[str, Any]:
    """
    Superpose les metadonnees fraiches a l'instantane stocke.

    Les valeurs fraiches gagnent ; les cles reservees aux champs utilisateur
    sont ignorees, sauf "status" qui est le statut de diffusion TMDB.
    """
    merged = dict(cached)
    for key, value in fresh.items():
        if key in USER_FIELD_KEYS and key != "status":
            continue
        merged[key] = value
    return merged


class MetadataRefreshService:
    """
    Service de rafraichissement des metadonnees des series.

    Les films ne sont pas rafraichis : leurs metadonnees n'influencent pas
    le statut de suivi.
    """

    def __init__(
        self,
        client: IMetadataClient,
        rate_limit_seconds: float = 0.25,
    ) -> None:
        """
        Initialise le service.

        Args:
            client: Source de metadonnees (TMDB)
            rate_limit_seconds: Delai entre deux appels API
        """
        self._client = client
        self._rate_limit_seconds = rate_limit_seconds

    async def _fetch(
        self, entry: LibraryEntry, force: bool = False
    ) -> Optional[dict[str, Any]]:
        if force:
            await self._client.invalidate(MediaType.TV, entry.id)
        try:
            return await self._client.get_details(MediaType.TV, entry.id)
        except (RateLimitError, httpx.HTTPError) as e:
            logger.warning("Rafraichissement impossible pour {}: {}", entry.title, e)
            return None

    async def refresh_entry(self, entry: LibraryEntry) -> LibraryEntry:
        """
        Rafraichit une serie et revalide son statut.

        Args:
            entry: Entree a rafraichir

        Returns:
            L'entree mise a jour, ou l'entree inchangee si ce n'est pas une
            serie ou si les details sont indisponibles
        """
        entry, _ = await self._refresh_one(entry)
        return entry

    async def _refresh_one(
        self, entry: LibraryEntry, force: bool = False
    ) -> tuple[LibraryEntry, bool]:
        if not entry.is_tv:
            return entry, False

        details = await self._fetch(entry, force)
        if not details:
            return entry, False

        status = resolve_status(
            entry.status, entry.watched_episodes, details, entry.metadata
        )
        if status != entry.status:
            logger.info(
                "Statut de {} revalide: {} -> {}",
                entry.title,
                entry.status.value,
                status.value,
            )
        updated = replace(
            entry, metadata=overlay_metadata(entry.metadata, details), status=status
        )
        return updated, True

    async def refresh_library(
        self,
        library: Sequence[LibraryEntry],
        limit: Optional[int] = None,
        on_progress: Optional[Callable[[int, int, LibraryEntry], None]] = None,
        force: bool = False,
    ) -> tuple[list[LibraryEntry], RefreshStats]:
        """
        Rafraichit les series de la bibliotheque.

        Args:
            library: Bibliotheque courante
            limit: Nombre maximum de series a rafraichir (toutes si None)
            on_progress: Callback (index, total, entree) appele avant chaque serie
            force: Ignore le cache TMDB et recharge chaque serie

        Returns:
            Tuple (nouvelle bibliotheque, statistiques)
        """
        stats = RefreshStats()
        shows = [entry for entry in library if entry.is_tv]
        stats.skipped = len(library) - len(shows)
        if limit is not None:
            shows = shows[: max(0, limit)]
        stats.total = len(shows)

        refreshed: dict[int, LibraryEntry] = {}
        for i, entry in enumerate(shows):
            if i > 0 and self._rate_limit_seconds > 0:
                await asyncio.sleep(self._rate_limit_seconds)
            if on_progress is not None:
                on_progress(i + 1, stats.total, entry)

            updated, ok = await self._refresh_one(entry, force)
            if not ok:
                stats.failed += 1
                continue
            stats.refreshed += 1
            if updated.status != entry.status:
                stats.status_changed += 1
            refreshed[entry.id] = updated

        result = [
            refreshed.get(entry.id, entry) if entry.is_tv else entry
            for entry in library
        ]
        return result, stats
