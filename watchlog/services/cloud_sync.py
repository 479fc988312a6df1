"""
Synchronisation de la bibliotheque locale avec le stockage distant.

Le flux :
1. load_remote() relit toutes les lignes de l'utilisateur ; si le distant
   n'est pas vide il remplace l'etat local et la prochaine ecriture
   (l'echo de ce remplacement) est sautee.
2. schedule(library) est appele a chaque modification locale ; les appels
   rapproches sont regroupes par un delai de quiescence (debounce).
3. flush(library) calcule le diff avec le dernier instantane synchronise et
   n'ecrit que les upserts et suppressions necessaires, par lots.

Un compteur de revision croissant invalide les resultats d'une operation
depassee par une plus recente. Les echecs reseau ne sont jamais fatals :
ils sont exposes dans last_error et la synchronisation suivante reessaie.
"""

import asyncio
import contextlib
from collections.abc import Sequence
from datetime import date
from typing import Any, Callable, Optional

from loguru import logger

from watchlog.core.entities.library import LibraryEntry
from watchlog.core.ports.repositories import ILibraryStore, LibraryStoreError
from watchlog.core.value_objects.statuses import MediaType
from watchlog.services.reconciler import (
    LibrarySnapshot,
    SyncPlan,
    build_snapshot,
    chunked,
    diff_for_sync,
    sanitize_collection,
)
from watchlog.services.sanitizer import now_ms


def _row_payload(row: Any) -> Any:
    # Le payload fait foi ; les colonnes de cle completent un payload incomplet
    if not isinstance(row, dict):
        return None
    payload = row.get("payload")
    if not isinstance(payload, dict):
        return None
    payload = dict(payload)
    payload.setdefault("mediaType", row.get("media_type"))
    payload.setdefault("id", row.get("tmdb_id"))
    return payload


class CloudSyncService:
    """
    Synchronisation debouncee vers un ILibraryStore.

    Attributes:
        DEFAULT_DEBOUNCE_SECONDS: Fenetre de quiescence par defaut
        DEFAULT_UPSERT_BATCH_SIZE: Taille des lots d'upsert
        DEFAULT_DELETE_BATCH_SIZE: Taille des lots de suppression
    """

    DEFAULT_DEBOUNCE_SECONDS = 0.55
    DEFAULT_UPSERT_BATCH_SIZE = 200
    DEFAULT_DELETE_BATCH_SIZE = 300

    def __init__(
        self,
        store: ILibraryStore,
        user_id: str,
        debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS,
        upsert_batch_size: int = DEFAULT_UPSERT_BATCH_SIZE,
        delete_batch_size: int = DEFAULT_DELETE_BATCH_SIZE,
        now: Callable[[], int] = now_ms,
        today: Optional[date] = None,
    ) -> None:
        """
        Initialise le service de synchronisation.

        Args:
            store: Stockage distant des entrees
            user_id: Identifiant de l'utilisateur synchronise
            debounce_seconds: Delai de quiescence avant ecriture
            upsert_batch_size: Nombre maximum de lignes par upsert
            delete_batch_size: Nombre maximum d'IDs par suppression
            now: Horloge en millisecondes (sanitization des lignes distantes)
            today: Date de reference pour la sortie des titres
        """
        self._store = store
        self._user_id = user_id
        self._debounce_seconds = debounce_seconds
        self._upsert_batch_size = upsert_batch_size
        self._delete_batch_size = delete_batch_size
        self._now = now
        self._today = today

        self._snapshot: LibrarySnapshot = {}
        self._revision = 0
        self._ready = False
        self._skip_next = False
        self._last_error: Optional[str] = None
        self._pending: Optional[asyncio.Task] = None

    @property
    def ready(self) -> bool:
        """True une fois l'etat distant charge (ou son echec constate)."""
        return self._ready

    @property
    def last_error(self) -> Optional[str]:
        """Message de la derniere erreur de synchronisation, None si tout va bien."""
        return self._last_error

    @property
    def snapshot(self) -> LibrarySnapshot:
        return self._snapshot

    async def load_remote(self) -> Optional[list[LibraryEntry]]:
        """
        Charge la bibliotheque distante.

        Returns:
            La bibliotheque distante si elle n'est pas vide (l'appelant
            l'adopte quand son etat local est vide), None si elle est vide,
            en echec, ou si une operation plus recente a demarre entre-temps
        """
        self._revision += 1
        revision = self._revision

        try:
            rows = await self._store.select_all(self._user_id)
        except LibraryStoreError as e:
            if revision == self._revision:
                self._last_error = str(e)
                self._ready = True
                logger.warning("Chargement distant impossible: {}", e)
            return None

        if revision != self._revision:
            logger.debug("Chargement distant obsolete ignore (revision {})", revision)
            return None

        remote = sanitize_collection(
            [_row_payload(row) for row in rows], now=self._now, today=self._today
        )
        self._snapshot = build_snapshot(remote)
        self._last_error = None
        self._ready = True
        logger.info("Bibliotheque distante chargee: {} entree(s)", len(remote))

        if not remote:
            return None
        self._skip_next = True
        return remote

    def schedule(self, library: Sequence[LibraryEntry]) -> None:
        """
        Programme une synchronisation apres le delai de quiescence.

        Annule la synchronisation deja programmee. Sans effet tant que le
        service n'est pas pret ; consomme le drapeau skip-next au lieu de
        programmer.
        """
        if not self._ready:
            return
        if self._skip_next:
            self._skip_next = False
            logger.debug("Synchronisation sautee (echo du chargement distant)")
            return
        self._cancel_pending()
        self._pending = asyncio.create_task(self._debounced_flush(list(library)))

    async def _debounced_flush(self, library: list[LibraryEntry]) -> None:
        await asyncio.sleep(self._debounce_seconds)
        await self.flush(library)

    def _cancel_pending(self) -> None:
        if self._pending is not None and not self._pending.done():
            self._pending.cancel()
        self._pending = None

    async def wait_idle(self) -> None:
        """Attend la fin de la synchronisation programmee, s'il y en a une."""
        pending = self._pending
        if pending is None:
            return
        with contextlib.suppress(asyncio.CancelledError):
            await pending

    async def flush(self, library: Sequence[LibraryEntry]) -> SyncPlan:
        """
        Ecrit immediatement le diff entre le dernier instantane et library.

        Les upserts sont ecrits par lots, puis les suppressions par type de
        media. En cas de succes l'instantane est adopte ; en cas d'echec il
        est conserve pour que le cycle suivant reessaie.

        Returns:
            Le plan d'ecriture calcule
        """
        plan = diff_for_sync(self._snapshot, library)
        if plan.is_empty:
            return plan

        self._revision += 1
        revision = self._revision

        try:
            for batch in chunked(plan.upserts, self._upsert_batch_size):
                await self._store.upsert_batch(self._user_id, batch)
            for media_type in (MediaType.MOVIE, MediaType.TV):
                for ids in chunked(plan.deletes[media_type], self._delete_batch_size):
                    await self._store.delete_batch(self._user_id, media_type, ids)
        except LibraryStoreError as e:
            if revision == self._revision:
                self._last_error = str(e)
                logger.warning("Synchronisation echouee: {}", e)
            return plan

        if revision == self._revision:
            self._snapshot = plan.snapshot
            self._last_error = None
            logger.info(
                "Synchronisation: {} upsert(s), {} suppression(s)",
                len(plan.upserts),
                plan.delete_count,
            )
        else:
            logger.debug("Resultat de synchronisation obsolete ignore (revision {})", revision)
        return plan

    def reset(self) -> None:
        """Oublie l'etat synchronise (deconnexion, changement d'utilisateur)."""
        self._cancel_pending()
        self._revision += 1
        self._snapshot = {}
        self._ready = False
        self._skip_next = False
        self._last_error = None
