"""
Interfaces ports pour le stockage de la bibliotheque.

Deux stockages coexistent :
- le stockage distant (ILibraryStore), une table de lignes par utilisateur,
  synchronisee par diff minimal ;
- l'instantane local (ISnapshotStore), un tableau JSON relu au demarrage.

Les deux manipulent des payloads (dict JSON), jamais des entites : tout ce qui
est relu passe par le sanitizer avant d'entrer dans le domaine.
"""

from abc import ABC, abstractmethod
from typing import Any, Iterable

from watchlog.core.value_objects.statuses import MediaType


class LibraryStoreError(Exception):
    """Echec d'une operation sur le stockage distant."""


class ILibraryStore(ABC):
    """
    Interface du stockage distant de la bibliotheque.

    Une ligne par (user_id, media_type, tmdb_id) ; le payload est l'entree
    serialisee. Les operations sont asynchrones (stockage reseau ou BDD).
    """

    @abstractmethod
    async def select_all(self, user_id: str) -> list[dict[str, Any]]:
        """Retourne toutes les lignes de l'utilisateur (media_type, tmdb_id, payload)."""
        ...

    @abstractmethod
    async def upsert_batch(self, user_id: str, rows: list[dict[str, Any]]) -> None:
        """
        Insere ou met a jour un lot de lignes.

        Chaque ligne contient media_type, tmdb_id et payload. Le conflit est
        resolu sur (user_id, media_type, tmdb_id), dernier ecrit gagnant.
        """
        ...

    @abstractmethod
    async def delete_batch(
        self, user_id: str, media_type: MediaType, tmdb_ids: Iterable[int]
    ) -> None:
        """Supprime les lignes de l'utilisateur pour un type et des IDs donnes."""
        ...


class ISnapshotStore(ABC):
    """Interface de l'instantane local de la bibliotheque."""

    @abstractmethod
    def load(self) -> list[Any]:
        """Relit l'instantane ([] s'il est absent ou illisible)."""
        ...

    @abstractmethod
    def save(self, payloads: list[dict[str, Any]]) -> None:
        """Remplace l'instantane par les payloads fournis."""
        ...
