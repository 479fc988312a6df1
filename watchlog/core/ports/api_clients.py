"""
Interfaces ports pour les clients API.

Interface abstraite (port) definissant le contrat de la source de metadonnees
(TMDB). Le domaine ne consomme que le JSON brut d'un film ou d'une serie :
la recuperation, le cache et la localisation sont l'affaire de l'adaptateur.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional

from watchlog.core.value_objects.statuses import MediaType


class IMetadataClient(ABC):
    """
    Interface de la source de metadonnees media (lecture seule).

    Les implementations renvoient le payload JSON du fournisseur, cle par
    (type de media, identifiant).
    """

    @abstractmethod
    async def get_details(
        self, media_type: MediaType, tmdb_id: int
    ) -> Optional[dict[str, Any]]:
        """
        Recupere les details complets d'un film ou d'une serie.

        Args:
            media_type: Type de media (movie ou tv)
            tmdb_id: Identifiant du titre chez le fournisseur

        Returns:
            Payload JSON du fournisseur, ou None si le titre n'existe pas
        """
        ...

    @property
    @abstractmethod
    def source(self) -> str:
        """Retourne l'identifiant de la source API (ex: 'tmdb')."""
        ...

    @abstractmethod
    async def invalidate(self, media_type: MediaType, tmdb_id: int) -> None:
        """Oublie la reponse mise en cache pour un titre."""
        ...
