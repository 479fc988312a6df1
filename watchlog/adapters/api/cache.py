"""
Cache persistant des reponses TMDB avec TTL differencies.

Le cache utilise diskcache pour la persistence sur disque, ce qui permet
de conserver les donnees entre les redemarrages de l'application.

TTL par defaut:
- Films (DETAILS_TTL): 7 jours - les metadonnees d'un film changent rarement
- Series (SHOW_DETAILS_TTL): 6 heures - une serie en cours gagne des
  episodes, son statut de diffusion change
"""

import asyncio
from functools import partial
from pathlib import Path
from typing import Any, Optional, Union

from diskcache import Cache


class APICache:
    """
    Cache asynchrone avec TTL pour les appels API.

    Utilise diskcache pour la persistence et run_in_executor pour
    les operations asynchrones non-bloquantes.

    Example:
        cache = APICache(cache_dir=".cache/api")
        await cache.set_show_details("tmdb:tv:1399:en-US", data)
        data = await cache.get("tmdb:tv:1399:en-US")
    """

    DETAILS_TTL = 7 * 24 * 60 * 60  # 7 jours (604800 s)
    SHOW_DETAILS_TTL = 6 * 60 * 60  # 6 heures (21600 s)

    def __init__(self, cache_dir: Union[str, Path] = ".cache/api") -> None:
        """
        Initialise le cache avec un repertoire de stockage.

        Args:
            cache_dir: Chemin vers le repertoire du cache (cree si inexistant)
        """
        self._cache = Cache(str(cache_dir))

    async def get(self, key: str) -> Optional[Any]:
        """Recupere une valeur du cache (None si absente ou expiree)."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self._cache.get, key)

    async def set(self, key: str, value: Any, ttl: int) -> None:
        """
        Stocke une valeur dans le cache avec un TTL.

        Args:
            key: Cle unique identifiant la donnee
            value: Valeur a stocker (doit etre serializable)
            ttl: Duree de vie en secondes
        """
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(
            None, partial(self._cache.set, key, value, expire=ttl)
        )

    async def set_details(self, key: str, value: Any) -> None:
        """Stocke les details d'un film (TTL de 7 jours)."""
        await self.set(key, value, self.DETAILS_TTL)

    async def set_show_details(self, key: str, value: Any) -> None:
        """Stocke les details d'une serie (TTL de 6 heures)."""
        await self.set(key, value, self.SHOW_DETAILS_TTL)

    async def delete(self, key: str) -> None:
        """Supprime une entree (force le prochain rechargement)."""
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, self._cache.delete, key)

    async def clear(self) -> None:
        """Supprime toutes les entrees du cache."""
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, self._cache.clear)

    def close(self) -> None:
        """Ferme la connexion au cache (a appeler a la fin)."""
        self._cache.close()
