"""
Client TMDB pour la recuperation des metadonnees de films et de series.

Implemente l'interface IMetadataClient pour TMDB (The Movie Database).
Utilise le cache persistant et le mecanisme de retry pour gerer
le rate limiting.

Usage:
    cache = APICache()
    client = TMDBClient(api_key="your_key", cache=cache)
    show = await client.get_details(MediaType.TV, 1399)
    await client.close()
"""

from typing import Any, Optional

import httpx

from watchlog.adapters.api.cache import APICache
from watchlog.adapters.api.retry import request_with_retry
from watchlog.core.ports.api_clients import IMetadataClient
from watchlog.core.value_objects.statuses import MediaType

# Champs conserves dans l'instantane d'une entree
MOVIE_FIELDS = (
    "id",
    "title",
    "original_title",
    "overview",
    "poster_path",
    "backdrop_path",
    "release_date",
    "runtime",
    "genres",
    "vote_average",
    "vote_count",
    "status",
)
SHOW_FIELDS = (
    "id",
    "name",
    "original_name",
    "overview",
    "poster_path",
    "backdrop_path",
    "first_air_date",
    "last_air_date",
    "episode_run_time",
    "genres",
    "vote_average",
    "vote_count",
    "status",
    "in_production",
    "number_of_seasons",
    "number_of_episodes",
    "last_episode_to_air",
    "next_episode_to_air",
)
EPISODE_FIELDS = ("season_number", "episode_number", "air_date", "name", "runtime")
SEASON_FIELDS = ("season_number", "episode_count", "air_date", "name")


def _pick(data: dict[str, Any], fields: tuple[str, ...]) -> dict[str, Any]:
    return {key: data[key] for key in fields if key in data}


def extract_show_snapshot(data: dict[str, Any]) -> dict[str, Any]:
    """
    Reduit le JSON d'une serie TMDB aux champs utiles au suivi.

    Les episodes de reference (dernier diffuse, prochain) et la liste des
    saisons sont eux-memes reduits.

    Example:
        snapshot = extract_show_snapshot(response.json())
        snapshot["seasons"]  # [{"season_number": 1, "episode_count": 10, ...}]
    """
    snapshot = _pick(data, SHOW_FIELDS)
    for key in ("last_episode_to_air", "next_episode_to_air"):
        episode = snapshot.get(key)
        if isinstance(episode, dict):
            snapshot[key] = _pick(episode, EPISODE_FIELDS)
    seasons = data.get("seasons")
    if isinstance(seasons, list):
        snapshot["seasons"] = [
            _pick(season, SEASON_FIELDS) for season in seasons if isinstance(season, dict)
        ]
    snapshot["mediaType"] = MediaType.TV.value
    return snapshot


def extract_movie_snapshot(data: dict[str, Any]) -> dict[str, Any]:
    """Reduit le JSON d'un film TMDB aux champs utiles au suivi."""
    snapshot = _pick(data, MOVIE_FIELDS)
    snapshot["mediaType"] = MediaType.MOVIE.value
    return snapshot


class TMDBClient(IMetadataClient):
    """
    Client API TMDB pour les metadonnees de films et de series.

    Implemente IMetadataClient avec:
    - Recuperation des details d'un film ou d'une serie
    - Cache persistant (7j films, 6h series)
    - Retry automatique sur rate limiting (429)

    Les details retournes sont des elements de catalogue : JSON reduit,
    marque par mediaType, directement utilisable par le service de
    bibliotheque.

    Attributes:
        TMDB_BASE_URL: URL de base de l'API TMDB v3
    """

    TMDB_BASE_URL = "https://api.themoviedb.org/3"

    def __init__(self, api_key: str, cache: APICache, language: str = "en-US") -> None:
        """
        Initialise le client TMDB.

        Args:
            api_key: Cle API TMDB (v3) ou Read Access Token (v4)
            cache: Instance APICache pour le caching des resultats
            language: Langue des metadonnees (ex: fr-FR)
        """
        self._api_key = api_key
        self._cache = cache
        self._language = language
        self._client: Optional[httpx.AsyncClient] = None

    def _get_client(self) -> httpx.AsyncClient:
        """
        Retourne le client HTTP, le cree si necessaire (lazy init).

        Supporte les deux modes d'authentification TMDB:
        - API Key v3 (32 caracteres hex) : passe en parametre api_key
        - Read Access Token v4 (long JWT) : passe en header Bearer
        """
        if self._client is None or self._client.is_closed:
            is_v4_token = len(self._api_key) > 40

            headers = {"Accept": "application/json"}
            params = {}

            if is_v4_token:
                headers["Authorization"] = f"Bearer {self._api_key}"
            else:
                params["api_key"] = self._api_key

            self._client = httpx.AsyncClient(
                base_url=self.TMDB_BASE_URL,
                headers=headers,
                params=params,
                timeout=30.0,
            )
        return self._client

    def _cache_key(self, media_type: MediaType, tmdb_id: int) -> str:
        return f"tmdb:{media_type.value}:{tmdb_id}:{self._language}"

    @property
    def source(self) -> str:
        """Retourne l'identifiant de la source API."""
        return "tmdb"

    async def get_details(
        self, media_type: MediaType, tmdb_id: int
    ) -> Optional[dict[str, Any]]:
        """
        Recupere les details d'un film ou d'une serie.

        Pattern cache-first : le cache est consulte AVANT l'appel API.

        Args:
            media_type: Type de media
            tmdb_id: ID TMDB du titre

        Returns:
            Element de catalogue reduit, ou None si le titre n'existe pas

        Raises:
            RateLimitError: Si TMDB limite toujours apres les relances
            httpx.HTTPError: Pour les autres erreurs HTTP ou reseau
        """
        cache_key = self._cache_key(media_type, tmdb_id)

        cached = await self._cache.get(cache_key)
        if cached is not None:
            return cached

        client = self._get_client()
        try:
            response = await request_with_retry(
                client,
                "GET",
                f"/{media_type.value}/{tmdb_id}",
                params={"language": self._language},
            )
        except httpx.HTTPStatusError as e:
            if e.response.status_code == 404:
                return None
            raise

        data = response.json()

        if media_type == MediaType.TV:
            details = extract_show_snapshot(data)
            await self._cache.set_show_details(cache_key, details)
        else:
            details = extract_movie_snapshot(data)
            await self._cache.set_details(cache_key, details)
        return details

    async def invalidate(self, media_type: MediaType, tmdb_id: int) -> None:
        """Supprime du cache les details d'un titre (rafraichissement force)."""
        await self._cache.delete(self._cache_key(media_type, tmdb_id))

    async def close(self) -> None:
        """Ferme le client HTTP."""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
        self._client = None
