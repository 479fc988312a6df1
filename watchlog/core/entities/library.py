"""
Entite LibraryEntry : l'enregistrement d'un utilisateur pour un titre.

Une entree associe les champs propres a l'utilisateur (statut, note, episodes vus)
a un instantane des metadonnees TMDB du titre au dernier chargement.

Format persiste (payload JSON) :
    Les champs utilisateur occupent les cles mediaType, id, status, rating,
    dateAdded, watchedEpisodes, seasonRatings, episodeRuntimes. Les autres cles
    sont les metadonnees TMDB telles quelles, sauf le statut de diffusion TMDB
    (metadata["status"]) qui est ecrit sous CATALOG_STATUS_KEY pour ne pas
    entrer en collision avec le statut utilisateur.
"""

from dataclasses import dataclass, field
from typing import Any

from watchlog.core.value_objects.statuses import MediaType, WatchStatus

CATALOG_STATUS_KEY = "catalog_status"

# Cles reservees aux champs utilisateur dans le payload
USER_FIELD_KEYS = frozenset(
    {
        "mediaType",
        "id",
        "status",
        "rating",
        "dateAdded",
        "watchedEpisodes",
        "seasonRatings",
        "episodeRuntimes",
        CATALOG_STATUS_KEY,
    }
)

LibraryKey = tuple[MediaType, int]


@dataclass
class LibraryEntry:
    """
    Entree de la bibliotheque personnelle.

    Identite : le couple (media_type, id), immuable apres creation.

    Attributs:
        media_type: Film ou serie
        id: Identifiant TMDB (entier positif)
        status: Statut de suivi utilisateur
        rating: Note 0-10 (0 = non notee). Pour une serie, moyenne arrondie
            des notes de saison
        date_added: Horodatage d'ajout en millisecondes epoch
        watched_episodes: saison -> numeros d'episodes vus (tries, uniques, >= 1)
        season_ratings: saison -> note 1-10 (absence = non notee)
        episode_runtimes: saison -> episode -> minutes (cache indicatif)
        metadata: Instantane des metadonnees TMDB (titre, saisons, status...)
    """

    media_type: MediaType
    id: int
    status: WatchStatus
    rating: int = 0
    date_added: int = 0
    watched_episodes: dict[int, list[int]] = field(default_factory=dict)
    season_ratings: dict[int, int] = field(default_factory=dict)
    episode_runtimes: dict[int, dict[int, Any]] = field(default_factory=dict)
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def key(self) -> LibraryKey:
        """Cle d'unicite de l'entree dans une bibliotheque."""
        return (self.media_type, self.id)

    @property
    def is_tv(self) -> bool:
        return self.media_type == MediaType.TV

    @property
    def title(self) -> str:
        """Titre affichable (title pour un film, name pour une serie)."""
        return str(
            self.metadata.get("title")
            or self.metadata.get("name")
            or self.metadata.get("original_title")
            or self.metadata.get("original_name")
            or f"{self.media_type.value}:{self.id}"
        )

    def to_payload(self) -> dict[str, Any]:
        """
        Serialise l'entree au format JSON persiste.

        Les numeros de saison deviennent des cles chaine (contrainte JSON).

        Returns:
            Dictionnaire serialisable en JSON
        """
        payload = {k: v for k, v in self.metadata.items() if k not in USER_FIELD_KEYS}
        if "status" in self.metadata:
            payload[CATALOG_STATUS_KEY] = self.metadata["status"]
        payload.update(
            {
                "mediaType": self.media_type.value,
                "id": self.id,
                "status": self.status.value,
                "rating": self.rating,
                "dateAdded": self.date_added,
            }
        )
        if self.is_tv:
            payload["watchedEpisodes"] = {
                str(season): list(episodes)
                for season, episodes in sorted(self.watched_episodes.items())
            }
            payload["seasonRatings"] = {
                str(season): rating
                for season, rating in sorted(self.season_ratings.items())
            }
            payload["episodeRuntimes"] = {
                str(season): {str(ep): minutes for ep, minutes in runtimes.items()}
                for season, runtimes in sorted(self.episode_runtimes.items())
            }
        return payload
