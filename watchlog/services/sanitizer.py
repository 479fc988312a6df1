"""
Normalisation des entrees de bibliotheque relues (instantane local, import,
stockage distant).

sanitize_entry transforme un payload brut en LibraryEntry canonique, ou None
si l'entree est inexploitable. Les donnees invalides sont corrigees champ par
champ ; aucune exception n'est levee.
"""

import math
import time
from collections.abc import Mapping
from datetime import date
from typing import Any, Callable, Optional

from loguru import logger

from watchlog.core.entities.library import (
    CATALOG_STATUS_KEY,
    USER_FIELD_KEYS,
    LibraryEntry,
)
from watchlog.core.value_objects.statuses import (
    DEFAULT_STATUS,
    MediaType,
    WatchStatus,
    legal_statuses,
)
from watchlog.services.episode_sets import normalize_episode_map, to_int, to_number
from watchlog.services.release_clock import is_released_date


def now_ms() -> int:
    """Horodatage courant en millisecondes epoch."""
    return int(time.time() * 1000)


def clamp_rating(value: Any) -> int:
    """Note entiere 0-10, arrondie au plus proche (0.5 vers le haut) ; 0 si invalide."""
    number = to_number(value)
    if number is None:
        return 0
    return max(0, min(10, math.floor(number + 0.5)))


def normalize_season_ratings(raw: Any) -> dict[int, int]:
    """Notes de saison 1-10 ; les notes nulles ou invalides sont supprimees."""
    if not isinstance(raw, Mapping):
        return {}
    result = {}
    for season_key, rating in raw.items():
        season = to_int(season_key)
        if season is None or season < 0:
            continue
        normalized = clamp_rating(rating)
        if normalized > 0:
            result[season] = normalized
    return dict(sorted(result.items()))


def normalize_episode_runtimes(raw: Any) -> dict[int, dict[int, Any]]:
    """Cache des durees d'episodes : seules les saisons sous forme de dict sont gardees."""
    if not isinstance(raw, Mapping):
        return {}
    result: dict[int, dict[int, Any]] = {}
    for season_key, runtimes in raw.items():
        season = to_int(season_key)
        if season is None or not isinstance(runtimes, Mapping):
            continue
        episodes = {}
        for episode_key, minutes in runtimes.items():
            episode = to_int(episode_key)
            if episode is not None and episode > 0:
                episodes[episode] = minutes
        result[season] = episodes
    return result


def normalize_date_added(value: Any, now: Callable[[], int] = now_ms) -> int:
    number = to_number(value)
    if number is None or number <= 0:
        return now()
    return int(number)


def _extract_metadata(raw: Mapping[str, Any]) -> dict[str, Any]:
    metadata = {k: v for k, v in raw.items() if k not in USER_FIELD_KEYS}
    if CATALOG_STATUS_KEY in raw:
        metadata["status"] = raw[CATALOG_STATUS_KEY]
    return metadata


def sanitize_entry(
    raw: Any,
    now: Callable[[], int] = now_ms,
    today: Optional[date] = None,
) -> Optional[LibraryEntry]:
    """
    Normalise un payload brut en LibraryEntry.

    Regles :
    - rejet (None) sans mediaType valide ou sans id entier positif
    - note ramenee a un entier 0-10
    - statut restreint aux valeurs legales du type (repli : planned pour un
      film, watching pour une serie ; on_hold devient watching)
    - un titre non sorti ne peut pas etre completed : retour a planned,
      note remise a 0 (et progression effacee pour une serie)
    - episodes vus et notes de saison canonicalises
    - dateAdded invalide remplace par maintenant
    - les metadonnees TMDB sont conservees telles quelles

    Args:
        raw: Payload JSON (ou LibraryEntry deja construite)
        now: Horloge en millisecondes pour dateAdded manquant
        today: Date de reference pour la sortie du titre
    """
    if isinstance(raw, LibraryEntry):
        raw = raw.to_payload()
    if not isinstance(raw, Mapping):
        logger.debug("Entree ignoree: payload non objet ({})", type(raw).__name__)
        return None

    media_type = MediaType.parse(raw.get("mediaType"))
    tmdb_id = to_int(raw.get("id"))
    if media_type is None or tmdb_id is None or tmdb_id <= 0:
        logger.debug(
            "Entree ignoree: mediaType={!r} id={!r}", raw.get("mediaType"), raw.get("id")
        )
        return None

    metadata = _extract_metadata(raw)
    status = WatchStatus.parse(raw.get("status"))
    if media_type == MediaType.TV and status == WatchStatus.ON_HOLD:
        status = WatchStatus.WATCHING
    if status not in legal_statuses(media_type):
        status = DEFAULT_STATUS[media_type]
    rating = clamp_rating(raw.get("rating"))
    date_added = normalize_date_added(raw.get("dateAdded"), now)

    if media_type == MediaType.MOVIE:
        if status == WatchStatus.COMPLETED and not is_released_date(
            metadata.get("release_date"), today=today
        ):
            status = WatchStatus.PLANNED
            rating = 0
        return LibraryEntry(
            media_type=media_type,
            id=tmdb_id,
            status=status,
            rating=rating,
            date_added=date_added,
            metadata=metadata,
        )

    watched_episodes = normalize_episode_map(raw.get("watchedEpisodes"))
    season_ratings = normalize_season_ratings(raw.get("seasonRatings"))
    if status == WatchStatus.COMPLETED and not is_released_date(
        metadata.get("first_air_date"), today=today
    ):
        status = WatchStatus.PLANNED
        rating = 0
        watched_episodes = {}
        season_ratings = {}

    return LibraryEntry(
        media_type=media_type,
        id=tmdb_id,
        status=status,
        rating=rating,
        date_added=date_added,
        watched_episodes=watched_episodes,
        season_ratings=season_ratings,
        episode_runtimes=normalize_episode_runtimes(raw.get("episodeRuntimes")),
        metadata=metadata,
    )
