"""
Classification du cycle de vie d'une serie a partir des metadonnees TMDB.

Plusieurs instantanes de metadonnees peuvent etre consultes en meme temps
(par exemple une reponse TMDB fraiche et la copie stockee dans l'entree).
Contrat d'ordre : les instantanes sont passes du plus frais au plus ancien et
la premiere valeur non vide gagne.

Une serie sans aucun signal de cycle de vie n'est ni terminee ni en cours ;
le calcul de progression la traite alors comme "ensemble complet connu".
"""

from collections.abc import Iterable, Mapping
from typing import Any, Optional

from watchlog.core.value_objects.progress import AiredMarker, ShowLifecycle
from watchlog.services.episode_sets import to_int

ENDED_TV_STATUSES = frozenset({"Ended", "Canceled", "Cancelled"})
ONGOING_TV_STATUSES = frozenset({"Returning Series", "In Production", "Planned", "Pilot"})

Snapshot = Mapping[str, Any]


def flatten_snapshots(snapshots: Iterable[Any]) -> list[Snapshot]:
    """
    Aplatit la liste d'instantanes en conservant l'ordre.

    Les valeurs vides (None, {}) sont ignorees et les listes imbriquees
    sont deroulees sur un niveau.
    """
    result: list[Snapshot] = []
    for candidate in snapshots:
        if isinstance(candidate, (list, tuple)):
            result.extend(c for c in candidate if isinstance(c, Mapping) and c)
        elif isinstance(candidate, Mapping) and candidate:
            result.append(candidate)
    return result


def classify(*snapshots: Any) -> ShowLifecycle:
    """
    Determine si la serie est terminee, en cours, ou indeterminee.

    - terminee : le premier statut non vide est "Ended", "Canceled" ou "Cancelled"
    - en cours : non terminee et (un instantane a next_episode_to_air, ou
      in_production vrai, ou le statut est un statut de production)
    """
    candidates = flatten_snapshots(snapshots)
    status_value = next(
        (
            str(c.get("status")).strip()
            for c in candidates
            if c.get("status") and str(c.get("status")).strip()
        ),
        "",
    )

    has_next_episode = any(bool(c.get("next_episode_to_air")) for c in candidates)
    in_production = any(bool(c.get("in_production")) for c in candidates)
    is_ended = status_value in ENDED_TV_STATUSES
    is_ongoing = not is_ended and (
        has_next_episode or in_production or status_value in ONGOING_TV_STATUSES
    )
    return ShowLifecycle(
        status_value=status_value,
        is_ended_series=is_ended,
        is_ongoing_series=is_ongoing,
    )


def extract_aired_marker(*snapshots: Any) -> Optional[AiredMarker]:
    """Premier last_episode_to_air bien forme (saison et episode entiers >= 1)."""
    for candidate in flatten_snapshots(snapshots):
        episode = candidate.get("last_episode_to_air")
        if not isinstance(episode, Mapping):
            continue
        season_number = to_int(episode.get("season_number"))
        episode_number = to_int(episode.get("episode_number"))
        if season_number is None or season_number <= 0:
            continue
        if episode_number is None or episode_number <= 0:
            continue
        return AiredMarker(season_number=season_number, episode_number=episode_number)
    return None


def extract_seasons(*snapshots: Any) -> Optional[list[Any]]:
    """Premiere liste de saisons non vide, ou None."""
    for candidate in flatten_snapshots(snapshots):
        seasons = candidate.get("seasons")
        if isinstance(seasons, list) and seasons:
            return seasons
    return None


def regular_seasons(seasons: Any) -> list[tuple[int, int]]:
    """
    Saisons exploitables d'une liste TMDB, sous forme (numero, nb episodes).

    Ignore la saison 0 (speciaux) et les saisons au numero ou au nombre
    d'episodes invalide.
    """
    if not isinstance(seasons, list):
        return []
    result = []
    for season in seasons:
        if not isinstance(season, Mapping):
            continue
        season_number = to_int(season.get("season_number"))
        episode_count = to_int(season.get("episode_count"))
        if season_number is None or season_number <= 0:
            continue
        if episode_count is None or episode_count <= 0:
            continue
        result.append((season_number, episode_count))
    return result


def season_episode_count(seasons: Any, season_number: int) -> Optional[int]:
    """Nombre d'episodes connu d'une saison, ou None."""
    for number, count in regular_seasons(seasons):
        if number == season_number:
            return count
    return None
