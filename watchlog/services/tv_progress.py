"""
Progression et statut d'une serie TV.

Ce module est le coeur du suivi des series :
- compute_progress : combien d'episodes sont vus, diffuses, a voir
- resolve_status : machine a etats du statut utilisateur
- build_for_completion : episodes a cocher quand l'utilisateur passe
  directement une serie en "completed"

Toutes les fonctions sont pures et totales : des metadonnees manquantes ou
invalides degradent le resultat vers des valeurs par defaut, sans exception.
Les instantanes de metadonnees sont passes du plus frais au plus ancien.
"""

from typing import Any, Optional

from watchlog.core.value_objects.progress import AiredMarker, ProgressSnapshot
from watchlog.core.value_objects.statuses import WatchStatus
from watchlog.services.episode_sets import WatchedMap, count_watched, full_season, to_number
from watchlog.services.show_lifecycle import (
    classify,
    extract_aired_marker,
    extract_seasons,
    flatten_snapshots,
    regular_seasons,
)


def total_episodes(*snapshots: Any) -> int:
    """
    Nombre total d'episodes connus (hors speciaux).

    Priorite au premier number_of_episodes positif, sinon a la premiere
    somme positive des episode_count des saisons > 0.
    """
    candidates = flatten_snapshots(snapshots)

    for candidate in candidates:
        number = to_number(candidate.get("number_of_episodes"))
        if number is not None and number > 0:
            return int(number)

    for candidate in candidates:
        seasons = candidate.get("seasons")
        if not isinstance(seasons, list):
            continue
        total = sum(count for _, count in regular_seasons(seasons))
        if total > 0:
            return total

    return 0


def aired_episodes_from_marker(marker: Optional[AiredMarker], seasons: Any) -> int:
    """
    Estime le nombre d'episodes diffuses depuis le dernier episode diffuse.

    Somme des saisons anterieures a celle du marqueur, plus
    min(episodes de la saison du marqueur, numero d'episode du marqueur).
    Retourne 0 sans marqueur ou sans saisons.
    """
    if marker is None:
        return 0
    total = 0
    for season_number, episode_count in regular_seasons(seasons):
        if season_number < marker.season_number:
            total += episode_count
        elif season_number == marker.season_number:
            total += min(episode_count, marker.episode_number)
    return total


def compute_progress(watched_map: Any, *snapshots: Any) -> ProgressSnapshot:
    """
    Calcule la progression d'une serie.

    Args:
        watched_map: Carte saison -> episodes vus
        *snapshots: Instantanes de metadonnees, du plus frais au plus ancien

    Returns:
        ProgressSnapshot (jamais persiste)
    """
    watched = count_watched(watched_map)
    total = total_episodes(*snapshots)
    lifecycle = classify(*snapshots)

    aired = aired_episodes_from_marker(
        extract_aired_marker(*snapshots), extract_seasons(*snapshots)
    )
    if aired <= 0:
        # Sans marqueur exploitable, tous les episodes connus sont supposes diffuses
        aired = total

    if lifecycle.is_ended_series:
        target = total
    elif lifecycle.is_ongoing_series:
        target = aired
    else:
        target = total
    target = max(0, target)

    remaining = max(0, target - watched) if target > 0 else 0

    return ProgressSnapshot(
        watched_count=watched,
        total_episodes=total,
        aired_episodes=aired,
        target_episodes=target,
        remaining_to_target=remaining,
        is_ended_series=lifecycle.is_ended_series,
        is_ongoing_series=lifecycle.is_ongoing_series,
        is_waiting_for_new_episodes=(
            lifecycle.is_ongoing_series and aired > 0 and watched >= aired
        ),
        is_completed_by_progress=(
            lifecycle.is_ended_series and total > 0 and watched >= total
        ),
    )


def resolve_status(current_status: Any, watched_map: Any, *snapshots: Any) -> WatchStatus:
    """
    Calcule le statut suivant d'une serie.

    Regles, dans l'ordre :
    1. on_hold (ancien statut) devient watching ; un statut inconnu aussi.
    2. planned avec au moins un episode vu devient watching.
    3. completed n'est conserve que si la serie est terminee et que tous
       ses episodes sont vus ; sinon retour a watching.
    4. watching/planned passe a completed quand la progression est complete.
    5. dropped n'est jamais modifie automatiquement.

    La fonction est idempotente pour des entrees inchangees.
    """
    status = WatchStatus.parse(current_status)
    if status is None or status == WatchStatus.ON_HOLD:
        status = WatchStatus.WATCHING

    progress = compute_progress(watched_map, *snapshots)

    if status == WatchStatus.PLANNED and progress.watched_count > 0:
        status = WatchStatus.WATCHING

    if status == WatchStatus.COMPLETED:
        if (
            progress.is_ended_series
            and progress.total_episodes > 0
            and progress.watched_count >= progress.total_episodes
        ):
            return WatchStatus.COMPLETED
        return WatchStatus.WATCHING

    if status in (WatchStatus.WATCHING, WatchStatus.PLANNED) and progress.is_completed_by_progress:
        return WatchStatus.COMPLETED

    return status


def build_for_completion(*snapshots: Any) -> WatchedMap:
    """
    Construit la carte d'episodes vus a appliquer lors d'un passage en completed.

    - serie terminee : toutes les saisons (hors 0) entierement cochees
    - sinon, avec un dernier episode diffuse connu : saisons precedentes
      entieres, et la saison du marqueur jusqu'a cet episode
    - sinon : {} (l'appelant doit laisser les episodes existants intacts)
    """
    seasons = extract_seasons(*snapshots)
    if not seasons:
        return {}

    if classify(*snapshots).is_ended_series:
        return {number: full_season(count) for number, count in regular_seasons(seasons)}

    marker = extract_aired_marker(*snapshots)
    if marker is None:
        return {}

    result: WatchedMap = {}
    for number, count in regular_seasons(seasons):
        if number < marker.season_number:
            result[number] = full_season(count)
        elif number == marker.season_number:
            result[number] = full_season(min(count, marker.episode_number))
    return result


def aired_episodes_for_season(season_number: int, *snapshots: Any) -> Optional[list[int]]:
    """
    Episodes diffuses d'une saison.

    Pour une serie en cours, la saison du dernier episode diffuse s'arrete au
    marqueur et les saisons posterieures sont vides. Retourne None si la
    saison est inconnue des metadonnees.
    """
    count = None
    for number, episode_count in regular_seasons(extract_seasons(*snapshots)):
        if number == season_number:
            count = episode_count
    if count is None:
        return None

    marker = extract_aired_marker(*snapshots)
    if marker is not None and classify(*snapshots).is_ongoing_series:
        if season_number > marker.season_number:
            return []
        if season_number == marker.season_number:
            return full_season(min(count, marker.episode_number))
    return full_season(count)
