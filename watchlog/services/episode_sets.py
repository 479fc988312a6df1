"""
Operations ensemblistes sur les episodes vus d'une serie.

Une carte d'episodes vus associe un numero de saison a la liste des numeros
d'episodes vus. Forme canonique : liste triee, sans doublon, entiers >= 1.
La saison 0 (episodes speciaux) n'entre jamais dans les comptages.
"""

import math
from collections.abc import Iterable, Mapping
from typing import Any, Optional

WatchedMap = dict[int, list[int]]


def to_number(value: Any) -> Optional[float]:
    """
    Convertit une valeur JSON en nombre fini.

    Les booleens sont rejetes : ils ne sont jamais des numeros ou des notes.

    Returns:
        Le nombre en float, ou None si la valeur n'est pas numerique
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def to_int(value: Any) -> Optional[int]:
    """Convertit en entier si la valeur est numerique et entiere, sinon None."""
    number = to_number(value)
    if number is None or not number.is_integer():
        return None
    return int(number)


def canonicalize_episode_list(raw: Any) -> list[int]:
    """
    Normalise une liste brute de numeros d'episodes.

    Les valeurs sont converties en nombres ; les non-entiers et les valeurs
    < 1 sont ecartes, les doublons supprimes et le resultat trie.

    Example:
        canonicalize_episode_list([3, 1, 1, -2, "4", 2.2]) -> [1, 3, 4]
    """
    if not isinstance(raw, (list, tuple, set, frozenset)):
        return []
    episodes = {to_int(value) for value in raw}
    return sorted(ep for ep in episodes if ep is not None and ep > 0)


def normalize_episode_map(raw: Any) -> WatchedMap:
    """
    Normalise une carte saison -> episodes vus.

    Les cles de saison sont converties en entiers >= 0 (les autres sont
    ignorees), les valeurs non-listes ignorees, chaque liste canonicalisee
    et les saisons vides supprimees.
    """
    if not isinstance(raw, Mapping):
        return {}
    result: WatchedMap = {}
    for season_key, episodes in raw.items():
        season = to_int(season_key)
        if season is None or season < 0:
            continue
        if not isinstance(episodes, (list, tuple)):
            continue
        merged = canonicalize_episode_list([*result.get(season, []), *episodes])
        if merged:
            result[season] = merged
    return dict(sorted(result.items()))


def count_watched(watched_map: Any) -> int:
    """Nombre d'episodes vus hors saison 0 (les valeurs non-listes comptent 0)."""
    if not isinstance(watched_map, Mapping):
        return 0
    total = 0
    for season_key, episodes in watched_map.items():
        if to_int(season_key) == 0:
            continue
        if isinstance(episodes, (list, tuple)):
            total += len(episodes)
    return total


def full_season(episode_count: int) -> list[int]:
    """Liste [1..episode_count]."""
    return list(range(1, max(0, episode_count) + 1))


def union_episodes(*lists: Iterable[Any]) -> list[int]:
    """Union canonique de plusieurs listes d'episodes."""
    merged: list[Any] = []
    for episodes in lists:
        merged.extend(episodes)
    return canonicalize_episode_list(merged)


def is_episode_watched(watched_map: Mapping[int, list[int]], season: int, episode: int) -> bool:
    return episode in watched_map.get(season, ())
