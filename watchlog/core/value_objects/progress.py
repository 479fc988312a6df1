"""
Objets valeur derives du suivi d'une serie TV.

Ces objets ne sont jamais persistes : ils sont recalcules a la demande depuis
les episodes vus et les metadonnees TMDB.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class AiredMarker:
    """
    Coordonnees du dernier episode diffuse (last_episode_to_air chez TMDB).

    Attributs:
        season_number: Numero de saison (>= 1)
        episode_number: Numero d'episode dans la saison (>= 1)
    """

    season_number: int
    episode_number: int


@dataclass(frozen=True)
class ShowLifecycle:
    """
    Etat de cycle de vie d'une serie deduit des metadonnees.

    Attributs:
        status_value: Premier statut TMDB non vide trouve ("" si aucun)
        is_ended_series: La serie ne produira plus d'episodes
        is_ongoing_series: De nouveaux episodes sont attendus
    """

    status_value: str = ""
    is_ended_series: bool = False
    is_ongoing_series: bool = False


@dataclass(frozen=True)
class ProgressSnapshot:
    """
    Progression d'un utilisateur sur une serie a un instant donne.

    Attributs:
        watched_count: Episodes vus (hors saison 0)
        total_episodes: Episodes connus au total
        aired_episodes: Episodes deja diffuses
        target_episodes: Episodes a voir pour etre "a jour"
        remaining_to_target: Episodes restants avant la cible
        is_ended_series: Serie terminee
        is_ongoing_series: Serie en cours de production/diffusion
        is_waiting_for_new_episodes: A jour sur une serie en cours
        is_completed_by_progress: Tous les episodes d'une serie terminee sont vus
    """

    watched_count: int = 0
    total_episodes: int = 0
    aired_episodes: int = 0
    target_episodes: int = 0
    remaining_to_target: int = 0
    is_ended_series: bool = False
    is_ongoing_series: bool = False
    is_waiting_for_new_episodes: bool = False
    is_completed_by_progress: bool = False
