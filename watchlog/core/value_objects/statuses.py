"""
Objets valeur pour le type de media et le statut de suivi d'une entree.

Le statut est celui de l'utilisateur (planned, watching...), a ne pas confondre
avec le statut de diffusion renvoye par TMDB ("Ended", "Returning Series"...).
"""

from enum import Enum
from typing import Optional


class MediaType(str, Enum):
    """Type de media d'une entree de bibliotheque.

    Valeurs:
        MOVIE: Film
        TV: Serie TV
    """

    MOVIE = "movie"
    TV = "tv"

    @classmethod
    def parse(cls, value: object) -> Optional["MediaType"]:
        """Retourne le MediaType correspondant ou None si la valeur est inconnue."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            return None


class WatchStatus(str, Enum):
    """Statut de suivi choisi (ou derive) pour une entree.

    ON_HOLD est un ancien statut accepte en lecture uniquement : il est
    toujours migre vers WATCHING.
    """

    PLANNED = "planned"
    WATCHING = "watching"
    COMPLETED = "completed"
    DROPPED = "dropped"
    ON_HOLD = "on_hold"

    @classmethod
    def parse(cls, value: object) -> Optional["WatchStatus"]:
        """Retourne le WatchStatus correspondant ou None si la valeur est inconnue."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            return None


MOVIE_STATUSES = frozenset({WatchStatus.PLANNED, WatchStatus.COMPLETED})
TV_STATUSES = frozenset(
    {
        WatchStatus.WATCHING,
        WatchStatus.PLANNED,
        WatchStatus.COMPLETED,
        WatchStatus.DROPPED,
    }
)

# Statut de repli quand la valeur persistee est absente ou illegale
DEFAULT_STATUS = {
    MediaType.MOVIE: WatchStatus.PLANNED,
    MediaType.TV: WatchStatus.WATCHING,
}


def legal_statuses(media_type: MediaType) -> frozenset[WatchStatus]:
    """Ensemble des statuts autorises pour un type de media."""
    if media_type == MediaType.MOVIE:
        return MOVIE_STATUSES
    return TV_STATUSES
