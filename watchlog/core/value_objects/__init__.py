"""
Objets valeur immutables representant des concepts du domaine sans identite.

Exports :
- MediaType : Type de media (MOVIE, TV)
- WatchStatus : Statut de suivi utilisateur
- AiredMarker : Dernier episode diffuse
- ShowLifecycle : Cycle de vie d'une serie (terminee / en cours)
- ProgressSnapshot : Progression derivee d'une serie
"""

from watchlog.core.value_objects.progress import (
    AiredMarker,
    ProgressSnapshot,
    ShowLifecycle,
)
from watchlog.core.value_objects.statuses import (
    DEFAULT_STATUS,
    MOVIE_STATUSES,
    TV_STATUSES,
    MediaType,
    WatchStatus,
    legal_statuses,
)

__all__ = [
    "AiredMarker",
    "ProgressSnapshot",
    "ShowLifecycle",
    "DEFAULT_STATUS",
    "MOVIE_STATUSES",
    "TV_STATUSES",
    "MediaType",
    "WatchStatus",
    "legal_statuses",
]
