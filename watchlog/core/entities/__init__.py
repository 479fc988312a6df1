"""
Entites metier du domaine.

Exports:
- LibraryEntry: Enregistrement utilisateur pour un film ou une serie
- LibraryKey: Cle d'unicite (media_type, id)
"""

from watchlog.core.entities.library import (
    CATALOG_STATUS_KEY,
    USER_FIELD_KEYS,
    LibraryEntry,
    LibraryKey,
)

__all__ = [
    "CATALOG_STATUS_KEY",
    "USER_FIELD_KEYS",
    "LibraryEntry",
    "LibraryKey",
]
