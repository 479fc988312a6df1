"""
Implementations SQLModel des stockages.

Chaque implementation :
- Herite de l'interface ABC correspondante du domaine
- Ouvre une session SQLModel par operation (executee hors de la boucle asyncio)
- Convertit entre payloads du domaine et modeles DB (SQLModel)
"""

from watchlog.infrastructure.persistence.repositories.library_item_repository import (
    SQLModelLibraryStore,
)

__all__ = ["SQLModelLibraryStore"]
