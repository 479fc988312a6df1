"""
Module de persistance SQLModel pour watchlog.

- database.py : Configuration de l'engine, initialisation des tables
- models.py : Modeles SQLModel representant les tables
- repositories/ : Implementations des ports de stockage

Usage:
    from watchlog.infrastructure.persistence import create_db_engine, init_db

    engine = create_db_engine("sqlite:///watchlog.db")
    init_db(engine)  # Cree les tables si necessaire
    store = SQLModelLibraryStore(engine)
"""

from watchlog.infrastructure.persistence.database import create_db_engine, init_db
from watchlog.infrastructure.persistence.models import LibraryItemModel

__all__ = [
    "LibraryItemModel",
    "create_db_engine",
    "init_db",
]
