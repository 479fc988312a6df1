"""
Configuration de la base de donnees pour watchlog.

Ce module fournit :
- Engine SQLAlchemy (SQLite par defaut) configure pour multi-thread
- Fonction d'initialisation des tables

La base de donnees est configuree via WATCHLOG_DATABASE_URL (defaut: sqlite:///watchlog.db).
"""

from pathlib import Path

from sqlalchemy import Engine
from sqlmodel import SQLModel, create_engine


def create_db_engine(database_url: str) -> Engine:
    """
    Cree un engine pour l'URL donnee.

    Pour un fichier SQLite, le repertoire parent est cree si necessaire.
    Les requetes s'executent dans le pool de threads de la boucle asyncio,
    d'ou check_same_thread=False.
    """
    connect_args = {}
    if database_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
        if database_url.startswith("sqlite:///") and ":memory:" not in database_url:
            db_path = Path(database_url.replace("sqlite:///", "", 1))
            db_path.parent.mkdir(exist_ok=True, parents=True)
    return create_engine(database_url, echo=False, connect_args=connect_args)


def init_db(engine: Engine) -> None:
    """
    Initialise la base de donnees en creant les tables manquantes.

    Args:
        engine: Engine cible
    """
    # Import des modeles pour enregistrer leurs metadonnees
    from watchlog.infrastructure.persistence import models  # noqa: F401

    SQLModel.metadata.create_all(engine)
