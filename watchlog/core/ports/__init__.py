"""
Ports (interfaces abstraites) définissant les contrats pour les adaptateurs.

Les ports sont les frontières de l'architecture hexagonale. Ils définissent
ce dont le domaine a besoin du monde extérieur sans spécifier
comment ces besoins sont satisfaits.

Ports stockage :
- ILibraryStore : Stockage distant (lignes par utilisateur)
- ISnapshotStore : Instantané local (tableau JSON)

Ports client API :
- IMetadataClient : Source de métadonnées films/séries (TMDB)
"""

from watchlog.core.ports.api_clients import IMetadataClient
from watchlog.core.ports.repositories import (
    ILibraryStore,
    ISnapshotStore,
    LibraryStoreError,
)

__all__ = [
    "IMetadataClient",
    "ILibraryStore",
    "ISnapshotStore",
    "LibraryStoreError",
]
