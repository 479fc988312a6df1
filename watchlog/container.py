"""
Container d'injection de dependances via dependency-injector.

Fournit une gestion centralisee des dependances pour la CLI : stockages
(instantane local, base distante), client TMDB et services.
"""

from dependency_injector import containers, providers

from .adapters.api.cache import APICache
from .adapters.api.tmdb_client import TMDBClient
from .adapters.storage.json_snapshot import JsonFileSnapshotStore
from .config import Settings
from .infrastructure.persistence.database import create_db_engine, init_db
from .infrastructure.persistence.repositories import SQLModelLibraryStore
from .services.cloud_sync import CloudSyncService
from .services.library import LibraryService
from .services.metadata_refresh import MetadataRefreshService


class Container(containers.DeclarativeContainer):
    """Container DI de l'application.

    Utilisation :
        container = Container()
        container.database.init()  # Cree les tables une fois
        sync = container.cloud_sync_service()
        store = container.snapshot_store()
    """

    # Configuration - singleton charge une seule fois
    config = providers.Singleton(Settings)

    # Base distante - engine partage, tables creees par la Resource
    engine = providers.Singleton(
        create_db_engine,
        database_url=config.provided.database_url,
    )
    database = providers.Resource(init_db, engine=engine)

    # Stockages - implementations concretes des ports
    library_store = providers.Singleton(SQLModelLibraryStore, engine=engine)
    snapshot_store = providers.Singleton(
        JsonFileSnapshotStore,
        path=config.provided.library_file,
    )

    # Cache API - Singleton partage
    api_cache = providers.Singleton(
        APICache,
        cache_dir=config.provided.api_cache_dir,
    )

    # Client TMDB - cree meme sans cle ; les commandes verifient tmdb_enabled
    tmdb_client = providers.Singleton(
        TMDBClient,
        api_key=config.provided.tmdb_api_key,
        cache=api_cache,
        language=config.provided.tmdb_language,
    )

    # Services
    library_service = providers.Singleton(LibraryService)

    cloud_sync_service = providers.Singleton(
        CloudSyncService,
        store=library_store,
        user_id=config.provided.user_id,
        debounce_seconds=config.provided.sync_debounce_seconds,
        upsert_batch_size=config.provided.upsert_batch_size,
        delete_batch_size=config.provided.delete_batch_size,
    )

    metadata_refresh_service = providers.Factory(
        MetadataRefreshService,
        client=tmdb_client,
        rate_limit_seconds=config.provided.refresh_rate_limit_seconds,
    )
