"""
Client API externe pour les metadonnees (TMDB).

Infrastructure partagee:
- APICache: Cache persistant avec TTL differencies (films 7j, series 6h)
- RateLimitError: Exception pour les erreurs 429
- request_with_retry: Requete avec backoff exponentiel

Le client implemente IMetadataClient defini dans core/ports/api_clients.py.
"""

from watchlog.adapters.api.cache import APICache
from watchlog.adapters.api.retry import RateLimitError, request_with_retry, with_retry
from watchlog.adapters.api.tmdb_client import TMDBClient

__all__ = [
    "APICache",
    "RateLimitError",
    "TMDBClient",
    "request_with_retry",
    "with_retry",
]
