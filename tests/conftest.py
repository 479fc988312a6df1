"""
Fixtures pytest partagees pour les tests watchlog.

Ce module contient les fixtures communes utilisees dans les tests:
- Horloge et date de reference figees
- Elements de catalogue TMDB (series terminee, en cours, a venir ; film)
- Service de bibliotheque et bibliotheques pre-remplies
- Settings de test avec chemins temporaires
"""

from datetime import date
from pathlib import Path
from typing import Callable

import pytest

from watchlog.adapters.api.tmdb_client import extract_movie_snapshot, extract_show_snapshot
from watchlog.config import Settings
from watchlog.services.library import LibraryService
from tests.fixtures.tmdb_responses import (
    TMDB_MOVIE_DETAILS_RESPONSE,
    TMDB_SHOW_ENDED_RESPONSE,
    TMDB_SHOW_RETURNING_RESPONSE,
    TMDB_SHOW_UPCOMING_RESPONSE,
)

FIXED_NOW_MS = 1_760_000_000_000
TODAY = date(2026, 1, 15)


@pytest.fixture
def fixed_now() -> Callable[[], int]:
    """Horloge figee (millisecondes epoch)."""
    return lambda: FIXED_NOW_MS


@pytest.fixture
def today() -> date:
    """Date de reference pour la sortie des titres."""
    return TODAY


@pytest.fixture
def ended_show() -> dict:
    """Element de catalogue d'une serie terminee (2 saisons, 13 episodes + speciaux)."""
    return extract_show_snapshot(TMDB_SHOW_ENDED_RESPONSE)


@pytest.fixture
def returning_show() -> dict:
    """Element de catalogue d'une serie en cours (12 episodes diffuses sur 16)."""
    return extract_show_snapshot(TMDB_SHOW_RETURNING_RESPONSE)


@pytest.fixture
def upcoming_show() -> dict:
    """Element de catalogue d'une serie annoncee, pas encore diffusee."""
    return extract_show_snapshot(TMDB_SHOW_UPCOMING_RESPONSE)


@pytest.fixture
def released_movie() -> dict:
    """Element de catalogue d'un film sorti."""
    return extract_movie_snapshot(TMDB_MOVIE_DETAILS_RESPONSE)


@pytest.fixture
def library_service(fixed_now, today) -> LibraryService:
    """LibraryService avec horloge et date figees."""
    return LibraryService(now=fixed_now, today=today)


@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    """
    Settings de test avec chemins temporaires.

    Utilise tmp_path de pytest pour isoler instantane, base et cache.
    """
    return Settings(
        library_file=tmp_path / "library.json",
        database_url=f"sqlite:///{tmp_path / 'watchlog.db'}",
        api_cache_dir=tmp_path / "cache",
        tmdb_api_key=None,
        log_file=tmp_path / "logs" / "watchlog.log",
    )
