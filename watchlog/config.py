"""
Configuration de l'application via pydantic-settings.

La configuration est chargée depuis les variables d'environnement avec le préfixe WATCHLOG_,
et peut optionnellement être fournie via un fichier .env.

La clé API TMDB est optionnelle - le rafraîchissement des métadonnées est désactivé si
elle n'est pas fournie.
"""

from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Trouver le fichier .env à la racine du projet (parent de watchlog/)
_PROJECT_ROOT = Path(__file__).parent.parent
_ENV_FILE = _PROJECT_ROOT / ".env"


class Settings(BaseSettings):
    """Paramètres de l'application avec support des variables d'environnement.

    Tous les paramètres peuvent être surchargés via des variables d'environnement
    avec le préfixe WATCHLOG_.
    Exemple : WATCHLOG_LOG_LEVEL=DEBUG

    Les chemins sont automatiquement étendus (~ -> répertoire home).
    """

    model_config = SettingsConfigDict(
        env_prefix="WATCHLOG_",
        env_file=_ENV_FILE if _ENV_FILE.exists() else ".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Instantané local de la bibliothèque
    library_file: Path = Field(default=Path("~/.local/share/watchlog/library.json"))

    # Stockage distant (synchronisation)
    database_url: str = Field(default="sqlite:///watchlog.db")
    user_id: str = Field(default="local", min_length=1)

    # TMDB (OPTIONNEL - rafraîchissement désactivé si non défini)
    tmdb_api_key: Optional[str] = Field(default=None)
    tmdb_language: str = Field(default="en-US")
    api_cache_dir: Path = Field(default=Path(".cache/api"))
    refresh_rate_limit_seconds: float = Field(default=0.25, ge=0)

    # Synchronisation
    sync_debounce_seconds: float = Field(default=0.55, ge=0)
    upsert_batch_size: int = Field(default=200, ge=1)
    delete_batch_size: int = Field(default=300, ge=1)

    # Logging (fichier + stderr, rotation 10MB, 5 fichiers de rétention)
    log_level: str = Field(default="INFO")
    log_file: Path = Field(default=Path("logs/watchlog.log"))
    log_rotation_size: str = Field(default="10 MB")
    log_retention_count: int = Field(default=5)

    @field_validator("library_file", "api_cache_dir", "log_file", mode="before")
    @classmethod
    def expand_path(cls, v: str | Path) -> Path:
        """Étend ~ vers le répertoire home dans les chemins."""
        return Path(v).expanduser()

    @property
    def tmdb_enabled(self) -> bool:
        """Vérifie si l'API TMDB est configurée."""
        return bool(self.tmdb_api_key)
