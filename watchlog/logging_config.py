"""
Logging de watchlog via loguru.

La console suit la verbosite de la ligne de commande ; les messages des
bibliotheques tierces n'y apparaissent qu'a partir de WARNING. Le fichier
JSON tournant garde tout a partir de DEBUG pour l'analyse apres coup
(entrees rejetees a la normalisation, lots de synchronisation).
"""

import sys
from typing import Any, Callable, Optional

from loguru import logger

from .config import Settings

PACKAGE = "watchlog"

CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss}</green> "
    "<level>{level.icon} {level: <7}</level> "
    "<dim>{name}</dim> {message}"
)

# Index = nombre de -v
_VERBOSITY = ("INFO", "INFO", "DEBUG")


def level_for_verbosity(verbose: int, quiet: bool = False, default: str = "INFO") -> str:
    """
    Traduit les options -v/-q en niveau console.

    -q l'emporte sur -v. Sans option, le niveau par defaut est conserve.
    """
    if quiet:
        return "ERROR"
    if verbose <= 0:
        return default.upper()
    return _VERBOSITY[min(verbose, len(_VERBOSITY) - 1)]


def console_filter(level: str) -> Callable[[dict[str, Any]], bool]:
    """Retourne le filtre console pour un niveau donne."""
    own_threshold = logger.level(level.upper()).no
    other_threshold = max(own_threshold, logger.level("WARNING").no)

    def _filter(record: dict[str, Any]) -> bool:
        name = record["name"] or ""
        own = name == PACKAGE or name.startswith(PACKAGE + ".")
        return record["level"].no >= (own_threshold if own else other_threshold)

    return _filter


def configure_logging(settings: Settings, console_level: Optional[str] = None) -> None:
    """
    (Re)configure les handlers loguru a partir des parametres.

    Args:
        settings: Parametres de l'application (fichier, rotation, retention)
        console_level: Niveau console ; settings.log_level si absent
    """
    logger.remove()

    level = (console_level or settings.log_level).upper()
    logger.add(
        sys.stderr,
        level="TRACE",
        filter=console_filter(level),
        format=CONSOLE_FORMAT,
        colorize=True,
    )

    settings.log_file.parent.mkdir(parents=True, exist_ok=True)
    logger.add(
        settings.log_file,
        level="DEBUG",
        serialize=True,
        rotation=settings.log_rotation_size,
        retention=settings.log_retention_count,
        compression="zip",
        enqueue=True,  # le stockage distant ecrit depuis un executor
    )

    logger.debug("Logging configure (console {}, fichier {})", level, settings.log_file)
