"""
Instantane local de la bibliotheque dans un fichier JSON.

Le fichier contient le tableau des payloads d'entrees. Il est reecrit en
entier a chaque sauvegarde, via un fichier temporaire renomme pour qu'une
interruption ne laisse jamais un fichier tronque.
"""

import json
from pathlib import Path
from typing import Any, Union

from loguru import logger

from watchlog.core.ports.repositories import ISnapshotStore


class JsonFileSnapshotStore(ISnapshotStore):
    """
    Implementation fichier de ISnapshotStore.

    Un fichier absent ou illisible donne une bibliotheque vide : l'instantane
    est un cache de l'etat, jamais une source d'erreur au demarrage.
    """

    def __init__(self, path: Union[str, Path]) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> list[Any]:
        if not self._path.exists():
            return []
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.warning("Instantane local illisible ({}): {}", self._path, e)
            return []
        if not isinstance(data, list):
            logger.warning("Instantane local ignore: tableau attendu dans {}", self._path)
            return []
        return data

    def save(self, payloads: list[dict[str, Any]]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self._path.with_name(self._path.name + ".tmp")
        tmp_path.write_text(
            json.dumps(payloads, ensure_ascii=False, separators=(",", ":")),
            encoding="utf-8",
        )
        tmp_path.replace(self._path)
        logger.debug("Instantane local sauvegarde: {} entree(s)", len(payloads))
