"""
Import et export de la bibliotheque au format JSON.

Le fichier est un tableau de payloads d'entrees (le format de l'instantane
local). Les fichiers produits par d'autres outils arrivent parfois en UTF-16
ou en Windows-1251 : le decodage essaie ces encodages avant d'abandonner
sur un UTF-8 tolerant.
"""

import codecs
import json
from collections.abc import Sequence
from datetime import date
from pathlib import Path
from typing import Callable, Optional, Union

from loguru import logger

from watchlog.core.entities.library import LibraryEntry
from watchlog.services.reconciler import sanitize_collection
from watchlog.services.sanitizer import now_ms


class ImportFormatError(ValueError):
    """Le fichier importe n'est pas un tableau JSON d'entrees."""


def _looks_like_utf16(raw: bytes) -> bool:
    # Du JSON en UTF-16 contient forcement des octets nuls (ou un BOM)
    return raw.startswith((codecs.BOM_UTF16_LE, codecs.BOM_UTF16_BE)) or b"\x00" in raw


def decode_text(raw: bytes) -> str:
    """
    Decode le contenu d'un fichier importe.

    Ordre d'essai : UTF-8 strict (BOM accepte), UTF-16, Windows-1251, puis
    UTF-8 avec remplacement des octets invalides.
    """
    try:
        return raw.decode("utf-8-sig")
    except UnicodeDecodeError:
        pass
    if _looks_like_utf16(raw):
        try:
            return raw.decode("utf-16")
        except UnicodeDecodeError:
            pass
    try:
        return raw.decode("cp1251")
    except UnicodeDecodeError:
        logger.debug("Encodage non reconnu, decodage UTF-8 tolerant")
    return raw.decode("utf-8", errors="replace")


def read_library_file(
    path: Union[str, Path],
    now: Callable[[], int] = now_ms,
    today: Optional[date] = None,
) -> list[LibraryEntry]:
    """
    Lit un fichier d'export et retourne les entrees normalisees.

    Args:
        path: Chemin du fichier JSON
        now: Horloge pour les dateAdded manquants
        today: Date de reference pour la sortie des titres

    Returns:
        Entrees normalisees et dedoublonnees

    Raises:
        ImportFormatError: Si le contenu n'est pas un tableau JSON
        OSError: Si le fichier est illisible
    """
    text = decode_text(Path(path).read_bytes())
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ImportFormatError(f"JSON invalide: {e}") from e
    if not isinstance(data, list):
        raise ImportFormatError(
            f"Un tableau d'entrees est attendu, recu: {type(data).__name__}"
        )

    entries = sanitize_collection(data, now=now, today=today)
    if len(entries) != len(data):
        logger.info(
            "Import {}: {} entree(s) retenue(s) sur {}", path, len(entries), len(data)
        )
    return entries


def export_library(library: Sequence[LibraryEntry], path: Union[str, Path]) -> int:
    """
    Exporte la bibliotheque en JSON indente.

    Returns:
        Nombre d'entrees ecrites
    """
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    payloads = [entry.to_payload() for entry in library]
    target.write_text(
        json.dumps(payloads, indent=2, ensure_ascii=False), encoding="utf-8"
    )
    return len(payloads)


def merge_import(
    current: Sequence[LibraryEntry],
    imported: Sequence[LibraryEntry],
    now: Callable[[], int] = now_ms,
    today: Optional[date] = None,
) -> list[LibraryEntry]:
    """Fusionne deux bibliotheques : par cle, le dateAdded le plus recent gagne."""
    return sanitize_collection([*current, *imported], now=now, today=today)
