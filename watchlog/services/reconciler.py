"""
Reconciliation de collections d'entrees : dedoublonnage et diff de synchronisation.

- sanitize_collection : normalise une liste brute et garde une seule entree
  par (media_type, id), la plus recemment ajoutee.
- diff_for_sync : compare l'instantane deja synchronise a la collection
  courante et produit le jeu d'ecritures minimal (upserts + suppressions par
  type de media), jamais une reecriture complete.
"""

import json
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Callable, Iterator, Optional, TypeVar

from watchlog.core.entities.library import LibraryEntry, LibraryKey
from watchlog.core.value_objects.statuses import MediaType
from watchlog.services.sanitizer import now_ms, sanitize_entry

T = TypeVar("T")


def sanitize_collection(
    raw_list: Any,
    now: Callable[[], int] = now_ms,
    today: Optional[date] = None,
) -> list[LibraryEntry]:
    """
    Normalise une collection brute et la dedoublonne.

    Chaque element passe par sanitize_entry ; les rejets sont ecartes.
    Pour une meme cle (media_type, id), l'entree au dateAdded le plus grand
    gagne ; a egalite, la derniere rencontree. L'ordre de premiere
    apparition des cles est conserve.
    """
    if not isinstance(raw_list, (list, tuple)):
        return []
    deduped: dict[LibraryKey, LibraryEntry] = {}
    for raw in raw_list:
        entry = sanitize_entry(raw, now=now, today=today)
        if entry is None:
            continue
        existing = deduped.get(entry.key)
        if existing is None or entry.date_added >= existing.date_added:
            deduped[entry.key] = entry
    return list(deduped.values())


def fingerprint(payload: Mapping[str, Any]) -> str:
    """Serialisation JSON stable (cles triees) servant a detecter un changement."""
    return json.dumps(
        payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False, default=str
    )


@dataclass(frozen=True)
class SnapshotRecord:
    """Etat synchronise d'une entree : son payload et son empreinte."""

    media_type: MediaType
    tmdb_id: int
    payload: dict[str, Any]
    fingerprint: str


LibrarySnapshot = dict[LibraryKey, SnapshotRecord]


def build_snapshot(entries: Iterable[LibraryEntry]) -> LibrarySnapshot:
    """Indexe les entrees par cle avec leur empreinte."""
    snapshot: LibrarySnapshot = {}
    for entry in entries:
        if entry.id <= 0:
            continue
        payload = entry.to_payload()
        snapshot[entry.key] = SnapshotRecord(
            media_type=entry.media_type,
            tmdb_id=entry.id,
            payload=payload,
            fingerprint=fingerprint(payload),
        )
    return snapshot


@dataclass
class SyncPlan:
    """
    Jeu d'ecritures minimal pour aligner le stockage distant.

    Attributs:
        upserts: Lignes a inserer/mettre a jour (media_type, tmdb_id, payload)
        deletes: IDs a supprimer, regroupes par type de media
        snapshot: Instantane a adopter une fois les ecritures reussies
    """

    upserts: list[dict[str, Any]] = field(default_factory=list)
    deletes: dict[MediaType, list[int]] = field(
        default_factory=lambda: {MediaType.MOVIE: [], MediaType.TV: []}
    )
    snapshot: LibrarySnapshot = field(default_factory=dict)

    @property
    def delete_count(self) -> int:
        return sum(len(ids) for ids in self.deletes.values())

    @property
    def is_empty(self) -> bool:
        return not self.upserts and self.delete_count == 0


def diff_for_sync(
    previous: Mapping[LibraryKey, SnapshotRecord],
    next_entries: Iterable[LibraryEntry],
) -> SyncPlan:
    """
    Calcule les ecritures necessaires pour passer de previous a next_entries.

    Une entree est a ecrire si sa cle est nouvelle ou si son empreinte a
    change ; une cle presente dans previous et absente de next_entries est
    a supprimer.
    """
    next_snapshot = build_snapshot(next_entries)
    plan = SyncPlan(snapshot=next_snapshot)

    for key, record in next_snapshot.items():
        before = previous.get(key)
        if before is None or before.fingerprint != record.fingerprint:
            plan.upserts.append(
                {
                    "media_type": record.media_type.value,
                    "tmdb_id": record.tmdb_id,
                    "payload": record.payload,
                }
            )

    for key, record in previous.items():
        if key not in next_snapshot:
            plan.deletes[record.media_type].append(record.tmdb_id)

    return plan


def chunked(items: Sequence[T], size: int) -> Iterator[list[T]]:
    """Decoupe une sequence en lots de taille maximale size."""
    step = max(1, size)
    for start in range(0, len(items), step):
        yield list(items[start : start + step])
