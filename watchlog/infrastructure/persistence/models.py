"""
Modeles SQLModel pour le stockage distant de la bibliotheque.

Ces modeles representent les tables de la base de donnees. Ils sont
distincts des entites de domaine (dataclass dans core/entities/) selon
l'architecture hexagonale.

Tables:
- library_items: une ligne par (utilisateur, type de media, ID TMDB), le
  payload de l'entree serialise en JSON
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import UniqueConstraint
from sqlmodel import Field, SQLModel


def utc_now() -> datetime:
    """Horodatage courant en UTC, avec fuseau."""
    return datetime.now(timezone.utc)


class LibraryItemModel(SQLModel, table=True):
    """
    Ligne de bibliotheque d'un utilisateur.

    La contrainte d'unicite (user_id, media_type, tmdb_id) est la cle de
    conflit des upserts.
    """

    __tablename__ = "library_items"
    __table_args__ = (
        UniqueConstraint("user_id", "media_type", "tmdb_id", name="uq_library_items_key"),
    )

    id: int | None = Field(default=None, primary_key=True)
    user_id: str = Field(index=True)
    media_type: str = Field(index=True)  # "movie" ou "tv"
    tmdb_id: int
    payload_json: str = "{}"  # JSON: payload complet de l'entree
    updated_at: datetime | None = Field(default_factory=utc_now)

    @property
    def payload(self) -> dict[str, Any]:
        """Retourne le payload deserialise."""
        return json.loads(self.payload_json) if self.payload_json else {}

    @payload.setter
    def payload(self, value: dict[str, Any]) -> None:
        """Serialise le payload en JSON."""
        self.payload_json = json.dumps(value, ensure_ascii=False)
