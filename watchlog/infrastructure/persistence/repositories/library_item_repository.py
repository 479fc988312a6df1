"""
Implementation SQLModel du stockage distant de la bibliotheque.

Implemente l'interface ILibraryStore. Les operations SQL sont synchrones ;
elles sont executees via run_in_executor pour ne pas bloquer la boucle
asyncio du service de synchronisation.
"""

import asyncio
from functools import partial
from typing import Any, Callable, Iterable, TypeVar

from loguru import logger
from sqlalchemy import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, col, select

from watchlog.core.ports.repositories import ILibraryStore, LibraryStoreError
from watchlog.core.value_objects.statuses import MediaType
from watchlog.infrastructure.persistence.models import LibraryItemModel, utc_now

T = TypeVar("T")


class SQLModelLibraryStore(ILibraryStore):
    """
    Stockage SQLModel de la table library_items.

    Les erreurs SQLAlchemy sont converties en LibraryStoreError : le service
    de synchronisation les traite comme des echecs non fatals.
    """

    def __init__(self, engine: Engine) -> None:
        """
        Initialise le stockage.

        Args:
            engine: Engine SQLAlchemy de la base distante
        """
        self._engine = engine

    async def _run(self, func: Callable[..., T], *args: Any) -> T:
        loop = asyncio.get_running_loop()
        try:
            return await loop.run_in_executor(None, partial(func, *args))
        except SQLAlchemyError as e:
            logger.debug("Erreur SQL sur library_items: {}", e)
            raise LibraryStoreError(str(e)) from e

    def _select_all(self, user_id: str) -> list[dict[str, Any]]:
        with Session(self._engine) as session:
            statement = (
                select(LibraryItemModel)
                .where(LibraryItemModel.user_id == user_id)
                .order_by(LibraryItemModel.id)
            )
            return [
                {
                    "media_type": model.media_type,
                    "tmdb_id": model.tmdb_id,
                    "payload": model.payload,
                }
                for model in session.exec(statement).all()
            ]

    def _upsert_batch(self, user_id: str, rows: list[dict[str, Any]]) -> None:
        with Session(self._engine) as session:
            for row in rows:
                statement = select(LibraryItemModel).where(
                    LibraryItemModel.user_id == user_id,
                    LibraryItemModel.media_type == row["media_type"],
                    LibraryItemModel.tmdb_id == row["tmdb_id"],
                )
                model = session.exec(statement).first()
                if model is None:
                    model = LibraryItemModel(
                        user_id=user_id,
                        media_type=row["media_type"],
                        tmdb_id=row["tmdb_id"],
                    )
                model.payload = row["payload"]
                model.updated_at = utc_now()
                session.add(model)
            session.commit()

    def _delete_batch(self, user_id: str, media_type: str, tmdb_ids: list[int]) -> None:
        with Session(self._engine) as session:
            statement = select(LibraryItemModel).where(
                LibraryItemModel.user_id == user_id,
                LibraryItemModel.media_type == media_type,
                col(LibraryItemModel.tmdb_id).in_(tmdb_ids),
            )
            for model in session.exec(statement).all():
                session.delete(model)
            session.commit()

    async def select_all(self, user_id: str) -> list[dict[str, Any]]:
        return await self._run(self._select_all, user_id)

    async def upsert_batch(self, user_id: str, rows: list[dict[str, Any]]) -> None:
        if rows:
            await self._run(self._upsert_batch, user_id, list(rows))

    async def delete_batch(
        self, user_id: str, media_type: MediaType, tmdb_ids: Iterable[int]
    ) -> None:
        ids = list(tmdb_ids)
        if ids:
            await self._run(self._delete_batch, user_id, MediaType(media_type).value, ids)
