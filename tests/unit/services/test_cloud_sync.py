"""
Tests unitaires pour CloudSyncService.

Le stockage distant est un AsyncMock : on verifie les lots ecrits, le saut
de l'echo apres chargement, le debounce et l'invalidation par revision.
"""

import asyncio
from unittest.mock import AsyncMock

import pytest

from watchlog.core.entities.library import LibraryEntry
from watchlog.core.ports.repositories import LibraryStoreError
from watchlog.core.value_objects.statuses import MediaType, WatchStatus
from watchlog.services.cloud_sync import CloudSyncService

REMOTE_ROWS = [
    {
        "media_type": "movie",
        "tmdb_id": 27205,
        "payload": {
            "title": "Inception",
            "release_date": "2010-07-15",
            "status": "completed",
            "rating": 8,
            "dateAdded": 5,
        },
    },
    {
        "media_type": "tv",
        "tmdb_id": 1396,
        "payload": {
            "mediaType": "tv",
            "id": 1396,
            "name": "Breaking Bad",
            "status": "watching",
            "watchedEpisodes": {"1": [1, 2]},
            "dateAdded": 6,
        },
    },
]


def movie(tmdb_id: int, rating: int = 0) -> LibraryEntry:
    return LibraryEntry(
        media_type=MediaType.MOVIE,
        id=tmdb_id,
        status=WatchStatus.PLANNED,
        rating=rating,
        date_added=1,
        metadata={"title": f"Film {tmdb_id}"},
    )


def show(tmdb_id: int) -> LibraryEntry:
    return LibraryEntry(
        media_type=MediaType.TV,
        id=tmdb_id,
        status=WatchStatus.WATCHING,
        date_added=1,
        watched_episodes={1: [1]},
    )


@pytest.fixture
def store() -> AsyncMock:
    """Stockage distant vide par defaut."""
    mock = AsyncMock()
    mock.select_all.return_value = []
    return mock


@pytest.fixture
def service(store, fixed_now, today) -> CloudSyncService:
    """Service avec un debounce tres court et de petits lots."""
    return CloudSyncService(
        store,
        user_id="alice",
        debounce_seconds=0.01,
        upsert_batch_size=2,
        delete_batch_size=2,
        now=fixed_now,
        today=today,
    )


class TestLoadRemote:
    """Tests pour load_remote."""

    @pytest.mark.asyncio
    async def test_remote_library_replaces_local(self, service, store) -> None:
        store.select_all.return_value = REMOTE_ROWS

        remote = await service.load_remote()

        store.select_all.assert_awaited_once_with("alice")
        assert remote is not None
        assert [e.key for e in remote] == [(MediaType.MOVIE, 27205), (MediaType.TV, 1396)]
        assert remote[0].rating == 8
        assert remote[1].watched_episodes == {1: [1, 2]}
        assert service.ready is True
        assert set(service.snapshot) == {(MediaType.MOVIE, 27205), (MediaType.TV, 1396)}

    @pytest.mark.asyncio
    async def test_echo_of_remote_load_is_skipped(self, service, store) -> None:
        """La premiere programmation apres un chargement distant est sautee."""
        store.select_all.return_value = REMOTE_ROWS
        remote = await service.load_remote()

        service.schedule([*remote, movie(1)])
        await service.wait_idle()
        await asyncio.sleep(0.03)

        store.upsert_batch.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_empty_remote_returns_none(self, service, store) -> None:
        assert await service.load_remote() is None
        assert service.ready is True
        assert service.snapshot == {}

    @pytest.mark.asyncio
    async def test_invalid_rows_are_discarded(self, service, store) -> None:
        store.select_all.return_value = [
            "garbage",
            {"media_type": "movie", "tmdb_id": 3, "payload": None},
            {"media_type": "book", "tmdb_id": 4, "payload": {}},
        ]
        assert await service.load_remote() is None

    @pytest.mark.asyncio
    async def test_store_error_is_advisory(self, service, store) -> None:
        store.select_all.side_effect = LibraryStoreError("reseau indisponible")

        assert await service.load_remote() is None
        assert service.ready is True
        assert service.last_error == "reseau indisponible"

    @pytest.mark.asyncio
    async def test_stale_load_is_discarded(self, service, store) -> None:
        """Un chargement depasse par un plus recent n'est pas applique."""

        async def select_all(user_id: str) -> list:
            if store.select_all.await_count == 1:
                await asyncio.sleep(0.02)
                return REMOTE_ROWS
            return []

        store.select_all.side_effect = select_all

        first, second = await asyncio.gather(service.load_remote(), service.load_remote())

        assert first is None
        assert second is None
        assert service.snapshot == {}


class TestFlush:
    """Tests pour flush."""

    @pytest.mark.asyncio
    async def test_only_changed_entries_are_written(self, service, store) -> None:
        store.select_all.return_value = REMOTE_ROWS
        remote = await service.load_remote()

        plan = await service.flush([*remote, movie(42)])

        assert len(plan.upserts) == 1
        store.upsert_batch.assert_awaited_once()
        user_id, rows = store.upsert_batch.await_args.args
        assert user_id == "alice"
        assert rows[0]["media_type"] == "movie"
        assert rows[0]["tmdb_id"] == 42
        assert rows[0]["payload"]["title"] == "Film 42"
        store.delete_batch.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unchanged_library_writes_nothing(self, service, store) -> None:
        store.select_all.return_value = REMOTE_ROWS
        remote = await service.load_remote()

        plan = await service.flush(remote)

        assert plan.is_empty
        store.upsert_batch.assert_not_awaited()
        store.delete_batch.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_upserts_are_batched(self, service, store) -> None:
        await service.flush([movie(i) for i in range(1, 6)])

        sizes = [len(call.args[1]) for call in store.upsert_batch.await_args_list]
        assert sizes == [2, 2, 1]

    @pytest.mark.asyncio
    async def test_deletes_are_batched_per_media_type(self, service, store) -> None:
        library = [movie(i) for i in range(1, 5)] + [show(i) for i in range(10, 13)]
        await service.flush(library)

        await service.flush([])

        calls = [call.args for call in store.delete_batch.await_args_list]
        assert calls == [
            ("alice", MediaType.MOVIE, [1, 2]),
            ("alice", MediaType.MOVIE, [3, 4]),
            ("alice", MediaType.TV, [10, 11]),
            ("alice", MediaType.TV, [12]),
        ]
        assert service.snapshot == {}

    @pytest.mark.asyncio
    async def test_failed_write_is_retried_next_time(self, service, store) -> None:
        store.upsert_batch.side_effect = LibraryStoreError("timeout")

        await service.flush([movie(1)])

        assert service.last_error == "timeout"
        assert service.snapshot == {}

        store.upsert_batch.side_effect = None
        plan = await service.flush([movie(1)])

        assert len(plan.upserts) == 1
        assert service.last_error is None
        assert (MediaType.MOVIE, 1) in service.snapshot

    @pytest.mark.asyncio
    async def test_rating_change_is_detected(self, service, store) -> None:
        await service.flush([movie(1)])
        store.upsert_batch.reset_mock()

        await service.flush([movie(1, rating=7)])

        rows = store.upsert_batch.await_args.args[1]
        assert rows[0]["payload"]["rating"] == 7

    @pytest.mark.asyncio
    async def test_empty_flush_does_not_discard_write_in_flight(self, service, store) -> None:
        """Un flush sans changement n'invalide pas l'ecriture en cours."""
        await service.flush([movie(1)])
        release = asyncio.Event()

        async def held_upsert(user_id: str, rows: list) -> None:
            await release.wait()

        store.upsert_batch.side_effect = held_upsert
        pending = asyncio.create_task(service.flush([movie(1), movie(2)]))
        await asyncio.sleep(0)

        idle = await service.flush([movie(1)])
        release.set()
        await pending

        assert idle.is_empty
        assert (MediaType.MOVIE, 2) in service.snapshot

        await service.flush([movie(1)])

        store.delete_batch.assert_awaited_once_with("alice", MediaType.MOVIE, [2])
        assert set(service.snapshot) == {(MediaType.MOVIE, 1)}


class TestSchedule:
    """Tests pour schedule et le debounce."""

    @pytest.mark.asyncio
    async def test_not_ready_does_nothing(self, service, store) -> None:
        service.schedule([movie(1)])
        await service.wait_idle()
        store.upsert_batch.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_rapid_changes_are_coalesced(self, service, store) -> None:
        await service.load_remote()

        service.schedule([movie(1)])
        service.schedule([movie(1), movie(2)])
        await service.wait_idle()

        store.upsert_batch.assert_awaited_once()
        rows = store.upsert_batch.await_args.args[1]
        assert [row["tmdb_id"] for row in rows] == [1, 2]

    @pytest.mark.asyncio
    async def test_reset_forgets_state(self, service, store) -> None:
        store.select_all.return_value = REMOTE_ROWS
        await service.load_remote()

        service.reset()

        assert service.ready is False
        assert service.snapshot == {}
        assert service.last_error is None
