"""
Tests unitaires pour la normalisation des entrees de bibliotheque.
"""

from datetime import date, timedelta

import pytest

from watchlog.core.entities.library import CATALOG_STATUS_KEY, LibraryEntry
from watchlog.core.value_objects.statuses import MediaType, WatchStatus
from watchlog.services.release_clock import is_released_item
from watchlog.services.sanitizer import (
    clamp_rating,
    normalize_date_added,
    normalize_season_ratings,
    sanitize_entry,
)

TODAY = date(2026, 1, 15)
NOW = 1_760_000_000_000


def sanitize(raw):
    return sanitize_entry(raw, now=lambda: NOW, today=TODAY)


class TestClampRating:
    """Tests pour clamp_rating."""

    @pytest.mark.parametrize(
        "value, expected",
        [(7, 7), (7.4, 7), (7.5, 8), ("9", 9), (11, 10), (-3, 0), (None, 0), ("x", 0), (True, 0)],
    )
    def test_clamp(self, value, expected) -> None:
        assert clamp_rating(value) == expected

    def test_non_finite_is_zero(self) -> None:
        assert clamp_rating(float("inf")) == 0
        assert clamp_rating(float("nan")) == 0


class TestRejects:
    """Les entrees sans mediaType ou id valides sont rejetees."""

    @pytest.mark.parametrize(
        "raw",
        [
            None,
            "movie",
            [],
            {"id": 1},
            {"mediaType": "book", "id": 1},
            {"mediaType": "movie"},
            {"mediaType": "movie", "id": "abc"},
            {"mediaType": "movie", "id": 0},
            {"mediaType": "movie", "id": -5},
            {"mediaType": "movie", "id": True},
        ],
    )
    def test_rejected(self, raw) -> None:
        assert sanitize(raw) is None

    def test_numeric_string_id_is_accepted(self) -> None:
        entry = sanitize({"mediaType": "movie", "id": "27205"})
        assert entry.id == 27205


class TestMovieEntries:
    """Tests pour les films."""

    def test_unreleased_completion_rejected(self) -> None:
        """Un film non sorti marque completed repasse en planned, note 0."""
        tomorrow = (TODAY + timedelta(days=1)).isoformat()
        entry = sanitize(
            {"mediaType": "movie", "id": 1, "status": "completed", "rating": 9, "release_date": tomorrow}
        )
        assert entry.status == WatchStatus.PLANNED
        assert entry.rating == 0

    def test_released_completion_kept(self) -> None:
        entry = sanitize(
            {"mediaType": "movie", "id": 1, "status": "completed", "rating": 8.6, "release_date": "2010-07-15"}
        )
        assert entry.status == WatchStatus.COMPLETED
        assert entry.rating == 9

    def test_illegal_status_defaults_to_planned(self) -> None:
        assert sanitize({"mediaType": "movie", "id": 1, "status": "binge"}).status == WatchStatus.PLANNED
        assert sanitize({"mediaType": "movie", "id": 1}).status == WatchStatus.PLANNED

    def test_movie_only_planned_or_completed(self) -> None:
        """Les films n'ont que deux statuts : les autres retombent en planned."""
        for status in ("watching", "dropped", "on_hold"):
            entry = sanitize({"mediaType": "movie", "id": 1, "status": status})
            assert entry.status == WatchStatus.PLANNED

    def test_metadata_passes_through(self) -> None:
        entry = sanitize(
            {"mediaType": "movie", "id": 1, "title": "Inception", "genres": [{"id": 28}], CATALOG_STATUS_KEY: "Released"}
        )
        assert entry.metadata["title"] == "Inception"
        assert entry.metadata["genres"] == [{"id": 28}]
        assert entry.metadata["status"] == "Released"
        assert "mediaType" not in entry.metadata


class TestTvEntries:
    """Tests pour les series."""

    def test_illegal_status_defaults_to_watching(self) -> None:
        assert sanitize({"mediaType": "tv", "id": 1, "status": "binge"}).status == WatchStatus.WATCHING

    def test_on_hold_becomes_watching(self) -> None:
        assert sanitize({"mediaType": "tv", "id": 1, "status": "on_hold"}).status == WatchStatus.WATCHING

    def test_watched_episodes_canonicalized(self) -> None:
        entry = sanitize(
            {
                "mediaType": "tv",
                "id": 1,
                "watchedEpisodes": {"1": [3, 1, 1, 0], "2": "all", "3": [], "x": [1]},
            }
        )
        assert entry.watched_episodes == {1: [1, 3]}

    def test_season_ratings_canonicalized(self) -> None:
        entry = sanitize(
            {"mediaType": "tv", "id": 1, "seasonRatings": {"1": 8.5, "2": 0, "3": "bad", "4": 42}}
        )
        assert entry.season_ratings == {1: 9, 4: 10}

    def test_unreleased_completion_clears_progress(self) -> None:
        entry = sanitize(
            {
                "mediaType": "tv",
                "id": 1,
                "status": "completed",
                "rating": 8,
                "first_air_date": "2099-01-01",
                "watchedEpisodes": {"1": [1, 2]},
                "seasonRatings": {"1": 8},
            }
        )
        assert entry.status == WatchStatus.PLANNED
        assert entry.rating == 0
        assert entry.watched_episodes == {}
        assert entry.season_ratings == {}

    def test_episode_runtimes_kept_as_cache(self) -> None:
        entry = sanitize({"mediaType": "tv", "id": 1, "episodeRuntimes": {"1": {"1": 47, "x": 3}, "2": 5}})
        assert entry.episode_runtimes == {1: {1: 47}}


class TestDateAdded:
    """Tests pour dateAdded."""

    @pytest.mark.parametrize("value", [None, 0, -1, "abc", float("inf"), True])
    def test_invalid_replaced_by_now(self, value) -> None:
        assert normalize_date_added(value, now=lambda: NOW) == NOW

    def test_valid_kept(self) -> None:
        assert normalize_date_added(1_600_000_000_000, now=lambda: NOW) == 1_600_000_000_000


class TestRoundTrip:
    """Un payload produit par to_payload est stable a la normalisation."""

    def test_payload_round_trip(self) -> None:
        entry = LibraryEntry(
            media_type=MediaType.TV,
            id=1396,
            status=WatchStatus.WATCHING,
            rating=8,
            date_added=NOW,
            watched_episodes={1: [1, 2]},
            season_ratings={1: 8},
            metadata={"name": "Breaking Bad", "status": "Ended", "first_air_date": "2008-01-20"},
        )
        payload = entry.to_payload()
        assert payload["status"] == "watching"
        assert payload[CATALOG_STATUS_KEY] == "Ended"
        assert payload["watchedEpisodes"] == {"1": [1, 2]}
        assert sanitize(payload) == entry

    def test_accepts_entry_instance(self) -> None:
        entry = LibraryEntry(media_type=MediaType.MOVIE, id=5, status=WatchStatus.PLANNED, date_added=NOW)
        assert sanitize(entry) == entry


class TestCompletionImpliesReleased:
    """Toute entree completed normalisee est sortie."""

    @pytest.mark.parametrize("media_type", ["movie", "tv"])
    @pytest.mark.parametrize("release", ["2000-01-01", "2026-01-15", "2026-01-16", "", None, "garbage"])
    def test_property(self, media_type, release) -> None:
        key = "release_date" if media_type == "movie" else "first_air_date"
        entry = sanitize({"mediaType": media_type, "id": 1, "status": "completed", key: release})
        if entry.status == WatchStatus.COMPLETED:
            assert is_released_item(entry, today=TODAY)


def test_normalize_season_ratings_non_mapping() -> None:
    assert normalize_season_ratings([8, 9]) == {}
