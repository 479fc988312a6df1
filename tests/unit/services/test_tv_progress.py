"""
Tests unitaires pour la progression et le statut des series.

Couvre compute_progress, resolve_status (machine a etats) et
build_for_completion, dont les exemples de reference :
- serie terminee partiellement vue
- serie en cours a jour
- synthese de completion d'une serie en cours
"""

import pytest

from watchlog.core.value_objects.statuses import WatchStatus
from watchlog.services.episode_sets import full_season
from watchlog.services.tv_progress import (
    aired_episodes_for_season,
    build_for_completion,
    compute_progress,
    resolve_status,
    total_episodes,
)

ENDED_SNAPSHOT = {"status": "Ended", "seasons": [{"season_number": 1, "episode_count": 10}]}

ONGOING_SNAPSHOT = {
    "status": "Returning Series",
    "in_production": True,
    "last_episode_to_air": {"season_number": 2, "episode_number": 3},
    "seasons": [
        {"season_number": 1, "episode_count": 10},
        {"season_number": 2, "episode_count": 12},
    ],
}

ALL_STATUSES = ["planned", "watching", "completed", "dropped", "on_hold", "bogus", None]
WATCHED_MAPS = [
    {},
    {1: full_season(7)},
    {1: full_season(10)},
    {1: full_season(10), 2: [1, 2, 3]},
    {0: [1, 2]},
]
SNAPSHOT_LISTS = [[], [ENDED_SNAPSHOT], [ONGOING_SNAPSHOT], [{"name": "no lifecycle"}]]


class TestTotalEpisodes:
    """Tests pour total_episodes."""

    def test_prefers_number_of_episodes(self) -> None:
        snapshot = {"number_of_episodes": 20, "seasons": [{"season_number": 1, "episode_count": 5}]}
        assert total_episodes(snapshot) == 20

    def test_falls_back_to_season_sum_without_specials(self) -> None:
        snapshot = {
            "seasons": [
                {"season_number": 0, "episode_count": 4},
                {"season_number": 1, "episode_count": 5},
                {"season_number": 2, "episode_count": 6},
            ]
        }
        assert total_episodes(snapshot) == 11

    def test_unknown_is_zero(self) -> None:
        assert total_episodes({}) == 0
        assert total_episodes({"number_of_episodes": "many"}) == 0


class TestComputeProgress:
    """Tests pour compute_progress."""

    def test_ended_series_partial_watch(self) -> None:
        """Serie terminee, 7 episodes vus sur 10."""
        progress = compute_progress({1: full_season(7)}, ENDED_SNAPSHOT)
        assert progress.watched_count == 7
        assert progress.total_episodes == 10
        assert progress.target_episodes == 10
        assert progress.remaining_to_target == 3
        assert progress.is_completed_by_progress is False

    def test_ended_series_fully_watched(self) -> None:
        progress = compute_progress({1: full_season(10)}, ENDED_SNAPSHOT)
        assert progress.remaining_to_target == 0
        assert progress.is_completed_by_progress is True

    def test_ongoing_series_caught_up(self) -> None:
        """Serie en cours a jour : en attente de nouveaux episodes."""
        watched = {1: full_season(10), 2: [1, 2, 3]}
        progress = compute_progress(watched, ONGOING_SNAPSHOT)
        assert progress.aired_episodes == 13
        assert progress.watched_count == 13
        assert progress.target_episodes == 13
        assert progress.is_ongoing_series is True
        assert progress.is_waiting_for_new_episodes is True
        assert progress.is_completed_by_progress is False

    def test_aired_falls_back_to_total_without_marker(self) -> None:
        snapshot = {"status": "Returning Series", "number_of_episodes": 8}
        progress = compute_progress({}, snapshot)
        assert progress.aired_episodes == 8
        assert progress.target_episodes == 8

    def test_unknown_lifecycle_targets_everything_known(self) -> None:
        snapshot = {"seasons": [{"season_number": 1, "episode_count": 4}]}
        progress = compute_progress({1: [1, 2]}, snapshot)
        assert progress.target_episodes == 4
        assert progress.remaining_to_target == 2
        assert progress.is_completed_by_progress is False

    def test_no_metadata(self) -> None:
        progress = compute_progress({1: [1]})
        assert progress.total_episodes == 0
        assert progress.target_episodes == 0
        assert progress.remaining_to_target == 0

    def test_specials_never_count(self) -> None:
        progress = compute_progress({0: [1, 2, 3], 1: full_season(9)}, ENDED_SNAPSHOT)
        assert progress.watched_count == 9
        assert progress.is_completed_by_progress is False

    def test_fresh_snapshot_first(self) -> None:
        """Le premier instantane (frais) fixe le cycle de vie."""
        cached = dict(ONGOING_SNAPSHOT)
        fresh = {"status": "Ended", "number_of_episodes": 22}
        progress = compute_progress({1: full_season(10)}, fresh, cached)
        assert progress.is_ended_series is True
        assert progress.total_episodes == 22
        assert progress.target_episodes == 22


class TestResolveStatus:
    """Tests pour resolve_status."""

    def test_ended_series_example(self) -> None:
        assert resolve_status("watching", {1: full_season(7)}, ENDED_SNAPSHOT) == WatchStatus.WATCHING
        assert resolve_status("watching", {1: full_season(10)}, ENDED_SNAPSHOT) == WatchStatus.COMPLETED

    def test_ongoing_series_never_auto_completes(self) -> None:
        watched = {1: full_season(10), 2: [1, 2, 3]}
        assert resolve_status("watching", watched, ONGOING_SNAPSHOT) == WatchStatus.WATCHING

    def test_completed_on_ongoing_series_reverts(self) -> None:
        watched = {1: full_season(10), 2: [1, 2, 3]}
        assert resolve_status("completed", watched, ONGOING_SNAPSHOT) == WatchStatus.WATCHING

    def test_completed_under_watched_reverts(self) -> None:
        assert resolve_status("completed", {1: [1]}, ENDED_SNAPSHOT) == WatchStatus.WATCHING

    def test_planned_with_progress_becomes_watching(self) -> None:
        assert resolve_status("planned", {1: [1]}, ENDED_SNAPSHOT) == WatchStatus.WATCHING

    def test_planned_without_progress_stays(self) -> None:
        assert resolve_status("planned", {}, ENDED_SNAPSHOT) == WatchStatus.PLANNED

    def test_planned_fully_watched_completes(self) -> None:
        assert resolve_status("planned", {1: full_season(10)}, ENDED_SNAPSHOT) == WatchStatus.COMPLETED

    def test_dropped_is_sticky(self) -> None:
        assert resolve_status("dropped", {1: full_season(10)}, ENDED_SNAPSHOT) == WatchStatus.DROPPED

    def test_legacy_on_hold_becomes_watching(self) -> None:
        assert resolve_status("on_hold", {}, ENDED_SNAPSHOT) == WatchStatus.WATCHING
        assert resolve_status(WatchStatus.ON_HOLD, {1: full_season(10)}, ENDED_SNAPSHOT) == WatchStatus.COMPLETED

    def test_unknown_status_becomes_watching(self) -> None:
        assert resolve_status("bogus", {}, ENDED_SNAPSHOT) == WatchStatus.WATCHING

    @pytest.mark.parametrize("status", ALL_STATUSES)
    @pytest.mark.parametrize("watched", WATCHED_MAPS)
    @pytest.mark.parametrize("snapshots", SNAPSHOT_LISTS)
    def test_idempotent_and_never_on_hold(self, status, watched, snapshots) -> None:
        """resolve(resolve(s)) == resolve(s), et jamais on_hold en sortie."""
        once = resolve_status(status, watched, *snapshots)
        assert resolve_status(once, watched, *snapshots) == once
        assert once != WatchStatus.ON_HOLD


class TestBuildForCompletion:
    """Tests pour build_for_completion."""

    def test_ongoing_show_exact_result(self) -> None:
        assert build_for_completion(ONGOING_SNAPSHOT) == {1: full_season(10), 2: [1, 2, 3]}

    def test_ended_show_fills_every_regular_season(self) -> None:
        snapshot = {
            "status": "Ended",
            "seasons": [
                {"season_number": 0, "episode_count": 2},
                {"season_number": 1, "episode_count": 3},
                {"season_number": 2, "episode_count": 2},
            ],
        }
        assert build_for_completion(snapshot) == {1: [1, 2, 3], 2: [1, 2]}

    def test_requires_seasons(self) -> None:
        assert build_for_completion({"status": "Ended", "number_of_episodes": 10}) == {}

    def test_no_lifecycle_nor_marker(self) -> None:
        snapshot = {"seasons": [{"season_number": 1, "episode_count": 3}]}
        assert build_for_completion(snapshot) == {}

    def test_marker_beyond_season_size_is_clamped(self) -> None:
        snapshot = {
            "status": "Returning Series",
            "last_episode_to_air": {"season_number": 1, "episode_number": 99},
            "seasons": [{"season_number": 1, "episode_count": 4}],
        }
        assert build_for_completion(snapshot) == {1: [1, 2, 3, 4]}


class TestAiredEpisodesForSeason:
    """Tests pour aired_episodes_for_season."""

    def test_ongoing_show(self) -> None:
        assert aired_episodes_for_season(1, ONGOING_SNAPSHOT) == full_season(10)
        assert aired_episodes_for_season(2, ONGOING_SNAPSHOT) == [1, 2, 3]

    def test_unknown_season(self) -> None:
        assert aired_episodes_for_season(5, ONGOING_SNAPSHOT) is None

    def test_ended_show_full_season(self) -> None:
        assert aired_episodes_for_season(1, ENDED_SNAPSHOT) == full_season(10)
