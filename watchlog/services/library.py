"""
Service des actions utilisateur sur la bibliotheque.

Chaque operation recoit une bibliotheque (sequence de LibraryEntry) et
retourne une NOUVELLE liste : l'appelant remplace sa collection en une fois,
les entrees d'origine ne sont jamais modifiees.

Pour les series, chaque modification repasse par resolve_status avec les
instantanes fournis (du plus frais au plus ancien), suivis des metadonnees
stockees dans l'entree.
"""

import math
from collections.abc import Mapping, Sequence
from dataclasses import replace
from datetime import date
from typing import Any, Callable, Optional

from loguru import logger

from watchlog.core.entities.library import LibraryEntry
from watchlog.core.value_objects.progress import ProgressSnapshot
from watchlog.core.value_objects.statuses import (
    MediaType,
    WatchStatus,
    legal_statuses,
)
from watchlog.services.episode_sets import (
    WatchedMap,
    canonicalize_episode_list,
    full_season,
    to_int,
    union_episodes,
)
from watchlog.services.release_clock import is_released_date
from watchlog.services.sanitizer import clamp_rating, now_ms
from watchlog.services.show_lifecycle import extract_seasons, season_episode_count
from watchlog.services.tv_progress import (
    aired_episodes_for_season,
    build_for_completion,
    compute_progress,
    resolve_status,
)

Library = Sequence[LibraryEntry]


def tv_rating_from_seasons(season_ratings: Mapping[int, int]) -> int:
    """Moyenne arrondie (0.5 vers le haut) des notes de saison non nulles ; 0 sans note."""
    rated = [r for r in season_ratings.values() if r > 0]
    if not rated:
        return 0
    return math.floor(sum(rated) / len(rated) + 0.5)


def entry_progress(entry: LibraryEntry, *snapshots: Any) -> ProgressSnapshot:
    """Progression d'une serie, metadonnees fraiches d'abord puis celles de l'entree."""
    return compute_progress(entry.watched_episodes, *snapshots, entry.metadata)


def _first_value(key: str, candidates: Sequence[Any]) -> Any:
    for candidate in candidates:
        if isinstance(candidate, Mapping) and candidate.get(key):
            return candidate[key]
    return None


def _metadata_from_item(item: Mapping[str, Any]) -> dict[str, Any]:
    # Un element du catalogue porte le statut de diffusion TMDB sous "status"
    return {k: v for k, v in item.items() if k not in ("mediaType", "id")}


class LibraryService:
    """
    Actions utilisateur sur une bibliotheque immuable.

    Attributes:
        now: Horloge en millisecondes (dateAdded des nouvelles entrees)
        today: Date de reference pour la sortie des titres (aujourd'hui si None)
    """

    def __init__(
        self,
        now: Callable[[], int] = now_ms,
        today: Optional[date] = None,
    ) -> None:
        self._now = now
        self._today = today

    # ------------------------------------------------------------------
    # Lecture
    # ------------------------------------------------------------------

    @staticmethod
    def get_entry(
        library: Library, media_type: MediaType, tmdb_id: int
    ) -> Optional[LibraryEntry]:
        """Retourne l'entree (media_type, tmdb_id) ou None."""
        for entry in library:
            if entry.media_type == media_type and entry.id == tmdb_id:
                return entry
        return None

    # ------------------------------------------------------------------
    # Helpers internes
    # ------------------------------------------------------------------

    def _is_released(self, media_type: MediaType, candidates: Sequence[Any]) -> bool:
        key = "release_date" if media_type == MediaType.MOVIE else "first_air_date"
        return is_released_date(_first_value(key, candidates), today=self._today)

    @staticmethod
    def _replace(library: Library, updated: LibraryEntry) -> list[LibraryEntry]:
        return [updated if entry.key == updated.key else entry for entry in library]

    def _new_entry(
        self,
        media_type: MediaType,
        tmdb_id: int,
        status: WatchStatus,
        item: Mapping[str, Any],
        rating: int = 0,
        watched: Optional[WatchedMap] = None,
    ) -> LibraryEntry:
        return LibraryEntry(
            media_type=media_type,
            id=tmdb_id,
            status=status,
            rating=rating,
            date_added=self._now(),
            watched_episodes=watched or {},
            metadata=_metadata_from_item(item),
        )

    def _tv_entry_or_new(
        self,
        library: Library,
        tv_id: int,
        item: Optional[Mapping[str, Any]],
    ) -> Optional[LibraryEntry]:
        entry = self.get_entry(library, MediaType.TV, tv_id)
        if entry is not None or item is None:
            return entry
        return self._new_entry(MediaType.TV, tv_id, WatchStatus.WATCHING, item)

    def _commit_tv(
        self,
        library: Library,
        entry: LibraryEntry,
        watched: WatchedMap,
        snapshots: Sequence[Any],
        **changes: Any,
    ) -> list[LibraryEntry]:
        watched = {s: eps for s, eps in sorted(watched.items()) if eps}
        base_status = changes.pop("status", entry.status)
        status = resolve_status(base_status, watched, *snapshots, entry.metadata)
        updated = replace(entry, watched_episodes=watched, status=status, **changes)
        if self.get_entry(library, MediaType.TV, entry.id) is None:
            logger.debug("Nouvelle serie ajoutee depuis un episode: {}", entry.id)
            return [*library, updated]
        return self._replace(library, updated)

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    def add_to_library(
        self,
        library: Library,
        item: Mapping[str, Any],
        status: Any,
        rating: int = 0,
    ) -> list[LibraryEntry]:
        """
        Ajoute un titre du catalogue ou change le statut d'une entree existante.

        Un film (ou une serie) non sorti ne peut pas etre ajoute en completed :
        la bibliotheque est alors retournee inchangee.

        Args:
            library: Bibliotheque courante
            item: Element du catalogue (avec mediaType et id)
            status: Statut demande
            rating: Note du film (ignoree pour une serie)
        """
        media_type = MediaType.parse(item.get("mediaType"))
        tmdb_id = to_int(item.get("id"))
        requested = WatchStatus.parse(status)
        if requested == WatchStatus.ON_HOLD:
            requested = WatchStatus.WATCHING
        if media_type is None or tmdb_id is None or tmdb_id <= 0:
            logger.debug("Ajout ignore: element de catalogue invalide")
            return list(library)
        if requested not in legal_statuses(media_type):
            logger.debug("Ajout ignore: statut {!r} illegal pour {}", status, media_type.value)
            return list(library)

        existing = self.get_entry(library, media_type, tmdb_id)
        if requested == WatchStatus.COMPLETED:
            candidates = [item, existing.metadata] if existing else [item]
            if not self._is_released(media_type, candidates):
                logger.info("Titre non sorti, passage en completed refuse: {}", tmdb_id)
                return list(library)

        if media_type == MediaType.MOVIE:
            if existing is not None:
                updated = replace(
                    existing,
                    status=requested,
                    rating=clamp_rating(rating) or existing.rating,
                )
                return self._replace(library, updated)
            return [
                *library,
                self._new_entry(media_type, tmdb_id, requested, item, rating=clamp_rating(rating)),
            ]

        if existing is not None:
            return self.set_tv_status(library, tmdb_id, requested, item)

        watched = build_for_completion(item) if requested == WatchStatus.COMPLETED else {}
        entry = self._new_entry(media_type, tmdb_id, requested, item, watched=watched)
        entry = replace(entry, status=resolve_status(requested, watched, item))
        return [*library, entry]

    def set_tv_status(
        self,
        library: Library,
        tv_id: int,
        status: Any,
        *snapshots: Any,
    ) -> list[LibraryEntry]:
        """
        Change explicitement le statut d'une serie.

        - completed : refuse si la serie n'est pas sortie ; coche les episodes
          via build_for_completion (sans effet si rien ne peut etre deduit)
          puis revalide le statut, qui retombe en watching pour une serie en
          cours ou incomplete
        - planned : efface progression, notes de saison et note
        - watching / dropped : appliques tels quels
        """
        entry = self.get_entry(library, MediaType.TV, tv_id)
        requested = WatchStatus.parse(status)
        if requested == WatchStatus.ON_HOLD:
            requested = WatchStatus.WATCHING
        if entry is None or requested is None:
            return list(library)

        candidates = [*snapshots, entry.metadata]

        if requested == WatchStatus.COMPLETED:
            if not self._is_released(MediaType.TV, candidates):
                logger.info("Serie non sortie, passage en completed refuse: {}", tv_id)
                return list(library)
            watched = dict(entry.watched_episodes)
            for season, episodes in build_for_completion(*candidates).items():
                watched[season] = union_episodes(watched.get(season, []), episodes)
            return self._commit_tv(
                library, entry, watched, snapshots, status=WatchStatus.COMPLETED
            )

        if requested == WatchStatus.PLANNED:
            updated = replace(
                entry,
                status=WatchStatus.PLANNED,
                watched_episodes={},
                season_ratings={},
                episode_runtimes={},
                rating=0,
            )
            return self._replace(library, updated)

        return self._replace(library, replace(entry, status=requested))

    def toggle_episode(
        self,
        library: Library,
        tv_id: int,
        season: int,
        episode: int,
        *snapshots: Any,
        item: Optional[Mapping[str, Any]] = None,
    ) -> list[LibraryEntry]:
        """
        Coche ou decoche un episode.

        Decocher un episode d'une saison entierement vue retire la note de
        cette saison. Si la serie n'est pas dans la bibliotheque, elle est
        creee depuis item (sinon rien ne change).
        """
        season_number = to_int(season)
        episode_number = to_int(episode)
        if season_number is None or season_number < 0:
            return list(library)
        if episode_number is None or episode_number <= 0:
            return list(library)

        entry = self._tv_entry_or_new(library, tv_id, item)
        if entry is None:
            return list(library)

        candidates = [*snapshots, entry.metadata]
        watched = dict(entry.watched_episodes)
        current = watched.get(season_number, [])
        season_count = season_episode_count(extract_seasons(*candidates), season_number)
        was_fully_watched = bool(current) and season_count == len(current)

        if episode_number in current:
            watched[season_number] = [ep for ep in current if ep != episode_number]
            if was_fully_watched and season_number in entry.season_ratings:
                season_ratings = {
                    s: r for s, r in entry.season_ratings.items() if s != season_number
                }
                return self._commit_tv(
                    library,
                    entry,
                    watched,
                    snapshots,
                    season_ratings=season_ratings,
                    rating=tv_rating_from_seasons(season_ratings),
                )
        else:
            watched[season_number] = union_episodes(current, [episode_number])

        return self._commit_tv(library, entry, watched, snapshots)

    def toggle_season(
        self,
        library: Library,
        tv_id: int,
        season: int,
        episode_count: Optional[int],
        *snapshots: Any,
        aired_episodes: Optional[Sequence[int]] = None,
        item: Optional[Mapping[str, Any]] = None,
    ) -> list[LibraryEntry]:
        """
        Coche ou decoche une saison entiere.

        Les episodes cibles sont, par priorite : aired_episodes s'il est
        fourni, les episodes diffuses d'apres les metadonnees, sinon
        [1..episode_count]. Si tous sont deja vus, la saison est videe et sa
        note retiree ; sinon ils sont ajoutes.
        """
        season_number = to_int(season)
        if season_number is None or season_number < 0:
            return list(library)

        entry = self._tv_entry_or_new(library, tv_id, item)
        if entry is None:
            return list(library)

        candidates = [*snapshots, entry.metadata]
        if aired_episodes is not None:
            target = canonicalize_episode_list(list(aired_episodes))
        else:
            target = aired_episodes_for_season(season_number, *candidates)
            if target is None:
                target = full_season(to_int(episode_count) or 0)
        if not target:
            return list(library)

        watched = dict(entry.watched_episodes)
        current = watched.get(season_number, [])

        if all(ep in current for ep in target):
            watched.pop(season_number, None)
            season_ratings = {
                s: r for s, r in entry.season_ratings.items() if s != season_number
            }
            return self._commit_tv(
                library,
                entry,
                watched,
                snapshots,
                season_ratings=season_ratings,
                rating=tv_rating_from_seasons(season_ratings),
            )

        watched[season_number] = union_episodes(current, target)
        return self._commit_tv(library, entry, watched, snapshots)

    def set_season_rating(
        self,
        library: Library,
        tv_id: int,
        season: int,
        rating: Any,
        *snapshots: Any,
    ) -> list[LibraryEntry]:
        """
        Note une saison (0 retire la note).

        Une note positive marque la saison entierement vue quand son nombre
        d'episodes est connu, et fait passer une serie planned en watching.
        La note de la serie est recalculee.
        """
        season_number = to_int(season)
        entry = self.get_entry(library, MediaType.TV, tv_id)
        if entry is None or season_number is None or season_number < 0:
            return list(library)

        value = clamp_rating(rating)
        candidates = [*snapshots, entry.metadata]
        season_ratings = dict(entry.season_ratings)
        watched = dict(entry.watched_episodes)

        if value == 0:
            season_ratings.pop(season_number, None)
        else:
            season_ratings[season_number] = value
            count = season_episode_count(extract_seasons(*candidates), season_number)
            if count:
                watched[season_number] = full_season(count)

        base_status = entry.status
        if value > 0 and entry.status == WatchStatus.PLANNED:
            base_status = WatchStatus.WATCHING

        return self._commit_tv(
            library,
            entry,
            watched,
            snapshots,
            status=base_status,
            season_ratings=dict(sorted(season_ratings.items())),
            rating=tv_rating_from_seasons(season_ratings),
        )

    def set_movie_rating(
        self, library: Library, movie_id: int, rating: Any
    ) -> list[LibraryEntry]:
        """Note un film deja present dans la bibliotheque."""
        entry = self.get_entry(library, MediaType.MOVIE, movie_id)
        if entry is None:
            return list(library)
        return self._replace(library, replace(entry, rating=clamp_rating(rating)))

    @staticmethod
    def remove_from_library(
        library: Library, media_type: MediaType, tmdb_id: int
    ) -> list[LibraryEntry]:
        return [e for e in library if not (e.media_type == media_type and e.id == tmdb_id)]

    @staticmethod
    def clear_library(library: Library) -> list[LibraryEntry]:
        return []
