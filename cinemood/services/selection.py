"""Per-session recommendation picking without repeats.

A `SelectionTracker` owns the movie pool and the ids already shown for one
session. It picks unseen movies at random and pulls the next discover page
once the pool runs dry. `TrackerRegistry` is the process-wide home of all
trackers; it is created with the application and cleared at shutdown.
"""

import asyncio
import enum
import random
from collections import OrderedDict

from fastapi import Request

from cinemood.constants import MAX_TRACKED_SESSIONS, TMDB_MAX_PAGE
from cinemood.exceptions import ExhaustionError
from cinemood.models.schemas import Movie, Preferences
from cinemood.services.recommendations import RecommendationFetcher
from cinemood.utils.logging import LogContext, get_logger

logger = get_logger(__name__)


class TrackerState(str, enum.Enum):
    EMPTY = "empty"
    HAS_POOL = "has_pool"
    EXHAUSTED = "exhausted"
    FETCHING_MORE = "fetching_more"


class SelectionTracker:
    """Hands out movies from a growing pool, never the same one twice."""

    def __init__(
        self,
        preferences: Preferences,
        fetcher: RecommendationFetcher,
        rng: random.Random | None = None,
        owner: int | str | None = None,
    ) -> None:
        self.preferences = preferences
        self.fetcher = fetcher
        self.rng = rng or random.Random()
        self.log = LogContext(logger, owner=owner)
        self._lock = asyncio.Lock()
        self.reset()

    def reset(self) -> None:
        """Forget the pool, the shown ids and the page counter."""
        self.pool: list[Movie] = []
        self.used_ids: set[int] = set()
        self._pool_ids: set[int] = set()
        self.page = 0
        self.state = TrackerState.EMPTY

    @property
    def unused(self) -> list[Movie]:
        return [movie for movie in self.pool if movie.id not in self.used_ids]

    def extend_pool(self, movies: list[Movie]) -> int:
        """Append movies not already pooled; returns how many were added."""
        added = 0
        for movie in movies:
            if movie.id in self._pool_ids:
                continue
            self._pool_ids.add(movie.id)
            self.pool.append(movie)
            added += 1
        if added and self.state == TrackerState.EMPTY:
            self.state = TrackerState.HAS_POOL
        return added

    def _pick(self) -> Movie | None:
        candidates = self.unused
        if not candidates:
            return None

        movie = self.rng.choice(candidates)
        self.used_ids.add(movie.id)
        self.state = TrackerState.HAS_POOL if len(candidates) > 1 else TrackerState.EXHAUSTED
        return movie

    async def _load_next_page(self) -> int:
        if self.page >= TMDB_MAX_PAGE:
            return 0

        next_page = self.page + 1
        movies = await self.fetcher.fetch_recommendations(self.preferences, next_page)
        if not movies:
            # Page counter stays put so a transient TMDB failure can be retried
            return 0

        self.page = next_page
        added = self.extend_pool(movies)
        self.log.debug(f"Page {next_page} added {added} movies (pool={len(self.pool)})")
        return added

    async def next(self) -> Movie:
        """Return an unseen movie, fetching one more page at most.

        Raises:
            ExhaustionError: nothing unseen is left and the next page added
                nothing new.
        """
        async with self._lock:
            movie = self._pick()
            if movie is not None:
                return movie

            self.state = TrackerState.FETCHING_MORE
            added = await self._load_next_page()
            movie = self._pick() if added else None
            if movie is None:
                if self.pool:
                    self.state = TrackerState.EXHAUSTED
                    self.log.info(f"No more recommendations after page {self.page}")
                else:
                    self.state = TrackerState.EMPTY
                    # Fetch failures surface here as an empty first page
                    self.log.warning("First page returned nothing: no matches or TMDB unavailable")
                raise ExhaustionError()
            return movie


class TrackerRegistry:
    """Process-wide map of session owner -> SelectionTracker.

    Holds at most `max_sessions` trackers; the least recently used one is
    evicted first.
    """

    def __init__(
        self,
        rng: random.Random | None = None,
        max_sessions: int = MAX_TRACKED_SESSIONS,
    ) -> None:
        self._trackers: OrderedDict[int | str, SelectionTracker] = OrderedDict()
        self._rng = rng
        self.max_sessions = max_sessions

    def __len__(self) -> int:
        return len(self._trackers)

    def __contains__(self, owner: object) -> bool:
        return owner in self._trackers

    def get(
        self,
        owner: int | str,
        preferences: Preferences,
        fetcher: RecommendationFetcher,
    ) -> SelectionTracker:
        """Return the owner's tracker, starting over if preferences changed."""
        tracker = self._trackers.get(owner)
        if tracker is not None and tracker.preferences == preferences:
            self._trackers.move_to_end(owner)
            return tracker

        if tracker is not None:
            logger.debug(f"Preferences changed for {owner}, resetting recommendations")
        tracker = SelectionTracker(preferences, fetcher, rng=self._rng, owner=owner)
        self._trackers[owner] = tracker
        self._trackers.move_to_end(owner)

        while len(self._trackers) > self.max_sessions:
            evicted, _ = self._trackers.popitem(last=False)
            logger.debug(f"Evicted idle recommendation session {evicted}")
        return tracker

    def drop(self, owner: int | str) -> None:
        self._trackers.pop(owner, None)

    def clear(self) -> None:
        self._trackers.clear()


def get_tracker_registry(request: Request) -> TrackerRegistry:
    """Dependency returning the registry attached to the running app."""
    return request.app.state.trackers
