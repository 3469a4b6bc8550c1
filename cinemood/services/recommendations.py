"""Recommendation fetching: one shuffled discover page, or a multi-page pool."""

import random
from typing import Protocol

from cinemood.constants import DEFAULT_EXTENDED_TOTAL, TMDB_MAX_PAGE
from cinemood.models.schemas import Movie, Preferences
from cinemood.services.query_builder import build_query
from cinemood.services.tmdb import TMDBService, tmdb_service
from cinemood.utils.logging import get_logger

logger = get_logger(__name__)


class MovieSource(Protocol):
    async def discover_movies(self, params: dict) -> list[Movie]: ...


class RecommendationFetcher:
    """Turns preferences into shuffled movie lists.

    The shuffle happens after the (cached) fetch, so repeated identical
    queries share a cache entry but still surface movies in a new order.
    """

    def __init__(self, source: MovieSource | TMDBService, rng: random.Random | None = None) -> None:
        self.source = source
        self.rng = rng or random.Random()

    async def fetch_recommendations(self, preferences: Preferences, page: int = 1) -> list[Movie]:
        """Fetch one page of recommendations in random order.

        Returns an empty list when TMDB fails.
        """
        params = build_query(preferences, page)
        movies = list(await self.source.discover_movies(params))
        self.rng.shuffle(movies)
        return movies

    async def fetch_extended(
        self,
        preferences: Preferences,
        total_wanted: int = DEFAULT_EXTENDED_TOTAL,
    ) -> list[Movie]:
        """Accumulate pages until `total_wanted` movies are collected.

        Stops early when a page comes back empty. The result is shuffled and
        holds at most `total_wanted` movies.
        """
        collected: list[Movie] = []
        seen: set[int] = set()
        page = 1
        while len(collected) < total_wanted and page <= TMDB_MAX_PAGE:
            movies = await self.fetch_recommendations(preferences, page)
            if not movies:
                logger.debug(f"Recommendations exhausted at page {page}")
                break
            # Popularity shifts between requests can repeat a movie on the next page
            for movie in movies:
                if movie.id not in seen:
                    seen.add(movie.id)
                    collected.append(movie)
            page += 1

        self.rng.shuffle(collected)
        return collected[:total_wanted]


recommendation_fetcher = RecommendationFetcher(tmdb_service)


def get_recommendation_fetcher() -> RecommendationFetcher:
    """Dependency returning the shared fetcher."""
    return recommendation_fetcher
