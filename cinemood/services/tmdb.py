"""TMDB API integration for movie metadata.

Raw `_fetch_*` methods go through the Redis cache and raise `TransportError`
on failure, so errors are never cached. The public methods fail soft and
return empty results instead.
"""

from typing import Any

import httpx
from pydantic import ValidationError

from cinemood.config import get_settings
from cinemood.constants import (
    CACHE_TTL_GENRES,
    CACHE_TTL_MOVIE_DETAILS,
    CACHE_TTL_POPULAR,
    CACHE_TTL_RECOMMENDATIONS,
    CACHE_TTL_SEARCH,
    CACHE_TTL_SIMILAR,
    CACHE_TTL_TOP_RATED,
)
from cinemood.exceptions import TransportError
from cinemood.models.schemas import Genre, Movie, MovieDetails, MoviePage
from cinemood.utils.cache import CacheBackend, cached, make_cache_key
from cinemood.utils.http_client import get_tmdb_client
from cinemood.utils.logging import get_logger

logger = get_logger(__name__)


def _discover_key(self: "TMDBService", params: dict[str, Any]) -> str:
    return make_cache_key("tmdb:discover", params)


def parse_movies(items: list[dict[str, Any]]) -> list[Movie]:
    """Validate raw TMDB result items, skipping malformed ones."""
    movies = []
    for item in items:
        try:
            movies.append(Movie.model_validate(item))
        except ValidationError as e:
            logger.debug(f"Skipping malformed TMDB item {item.get('id')}: {e}")
    return movies


class TMDBService:
    """Service for fetching movie metadata from TMDB."""

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        client: httpx.AsyncClient | None = None,
        cache: CacheBackend | None = None,
    ) -> None:
        settings = get_settings()
        self.api_key = settings.tmdb_api_key if api_key is None else api_key
        self.base_url = (base_url or settings.tmdb_base_url).rstrip("/")
        self._client = client
        # None means the shared Redis cache
        self.cache = cache

        # Support both API key v3 and Bearer token
        if self.api_key.startswith("eyJ"):
            self.headers = {
                "Authorization": f"Bearer {self.api_key}",
                "Accept": "application/json",
            }
            self.use_api_key_param = False
        else:
            self.headers = {"Accept": "application/json"}
            self.use_api_key_param = True

        if not self.api_key:
            logger.warning("TMDB_API_KEY is not set; TMDB requests will fail")

    @property
    def client(self) -> httpx.AsyncClient:
        return self._client or get_tmdb_client()

    def _add_api_key(self, params: dict[str, Any]) -> dict[str, Any]:
        """Add API key to params if using v3 key."""
        if self.use_api_key_param:
            params["api_key"] = self.api_key
        return params

    async def _get(self, path: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        """GET a TMDB endpoint and return the decoded JSON body."""
        query = self._add_api_key(dict(params or {}))
        try:
            response = await self.client.get(
                f"{self.base_url}{path}",
                params=query,
                headers=self.headers,
            )
        except httpx.TimeoutException as e:
            raise TransportError(f"TMDB {path} timed out") from e
        except httpx.HTTPError as e:
            raise TransportError(f"TMDB {path} unreachable: {e}") from e

        if response.status_code != 200:
            raise TransportError(f"TMDB {path} failed: {response.status_code}")

        try:
            return response.json()
        except ValueError as e:
            raise TransportError(f"TMDB {path} returned invalid JSON") from e

    # -- cached raw calls ---------------------------------------------------

    @cached("tmdb:discover", ttl=CACHE_TTL_RECOMMENDATIONS, key_builder=_discover_key)
    async def _fetch_discover(self, params: dict[str, Any]) -> list[dict[str, Any]]:
        data = await self._get("/discover/movie", params)
        return data.get("results", [])

    @cached("tmdb:search", ttl=CACHE_TTL_SEARCH)
    async def _fetch_search(self, query: str, page: int = 1) -> dict[str, Any]:
        data = await self._get("/search/movie", {"query": query, "page": page})
        return {
            "page": data.get("page", page),
            "results": data.get("results", []),
            "total_pages": data.get("total_pages", 0),
        }

    @cached("tmdb:movie", ttl=CACHE_TTL_MOVIE_DETAILS)
    async def _fetch_movie_details(self, movie_id: int) -> dict[str, Any]:
        return await self._get(f"/movie/{movie_id}")

    @cached("tmdb:genres", ttl=CACHE_TTL_GENRES)
    async def _fetch_genres(self) -> list[dict[str, Any]]:
        data = await self._get("/genre/movie/list")
        return data.get("genres", [])

    @cached("tmdb:popular", ttl=CACHE_TTL_POPULAR)
    async def _fetch_popular(self, page: int = 1) -> dict[str, Any]:
        data = await self._get("/movie/popular", {"page": page})
        return {
            "page": data.get("page", page),
            "results": data.get("results", []),
            "total_pages": data.get("total_pages", 0),
        }

    @cached("tmdb:top_rated", ttl=CACHE_TTL_TOP_RATED)
    async def _fetch_top_rated(self, page: int = 1) -> dict[str, Any]:
        data = await self._get("/movie/top_rated", {"page": page})
        return {
            "page": data.get("page", page),
            "results": data.get("results", []),
            "total_pages": data.get("total_pages", 0),
        }

    @cached("tmdb:similar", ttl=CACHE_TTL_SIMILAR)
    async def _fetch_similar(self, movie_id: int) -> list[dict[str, Any]]:
        data = await self._get(f"/movie/{movie_id}/similar")
        return data.get("results", [])

    # -- public, fail-soft API ----------------------------------------------

    async def discover_movies(self, params: dict[str, Any]) -> list[Movie]:
        """One page of /discover/movie results for the given filters."""
        try:
            return parse_movies(await self._fetch_discover(params))
        except TransportError as e:
            logger.warning(f"Error fetching recommendations: {e}")
            return []

    async def search_movies(self, query: str, page: int = 1) -> MoviePage:
        """Search for movies by title."""
        if not query.strip():
            return MoviePage(page=page)
        try:
            data = await self._fetch_search(query.strip(), page)
        except TransportError as e:
            logger.warning(f"Error searching movies: {e}")
            return MoviePage(page=page)
        return MoviePage(
            page=data["page"],
            results=parse_movies(data["results"]),
            total_pages=data["total_pages"],
        )

    async def get_movie_details(self, movie_id: int) -> MovieDetails | None:
        try:
            data = await self._fetch_movie_details(movie_id)
            return MovieDetails.model_validate(data)
        except TransportError as e:
            logger.warning(f"Error fetching movie details for {movie_id}: {e}")
        except ValidationError as e:
            logger.warning(f"Malformed movie details for {movie_id}: {e}")
        return None

    async def get_genres(self) -> list[Genre]:
        try:
            data = await self._fetch_genres()
        except TransportError as e:
            logger.warning(f"Error fetching genres: {e}")
            return []
        genres = []
        for item in data:
            try:
                genres.append(Genre.model_validate(item))
            except ValidationError as e:
                logger.debug(f"Skipping malformed TMDB genre {item}: {e}")
        return genres

    async def get_popular_movies(self, page: int = 1) -> MoviePage:
        try:
            data = await self._fetch_popular(page)
        except TransportError as e:
            logger.warning(f"Error fetching popular movies: {e}")
            return MoviePage(page=page)
        return MoviePage(
            page=data["page"],
            results=parse_movies(data["results"]),
            total_pages=data["total_pages"],
        )

    async def get_top_rated_movies(self, page: int = 1) -> MoviePage:
        try:
            data = await self._fetch_top_rated(page)
        except TransportError as e:
            logger.warning(f"Error fetching top rated movies: {e}")
            return MoviePage(page=page)
        return MoviePage(
            page=data["page"],
            results=parse_movies(data["results"]),
            total_pages=data["total_pages"],
        )

    async def get_similar_movies(self, movie_id: int) -> list[Movie]:
        try:
            return parse_movies(await self._fetch_similar(movie_id))
        except TransportError as e:
            logger.warning(f"Error fetching similar movies for {movie_id}: {e}")
            return []


tmdb_service = TMDBService()
