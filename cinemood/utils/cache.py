"""Redis caching utilities for TMDB responses.

Provides async Redis caching with JSON serialization, per-endpoint TTLs,
deterministic cache keys and a get-or-compute wrapper that never fails the
caller when Redis misbehaves.
"""

import hashlib
import inspect
import json
from collections.abc import Awaitable, Callable, Mapping
from functools import wraps
from typing import Any, Protocol, TypeVar

import redis.asyncio as redis
from redis.exceptions import RedisError

from cinemood.config import get_settings
from cinemood.constants import CACHE_KEY_MAX_LENGTH, CACHE_TTL_RECOMMENDATIONS
from cinemood.exceptions import CacheError
from cinemood.utils.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")
F = TypeVar("F", bound=Callable[..., Any])


class CacheBackend(Protocol):
    """Key-value store consumed by `with_cache`."""

    async def get(self, key: str) -> Any | None: ...

    async def set(self, key: str, value: Any, ttl: int) -> bool: ...

    async def delete_pattern(self, pattern: str) -> int: ...


class RedisCache:
    """Async Redis cache client with JSON serialization.

    Backend failures raise `CacheError`; while disconnected, reads miss and
    writes are skipped.
    """

    def __init__(self, url: str | None = None) -> None:
        self._url = url
        self._client: redis.Redis | None = None
        self._connected = False

    @property
    def connected(self) -> bool:
        return self._connected

    async def _get_client(self) -> redis.Redis:
        """Get or create Redis client."""
        if self._client is None:
            self._client = redis.from_url(
                self._url or str(get_settings().redis_url),
                encoding="utf-8",
                decode_responses=True,
            )
        return self._client

    async def connect(self) -> bool:
        """Test Redis connection."""
        try:
            client = await self._get_client()
            await client.ping()
            self._connected = True
        except (RedisError, OSError) as e:
            logger.warning(f"Redis cache unavailable: {e}")
            self._connected = False
        return self._connected

    async def ping(self) -> bool:
        """Ping Redis to check connection health."""
        client = await self._get_client()
        return await client.ping()

    async def close(self) -> None:
        """Close Redis connection."""
        if self._client:
            await self._client.aclose()
            self._client = None
            self._connected = False

    async def get(self, key: str) -> Any | None:
        """Get value from cache, or None if not found/expired."""
        if not self._connected:
            return None

        try:
            client = await self._get_client()
            data = await client.get(key)
        except (RedisError, OSError) as e:
            raise CacheError(f"get {key}: {e}") from e

        if data is None:
            return None
        try:
            return json.loads(data)
        except json.JSONDecodeError as e:
            raise CacheError(f"corrupt entry {key}: {e}") from e

    async def set(self, key: str, value: Any, ttl: int = CACHE_TTL_RECOMMENDATIONS) -> bool:
        """Store a JSON-serializable value with an expiry in seconds."""
        if not self._connected:
            return False

        try:
            client = await self._get_client()
            await client.setex(key, ttl, json.dumps(value, default=str))
        except (RedisError, OSError, TypeError) as e:
            raise CacheError(f"set {key}: {e}") from e
        return True

    async def delete_pattern(self, pattern: str) -> int:
        """Delete all keys matching a glob pattern (e.g. "tmdb:discover:*").

        Returns:
            Number of keys deleted
        """
        if not self._connected:
            return 0

        try:
            client = await self._get_client()
            keys = [key async for key in client.scan_iter(match=pattern)]
            if keys:
                return await client.delete(*keys)
            return 0
        except (RedisError, OSError) as e:
            raise CacheError(f"delete {pattern}: {e}") from e


# Process-wide cache instance, connected in the app lifespan
cache = RedisCache()


def make_cache_key(name: str, params: Mapping[str, Any]) -> str:
    """Build a stable key from an operation name and its parameters.

    Parameters are sorted by name so insertion order never matters.
    """
    pairs = "|".join(f"{key}:{params[key]}" for key in sorted(params))
    key_str = f"{name}:{pairs}"

    if len(key_str) > CACHE_KEY_MAX_LENGTH:
        hash_suffix = hashlib.md5(key_str.encode()).hexdigest()[:12]
        key_str = f"{name}:{hash_suffix}"

    return key_str


async def with_cache(
    key: str,
    compute: Callable[[], Awaitable[T]],
    ttl: int = CACHE_TTL_RECOMMENDATIONS,
    backend: CacheBackend | None = None,
) -> T:
    """Return the cached value for `key`, computing and storing it on a miss.

    Cache failures are logged and fall back to `compute`. Exceptions raised by
    `compute` propagate and nothing is stored.
    """
    store = backend if backend is not None else cache

    try:
        cached_value = await store.get(key)
    except CacheError as e:
        logger.warning(f"Cache read failed, computing directly: {e}")
        return await compute()

    if cached_value is not None:
        logger.debug(f"Cache HIT: {key}")
        return cached_value

    logger.debug(f"Cache MISS: {key}")
    value = await compute()

    if value is not None:
        try:
            await store.set(key, value, ttl)
        except CacheError as e:
            logger.warning(f"Cache write failed: {e}")

    return value


def cached(
    namespace: str,
    ttl: int = CACHE_TTL_RECOMMENDATIONS,
    key_builder: Callable[..., str] | None = None,
) -> Callable[[F], F]:
    """Decorator to cache async method results.

    The key is built from the bound call arguments (without `self`) unless a
    `key_builder` is given. Objects exposing a `cache` attribute use it as the
    backend.

    Example:
        @cached("tmdb:movie", ttl=CACHE_TTL_MOVIE_DETAILS)
        async def _fetch_movie_details(self, movie_id: int):
            ...
    """

    def decorator(func: F) -> F:
        signature = inspect.signature(func)

        @wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            if key_builder:
                cache_key = key_builder(*args, **kwargs)
            else:
                bound = signature.bind(*args, **kwargs)
                bound.apply_defaults()
                params = {k: v for k, v in bound.arguments.items() if k != "self"}
                cache_key = make_cache_key(namespace, params)

            backend = getattr(args[0], "cache", None) if args else None
            return await with_cache(
                cache_key,
                lambda: func(*args, **kwargs),
                ttl,
                backend=backend,
            )

        return wrapper  # type: ignore

    return decorator


async def invalidate_cache(pattern: str, backend: CacheBackend | None = None) -> int:
    """Delete every entry matching `pattern`; returns the number removed."""
    store = backend if backend is not None else cache
    try:
        deleted = await store.delete_pattern(pattern)
    except CacheError as e:
        logger.warning(f"Cache invalidation failed for {pattern}: {e}")
        return 0
    if deleted:
        logger.info(f"Invalidated {deleted} cache entries for pattern {pattern}")
    return deleted
