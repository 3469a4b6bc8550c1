"""The pooled httpx client shared by every TMDB request."""

import httpx

from cinemood.config import get_settings

_POOL_LIMITS = httpx.Limits(
    max_connections=20,
    max_keepalive_connections=10,
    keepalive_expiry=30,
)

_tmdb_client: httpx.AsyncClient | None = None


def get_tmdb_client() -> httpx.AsyncClient:
    """Return the TMDB client, creating it on first use."""
    global _tmdb_client
    if _tmdb_client is None:
        timeout = get_settings().tmdb_timeout
        _tmdb_client = httpx.AsyncClient(
            timeout=httpx.Timeout(timeout, connect=min(timeout, 5.0)),
            limits=_POOL_LIMITS,
            headers={"Accept": "application/json"},
        )
    return _tmdb_client


async def close_tmdb_client() -> None:
    """Close the TMDB client. Called from the app lifespan on shutdown."""
    global _tmdb_client
    if _tmdb_client is not None:
        await _tmdb_client.aclose()
        _tmdb_client = None
