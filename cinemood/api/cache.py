"""Cache administration endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query

from cinemood.auth import get_admin_user
from cinemood.models.schemas import CachePurgeResponse
from cinemood.models.user import User
from cinemood.utils.cache import invalidate_cache

router = APIRouter()


@router.delete("", response_model=CachePurgeResponse)
async def purge_cache(
    admin: Annotated[User, Depends(get_admin_user)],
    pattern: str = Query(..., min_length=1, description='Glob pattern, e.g. "tmdb:discover:*"'),
) -> CachePurgeResponse:
    """Delete all cache entries matching a pattern."""
    deleted = await invalidate_cache(pattern)
    return CachePurgeResponse(pattern=pattern, deleted=deleted)
