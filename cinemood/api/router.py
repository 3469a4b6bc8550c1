"""Main API router."""

from fastapi import APIRouter

from cinemood.api.auth import router as auth_router
from cinemood.api.cache import router as cache_router
from cinemood.api.movies import router as movies_router
from cinemood.api.preferences import router as preferences_router
from cinemood.api.recommendations import router as recommendations_router

api_router = APIRouter(prefix="/api")

api_router.include_router(auth_router, prefix="/auth", tags=["auth"])
api_router.include_router(cache_router, prefix="/cache", tags=["cache"])
api_router.include_router(movies_router, prefix="/movies", tags=["movies"])
api_router.include_router(preferences_router, prefix="/preferences", tags=["preferences"])
api_router.include_router(recommendations_router, prefix="/recommendations", tags=["recommendations"])
