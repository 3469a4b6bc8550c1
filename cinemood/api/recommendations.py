"""Recommendations API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query

from cinemood.auth import get_current_user
from cinemood.constants import DEFAULT_EXTENDED_TOTAL, MAX_EXTENDED_TOTAL, TMDB_MAX_PAGE
from cinemood.models.schemas import Movie, NextRecommendationResponse
from cinemood.models.user import User
from cinemood.services.preferences import require_preferences
from cinemood.services.recommendations import RecommendationFetcher, get_recommendation_fetcher
from cinemood.services.selection import TrackerRegistry, get_tracker_registry

router = APIRouter()


@router.get("", response_model=list[Movie])
async def get_recommendations(
    user: Annotated[User, Depends(get_current_user)],
    fetcher: Annotated[RecommendationFetcher, Depends(get_recommendation_fetcher)],
    page: int = Query(1, ge=1, le=TMDB_MAX_PAGE),
) -> list[Movie]:
    """One shuffled page of recommendations for the stored preferences."""
    preferences = require_preferences(user)
    return await fetcher.fetch_recommendations(preferences, page)


@router.get("/extended", response_model=list[Movie])
async def get_extended_recommendations(
    user: Annotated[User, Depends(get_current_user)],
    fetcher: Annotated[RecommendationFetcher, Depends(get_recommendation_fetcher)],
    total: int = Query(DEFAULT_EXTENDED_TOTAL, ge=1, le=MAX_EXTENDED_TOTAL),
) -> list[Movie]:
    """Several pages of recommendations, shuffled together."""
    preferences = require_preferences(user)
    return await fetcher.fetch_extended(preferences, total)


@router.get("/next", response_model=NextRecommendationResponse)
async def next_recommendation(
    user: Annotated[User, Depends(get_current_user)],
    fetcher: Annotated[RecommendationFetcher, Depends(get_recommendation_fetcher)],
    registry: Annotated[TrackerRegistry, Depends(get_tracker_registry)],
) -> NextRecommendationResponse:
    """Next movie the user has not seen in this session."""
    preferences = require_preferences(user)
    tracker = registry.get(user.id, preferences, fetcher)
    movie = await tracker.next()
    return NextRecommendationResponse(
        movie=movie,
        shown=len(tracker.used_ids),
        available=len(tracker.pool),
        state=tracker.state.value,
    )


@router.post("/reset")
async def reset_recommendations(
    user: Annotated[User, Depends(get_current_user)],
    registry: Annotated[TrackerRegistry, Depends(get_tracker_registry)],
) -> dict:
    """Start the recommendation session over."""
    registry.drop(user.id)
    return {"success": True}
