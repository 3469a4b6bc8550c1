"""Preference API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from cinemood.auth import get_current_user
from cinemood.db import get_db
from cinemood.models.schemas import PreferenceDraft, Preferences, StepValidationResponse
from cinemood.models.user import User
from cinemood.services.preferences import finalize, load_preferences, save_preferences, validate_step
from cinemood.services.selection import TrackerRegistry, get_tracker_registry

router = APIRouter()


@router.get("", response_model=Preferences, response_model_by_alias=True)
async def get_preferences(
    user: Annotated[User, Depends(get_current_user)],
) -> Preferences:
    """Get the stored preference record."""
    preferences = load_preferences(user)
    if preferences is None:
        raise HTTPException(status_code=404, detail="No preferences saved")
    return preferences


@router.post("/validate", response_model=StepValidationResponse)
async def validate_preferences_step(
    draft: PreferenceDraft,
    user: Annotated[User, Depends(get_current_user)],
    step: int = Query(..., ge=0),
) -> StepValidationResponse:
    """Check whether the form may proceed past one step."""
    validate_step(draft, step)
    return StepValidationResponse(step=step)


@router.put("", response_model=Preferences, response_model_by_alias=True)
async def update_preferences(
    draft: PreferenceDraft,
    user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
    registry: Annotated[TrackerRegistry, Depends(get_tracker_registry)],
) -> Preferences:
    """Submit the form: validate, store, and restart recommendations."""
    preferences = finalize(draft)
    await save_preferences(db, user, preferences)
    registry.drop(user.id)
    return preferences
