"""Preference form validation and persistence on the user record."""

from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from cinemood.constants import PREFERENCES_SETTINGS_KEY
from cinemood.exceptions import PreferenceValidationError
from cinemood.models.schemas import PreferenceDraft, Preferences
from cinemood.models.user import User
from cinemood.utils.logging import get_logger

logger = get_logger(__name__)

# Form steps in order: mood, audience, genre, category, extra flags
STEP_MOOD = 0
STEP_AUDIENCE = 1
STEP_GENRE = 2
STEP_CATEGORY = 3
STEP_FLAGS = 4
TOTAL_STEPS = 5


def validate_step(draft: PreferenceDraft, step: int) -> None:
    """Check that the form may move past `step`.

    Raises:
        PreferenceValidationError: a required choice is missing or the step
            does not exist.
    """
    if step == STEP_MOOD and draft.mood is None:
        raise PreferenceValidationError("Please pick a mood", step=step)
    if step == STEP_AUDIENCE and draft.watching_with is None:
        raise PreferenceValidationError("Please pick who you are watching with", step=step)
    if not 0 <= step < TOTAL_STEPS:
        raise PreferenceValidationError(f"Unknown preference step {step}", step=step)
    # Genre, category and flags are optional


def finalize(draft: PreferenceDraft) -> Preferences:
    """Validate every step and freeze the draft into `Preferences`."""
    for step in range(TOTAL_STEPS):
        validate_step(draft, step)
    return Preferences(
        mood=draft.mood,
        watching_with=draft.watching_with,
        genre=draft.genre,
        old_movie=draft.old_movie,
        age_appropriate=draft.age_appropriate,
        category=draft.category,
    )


def load_preferences(user: User) -> Preferences | None:
    """Read the stored preference record, or None if absent or unreadable."""
    raw = (user.settings or {}).get(PREFERENCES_SETTINGS_KEY)
    if not raw:
        return None
    try:
        return Preferences.model_validate(raw)
    except ValidationError as e:
        logger.warning(f"Ignoring unreadable preferences for user {user.id}: {e}")
        return None


async def save_preferences(db: AsyncSession, user: User, preferences: Preferences) -> Preferences:
    """Persist preferences under the user's settings."""
    # Reassign so SQLAlchemy sees the JSON column change
    settings = dict(user.settings or {})
    settings[PREFERENCES_SETTINGS_KEY] = preferences.model_dump(mode="json", by_alias=True)
    user.settings = settings
    await db.commit()
    await db.refresh(user)
    return preferences


def require_preferences(user: User) -> Preferences:
    """Stored preferences, or a validation error pointing at the first step."""
    preferences = load_preferences(user)
    if preferences is None:
        raise PreferenceValidationError("Set your preferences first", step=STEP_MOOD)
    return preferences
