"""Tests for preference validation and persistence."""

import pytest
from pydantic import ValidationError

from cinemood.constants import PREFERENCES_SETTINGS_KEY
from cinemood.exceptions import PreferenceValidationError
from cinemood.models.schemas import Category, PreferenceDraft, Preferences
from cinemood.services.preferences import (
    STEP_AUDIENCE,
    STEP_MOOD,
    finalize,
    load_preferences,
    require_preferences,
    save_preferences,
    validate_step,
)


class TestValidateStep:
    def test_mood_required(self):
        with pytest.raises(PreferenceValidationError) as exc_info:
            validate_step(PreferenceDraft(), STEP_MOOD)
        assert exc_info.value.step == STEP_MOOD

    def test_audience_required(self):
        draft = PreferenceDraft(mood="happy")
        validate_step(draft, STEP_MOOD)
        with pytest.raises(PreferenceValidationError):
            validate_step(draft, STEP_AUDIENCE)

    @pytest.mark.parametrize("step", [2, 3, 4])
    def test_optional_steps_pass_on_empty_draft(self, step):
        validate_step(PreferenceDraft(), step)

    def test_unknown_step(self):
        with pytest.raises(PreferenceValidationError):
            validate_step(PreferenceDraft(mood="sad", watchingWith="kids"), 7)


class TestFinalize:
    def test_builds_frozen_preferences_with_defaults(self):
        prefs = finalize(PreferenceDraft(mood="sad", watchingWith="partner"))

        assert prefs.genre == "any"
        assert prefs.category == Category.POPULAR
        assert prefs.old_movie is False
        with pytest.raises(ValidationError):
            prefs.genre = "horror"

    def test_rejects_incomplete_draft(self):
        with pytest.raises(PreferenceValidationError):
            finalize(PreferenceDraft(watchingWith="kids"))

    def test_genre_is_normalised(self):
        prefs = finalize(PreferenceDraft(mood="happy", watchingWith="alone", genre=" Horror "))
        assert prefs.genre == "horror"


class TestPersistence:
    @pytest.mark.asyncio
    async def test_save_then_load(self, db_session, test_user):
        prefs = Preferences(mood="excited", watching_with="friends", old_movie=True)

        await save_preferences(db_session, test_user, prefs)

        stored = test_user.settings[PREFERENCES_SETTINGS_KEY]
        assert stored["watchingWith"] == "friends"
        assert stored["oldMovie"] is True
        assert load_preferences(test_user) == prefs

    def test_missing_record(self):
        class Stub:
            id = 1
            settings = {}

        assert load_preferences(Stub()) is None
        with pytest.raises(PreferenceValidationError):
            require_preferences(Stub())

    def test_unreadable_record_is_ignored(self):
        class Stub:
            id = 1
            settings = {PREFERENCES_SETTINGS_KEY: {"mood": "furious"}}

        assert load_preferences(Stub()) is None
