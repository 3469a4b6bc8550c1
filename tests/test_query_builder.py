"""Tests for preference -> discover parameter mapping."""

import itertools
from datetime import date

import pytest

from cinemood.constants import AUDIENCES, CATEGORIES, MOODS
from cinemood.models.schemas import Preferences
from cinemood.services.query_builder import build_query, get_genre_id, resolve_certifications

TODAY = date(2026, 10, 18)


def prefs(**overrides) -> Preferences:
    data = {
        "mood": "happy",
        "watchingWith": "alone",
        "genre": "",
        "oldMovie": False,
        "ageAppropriate": False,
        "category": "popular",
    }
    data.update(overrides)
    return Preferences.model_validate(data)


def genre_set(params: dict) -> set[int]:
    return {int(g) for g in str(params["with_genres"]).split("|")}


class TestDeterminism:
    """build_query is a pure function of its inputs."""

    @pytest.mark.parametrize(
        "mood,audience,genre,old,age,category",
        list(
            itertools.product(
                MOODS, AUDIENCES, ["", "horror"], [False, True], [False, True], CATEGORIES
            )
        ),
    )
    def test_same_input_same_params(self, mood, audience, genre, old, age, category):
        p = prefs(
            mood=mood,
            watchingWith=audience,
            genre=genre,
            oldMovie=old,
            ageAppropriate=age,
            category=category,
        )
        first = build_query(p, page=3, today=TODAY)
        second = build_query(prefs(**p.model_dump(by_alias=True)), page=3, today=TODAY)
        assert first == second
        assert first["page"] == 3
        # Release dates never go before 1980
        assert first["primary_release_date.gte"] >= "1980-01-01"


class TestScenarios:
    def test_happy_alone_popular(self):
        params = build_query(prefs(), page=1, today=TODAY)

        assert "certification" not in params
        assert "certification_country" not in params
        assert params["primary_release_date.gte"] == "2000-01-01"
        assert "primary_release_date.lte" not in params
        assert genre_set(params) == {35, 16, 10751}
        assert params["sort_by"] == "popularity.desc"
        assert params["vote_count.gte"] == 50

    def test_explicit_genre_beats_mood_and_old_window(self):
        params = build_query(prefs(genre="horror", oldMovie=True), today=TODAY)

        assert params["with_genres"] == "27"
        assert params["primary_release_date.gte"] == "1980-01-01"
        assert params["primary_release_date.lte"] == "2010-12-31"

    @pytest.mark.parametrize("mood", MOODS)
    @pytest.mark.parametrize("genre", ["", "drama"])
    def test_top_rated_overrides_sort_and_thresholds(self, mood, genre):
        params = build_query(prefs(mood=mood, genre=genre, category="top_rated"), today=TODAY)

        assert params["sort_by"] == "vote_average.desc"
        assert params["vote_count.gte"] == 1000
        assert params["vote_average.gte"] == 7.0

    def test_latest_caps_at_today(self):
        params = build_query(prefs(category="latest"), today=TODAY)

        assert params["sort_by"] == "primary_release_date.desc"
        assert params["primary_release_date.lte"] == "2026-10-18"

    def test_latest_keeps_old_movie_upper_bound(self):
        params = build_query(prefs(category="latest", oldMovie=True), today=TODAY)
        assert params["primary_release_date.lte"] == "2010-12-31"


class TestGenrePrecedence:
    def test_unknown_genre_falls_back_to_mood(self):
        params = build_query(prefs(genre="telenovela", mood="sad"), today=TODAY)
        assert genre_set(params) == {18, 10749}

    def test_any_genre_is_no_filter(self):
        assert get_genre_id("any") is None
        assert get_genre_id("") is None
        assert get_genre_id("Science Fiction") == 878

    def test_mood_beats_audience(self):
        params = build_query(prefs(mood="excited", watchingWith="kids"), today=TODAY)
        assert genre_set(params) == {28, 12, 53}

    def test_audience_applies_when_mood_has_no_genres(self):
        params = build_query(prefs(mood="relaxed", watchingWith="family"), today=TODAY)
        assert genre_set(params) == {10751, 16, 12}

    def test_no_genre_filter_at_all(self):
        params = build_query(prefs(mood="relaxed", watchingWith="friends"), today=TODAY)
        assert "with_genres" not in params


class TestCertification:
    def test_age_appropriate_alone(self):
        params = build_query(prefs(ageAppropriate=True), today=TODAY)
        assert params["certification_country"] == "US"
        assert params["certification"] == "G|PG|PG-13"

    def test_kids_alone(self):
        assert resolve_certifications(prefs(watchingWith="kids")) == ["G", "PG"]

    def test_most_restrictive_wins(self):
        p = prefs(watchingWith="kids", ageAppropriate=True)
        assert build_query(p, today=TODAY)["certification"] == "G|PG"

    def test_family_and_age_appropriate(self):
        p = prefs(watchingWith="family", ageAppropriate=True)
        assert resolve_certifications(p) == ["G", "PG", "PG-13"]

    @pytest.mark.parametrize("audience", ["alone", "partner", "friends"])
    def test_adult_audiences_have_no_certification(self, audience):
        assert resolve_certifications(prefs(watchingWith=audience)) == []
