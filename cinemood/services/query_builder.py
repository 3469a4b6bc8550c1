"""Map a preference set to TMDB /discover/movie filter parameters.

Genre filter precedence is first-set-wins: an explicit genre beats the mood
fallback, which beats the audience fallback. Certification sets from the
age-appropriate flag and the audience are intersected, so the most
restrictive one always applies.
"""

from datetime import date

from cinemood.constants import (
    AGE_APPROPRIATE_CERTIFICATIONS,
    ANY_GENRE,
    AUDIENCE_CERTIFICATIONS,
    AUDIENCE_GENRES,
    CERTIFICATION_COUNTRY,
    CERTIFICATION_ORDER,
    DEFAULT_MIN_VOTE_COUNT,
    GENRE_IDS,
    MODERN_MOVIE_RELEASE_GTE,
    MOOD_GENRES,
    OLD_MOVIE_RELEASE_GTE,
    OLD_MOVIE_RELEASE_LTE,
    TOP_RATED_MIN_VOTE_AVERAGE,
    TOP_RATED_MIN_VOTE_COUNT,
)
from cinemood.models.schemas import Category, Preferences

QueryParams = dict[str, str | int | float]


def get_genre_id(label: str | None) -> int | None:
    """Resolve a human genre label, or None for empty/"any"/unknown labels."""
    if not label:
        return None
    label = label.strip().lower()
    if label == ANY_GENRE:
        return None
    return GENRE_IDS.get(label)


def _join_ids(ids: tuple[int, ...]) -> str:
    # "|" is TMDB's OR separator
    return "|".join(str(genre_id) for genre_id in ids)


def resolve_certifications(preferences: Preferences) -> list[str]:
    """Return allowed certification codes, most restrictive set wins.

    Empty list means no certification filter.
    """
    active: list[frozenset[str]] = []
    if preferences.age_appropriate:
        active.append(AGE_APPROPRIATE_CERTIFICATIONS)
    audience_set = AUDIENCE_CERTIFICATIONS.get(preferences.watching_with.value)
    if audience_set:
        active.append(audience_set)
    if not active:
        return []

    allowed = frozenset.intersection(*active)
    return [code for code in CERTIFICATION_ORDER if code in allowed]


def build_query(
    preferences: Preferences,
    page: int = 1,
    today: date | None = None,
) -> QueryParams:
    """Build discover parameters for one page of recommendations.

    Pure: identical arguments always give an identical mapping. `today` is only
    read for the "latest" category and defaults to the current date.
    """
    params: QueryParams = {
        "sort_by": "popularity.desc",
        "page": page,
        "vote_count.gte": DEFAULT_MIN_VOTE_COUNT,
        "include_adult": "false",
    }

    genre_id = get_genre_id(preferences.genre)
    if genre_id is not None:
        params["with_genres"] = str(genre_id)

    if preferences.old_movie:
        params["primary_release_date.gte"] = OLD_MOVIE_RELEASE_GTE
        params["primary_release_date.lte"] = OLD_MOVIE_RELEASE_LTE
    else:
        params["primary_release_date.gte"] = MODERN_MOVIE_RELEASE_GTE

    if preferences.category == Category.TOP_RATED:
        params["sort_by"] = "vote_average.desc"
        params["vote_count.gte"] = TOP_RATED_MIN_VOTE_COUNT
        params["vote_average.gte"] = TOP_RATED_MIN_VOTE_AVERAGE
    elif preferences.category == Category.LATEST:
        params["sort_by"] = "primary_release_date.desc"
        cap = (today or date.today()).isoformat()
        upper = params.get("primary_release_date.lte")
        # ISO dates compare correctly as strings
        params["primary_release_date.lte"] = min(str(upper), cap) if upper else cap
    else:
        params["sort_by"] = "popularity.desc"

    if "with_genres" not in params:
        mood_genres = MOOD_GENRES.get(preferences.mood.value)
        if mood_genres:
            params["with_genres"] = _join_ids(mood_genres)

    if "with_genres" not in params:
        audience_genres = AUDIENCE_GENRES.get(preferences.watching_with.value)
        if audience_genres:
            params["with_genres"] = _join_ids(audience_genres)

    certifications = resolve_certifications(preferences)
    if certifications:
        params["certification_country"] = CERTIFICATION_COUNTRY
        params["certification"] = "|".join(certifications)

    return params
