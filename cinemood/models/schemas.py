"""Pydantic schemas for API validation and serialization."""

import enum
from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from cinemood.constants import ANY_GENRE, PASSWORD_MAX_BYTES, PASSWORD_MIN_LENGTH


class Mood(str, enum.Enum):
    HAPPY = "happy"
    SAD = "sad"
    EXCITED = "excited"
    RELAXED = "relaxed"
    ADVENTUROUS = "adventurous"
    ROMANTIC = "romantic"


class Audience(str, enum.Enum):
    """Who the user is watching with."""

    ALONE = "alone"
    PARTNER = "partner"
    FAMILY = "family"
    FRIENDS = "friends"
    KIDS = "kids"


class Category(str, enum.Enum):
    POPULAR = "popular"
    TOP_RATED = "top_rated"
    LATEST = "latest"


def _normalize_genre(value: str | None) -> str:
    if value is None:
        return ANY_GENRE
    value = value.strip().lower()
    return value or ANY_GENRE


# Preference schemas
class Preferences(BaseModel):
    """A submitted preference set. Immutable once built."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    mood: Mood
    watching_with: Audience = Field(alias="watchingWith")
    genre: str = ANY_GENRE
    old_movie: bool = Field(default=False, alias="oldMovie")
    age_appropriate: bool = Field(default=False, alias="ageAppropriate")
    category: Category = Category.POPULAR

    @field_validator("genre", mode="before")
    @classmethod
    def normalize_genre(cls, v: str | None) -> str:
        return _normalize_genre(v)


class PreferenceDraft(BaseModel):
    """Preferences as edited by the step-by-step form, possibly incomplete."""

    model_config = ConfigDict(populate_by_name=True)

    mood: Mood | None = None
    watching_with: Audience | None = Field(default=None, alias="watchingWith")
    genre: str | None = None
    old_movie: bool = Field(default=False, alias="oldMovie")
    age_appropriate: bool = Field(default=False, alias="ageAppropriate")
    category: Category = Category.POPULAR


class StepValidationResponse(BaseModel):
    step: int
    valid: bool = True


# User schemas
class UserCreate(BaseModel):
    """Sign-up payload."""

    name: str = Field(min_length=1, max_length=255)
    email: EmailStr
    password: str = Field(min_length=PASSWORD_MIN_LENGTH)

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, v: str) -> str:
        if len(v.encode("utf-8")) > PASSWORD_MAX_BYTES:
            raise ValueError(f"Password must be at most {PASSWORD_MAX_BYTES} bytes")
        return v


class UserLogin(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)


class UserRead(BaseModel):
    """Public user representation (never includes the password hash)."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str
    created_at: datetime | None = None


class AuthResponse(BaseModel):
    success: bool = True
    user: UserRead


# Movie schemas (TMDB entities, read-only)
class Genre(BaseModel):
    id: int
    name: str


class Movie(BaseModel):
    """A TMDB movie as returned by list endpoints."""

    model_config = ConfigDict(extra="ignore")

    id: int
    title: str = ""
    overview: str = ""
    poster_path: str | None = None
    backdrop_path: str | None = None
    release_date: str = ""
    vote_average: float = Field(default=0.0, ge=0, le=10)
    vote_count: int = Field(default=0, ge=0)
    genre_ids: list[int] = Field(default_factory=list)
    adult: bool = False


class ProductionCompany(BaseModel):
    id: int
    name: str
    logo_path: str | None = None
    origin_country: str = ""


class ProductionCountry(BaseModel):
    iso_3166_1: str
    name: str


class SpokenLanguage(BaseModel):
    english_name: str = ""
    iso_639_1: str
    name: str = ""


class MovieDetails(Movie):
    """Full TMDB movie record from /movie/{id}."""

    genres: list[Genre] = Field(default_factory=list)
    runtime: int | None = None
    budget: int = 0
    revenue: int = 0
    production_companies: list[ProductionCompany] = Field(default_factory=list)
    production_countries: list[ProductionCountry] = Field(default_factory=list)
    spoken_languages: list[SpokenLanguage] = Field(default_factory=list)


class MoviePage(BaseModel):
    """One page of a paginated TMDB list."""

    page: int = 1
    results: list[Movie] = Field(default_factory=list)
    total_pages: int = 0


# Recommendation schemas
class NextRecommendationResponse(BaseModel):
    movie: Movie
    shown: int
    available: int
    state: str


class CachePurgeResponse(BaseModel):
    pattern: str
    deleted: int
