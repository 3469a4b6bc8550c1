"""Movie catalogue endpoints backed by TMDB."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query

from cinemood.auth import get_current_user
from cinemood.constants import TMDB_MAX_PAGE
from cinemood.models.schemas import Genre, Movie, MovieDetails, MoviePage
from cinemood.models.user import User
from cinemood.services.tmdb import TMDBService, tmdb_service

router = APIRouter()


def get_tmdb_service() -> TMDBService:
    return tmdb_service


@router.get("/search", response_model=MoviePage)
async def search_movies(
    user: Annotated[User, Depends(get_current_user)],
    tmdb: Annotated[TMDBService, Depends(get_tmdb_service)],
    q: str = Query("", max_length=200),
    page: int = Query(1, ge=1, le=TMDB_MAX_PAGE),
) -> MoviePage:
    """Search movies by title."""
    return await tmdb.search_movies(q, page)


@router.get("/genres", response_model=list[Genre])
async def list_genres(
    user: Annotated[User, Depends(get_current_user)],
    tmdb: Annotated[TMDBService, Depends(get_tmdb_service)],
) -> list[Genre]:
    return await tmdb.get_genres()


@router.get("/popular", response_model=MoviePage)
async def popular_movies(
    user: Annotated[User, Depends(get_current_user)],
    tmdb: Annotated[TMDBService, Depends(get_tmdb_service)],
    page: int = Query(1, ge=1, le=TMDB_MAX_PAGE),
) -> MoviePage:
    return await tmdb.get_popular_movies(page)


@router.get("/top-rated", response_model=MoviePage)
async def top_rated_movies(
    user: Annotated[User, Depends(get_current_user)],
    tmdb: Annotated[TMDBService, Depends(get_tmdb_service)],
    page: int = Query(1, ge=1, le=TMDB_MAX_PAGE),
) -> MoviePage:
    return await tmdb.get_top_rated_movies(page)


@router.get("/{movie_id}", response_model=MovieDetails)
async def movie_details(
    movie_id: int,
    user: Annotated[User, Depends(get_current_user)],
    tmdb: Annotated[TMDBService, Depends(get_tmdb_service)],
) -> MovieDetails:
    movie = await tmdb.get_movie_details(movie_id)
    if movie is None:
        raise HTTPException(status_code=404, detail="Movie not found")
    return movie


@router.get("/{movie_id}/similar", response_model=list[Movie])
async def similar_movies(
    movie_id: int,
    user: Annotated[User, Depends(get_current_user)],
    tmdb: Annotated[TMDBService, Depends(get_tmdb_service)],
) -> list[Movie]:
    """Movies similar to the given one."""
    return await tmdb.get_similar_movies(movie_id)
