from fastapi import APIRouter, Depends, HTTPException, Query, status
from typing import List, Optional
import logging

from filmly.schemas.detail import DetailBundle
from filmly.schemas.movie import AVAILABLE_COUNTRIES, Country, GenreResponse, Movie
from filmly.schemas.search import FilterSpec, ResultSet
from filmly.services.movie_detail_service import MovieDetailService
from filmly.services.movie_service import MovieService
from filmly.services.random_pick_service import MovieNotFoundError
from filmly.utils.dependencies import get_detail_service, get_movie_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/movies", tags=["Movies"])


# ============================================
# Browse state
# ============================================

@router.get("", response_model=ResultSet)
def get_results(service: MovieService = Depends(get_movie_service)):
    """
    Current result set (movies, pagination cursor, last error)

    Poll this endpoint to observe loads started elsewhere.
    """
    return service.snapshot()


@router.post("/discover", response_model=ResultSet)
async def discover_movies(
    filters: Optional[FilterSpec] = None,
    service: MovieService = Depends(get_movie_service)
):
    """
    Start a new browse session with the given filters

    Loads the first pages in parallel. Pages that fail are listed in
    **error_message** while movies from the other pages are returned.

    **Filters** (all optional):
    - min_year / max_year: release year range
    - min_rating / max_rating: vote average range
    - selected_genres: genre IDs (e.g. [28, 12])
    - selected_countries: origin countries (see /api/movies/countries)
    """
    return await service.fetch_movies(filters or FilterSpec())


@router.post("/load-more", response_model=ResultSet)
async def load_more_movies(service: MovieService = Depends(get_movie_service)):
    """Append the next page of the active filters or search"""
    return await service.load_more_movies()


@router.get("/search", response_model=ResultSet)
async def search_movies(
    query: str = Query("", max_length=200, description="Search query; empty leaves results untouched"),
    service: MovieService = Depends(get_movie_service)
):
    """
    Simple text search for movies

    Used for: Basic search bar functionality
    """
    return await service.search_movies(query)


@router.get("/random", response_model=Movie)
async def get_random_movie(service: MovieService = Depends(get_movie_service)):
    """Pick a random movie ("Surprise me")"""
    try:
        return await service.fetch_random_movie()
    except MovieNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


# ============================================
# Filter options
# ============================================

@router.get("/genres", response_model=GenreResponse)
def get_genres(service: MovieService = Depends(get_movie_service)):
    """
    Genres loaded at startup

    Used for the genre multi-select of the filter screen
    """
    return GenreResponse(genres=service.genre_catalog.genres)


@router.get("/countries", response_model=List[Country])
def get_countries():
    """Origin countries offered by the filter screen (fixed list)"""
    return AVAILABLE_COUNTRIES


# ============================================
# Movie Details (dynamic route)
# ============================================

@router.get("/{movie_id}/details", response_model=DetailBundle)
async def get_movie_details(
    movie_id: int,
    service: MovieDetailService = Depends(get_detail_service)
):
    """Credits, videos, recommendations and similar movies for one movie"""
    return await service.load(movie_id)
