from fastapi import APIRouter, Depends, status
from typing import List

from filmly.schemas.favorites import FavoriteStatus, FavoritesStats
from filmly.schemas.movie import Movie
from filmly.services.favorites_service import FavoritesService
from filmly.utils.dependencies import get_favorites_service

router = APIRouter(prefix="/api/favorites", tags=["Favorites"])


@router.get("", response_model=List[Movie])
def get_favorites(favorites: FavoritesService = Depends(get_favorites_service)):
    """Favorite movies in the order they were added"""
    return favorites.favorites


@router.post("", response_model=FavoriteStatus, status_code=status.HTTP_201_CREATED)
def add_favorite(movie: Movie, favorites: FavoritesService = Depends(get_favorites_service)):
    """
    Add a movie to favorites

    Adding a movie that is already a favorite changes nothing.
    """
    favorites.add(movie)
    return FavoriteStatus(movie_id=movie.id, is_favorite=True, count=favorites.count)


@router.post("/toggle", response_model=FavoriteStatus)
def toggle_favorite(movie: Movie, favorites: FavoritesService = Depends(get_favorites_service)):
    is_favorite = favorites.toggle(movie)
    return FavoriteStatus(movie_id=movie.id, is_favorite=is_favorite, count=favorites.count)


@router.get("/{movie_id}", response_model=FavoriteStatus)
def get_favorite_status(movie_id: int, favorites: FavoritesService = Depends(get_favorites_service)):
    return FavoriteStatus(
        movie_id=movie_id,
        is_favorite=favorites.is_favorite(movie_id),
        count=favorites.count
    )


@router.delete("/{movie_id}", response_model=FavoriteStatus)
def remove_favorite(movie_id: int, favorites: FavoritesService = Depends(get_favorites_service)):
    """Remove a movie from favorites (no-op if it is not one)"""
    favorites.remove(movie_id)
    return FavoriteStatus(movie_id=movie_id, is_favorite=False, count=favorites.count)


@router.delete("", response_model=FavoritesStats)
def clear_favorites(favorites: FavoritesService = Depends(get_favorites_service)):
    favorites.clear_all()
    return FavoritesStats(count=favorites.count)
