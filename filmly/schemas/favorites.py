from pydantic import BaseModel, Field


class FavoriteStatus(BaseModel):
    """Membership of one movie after a favorites operation"""
    movie_id: int = Field(..., description="TMDB movie ID")
    is_favorite: bool
    count: int = Field(..., description="Number of favorites after the operation")


class FavoritesStats(BaseModel):
    count: int
