"""
Movie, genre and country schemas
Field names match the TMDB wire format (snake_case)
"""
from datetime import datetime, date
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator

from filmly.config import settings


POSTER_SIZE = "w500"
BACKDROP_SIZE = "original"


def _parse_release_date(value: Optional[str]) -> Optional[date]:
    if not value:
        return None
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        return None


def image_url(path: Optional[str], size: str) -> Optional[str]:
    """Combine a TMDB image path fragment with the image base URL and a size token."""
    if not path:
        return None
    return f"{settings.TMDB_IMAGE_BASE_URL}/{size}{path}"


# ============================================
# Movie
# ============================================

class Movie(BaseModel):
    """
    A movie as returned by discover/search/recommendation endpoints.

    Immutable once decoded. Two movies are equal when their ids are equal,
    whatever the other fields say.
    """
    model_config = ConfigDict(frozen=True)

    id: int
    title: str = ""
    overview: str = ""
    poster_path: Optional[str] = None
    backdrop_path: Optional[str] = None
    release_date: Optional[str] = None
    vote_average: float = 0.0
    vote_count: int = 0
    genre_ids: List[int] = Field(default_factory=list)
    original_language: str = ""
    popularity: float = 0.0

    @field_validator("title", "overview", "original_language", mode="before")
    @classmethod
    def null_to_empty(cls, v):
        """TMDB occasionally sends null for text fields"""
        return "" if v is None else v

    @field_validator("vote_average", "popularity", mode="before")
    @classmethod
    def null_to_zero(cls, v):
        return 0.0 if v is None else v

    def __eq__(self, other):
        if isinstance(other, Movie):
            return self.id == other.id
        return NotImplemented

    def __hash__(self):
        return hash(self.id)

    @computed_field
    @property
    def poster_url(self) -> Optional[str]:
        return image_url(self.poster_path, POSTER_SIZE)

    @computed_field
    @property
    def backdrop_url(self) -> Optional[str]:
        return image_url(self.backdrop_path, BACKDROP_SIZE)

    @property
    def year(self) -> Optional[int]:
        """Release year, or None when the date is missing or malformed"""
        parsed = _parse_release_date(self.release_date)
        return parsed.year if parsed else None

    @property
    def formatted_release_date(self) -> str:
        """Medium style date (e.g. 'Jul 16, 2010'); raw value when unparseable"""
        parsed = _parse_release_date(self.release_date)
        if parsed is None:
            return self.release_date or ""
        return f"{parsed:%b} {parsed.day}, {parsed.year}"


class MovieResponse(BaseModel):
    """One page of movies (discover, search)"""
    page: int
    results: List[Movie] = Field(default_factory=list)
    total_pages: int = 1
    total_results: int = 0


# Recommendations and similar movies share the paged movie shape
RecommendationResponse = MovieResponse


# ============================================
# Genres & Countries
# ============================================

class Genre(BaseModel):
    id: int
    name: str


class GenreResponse(BaseModel):
    genres: List[Genre] = Field(default_factory=list)


class Country(BaseModel):
    """Origin country filter option (ISO 3166-1 code + display name)"""
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=2, max_length=2)
    name: str


# Fixed list offered by the filter UI; not fetched from TMDB
AVAILABLE_COUNTRIES: List[Country] = [
    Country(id="US", name="United States"),
    Country(id="GB", name="United Kingdom"),
    Country(id="CA", name="Canada"),
    Country(id="AU", name="Australia"),
    Country(id="DE", name="Germany"),
    Country(id="FR", name="France"),
    Country(id="IT", name="Italy"),
    Country(id="ES", name="Spain"),
    Country(id="JP", name="Japan"),
    Country(id="KR", name="South Korea"),
    Country(id="IN", name="India"),
    Country(id="BR", name="Brazil"),
    Country(id="MX", name="Mexico"),
    Country(id="RU", name="Russia"),
    Country(id="CN", name="China"),
]
