"""
Filter, pagination and result-set schemas
The filter schema doubles as the query builder for the discover endpoint
"""
from pydantic import BaseModel, Field, field_validator, computed_field
from typing import Optional, List
from enum import Enum

from filmly.schemas.movie import Country, Movie


DEFAULT_SORT = "popularity.desc"


class MergeOrder(str, Enum):
    """How pages fetched in parallel are concatenated"""
    PAGE = "page"              # ascending page number
    COMPLETION = "completion"  # order in which requests finished


# ============================================
# Filter Schema
# ============================================

class FilterSpec(BaseModel):
    """
    The user's filter selection, independent of any request.

    Every field is optional; an empty FilterSpec means "no filters".
    Bounds are not cross-checked: min_year > max_year is passed to TMDB
    as-is and simply yields no results.
    """
    min_year: Optional[int] = Field(None, description="Earliest release year (inclusive)")
    max_year: Optional[int] = Field(None, description="Latest release year (inclusive)")
    min_rating: Optional[float] = Field(None, description="Minimum vote average")
    max_rating: Optional[float] = Field(None, description="Maximum vote average")
    selected_genres: List[int] = Field(
        default_factory=list,
        description="Genre IDs, kept in selection order",
        json_schema_extra={"example": [28, 12]}
    )
    selected_countries: List[Country] = Field(default_factory=list)

    @field_validator("selected_genres")
    @classmethod
    def dedupe_genres(cls, v):
        return list(dict.fromkeys(v))

    @field_validator("selected_countries")
    @classmethod
    def dedupe_countries(cls, v):
        seen = {}
        for country in v:
            seen.setdefault(country.id, country)
        return list(seen.values())

    @property
    def is_empty(self) -> bool:
        return self.active_filter_count == 0

    @property
    def active_filter_count(self) -> int:
        """Number of filter groups in use (shown as a badge by the UI)"""
        return sum([
            self.min_year is not None,
            self.max_year is not None,
            self.min_rating is not None,
            self.max_rating is not None,
            bool(self.selected_genres),
            bool(self.selected_countries),
        ])

    @property
    def description(self) -> str:
        """Short human-readable summary, used in log lines"""
        parts = []
        if self.min_year is not None:
            parts.append(f"minYear={self.min_year}")
        if self.max_year is not None:
            parts.append(f"maxYear={self.max_year}")
        if self.min_rating is not None:
            parts.append(f"minRating={self.min_rating}")
        if self.max_rating is not None:
            parts.append(f"maxRating={self.max_rating}")
        if self.selected_genres:
            parts.append(f"genres={self.selected_genres}")
        if self.selected_countries:
            parts.append(f"countries={[c.name for c in self.selected_countries]}")
        return ", ".join(parts) if parts else "no filters"

    def to_tmdb_params(self, page: int = 1, language: str = "en-US") -> dict:
        """
        Convert the filter to /discover/movie query parameters.

        Baseline parameters are always present; filters are added only
        when set. The api_key is added by the fetcher, not here.
        """
        params = {
            'language': language,
            'sort_by': DEFAULT_SORT,
            'include_adult': 'false',
            'include_video': 'false',
            'page': str(page),
        }

        if self.min_year is not None:
            params['primary_release_date.gte'] = f"{self.min_year}-01-01"

        if self.max_year is not None:
            params['primary_release_date.lte'] = f"{self.max_year}-12-31"

        if self.min_rating is not None:
            params['vote_average.gte'] = str(float(self.min_rating))

        if self.max_rating is not None:
            params['vote_average.lte'] = str(float(self.max_rating))

        if self.selected_genres:
            params['with_genres'] = ','.join(str(g) for g in self.selected_genres)

        if self.selected_countries:
            params['with_origin_country'] = ','.join(c.id for c in self.selected_countries)

        return params


# ============================================
# Pagination & Result Set
# ============================================

class PaginationState(BaseModel):
    """
    Cursor over the active query.

    total_known is False between a reset and the first page whose
    total_pages was reported; until then there is always more to load.
    """
    current_page: int = Field(default=1, ge=1)
    total_pages: int = Field(default=1, ge=1)
    total_known: bool = False

    @computed_field
    @property
    def has_more(self) -> bool:
        return not self.total_known or self.current_page < self.total_pages


class ResultSet(BaseModel):
    """Snapshot of the aggregation state handed to consumers"""
    movies: List[Movie] = Field(default_factory=list)
    pagination: PaginationState = Field(default_factory=PaginationState)
    error_message: Optional[str] = None
    is_loading: bool = False
    is_loading_more: bool = False
    active_query: Optional[str] = None
