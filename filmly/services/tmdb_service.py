import asyncio
import logging
from typing import Dict, Optional, Type, TypeVar
from urllib.parse import urlparse

import requests
from pydantic import BaseModel, ValidationError

from filmly.config import settings
from filmly.schemas.detail import Credits, VideoResponse
from filmly.schemas.movie import GenreResponse, MovieResponse, RecommendationResponse
from filmly.schemas.search import FilterSpec

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)


# ============================================
# Errors
# ============================================

class TMDBError(Exception):
    """Base class for every failure surfaced by the page fetcher"""


class InvalidURLError(TMDBError):
    """The request URL could not be built (configuration or programming error)"""


class TransportError(TMDBError):
    """Network-layer failure or non-2xx response"""


class EmptyBodyError(TMDBError):
    """The server answered without a body"""


class DecodeError(TMDBError):
    """The body was not JSON or did not match the expected schema"""


# TMDB Service: one request for one page of one endpoint kind
class TMDBService:
    """
    Page fetcher for The Movie Database API.

    Each public coroutine issues exactly one GET in a worker thread and
    returns the decoded payload or raises a TMDBError. It never touches
    shared application state.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        language: Optional[str] = None,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ):
        self.api_key = api_key if api_key is not None else settings.TMDB_API_KEY
        self.base_url = base_url if base_url is not None else settings.TMDB_BASE_URL
        self.language = language or settings.TMDB_LANGUAGE
        self.timeout = timeout if timeout is not None else settings.TMDB_REQUEST_TIMEOUT
        self.session = session or requests.Session()

    def _redact(self, message: str) -> str:
        if self.api_key:
            return message.replace(self.api_key, "***")
        return message

    def _build_url(self, endpoint: str) -> str:
        if not self.api_key:
            raise InvalidURLError("TMDB API key not configured")
        parsed = urlparse(self.base_url or "")
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise InvalidURLError(f"Invalid TMDB base URL: {self.base_url!r}")
        return f"{self.base_url.rstrip('/')}{endpoint}"

    # Internal method to make GET requests to TMDB API (runs in a worker thread)
    def _make_request(self, endpoint: str, params: Dict = None) -> bytes:
        """
        Make HTTP request to TMDB API.

        Args:
            endpoint: API endpoint (e.g., "/discover/movie")
            params: Query parameters

        Returns:
            Raw response body

        Raises:
            InvalidURLError: If the URL cannot be built
            TransportError: If the request fails or returns an error status
            EmptyBodyError: If the response has no body
        """
        url = self._build_url(endpoint)
        params = dict(params or {})
        params['api_key'] = self.api_key

        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            message = self._redact(str(e))
            logger.error(f"TMDB API error for {endpoint}: {message}")
            raise TransportError(message) from e

        if not response.content:
            raise EmptyBodyError(f"No data received from {endpoint}")

        logger.debug(f"TMDB API request successful: {endpoint}")
        return response.content

    async def _fetch(self, endpoint: str, model: Type[T], params: Dict = None) -> T:
        body = await asyncio.to_thread(self._make_request, endpoint, params)
        try:
            return model.model_validate_json(body)
        except ValidationError as e:
            logger.error(f"TMDB decode error for {endpoint}: {e.error_count()} error(s)")
            raise DecodeError(f"Could not decode {model.__name__}: {e.errors()[0]['msg']}") from e

    @staticmethod
    def _check_page(page: int) -> None:
        if page < 1:
            raise InvalidURLError(f"Page must be >= 1, got {page}")

    @staticmethod
    def _check_movie_id(movie_id: int) -> None:
        if movie_id < 1:
            raise InvalidURLError(f"Movie id must be positive, got {movie_id}")

    # Public methods, one per endpoint kind

    async def discover_movies(self, filters: FilterSpec, page: int = 1) -> MovieResponse:
        """Fetch one page of /discover/movie for the given filters."""
        self._check_page(page)
        return await self._fetch(
            "/discover/movie",
            MovieResponse,
            filters.to_tmdb_params(page=page, language=self.language),
        )

    async def search_movies(self, query: str, page: int = 1) -> MovieResponse:
        """Full-text search on title/overview."""
        self._check_page(page)
        params = {
            'language': self.language,
            'query': query,
            'page': str(page),
            'include_adult': 'false',
        }
        return await self._fetch("/search/movie", MovieResponse, params)

    async def get_genres(self) -> GenreResponse:
        return await self._fetch("/genre/movie/list", GenreResponse, {'language': self.language})

    async def get_credits(self, movie_id: int) -> Credits:
        self._check_movie_id(movie_id)
        return await self._fetch(f"/movie/{movie_id}/credits", Credits, {'language': self.language})

    async def get_videos(self, movie_id: int) -> VideoResponse:
        self._check_movie_id(movie_id)
        return await self._fetch(f"/movie/{movie_id}/videos", VideoResponse, {'language': self.language})

    async def get_recommendations(self, movie_id: int, page: int = 1) -> RecommendationResponse:
        self._check_movie_id(movie_id)
        self._check_page(page)
        return await self._fetch(
            f"/movie/{movie_id}/recommendations",
            RecommendationResponse,
            {'language': self.language, 'page': str(page)},
        )

    async def get_similar(self, movie_id: int, page: int = 1) -> RecommendationResponse:
        self._check_movie_id(movie_id)
        self._check_page(page)
        return await self._fetch(
            f"/movie/{movie_id}/similar",
            RecommendationResponse,
            {'language': self.language, 'page': str(page)},
        )
