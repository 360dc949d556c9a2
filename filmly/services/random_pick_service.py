"""
Random Pick Service - "Surprise me" movie selection
Tries an ordered chain of discover filters until one yields a non-empty page
"""
import logging
import random
from datetime import datetime
from enum import Enum
from typing import Awaitable, Callable, Iterable, List, Optional, Sequence, TypeVar

from filmly.schemas.movie import Genre, Movie
from filmly.schemas.search import FilterSpec
from filmly.services.tmdb_service import TMDBError, TMDBService

logger = logging.getLogger(__name__)

C = TypeVar("C")
R = TypeVar("R")

RECENT_YEARS = 5


class MovieNotFoundError(Exception):
    """Every strategy came back empty or failed"""


class PickStrategy(str, Enum):
    POPULAR = "popular"            # rating >= 5.0
    RECENT = "recent"              # rating >= 5.0, released in the last 5 years
    RANDOM_GENRE = "random_genre"  # rating >= 4.0, one random genre
    UNFILTERED = "unfiltered"      # plain popularity order


FALLBACK_CHAIN: Sequence[PickStrategy] = (
    PickStrategy.POPULAR,
    PickStrategy.RECENT,
    PickStrategy.RANDOM_GENRE,
    PickStrategy.UNFILTERED,
)


def filters_for(
    strategy: PickStrategy,
    genres: Sequence[Genre],
    rng: random.Random,
    current_year: int,
) -> FilterSpec:
    """Build the discover filter for one strategy. Randomness only enters via rng."""
    if strategy == PickStrategy.POPULAR:
        return FilterSpec(min_rating=5.0)
    if strategy == PickStrategy.RECENT:
        return FilterSpec(
            min_rating=5.0,
            min_year=current_year - RECENT_YEARS,
            max_year=current_year,
        )
    if strategy == PickStrategy.RANDOM_GENRE:
        if genres:
            genre = rng.choice(list(genres))
            return FilterSpec(min_rating=4.0, selected_genres=[genre.id])
        return FilterSpec(min_rating=4.0)
    return FilterSpec()


async def first_success(
    candidates: Iterable[C],
    attempt: Callable[[C], Awaitable[Optional[R]]],
) -> Optional[R]:
    """Await attempt(candidate) in order and return the first non-None result."""
    for candidate in candidates:
        result = await attempt(candidate)
        if result is not None:
            return result
    return None


class RandomPickService:
    """
    Resolve a random movie through the fallback chain.

    Strategy order is fixed; only the genre choice and the final movie
    choice are random.
    """

    def __init__(
        self,
        tmdb: TMDBService,
        rng: Optional[random.Random] = None,
        clock: Callable[[], datetime] = datetime.now,
        strategies: Sequence[PickStrategy] = FALLBACK_CHAIN,
    ):
        self.tmdb = tmdb
        self.rng = rng or random.Random()
        self.clock = clock
        self.strategies = strategies

    async def pick(self, genres: Sequence[Genre]) -> Movie:
        """
        Return a random movie from the first strategy with results.

        Raises:
            MovieNotFoundError: If all strategies are exhausted
        """
        current_year = self.clock().year

        async def attempt(strategy: PickStrategy) -> Optional[Movie]:
            filters = filters_for(strategy, genres, self.rng, current_year)
            try:
                response = await self.tmdb.discover_movies(filters, page=1)
            except TMDBError as e:
                logger.warning(f"Random pick '{strategy.value}' failed: {str(e)}")
                return None

            results: List[Movie] = response.results
            if not results:
                logger.info(f"Random pick '{strategy.value}' ({filters.description}) returned no movies")
                return None

            movie = self.rng.choice(results)
            logger.info(f"Random pick '{strategy.value}' selected {movie.title!r} ({movie.id})")
            return movie

        movie = await first_success(self.strategies, attempt)
        if movie is None:
            logger.warning("All random movie attempts failed")
            raise MovieNotFoundError("No movies found after all attempts")
        return movie
