"""
Movie Detail Service - credits, videos, recommendations and similar movies
Loaded in parallel into one DetailBundle for the detail page
"""
import asyncio
import logging
from typing import Any, Awaitable, Callable

from filmly.schemas.detail import DetailBundle
from filmly.services.tmdb_service import TMDBError, TMDBService

logger = logging.getLogger(__name__)


class MovieDetailService:
    """
    Holds the bundle for the movie currently on screen.

    Every load is tagged with an increasing sequence number. A response
    is written only if its load is still the latest one, so a slow
    answer for a previous movie can never overwrite the current bundle.
    In-flight requests are not cancelled.
    """

    def __init__(self, tmdb: TMDBService):
        self.tmdb = tmdb
        self.bundle = DetailBundle()
        self._sequence = 0

    @property
    def sequence(self) -> int:
        return self._sequence

    def snapshot(self) -> DetailBundle:
        return self.bundle.model_copy(deep=True)

    async def load(self, movie_id: int) -> DetailBundle:
        """
        Load all four parts for movie_id.

        A failing part is logged and recorded in bundle.errors; the other
        parts still populate. is_loading clears once all four finished.
        """
        self._sequence += 1
        sequence = self._sequence
        self.bundle = DetailBundle(movie_id=movie_id, is_loading=True)
        logger.debug(f"Loading detail bundle #{sequence} for movie {movie_id}")

        def is_current() -> bool:
            return sequence == self._sequence

        async def load_part(name: str, request: Awaitable[Any], apply: Callable[[Any], None]) -> None:
            try:
                result = await request
            except TMDBError as e:
                logger.error(f"Error loading {name} for movie {movie_id}: {str(e)}")
                if is_current():
                    self.bundle.errors.append(f"{name}: {str(e)}")
                return

            if is_current():
                apply(result)
            else:
                logger.debug(f"Discarding stale {name} for movie {movie_id} (load #{sequence})")

        def set_credits(credits):
            self.bundle.credits = credits

        def set_videos(response):
            self.bundle.videos = response.results

        def set_recommendations(response):
            self.bundle.recommendations = response.results

        def set_similar(response):
            self.bundle.similar = response.results

        await asyncio.gather(
            load_part("credits", self.tmdb.get_credits(movie_id), set_credits),
            load_part("videos", self.tmdb.get_videos(movie_id), set_videos),
            load_part("recommendations", self.tmdb.get_recommendations(movie_id), set_recommendations),
            load_part("similar", self.tmdb.get_similar(movie_id), set_similar),
        )

        if is_current():
            self.bundle.is_loading = False
            logger.info(
                f"Detail bundle for movie {movie_id}: "
                f"{len(self.bundle.credits.cast) if self.bundle.credits else 0} cast, "
                f"{len(self.bundle.videos)} videos, "
                f"{len(self.bundle.recommendations)} recommendations, "
                f"{len(self.bundle.similar)} similar"
            )
        return self.snapshot()
