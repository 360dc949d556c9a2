"""
Movie Service - aggregation of discover/search pages into one result set

Owns the result set, the pagination cursor and the genre catalog. All
state changes happen on the event loop; only the HTTP calls run in
worker threads (inside TMDBService).
"""
import asyncio
import logging
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from filmly.config import settings
from filmly.schemas.movie import Genre, Movie, MovieResponse
from filmly.schemas.search import FilterSpec, MergeOrder, PaginationState, ResultSet
from filmly.services.random_pick_service import RandomPickService
from filmly.services.tmdb_service import TMDBError, TMDBService

logger = logging.getLogger(__name__)

# (page, response, error) - exactly one of response/error is set
PageOutcome = Tuple[int, Optional[MovieResponse], Optional[TMDBError]]
Listener = Callable[[ResultSet], None]


class GenreCatalog:
    """Genre list loaded once at startup and kept for the process lifetime"""

    def __init__(self, genres: Optional[Sequence[Genre]] = None):
        self._genres: List[Genre] = list(genres or [])
        self._by_id: Dict[int, Genre] = {g.id: g for g in self._genres}

    @property
    def genres(self) -> List[Genre]:
        return list(self._genres)

    def replace(self, genres: Sequence[Genre]) -> None:
        self._genres = list(genres)
        self._by_id = {g.id: g for g in self._genres}

    def name_for(self, genre_id: int) -> Optional[str]:
        genre = self._by_id.get(genre_id)
        return genre.name if genre else None

    def names_for(self, genre_ids: Sequence[int]) -> List[str]:
        """Map ids to names, skipping ids the catalog does not know"""
        return [self._by_id[g].name for g in genre_ids if g in self._by_id]

    def id_for(self, name: str) -> Optional[int]:
        for genre in self._genres:
            if genre.name.lower() == name.lower():
                return genre.id
        return None

    def __len__(self) -> int:
        return len(self._genres)


class MovieService:
    """
    Aggregation engine behind the browse screen.

    Usage:
        service = MovieService(TMDBService())
        await service.load_genres()
        await service.fetch_movies(FilterSpec(min_year=2020))
        await service.load_more_movies()
        service.snapshot().movies
    """

    def __init__(
        self,
        tmdb: TMDBService,
        random_pick: Optional[RandomPickService] = None,
        genre_catalog: Optional[GenreCatalog] = None,
        initial_page_count: Optional[int] = None,
        merge_order: Optional[MergeOrder] = None,
    ):
        self.tmdb = tmdb
        self.random_pick = random_pick or RandomPickService(tmdb)
        self.genre_catalog = genre_catalog or GenreCatalog()
        self.initial_page_count = initial_page_count or settings.INITIAL_PAGE_COUNT
        self.merge_order = MergeOrder(merge_order or settings.RESULT_MERGE_ORDER)

        self.state = ResultSet()
        self.active_filters = FilterSpec()
        self._listeners: List[Listener] = []
        # Bumped on every reset; a response from an older session is dropped
        self._generation = 0

    # ============================================
    # Observation
    # ============================================

    def snapshot(self) -> ResultSet:
        """Copy of the current state, safe to hand to consumers"""
        return self.state.model_copy(deep=True)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Register a callback invoked with a fresh snapshot after every change.

        Returns:
            Function that removes the listener
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        if not self._listeners:
            return
        snapshot = self.snapshot()
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception:
                logger.exception("Result set listener failed")

    # ============================================
    # Internal helpers
    # ============================================

    def _reset(self, filters: FilterSpec, query: Optional[str]) -> int:
        self._generation += 1
        self.active_filters = filters
        self.state.active_query = query
        self.state.pagination = PaginationState()
        self.state.movies = []
        self.state.is_loading_more = False
        return self._generation

    def _is_current(self, generation: int) -> bool:
        return generation == self._generation

    def _record_total(self, total_pages: int) -> None:
        pagination = self.state.pagination
        pagination.total_pages = max(total_pages, pagination.current_page, 1)
        pagination.total_known = True

    async def _fetch_page(self, page: int, filters: FilterSpec) -> PageOutcome:
        try:
            response = await self.tmdb.discover_movies(filters, page=page)
            return page, response, None
        except TMDBError as e:
            return page, None, e

    async def _fetch_initial_pages(self, filters: FilterSpec) -> List[PageOutcome]:
        pages = range(1, self.initial_page_count + 1)
        if self.merge_order == MergeOrder.PAGE:
            return list(await asyncio.gather(*(self._fetch_page(p, filters) for p in pages)))

        outcomes: List[PageOutcome] = []
        for next_done in asyncio.as_completed([self._fetch_page(p, filters) for p in pages]):
            outcomes.append(await next_done)
        return outcomes

    # ============================================
    # Public operations
    # ============================================

    async def load_genres(self) -> List[Genre]:
        """Fetch the genre list into the catalog. Failures leave it unchanged."""
        try:
            response = await self.tmdb.get_genres()
        except TMDBError as e:
            logger.error(f"Failed to load genres: {str(e)}")
            return self.genre_catalog.genres

        self.genre_catalog.replace(response.genres)
        logger.info(f"Loaded {len(response.genres)} genres")
        return self.genre_catalog.genres

    async def fetch_movies(self, filters: Optional[FilterSpec] = None) -> ResultSet:
        """
        Start a new browse session and load the first pages in parallel.

        Pages that fail are reported in error_message; movies from the
        pages that succeeded are still shown. current_page ends at the
        last initial page whatever happened. If another session starts
        before the pages arrive, they are discarded.
        """
        filters = filters or FilterSpec()
        generation = self._reset(filters, query=None)
        self.state.is_loading = True
        self.state.error_message = None
        self._notify()

        logger.info(f"Fetching {self.initial_page_count} pages ({filters.description})")
        try:
            outcomes = await self._fetch_initial_pages(filters)
        finally:
            if self._is_current(generation):
                self.state.is_loading = False

        if not self._is_current(generation):
            logger.debug(f"Discarding initial pages of a superseded session ({filters.description})")
            return self.snapshot()

        movies: List[Movie] = []
        page_errors: List[str] = []
        first_page_total: Optional[int] = None
        other_totals: List[int] = []

        for page, response, error in outcomes:
            if error is not None:
                page_errors.append(f"Page {page}: {str(error)}")
                continue
            movies.extend(response.results)
            if page == 1:
                first_page_total = response.total_pages
            else:
                other_totals.append(response.total_pages)

        self.state.movies = movies
        if first_page_total is not None:
            self._record_total(first_page_total)
        elif other_totals:
            self._record_total(max(other_totals))
        self.state.pagination.current_page = self.initial_page_count

        if page_errors:
            self.state.error_message = f"Some pages failed to load: {'; '.join(page_errors)}"
            logger.warning(self.state.error_message)

        self._notify()
        return self.snapshot()

    async def load_more_movies(self) -> ResultSet:
        """
        Append the next page of the active query.

        No-op while a load is in flight or when there is nothing more.
        A page arriving after a new search or discover started is dropped.
        """
        if self.state.is_loading or self.state.is_loading_more or not self.state.pagination.has_more:
            return self.snapshot()

        generation = self._generation
        self.state.is_loading_more = True
        self._notify()
        next_page = self.state.pagination.current_page + 1
        query = self.state.active_query

        try:
            if query:
                response = await self.tmdb.search_movies(query, page=next_page)
            else:
                response = await self.tmdb.discover_movies(self.active_filters, page=next_page)
        except TMDBError as e:
            if self._is_current(generation):
                self.state.error_message = f"Failed to load more movies: {str(e)}"
            logger.warning(f"Failed to load more movies: {str(e)}")
        else:
            if self._is_current(generation):
                self.state.movies = self.state.movies + response.results
                self.state.pagination.current_page = next_page
                self._record_total(response.total_pages)
                logger.debug(f"Loaded page {next_page}, {len(self.state.movies)} movies total")
            else:
                logger.debug(f"Discarding page {next_page} of a superseded session")
        finally:
            if self._is_current(generation):
                self.state.is_loading_more = False

        self._notify()
        return self.snapshot()

    async def search_movies(self, query: str) -> ResultSet:
        """Replace the result set with page 1 of a title/overview search."""
        query = (query or "").strip()
        if not query:
            return self.snapshot()

        generation = self._reset(self.active_filters, query=query)
        self.state.is_loading = True
        self.state.error_message = None
        self._notify()

        try:
            response = await self.tmdb.search_movies(query, page=1)
        except TMDBError as e:
            if self._is_current(generation):
                self.state.error_message = str(e)
            logger.warning(f"Search for {query!r} failed: {str(e)}")
        else:
            if self._is_current(generation):
                self.state.movies = list(response.results)
                self._record_total(response.total_pages)
            logger.info(f"Search for {query!r} returned {len(response.results)} movies")
        finally:
            if self._is_current(generation):
                self.state.is_loading = False

        self._notify()
        return self.snapshot()

    async def fetch_random_movie(self) -> Movie:
        """
        Pick a random movie through the fallback chain.

        Raises:
            MovieNotFoundError: If no strategy produced a movie
        """
        return await self.random_pick.pick(self.genre_catalog.genres)
