"""
Favorites Service - locally persisted favorite movies

The whole list is written to durable blob storage after every change.
Persistence problems are logged and never reach the caller.
"""
import logging
import threading
from typing import Callable, Dict, List, Optional, Protocol, Union

from pydantic import TypeAdapter
from sqlalchemy.orm import Session

from filmly.config import settings
from filmly.database import SessionLocal
from filmly.models.blob import KeyValueBlob
from filmly.schemas.movie import Movie

logger = logging.getLogger(__name__)

_movie_list = TypeAdapter(List[Movie])

MovieRef = Union[Movie, int]


class BlobStore(Protocol):
    """Durable get/set of opaque bytes by key"""

    def get(self, key: str) -> Optional[bytes]:
        ...

    def set(self, key: str, data: bytes) -> None:
        ...


class SqlBlobStore:
    """BlobStore backed by the key_value_blobs table"""

    def __init__(self, session_factory: Callable[[], Session] = SessionLocal):
        self.session_factory = session_factory

    def get(self, key: str) -> Optional[bytes]:
        db = self.session_factory()
        try:
            row = db.get(KeyValueBlob, key)
            return bytes(row.value) if row else None
        finally:
            db.close()

    def set(self, key: str, data: bytes) -> None:
        db = self.session_factory()
        try:
            row = db.get(KeyValueBlob, key)
            if row:
                row.value = data
            else:
                db.add(KeyValueBlob(key=key, value=data))
            db.commit()
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()


def serialize_movies(movies: List[Movie]) -> bytes:
    return _movie_list.dump_json(movies)


def deserialize_movies(data: bytes) -> List[Movie]:
    return _movie_list.validate_json(data)


def _movie_id(movie: MovieRef) -> int:
    return movie.id if isinstance(movie, Movie) else int(movie)


class FavoritesService:
    """
    Ordered set of favorite movies keyed by id.

    Usage:
        favorites = FavoritesService(SqlBlobStore())
        favorites.add(movie)
        favorites.is_favorite(movie.id)
    """

    def __init__(self, store: BlobStore, key: Optional[str] = None):
        self.store = store
        self.key = key or settings.FAVORITES_KEY
        self._favorites: Dict[int, Movie] = {}
        # Sync routes run on the threadpool; a change and its save happen under one lock
        self._lock = threading.RLock()
        self._load()

    @property
    def favorites(self) -> List[Movie]:
        """Favorites in the order they were added"""
        with self._lock:
            return list(self._favorites.values())

    @property
    def count(self) -> int:
        return len(self._favorites)

    def is_favorite(self, movie: MovieRef) -> bool:
        return _movie_id(movie) in self._favorites

    def add(self, movie: Movie) -> bool:
        """Add a movie. Returns False (and writes nothing) if it is already a favorite."""
        with self._lock:
            if movie.id in self._favorites:
                return False
            self._favorites[movie.id] = movie
            self._save()
            return True

    def remove(self, movie: MovieRef) -> bool:
        """Remove a movie by instance or id. Returns False if it was not a favorite."""
        with self._lock:
            if self._favorites.pop(_movie_id(movie), None) is None:
                return False
            self._save()
            return True

    def toggle(self, movie: Movie) -> bool:
        """Flip membership. Returns True if the movie is a favorite afterwards."""
        with self._lock:
            if self.is_favorite(movie):
                self.remove(movie)
                return False
            self.add(movie)
            return True

    def clear_all(self) -> None:
        with self._lock:
            self._favorites.clear()
            self._save()

    def _save(self) -> None:
        try:
            self.store.set(self.key, serialize_movies(self.favorites))
            logger.debug(f"Saved {len(self._favorites)} favorites")
        except Exception as e:
            logger.error(f"Error saving favorites: {str(e)}")

    def _load(self) -> None:
        try:
            data = self.store.get(self.key)
            movies = deserialize_movies(data) if data else []
        except Exception as e:
            logger.error(f"Error loading favorites: {str(e)}")
            movies = []

        self._favorites = {}
        for movie in movies:
            self._favorites.setdefault(movie.id, movie)
        logger.info(f"Loaded {len(self._favorites)} favorites")
