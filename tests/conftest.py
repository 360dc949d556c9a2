import json
from typing import Callable, Dict, List, Tuple, Union
from urllib.parse import urlparse

import pytest
import requests
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from filmly.config import settings
from filmly.database import Base
import filmly.models  # noqa: F401
from filmly.services.favorites_service import SqlBlobStore
from filmly.services.tmdb_service import TMDBService

SQLALCHEMY_DATABASE_URL = "sqlite://"
TMDB_TEST_URL = "https://tmdb.test"
TMDB_TEST_KEY = "test-key"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


# ============================================
# Payload helpers
# ============================================

def movie_payload(movie_id: int, **overrides) -> Dict:
    payload = {
        "id": movie_id,
        "title": f"Movie {movie_id}",
        "overview": f"Overview {movie_id}",
        "poster_path": f"/poster{movie_id}.jpg",
        "backdrop_path": None,
        "release_date": "2021-06-15",
        "vote_average": 7.1,
        "vote_count": 120,
        "genre_ids": [28],
        "original_language": "en",
        "popularity": 55.5,
        "adult": False,
    }
    payload.update(overrides)
    return payload


def page_payload(page: int, movie_ids: List[int], total_pages: int = 10) -> Dict:
    return {
        "page": page,
        "results": [movie_payload(i) for i in movie_ids],
        "total_pages": total_pages,
        "total_results": total_pages * 20,
    }


# ============================================
# Fake transport
# ============================================

class FakeResponse:
    def __init__(self, payload=None, status_code: int = 200, content: bytes = None):
        if content is None:
            content = json.dumps(payload).encode() if payload is not None else b""
        self.content = content
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Server Error", response=self)


Handler = Union[Dict, FakeResponse, Exception, Callable[[Dict], object]]


class FakeSession:
    """
    Stand-in for requests.Session.

    Routes GETs by URL path to a handler: a dict (JSON payload), a
    FakeResponse, an exception to raise, or a callable taking the query
    params and returning any of those. Unknown paths answer 404.
    """

    def __init__(self):
        self.routes: Dict[str, Handler] = {}
        self.calls: List[Tuple[str, Dict]] = []

    def route(self, path: str, handler: Handler) -> None:
        self.routes[path] = handler

    def calls_to(self, path: str) -> List[Dict]:
        return [params for called, params in self.calls if called == path]

    def get(self, url, params=None, timeout=None):
        path = urlparse(url).path
        params = dict(params or {})
        self.calls.append((path, params))

        handler = self.routes.get(path)
        if handler is None:
            return FakeResponse({"status_message": "not found"}, status_code=404)
        if callable(handler) and not isinstance(handler, (FakeResponse, Exception)):
            handler = handler(params)
        if isinstance(handler, Exception):
            raise handler
        if isinstance(handler, FakeResponse):
            return handler
        return FakeResponse(handler)


def discover_by_page(pages: Dict[int, Handler]) -> Callable[[Dict], object]:
    """Discover handler answering per requested page number"""

    def handler(params):
        result = pages.get(int(params["page"]))
        if result is None:
            return FakeResponse({"status_message": "no such page"}, status_code=404)
        if callable(result) and not isinstance(result, (FakeResponse, Exception)):
            return result(params)
        return result

    return handler


# ============================================
# Fixtures
# ============================================

@pytest.fixture
def fake_session():
    return FakeSession()


@pytest.fixture
def tmdb(fake_session):
    return TMDBService(api_key=TMDB_TEST_KEY, base_url=TMDB_TEST_URL, session=fake_session)


@pytest.fixture
def db_session():
    """Provide a clean database session for each test."""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def blob_store(db_session):
    return SqlBlobStore(TestingSessionLocal)


@pytest.fixture
def client(tmdb, fake_session, blob_store, monkeypatch):
    """FastAPI test client wired to the fake TMDB transport and in-memory database."""
    from filmly.main import create_app

    monkeypatch.setattr(settings, "ENABLE_BACKGROUND_JOBS", False)
    fake_session.route("/genre/movie/list", {"genres": [{"id": 28, "name": "Action"}, {"id": 35, "name": "Comedy"}]})

    app = create_app(tmdb_service=tmdb, blob_store=blob_store, db_engine=engine)
    with TestClient(app) as test_client:
        yield test_client
