"""
Runtime configuration
Values come from environment variables (a local .env file is honoured)
"""
from dotenv import load_dotenv
import os

load_dotenv()


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == "true"


class Settings:
    """
    Application settings read once at import time.

    Tests override individual attributes with monkeypatch instead of
    touching the process environment.
    """

    # TMDB
    TMDB_API_KEY = os.getenv("TMDB_API_KEY")
    TMDB_BASE_URL = os.getenv("TMDB_BASE_URL", "https://api.themoviedb.org/3")
    TMDB_IMAGE_BASE_URL = os.getenv("TMDB_IMAGE_BASE_URL", "https://image.tmdb.org/t/p")
    TMDB_LANGUAGE = os.getenv("TMDB_LANGUAGE", "en-US")
    TMDB_REQUEST_TIMEOUT = float(os.getenv("TMDB_REQUEST_TIMEOUT", 10))

    # Aggregation
    INITIAL_PAGE_COUNT = int(os.getenv("INITIAL_PAGE_COUNT", 5))
    RESULT_MERGE_ORDER = os.getenv("RESULT_MERGE_ORDER", "page")

    # Persistence
    DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./filmly.db")
    DB_ECHO = _env_bool("DB_ECHO", "false")
    FAVORITES_KEY = os.getenv("FAVORITES_KEY", "favoriteMovies")

    # Background jobs / connectivity
    ENABLE_BACKGROUND_JOBS = _env_bool("ENABLE_BACKGROUND_JOBS", "true")
    TIMEZONE = os.getenv("TIMEZONE", "UTC")
    CONNECTIVITY_PROBE_HOST = os.getenv("CONNECTIVITY_PROBE_HOST", "api.themoviedb.org")
    CONNECTIVITY_PROBE_PORT = int(os.getenv("CONNECTIVITY_PROBE_PORT", 443))
    CONNECTIVITY_CHECK_INTERVAL = int(os.getenv("CONNECTIVITY_CHECK_INTERVAL", 30))
    CONNECTIVITY_INITIAL_CHECK_DELAY = float(os.getenv("CONNECTIVITY_INITIAL_CHECK_DELAY", 0.5))


settings = Settings()
