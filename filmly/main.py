from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Callable, Optional
import os
import logging

from filmly.config import settings
from filmly.database import Base, engine as default_engine
from filmly.routes import connectivity, favorites, movies
from filmly.services.background_jobs import BackgroundJobService
from filmly.services.favorites_service import BlobStore, FavoritesService, SqlBlobStore
from filmly.services.movie_detail_service import MovieDetailService
from filmly.services.movie_service import MovieService
from filmly.services.network_monitor import NetworkMonitor
from filmly.services.tmdb_service import TMDBService
import filmly.models  # noqa: F401  (registers tables with Base)

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)

API_VERSION = "1.0.0"


def create_app(
    tmdb_service: Optional[TMDBService] = None,
    blob_store: Optional[BlobStore] = None,
    db_engine=None,
    probe: Optional[Callable[[], bool]] = None,
) -> FastAPI:
    """
    Build the application.

    Arguments replace the production collaborators (tests pass a TMDB
    service with a fake transport and an in-memory database).
    """
    db_engine = db_engine or default_engine

    # ============================================
    # Application Lifespan Management
    # ============================================

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Startup:
        - Create tables and load favorites
        - Load the genre catalog
        - Start connectivity monitoring

        Shutdown:
        - Stop background jobs
        """
        logger.info("=" * 60)
        logger.info("Filmly API Starting...")
        logger.info(f"   Environment: {os.getenv('ENVIRONMENT', 'development')}")
        logger.info(f"   Initial pages: {settings.INITIAL_PAGE_COUNT}, merge order: {settings.RESULT_MERGE_ORDER}")
        logger.info("=" * 60)

        Base.metadata.create_all(bind=db_engine)

        tmdb = tmdb_service or TMDBService()
        app.state.movie_service = MovieService(tmdb)
        app.state.detail_service = MovieDetailService(tmdb)
        app.state.favorites_service = FavoritesService(blob_store or SqlBlobStore())
        app.state.network_monitor = NetworkMonitor()
        app.state.background_jobs = BackgroundJobService(app.state.network_monitor, probe=probe)

        await app.state.movie_service.load_genres()
        app.state.background_jobs.start()

        yield

        logger.info("Filmly API Shutting Down...")
        app.state.background_jobs.shutdown()

    app = FastAPI(
        title="Filmly API",
        description="Movie discovery backed by TMDB: browse, search, details, random pick and favorites",
        version=API_VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan
    )

    # CORS - Whitelist allowed origins
    allowed_origins = [
        "http://localhost:3000",
        "http://localhost:5173",
    ]
    if frontend_url := os.getenv("FRONTEND_URL"):
        allowed_origins.append(frontend_url)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Catch-all handler: log and answer with a generic 500"""
        logger.error(f"Unhandled exception: {str(exc)}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error"}
        )

    # ============================================
    # Routes
    # ============================================

    @app.get("/", tags=["Health"])
    async def root():
        """Basic health check"""
        return {
            "message": "Filmly API",
            "version": API_VERSION,
            "status": "healthy",
            "docs": "/docs"
        }

    @app.get("/health", tags=["Health"])
    async def health_check(request: Request):
        """Detailed health check including connectivity"""
        return {
            "status": "healthy",
            "api_version": API_VERSION,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "genres_loaded": len(request.app.state.movie_service.genre_catalog),
            "connectivity": request.app.state.network_monitor.status(),
        }

    app.include_router(movies.router)
    app.include_router(favorites.router)
    app.include_router(connectivity.router)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        app,
        host="0.0.0.0",
        port=8000,
        log_level="info"
    )
