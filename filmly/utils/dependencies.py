from fastapi import Request

from filmly.services.background_jobs import BackgroundJobService
from filmly.services.favorites_service import FavoritesService
from filmly.services.movie_detail_service import MovieDetailService
from filmly.services.movie_service import MovieService
from filmly.services.network_monitor import NetworkMonitor


# Services are created once in the application lifespan and kept on app.state

def get_movie_service(request: Request) -> MovieService:
    return request.app.state.movie_service


def get_detail_service(request: Request) -> MovieDetailService:
    return request.app.state.detail_service


def get_favorites_service(request: Request) -> FavoritesService:
    return request.app.state.favorites_service


def get_network_monitor(request: Request) -> NetworkMonitor:
    return request.app.state.network_monitor


def get_background_jobs(request: Request) -> BackgroundJobService:
    return request.app.state.background_jobs
