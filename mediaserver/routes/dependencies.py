"""FastAPI dependencies resolving the per-app collection services."""

from fastapi import Request

from mediaserver.services.movie_service import MovieService
from mediaserver.services.print_service import PrintService


def get_movie_service(request: Request) -> MovieService:
    return request.app.state.movie_service


def get_print_service(request: Request) -> PrintService:
    return request.app.state.print_service
