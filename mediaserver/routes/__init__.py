"""API routes package."""

from mediaserver.routes.movie_routes import router as movie_router
from mediaserver.routes.print_routes import router as print_router
from mediaserver.routes.print_routes import download_router as print_download_router

__all__ = ["movie_router", "print_router", "print_download_router"]
