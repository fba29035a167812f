"""Service layer for business logic."""

from mediaserver.services.collection_service import CollectionService
from mediaserver.services.movie_service import MovieAttributes, MovieService
from mediaserver.services.print_service import PrintService

__all__ = [
    "CollectionService",
    "MovieAttributes",
    "MovieService",
    "PrintService",
]
