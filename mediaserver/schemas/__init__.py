"""Pydantic schemas for API responses."""

from mediaserver.schemas.common import ErrorResponse, HealthResponse
from mediaserver.schemas.movies import MovieResponse
from mediaserver.schemas.prints import PrintResponse

__all__ = [
    "ErrorResponse",
    "HealthResponse",
    "MovieResponse",
    "PrintResponse",
]
