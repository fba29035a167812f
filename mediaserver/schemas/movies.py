"""Pydantic schemas for movie endpoints."""

from typing import List, Optional
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from mediaserver.types import MovieRecord


class MovieResponse(BaseModel):
    """A movie record as served to clients (camelCase keys)."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    title: str
    original_filename: str
    description: str
    genre: List[str]
    year: str
    rating: str
    director: str
    file_size: int
    duration: Optional[float] = None
    created_at: int
    storage_path: str

    @classmethod
    def from_record(cls, record: MovieRecord) -> "MovieResponse":
        return cls(
            id=record.id,
            title=record.title,
            original_filename=record.original_filename,
            description=record.description,
            genre=record.genre,
            year=record.year,
            rating=record.rating,
            director=record.director,
            file_size=record.file_size,
            duration=record.duration,
            created_at=record.created_at,
            storage_path=record.storage_path,
        )
