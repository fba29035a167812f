"""Movie collection service."""

from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Optional

from common.constants import (
    DEFAULT_DIRECTOR,
    DEFAULT_MOVIE_EXTENSION,
    DEFAULT_RATING,
    MOVIES_INDEX_FILENAME,
    UNKNOWN_GENRE,
)
from mediaserver.repositories.index_store import IndexStore
from mediaserver.services.collection_service import CollectionService
from mediaserver.storage import CollectionStorage
from mediaserver.types import MovieRecord
from mediaserver.utils import (
    GenreInput,
    coerce_float,
    coerce_int,
    current_millis,
    current_year,
    parse_genres,
)


@dataclass
class MovieAttributes:
    """Descriptive fields sent alongside a movie upload; all optional."""
    title: Optional[str] = None
    description: Optional[str] = None
    genre: GenreInput = None
    year: Optional[str] = None
    rating: Optional[str] = None
    director: Optional[str] = None
    duration: Optional[str] = None
    created_at: Optional[str] = None


class MovieService(CollectionService[MovieRecord]):
    item_name = "movie"
    default_extension = DEFAULT_MOVIE_EXTENSION

    @classmethod
    def for_directory(cls, media_dir: Path) -> "MovieService":
        media_dir = Path(media_dir)
        return cls(
            IndexStore(media_dir / MOVIES_INDEX_FILENAME, MovieRecord.from_dict),
            CollectionStorage(media_dir),
        )

    async def ingest(
        self,
        source: Optional[BinaryIO],
        original_filename: Optional[str],
        identifier: Optional[str] = None,
        attributes: Optional[MovieAttributes] = None,
    ) -> MovieRecord:
        attributes = attributes or MovieAttributes()
        original_filename = original_filename or ""

        def build_record(record_id: str, storage_path: str, file_size: int) -> MovieRecord:
            return MovieRecord(
                id=record_id,
                title=attributes.title or original_filename or record_id,
                original_filename=original_filename,
                description=attributes.description or "",
                genre=parse_genres(attributes.genre, UNKNOWN_GENRE),
                year=attributes.year or current_year(),
                rating=attributes.rating or DEFAULT_RATING,
                director=attributes.director or DEFAULT_DIRECTOR,
                file_size=file_size,
                duration=coerce_float(attributes.duration) or None,
                created_at=coerce_int(attributes.created_at) or current_millis(),
                storage_path=storage_path,
            )

        return await self._ingest(source, original_filename, identifier, build_record)
