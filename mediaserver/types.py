"""Record types stored in the collection index files."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from common.constants import (
    DEFAULT_DIRECTOR,
    DEFAULT_MOVIE_EXTENSION,
    DEFAULT_RATING,
    UNKNOWN_GENRE,
)
from mediaserver.utils import coerce_float, coerce_int, parse_genres

_MOVIE_KEYS = frozenset({
    "id", "title", "originalFilename", "description", "genre", "year", "rating",
    "director", "fileSize", "duration", "createdAt", "storagePath",
})

_PRINT_KEYS = frozenset({
    "id", "originalFilename", "storagePath", "fileSize", "mimeType", "uploadedAt",
})


def _require_id(data: Dict[str, Any]) -> str:
    identifier = data.get("id")
    if identifier is None or str(identifier).strip() == "":
        raise ValueError("record has no id")
    return str(identifier)


@dataclass
class MovieRecord:
    """
    One entry of the movies index.

    storage_path is the filename inside the movie directory and is the
    authority for locating the file; it can differ from the id.
    """
    id: str
    title: str
    original_filename: str
    description: str
    genre: List[str]
    year: str
    rating: str
    director: str
    file_size: int
    created_at: int
    storage_path: str
    duration: Optional[float] = None
    extras: Dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    @property
    def timestamp(self) -> int:
        return self.created_at

    def to_dict(self) -> Dict[str, Any]:
        data = dict(self.extras)
        data.update({
            "id": self.id,
            "title": self.title,
            "originalFilename": self.original_filename,
            "description": self.description,
            "genre": list(self.genre),
            "year": self.year,
            "rating": self.rating,
            "director": self.director,
            "fileSize": self.file_size,
            "createdAt": self.created_at,
            "storagePath": self.storage_path,
        })
        if self.duration is not None:
            data["duration"] = self.duration
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MovieRecord":
        identifier = _require_id(data)
        genre = data.get("genre")
        return cls(
            id=identifier,
            title=str(data.get("title") or data.get("originalFilename") or identifier),
            original_filename=str(data.get("originalFilename") or ""),
            description=str(data.get("description") or ""),
            genre=parse_genres(genre if isinstance(genre, (list, str)) else None, UNKNOWN_GENRE),
            year=str(data.get("year") or ""),
            rating=str(data.get("rating") or DEFAULT_RATING),
            director=str(data.get("director") or DEFAULT_DIRECTOR),
            file_size=coerce_int(data.get("fileSize")) or 0,
            created_at=coerce_int(data.get("createdAt")) or 0,
            storage_path=str(data.get("storagePath") or f"{identifier}{DEFAULT_MOVIE_EXTENSION}"),
            duration=coerce_float(data.get("duration")),
            extras={k: v for k, v in data.items() if k not in _MOVIE_KEYS},
        )


@dataclass
class PrintRecord:
    """
    One entry of the prints index.
    """
    id: str
    original_filename: str
    storage_path: str
    file_size: int
    uploaded_at: int
    mime_type: Optional[str] = None
    extras: Dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    @property
    def timestamp(self) -> int:
        return self.uploaded_at

    def to_dict(self) -> Dict[str, Any]:
        data = dict(self.extras)
        data.update({
            "id": self.id,
            "originalFilename": self.original_filename,
            "storagePath": self.storage_path,
            "fileSize": self.file_size,
            "uploadedAt": self.uploaded_at,
        })
        if self.mime_type:
            data["mimeType"] = self.mime_type
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PrintRecord":
        identifier = _require_id(data)
        storage_path = str(data.get("storagePath") or identifier)
        return cls(
            id=identifier,
            original_filename=str(data.get("originalFilename") or storage_path),
            storage_path=storage_path,
            file_size=coerce_int(data.get("fileSize")) or 0,
            uploaded_at=coerce_int(data.get("uploadedAt")) or 0,
            mime_type=data.get("mimeType") or None,
            extras={k: v for k, v in data.items() if k not in _PRINT_KEYS},
        )


Record = Union[MovieRecord, PrintRecord]


@dataclass(frozen=True)
class StoredFile:
    """
    A record resolved to a file that exists on disk.
    """
    record: Record
    path: Path
    size: int
    content_type: str
