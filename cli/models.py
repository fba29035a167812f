"""Command data types for CLI."""

from dataclasses import dataclass, field
from typing import Literal


@dataclass(frozen=True)
class HealthCommand:
    """Check server liveness."""

    command: Literal["health"] = "health"


@dataclass(frozen=True)
class ListMoviesCommand:
    """List movies."""

    command: Literal["movies"] = "movies"


@dataclass(frozen=True)
class UploadMovieCommand:
    """Upload a movie file with descriptive fields."""

    file_path: str
    fields: dict = field(default_factory=dict)
    command: Literal["upload"] = "upload"


@dataclass(frozen=True)
class StreamMovieCommand:
    """Fetch a movie, optionally a byte range, into a local file."""

    movie_id: str
    output_path: str
    byte_range: tuple[int, int | None] | None = None
    command: Literal["stream"] = "stream"


@dataclass(frozen=True)
class DeleteMovieCommand:
    """Delete a movie by id."""

    movie_id: str
    command: Literal["delete"] = "delete"


@dataclass(frozen=True)
class ListPrintsCommand:
    """List print files."""

    command: Literal["prints"] = "prints"


@dataclass(frozen=True)
class UploadPrintCommand:
    """Upload a print file."""

    file_path: str
    print_id: str | None = None
    command: Literal["upload-print"] = "upload-print"


@dataclass(frozen=True)
class DownloadPrintCommand:
    """Download a print file by id."""

    print_id: str
    output_path: str | None = None
    command: Literal["download-print"] = "download-print"


@dataclass(frozen=True)
class DeletePrintCommand:
    """Delete a print file by id."""

    print_id: str
    command: Literal["delete-print"] = "delete-print"


@dataclass(frozen=True)
class ServerCommand:
    """Change the server address."""

    host: str
    port: int
    command: Literal["server"] = "server"


CommandRequest = (
    HealthCommand
    | ListMoviesCommand
    | UploadMovieCommand
    | StreamMovieCommand
    | DeleteMovieCommand
    | ListPrintsCommand
    | UploadPrintCommand
    | DownloadPrintCommand
    | DeletePrintCommand
    | ServerCommand
)
