"""Project-wide constants shared by the server and the CLI."""

DEFAULT_HOST: str = "0.0.0.0"
DEFAULT_PORT: int = 3001

MOVIES_INDEX_FILENAME: str = "movies.json"
PRINTS_INDEX_FILENAME: str = "prints.json"

DEFAULT_MOVIE_EXTENSION: str = ".mp4"
DEFAULT_PRINT_EXTENSION: str = ""

UNKNOWN_GENRE: str = "Unknown"
DEFAULT_RATING: str = "NR"
DEFAULT_DIRECTOR: str = "Unknown"

STREAM_PIECE_SIZE: int = 64 * 1024  # 64 KiB per read while streaming
UPLOAD_PIECE_SIZE: int = 1024 * 1024

# Uploads land under this name until their record is indexed
UPLOAD_TEMP_PREFIX: str = ".upload."
UPLOAD_TEMP_SUFFIX: str = ".part"

FALLBACK_CONTENT_TYPE: str = "application/octet-stream"

# Extensions the stdlib mimetypes table does not know on every platform.
EXTRA_CONTENT_TYPES: dict[str, str] = {
    ".mkv": "video/x-matroska",
    ".m4v": "video/x-m4v",
    ".stl": "model/stl",
    ".3mf": "model/3mf",
    ".obj": "model/obj",
    ".gcode": "text/x-gcode",
}
