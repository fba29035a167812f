"""Utility helper functions for the media server."""

import json
import mimetypes
import os
import time
import uuid
from datetime import datetime
from typing import Any, List, Optional, Sequence, Union
from urllib.parse import quote

from common.constants import EXTRA_CONTENT_TYPES, FALLBACK_CONTENT_TYPE, UNKNOWN_GENRE

for _ext, _type in EXTRA_CONTENT_TYPES.items():
    mimetypes.add_type(_type, _ext)

GenreInput = Union[None, str, Sequence[Any]]


def generate_uuid() -> str:
    """
    Generate a new UUID4 string.

    Returns:
        UUID4 string
    """
    return str(uuid.uuid4())


def current_millis() -> int:
    """
    Get the current time as epoch milliseconds.

    Returns:
        Milliseconds since the Unix epoch
    """
    return int(time.time() * 1000)


def current_year() -> str:
    return str(datetime.now().year)


def coerce_int(val: Any) -> Optional[int]:
    if val is None or val == "" or isinstance(val, bool):
        return None
    try:
        return int(float(val))
    except (TypeError, ValueError, OverflowError):
        return None


def coerce_float(val: Any) -> Optional[float]:
    if val is None or val == "" or isinstance(val, bool):
        return None
    try:
        number = float(val)
    except (TypeError, ValueError):
        return None
    if number != number or number in (float("inf"), float("-inf")):
        return None
    return number


def parse_genres(genre_field: GenreInput, fallback: str = UNKNOWN_GENRE) -> List[str]:
    """
    Normalize a genre value into an ordered, non-empty list of tags.

    Accepts an already structured list, a JSON-encoded list in a string,
    or a comma-separated string. Anything unusable yields [fallback].

    Args:
        genre_field: Raw genre value from the upload
        fallback: Tag used when no genre survives normalization

    Returns:
        List of trimmed genre strings
    """
    if genre_field is None:
        return [fallback]

    if isinstance(genre_field, str):
        text = genre_field.strip()
        if not text:
            return [fallback]
        try:
            decoded = json.loads(text)
        except ValueError:
            decoded = None
        if isinstance(decoded, list):
            return _clean_genres(decoded, fallback)
        return _clean_genres(text.split(','), fallback)

    if isinstance(genre_field, (list, tuple)):
        if len(genre_field) == 1 and isinstance(genre_field[0], str):
            # A single multipart value is indistinguishable from a plain string field
            return parse_genres(genre_field[0], fallback)
        return _clean_genres(genre_field, fallback)

    return [fallback]


def _clean_genres(items: Sequence[Any], fallback: str) -> List[str]:
    genres = [str(item).strip() for item in items if item is not None]
    genres = [genre for genre in genres if genre]
    return genres or [fallback]


def validate_identifier(identifier: str) -> bool:
    """
    Check that an identifier can safely be used as a filename stem.

    Args:
        identifier: Caller-supplied identifier

    Returns:
        True if the identifier contains no path components
    """
    if not identifier or identifier in (".", ".."):
        return False
    if "/" in identifier or "\\" in identifier or "\x00" in identifier:
        return False
    return True


def storage_filename(identifier: str, original_filename: Optional[str], default_extension: str) -> str:
    """
    Build the on-disk filename for an upload.

    Args:
        identifier: Record identifier
        original_filename: Filename the client uploaded, may be empty
        default_extension: Extension used when the original has none

    Returns:
        "{identifier}{extension}"
    """
    base_name = os.path.basename((original_filename or "").replace("\\", "/"))
    extension = os.path.splitext(base_name)[1] or default_extension
    return f"{identifier}{extension}"


def guess_content_type(filename: str) -> str:
    """
    Infer a content type from a filename's extension.

    Args:
        filename: Name or path of the stored file

    Returns:
        MIME type, or application/octet-stream when unknown
    """
    content_type, _ = mimetypes.guess_type(filename)
    return content_type or FALLBACK_CONTENT_TYPE


def content_disposition(filename: str, disposition: str = "attachment") -> str:
    """
    Build a Content-Disposition header carrying a filename hint.

    Non-ASCII names get an RFC 5987 filename* parameter next to an ASCII
    fallback.

    Args:
        filename: Name the client should save the file as
        disposition: "attachment" or "inline"

    Returns:
        Header value
    """
    printable = "".join(ch for ch in filename if ch.isprintable())
    fallback = printable.encode("ascii", "ignore").decode("ascii").replace('"', "").replace("\\", "")
    fallback = fallback.strip() or "download"
    if fallback == printable:
        return f'{disposition}; filename="{fallback}"'
    return f"{disposition}; filename=\"{fallback}\"; filename*=UTF-8''{quote(printable, safe='')}"
