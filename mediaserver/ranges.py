"""HTTP Range header handling for seekable streams."""

import re
from dataclasses import dataclass
from typing import Optional

from mediaserver.exceptions import InvalidRangeError, RangeNotSatisfiableError

_DIGITS = re.compile(r"[0-9]+")


@dataclass(frozen=True)
class ByteRange:
    """
    An inclusive byte range [start, end] of a file of size total.
    """
    start: int
    end: int
    total: int

    @property
    def length(self) -> int:
        return self.end - self.start + 1

    @property
    def content_range(self) -> str:
        return f"bytes {self.start}-{self.end}/{self.total}"


def parse_range_header(range_header: Optional[str], file_size: int) -> Optional[ByteRange]:
    """
    Resolve a Range header against a file size.

    Supports "bytes=start-end", "bytes=start-" and the suffix form
    "bytes=-count". An end past the last byte is clamped to it.

    Args:
        range_header: Raw header value, or None when the request has none
        file_size: Size of the file being served

    Returns:
        ByteRange to serve, or None for a full-body response

    Raises:
        InvalidRangeError: If the header is malformed or asks for several ranges
        RangeNotSatisfiableError: If the range starts at or past the end of the file
    """
    if range_header is None or not range_header.strip():
        return None

    unit, separator, range_spec = range_header.strip().partition("=")
    if not separator or unit.strip().lower() != "bytes":
        raise InvalidRangeError(f"Unsupported range unit in '{range_header}'")

    range_spec = range_spec.strip()
    if "," in range_spec:
        raise InvalidRangeError("Multiple ranges are not supported")

    start_str, dash, end_str = range_spec.partition("-")
    start_str, end_str = start_str.strip(), end_str.strip()
    if not dash or (not start_str and not end_str):
        raise InvalidRangeError(f"Malformed range '{range_header}'")

    if not start_str:
        if not _DIGITS.fullmatch(end_str):
            raise InvalidRangeError(f"Malformed range '{range_header}'")
        suffix_length = int(end_str)
        if suffix_length == 0 or file_size == 0:
            raise RangeNotSatisfiableError(f"Range '{range_header}' is not satisfiable", file_size)
        return ByteRange(max(file_size - suffix_length, 0), file_size - 1, file_size)

    if not _DIGITS.fullmatch(start_str) or (end_str and not _DIGITS.fullmatch(end_str)):
        raise InvalidRangeError(f"Malformed range '{range_header}'")

    start = int(start_str)
    end = int(end_str) if end_str else file_size - 1
    if end_str and end < start:
        raise InvalidRangeError(f"Range end precedes start in '{range_header}'")
    if start >= file_size:
        raise RangeNotSatisfiableError(f"Range '{range_header}' starts past end of file", file_size)

    return ByteRange(start, min(end, file_size - 1), file_size)
