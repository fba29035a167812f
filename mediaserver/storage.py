"""Manages the stored files of one collection directory on disk."""

import errno
import os
import shutil
from pathlib import Path
from typing import BinaryIO, Iterator, List, Optional

from common.constants import STREAM_PIECE_SIZE, UPLOAD_PIECE_SIZE
from common.logging_config import get_logger
from mediaserver.exceptions import StorageError, StorageFullError

logger = get_logger(__name__)

_NO_SPACE_ERRNOS = {errno.ENOSPC, getattr(errno, "EDQUOT", errno.ENOSPC)}


def to_storage_error(exc: OSError, message: str) -> StorageError:
    """
    Wrap an OSError in the matching storage exception.

    Args:
        exc: Original filesystem error
        message: Context for the log and the response body

    Returns:
        StorageFullError when the device is full, StorageError otherwise
    """
    if exc.errno in _NO_SPACE_ERRNOS:
        return StorageFullError(f"{message}: no space left on device")
    return StorageError(f"{message}: {exc.strerror or exc}")


class CollectionStorage:
    """Filesystem primitives for one collection directory."""

    def __init__(self, directory: Path):
        """
        Args:
            directory: Directory holding the collection's files
        """
        self.directory = Path(directory)

    def ensure_directory(self) -> None:
        """Ensure the collection directory exists."""
        self.directory.mkdir(parents=True, exist_ok=True)

    def resolve(self, storage_path: str) -> Optional[Path]:
        """
        Get the absolute path for a stored filename.

        Args:
            storage_path: Filename recorded in the index

        Returns:
            Absolute path, or None if storage_path points outside the directory
        """
        base_dir = self.directory.resolve()
        candidate = (base_dir / storage_path).resolve()
        try:
            candidate.relative_to(base_dir)
        except ValueError:
            logger.warning(f"Storage path escapes collection directory: {storage_path}")
            return None
        if candidate == base_dir:
            return None
        return candidate

    def write_stream(self, filename: str, source: BinaryIO, piece_size: int = UPLOAD_PIECE_SIZE) -> int:
        """
        Copy an incoming stream into the collection directory.

        A partially written file is removed before the error propagates.

        Args:
            filename: Target filename inside the directory
            source: Readable binary stream
            piece_size: Bytes copied per read

        Returns:
            Number of bytes written

        Raises:
            StorageError: If the write fails
        """
        self.ensure_directory()
        filepath = self.directory / filename
        try:
            with open(filepath, 'wb') as out:
                shutil.copyfileobj(source, out, piece_size)
                out.flush()
                written = out.tell()
        except OSError as e:
            try:
                self.remove(filename)
            except OSError as cleanup_error:
                logger.warning(f"Could not remove partial file {filename}: {cleanup_error}")
            raise to_storage_error(e, f"Failed to write {filename}") from e
        return written

    def commit(self, temp_name: str, filename: str) -> None:
        """
        Move a fully written temp file onto its final name, replacing any file
        already there.

        Raises:
            StorageError: If the rename fails
        """
        try:
            os.replace(self.directory / temp_name, self.directory / filename)
        except OSError as e:
            raise to_storage_error(e, f"Failed to move upload into place as {filename}") from e

    def size(self, path: Path) -> Optional[int]:
        """
        Get size of a stored file in bytes.

        Returns:
            Size in bytes, or None if the file doesn't exist
        """
        try:
            stat = path.stat()
        except FileNotFoundError:
            return None
        if not path.is_file():
            return None
        return stat.st_size

    def remove(self, filename: str) -> bool:
        """
        Delete a stored file.

        Args:
            filename: Filename inside the collection directory

        Returns:
            True if the file was deleted, False if it did not exist

        Raises:
            OSError: If removal fails for any reason other than absence
        """
        filepath = self.resolve(filename)
        if filepath is None:
            return False
        try:
            filepath.unlink()
        except FileNotFoundError:
            return False
        return True

    def list_files(self) -> List[Path]:
        """
        List regular files in the collection directory.

        Returns:
            Paths of files directly inside the directory
        """
        if not self.directory.exists():
            return []
        return sorted(path for path in self.directory.iterdir() if path.is_file())


def iter_file_range(
    path: Path,
    start: int = 0,
    end: Optional[int] = None,
    piece_size: int = STREAM_PIECE_SIZE,
) -> Iterator[bytes]:
    """
    Stream bytes [start, end] of a file in pieces.

    The file handle is closed when iteration finishes or the consumer closes
    the generator (client disconnect). A file truncated or removed underneath
    the stream ends it early.

    Args:
        path: File to read
        start: First byte offset
        end: Last byte offset, inclusive; None reads to the end of the file
        piece_size: Maximum bytes yielded per piece

    Yields:
        File data pieces
    """
    remaining = None if end is None else end - start + 1
    with open(path, 'rb') as f:
        if start:
            f.seek(start)
        while remaining is None or remaining > 0:
            read_size = piece_size if remaining is None else min(piece_size, remaining)
            piece = f.read(read_size)
            if not piece:
                if remaining:
                    logger.warning(f"Stream of {path.name} ended {remaining} bytes short")
                break
            if remaining is not None:
                remaining -= len(piece)
            yield piece
