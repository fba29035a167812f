"""Utility functions for CLI operations."""

import sys
from datetime import datetime
from typing import Optional

from cli.constants import GREEN, RESET


class TransferProgress:
    """Single-line progress display for an upload or a download."""

    def __init__(self, verb: str, name: str, total: Optional[int]):
        """
        Args:
            verb: "Uploading" or "Downloading"
            name: Display name of the file
            total: Expected byte count, None when the server did not say
        """
        self.verb = verb
        self.name = name
        self.total = total
        self.done = 0
        self._finished = False

    def advance(self, count: int) -> None:
        self.done += count
        if self.total:
            percent = f" ({GREEN}{self.done / self.total * 100:.1f}%{RESET})"
            sizes = f"{format_file_size(self.done)} / {format_file_size(self.total)}"
        else:
            percent = ""
            sizes = format_file_size(self.done)
        sys.stdout.write(f"\r{self.verb} {self.name}: {sizes}{percent}")
        sys.stdout.flush()

    def finish(self) -> None:
        if self._finished:
            return
        self._finished = True
        if self.done:
            sys.stdout.write('\n')
            sys.stdout.flush()


class ProgressFileWrapper:
    """Read-only file wrapper that reports upload progress as httpx consumes it."""

    def __init__(self, file_path: str, file_size: int, filename: str):
        self._file = open(file_path, 'rb')
        self.progress = TransferProgress("Uploading", filename, file_size)

    def read(self, size: int = -1) -> bytes:
        piece = self._file.read(size if size > 0 else 64 * 1024)
        if piece:
            self.progress.advance(len(piece))
        else:
            self.progress.finish()
        return piece

    def close(self) -> None:
        self.progress.finish()
        self._file.close()

    def __enter__(self) -> 'ProgressFileWrapper':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


def format_file_size(size_bytes: int) -> str:
    """
    Format file size in bytes to human-readable format with appropriate unit.

    Uses binary units (1024-based).

    Args:
        size_bytes: File size in bytes

    Returns:
        Formatted string with size and unit (e.g., "1.50 MiB", "512 B")
    """
    if size_bytes < 1024:
        return f"{size_bytes} B"

    size = size_bytes / 1024.0
    for unit in ('KiB', 'MiB', 'GiB', 'TiB'):
        if size < 1024.0:
            return f"{size:.2f} {unit}"
        size /= 1024.0

    return f"{size:.2f} PiB"


def format_timestamp(epoch_millis: int) -> str:
    """
    Render an epoch-milliseconds timestamp as local "YYYY-MM-DD HH:MM".
    """
    if not epoch_millis:
        return "-"
    return datetime.fromtimestamp(epoch_millis / 1000).strftime("%Y-%m-%d %H:%M")
