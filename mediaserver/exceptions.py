"""Custom exception classes for the media server."""


class MediaServerException(Exception):
    """
    Base exception class for all media server errors.
    """
    pass


class MissingUploadError(MediaServerException):
    """
    Raised when an upload request carries no file payload.
    """
    pass


class InvalidIdentifierError(MediaServerException):
    """
    Raised when a caller-supplied identifier cannot be used as a filename.
    """
    pass


class RecordNotFoundError(MediaServerException):
    """
    Raised when no record with the requested identifier exists in the index.
    """
    pass


class StoredFileMissingError(MediaServerException):
    """
    Raised when a record exists but its backing file is gone from disk.
    """
    pass


class InvalidRangeError(MediaServerException):
    """
    Raised when a Range header cannot be parsed.
    """
    pass


class RangeNotSatisfiableError(MediaServerException):
    """
    Raised when a Range header starts at or past the end of the file.
    """

    def __init__(self, message: str, file_size: int):
        super().__init__(message)
        self.file_size = file_size


class StorageError(MediaServerException):
    """
    Raised when reading or writing the collection directory fails.
    """
    pass


class StorageFullError(StorageError):
    """
    Raised when the device holding a collection directory has no space left.
    """
    pass


class IndexCorruptError(StorageError):
    """
    Raised by a strict index read when the file exists but cannot be decoded.
    """
    pass
