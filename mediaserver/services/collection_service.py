"""Ingestion, retrieval and deletion shared by every collection."""

import asyncio
from typing import BinaryIO, Callable, Generic, List, Optional

from common.constants import UPLOAD_TEMP_PREFIX, UPLOAD_TEMP_SUFFIX
from common.logging_config import get_logger
from mediaserver.exceptions import (
    InvalidIdentifierError,
    MissingUploadError,
    RecordNotFoundError,
    StorageError,
    StoredFileMissingError,
)
from mediaserver.repositories.index_store import IndexStore, R
from mediaserver.storage import CollectionStorage
from mediaserver.types import StoredFile
from mediaserver.utils import generate_uuid, guess_content_type, storage_filename, validate_identifier

logger = get_logger(__name__)

RecordBuilder = Callable[[str, str, int], R]


class CollectionService(Generic[R]):
    """
    One collection: an index file plus the directory of files it describes.

    Blocking filesystem work runs in worker threads so the event loop keeps
    serving other requests.
    """

    item_name = "item"
    default_extension = ""

    def __init__(self, store: IndexStore[R], storage: CollectionStorage):
        self.store = store
        self.storage = storage

    async def list_records(self) -> List[R]:
        return await asyncio.to_thread(self.store.list)

    async def get_record(self, record_id: str) -> R:
        record = await asyncio.to_thread(self.store.find_by_id, record_id)
        if record is None:
            raise RecordNotFoundError(f"No {self.item_name} with id '{record_id}'")
        return record

    async def open_file(self, record_id: str) -> StoredFile:
        """
        Resolve an identifier to a file that exists on disk right now.

        The index and the directory can diverge, so a record whose file is
        gone is reported separately from an unknown identifier.

        Raises:
            RecordNotFoundError: If no record has this identifier
            StoredFileMissingError: If the record's file is not on disk
        """
        record = await self.get_record(record_id)
        path = self.storage.resolve(record.storage_path)
        size = None if path is None else await asyncio.to_thread(self.storage.size, path)
        if size is None:
            logger.warning(f"{self.item_name} {record_id} is indexed but {record.storage_path} is missing")
            raise StoredFileMissingError(f"File for {self.item_name} '{record_id}' is missing from storage")

        return StoredFile(
            record=record,
            path=path,
            size=size,
            content_type=guess_content_type(record.storage_path),
        )

    async def delete(self, record_id: str) -> None:
        """
        Remove every record with this identifier and the files they point at.

        A file that is already gone, or that cannot be removed, is logged and
        the record is dropped from the index regardless.

        Raises:
            RecordNotFoundError: If no record has this identifier
        """
        record = await self.get_record(record_id)
        await asyncio.to_thread(self._delete_blocking, record)

    def _delete_blocking(self, record: R) -> None:
        removed = self.store.remove(record.id)

        # Repeated ids can point at different files (x.mp4, then x.mkv)
        for storage_path in dict.fromkeys(entry.storage_path for entry in removed):
            try:
                if not self.storage.remove(storage_path):
                    logger.info(f"File {storage_path} for {self.item_name} {record.id} was already gone")
            except OSError as e:
                logger.warning(f"Failed to remove file {storage_path}: {e}")

        logger.info(f"Deleted {self.item_name} {record.id} ({len(removed)} index entries)")

    async def _ingest(
        self,
        source: Optional[BinaryIO],
        original_filename: Optional[str],
        identifier: Optional[str],
        build_record: RecordBuilder,
    ) -> R:
        """
        Persist an upload and append its record.

        The upload is written to a hidden temp file and only renamed onto its
        final name once the record is in the index, so a failed upload never
        clobbers the file of an existing record with the same name.

        Args:
            source: Uploaded file stream, None if the request had no file
            original_filename: Name the client gave the file
            identifier: Caller-supplied identifier, blank to generate one
            build_record: Makes the record from (id, storage filename, size)

        Raises:
            MissingUploadError: If there is no file, before anything touches disk
            InvalidIdentifierError: If the identifier is not a safe filename stem,
                or the resulting filename would collide with the index file
            StorageError: If the file or the index cannot be written
        """
        if source is None:
            raise MissingUploadError('Missing file field "file"')

        record_id = self._resolve_identifier(identifier)
        filename = storage_filename(record_id, original_filename, self.default_extension)
        if self.store.is_reserved_name(filename):
            raise InvalidIdentifierError(
                f"Identifier '{record_id}' would store the upload as {filename}, "
                f"which is reserved for the {self.item_name} index"
            )

        return await asyncio.to_thread(self._ingest_blocking, source, filename, record_id, build_record)

    def _ingest_blocking(
        self,
        source: BinaryIO,
        filename: str,
        record_id: str,
        build_record: RecordBuilder,
    ) -> R:
        temp_name = f"{UPLOAD_TEMP_PREFIX}{generate_uuid()}{UPLOAD_TEMP_SUFFIX}"
        file_size = self.storage.write_stream(temp_name, source)
        logger.info(f"Received {filename} ({file_size} bytes)")

        record = build_record(record_id, filename, file_size)
        try:
            self.store.append(record)
        except StorageError as e:
            logger.error(f"Index update failed for {self.item_name} {record_id}: {e}")
            self._discard_temp(temp_name)
            raise

        try:
            self.storage.commit(temp_name, filename)
        except StorageError as e:
            # The record is indexed but its file is not in place; retrieval
            # reports it as missing until the upload is repeated or deleted.
            logger.error(f"Indexed {self.item_name} {record_id} but could not store {filename}: {e}")
            self._discard_temp(temp_name)
            raise

        logger.info(f"Indexed {self.item_name} {record_id} as {filename}")
        return record

    def _discard_temp(self, temp_name: str) -> None:
        try:
            self.storage.remove(temp_name)
        except OSError as cleanup_error:
            logger.warning(f"Could not remove temp upload {temp_name}: {cleanup_error}")

    @staticmethod
    def _resolve_identifier(identifier: Optional[str]) -> str:
        candidate = (identifier or "").strip()
        if not candidate:
            return generate_uuid()
        if not validate_identifier(candidate):
            raise InvalidIdentifierError(f"Identifier '{candidate}' cannot be used as a filename")
        return candidate
