"""Print file collection service."""

from pathlib import Path
from typing import BinaryIO, Optional

from common.constants import DEFAULT_PRINT_EXTENSION, PRINTS_INDEX_FILENAME
from mediaserver.repositories.index_store import IndexStore
from mediaserver.services.collection_service import CollectionService
from mediaserver.storage import CollectionStorage
from mediaserver.types import PrintRecord
from mediaserver.utils import current_millis


class PrintService(CollectionService[PrintRecord]):
    item_name = "print"
    default_extension = DEFAULT_PRINT_EXTENSION

    @classmethod
    def for_directory(cls, prints_dir: Path) -> "PrintService":
        prints_dir = Path(prints_dir)
        return cls(
            IndexStore(prints_dir / PRINTS_INDEX_FILENAME, PrintRecord.from_dict),
            CollectionStorage(prints_dir),
        )

    async def ingest(
        self,
        source: Optional[BinaryIO],
        original_filename: Optional[str],
        identifier: Optional[str] = None,
        mime_type: Optional[str] = None,
    ) -> PrintRecord:
        def build_record(record_id: str, storage_path: str, file_size: int) -> PrintRecord:
            return PrintRecord(
                id=record_id,
                original_filename=original_filename or storage_path,
                storage_path=storage_path,
                file_size=file_size,
                mime_type=mime_type or None,
                uploaded_at=current_millis(),
            )

        return await self._ingest(source, original_filename, identifier, build_record)
