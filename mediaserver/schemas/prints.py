"""Pydantic schemas for print file endpoints."""

from typing import Optional
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from mediaserver.types import PrintRecord


class PrintResponse(BaseModel):
    """A print record as served to clients (camelCase keys)."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    original_filename: str
    storage_path: str
    file_size: int
    mime_type: Optional[str] = None
    uploaded_at: int

    @classmethod
    def from_record(cls, record: PrintRecord) -> "PrintResponse":
        return cls(
            id=record.id,
            original_filename=record.original_filename,
            storage_path=record.storage_path,
            file_size=record.file_size,
            mime_type=record.mime_type,
            uploaded_at=record.uploaded_at,
        )
