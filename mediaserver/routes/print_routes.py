"""Print file API routes."""

from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Response, UploadFile, status
from fastapi.responses import StreamingResponse

from common.constants import FALLBACK_CONTENT_TYPE
from mediaserver.routes.dependencies import get_print_service
from mediaserver.schemas.prints import PrintResponse
from mediaserver.services.print_service import PrintService
from mediaserver.storage import iter_file_range
from mediaserver.utils import content_disposition

router = APIRouter(prefix="/api/prints", tags=["Prints"])

download_router = APIRouter(prefix="/prints", tags=["Prints"])


@router.get("", response_model=List[PrintResponse])
async def list_prints(service: PrintService = Depends(get_print_service)):
    records = await service.list_records()
    return [PrintResponse.from_record(record) for record in records]


@router.post("/upload", response_model=PrintResponse)
async def upload_print(
    file: Optional[UploadFile] = File(None),
    record_id: Optional[str] = Form(None, alias="id"),
    service: PrintService = Depends(get_print_service),
):
    """
    Upload a print file (.stl, .gcode, .3mf, ...).

    Raises:
        - 400: File field missing or identifier unusable
        - 500/507: Storage failure
    """
    if file is None:
        record = await service.ingest(None, None, identifier=record_id)
    else:
        record = await service.ingest(
            file.file,
            file.filename,
            identifier=record_id,
            mime_type=file.content_type,
        )
    return PrintResponse.from_record(record)


@router.get("/{print_id}/download")
@download_router.get("/{print_id}/download", include_in_schema=False)
async def download_print(print_id: str, service: PrintService = Depends(get_print_service)):
    """
    Download a print file under its original filename.

    Raises:
        - 404: Unknown print, or its file is missing
    """
    stored = await service.open_file(print_id)

    media_type = stored.content_type
    if media_type == FALLBACK_CONTENT_TYPE and stored.record.mime_type:
        media_type = stored.record.mime_type

    return StreamingResponse(
        iter_file_range(stored.path),
        media_type=media_type,
        headers={
            "Content-Disposition": content_disposition(stored.record.original_filename),
            "Content-Length": str(stored.size),
        },
    )


@router.delete("/{print_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_print(print_id: str, service: PrintService = Depends(get_print_service)):
    await service.delete(print_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
