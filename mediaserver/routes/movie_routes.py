"""Movie API routes."""

from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Request, Response, UploadFile, status
from fastapi.responses import StreamingResponse

from common.logging_config import get_logger
from mediaserver.ranges import parse_range_header
from mediaserver.routes.dependencies import get_movie_service
from mediaserver.schemas.movies import MovieResponse
from mediaserver.services.movie_service import MovieAttributes, MovieService
from mediaserver.storage import iter_file_range

logger = get_logger(__name__)

router = APIRouter(prefix="/api", tags=["Movies"])


@router.get("/movies", response_model=List[MovieResponse])
async def list_movies(service: MovieService = Depends(get_movie_service)):
    """
    List every movie, newest first.
    """
    records = await service.list_records()
    return [MovieResponse.from_record(record) for record in records]


@router.post("/upload", response_model=MovieResponse)
async def upload_movie(
    file: Optional[UploadFile] = File(None),
    record_id: Optional[str] = Form(None, alias="id"),
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    genre: Optional[List[str]] = Form(None),
    year: Optional[str] = Form(None),
    rating: Optional[str] = Form(None),
    director: Optional[str] = Form(None),
    duration: Optional[str] = Form(None),
    created_at: Optional[str] = Form(None, alias="createdAt"),
    service: MovieService = Depends(get_movie_service),
):
    """
    Upload a movie file with its descriptive fields.

    Parameters:
        - file: Movie file (multipart/form-data)
        - id: Optional identifier; a UUID is generated when blank
        - genre: Comma-separated string, JSON array string, or repeated field

    Returns:
        - The stored movie record

    Raises:
        - 400: File field missing or identifier unusable
        - 500/507: Storage failure
    """
    attributes = MovieAttributes(
        title=title,
        description=description,
        genre=genre,
        year=year,
        rating=rating,
        director=director,
        duration=duration,
        created_at=created_at,
    )

    record = await service.ingest(
        file.file if file is not None else None,
        file.filename if file is not None else None,
        identifier=record_id,
        attributes=attributes,
    )
    return MovieResponse.from_record(record)


@router.get("/movies/{movie_id}/stream")
async def stream_movie(
    movie_id: str,
    request: Request,
    service: MovieService = Depends(get_movie_service),
):
    """
    Stream a movie, honoring a single "Range: bytes=start-end" header.

    Returns:
        - 200 with the whole file when no Range header is sent
        - 206 with the requested bytes otherwise

    Raises:
        - 400: Malformed Range header
        - 404: Unknown movie, or its file is missing
        - 416: Range starts past the end of the file
    """
    stored = await service.open_file(movie_id)
    byte_range = parse_range_header(request.headers.get("range"), stored.size)

    if byte_range is None:
        return StreamingResponse(
            iter_file_range(stored.path),
            status_code=status.HTTP_200_OK,
            media_type=stored.content_type,
            headers={
                "Content-Length": str(stored.size),
                "Accept-Ranges": "bytes",
            },
        )

    logger.debug(f"Serving {byte_range.content_range} of movie {movie_id}")
    return StreamingResponse(
        iter_file_range(stored.path, byte_range.start, byte_range.end),
        status_code=status.HTTP_206_PARTIAL_CONTENT,
        media_type=stored.content_type,
        headers={
            "Content-Range": byte_range.content_range,
            "Accept-Ranges": "bytes",
            "Content-Length": str(byte_range.length),
        },
    )


@router.delete("/movies/{movie_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_movie(movie_id: str, service: MovieService = Depends(get_movie_service)):
    """
    Delete a movie record and its file. A file already gone is not an error.
    """
    await service.delete(movie_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
