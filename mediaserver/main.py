"""Entry point for the media server."""

import time
import uuid
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from common.logging_config import setup_logging
from mediaserver import config
from mediaserver.cleanup_task import OrphanedFileScanner
from mediaserver.exceptions import (
    InvalidIdentifierError,
    InvalidRangeError,
    MediaServerException,
    MissingUploadError,
    RangeNotSatisfiableError,
    RecordNotFoundError,
    StorageError,
    StorageFullError,
    StoredFileMissingError,
)
from mediaserver.routes import movie_router, print_download_router, print_router
from mediaserver.schemas.common import HealthResponse
from mediaserver.services.movie_service import MovieService
from mediaserver.services.print_service import PrintService

logger = setup_logging('mediaserver')


async def log_requests(request: Request, call_next):
    """
    Middleware to log all HTTP requests and responses.
    """
    request_id = str(uuid.uuid4())
    request.state.request_id = request_id

    start_time = time.time()

    logger.info(
        f"Request started: {request.method} {request.url.path} [request_id={request_id}]"
    )

    response = await call_next(request)

    duration = time.time() - start_time

    logger.info(
        f"Request completed: {request.method} {request.url.path} "
        f"status={response.status_code} duration={duration:.3f}s [request_id={request_id}]"
    )

    response.headers["X-Request-ID"] = request_id

    return response


def _error_response(request: Request, exc: Exception, status_code: int, code: str, headers=None) -> JSONResponse:
    request_id = getattr(request.state, 'request_id', 'unknown')
    message = f"{type(exc).__name__}: {exc} [request_id={request_id}] path={request.url.path}"
    if status_code >= 500:
        logger.error(message, exc_info=exc)
    else:
        logger.warning(message)
    return JSONResponse(
        status_code=status_code,
        content={"detail": str(exc), "code": code},
        headers=headers,
    )


async def missing_upload_handler(request: Request, exc: MissingUploadError):
    return _error_response(request, exc, status.HTTP_400_BAD_REQUEST, "MISSING_FILE")


async def invalid_identifier_handler(request: Request, exc: InvalidIdentifierError):
    return _error_response(request, exc, status.HTTP_400_BAD_REQUEST, "INVALID_IDENTIFIER")


async def invalid_range_handler(request: Request, exc: InvalidRangeError):
    return _error_response(request, exc, status.HTTP_400_BAD_REQUEST, "INVALID_RANGE")


async def range_not_satisfiable_handler(request: Request, exc: RangeNotSatisfiableError):
    return _error_response(
        request,
        exc,
        416,
        "RANGE_NOT_SATISFIABLE",
        headers={"Content-Range": f"bytes */{exc.file_size}"},
    )


async def record_not_found_handler(request: Request, exc: RecordNotFoundError):
    return _error_response(request, exc, status.HTTP_404_NOT_FOUND, "RECORD_NOT_FOUND")


async def stored_file_missing_handler(request: Request, exc: StoredFileMissingError):
    return _error_response(request, exc, status.HTTP_404_NOT_FOUND, "STORED_FILE_MISSING")


async def storage_full_handler(request: Request, exc: StorageFullError):
    return _error_response(request, exc, status.HTTP_507_INSUFFICIENT_STORAGE, "STORAGE_FULL")


async def storage_error_handler(request: Request, exc: StorageError):
    return _error_response(request, exc, status.HTTP_500_INTERNAL_SERVER_ERROR, "STORAGE_ERROR")


async def media_server_exception_handler(request: Request, exc: MediaServerException):
    return _error_response(request, exc, status.HTTP_500_INTERNAL_SERVER_ERROR, "INTERNAL_ERROR")


def create_app(
    media_dir: Optional[str] = None,
    prints_dir: Optional[str] = None,
    orphan_scan_interval: Optional[int] = None,
) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        media_dir: Movie directory (defaults to MEDIA_DIR)
        prints_dir: Print file directory (defaults to PRINTS_DIR)
        orphan_scan_interval: Seconds between orphan scans, 0 disables
            (defaults to ORPHAN_SCAN_INTERVAL_SECONDS)

    Returns:
        Configured application
    """
    media_path = Path(media_dir or config.MEDIA_DIR)
    prints_path = Path(prints_dir or config.PRINTS_DIR)
    if orphan_scan_interval is None:
        orphan_scan_interval = config.ORPHAN_SCAN_INTERVAL_SECONDS

    media_path.mkdir(parents=True, exist_ok=True)
    prints_path.mkdir(parents=True, exist_ok=True)

    movie_service = MovieService.for_directory(media_path)
    print_service = PrintService.for_directory(prints_path)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Media server starting up...")
        logger.info(f"Media directory: {media_path}")
        logger.info(f"Prints directory: {prints_path}")

        scanner = None
        if orphan_scan_interval > 0:
            scanner = OrphanedFileScanner(
                [movie_service, print_service],
                interval_seconds=orphan_scan_interval,
                grace_seconds=config.ORPHAN_GRACE_SECONDS,
                delete_orphans=config.ORPHAN_CLEANUP_DELETE,
            )
            await scanner.start()

        yield

        logger.info("Media server shutting down...")
        if scanner:
            await scanner.stop()

    app = FastAPI(
        title="homeshelf media server",
        description="LAN file server for movies and 3D print files",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.movie_service = movie_service
    app.state.print_service = print_service

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["Content-Range", "Accept-Ranges", "Content-Length", "X-Request-ID"],
    )
    app.middleware("http")(log_requests)

    app.add_exception_handler(MissingUploadError, missing_upload_handler)
    app.add_exception_handler(InvalidIdentifierError, invalid_identifier_handler)
    app.add_exception_handler(InvalidRangeError, invalid_range_handler)
    app.add_exception_handler(RangeNotSatisfiableError, range_not_satisfiable_handler)
    app.add_exception_handler(RecordNotFoundError, record_not_found_handler)
    app.add_exception_handler(StoredFileMissingError, stored_file_missing_handler)
    app.add_exception_handler(StorageFullError, storage_full_handler)
    app.add_exception_handler(StorageError, storage_error_handler)
    app.add_exception_handler(MediaServerException, media_server_exception_handler)

    @app.get("/api/health", response_model=HealthResponse)
    async def health_check():
        """
        Liveness check.
        """
        return {"status": "ok"}

    app.include_router(movie_router)
    app.include_router(print_router)
    app.include_router(print_download_router)

    app.mount("/media", StaticFiles(directory=str(media_path)), name="media")

    return app


def main() -> None:
    """
    Start the media server with uvicorn.
    """
    uvicorn.run(
        "mediaserver.main:create_app",
        factory=True,
        host=config.HOST,
        port=config.PORT,
        reload=config.RELOAD,
    )


if __name__ == "__main__":
    main()
