"""Command handler functions for CLI operations."""

from pathlib import Path
from typing import Optional

from common.logging_config import get_logger
from cli.client import MediaClient
from cli.config import Config
from cli.models import (
    CommandRequest,
    DeleteMovieCommand,
    DeletePrintCommand,
    DownloadPrintCommand,
    HealthCommand,
    ListMoviesCommand,
    ListPrintsCommand,
    ServerCommand,
    StreamMovieCommand,
    UploadMovieCommand,
    UploadPrintCommand,
)

logger = get_logger(__name__)


_client: Optional[MediaClient] = None


def get_client() -> MediaClient:
    """
    Get or create global MediaClient instance.

    Returns:
        MediaClient instance
    """
    global _client
    if _client is None:
        logger.debug("Creating new MediaClient instance")
        config = Config(Path.home() / '.homeshelf' / 'config.json')
        _client = MediaClient(config)
    return _client


def handle_health(cmd: HealthCommand, client: Optional[MediaClient] = None) -> str:
    if client is None:
        client = get_client()
    return client.health()


def handle_list_movies(cmd: ListMoviesCommand, client: Optional[MediaClient] = None) -> str:
    if client is None:
        client = get_client()
    return client.list_movies()


def handle_upload_movie(cmd: UploadMovieCommand, client: Optional[MediaClient] = None) -> str:
    """
    Handle 'upload' command.

    Args:
        cmd: UploadMovieCommand with file path and form fields
        client: Optional MediaClient for dependency injection (testing)

    Returns:
        Success or error message
    """
    logger.info(f"Executing upload command: {cmd.file_path} fields={sorted(cmd.fields)}")
    if client is None:
        client = get_client()
    return client.upload_movie(cmd.file_path, dict(cmd.fields))


def handle_stream_movie(cmd: StreamMovieCommand, client: Optional[MediaClient] = None) -> str:
    """
    Handle 'stream' command.

    Args:
        cmd: StreamMovieCommand with id, output path and optional byte range
        client: Optional MediaClient for dependency injection (testing)

    Returns:
        Success or error message
    """
    logger.info(f"Executing stream command: id={cmd.movie_id} range={cmd.byte_range}")
    if client is None:
        client = get_client()
    return client.stream_movie(cmd.movie_id, cmd.output_path, cmd.byte_range)


def handle_delete_movie(cmd: DeleteMovieCommand, client: Optional[MediaClient] = None) -> str:
    if client is None:
        client = get_client()
    return client.delete_movie(cmd.movie_id)


def handle_list_prints(cmd: ListPrintsCommand, client: Optional[MediaClient] = None) -> str:
    if client is None:
        client = get_client()
    return client.list_prints()


def handle_upload_print(cmd: UploadPrintCommand, client: Optional[MediaClient] = None) -> str:
    if client is None:
        client = get_client()
    return client.upload_print(cmd.file_path, cmd.print_id)


def handle_download_print(cmd: DownloadPrintCommand, client: Optional[MediaClient] = None) -> str:
    """
    Handle 'download-print' command.

    Args:
        cmd: DownloadPrintCommand with id and optional output path
        client: Optional MediaClient for dependency injection (testing)

    Returns:
        Success or error message
    """
    logger.info(f"Executing download-print command: id={cmd.print_id} output_path={cmd.output_path}")
    if client is None:
        client = get_client()
    return client.download_print(cmd.print_id, cmd.output_path)


def handle_delete_print(cmd: DeletePrintCommand, client: Optional[MediaClient] = None) -> str:
    if client is None:
        client = get_client()
    return client.delete_print(cmd.print_id)


def handle_server(cmd: ServerCommand, client: Optional[MediaClient] = None) -> str:
    """
    Handle 'server' command: persist the new address and reconnect.
    """
    if client is None:
        client = get_client()
    client.config.set_server(cmd.host, cmd.port)
    client.reconnect()
    return f"Server set to {client.config.get_base_url()}"


_HANDLERS = {
    HealthCommand: handle_health,
    ListMoviesCommand: handle_list_movies,
    UploadMovieCommand: handle_upload_movie,
    StreamMovieCommand: handle_stream_movie,
    DeleteMovieCommand: handle_delete_movie,
    ListPrintsCommand: handle_list_prints,
    UploadPrintCommand: handle_upload_print,
    DownloadPrintCommand: handle_download_print,
    DeletePrintCommand: handle_delete_print,
    ServerCommand: handle_server,
}


def dispatch_command(cmd: CommandRequest, client: Optional[MediaClient] = None) -> str:
    """Dispatch parsed command to appropriate handler."""
    handler = _HANDLERS.get(type(cmd))
    if handler is None:
        return f"Unknown command type: {type(cmd)}"
    return handler(cmd, client=client)
