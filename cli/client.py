"""HTTP client for communicating with the media server."""

import mimetypes
import os
import re
import time
import uuid
from pathlib import Path
from typing import Optional

import httpx

from common.logging_config import get_logger
from cli.config import Config
from cli.utils import ProgressFileWrapper, TransferProgress, format_file_size, format_timestamp

logger = get_logger(__name__)

_FILENAME_PARAM = re.compile(r'filename="([^"]*)"')


class MediaClient:
    """HTTP client for the media server API with retry logic and error handling."""

    def __init__(self, config: Config):
        """
        Initialize media client.

        Args:
            config: Configuration instance
        """
        self.config = config
        self.session = httpx.Client(
            base_url=config.get_base_url(),
            timeout=config.get_timeout()
        )
        self.request_id = None
        logger.info(f"Initialized MediaClient [base_url={config.get_base_url()}]")

    def reconnect(self) -> None:
        """Rebuild the HTTP session after the server address changed."""
        self.session.close()
        self.session = httpx.Client(
            base_url=self.config.get_base_url(),
            timeout=self.config.get_timeout()
        )

    def _calculate_upload_timeout(self, file_size: int) -> float:
        """
        Calculate timeout for upload based on file size.

        Returns:
            Timeout in seconds (30s base + 0.1s per MB)
        """
        return 30.0 + (file_size / (1024 * 1024)) * 0.1

    def _request_with_retry(
        self,
        method: str,
        endpoint: str,
        max_retries: Optional[int] = None,
        **kwargs
    ) -> httpx.Response:
        """
        Make HTTP request with retry logic on 5xx errors and network failures.

        Args:
            method: HTTP method (GET, POST, DELETE, etc.)
            endpoint: API endpoint path
            max_retries: Max retry attempts (uses config default if None)
            **kwargs: Additional arguments to pass to httpx request

        Returns:
            HTTP response object

        Raises:
            ConnectionError: If max retries exceeded or connection fails
        """
        retry_config = self.config.get_retry_config()
        max_retries = max_retries if max_retries is not None else retry_config['max_retries']
        backoff = retry_config['retry_backoff_multiplier']

        last_exception = None

        self.request_id = str(uuid.uuid4())
        kwargs.setdefault('headers', {})['X-Request-ID'] = self.request_id

        logger.debug(f"Making request: {method} {endpoint} [request_id={self.request_id}]")

        for attempt in range(max_retries + 1):
            try:
                response = self.session.request(method, endpoint, **kwargs)

                logger.debug(
                    f"Response received: {method} {endpoint} status={response.status_code} [request_id={self.request_id}]"
                )

                if response.status_code >= 500 and attempt < max_retries:
                    delay = backoff ** attempt
                    logger.warning(
                        f"Server error (attempt {attempt + 1}/{max_retries + 1}): "
                        f"{method} {endpoint} status={response.status_code}, retrying in {delay}s [request_id={self.request_id}]"
                    )
                    time.sleep(delay)
                    continue

                return response

            except (httpx.ConnectError, httpx.TimeoutException) as e:
                last_exception = e
                if attempt < max_retries:
                    delay = backoff ** attempt
                    logger.warning(
                        f"Network error (attempt {attempt + 1}/{max_retries + 1}): "
                        f"{method} {endpoint} error={type(e).__name__}, retrying in {delay}s [request_id={self.request_id}]"
                    )
                    time.sleep(delay)
                else:
                    logger.error(
                        f"Network error (max retries exceeded): {method} {endpoint} error={e} [request_id={self.request_id}]"
                    )

        if isinstance(last_exception, httpx.TimeoutException):
            raise ConnectionError("Request timed out. Server may be overloaded.")
        raise ConnectionError("Cannot connect to media server. Is it running?")

    def _format_error(self, response: httpx.Response) -> str:
        """
        Map HTTP errors to user-friendly messages.

        Args:
            response: HTTP response object

        Returns:
            User-friendly error message
        """
        try:
            error_data = response.json()
            detail = error_data.get('detail', 'Unknown error')
            code = error_data.get('code', 'UNKNOWN')
        except (ValueError, AttributeError):
            detail = response.text if response.text else 'Unknown error'
            code = 'UNKNOWN'

        error_messages = {
            'MISSING_FILE': 'The server received no file.',
            'INVALID_IDENTIFIER': 'That id cannot be used; ids must not contain path separators.',
            'RECORD_NOT_FOUND': 'No item with that id.',
            'STORED_FILE_MISSING': 'The item is listed but its file is missing on the server.',
            'INVALID_RANGE': 'The byte range was rejected as malformed.',
            'RANGE_NOT_SATISFIABLE': 'The byte range starts past the end of the file.',
            'STORAGE_FULL': 'The server is out of disk space.',
            'STORAGE_ERROR': 'The server could not read or write its storage.',
        }

        if code in error_messages:
            return error_messages[code]

        status_messages = {
            400: 'Bad request',
            404: 'Not found',
            413: 'File too large',
            416: 'Range not satisfiable',
            422: 'Invalid request',
            500: 'Server error',
            503: 'Service unavailable',
            507: 'Insufficient storage',
        }

        message = status_messages.get(response.status_code, detail)
        return f"{message} (Code: {code})" if code != 'UNKNOWN' else message

    def _check_upload_path(self, file_path: str) -> tuple[Optional[Path], Optional[str]]:
        path = Path(file_path).expanduser()
        if not path.exists():
            return None, f"File not found: {file_path}"
        if not path.is_file():
            return None, f"Not a file: {file_path}"
        return path, None

    def health(self) -> str:
        """
        Check that the server answers its liveness check.
        """
        try:
            response = self._request_with_retry('GET', '/api/health')
        except ConnectionError as e:
            return f"Error: {e}"

        if response.status_code == 200 and response.json().get('status') == 'ok':
            return f"Server at {self.config.get_base_url()} is up."
        return f"Health check failed: {self._format_error(response)}"

    def list_movies(self) -> str:
        """
        List movies, newest first.

        Returns:
            Formatted table of movies or error message
        """
        try:
            response = self._request_with_retry('GET', '/api/movies')
        except ConnectionError as e:
            return f"Error: {e}"

        if response.status_code != 200:
            return f"List failed: {self._format_error(response)}"

        movies = response.json()
        if not movies:
            return "No movies found."

        lines = [f"Found {len(movies)} movie(s):"]
        for movie in movies:
            genres = ", ".join(movie.get('genre') or [])
            lines.append(
                f"  {movie['id']}  {movie.get('title', '')} ({movie.get('year', '')}, {movie.get('rating', '')})"
                f"  [{genres}]  {format_file_size(movie.get('fileSize', 0))}"
                f"  {format_timestamp(movie.get('createdAt', 0))}"
            )
        return "\n".join(lines)

    def upload_movie(self, file_path: str, fields: Optional[dict] = None) -> str:
        """
        Upload a movie file with optional descriptive fields.

        Args:
            file_path: Local path of the movie
            fields: Form fields (id, title, description, genre, year, rating, director, duration)

        Returns:
            Result message
        """
        path, error = self._check_upload_path(file_path)
        if error:
            return f"Error: {error}"

        file_size = path.stat().st_size
        content_type = mimetypes.guess_type(path.name)[0] or 'application/octet-stream'
        data = {key: value for key, value in (fields or {}).items() if value is not None}
        data['createdAt'] = str(int(time.time() * 1000))

        logger.info(f"Uploading movie {path.name} ({file_size} bytes)")
        try:
            with ProgressFileWrapper(str(path), file_size, path.name) as wrapped:
                response = self._request_with_retry(
                    'POST',
                    '/api/upload',
                    max_retries=0,
                    files={'file': (path.name, wrapped, content_type)},
                    data=data,
                    timeout=self._calculate_upload_timeout(file_size),
                )
        except ConnectionError as e:
            return f"Error: {e}"

        if response.status_code != 200:
            return f"Upload failed: {self._format_error(response)}"

        movie = response.json()
        return (
            f"Uploaded: {movie.get('title')} (ID: {movie['id']}, "
            f"Size: {format_file_size(movie.get('fileSize', 0))}, "
            f"Genres: {', '.join(movie.get('genre') or [])})"
        )

    def stream_movie(self, movie_id: str, output_path: str, byte_range: Optional[tuple] = None) -> str:
        """
        Save a movie, or one byte range of it, to a local file.

        Args:
            movie_id: Movie identifier
            output_path: Local file to write
            byte_range: Optional (start, end) tuple; end may be None for "to the end"

        Returns:
            Result message
        """
        headers = {}
        if byte_range is not None:
            start, end = byte_range
            headers['Range'] = f"bytes={start}-{'' if end is None else end}"

        return self._download_to_file(f'/api/movies/{movie_id}/stream', Path(output_path).expanduser(), headers)

    def delete_movie(self, movie_id: str) -> str:
        try:
            response = self._request_with_retry('DELETE', f'/api/movies/{movie_id}')
        except ConnectionError as e:
            return f"Error: {e}"

        if response.status_code == 204:
            return f"Deleted movie {movie_id}"
        return f"Delete failed: {self._format_error(response)}"

    def list_prints(self) -> str:
        """
        List print files, newest first.
        """
        try:
            response = self._request_with_retry('GET', '/api/prints')
        except ConnectionError as e:
            return f"Error: {e}"

        if response.status_code != 200:
            return f"List failed: {self._format_error(response)}"

        prints = response.json()
        if not prints:
            return "No print files found."

        lines = [f"Found {len(prints)} print file(s):"]
        for item in prints:
            lines.append(
                f"  {item['id']}  {item.get('originalFilename', '')}"
                f"  {format_file_size(item.get('fileSize', 0))}"
                f"  {format_timestamp(item.get('uploadedAt', 0))}"
            )
        return "\n".join(lines)

    def upload_print(self, file_path: str, print_id: Optional[str] = None) -> str:
        path, error = self._check_upload_path(file_path)
        if error:
            return f"Error: {error}"

        file_size = path.stat().st_size
        content_type = mimetypes.guess_type(path.name)[0] or 'application/octet-stream'
        data = {'id': print_id} if print_id else {}

        try:
            with ProgressFileWrapper(str(path), file_size, path.name) as wrapped:
                response = self._request_with_retry(
                    'POST',
                    '/api/prints/upload',
                    max_retries=0,
                    files={'file': (path.name, wrapped, content_type)},
                    data=data,
                    timeout=self._calculate_upload_timeout(file_size),
                )
        except ConnectionError as e:
            return f"Error: {e}"

        if response.status_code != 200:
            return f"Upload failed: {self._format_error(response)}"

        item = response.json()
        return f"Uploaded print: {item.get('originalFilename')} (ID: {item['id']}, Size: {format_file_size(item.get('fileSize', 0))})"

    def download_print(self, print_id: str, output_path: Optional[str] = None) -> str:
        """
        Download a print file.

        Args:
            print_id: Print identifier
            output_path: Local destination; defaults to the original filename in the current directory

        Returns:
            Result message
        """
        output = Path(output_path).expanduser() if output_path else None
        return self._download_to_file(f'/api/prints/{print_id}/download', output, {})

    def delete_print(self, print_id: str) -> str:
        try:
            response = self._request_with_retry('DELETE', f'/api/prints/{print_id}')
        except ConnectionError as e:
            return f"Error: {e}"

        if response.status_code == 204:
            return f"Deleted print {print_id}"
        return f"Delete failed: {self._format_error(response)}"

    def _download_to_file(self, endpoint: str, output: Optional[Path], headers: dict) -> str:
        """
        Stream a response body into a local file.

        A partially written file is removed if the transfer fails.
        """
        headers['X-Request-ID'] = str(uuid.uuid4())
        try:
            with self.session.stream('GET', endpoint, headers=headers) as response:
                if response.status_code not in (200, 206):
                    response.read()
                    return f"Download failed: {self._format_error(response)}"

                if output is None:
                    match = _FILENAME_PARAM.search(response.headers.get('content-disposition', ''))
                    name = os.path.basename(match.group(1)) if match else ''
                    output = Path(name or endpoint.rstrip('/').split('/')[-2])

                if output.is_dir():
                    output = output / endpoint.rstrip('/').split('/')[-2]
                output.parent.mkdir(parents=True, exist_ok=True)

                length = response.headers.get('content-length')
                progress = TransferProgress(
                    "Downloading", output.name, int(length) if length and length.isdigit() else None
                )
                try:
                    with open(output, 'wb') as f:
                        for piece in response.iter_bytes():
                            f.write(piece)
                            progress.advance(len(piece))
                except (httpx.HTTPError, OSError):
                    output.unlink(missing_ok=True)
                    raise
                finally:
                    progress.finish()
                written = progress.done

                content_range = response.headers.get('content-range')
        except (httpx.ConnectError, httpx.TimeoutException) as e:
            logger.error(f"Download error: {endpoint} error={e}")
            return "Error: Cannot reach media server. Is it running?"
        except (httpx.HTTPError, OSError) as e:
            logger.error(f"Download failed: {endpoint} error={e}", exc_info=True)
            return f"Error: download interrupted: {e}"

        suffix = f" [{content_range}]" if content_range else ""
        return f"Saved {format_file_size(written)} to {output}{suffix}"
