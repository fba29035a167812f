"""Shared pytest fixtures for all tests."""

import pytest
from fastapi.testclient import TestClient

from cli.config import Config
from mediaserver.main import create_app
from mediaserver.services.movie_service import MovieService
from mediaserver.services.print_service import PrintService


@pytest.fixture
def media_dir(tmp_path):
    """Temporary movie directory."""
    path = tmp_path / 'media'
    path.mkdir()
    return path


@pytest.fixture
def prints_dir(tmp_path):
    """Temporary print file directory."""
    path = tmp_path / 'prints'
    path.mkdir()
    return path


@pytest.fixture
def app(media_dir, prints_dir):
    """Application wired to the temporary directories, orphan scanning off."""
    return create_app(media_dir=str(media_dir), prints_dir=str(prints_dir), orphan_scan_interval=0)


@pytest.fixture
def client(app):
    """FastAPI test client."""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def movie_service(media_dir):
    return MovieService.for_directory(media_dir)


@pytest.fixture
def print_service(prints_dir):
    return PrintService.for_directory(prints_dir)


@pytest.fixture
def video_bytes():
    """
    500000 bytes with a repeating, position-dependent pattern so that
    ranged reads can be checked byte for byte.
    """
    return bytes(i % 251 for i in range(500000))


@pytest.fixture
def temp_config(tmp_path):
    """
    Config instance backed by a temporary file.
    """
    return Config(tmp_path / '.homeshelf' / 'config.json')


@pytest.fixture
def sample_file(tmp_path):
    """
    Create a small sample movie file for client uploads.
    """
    file_path = tmp_path / 'clip.mp4'
    file_path.write_bytes(b'\x00\x00\x00\x18ftypmp42' + b'\x01' * 100)
    return file_path
