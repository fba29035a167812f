"""Tests for the orphaned file scanner."""

import asyncio
import io
import os
import time

import pytest

from mediaserver.cleanup_task import OrphanedFileScanner


def _age(path, seconds):
    past = time.time() - seconds
    os.utime(path, (past, past))


def _ingest(service, identifier):
    return asyncio.run(service.ingest(io.BytesIO(b"data"), f"{identifier}.mp4", identifier=identifier))


def test_reports_unreferenced_files(movie_service, media_dir):
    _ingest(movie_service, "kept")
    orphan = media_dir / "stray.mp4"
    orphan.write_bytes(b"x")
    _age(orphan, 7200)
    _age(media_dir / "kept.mp4", 7200)

    scanner = OrphanedFileScanner([movie_service], interval_seconds=60, grace_seconds=3600)
    report = scanner.scan_once()

    assert report == {"movie": [orphan]}
    assert orphan.exists()


def test_index_and_backup_files_are_not_orphans(movie_service, media_dir):
    _ingest(movie_service, "kept")
    (media_dir / "movies.json.bak").write_text("[]")
    (media_dir / ".movies.json.abc.tmp").write_text("[]")
    for path in media_dir.iterdir():
        _age(path, 7200)

    scanner = OrphanedFileScanner([movie_service], interval_seconds=60)

    assert scanner.scan_once() == {"movie": []}


def test_recent_files_are_left_alone(movie_service, media_dir):
    _ingest(movie_service, "kept")
    (media_dir / "uploading.mp4").write_bytes(b"x")

    scanner = OrphanedFileScanner([movie_service], interval_seconds=60, grace_seconds=3600)

    assert scanner.scan_once() == {"movie": []}


def test_delete_mode_removes_orphans(movie_service, print_service, media_dir, prints_dir):
    _ingest(movie_service, "kept")
    asyncio.run(print_service.ingest(io.BytesIO(b"solid"), "kept.stl", identifier="kept"))
    movie_orphan = media_dir / "stray.mp4"
    print_orphan = prints_dir / "stray.stl"
    for path in (movie_orphan, print_orphan):
        path.write_bytes(b"x")
    for path in list(media_dir.iterdir()) + list(prints_dir.iterdir()):
        _age(path, 7200)

    scanner = OrphanedFileScanner(
        [movie_service, print_service], interval_seconds=60, grace_seconds=3600, delete_orphans=True
    )
    report = scanner.scan_once()

    assert report == {"movie": [movie_orphan], "print": [print_orphan]}
    assert not movie_orphan.exists()
    assert not print_orphan.exists()
    assert (media_dir / "kept.mp4").exists()
    assert (prints_dir / "kept.stl").exists()


def test_corrupt_index_deletes_nothing(movie_service, media_dir):
    _ingest(movie_service, "m1")
    _ingest(movie_service, "m2")
    (media_dir / "movies.json").write_text("{ truncated")
    for path in media_dir.iterdir():
        _age(path, 7200)

    scanner = OrphanedFileScanner([movie_service], interval_seconds=60, delete_orphans=True)

    assert scanner.scan_once() == {"movie": []}
    assert (media_dir / "m1.mp4").exists()
    assert (media_dir / "m2.mp4").exists()
    assert (media_dir / "movies.json").read_text() == "{ truncated"


@pytest.mark.parametrize("index_text", [None, "[]", '{"id": "m1"}'])
def test_index_without_records_deletes_nothing(movie_service, media_dir, index_text):
    if index_text is not None:
        (media_dir / "movies.json").write_text(index_text)
    stored = media_dir / "m1.mp4"
    stored.write_bytes(b"x")
    _age(stored, 7200)

    scanner = OrphanedFileScanner([movie_service], interval_seconds=60, delete_orphans=True)

    assert scanner.scan_once() == {"movie": []}
    assert stored.exists()


def test_stale_upload_temp_file_is_an_orphan(movie_service, media_dir):
    _ingest(movie_service, "kept")
    leftover = media_dir / ".upload.0f3c.part"
    leftover.write_bytes(b"half an upload")
    for path in media_dir.iterdir():
        _age(path, 7200)

    scanner = OrphanedFileScanner([movie_service], interval_seconds=60)

    assert scanner.scan_once() == {"movie": [leftover]}


def test_start_and_stop(movie_service):
    async def run():
        scanner = OrphanedFileScanner([movie_service], interval_seconds=3600)
        await scanner.start()
        assert scanner._running
        await scanner.stop()
        assert not scanner._running

    asyncio.run(run())
