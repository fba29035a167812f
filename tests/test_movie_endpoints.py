"""Tests for the movie API endpoints."""

import errno
import json

import pytest

from mediaserver.exceptions import StorageError
from mediaserver.repositories.index_store import IndexStore


def upload(client, content, filename='clip.mp4', **fields):
    files = {'file': (filename, content, 'video/mp4')}
    return client.post('/api/upload', files=files, data=fields)


class TestHealth:
    """Liveness endpoint."""

    def test_health(self, client):
        response = client.get('/api/health')
        assert response.status_code == 200
        assert response.json() == {"status": "ok"}

    def test_request_id_header(self, client):
        response = client.get('/api/health')
        assert response.headers.get('X-Request-ID')


class TestUpload:
    """POST /api/upload."""

    def test_upload_with_metadata(self, client, media_dir, video_bytes):
        response = upload(
            client, video_bytes,
            title='Big Buck', genre='Action,Comedy', year='2008',
            rating='PG', director='Sacha', duration='596.5', description='Bunny',
        )

        assert response.status_code == 200
        movie = response.json()
        assert movie['title'] == 'Big Buck'
        assert movie['genre'] == ['Action', 'Comedy']
        assert movie['year'] == '2008'
        assert movie['rating'] == 'PG'
        assert movie['director'] == 'Sacha'
        assert movie['duration'] == 596.5
        assert movie['fileSize'] == 500000
        assert movie['originalFilename'] == 'clip.mp4'
        assert movie['storagePath'] == f"{movie['id']}.mp4"

        stored = media_dir / movie['storagePath']
        assert stored.read_bytes() == video_bytes

        index = json.loads((media_dir / 'movies.json').read_text())
        assert [entry['id'] for entry in index] == [movie['id']]

    def test_defaults(self, client):
        movie = upload(client, b'data', filename='home video.mov').json()

        assert movie['title'] == 'home video.mov'
        assert movie['genre'] == ['Unknown']
        assert movie['rating'] == 'NR'
        assert movie['director'] == 'Unknown'
        assert movie['description'] == ''
        assert movie['year'].isdigit()
        assert movie['createdAt'] > 0
        assert movie['duration'] is None
        assert movie['storagePath'].endswith('.mov')

    def test_generated_ids_are_unique(self, client):
        first = upload(client, b'a').json()['id']
        second = upload(client, b'b').json()['id']
        assert first != second

    def test_caller_identifier_used_verbatim(self, client, media_dir):
        movie = upload(client, b'data', filename='x.mkv', id='my-movie').json()

        assert movie['id'] == 'my-movie'
        assert movie['storagePath'] == 'my-movie.mkv'
        assert (media_dir / 'my-movie.mkv').exists()

    def test_blank_identifier_generates_one(self, client):
        movie = upload(client, b'data', id='   ').json()
        assert movie['id'].strip()
        assert len(movie['id']) == 36

    @pytest.mark.parametrize('identifier', ['../escape', 'a/b', '..'])
    def test_path_like_identifier_rejected(self, client, media_dir, identifier):
        response = upload(client, b'data', id=identifier)

        assert response.status_code == 400
        assert response.json()['code'] == 'INVALID_IDENTIFIER'
        assert list(media_dir.iterdir()) == []

    def test_missing_file_field(self, client, media_dir):
        response = client.post('/api/upload', data={'title': 'No file'})

        assert response.status_code == 400
        assert response.json()['code'] == 'MISSING_FILE'
        assert list(media_dir.iterdir()) == []

    def test_genre_as_json_array(self, client):
        movie = upload(client, b'data', genre='["Sci-Fi","Horror"]').json()
        assert movie['genre'] == ['Sci-Fi', 'Horror']

    def test_genre_as_repeated_fields(self, client):
        response = client.post(
            '/api/upload',
            files={'file': ('clip.mp4', b'data', 'video/mp4')},
            data={'genre': ['Drama', 'Thriller']},
        )
        assert response.json()['genre'] == ['Drama', 'Thriller']

    def test_empty_file_is_accepted(self, client):
        movie = upload(client, b'').json()
        assert movie['fileSize'] == 0

    def test_index_write_failure_leaves_no_file(self, client, media_dir, monkeypatch):
        def failing_replace(src, dst):
            raise OSError(errno.ENOSPC, "No space left on device")

        monkeypatch.setattr("mediaserver.repositories.index_store.os.replace", failing_replace)

        response = upload(client, b'data', id='doomed')

        assert response.status_code == 507
        assert response.json()['code'] == 'STORAGE_FULL'
        assert not (media_dir / 'doomed.mp4').exists()

    def test_no_temp_file_survives_a_failed_upload(self, client, media_dir, monkeypatch):
        def failing_save(self, records):
            raise StorageError("index is read-only")

        monkeypatch.setattr(IndexStore, "save", failing_save)

        response = upload(client, b'data', id='doomed')

        assert response.status_code == 500
        assert response.json()['code'] == 'STORAGE_ERROR'
        assert list(media_dir.iterdir()) == []

    def test_failed_reupload_keeps_existing_file(self, client, media_dir, monkeypatch):
        upload(client, b'original', id='keep')

        def failing_save(self, records):
            raise StorageError("index is read-only")

        monkeypatch.setattr(IndexStore, "save", failing_save)

        assert upload(client, b'replacement', id='keep').status_code == 500
        assert (media_dir / 'keep.mp4').read_bytes() == b'original'

    def test_reupload_replaces_file(self, client, media_dir):
        upload(client, b'original', id='again')
        upload(client, b'replacement', id='again')

        assert (media_dir / 'again.mp4').read_bytes() == b'replacement'
        assert client.get('/api/movies/again/stream').content == b'replacement'

    @pytest.mark.parametrize('identifier,filename', [
        ('movies', 'notes.json'),
        ('MOVIES', 'notes.JSON'),
        ('movies.json', 'backup.bak'),
    ])
    def test_identifier_cannot_overwrite_index(self, client, media_dir, identifier, filename):
        upload(client, b'first', id='first')
        upload(client, b'second', id='second')
        before = (media_dir / 'movies.json').read_text()

        response = upload(client, b'hello', filename=filename, id=identifier)

        assert response.status_code == 400
        assert response.json()['code'] == 'INVALID_IDENTIFIER'
        assert (media_dir / 'movies.json').read_text() == before
        assert not (media_dir / 'movies.json.bak').exists()
        assert sorted(m['id'] for m in client.get('/api/movies').json()) == ['first', 'second']


class TestList:
    """GET /api/movies."""

    def test_empty_library(self, client):
        response = client.get('/api/movies')
        assert response.status_code == 200
        assert response.json() == []

    def test_newest_first(self, client):
        upload(client, b'a', id='t1', createdAt='1000')
        upload(client, b'b', id='t3', createdAt='3000')
        upload(client, b'c', id='t2', createdAt='2000')

        ids = [movie['id'] for movie in client.get('/api/movies').json()]
        assert ids == ['t3', 't2', 't1']

    def test_corrupt_index_lists_empty(self, client, media_dir):
        (media_dir / 'movies.json').write_text('{oops')

        response = client.get('/api/movies')

        assert response.status_code == 200
        assert response.json() == []

    def test_records_written_by_hand_are_served(self, client, media_dir):
        (media_dir / 'movies.json').write_text(json.dumps([
            {"id": "legacy", "title": "Old Film", "genre": "Noir", "createdAt": 5},
        ]))

        movies = client.get('/api/movies').json()

        assert movies[0]['storagePath'] == 'legacy.mp4'
        assert movies[0]['genre'] == ['Noir']


class TestStream:
    """GET /api/movies/{id}/stream."""

    @pytest.fixture
    def movie_id(self, client, video_bytes):
        return upload(client, video_bytes, id='clip').json()['id']

    def test_full_body_without_range(self, client, movie_id, video_bytes):
        response = client.get(f'/api/movies/{movie_id}/stream')

        assert response.status_code == 200
        assert response.headers['content-type'] == 'video/mp4'
        assert response.headers['content-length'] == '500000'
        assert response.headers['accept-ranges'] == 'bytes'
        assert response.content == video_bytes

    def test_closed_range(self, client, movie_id, video_bytes):
        response = client.get(f'/api/movies/{movie_id}/stream', headers={'Range': 'bytes=0-999'})

        assert response.status_code == 206
        assert response.headers['content-range'] == 'bytes 0-999/500000'
        assert response.headers['content-length'] == '1000'
        assert response.headers['accept-ranges'] == 'bytes'
        assert response.content == video_bytes[:1000]

    def test_middle_range(self, client, movie_id, video_bytes):
        response = client.get(f'/api/movies/{movie_id}/stream', headers={'Range': 'bytes=1000-1099'})

        assert response.status_code == 206
        assert response.content == video_bytes[1000:1100]

    def test_open_ended_range(self, client, movie_id, video_bytes):
        response = client.get(f'/api/movies/{movie_id}/stream', headers={'Range': 'bytes=100-'})

        assert response.status_code == 206
        assert response.headers['content-range'] == 'bytes 100-499999/500000'
        assert response.headers['content-length'] == '499900'
        assert response.content == video_bytes[100:]

    def test_end_past_file_is_clamped(self, client, movie_id, video_bytes):
        response = client.get(f'/api/movies/{movie_id}/stream', headers={'Range': 'bytes=499990-600000'})

        assert response.status_code == 206
        assert response.headers['content-range'] == 'bytes 499990-499999/500000'
        assert response.content == video_bytes[499990:]

    def test_suffix_range(self, client, movie_id, video_bytes):
        response = client.get(f'/api/movies/{movie_id}/stream', headers={'Range': 'bytes=-10'})

        assert response.status_code == 206
        assert response.content == video_bytes[-10:]

    def test_range_past_end(self, client, movie_id):
        response = client.get(f'/api/movies/{movie_id}/stream', headers={'Range': 'bytes=500000-'})

        assert response.status_code == 416
        assert response.headers['content-range'] == 'bytes */500000'
        assert response.json()['code'] == 'RANGE_NOT_SATISFIABLE'

    def test_malformed_range(self, client, movie_id):
        response = client.get(f'/api/movies/{movie_id}/stream', headers={'Range': 'bytes=abc-def'})

        assert response.status_code == 400
        assert response.json()['code'] == 'INVALID_RANGE'

    def test_unknown_movie(self, client):
        response = client.get('/api/movies/nope/stream')

        assert response.status_code == 404
        assert response.json()['code'] == 'RECORD_NOT_FOUND'

    def test_file_removed_out_of_band(self, client, media_dir, movie_id):
        (media_dir / 'clip.mp4').unlink()

        response = client.get(f'/api/movies/{movie_id}/stream')

        assert response.status_code == 404
        assert response.json()['code'] == 'STORED_FILE_MISSING'

    def test_storage_path_is_authoritative(self, client, media_dir, video_bytes):
        (media_dir / 'renamed.mkv').write_bytes(video_bytes[:50])
        (media_dir / 'movies.json').write_text(json.dumps([
            {"id": "abc", "title": "Renamed", "storagePath": "renamed.mkv", "createdAt": 1},
        ]))

        response = client.get('/api/movies/abc/stream')

        assert response.status_code == 200
        assert response.headers['content-type'] == 'video/x-matroska'
        assert response.content == video_bytes[:50]

    def test_storage_path_outside_directory(self, client, media_dir, tmp_path):
        (tmp_path / 'secret.mp4').write_bytes(b'secret')
        (media_dir / 'movies.json').write_text(json.dumps([
            {"id": "evil", "storagePath": "../secret.mp4", "createdAt": 1},
        ]))

        response = client.get('/api/movies/evil/stream')

        assert response.status_code == 404
        assert response.json()['code'] == 'STORED_FILE_MISSING'

    def test_static_media_mount(self, client, movie_id, video_bytes):
        response = client.get('/media/clip.mp4')

        assert response.status_code == 200
        assert response.content == video_bytes


class TestDelete:
    """DELETE /api/movies/{id}."""

    def test_delete_removes_record_and_file(self, client, media_dir):
        movie_id = upload(client, b'data', id='gone').json()['id']

        response = client.delete(f'/api/movies/{movie_id}')

        assert response.status_code == 204
        assert response.content == b''
        assert not (media_dir / 'gone.mp4').exists()
        assert client.get('/api/movies').json() == []

    def test_delete_unknown(self, client):
        response = client.delete('/api/movies/nope')

        assert response.status_code == 404
        assert response.json()['code'] == 'RECORD_NOT_FOUND'

    def test_delete_when_file_already_gone(self, client, media_dir):
        upload(client, b'data', id='half')
        (media_dir / 'half.mp4').unlink()

        response = client.delete('/api/movies/half')

        assert response.status_code == 204
        assert client.get('/api/movies').json() == []

    def test_delete_drops_duplicates(self, client, media_dir):
        upload(client, b'one', filename='twin.mp4', id='twin')
        upload(client, b'two', filename='twin.mkv', id='twin')

        assert client.delete('/api/movies/twin').status_code == 204
        assert client.get('/api/movies').json() == []
        assert not (media_dir / 'twin.mp4').exists()
        assert not (media_dir / 'twin.mkv').exists()


def test_upload_stream_delete_scenario(client, video_bytes):
    """Upload, seek into, then delete a movie."""
    created = upload(client, video_bytes, genre='Action,Comedy')
    assert created.status_code == 200
    movie = created.json()
    assert movie['genre'] == ['Action', 'Comedy']
    assert movie['fileSize'] == 500000

    listed = client.get('/api/movies').json()
    assert [m['id'] for m in listed] == [movie['id']]

    ranged = client.get(f"/api/movies/{movie['id']}/stream", headers={'Range': 'bytes=0-999'})
    assert ranged.status_code == 206
    assert ranged.headers['content-range'] == 'bytes 0-999/500000'
    assert ranged.content == video_bytes[:1000]

    assert client.delete(f"/api/movies/{movie['id']}").status_code == 204
    assert client.get(f"/api/movies/{movie['id']}/stream").status_code == 404
