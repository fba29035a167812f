"""Tests for the print file API endpoints."""

import json


def upload_print(client, content=b'solid benchy\nendsolid', filename='benchy.stl', content_type='model/stl', **fields):
    files = {'file': (filename, content, content_type)}
    return client.post('/api/prints/upload', files=files, data=fields)


def test_upload_print(client, prints_dir):
    response = upload_print(client)

    assert response.status_code == 200
    record = response.json()
    assert record['originalFilename'] == 'benchy.stl'
    assert record['storagePath'] == f"{record['id']}.stl"
    assert record['fileSize'] == len(b'solid benchy\nendsolid')
    assert record['mimeType'] == 'model/stl'
    assert record['uploadedAt'] > 0
    assert (prints_dir / record['storagePath']).exists()

    index = json.loads((prints_dir / 'prints.json').read_text())
    assert index[0]['id'] == record['id']


def test_upload_print_with_identifier(client, prints_dir):
    record = upload_print(client, filename='case.3mf', id='case').json()

    assert record['id'] == 'case'
    assert (prints_dir / 'case.3mf').exists()


def test_upload_print_without_extension(client, prints_dir):
    record = upload_print(client, filename='Makefile', id='noext').json()

    assert record['storagePath'] == 'noext'
    assert (prints_dir / 'noext').exists()


def test_upload_print_cannot_overwrite_index(client, prints_dir):
    upload_print(client, id='benchy')
    before = (prints_dir / 'prints.json').read_text()

    response = upload_print(client, content=b'not an index', filename='Makefile', id='prints.json')

    assert response.status_code == 400
    assert response.json()['code'] == 'INVALID_IDENTIFIER'
    assert (prints_dir / 'prints.json').read_text() == before
    assert [p['id'] for p in client.get('/api/prints').json()] == ['benchy']


def test_upload_print_missing_file(client, prints_dir):
    response = client.post('/api/prints/upload', data={'id': 'x'})

    assert response.status_code == 400
    assert response.json()['code'] == 'MISSING_FILE'
    assert list(prints_dir.iterdir()) == []


def test_prints_and_movies_are_separate(client):
    upload_print(client)

    assert client.get('/api/movies').json() == []
    assert len(client.get('/api/prints').json()) == 1


def test_list_prints_newest_first(client, prints_dir):
    (prints_dir / 'prints.json').write_text(json.dumps([
        {"id": "old", "storagePath": "old.stl", "uploadedAt": 1},
        {"id": "new", "storagePath": "new.stl", "uploadedAt": 2},
    ]))

    ids = [record['id'] for record in client.get('/api/prints').json()]
    assert ids == ['new', 'old']


def test_download_print(client):
    payload = b'G28\nG1 X10 Y10\n'
    record = upload_print(client, content=payload, filename='calibration.gcode', content_type='text/plain').json()

    response = client.get(f"/api/prints/{record['id']}/download")

    assert response.status_code == 200
    assert response.content == payload
    assert response.headers['content-disposition'] == 'attachment; filename="calibration.gcode"'
    assert response.headers['content-length'] == str(len(payload))
    assert response.headers['content-type'].startswith('text/x-gcode')


def test_download_alias_route(client):
    upload_print(client, id='benchy')

    response = client.get('/prints/benchy/download')

    assert response.status_code == 200
    assert response.content == b'solid benchy\nendsolid'


def test_download_falls_back_to_uploaded_mime_type(client):
    upload_print(client, filename='mesh.weird', content_type='application/x-weird', id='mesh')

    response = client.get('/api/prints/mesh/download')

    assert response.headers['content-type'] == 'application/x-weird'


def test_download_unknown_print(client):
    response = client.get('/api/prints/missing/download')

    assert response.status_code == 404
    assert response.json()['code'] == 'RECORD_NOT_FOUND'


def test_download_missing_file(client, prints_dir):
    upload_print(client, id='lost')
    (prints_dir / 'lost.stl').unlink()

    response = client.get('/api/prints/lost/download')

    assert response.status_code == 404
    assert response.json()['code'] == 'STORED_FILE_MISSING'


def test_delete_print(client, prints_dir):
    upload_print(client, id='gone')

    response = client.delete('/api/prints/gone')

    assert response.status_code == 204
    assert not (prints_dir / 'gone.stl').exists()
    assert client.get('/api/prints').json() == []
    assert client.delete('/api/prints/gone').status_code == 404
