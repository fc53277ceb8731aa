# tests/test_storage.py

import os
import time

import pytest

from config import settings
from conftest import login, make_event
from services import storage
from services.errors import InvalidUpload, StorageError
from services.scheduler import sweep_orphaned_posters

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


def _upload(client, headers, filename="poster.png", content=PNG_BYTES, content_type="image/png"):
    return client.post(
        "/api/storage/posters",
        files={"file": (filename, content, content_type)},
        headers=headers,
    )


def test_upload_and_serve_poster(client, organizer):
    headers = login(client, organizer)

    response = _upload(client, headers)

    assert response.status_code == 201
    body = response.json()
    assert body["path"].startswith("posters/")
    assert body["path"].endswith(".png")
    assert body["url"] == f"/media/{settings.STORAGE_BUCKET}/{body['path']}"

    served = client.get(body["url"])
    assert served.status_code == 200
    assert served.content == PNG_BYTES


def test_upload_rejects_other_file_types(client, organizer):
    response = _upload(client, login(client, organizer), filename="notes.txt", content_type="text/plain")

    assert response.status_code == 400
    assert response.json()["code"] == "invalid_upload"


def test_upload_rejects_oversized_poster(client, organizer, monkeypatch):
    monkeypatch.setattr(settings, "MAX_POSTER_BYTES", 16)

    response = _upload(client, login(client, organizer))

    assert response.status_code == 400


def test_only_organizers_upload(client, student):
    assert _upload(client, login(client, student)).status_code == 403


def test_event_with_poster_end_to_end(client, organizer):
    headers = login(client, organizer)
    path = _upload(client, headers).json()["path"]

    created = client.post("/api/organizer/events", headers=headers, json={
        "title": "Film Club",
        "capacity": 30,
        "event_date": "2030-05-01",
        "poster_path": path,
    }).json()

    assert created["poster_url"].endswith(path)
    redirect = client.get(f"/api/events/{created['id']}/poster", follow_redirects=False)
    assert redirect.status_code == 307
    assert redirect.headers["location"] == created["poster_url"]

    client.delete(f"/api/organizer/events/{created['id']}", headers=headers)
    assert not storage.file_exists(path)


def test_create_event_with_unknown_poster(client, organizer):
    response = client.post("/api/organizer/events", headers=login(client, organizer), json={
        "title": "Film Club",
        "capacity": 30,
        "event_date": "2030-05-01",
        "poster_path": "posters/missing.png",
    })

    assert response.status_code == 400


@pytest.mark.parametrize("path", ["../escape.png", "/etc/passwd", "posters/../../x.png"])
def test_paths_cannot_leave_the_bucket(path):
    assert not storage.file_exists(path)
    with pytest.raises(StorageError):
        storage.delete_file(path)


def test_validate_poster():
    storage.validate_poster(PNG_BYTES, "photo.JPEG")
    with pytest.raises(InvalidUpload):
        storage.validate_poster(b"", "photo.png")
    with pytest.raises(InvalidUpload):
        storage.validate_poster(PNG_BYTES, "photo")


def test_delete_missing_file_raises():
    with pytest.raises(StorageError):
        storage.delete_file("posters/never_uploaded.png")


def test_sweep_removes_only_orphans(db, session_factory, organizer):
    kept = storage.upload_file(PNG_BYTES, "kept.png")
    orphan = storage.upload_file(PNG_BYTES, "orphan.png")
    make_event(db, organizer, poster_path=kept)

    removed = sweep_orphaned_posters(session_factory, min_age_seconds=0)

    assert removed == 1
    assert storage.file_exists(kept)
    assert not storage.file_exists(orphan)


def test_sweep_skips_fresh_uploads(session_factory):
    fresh = storage.upload_file(PNG_BYTES, "fresh.png")
    stale = storage.upload_file(PNG_BYTES, "stale.png")
    an_hour_ago = time.time() - 3600
    os.utime(storage.bucket_root() / stale, (an_hour_ago, an_hour_ago))

    removed = sweep_orphaned_posters(session_factory, min_age_seconds=600)

    assert removed == 1
    assert storage.file_exists(fresh)
    assert not storage.file_exists(stale)
