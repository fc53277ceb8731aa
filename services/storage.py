"""Poster blob storage on the local filesystem."""
import logging
import secrets
import time
from pathlib import Path, PurePosixPath
from typing import Optional, Iterator
from config import settings
from services.errors import InvalidUpload, StorageError

logger = logging.getLogger(__name__)

MEDIA_URL_PREFIX = "/media"


def bucket_root() -> Path:
    return Path(settings.bucket_path).resolve()


def _resolve(file_path: str) -> Path:
    """Absolute path of a blob; rejects paths leaving the bucket"""
    root = bucket_root()
    relative = PurePosixPath(file_path)
    if relative.is_absolute() or ".." in relative.parts or not relative.parts:
        raise StorageError(f"Invalid storage path: {file_path}")
    full_path = (root / Path(*relative.parts)).resolve()
    if root not in full_path.parents:
        raise StorageError(f"Invalid storage path: {file_path}")
    return full_path


def _extension(filename: str) -> str:
    if not filename or "." not in filename:
        return ""
    return filename.rsplit(".", 1)[-1].lower()


def validate_poster(content: bytes, filename: str):
    """Checks size and extension of an uploaded poster"""
    if not content:
        raise InvalidUpload("Poster file is empty.")
    if len(content) > settings.MAX_POSTER_BYTES:
        limit_mb = settings.MAX_POSTER_BYTES // (1024 * 1024)
        raise InvalidUpload(f"Poster image must be less than {limit_mb}MB.")
    if _extension(filename) not in settings.poster_extensions:
        allowed = ", ".join(settings.poster_extensions)
        raise InvalidUpload(f"Poster must be one of: {allowed}.")


def upload_file(content: bytes, filename: str, folder: str = "posters") -> str:
    """
    Store a file in the bucket.

    Returns the path inside the bucket, e.g. ``posters/k3j2h1_1718000000000.png``.
    """
    validate_poster(content, filename)

    file_name = f"{secrets.token_hex(6)}_{int(time.time() * 1000)}.{_extension(filename)}"
    file_path = f"{folder}/{file_name}"
    target = _resolve(file_path)

    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(content)
    except OSError as e:
        raise StorageError(f"Upload failed: {e}") from e

    logger.info(f"Stored {file_path} ({len(content)} bytes)")
    return file_path


def file_exists(file_path: Optional[str]) -> bool:
    if not file_path:
        return False
    try:
        return _resolve(file_path).is_file()
    except StorageError:
        return False


def get_public_url(file_path: Optional[str]) -> Optional[str]:
    if not file_path:
        return None
    return f"{MEDIA_URL_PREFIX}/{settings.STORAGE_BUCKET}/{file_path}"


def delete_file(file_path: str):
    """Remove a blob; raises StorageError if it cannot be removed"""
    target = _resolve(file_path)
    try:
        target.unlink()
    except FileNotFoundError as e:
        raise StorageError(f"Delete failed: {file_path} does not exist") from e
    except OSError as e:
        raise StorageError(f"Delete failed: {e}") from e
    logger.info(f"Deleted {file_path}")


def iter_files(folder: str = "posters", older_than: Optional[float] = None) -> Iterator[str]:
    """Paths of blobs under a folder, optionally only those untouched for older_than seconds"""
    root = bucket_root()
    base = root / folder
    if not base.is_dir():
        return
    now = time.time()
    for path in sorted(base.rglob("*")):
        if not path.is_file():
            continue
        if older_than is not None and now - path.stat().st_mtime < older_than:
            continue
        yield path.relative_to(root).as_posix()
