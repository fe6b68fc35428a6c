"""Object storage for file bytes, backed by a Supabase Storage bucket.

Keys are plain object paths such as ``"3/my-project/src/main.py"``.
Every function raises :class:`StorageError` when the bucket call fails.
"""
import logging

from cloud_ide.core.config import settings
from cloud_ide.utils.supabase_client import get_supabase

logger = logging.getLogger(__name__)

FOLDER_PLACEHOLDER = ".emptyFolderPlaceholder"


class StorageError(Exception):
    pass


def _bucket():
    return get_supabase().storage.from_(settings.storage_bucket)


def store_object(key: str, data: bytes, content_type: str | None = None) -> str:
    """Write ``data`` under ``key``, replacing any existing object."""
    try:
        res = _bucket().upload(
            key,
            data,
            file_options={
                "content-type": content_type or "application/octet-stream",
                "upsert": "true",
            },
        )
    except Exception as e:
        logger.exception(f"Upload failed for '{key}'")
        raise StorageError(f"Failed to store '{key}': {e}") from e

    logger.info(f"Stored {len(data)} bytes → {res.path}")
    return res.path


def read_object(key: str) -> bytes:
    try:
        return _bucket().download(key)
    except Exception as e:
        logger.exception(f"Error when getting file '{key}'")
        raise StorageError(f"Failed to read '{key}': {e}") from e


def remove_object(key: str) -> None:
    try:
        _bucket().remove([key])
    except Exception as e:
        logger.exception(f"Error when removing file '{key}'")
        raise StorageError(f"Failed to remove '{key}': {e}") from e
    logger.info(f"Removed '{key}' from storage")


def create_folder_placeholder(prefix: str) -> str:
    """Materialise an empty folder, the way the Supabase dashboard does."""
    return store_object(f"{prefix}{FOLDER_PLACEHOLDER}", b"", "text/plain")
