"""
Blob Storage Module

Path-addressed object store for project and task attachments. Objects live
under ``settings.STORAGE_ROOT`` using the key layout

    projects/{project_id}/{file_id}-{file_name}
    projects/{project_id}/tasks/{task_id}/{file_id}-{file_name}

Deleting a key that does not exist is not an error.
"""
import logging
from pathlib import Path
from typing import Optional

from agrocoop.core.config import settings

logger = logging.getLogger(__name__)


def object_key(project_id: str, file_id: str, file_name: str, task_id: Optional[str] = None) -> str:
    prefix = f"projects/{project_id}/"
    if task_id:
        prefix += f"tasks/{task_id}/"
    # Only the base name is kept so a crafted name cannot escape the prefix
    return f"{prefix}{file_id}-{Path(file_name).name}"


class BlobStore:
    """Local filesystem implementation of the blob store."""

    def __init__(self, root: str, public_url: str):
        self.root = Path(root)
        self.public_url = public_url.rstrip("/")

    def _path(self, key: str) -> Path:
        path = (self.root / key).resolve()
        if self.root.resolve() not in path.parents:
            raise ValueError(f"Invalid storage key: {key}")
        return path

    def url_for(self, key: str) -> str:
        return f"{self.public_url}/{key}"

    def exists(self, key: str) -> bool:
        return self._path(key).is_file()

    def save(self, key: str, data: bytes) -> str:
        path = self._path(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
        logger.info("Stored %d bytes at %s", len(data), key)
        return self.url_for(key)

    def delete(self, key: str) -> None:
        try:
            self._path(key).unlink()
        except FileNotFoundError:
            logger.info("Object %s already absent, nothing to delete", key)


_store: Optional[BlobStore] = None


def get_blob_store() -> BlobStore:
    """Process-wide store built once from settings."""
    global _store
    if _store is None:
        _store = BlobStore(settings.STORAGE_ROOT, settings.STORAGE_PUBLIC_URL)
    return _store
