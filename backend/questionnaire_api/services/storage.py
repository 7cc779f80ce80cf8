# questionnaire_api/services/storage.py
"""
Storage layer for submitted questionnaires, with local and cloud backends.
Set STORAGE_BACKEND to 'local' or 's3' to switch.

Paths handed to a backend are always relative to its root, using '/'.
"""
from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import Optional

from questionnaire_api.config import Settings

logger = logging.getLogger(__name__)


class StorageBackend:
    """Abstract storage interface"""

    def write_file(self, path: str, content: bytes) -> str:
        """Write file atomically, return its location"""
        raise NotImplementedError

    def write_text(self, path: str, content: str) -> str:
        return self.write_file(path, content.encode("utf-8"))

    def ensure_root(self) -> None:
        """Create the storage root if the backend has one; idempotent."""

    def make_dir(self, path: str) -> None:
        """Create a directory for one submission; FileExistsError if it is taken."""
        raise NotImplementedError

    def remove_dir(self, path: str) -> None:
        """Drop an empty directory left behind by a failed write."""
        raise NotImplementedError

    def public_path(self, path: str) -> str:
        """Location string safe to hand back to HTTP clients"""
        raise NotImplementedError


class LocalStorage(StorageBackend):
    """Local filesystem storage"""

    def __init__(self, base_dir: str | Path = "json_files",
                 display_root: Optional[str | Path] = None):
        self.base_dir = Path(base_dir)
        self.display_root = Path(display_root) if display_root is not None else None

    def _full_path(self, path: str) -> Path:
        return self.base_dir / path

    def ensure_root(self) -> None:
        self.base_dir.mkdir(parents=True, exist_ok=True)

    def write_file(self, path: str, content: bytes) -> str:
        full_path = self._full_path(path)
        full_path.parent.mkdir(parents=True, exist_ok=True)

        # temp file in the same directory so the rename never crosses devices
        fd, tmp_name = tempfile.mkstemp(
            dir=full_path.parent, prefix=f".{full_path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(content)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, full_path)
        except BaseException:
            try:
                os.unlink(tmp_name)
            except FileNotFoundError:
                pass
            raise
        return str(full_path)

    def make_dir(self, path: str) -> None:
        self._full_path(path).mkdir()

    def remove_dir(self, path: str) -> None:
        try:
            self._full_path(path).rmdir()
        except OSError:
            logger.warning("Could not remove directory %s after failed write", path, exc_info=True)

    def public_path(self, path: str) -> str:
        full_path = self._full_path(path).resolve()
        root = (self.display_root or Path.cwd()).resolve()
        try:
            rel = full_path.relative_to(root)
        except ValueError:
            # outside the display root: show it from the storage root's name down
            rel = Path(self.base_dir.resolve().name) / path
        return "/" + rel.as_posix()


class S3Storage(StorageBackend):
    """AWS S3 storage backend"""

    def __init__(self, bucket: str, region: str = "ap-southeast-1", prefix: str = ""):
        self.bucket = bucket
        self.region = region
        self.prefix = prefix.strip("/")
        self._client = None

    @property
    def client(self):
        """Lazy load boto3 client"""
        if self._client is None:
            import boto3
            self._client = boto3.client("s3", region_name=self.region)
        return self._client

    def _s3_key(self, path: str) -> str:
        """Convert path to S3 key"""
        key = path.replace("\\", "/").lstrip("/")
        return f"{self.prefix}/{key}" if self.prefix else key

    def write_file(self, path: str, content: bytes) -> str:
        # a single PUT is atomic; readers see the old object or the new one
        key = self._s3_key(path)
        self.client.put_object(
            Bucket=self.bucket,
            Key=key,
            Body=content,
            ContentType="application/json" if key.endswith(".json") else "application/octet-stream",
        )
        return f"s3://{self.bucket}/{key}"

    def make_dir(self, path: str) -> None:
        # S3 has no directories; a taken prefix counts as an existing one
        prefix = self._s3_key(path).rstrip("/") + "/"
        response = self.client.list_objects_v2(Bucket=self.bucket, Prefix=prefix, MaxKeys=1)
        if response.get("KeyCount", 0) > 0:
            raise FileExistsError(prefix)

    def remove_dir(self, path: str) -> None:
        pass

    def public_path(self, path: str) -> str:
        return f"s3://{self.bucket}/{self._s3_key(path)}"


def get_storage(settings: Settings) -> StorageBackend:
    """Build the storage backend selected by settings"""
    if settings.storage_backend == "s3":
        storage: StorageBackend = S3Storage(bucket=settings.s3_bucket, region=settings.aws_region)
        logger.info("Storage: S3 bucket=%s", settings.s3_bucket)
    else:
        storage = LocalStorage(base_dir=settings.storage_root)
        logger.info("Storage: local filesystem at %s", settings.storage_root)
    return storage
