# questionnaire_api/services/writer.py
from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable

from questionnaire_api.errors import PersistenceError
from questionnaire_api.services.storage import StorageBackend

logger = logging.getLogger(__name__)

ARTIFACT_FILE_NAME = "questionnaire.json"
MAX_COLLISION_ATTEMPTS = 100

_UNSAFE_CHARS_RE = re.compile(r"[^A-Za-z0-9_-]")


# ---------- Paths & helpers ----------

def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def iso_timestamp(now: datetime) -> str:
    """2024-05-01T12:30:45.123Z (millisecond precision, UTC)."""
    return now.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def timestamp_slug(now: datetime) -> str:
    return iso_timestamp(now).replace(":", "-").replace(".", "-")


def sanitize(name: str) -> str:
    """Replace anything outside ASCII [A-Za-z0-9_-] with '_', then lowercase."""
    return _UNSAFE_CHARS_RE.sub("_", name).lower()


def artifact_dir_name(project_name: str, now: datetime) -> str:
    return f"{sanitize(project_name)}_{timestamp_slug(now)}"


@dataclass(frozen=True)
class PersistedArtifact:
    path: str  # client-facing location
    dir_name: str
    timestamp: str


# ---------- Artifact writer ----------

class ArtifactWriter:
    """
    Writes one JSON document per submission into its own directory:
      <storage_root>/<sanitized name>_<timestamp slug>/questionnaire.json
    A directory that already exists is never reused; the writer moves on
    to <dir>-2, <dir>-3, ...
    """

    def __init__(self, storage: StorageBackend,
                 clock: Callable[[], datetime] = utc_now,
                 file_name: str = ARTIFACT_FILE_NAME):
        self.storage = storage
        self.clock = clock
        self.file_name = file_name

    def _reserve_dir(self, base_name: str) -> str:
        for attempt in range(1, MAX_COLLISION_ATTEMPTS + 1):
            dir_name = base_name if attempt == 1 else f"{base_name}-{attempt}"
            try:
                self.storage.make_dir(dir_name)
            except FileExistsError:
                logger.info("Artifact directory %s already exists, trying next suffix", dir_name)
                continue
            return dir_name
        raise PersistenceError(detail=f"no free directory name for {base_name}")

    def persist(self, project_name: str, data: Any) -> PersistedArtifact:
        now = self.clock()
        timestamp = iso_timestamp(now)
        base_name = artifact_dir_name(project_name, now)

        try:
            content = json.dumps(
                {"projectName": project_name, "timestamp": timestamp, "data": data},
                ensure_ascii=False,
                indent=2,
                allow_nan=False,
            )
        except (TypeError, ValueError) as e:
            raise PersistenceError(detail=f"serialization failed: {e}") from e

        try:
            self.storage.ensure_root()
            dir_name = self._reserve_dir(base_name)
        except OSError as e:
            raise PersistenceError(detail=f"could not create directory: {e}") from e

        rel_path = f"{dir_name}/{self.file_name}"
        try:
            self.storage.write_text(rel_path, content)
        except Exception as e:
            self.storage.remove_dir(dir_name)
            raise PersistenceError(detail=f"write failed: {e}") from e

        logger.info("Saved questionnaire for %r to %s", project_name, rel_path)
        return PersistedArtifact(
            path=self.storage.public_path(rel_path),
            dir_name=dir_name,
            timestamp=timestamp,
        )
