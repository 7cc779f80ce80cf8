# questionnaire_api/client.py
"""
Client for POST /api/save-questionnaire.

Answers may carry file handles (uploaded attachments, open files, paths);
only their display name goes over the wire.
"""
from __future__ import annotations

import io
import logging
import os
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

import httpx

logger = logging.getLogger(__name__)

DEFAULT_API_URL = os.getenv("API_URL", "http://localhost:3001")
CONNECT_ERROR_MESSAGE = "Could not connect to server. Please ensure the server is running."


class SaveQuestionnaireError(Exception):
    pass


def display_value(value: Any) -> Any:
    """Replace a file-like answer with its file name; leave everything else alone."""
    if isinstance(value, os.PathLike):
        return Path(value).name
    filename = getattr(value, "filename", None)  # UploadFile and friends
    if isinstance(filename, str):
        return filename
    if isinstance(value, io.IOBase) and isinstance(getattr(value, "name", None), str):
        return os.path.basename(value.name)
    return value


def prepare_entries(entries: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return [{**entry, "value": display_value(entry.get("value"))} for entry in entries]


class QuestionnaireClient:
    def __init__(self, base_url: str = DEFAULT_API_URL, timeout: float = 30.0,
                 transport: Optional[httpx.BaseTransport] = None):
        self._http = httpx.Client(base_url=base_url, timeout=timeout, transport=transport)

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> "QuestionnaireClient":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def save(self, data: Any, project_name: str, schema_version: Optional[str] = None) -> str:
        """Post one questionnaire and return the server-side filePath."""
        body: Dict[str, Any] = {"data": data, "projectName": project_name}
        if schema_version:
            body["schemaVersion"] = schema_version

        try:
            response = self._http.post("/api/save-questionnaire", json=body)
        except httpx.ConnectError as e:
            raise SaveQuestionnaireError(CONNECT_ERROR_MESSAGE) from e
        except httpx.TransportError as e:
            raise SaveQuestionnaireError(f"Request to server failed: {e}") from e

        try:
            result = response.json()
        except ValueError:
            result = {}
        if not isinstance(result, dict):
            result = {}

        if response.is_error:
            raise SaveQuestionnaireError(result.get("message") or f"Server error: {response.status_code}")
        if not result.get("success"):
            raise SaveQuestionnaireError(result.get("message") or "Unknown server error")
        return result["filePath"]

    def export_entries(self, entries: Iterable[Dict[str, Any]], project_name: str) -> str:
        """Save a flat (v1) entry list, converting file answers to names first."""
        file_path = self.save(prepare_entries(entries), project_name, schema_version="v1")
        logger.info("Data exported successfully to: %s", file_path)
        return file_path
