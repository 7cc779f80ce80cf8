# questionnaire_api/errors.py
from __future__ import annotations

from typing import Optional


class SubmissionError(Exception):
    """Base fault for a questionnaire submission; carries the HTTP status."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class RequestShapeError(SubmissionError):
    """projectName or data missing from the request."""

    status_code = 400


class SubmissionValidationError(SubmissionError):
    """Payload present but structurally invalid for the active schema version."""

    status_code = 400


class UnsupportedSchemaVersion(SubmissionError):
    status_code = 400

    def __init__(self, version: str):
        super().__init__(f"Unsupported schema version '{version}'")
        self.version = version


class PersistenceError(SubmissionError):
    """Directory creation, serialization or write failed."""

    status_code = 500

    def __init__(self, message: str = "Failed to save questionnaire data",
                 detail: Optional[str] = None):
        super().__init__(message)
        self.detail = detail


class PersistenceTimeout(SubmissionError):
    status_code = 504

    def __init__(self, message: str = "Timed out while saving questionnaire data"):
        super().__init__(message)
