# questionnaire_api/services/validation.py
"""
Structural checks for incoming questionnaire payloads.

Three payload shapes exist and the caller picks one explicitly:
  v0  no structural validation, only presence of projectName and data
  v1  flat list of {category, question, value} entries
  v2  {"sections": [{"title": ..., "questions": [...]}, ...]}

Every check reports the first problem it finds and stops there.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from questionnaire_api.errors import UnsupportedSchemaVersion

MISSING_FIELDS_MESSAGE = "Both projectName and data are required"
NO_SECTIONS_MESSAGE = "No sections provided"
EMPTY_ENTRIES_MESSAGE = "Questionnaire data must be a non-empty list of entries"

ENTRY_REQUIRED_FIELDS = ("category", "question")


@dataclass(frozen=True)
class ValidationResult:
    ok: bool
    reason: Optional[str] = None

    @classmethod
    def passed(cls) -> "ValidationResult":
        return cls(True)

    @classmethod
    def failed(cls, reason: str) -> "ValidationResult":
        return cls(False, reason)


# ---------- Request shape ----------

def check_required_fields(project_name: Any, data: Any, version: str) -> ValidationResult:
    """projectName and data must both be present; v1/v2 also reject a blank name."""
    if project_name is None or data is None:
        return ValidationResult.failed(MISSING_FIELDS_MESSAGE)
    if version != "v0":
        if not isinstance(project_name, str) or not project_name.strip():
            return ValidationResult.failed(MISSING_FIELDS_MESSAGE)
    return ValidationResult.passed()


# ---------- Structural validators ----------

def _validate_v0(data: Any) -> ValidationResult:
    return ValidationResult.passed()


def _validate_entries(data: Any) -> ValidationResult:
    if not isinstance(data, list) or not data:
        return ValidationResult.failed(EMPTY_ENTRIES_MESSAGE)

    for n, entry in enumerate(data, start=1):
        if not isinstance(entry, dict):
            return ValidationResult.failed(f"Entry {n} is not an object")
        for name in ENTRY_REQUIRED_FIELDS:
            if entry.get(name) is None:
                return ValidationResult.failed(f"Entry {n} is missing required field '{name}'")
        # null and "" are legitimate answers; only an absent key is not
        if "value" not in entry:
            return ValidationResult.failed(f"Entry {n} is missing required field 'value'")
    return ValidationResult.passed()


def _validate_sections(data: Any) -> ValidationResult:
    sections = data.get("sections") if isinstance(data, dict) else None
    if not isinstance(sections, list) or not sections:
        return ValidationResult.failed(NO_SECTIONS_MESSAGE)

    for n, section in enumerate(sections, start=1):
        title = section.get("title") if isinstance(section, dict) else None
        if not isinstance(title, str) or not title.strip():
            return ValidationResult.failed(f"Section {n} is missing a title")
        questions = section.get("questions")
        if not isinstance(questions, list) or not questions:
            return ValidationResult.failed(f"Section '{title.strip()}' has no questions")
    return ValidationResult.passed()


VALIDATORS: Dict[str, Callable[[Any], ValidationResult]] = {
    "v0": _validate_v0,
    "v1": _validate_entries,
    "v2": _validate_sections,
}


def validate_structure(data: Any, version: str) -> ValidationResult:
    try:
        validator = VALIDATORS[version]
    except KeyError:
        raise UnsupportedSchemaVersion(version) from None
    return validator(data)


def resolve_version(path_version: Optional[str],
                    body_version: Optional[str],
                    default: str) -> str:
    """
    Pick the schema version for a request: URL path first, then the
    payload's schemaVersion, then the configured default.
    """
    raw = path_version or body_version or default
    version = str(raw).strip().lower()
    if version not in VALIDATORS:
        raise UnsupportedSchemaVersion(str(raw))
    return version
