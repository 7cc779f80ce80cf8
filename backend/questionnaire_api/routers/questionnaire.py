# questionnaire_api/routers/questionnaire.py
import asyncio
from typing import Any, Optional

from fastapi import APIRouter, Request
from pydantic import BaseModel

from questionnaire_api.errors import (
    PersistenceTimeout,
    RequestShapeError,
    SubmissionValidationError,
)
from questionnaire_api.services.validation import (
    check_required_fields,
    resolve_version,
    validate_structure,
)

router = APIRouter(prefix="/api", tags=["questionnaire"])

SAVED_MESSAGE = "Questionnaire saved successfully!"


# ---------- Models ----------

class SaveQuestionnaireIn(BaseModel):
    projectName: Optional[str] = None
    data: Any = None
    schemaVersion: Optional[str] = None  # v0 / v1 / v2


# ---------- Helpers ----------

async def _save(request: Request, payload: SaveQuestionnaireIn, path_version: Optional[str]) -> dict:
    settings = request.app.state.settings
    writer = request.app.state.writer

    version = resolve_version(path_version, payload.schemaVersion, settings.schema_version)

    shape = check_required_fields(payload.projectName, payload.data, version)
    if not shape.ok:
        raise RequestShapeError(shape.reason)

    structure = validate_structure(payload.data, version)
    if not structure.ok:
        raise SubmissionValidationError(structure.reason)

    try:
        artifact = await asyncio.wait_for(
            asyncio.to_thread(writer.persist, payload.projectName, payload.data),
            timeout=settings.write_timeout_seconds,
        )
    except asyncio.TimeoutError:
        raise PersistenceTimeout() from None

    return {"success": True, "filePath": artifact.path, "message": SAVED_MESSAGE}


# ---------- Routes ----------

@router.post("/save-questionnaire")
async def save_questionnaire(payload: SaveQuestionnaireIn, request: Request):
    """
    Validate a questionnaire snapshot and store it as JSON.
    Schema version comes from payload.schemaVersion or the server default.
    """
    return await _save(request, payload, None)


@router.post("/{version}/save-questionnaire")
async def save_questionnaire_versioned(version: str, payload: SaveQuestionnaireIn, request: Request):
    """Same as /api/save-questionnaire with the schema version pinned by the path."""
    return await _save(request, payload, version)
