# questionnaire_api/routers/enhance.py
from typing import Optional

from fastapi import APIRouter, Request
from pydantic import BaseModel

from questionnaire_api.errors import RequestShapeError
from questionnaire_api.services.enhancer import DEFAULT_FIELD_NAME

router = APIRouter(prefix="/api", tags=["enhance"])


class EnhanceIn(BaseModel):
    text: str
    fieldName: Optional[str] = None
    systemPrompt: Optional[str] = None


@router.post("/enhance")
async def enhance_text(payload: EnhanceIn, request: Request):
    if not payload.text.strip():
        raise RequestShapeError("Text to enhance is required")

    enhancer = request.app.state.enhancer
    text = await enhancer.enhance(
        payload.text,
        field_name=payload.fieldName or DEFAULT_FIELD_NAME,
        system_prompt=payload.systemPrompt,
    )
    return {"success": True, "text": text}
