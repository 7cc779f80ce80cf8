# questionnaire_api/services/enhancer.py
"""
Optional text enhancement for free-text answers (project descriptions etc).

Without GEMINI_API_KEY the passthrough enhancer is used and text comes back
unchanged. Provider failures never reach the caller: the original text is
returned instead.
"""
from __future__ import annotations

import logging
from typing import Any, Callable, Optional, Protocol

from questionnaire_api.config import Settings

logger = logging.getLogger(__name__)

DEFAULT_FIELD_NAME = "project description"
DEFAULT_SYSTEM_PROMPT = (
    "You are a technical project description expert. Enhance the given project "
    "description to be more professional and concise, keeping it under 200 words."
)
GENERATION_CONFIG = {"temperature": 0.7, "max_output_tokens": 200}


class TextEnhancer(Protocol):
    async def enhance(self, text: str,
                      field_name: str = DEFAULT_FIELD_NAME,
                      system_prompt: Optional[str] = None) -> str:
        ...


class PassthroughEnhancer:
    async def enhance(self, text: str,
                      field_name: str = DEFAULT_FIELD_NAME,
                      system_prompt: Optional[str] = None) -> str:
        logger.warning("Text enhancement not configured; returning %s unchanged", field_name)
        return text


class GeminiEnhancer:
    def __init__(self, api_key: str, model: str,
                 model_factory: Optional[Callable[..., Any]] = None):
        self.model_name = model
        if model_factory is None:
            import google.generativeai as genai

            genai.configure(api_key=api_key)
            model_factory = genai.GenerativeModel
        self._model_factory = model_factory

    async def enhance(self, text: str,
                      field_name: str = DEFAULT_FIELD_NAME,
                      system_prompt: Optional[str] = None) -> str:
        from google.api_core.exceptions import ResourceExhausted

        model = self._model_factory(
            self.model_name,
            system_instruction=system_prompt or DEFAULT_SYSTEM_PROMPT,
        )
        prompt = f"Please enhance this {field_name}: {text}"
        try:
            resp = await model.generate_content_async(prompt, generation_config=GENERATION_CONFIG)
            out = getattr(resp, "text", "") or ""
        except ResourceExhausted:
            logger.warning("Enhancement rate limited for %s; returning original text", field_name)
            return text
        except Exception:
            logger.exception("Error enhancing %s", field_name)
            return text
        return out.strip() or text


def get_enhancer(settings: Settings) -> TextEnhancer:
    if settings.gemini_api_key:
        logger.info("Text enhancement: Gemini model=%s", settings.llm_model)
        return GeminiEnhancer(api_key=settings.gemini_api_key, model=settings.llm_model)
    return PassthroughEnhancer()
