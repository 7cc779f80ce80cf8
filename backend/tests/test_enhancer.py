from __future__ import annotations

import asyncio
from types import SimpleNamespace

from fastapi.testclient import TestClient
from google.api_core.exceptions import ResourceExhausted

from questionnaire_api.config import Settings
from questionnaire_api.main import create_app
from questionnaire_api.services.enhancer import (
    DEFAULT_SYSTEM_PROMPT,
    GeminiEnhancer,
    PassthroughEnhancer,
    get_enhancer,
)


class _FakeModel:
    calls = []

    def __init__(self, name, system_instruction=None, reply="Polished text", error=None):
        self.name = name
        self.system_instruction = system_instruction
        self.reply = reply
        self.error = error

    async def generate_content_async(self, prompt, generation_config=None):
        _FakeModel.calls.append((self.name, self.system_instruction, prompt, generation_config))
        if self.error is not None:
            raise self.error
        return SimpleNamespace(text=self.reply)


def _factory(**kwargs):
    def build(name, system_instruction=None):
        return _FakeModel(name, system_instruction=system_instruction, **kwargs)
    return build


def test_passthrough_returns_input():
    assert asyncio.run(PassthroughEnhancer().enhance("as is")) == "as is"


def test_gemini_builds_prompt_and_returns_reply():
    _FakeModel.calls.clear()
    enhancer = GeminiEnhancer(api_key="k", model="models/test", model_factory=_factory())

    out = asyncio.run(enhancer.enhance("my app does stuff"))

    assert out == "Polished text"
    name, system, prompt, config = _FakeModel.calls[-1]
    assert name == "models/test"
    assert system == DEFAULT_SYSTEM_PROMPT
    assert prompt == "Please enhance this project description: my app does stuff"
    assert config["max_output_tokens"] == 200


def test_gemini_custom_field_and_prompt():
    _FakeModel.calls.clear()
    enhancer = GeminiEnhancer(api_key="k", model="m", model_factory=_factory())

    asyncio.run(enhancer.enhance("goals", field_name="objectives", system_prompt="Be brief."))

    _, system, prompt, _ = _FakeModel.calls[-1]
    assert system == "Be brief."
    assert prompt == "Please enhance this objectives: goals"


def test_gemini_failure_returns_original():
    enhancer = GeminiEnhancer(api_key="k", model="m", model_factory=_factory(error=RuntimeError("down")))
    assert asyncio.run(enhancer.enhance("keep me")) == "keep me"


def test_gemini_rate_limit_returns_original():
    enhancer = GeminiEnhancer(api_key="k", model="m", model_factory=_factory(error=ResourceExhausted("quota")))
    assert asyncio.run(enhancer.enhance("keep me")) == "keep me"


def test_gemini_empty_reply_returns_original():
    enhancer = GeminiEnhancer(api_key="k", model="m", model_factory=_factory(reply="  "))
    assert asyncio.run(enhancer.enhance("keep me")) == "keep me"


def test_get_enhancer_without_key_is_passthrough():
    assert isinstance(get_enhancer(Settings(gemini_api_key="")), PassthroughEnhancer)


def test_enhance_endpoint(tmp_path):
    enhancer = GeminiEnhancer(api_key="k", model="m", model_factory=_factory(reply="Better"))
    app = create_app(Settings(storage_root=tmp_path), enhancer=enhancer)

    with TestClient(app) as client:
        ok = client.post("/api/enhance", json={"text": "rough draft", "fieldName": "summary"})
        blank = client.post("/api/enhance", json={"text": "   "})

    assert ok.status_code == 200
    assert ok.json() == {"success": True, "text": "Better"}
    assert blank.status_code == 400
    assert blank.json()["message"] == "Text to enhance is required"
