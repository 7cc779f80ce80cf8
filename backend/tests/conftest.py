from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict

import pytest
from fastapi.testclient import TestClient

from questionnaire_api.config import Settings
from questionnaire_api.main import create_app
from questionnaire_api.services.enhancer import PassthroughEnhancer
from questionnaire_api.services.storage import LocalStorage

FIXED_NOW = datetime(2024, 5, 1, 12, 30, 45, 123000, tzinfo=timezone.utc)
FIXED_SLUG = "2024-05-01T12-30-45-123Z"


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    return Settings(storage_root=tmp_path / "json_files", schema_version="v1")


@pytest.fixture()
def api_env(tmp_path: Path, settings: Settings) -> Dict[str, object]:
    storage = LocalStorage(base_dir=settings.storage_root, display_root=tmp_path)
    app = create_app(settings, storage=storage, enhancer=PassthroughEnhancer())
    app.state.writer.clock = lambda: FIXED_NOW

    with TestClient(app) as client:
        yield {
            "client": client,
            "app": app,
            "root": settings.storage_root,
            "storage": storage,
        }


def make_app(tmp_path: Path, **overrides):
    settings = replace(Settings(storage_root=tmp_path / "json_files"), **overrides)
    storage = LocalStorage(base_dir=settings.storage_root, display_root=tmp_path)
    return create_app(settings, storage=storage, enhancer=PassthroughEnhancer())
