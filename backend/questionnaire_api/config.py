# questionnaire_api/config.py
"""
Runtime settings read from the environment.
Everything the app needs at startup lives on one Settings object so tests
can build their own and point storage at a temporary directory.
"""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import List

DEFAULT_MAX_BODY_BYTES = 50 * 1024 * 1024


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    host: str = "127.0.0.1"
    port: int = 3001
    storage_backend: str = "local"  # 'local' or 's3'
    storage_root: Path = Path("json_files")
    s3_bucket: str = "questionnaire-submissions"
    aws_region: str = "ap-southeast-1"
    cors_origins: List[str] = field(default_factory=lambda: ["http://localhost:5173"])
    schema_version: str = "v1"
    max_body_bytes: int = DEFAULT_MAX_BODY_BYTES
    write_timeout_seconds: float = 10.0
    app_env: str = "development"
    expose_error_details: bool = True
    gemini_api_key: str = ""
    llm_model: str = "models/gemini-1.5-flash"
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        app_env = os.getenv("APP_ENV", "development").strip().lower()
        return cls(
            host=os.getenv("HOST", "127.0.0.1"),
            port=int(os.getenv("PORT", "3001")),
            storage_backend=os.getenv("STORAGE_BACKEND", "local").strip().lower(),
            storage_root=Path(os.getenv("STORAGE_ROOT", "json_files")),
            s3_bucket=os.getenv("S3_BUCKET", "questionnaire-submissions"),
            aws_region=os.getenv("AWS_REGION", "ap-southeast-1"),
            cors_origins=[
                o.strip()
                for o in os.getenv("CORS_ORIGINS", "http://localhost:5173").split(",")
                if o.strip()
            ],
            schema_version=os.getenv("QUESTIONNAIRE_SCHEMA_VERSION", "v1").strip().lower(),
            max_body_bytes=int(os.getenv("MAX_BODY_BYTES", str(DEFAULT_MAX_BODY_BYTES))),
            write_timeout_seconds=float(os.getenv("WRITE_TIMEOUT_SECONDS", "10")),
            app_env=app_env,
            expose_error_details=_env_bool("EXPOSE_ERROR_DETAILS", app_env != "production"),
            gemini_api_key=os.getenv("GEMINI_API_KEY", ""),
            llm_model=os.getenv("LLM_MODEL", "models/gemini-1.5-flash"),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Settings singleton built from the process environment."""
    return Settings.from_env()
