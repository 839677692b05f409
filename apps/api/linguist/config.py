"""Application configuration utilities."""
from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

_ENV_FIELDS = {
    "supabase_url": ("SUPABASE_URL", "NEXT_PUBLIC_SUPABASE_URL"),
    "supabase_anon_key": ("SUPABASE_ANON_KEY", "NEXT_PUBLIC_SUPABASE_ANON_KEY"),
    "openai_api_key": ("OPENAI_API_KEY",),
    "openai_model": ("OPENAI_MODEL",),
    "conceptnet_url": ("CONCEPTNET_URL",),
    "default_speech_language": ("LINGUIST_SPEECH_LANGUAGE",),
}


class AppConfig(BaseModel):
    """Strongly typed configuration loaded from config.json or the environment."""

    supabase_url: Optional[str] = None
    supabase_anon_key: Optional[str] = None
    openai_api_key: Optional[str] = None
    openai_model: str = Field(default="gpt-4o-mini")
    conceptnet_url: str = Field(default="https://api.conceptnet.io")
    conceptnet_timeout: float = Field(default=5.0, gt=0)
    default_speech_language: str = Field(default="en-US")
    cors_origins: List[str] = Field(
        default_factory=lambda: [
            "http://localhost:3000",
            "http://127.0.0.1:3000",
            "http://localhost:8081",
            "http://127.0.0.1:8081",
        ]
    )


def _config_path() -> Path:
    return Path(__file__).resolve().parents[1] / "config.json"


def _from_environment() -> Dict[str, Any]:
    values: Dict[str, Any] = {}
    for field, names in _ENV_FIELDS.items():
        for name in names:
            value = os.getenv(name)
            if value:
                values[field] = value
                break
    return values


def load_config() -> AppConfig:
    """Load configuration from config.json, falling back to environment variables."""

    config_file = _config_path()
    if not config_file.exists():
        return AppConfig(**_from_environment())

    contents: Dict[str, Any] = json.loads(config_file.read_text())
    return AppConfig(**contents)


CONFIG = load_config()
