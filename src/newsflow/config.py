"""Configuration models and helpers for the NewsFlow service."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import List

from pydantic import BaseModel, Field, ValidationError

__all__ = [
    "DEFAULT_DATABASE_PATH",
    "DEFAULT_GEMINI_ENDPOINTS",
    "DEFAULT_GEMINI_LEGACY_ENDPOINT",
    "GeminiEndpoint",
    "Settings",
]

DEFAULT_DATABASE_PATH = Path.home() / ".newsflow" / "newsflow.db"

_GEMINI_BASE_URL = "https://generativelanguage.googleapis.com"


class GeminiEndpoint(BaseModel):
    """A single ``generateContent`` endpoint the generative client may call."""

    name: str = Field(..., description="Short label used in logs")
    url: str = Field(..., description="Full generateContent URL without the key parameter")


DEFAULT_GEMINI_ENDPOINTS: List[GeminiEndpoint] = [
    GeminiEndpoint(
        name="v1beta/gemini-pro",
        url=f"{_GEMINI_BASE_URL}/v1beta/models/gemini-pro:generateContent",
    ),
    GeminiEndpoint(
        name="v1/gemini-pro",
        url=f"{_GEMINI_BASE_URL}/v1/models/gemini-pro:generateContent",
    ),
    GeminiEndpoint(
        name="v1beta/gemini-1.5-pro",
        url=f"{_GEMINI_BASE_URL}/v1beta/models/gemini-1.5-pro:generateContent",
    ),
]

DEFAULT_GEMINI_LEGACY_ENDPOINT = GeminiEndpoint(
    name="v1/gemini-pro (legacy)",
    url=f"{_GEMINI_BASE_URL}/v1/models/gemini-pro:generateContent",
)


class Settings(BaseModel):
    """Process-wide settings injected into the API and its services."""

    news_api_key: str | None = Field(
        default=None, description="Default NewsAPI key used when a user has none stored"
    )
    gemini_api_key: str | None = Field(
        default=None, description="Default Gemini key used when a user has none stored"
    )
    news_api_base_url: str = Field(default="https://newsapi.org/v2")
    news_country: str = Field(default="us", description="Country used for top headlines")
    news_timeout: float = Field(default=10.0, gt=0)
    gemini_endpoints: List[GeminiEndpoint] = Field(
        default_factory=lambda: [endpoint.model_copy() for endpoint in DEFAULT_GEMINI_ENDPOINTS],
        description="Ordered endpoint variants tried one after another",
    )
    gemini_legacy_endpoint: GeminiEndpoint = Field(
        default_factory=lambda: DEFAULT_GEMINI_LEGACY_ENDPOINT.model_copy()
    )
    summary_timeout: float = Field(default=15.0, gt=0)
    query_timeout: float = Field(default=10.0, gt=0)
    database_path: Path = Field(default=DEFAULT_DATABASE_PATH)
    session_secret: str = Field(default="newsflow-development-secret")

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from environment variables, keeping defaults for unset values."""

        values: dict[str, object] = {
            "news_api_key": os.environ.get("NEWS_API_KEY") or None,
            "gemini_api_key": os.environ.get("GEMINI_API_KEY") or None,
        }

        db_path = os.environ.get("NEWSFLOW_DB_PATH")
        if db_path:
            values["database_path"] = Path(db_path)

        secret = os.environ.get("NEWSFLOW_SESSION_SECRET")
        if secret:
            values["session_secret"] = secret

        country = os.environ.get("NEWSFLOW_NEWS_COUNTRY")
        if country:
            values["news_country"] = country

        return cls(**values)

    @classmethod
    def from_file(cls, path: Path | str) -> "Settings":
        """Load settings from a JSON file."""

        config_path = Path(path)
        try:
            data = json.loads(config_path.read_text(encoding="utf-8"))
        except FileNotFoundError as exc:
            raise FileNotFoundError(f"Configuration file not found: {config_path}") from exc
        except json.JSONDecodeError as exc:
            raise ValueError(f"Invalid JSON in configuration file: {config_path}") from exc

        try:
            return cls.model_validate(data)
        except ValidationError as exc:
            raise ValueError(f"Configuration file is invalid: {config_path}\n{exc}") from exc
