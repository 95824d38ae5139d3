"""Per-request resolution of provider API keys."""

from __future__ import annotations

from enum import Enum

from newsflow.errors import ConfigurationError
from newsflow.models import User

__all__ = ["CredentialResolver", "ProviderKind"]


class ProviderKind(str, Enum):
    NEWS = "news"
    GEMINI = "gemini"


_MISSING_KEY_MESSAGES = {
    ProviderKind.NEWS: "News API key is required. Please add it in your profile settings.",
    ProviderKind.GEMINI: "Gemini API key is required. Please add it in your profile settings.",
}


class CredentialResolver:
    """Pick the user's stored key for a provider, falling back to the configured default."""

    def __init__(self, *, news_api_key: str | None = None, gemini_api_key: str | None = None) -> None:
        self._defaults = {
            ProviderKind.NEWS: news_api_key,
            ProviderKind.GEMINI: gemini_api_key,
        }

    def resolve(self, user: User | None, kind: ProviderKind) -> str:
        if user is not None:
            stored = user.news_api_key if kind is ProviderKind.NEWS else user.gemini_api_key
            if stored and stored.strip():
                return stored.strip()

        default = self._defaults[kind]
        if default and default.strip():
            return default.strip()

        raise ConfigurationError(_MISSING_KEY_MESSAGES[kind])
