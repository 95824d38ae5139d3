"""Gemini ``generateContent`` client that walks an ordered list of endpoint variants."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Sequence

import requests

from newsflow.config import DEFAULT_GEMINI_ENDPOINTS, DEFAULT_GEMINI_LEGACY_ENDPOINT, GeminiEndpoint

__all__ = ["GeminiClient", "GenerationConfig", "GenerationOutcome", "extract_text"]

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class GenerationConfig:
    """Sampling parameters sent with every ``generateContent`` request."""

    temperature: float = 0.2
    max_output_tokens: int = 1024
    top_p: float = 0.95
    top_k: int = 40

    def to_payload(self) -> Dict[str, Any]:
        return {
            "temperature": self.temperature,
            "maxOutputTokens": self.max_output_tokens,
            "topP": self.top_p,
            "topK": self.top_k,
        }


@dataclass(slots=True)
class GenerationOutcome:
    """Result of one pass over the endpoint variants.

    ``attempts`` counts the calls made and ``variant`` is the index of the
    endpoint that produced ``text`` (``None`` when every variant failed).
    """

    text: str | None = None
    attempts: int = 0
    variant: int | None = None
    endpoint: str | None = None
    errors: List[str] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return self.text is not None


def extract_text(payload: Any) -> str | None:
    """Return the first candidate's text from a ``generateContent`` response."""

    try:
        text = payload["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError):
        return None
    if not isinstance(text, str) or not text.strip():
        return None
    return text


class GeminiClient:
    """Try each configured endpoint in order and keep the first usable answer."""

    def __init__(
        self,
        endpoints: Sequence[GeminiEndpoint] | None = None,
        legacy_endpoint: GeminiEndpoint | None = None,
        *,
        session: requests.Session | None = None,
    ) -> None:
        self.endpoints = list(endpoints) if endpoints is not None else list(DEFAULT_GEMINI_ENDPOINTS)
        self.legacy_endpoint = legacy_endpoint or DEFAULT_GEMINI_LEGACY_ENDPOINT
        self._session = session or requests.Session()

    def generate(
        self,
        api_key: str,
        prompts: str | Sequence[str],
        config: GenerationConfig,
        *,
        timeout: float,
        accept: Callable[[str], bool] | None = None,
    ) -> GenerationOutcome:
        """Call the endpoints one after another until one returns acceptable text.

        ``prompts`` is either a single prompt for every endpoint or one prompt
        per endpoint, paired by position. ``accept`` lets callers reject text
        that is non-empty but still unusable.
        """

        if isinstance(prompts, str):
            prompt_list = [prompts] * len(self.endpoints)
        else:
            prompt_list = list(prompts)
            if len(prompt_list) < len(self.endpoints):
                prompt_list.extend([prompt_list[-1]] * (len(self.endpoints) - len(prompt_list)))

        outcome = GenerationOutcome()
        total = len(self.endpoints)
        for index, (endpoint, prompt) in enumerate(zip(self.endpoints, prompt_list)):
            outcome.attempts += 1
            logger.info("Trying Gemini endpoint %d/%d: %s", index + 1, total, endpoint.name)
            payload = {
                "contents": [{"role": "user", "parts": [{"text": prompt}]}],
                "generationConfig": config.to_payload(),
            }
            try:
                text = self._post(endpoint, api_key, payload, timeout)
            except requests.RequestException as exc:
                logger.warning("Gemini endpoint %d (%s) failed: %s", index + 1, endpoint.name, exc)
                outcome.errors.append(f"{endpoint.name}: {exc}")
                continue

            if text is None or (accept is not None and not accept(text)):
                logger.warning("Gemini endpoint %d (%s) returned no usable text", index + 1, endpoint.name)
                outcome.errors.append(f"{endpoint.name}: no usable text")
                continue

            outcome.text = text
            outcome.variant = index
            outcome.endpoint = endpoint.name
            logger.info(
                "Gemini endpoint %s answered after %d attempt(s)", endpoint.name, outcome.attempts
            )
            return outcome

        return outcome

    def generate_legacy(
        self,
        api_key: str,
        text: str,
        *,
        timeout: float,
        temperature: float = 0.2,
        max_output_tokens: int = 800,
    ) -> str | None:
        """Last-resort call using the older ``prompt``-style request body."""

        payload = {
            "prompt": {"text": text},
            "temperature": temperature,
            "maxOutputTokens": max_output_tokens,
        }
        try:
            return self._post(self.legacy_endpoint, api_key, payload, timeout)
        except requests.RequestException as exc:
            logger.warning("Legacy Gemini request failed: %s", exc)
            return None

    def _post(
        self, endpoint: GeminiEndpoint, api_key: str, payload: Dict[str, Any], timeout: float
    ) -> str | None:
        response = self._session.post(
            endpoint.url, params={"key": api_key}, json=payload, timeout=timeout
        )
        response.raise_for_status()
        try:
            data = response.json()
        except ValueError:
            return None
        return extract_text(data)
