"""Article summarisation through Gemini with a deterministic fallback."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List

from newsflow.errors import InvalidRequestError
from newsflow.services.gemini import GeminiClient, GenerationConfig
from newsflow.text import flatten_markup

__all__ = [
    "SummaryResult",
    "build_summary_prompts",
    "fallback_summary",
    "summarize_article",
]

logger = logging.getLogger(__name__)

SUMMARY_CONFIG = GenerationConfig(temperature=0.2, max_output_tokens=1024, top_p=0.95, top_k=40)
LEGACY_SOURCE_LIMIT = 1000
FALLBACK_PREVIEW_LIMIT = 150


@dataclass(slots=True)
class SummaryResult:
    """Summary returned to the client; ``fallback`` marks the templated version."""

    summary: str
    error: str | None = None
    fallback: bool = False
    attempts: int = 0
    variant: int | None = None


def build_summary_prompts(title: str, text: str) -> List[str]:
    """Return the prompt for each endpoint variant, most structured first."""

    return [
        (
            "Provide a concise, informative summary of this news article:\n"
            f"Title: {title}\n"
            f"Content: {text}\n\n"
            "Format your response in markdown with:\n"
            "1. A brief overview (2-3 sentences)\n"
            "2. A bullet list with 3-5 key points\n"
            "3. Any important implications or context"
        ),
        (
            "Summarize this news article in a clear, concise way:\n"
            f"Title: {title}\n"
            f"Content: {text}\n\n"
            "Keep it brief but informative."
        ),
        (
            "Create a simple summary of this article:\n"
            f"Title: {title}\n"
            f"Content: {text}"
        ),
    ]


def fallback_summary(title: str, content: str | None = None, description: str | None = None) -> str:
    """Build the markdown summary shown when no model produced one."""

    preview = (description or content or "")[:FALLBACK_PREVIEW_LIMIT]
    return (
        f'## Summary of "{title}"\n\n'
        f"{preview}...\n\n"
        "Key points:\n"
        f"* This article discusses {title}\n"
        "* The content covers important information about the topic\n"
        "* For more details, read the full article"
    )


def summarize_article(
    client: GeminiClient,
    api_key: str,
    title: str | None,
    content: str | None = None,
    description: str | None = None,
    *,
    timeout: float = 15.0,
) -> SummaryResult:
    """Summarise an article, degrading to :func:`fallback_summary` instead of failing.

    Only missing input raises; every provider failure ends in a result with
    ``fallback=True`` and an ``error`` explaining what went wrong.
    """

    title = (title or "").strip()
    content = (content or "").strip() or None
    description = (description or "").strip() or None
    if not title or (not content and not description):
        raise InvalidRequestError("Article title and content or description are required")

    plain_content = (flatten_markup(content) or "").strip() or content
    plain_description = (flatten_markup(description) or "").strip() or description
    article_text = plain_content or plain_description or ""
    attempts = 0

    try:
        outcome = client.generate(
            api_key,
            build_summary_prompts(title, article_text),
            SUMMARY_CONFIG,
            timeout=timeout,
        )
        attempts = outcome.attempts
        if outcome.succeeded:
            return SummaryResult(
                summary=outcome.text or "", attempts=outcome.attempts, variant=outcome.variant
            )

        attempts += 1
        legacy_text = client.generate_legacy(
            api_key,
            f"Summarize this news article: {title} - {article_text[:LEGACY_SOURCE_LIMIT]}",
            timeout=timeout,
        )
        if legacy_text:
            logger.info("Legacy Gemini request produced the summary for %r", title)
            return SummaryResult(summary=legacy_text, attempts=attempts)

        error = f"No usable summary was returned by the AI service after {attempts} attempts"
    except Exception as exc:
        logger.exception("Summary generation failed for %r", title)
        error = f"Failed to generate an AI summary: {exc}"

    logger.info("Using fallback summary for %r", title)
    return SummaryResult(
        summary=fallback_summary(title, plain_content, plain_description),
        error=error,
        fallback=True,
        attempts=attempts,
    )
