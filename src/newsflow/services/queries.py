"""Turn free-text interests into concrete news search queries."""

from __future__ import annotations

import logging
import re
from datetime import UTC, datetime
from typing import List, Sequence

from newsflow.errors import InvalidRequestError
from newsflow.services.gemini import GeminiClient, GenerationConfig

__all__ = [
    "build_query_prompt",
    "fallback_query",
    "generate_queries",
    "parse_queries",
    "select_query",
]

logger = logging.getLogger(__name__)

QUERY_CONFIG = GenerationConfig(temperature=0.7, max_output_tokens=256, top_p=0.9, top_k=40)
MAX_QUERIES = 3

_LIST_MARKER_RE = re.compile(r"^\s*(?:[-*•]+|\d+[.)])\s+")


def build_query_prompt(interests: Sequence[str], page: int = 1, timestamp: int | None = None) -> str:
    lines = [
        f"I'm interested in the following topics: {', '.join(interests)}.",
        "Please generate 3 diverse, specific, well-formed search queries that would help find "
        "the latest news articles about these topics.",
    ]
    if timestamp:
        lines.append(f"Make these queries optimized for freshness (timestamp: {timestamp}).")
    if page > 1:
        lines.append(f"These should be different from previous queries (page: {page}).")
    lines.append(
        "Return only the search queries, each on a new line, without any other text, "
        "numbering or explanation."
    )
    return "\n".join(lines)


def parse_queries(text: str | None) -> List[str]:
    """Split generated text into at most three non-blank queries."""

    if not text:
        return []

    queries: List[str] = []
    for line in text.splitlines():
        query = _LIST_MARKER_RE.sub("", line).strip().strip('"').strip()
        if query:
            queries.append(query)
        if len(queries) == MAX_QUERIES:
            break
    return queries


def _month_of(timestamp: int) -> int | None:
    try:
        return datetime.fromtimestamp(timestamp / 1000, UTC).month
    except (OverflowError, OSError, ValueError):
        logger.warning("Ignoring out-of-range timestamp %s", timestamp)
        return None


def fallback_query(interests: Sequence[str], page: int = 1, timestamp: int | None = None) -> str:
    """Synthesize ``"<first interest> <month> <page>"`` so pages still differ without AI help.

    ``timestamp`` is milliseconds since the epoch; the month is omitted when it
    is missing or out of range.
    """

    parts = [interests[0].strip()]
    month = _month_of(timestamp) if timestamp else None
    if month is not None:
        parts.append(str(month))
    parts.append(str(page))
    return " ".join(parts)


def generate_queries(
    client: GeminiClient,
    api_key: str,
    interests: Sequence[str],
    page: int = 1,
    timestamp: int | None = None,
    *,
    timeout: float = 10.0,
) -> List[str]:
    """Return between one and three search queries covering ``interests``."""

    if not interests or not interests[0].strip():
        raise InvalidRequestError("Interests are required")

    prompt = build_query_prompt(interests, page, timestamp)
    try:
        outcome = client.generate(
            api_key,
            prompt,
            QUERY_CONFIG,
            timeout=timeout,
            accept=lambda text: bool(parse_queries(text)),
        )
    except Exception:
        logger.exception("Query generation failed for interests %s", list(interests))
        outcome = None

    if outcome is not None and outcome.succeeded:
        queries = parse_queries(outcome.text)
        logger.info(
            "Generated search queries %s (variant %s, %d attempt(s))",
            queries,
            outcome.variant,
            outcome.attempts,
        )
        return queries

    query = fallback_query(interests, page, timestamp)
    logger.info("Using default query: %s", query)
    return [query]


def select_query(queries: Sequence[str], page: int) -> str:
    """Pick the query for ``page``, cycling through ``queries`` as pages advance."""

    if not queries:
        raise ValueError("At least one query is required")
    return queries[(max(page, 1) - 1) % len(queries)]
