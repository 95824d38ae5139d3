"""Service layer entry points for NewsFlow."""

from __future__ import annotations

from .credentials import CredentialResolver, ProviderKind  # noqa: F401
from .feed import InterestFeed, merge_articles  # noqa: F401
from .gemini import GeminiClient, GenerationOutcome  # noqa: F401
from .headlines import HeadlineFetcher  # noqa: F401
from .interest_news import InterestNewsService  # noqa: F401
from .queries import generate_queries, select_query  # noqa: F401
from .summarizer import SummaryResult, summarize_article  # noqa: F401

__all__ = [
    "CredentialResolver",
    "GeminiClient",
    "GenerationOutcome",
    "HeadlineFetcher",
    "InterestFeed",
    "InterestNewsService",
    "ProviderKind",
    "SummaryResult",
    "generate_queries",
    "merge_articles",
    "select_query",
    "summarize_article",
]
