"""Personalised news: interests → generated query → search, with one simplified retry."""

from __future__ import annotations

import logging
from typing import List, Sequence

from newsflow.errors import InvalidRequestError, NewsFlowError, ProviderError
from newsflow.models import ArticleList, InterestNews, User
from newsflow.services.credentials import CredentialResolver, ProviderKind
from newsflow.services.gemini import GeminiClient
from newsflow.services.headlines import HeadlineFetcher
from newsflow.services.queries import generate_queries, select_query

__all__ = ["InterestNewsService", "normalise_interests"]

logger = logging.getLogger(__name__)

INTEREST_PAGE_SIZE = 10
INTEREST_LANGUAGE = "en"


def normalise_interests(interests: Sequence[str] | None) -> List[str]:
    return [interest.strip() for interest in interests or [] if interest and interest.strip()]


class InterestNewsService:
    """Find articles for a user's interests, tagging each with the interest names."""

    def __init__(
        self,
        fetcher: HeadlineFetcher,
        gemini: GeminiClient,
        resolver: CredentialResolver,
        *,
        query_timeout: float = 10.0,
    ) -> None:
        self.fetcher = fetcher
        self.gemini = gemini
        self.resolver = resolver
        self.query_timeout = query_timeout

    def generate(
        self,
        user: User | None,
        interests: Sequence[str] | None,
        page: int = 1,
        timestamp: int | None = None,
    ) -> InterestNews:
        """Return one page of articles for ``interests``.

        Any failure while generating the query or searching triggers exactly one
        relevancy-sorted search for the first interest, flagged ``fallback``.
        Only when that also fails is a :class:`ProviderError` raised.
        """

        gemini_key = self.resolver.resolve(user, ProviderKind.GEMINI)
        news_key = self.resolver.resolve(user, ProviderKind.NEWS)

        names = normalise_interests(interests)
        if not names:
            raise InvalidRequestError("Interests are required")

        label = ", ".join(names)
        logger.info("Generating news for interests %s (page %d, timestamp %s)", names, page, timestamp)

        try:
            queries = generate_queries(
                self.gemini, gemini_key, names, page, timestamp, timeout=self.query_timeout
            )
            query = select_query(queries, page)
            logger.info("Selected query %r for page %d", query, page)
            result = self.fetcher.search(
                news_key,
                query,
                page=page,
                page_size=INTEREST_PAGE_SIZE,
                sort_by="publishedAt",
                language=INTEREST_LANGUAGE,
                category=label,
            )
            return _with_query(result, query)
        except NewsFlowError as exc:
            logger.warning("Interest search failed, retrying with %r: %s", names[0], exc)

        try:
            result = self.fetcher.search(
                news_key,
                names[0],
                page=None,
                page_size=INTEREST_PAGE_SIZE,
                sort_by="relevancy",
                language=INTEREST_LANGUAGE,
                category=label,
            )
        except NewsFlowError as exc:
            logger.error("Fallback interest search failed: %s", exc)
            raise ProviderError("Failed to generate news for interests", status_code=500) from exc

        return _with_query(result, names[0], fallback=True)


def _with_query(result: ArticleList, query: str, *, fallback: bool = False) -> InterestNews:
    return InterestNews(
        status=result.status,
        total_results=result.total_results,
        articles=result.articles,
        search_query=query,
        fallback=fallback,
    )
