"""Thin client for the NewsAPI ``top-headlines`` and ``everything`` endpoints."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import Any, Dict

import requests
from pydantic import ValidationError

from newsflow.errors import InvalidRequestError, ProviderError
from newsflow.models import Article, ArticleList
from newsflow.text import flatten_markup

__all__ = ["HeadlineFetcher", "utc_timestamp"]

logger = logging.getLogger(__name__)

DEFAULT_HEADERS = {
    "User-Agent": "NewsFlow/0.1 (+https://newsapi.org)",
    "Accept": "application/json",
}


def utc_timestamp() -> str:
    """Return the current time as an ISO-8601 UTC string with millisecond precision."""

    return datetime.now(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class HeadlineFetcher:
    """Fetch and normalise article listings from the headlines provider."""

    def __init__(
        self,
        base_url: str = "https://newsapi.org/v2",
        *,
        country: str = "us",
        timeout: float = 10.0,
        session: requests.Session | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.country = country
        self.timeout = timeout
        if session is None:
            session = requests.Session()
            session.headers.update(DEFAULT_HEADERS)
        self._session = session

    def top_headlines(
        self,
        api_key: str,
        category: str | None = None,
        page: int = 1,
        page_size: int = 10,
    ) -> ArticleList:
        """Return the current top headlines, optionally limited to ``category``."""

        logger.info("Fetching top headlines with category: %s", category or "general")
        params: Dict[str, Any] = {
            "country": self.country,
            "page": page,
            "pageSize": page_size,
            "apiKey": api_key,
        }
        if category:
            params["category"] = category

        payload = self._get("top-headlines", params, error_prefix="Error loading news")
        return self._normalise(payload, category or "general")

    def search(
        self,
        api_key: str,
        query: str,
        page: int | None = 1,
        page_size: int = 10,
        from_date: str | None = None,
        to_date: str | None = None,
        sort_by: str = "publishedAt",
        *,
        language: str | None = None,
        category: str = "search",
    ) -> ArticleList:
        """Search every indexed article for ``query``.

        ``page=None`` leaves pagination to the provider. Every returned article
        is tagged with ``category``.
        """

        if not query or not query.strip():
            raise InvalidRequestError("Search query is required")

        logger.info("Searching news with query: %s", query)
        params: Dict[str, Any] = {
            "q": query,
            "pageSize": page_size,
            "sortBy": sort_by or "publishedAt",
            "apiKey": api_key,
        }
        if page is not None:
            params["page"] = page
        if from_date:
            params["from"] = from_date
        if to_date:
            params["to"] = to_date
        if language:
            params["language"] = language

        payload = self._get("everything", params, error_prefix="Error searching news")
        return self._normalise(payload, category)

    def _get(self, endpoint: str, params: Dict[str, Any], *, error_prefix: str) -> Dict[str, Any]:
        url = f"{self.base_url}/{endpoint}"
        try:
            response = self._session.get(url, params=params, timeout=self.timeout)
        except requests.RequestException as exc:
            logger.error("%s request failed: %s", endpoint, exc)
            raise ProviderError(f"{error_prefix}: {exc}", status_code=500) from exc

        try:
            payload = response.json()
        except ValueError:
            payload = None

        if response.status_code >= 400:
            message = payload.get("message") if isinstance(payload, dict) else None
            detail = message or getattr(response, "reason", None) or f"HTTP {response.status_code}"
            logger.error("%s returned %s: %s", endpoint, response.status_code, detail)
            raise ProviderError(f"{error_prefix}: {detail}", status_code=response.status_code)

        if not isinstance(payload, dict) or not isinstance(payload.get("articles", []), list):
            raise ProviderError(f"{error_prefix}: malformed provider response", status_code=502)

        return payload

    @staticmethod
    def _normalise(payload: Dict[str, Any], category: str) -> ArticleList:
        articles = []
        for raw in payload.get("articles") or []:
            if not isinstance(raw, dict):
                continue
            try:
                article = Article.model_validate({**raw, "source": raw.get("source") or {}})
            except ValidationError as exc:
                logger.error("Provider returned a malformed article: %s", exc)
                raise ProviderError("Malformed article in provider response", status_code=502) from exc
            article.description = flatten_markup(article.description)
            article.published_at = article.published_at or utc_timestamp()
            article.category = category
            articles.append(article)

        return ArticleList(
            status=payload.get("status", "ok"),
            total_results=payload.get("totalResults") or len(articles),
            articles=articles,
        )
