"""Client-side accumulation of paginated interest news."""

from __future__ import annotations

import logging
import time
from typing import Callable, List, Sequence

from newsflow.client import NewsFlowClient
from newsflow.models import Article

__all__ = ["InterestFeed", "merge_articles"]

logger = logging.getLogger(__name__)


def merge_articles(accumulated: Sequence[Article], incoming: Sequence[Article], page: int) -> List[Article]:
    """Return the accumulated list after receiving ``incoming`` for ``page``.

    Page 1 replaces everything. Later pages append, in fetch order, only the
    articles whose URL and title both differ from every article already kept.
    A match on either key excludes the candidate; empty keys never match.
    """

    if page <= 1:
        return list(incoming)

    merged = list(accumulated)
    seen_urls = {article.url for article in merged if article.url}
    seen_titles = {article.title for article in merged if article.title}

    added = 0
    for article in incoming:
        if (article.url and article.url in seen_urls) or (article.title and article.title in seen_titles):
            continue
        merged.append(article)
        added += 1
        if article.url:
            seen_urls.add(article.url)
        if article.title:
            seen_titles.add(article.title)

    logger.debug("Found %d new articles out of %d total", added, len(incoming))
    return merged


def _now_ms() -> int:
    return int(time.time() * 1000)


class InterestFeed:
    """Pagination state for one interest, changed only through explicit actions."""

    def __init__(self, client: NewsFlowClient, *, clock: Callable[[], int] = _now_ms) -> None:
        self.client = client
        self._clock = clock
        self.interest: str | None = None
        self.page = 1
        self.articles: List[Article] = []
        self.timestamp = clock()
        self.search_query: str | None = None
        self.fallback = False

    def switch_interest(self, interest: str) -> List[Article]:
        self.interest = interest
        return self.refresh()

    def refresh(self) -> List[Article]:
        """Start again from page 1 with a new cache-busting timestamp."""

        self.page = 1
        self.articles = []
        self.timestamp = self._clock()
        return self._fetch()

    def load_more(self) -> List[Article]:
        previous = self.page
        self.page += 1
        try:
            return self._fetch()
        except Exception:
            self.page = previous
            raise

    def _fetch(self) -> List[Article]:
        if self.interest is None:
            return self.articles

        result = self.client.generate_news_for_interests(
            [self.interest], page=self.page, timestamp=self.timestamp
        )
        self.search_query = result.search_query
        self.fallback = result.fallback
        self.articles = merge_articles(self.articles, result.articles, self.page)
        return self.articles
