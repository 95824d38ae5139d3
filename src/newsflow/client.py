"""HTTP client for the NewsFlow JSON API."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Sequence

import requests

from newsflow.errors import NewsFlowError
from newsflow.models import Article, ArticleList, Interest, InterestNews, SavedArticle, User

__all__ = ["ApiRequestError", "NewsFlowClient"]

logger = logging.getLogger(__name__)


class ApiRequestError(NewsFlowError):
    """The API answered with an error status; ``message`` holds its ``detail``."""

    def __init__(self, message: str, status_code: int) -> None:
        super().__init__(message)
        self.status_code = status_code


class NewsFlowClient:
    """Session-backed client; the session cookie set by ``login`` authenticates later calls."""

    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        *,
        timeout: float = 30.0,
        session: requests.Session | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._session = session or requests.Session()

    # Accounts -----------------------------------------------------------------

    def register(self, username: str, password: str) -> User:
        data = self._request("POST", "/api/register", json={"username": username, "password": password})
        return User.model_validate(data)

    def login(self, username: str, password: str) -> User:
        data = self._request("POST", "/api/login", json={"username": username, "password": password})
        return User.model_validate(data)

    def logout(self) -> None:
        self._request("POST", "/api/logout")

    def current_user(self) -> User:
        return User.model_validate(self._request("GET", "/api/user"))

    def update_api_keys(
        self, *, news_api_key: str | None = None, gemini_api_key: str | None = None
    ) -> User:
        payload = {"newsApiKey": news_api_key, "geminiApiKey": gemini_api_key}
        return User.model_validate(self._request("PATCH", "/api/user", json=payload))

    # News ---------------------------------------------------------------------

    def top_headlines(self, category: str | None = None, page: int = 1, page_size: int = 10) -> ArticleList:
        params: Dict[str, Any] = {"page": page, "pageSize": page_size}
        if category:
            params["category"] = category
        return ArticleList.model_validate(self._request("GET", "/api/news/top-headlines", params=params))

    def search(self, query: str, page: int = 1, page_size: int = 10, **filters: str) -> ArticleList:
        params: Dict[str, Any] = {"q": query, "page": page, "pageSize": page_size}
        params.update({key: value for key, value in filters.items() if value})
        return ArticleList.model_validate(self._request("GET", "/api/news/search", params=params))

    def summarize_article(self, article: Article) -> Dict[str, Any]:
        payload = {
            "title": article.title,
            "content": article.content,
            "description": article.description,
            "url": article.url,
        }
        return self._request("POST", "/api/ai/summarize-article", json=payload)

    def generate_news_for_interests(
        self, interests: Sequence[str], page: int = 1, timestamp: int | None = None
    ) -> InterestNews:
        payload = {"interests": list(interests), "page": page, "timestamp": timestamp}
        data = self._request("POST", "/api/ai/generate-news-for-interests", json=payload)
        return InterestNews.model_validate(data)

    # Interests and saved articles ---------------------------------------------

    def list_interests(self) -> List[Interest]:
        return [Interest.model_validate(item) for item in self._request("GET", "/api/interests")]

    def add_interest(self, name: str) -> Interest:
        return Interest.model_validate(self._request("POST", "/api/interests", json={"name": name}))

    def delete_interest(self, interest_id: int) -> None:
        self._request("DELETE", f"/api/interests/{interest_id}")

    def list_saved_articles(self) -> List[SavedArticle]:
        return [SavedArticle.model_validate(item) for item in self._request("GET", "/api/saved-articles")]

    def save_article(self, article: Article) -> SavedArticle:
        payload = {
            "title": article.title,
            "description": article.description,
            "url": article.url,
            "imageUrl": article.url_to_image,
            "source": article.source.name,
            "category": article.category,
            "publishedAt": article.published_at,
        }
        return SavedArticle.model_validate(self._request("POST", "/api/saved-articles", json=payload))

    def delete_saved_article(self, article_id: int) -> None:
        self._request("DELETE", f"/api/saved-articles/{article_id}")

    def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        response = self._session.request(method, f"{self.base_url}{path}", timeout=self.timeout, **kwargs)
        if response.status_code >= 400:
            try:
                detail = response.json().get("detail")
            except (ValueError, AttributeError):
                detail = None
            message = detail if isinstance(detail, str) else f"{method} {path} failed"
            logger.warning("%s %s returned %s: %s", method, path, response.status_code, message)
            raise ApiRequestError(message, response.status_code)

        if response.status_code == 204 or not response.content:
            return None
        return response.json()
