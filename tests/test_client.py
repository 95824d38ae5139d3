"""Tests for :mod:`newsflow.client`."""

from __future__ import annotations

import json

import pytest

from newsflow.client import ApiRequestError, NewsFlowClient
from newsflow.models import Article, ArticleSource


class DummyResponse:
    def __init__(self, payload=None, status_code: int = 200) -> None:
        self._payload = payload
        self.status_code = status_code
        self.content = b"" if payload is None else json.dumps(payload).encode("utf-8")

    def json(self):
        if self._payload is None:
            raise ValueError("no body")
        return self._payload


class RecordingSession:
    def __init__(self, response: DummyResponse) -> None:
        self.response = response
        self.calls: list[dict] = []

    def request(self, method, url, timeout=None, **kwargs):
        self.calls.append({"method": method, "url": url, **kwargs})
        return self.response


def test_generate_news_for_interests_posts_payload() -> None:
    session = RecordingSession(
        DummyResponse({"status": "ok", "totalResults": 0, "articles": [], "searchQuery": "space 1"})
    )
    client = NewsFlowClient("http://api.test/", session=session)

    result = client.generate_news_for_interests(["Space"], page=2, timestamp=123)

    assert result.search_query == "space 1"
    assert session.calls[0]["url"] == "http://api.test/api/ai/generate-news-for-interests"
    assert session.calls[0]["json"] == {"interests": ["Space"], "page": 2, "timestamp": 123}


def test_save_article_sends_camel_case_fields() -> None:
    session = RecordingSession(
        DummyResponse({"id": 1, "userId": 7, "title": "T", "url": "https://a", "imageUrl": "https://a.png"})
    )
    client = NewsFlowClient(session=session)
    article = Article(
        title="T",
        url="https://a",
        url_to_image="https://a.png",
        source=ArticleSource(name="Wire"),
        published_at="2024-05-01T10:00:00Z",
    )

    saved = client.save_article(article)

    assert saved.image_url == "https://a.png"
    sent = session.calls[0]["json"]
    assert sent["imageUrl"] == "https://a.png"
    assert sent["source"] == "Wire"
    assert sent["publishedAt"] == "2024-05-01T10:00:00Z"


def test_error_detail_is_raised() -> None:
    client = NewsFlowClient(session=RecordingSession(DummyResponse({"detail": "Not authenticated"}, 401)))

    with pytest.raises(ApiRequestError) as excinfo:
        client.list_interests()

    assert excinfo.value.status_code == 401
    assert excinfo.value.message == "Not authenticated"


def test_no_content_responses_return_none() -> None:
    client = NewsFlowClient(session=RecordingSession(DummyResponse(status_code=204)))

    assert client.delete_interest(3) is None
