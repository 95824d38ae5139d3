"""Domain models used across the application."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class WireModel(BaseModel):
    """Base model serialised with camelCase keys, as the web client expects."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ArticleSource(WireModel):
    id: Optional[str] = None
    name: Optional[str] = None


class Article(WireModel):
    """A provider-shaped news article plus the category assigned by the fetcher."""

    source: ArticleSource = Field(default_factory=ArticleSource)
    author: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    url: Optional[str] = None
    url_to_image: Optional[str] = None
    published_at: Optional[str] = None
    content: Optional[str] = None
    category: Optional[str] = None


class ArticleList(WireModel):
    status: str = "ok"
    total_results: int = 0
    articles: List[Article] = Field(default_factory=list)


class InterestNews(ArticleList):
    """Articles found for a set of interests, with the query that produced them."""

    search_query: str
    fallback: bool = False


class User(WireModel):
    """A stored account. ``password_hash`` never leaves the server."""

    id: int
    username: str
    password_hash: str = Field(default="", exclude=True)
    news_api_key: Optional[str] = None
    gemini_api_key: Optional[str] = None
    created_at: Optional[datetime] = None


class Interest(WireModel):
    id: int
    user_id: int
    name: str
    active: bool = True
    created_at: Optional[datetime] = None


class SavedArticle(WireModel):
    """A user's denormalised copy of an article."""

    id: int
    user_id: int
    title: str
    description: Optional[str] = None
    url: str
    image_url: Optional[str] = None
    source: Optional[str] = None
    category: Optional[str] = None
    published_at: Optional[datetime] = None
    saved_at: Optional[datetime] = None
