"""API routes exposing headline, search and AI functionality."""

from __future__ import annotations

import logging
from typing import List

from fastapi import APIRouter, Depends, Query
from fastapi.concurrency import run_in_threadpool
from pydantic import BaseModel, Field

from newsflow.api.dependencies import ServiceContainer, get_services, http_error, optional_user
from newsflow.errors import NewsFlowError
from newsflow.models import ArticleList, InterestNews, User
from newsflow.services.credentials import ProviderKind
from newsflow.services.summarizer import summarize_article

logger = logging.getLogger(__name__)

router = APIRouter()


class SummarizeRequest(BaseModel):
    title: str | None = None
    content: str | None = None
    description: str | None = None
    url: str | None = None


class SummarizeResponse(BaseModel):
    summary: str
    error: str | None = None
    fallback: bool | None = None


class InterestNewsRequest(BaseModel):
    interests: List[str] = Field(default_factory=list)
    page: int = Field(default=1, ge=1)
    timestamp: int | None = Field(default=None, description="Client time in milliseconds")


@router.get("/news/top-headlines", response_model=ArticleList)
async def top_headlines(
    category: str | None = None,
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=10, ge=1, le=100, alias="pageSize"),
    user: User | None = Depends(optional_user),
    services: ServiceContainer = Depends(get_services),
) -> ArticleList:
    """Return the provider's top headlines for an optional category."""

    try:
        api_key = services.resolver.resolve(user, ProviderKind.NEWS)
        return await run_in_threadpool(
            services.fetcher.top_headlines, api_key, category, page, page_size
        )
    except NewsFlowError as exc:
        raise http_error(exc) from exc


@router.get("/news/search", response_model=ArticleList)
async def search_news(
    q: str | None = None,
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=10, ge=1, le=100, alias="pageSize"),
    from_date: str | None = Query(default=None, alias="from"),
    to_date: str | None = Query(default=None, alias="to"),
    sort_by: str | None = Query(default=None, alias="sortBy"),
    user: User | None = Depends(optional_user),
    services: ServiceContainer = Depends(get_services),
) -> ArticleList:
    """Search all indexed articles; every result is tagged ``search``."""

    try:
        api_key = services.resolver.resolve(user, ProviderKind.NEWS)
        return await run_in_threadpool(
            services.fetcher.search,
            api_key,
            q or "",
            page,
            page_size,
            from_date,
            to_date,
            sort_by or "publishedAt",
        )
    except NewsFlowError as exc:
        raise http_error(exc) from exc


@router.post(
    "/ai/summarize-article",
    response_model=SummarizeResponse,
    response_model_exclude_none=True,
)
async def summarize(
    payload: SummarizeRequest,
    user: User | None = Depends(optional_user),
    services: ServiceContainer = Depends(get_services),
) -> SummarizeResponse:
    """Summarise an article. Provider failures yield a flagged fallback summary, not an error."""

    try:
        api_key = services.resolver.resolve(user, ProviderKind.GEMINI)
        logger.info("Summarising article %r (%s)", payload.title, payload.url)
        result = await run_in_threadpool(
            summarize_article,
            services.gemini,
            api_key,
            payload.title,
            payload.content,
            payload.description,
            timeout=services.settings.summary_timeout,
        )
    except NewsFlowError as exc:
        raise http_error(exc) from exc

    if result.fallback:
        logger.warning("Returning fallback summary after %d attempt(s): %s", result.attempts, result.error)
    else:
        logger.info("Summary produced by variant %s after %d attempt(s)", result.variant, result.attempts)

    return SummarizeResponse(
        summary=result.summary,
        error=result.error,
        fallback=True if result.fallback else None,
    )


@router.post("/ai/generate-news-for-interests", response_model=InterestNews)
async def generate_news_for_interests(
    payload: InterestNewsRequest,
    user: User | None = Depends(optional_user),
    services: ServiceContainer = Depends(get_services),
) -> InterestNews:
    """Find news for the given interests using AI-generated search queries."""

    try:
        return await run_in_threadpool(
            services.interest_news.generate,
            user,
            payload.interests,
            payload.page,
            payload.timestamp,
        )
    except NewsFlowError as exc:
        if exc.status_code >= 500:
            logger.exception("Generating news for interests failed")
        raise http_error(exc) from exc
