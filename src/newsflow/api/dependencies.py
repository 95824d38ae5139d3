"""Request-scoped helpers shared by the API routers."""

from __future__ import annotations

from dataclasses import dataclass

from fastapi import Depends, HTTPException, Request

from newsflow.config import Settings
from newsflow.errors import NewsFlowError, UnauthenticatedError
from newsflow.models import User
from newsflow.services.credentials import CredentialResolver
from newsflow.services.gemini import GeminiClient
from newsflow.services.headlines import HeadlineFetcher
from newsflow.services.interest_news import InterestNewsService
from newsflow.storage import Storage

SESSION_USER_KEY = "user_id"


@dataclass(slots=True)
class ServiceContainer:
    """Everything a route needs, built once per application."""

    settings: Settings
    storage: Storage
    resolver: CredentialResolver
    fetcher: HeadlineFetcher
    gemini: GeminiClient
    interest_news: InterestNewsService

    @classmethod
    def from_settings(cls, settings: Settings, storage: Storage | None = None) -> "ServiceContainer":
        resolver = CredentialResolver(
            news_api_key=settings.news_api_key, gemini_api_key=settings.gemini_api_key
        )
        fetcher = HeadlineFetcher(
            settings.news_api_base_url, country=settings.news_country, timeout=settings.news_timeout
        )
        gemini = GeminiClient(settings.gemini_endpoints, settings.gemini_legacy_endpoint)
        return cls(
            settings=settings,
            storage=storage or Storage(settings.database_path),
            resolver=resolver,
            fetcher=fetcher,
            gemini=gemini,
            interest_news=InterestNewsService(
                fetcher, gemini, resolver, query_timeout=settings.query_timeout
            ),
        )


def get_services(request: Request) -> ServiceContainer:
    return request.app.state.services


def http_error(exc: NewsFlowError) -> HTTPException:
    return HTTPException(status_code=exc.status_code, detail=exc.message)


async def optional_user(request: Request) -> User | None:
    """Return the signed-in user, or ``None`` for anonymous requests."""

    user_id = request.session.get(SESSION_USER_KEY)
    if user_id is None:
        return None

    user = await get_services(request).storage.get_user(user_id)
    if user is None:
        request.session.pop(SESSION_USER_KEY, None)
    return user


async def require_user(user: User | None = Depends(optional_user)) -> User:
    if user is None:
        raise http_error(UnauthenticatedError())
    return user
