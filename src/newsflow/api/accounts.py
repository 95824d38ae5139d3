"""Account, interest and saved-article routes. All per-user routes need a session."""

from __future__ import annotations

import hashlib
import hmac
import logging
import secrets
from datetime import datetime
from typing import List

import aiosqlite
from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from pydantic import BaseModel, Field

from newsflow.api.dependencies import SESSION_USER_KEY, ServiceContainer, get_services, require_user
from newsflow.models import Interest, SavedArticle, User, WireModel

logger = logging.getLogger(__name__)

router = APIRouter()

_SCRYPT_PARAMS = {"n": 2**14, "r": 8, "p": 1, "dklen": 64}


def hash_password(password: str) -> str:
    """Return ``"<hex digest>.<hex salt>"`` for ``password`` using scrypt."""

    salt = secrets.token_hex(16)
    digest = hashlib.scrypt(password.encode("utf-8"), salt=salt.encode("utf-8"), **_SCRYPT_PARAMS)
    return f"{digest.hex()}.{salt}"


def verify_password(password: str, stored: str) -> bool:
    digest_hex, _, salt = stored.partition(".")
    if not digest_hex or not salt:
        return False
    candidate = hashlib.scrypt(password.encode("utf-8"), salt=salt.encode("utf-8"), **_SCRYPT_PARAMS)
    return hmac.compare_digest(candidate.hex(), digest_hex)


class CredentialsRequest(BaseModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class ApiKeysUpdate(WireModel):
    news_api_key: str | None = None
    gemini_api_key: str | None = None


class InterestCreate(BaseModel):
    name: str = Field(..., min_length=1)


class SavedArticleCreate(WireModel):
    title: str = Field(..., min_length=1)
    url: str = Field(..., min_length=1)
    description: str | None = None
    image_url: str | None = None
    source: str | None = None
    category: str | None = None
    published_at: datetime | None = None


# Accounts ---------------------------------------------------------------------


@router.post("/register", response_model=User, status_code=status.HTTP_201_CREATED)
async def register(
    payload: CredentialsRequest,
    request: Request,
    services: ServiceContainer = Depends(get_services),
) -> User:
    username = payload.username.strip()
    if not username:
        raise HTTPException(status_code=400, detail="Username is required")

    try:
        user = await services.storage.create_user(username, hash_password(payload.password))
    except ValueError as exc:
        raise HTTPException(status_code=400, detail="Username already exists") from exc

    request.session[SESSION_USER_KEY] = user.id
    logger.info("Registered user %s", user.username)
    return user


@router.post("/login", response_model=User)
async def login(
    payload: CredentialsRequest,
    request: Request,
    services: ServiceContainer = Depends(get_services),
) -> User:
    user = await services.storage.get_user_by_username(payload.username.strip())
    if user is None or not verify_password(payload.password, user.password_hash):
        raise HTTPException(status_code=401, detail="Invalid username or password")

    request.session[SESSION_USER_KEY] = user.id
    return user


@router.post("/logout")
async def logout(request: Request) -> Response:
    request.session.clear()
    return Response(status_code=status.HTTP_200_OK)


@router.get("/user", response_model=User)
async def current_user(user: User = Depends(require_user)) -> User:
    return user


@router.patch("/user", response_model=User)
async def update_api_keys(
    payload: ApiKeysUpdate,
    user: User = Depends(require_user),
    services: ServiceContainer = Depends(get_services),
) -> User:
    """Store the user's own provider keys; blank values fall back to the server defaults."""

    updated = await services.storage.update_api_keys(
        user.id,
        news_api_key=(payload.news_api_key or "").strip() or None,
        gemini_api_key=(payload.gemini_api_key or "").strip() or None,
    )
    if updated is None:
        raise HTTPException(status_code=404, detail="User not found")
    return updated


# Interests --------------------------------------------------------------------


@router.get("/interests", response_model=List[Interest])
async def list_interests(
    user: User = Depends(require_user),
    services: ServiceContainer = Depends(get_services),
) -> List[Interest]:
    try:
        return await services.storage.list_interests(user.id)
    except aiosqlite.Error as exc:
        logger.exception("Failed to fetch interests for user %s", user.id)
        raise HTTPException(status_code=500, detail="Failed to fetch interests") from exc


@router.post("/interests", response_model=Interest, status_code=status.HTTP_201_CREATED)
async def create_interest(
    payload: InterestCreate,
    user: User = Depends(require_user),
    services: ServiceContainer = Depends(get_services),
) -> Interest:
    name = payload.name.strip()
    if not name:
        raise HTTPException(status_code=400, detail="Interest name is required")

    try:
        return await services.storage.create_interest(user.id, name)
    except aiosqlite.Error as exc:
        logger.exception("Failed to create interest for user %s", user.id)
        raise HTTPException(status_code=500, detail="Failed to create interest") from exc


@router.delete("/interests/{interest_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_interest(
    interest_id: int,
    user: User = Depends(require_user),
    services: ServiceContainer = Depends(get_services),
) -> Response:
    try:
        await services.storage.delete_interest(interest_id, user.id)
    except aiosqlite.Error as exc:
        logger.exception("Failed to delete interest %s", interest_id)
        raise HTTPException(status_code=500, detail="Failed to delete interest") from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# Saved articles ---------------------------------------------------------------


@router.get("/saved-articles", response_model=List[SavedArticle])
async def list_saved_articles(
    user: User = Depends(require_user),
    services: ServiceContainer = Depends(get_services),
) -> List[SavedArticle]:
    try:
        return await services.storage.list_saved_articles(user.id)
    except aiosqlite.Error as exc:
        logger.exception("Failed to fetch saved articles for user %s", user.id)
        raise HTTPException(status_code=500, detail="Failed to fetch saved articles") from exc


@router.post("/saved-articles", response_model=SavedArticle, status_code=status.HTTP_201_CREATED)
async def save_article(
    payload: SavedArticleCreate,
    user: User = Depends(require_user),
    services: ServiceContainer = Depends(get_services),
) -> SavedArticle:
    try:
        return await services.storage.save_article(user.id, **payload.model_dump())
    except aiosqlite.Error as exc:
        logger.exception("Failed to save article for user %s", user.id)
        raise HTTPException(status_code=500, detail="Failed to save article") from exc


@router.delete("/saved-articles/{article_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_saved_article(
    article_id: int,
    user: User = Depends(require_user),
    services: ServiceContainer = Depends(get_services),
) -> Response:
    try:
        await services.storage.delete_saved_article(article_id, user.id)
    except aiosqlite.Error as exc:
        logger.exception("Failed to delete saved article %s", article_id)
        raise HTTPException(status_code=500, detail="Failed to delete saved article") from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)
