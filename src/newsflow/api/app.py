"""FastAPI application entrypoint."""

from __future__ import annotations

from fastapi import FastAPI
from starlette.middleware.sessions import SessionMiddleware

from newsflow.api.accounts import router as accounts_router
from newsflow.api.dependencies import ServiceContainer
from newsflow.api.routes import router
from newsflow.config import Settings
from newsflow.storage import Storage


def create_app(settings: Settings | None = None, *, storage: Storage | None = None) -> FastAPI:
    settings = settings or Settings.from_env()

    app = FastAPI(title="NewsFlow", description="Personalised news and AI summaries API")
    app.state.services = ServiceContainer.from_settings(settings, storage)
    app.add_middleware(SessionMiddleware, secret_key=settings.session_secret, same_site="lax")
    app.include_router(router, prefix="/api")
    app.include_router(accounts_router, prefix="/api")

    return app


app = create_app()
