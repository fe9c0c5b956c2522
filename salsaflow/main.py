"""
SalsaFlow Server

Entry point for the FastAPI application. Run it with ``python -m salsaflow``
or ``uvicorn salsaflow.main:create_app --factory``.
"""

from __future__ import annotations

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.middleware.sessions import SessionMiddleware

from salsaflow.api import auth as auth_routes
from salsaflow.api import pages
from salsaflow.api.v1 import router as api_v1_router
from salsaflow.core.config import OAuth2Paths, Settings, get_settings
from salsaflow.core.errors import SalsaFlowError
from salsaflow.core.middleware import RequestLoggingMiddleware, SecurityHeadersMiddleware
from salsaflow.identity import GoogleProfileFetcher, IdentityResolver, ProfileFetcher
from salsaflow.stores import UserStore, open_store

log = structlog.get_logger()

RETRY_AFTER_SECONDS = "1"


def create_app(
    settings: Settings | None = None,
    *,
    store: UserStore | None = None,
    fetcher: ProfileFetcher | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    ``store`` and ``fetcher`` replace the ones derived from settings.
    """
    settings = settings or get_settings()
    if store is None:
        store = open_store(settings.storage_url, timeout=settings.store_timeout_seconds)
    if fetcher is None:
        fetcher = GoogleProfileFetcher(timeout=settings.profile_fetch_timeout_seconds)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        log.info(
            "salsaflow.starting",
            production=settings.production_mode,
            storage=settings.storage_url.split(":", 1)[0],
        )
        await store.open()
        try:
            yield
        finally:
            log.info("salsaflow.shutting_down")
            await fetcher.close()
            await store.close()

    app = FastAPI(
        title="SalsaFlow",
        description="Identity and access for the SalsaFlow web application.",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.store = store
    app.state.fetcher = fetcher
    app.state.resolver = IdentityResolver(
        store,
        fetcher,
        fetch_timeout=settings.profile_fetch_timeout_seconds,
        api_auto_provision=settings.api_auto_provision,
    )
    app.state.oauth = auth_routes.build_oauth(settings)

    # Middleware (the last one added wraps all the others)
    app.add_middleware(
        SessionMiddleware,
        secret_key=settings.cookie_secret,
        session_cookie=settings.session_cookie,
        path=settings.relative_path("/"),
        same_site="lax",
        https_only=settings.production_mode,
    )
    app.add_middleware(SecurityHeadersMiddleware, production=settings.production_mode)
    app.add_middleware(RequestLoggingMiddleware)

    paths = OAuth2Paths()
    prefix = settings.path_prefix
    app.include_router(auth_routes.build_router(paths), prefix=prefix, tags=["Authentication"])
    app.include_router(pages.build_router(paths), prefix=prefix)
    app.include_router(api_v1_router, prefix=prefix + settings.api_prefix)

    @app.exception_handler(SalsaFlowError)
    async def salsaflow_error_handler(request: Request, exc: SalsaFlowError):
        log.error(
            "request.failed",
            method=request.method,
            path=request.url.path,
            code=exc.code,
            error=str(exc),
        )
        headers = {"Retry-After": RETRY_AFTER_SECONDS} if exc.retryable else None
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "error": {
                    "code": exc.code,
                    "message": str(exc),
                    "status": exc.status_code,
                }
            },
            headers=headers,
        )

    @app.get("/health", tags=["System"])
    async def health_check():
        """Liveness probe."""
        return {"status": "ok"}

    @app.get("/ready", tags=["System"])
    async def readiness_check():
        """Readiness probe: the user store must answer."""
        if not await store.ping():
            return JSONResponse(status_code=503, content={"status": "unavailable"})
        return {"status": "ready"}

    return app
