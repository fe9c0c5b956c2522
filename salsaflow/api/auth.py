"""
Provider login flow (Google OAuth2).

- login: remember where to go next, redirect to the provider
- callback: exchange the code, keep the credential in the session
- logout: forget credential and cached profile
- error: the provider flow failed

The routes are built from an OAuth2Paths instance, fixed when the app is built.
"""

from __future__ import annotations

from typing import Optional

import httpx
import structlog
from authlib.integrations.starlette_client import OAuth, OAuthError
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, RedirectResponse

from salsaflow.core.auth import get_app_settings, get_session_state, login_url
from salsaflow.core.config import OAuth2Paths, Settings
from salsaflow.core.errors import UpstreamError
from salsaflow.core.session import SessionState
from salsaflow.schemas.auth import ProviderCredential

log = structlog.get_logger()

GOOGLE_AUTHORIZE_URL = "https://accounts.google.com/o/oauth2/v2/auth"
GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"


def build_oauth(settings: Settings) -> OAuth:
    """Create the OAuth2 client registry for one application instance."""
    oauth = OAuth()
    oauth.register(
        name="google",
        client_id=settings.oauth2_client_id,
        client_secret=settings.oauth2_client_secret,
        authorize_url=GOOGLE_AUTHORIZE_URL,
        access_token_url=GOOGLE_TOKEN_URL,
        client_kwargs={"scope": settings.oauth2_scopes},
    )
    return oauth


def safe_next(next_url: Optional[str], default: str) -> str:
    """Only allow redirects to local paths."""
    if next_url and next_url.startswith("/") and not next_url.startswith("//"):
        return next_url
    return default


def build_router(paths: OAuth2Paths) -> APIRouter:
    router = APIRouter()

    @router.get(paths.login, name="oauth2_login")
    async def login(
        request: Request,
        next: Optional[str] = None,
        settings: Settings = Depends(get_app_settings),
        session: SessionState = Depends(get_session_state),
    ):
        """Redirect to the provider's consent screen."""
        session.set_next(safe_next(next, settings.relative_path("/")))
        redirect_uri = settings.oauth2_redirect_url or str(request.url_for("oauth2_callback"))
        return await request.app.state.oauth.google.authorize_redirect(request, redirect_uri)

    @router.get(paths.callback, name="oauth2_callback")
    async def callback(
        request: Request,
        settings: Settings = Depends(get_app_settings),
        session: SessionState = Depends(get_session_state),
    ):
        """Exchange the authorization code and start the browser session."""
        try:
            token = await request.app.state.oauth.google.authorize_access_token(request)
        except OAuthError as exc:
            log.warning("auth.callback_failed", error=exc.error, description=exc.description)
            return RedirectResponse(settings.relative_path(paths.error), status_code=302)
        except httpx.HTTPError as exc:
            raise UpstreamError(f"token exchange failed: {exc}") from exc

        # A new credential invalidates whatever profile the session cached before.
        session.delete_profile()
        session.set_credential(ProviderCredential.from_token(token))
        log.info("auth.login_success")
        return RedirectResponse(session.pop_next(settings.relative_path("/")), status_code=302)

    @router.get(paths.logout, name="oauth2_logout")
    async def logout(
        next: Optional[str] = None,
        settings: Settings = Depends(get_app_settings),
        session: SessionState = Depends(get_session_state),
    ):
        """Invalidate the current browser session."""
        session.clear()
        return RedirectResponse(safe_next(next, login_url(settings)), status_code=302)

    @router.get(paths.error, name="oauth2_error")
    async def error():
        return JSONResponse(
            status_code=401,
            content={
                "error": {
                    "code": "OAUTH2_FAILED",
                    "message": "Signing in with the identity provider failed.",
                    "status": 401,
                }
            },
        )

    return router
