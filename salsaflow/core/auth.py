"""
Authentication dependencies for SalsaFlow.

- API requests: bearer token header first, browser session second
- Page requests: same order, but users are provisioned on first contact
  and unauthenticated browsers are redirected to the login page
"""

from __future__ import annotations

from typing import Optional
from urllib.parse import quote

from fastapi import Depends, HTTPException, Request
from fastapi.security import APIKeyHeader

from salsaflow.core.config import Settings
from salsaflow.core.session import SessionState
from salsaflow.identity.resolver import IdentityResolver, Resolution
from salsaflow.schemas.users import User
from salsaflow.stores.base import UserStore

TOKEN_HEADER = "X-SalsaFlow-Token"

token_header = APIKeyHeader(name=TOKEN_HEADER, auto_error=False)


# ---------------------------------------------------------------------------
# Application collaborators
# ---------------------------------------------------------------------------

def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_store(request: Request) -> UserStore:
    return request.app.state.store


def get_resolver(request: Request) -> IdentityResolver:
    return request.app.state.resolver


def get_session_state(request: Request) -> SessionState:
    return SessionState.from_request(request)


# ---------------------------------------------------------------------------
# API requesters
# ---------------------------------------------------------------------------

async def get_api_resolution(
    token: Optional[str] = Depends(token_header),
    session: SessionState = Depends(get_session_state),
    resolver: IdentityResolver = Depends(get_resolver),
) -> Resolution:
    """Resolve the requester of an API call under the configured provisioning policy."""
    return await resolver.resolve_api(token, session)


async def get_api_requester(
    resolution: Resolution = Depends(get_api_resolution),
) -> Optional[User]:
    return resolution.user


async def require_api_user(
    resolution: Resolution = Depends(get_api_resolution),
) -> User:
    """Any resolved user can access this endpoint."""
    if not resolution.resolved:
        raise HTTPException(status_code=403, detail="Authentication required")
    return resolution.user


# ---------------------------------------------------------------------------
# Page requesters
# ---------------------------------------------------------------------------

async def get_page_resolution(
    token: Optional[str] = Depends(token_header),
    session: SessionState = Depends(get_session_state),
    resolver: IdentityResolver = Depends(get_resolver),
) -> Resolution:
    """Resolve the requester of a page, provisioning new users."""
    return await resolver.resolve_page(token, session)


async def get_page_requester(
    resolution: Resolution = Depends(get_page_resolution),
) -> Optional[User]:
    return resolution.user


def login_url(settings: Settings, next_url: str | None = None) -> str:
    url = settings.relative_path("/login")
    if next_url:
        url = f"{url}?next={quote(next_url, safe='')}"
    return url


async def login_required(
    request: Request,
    resolution: Resolution = Depends(get_page_resolution),
    session: SessionState = Depends(get_session_state),
    settings: Settings = Depends(get_app_settings),
) -> User:
    """Redirect browsers without an identity to the login page."""
    if resolution.resolved:
        return resolution.user

    session.delete_profile()
    session.delete_credential()
    next_url = request.url.path
    if request.url.query:
        next_url = f"{next_url}?{request.url.query}"
    raise HTTPException(
        status_code=302,
        detail="Login required",
        headers={"Location": login_url(settings, next_url)},
    )
