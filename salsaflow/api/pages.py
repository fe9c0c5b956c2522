"""
Browser pages.

Templates are rendered by the front end; these routes decide redirects and
return the page context as JSON.
"""

from __future__ import annotations

from typing import Optional
from urllib.parse import quote

from fastapi import APIRouter, Depends
from fastapi.responses import RedirectResponse

from salsaflow.api.auth import safe_next
from salsaflow.core.auth import get_app_settings, get_page_requester, login_required, login_url
from salsaflow.core.config import OAuth2Paths, Settings
from salsaflow.schemas.users import User


def build_router(paths: OAuth2Paths) -> APIRouter:
    router = APIRouter()

    def page_context(title: str, user: User, settings: Settings) -> dict:
        logout_url = (
            settings.relative_path(paths.logout)
            + "?next="
            + quote(login_url(settings), safe="")
        )
        return {
            "title": title,
            "user": user.model_dump(exclude_none=True),
            "logout_url": logout_url,
        }

    @router.get("/", tags=["Pages"])
    async def root(
        user: User = Depends(login_required),
        settings: Settings = Depends(get_app_settings),
    ):
        return RedirectResponse(settings.relative_path("/configurations"), status_code=302)

    @router.get("/login", tags=["Pages"])
    async def login(
        next: Optional[str] = None,
        user: Optional[User] = Depends(get_page_requester),
        settings: Settings = Depends(get_app_settings),
    ):
        if user is not None:
            return RedirectResponse(settings.relative_path("/"), status_code=302)

        target = safe_next(next, settings.relative_path("/"))
        return {
            "title": "Login",
            "login_url": settings.relative_path(paths.login) + "?next=" + quote(target, safe=""),
        }

    @router.get("/profile", tags=["Pages"])
    async def profile(
        user: User = Depends(login_required),
        settings: Settings = Depends(get_app_settings),
    ):
        return page_context("Profile", user, settings)

    @router.get("/configurations", tags=["Pages"])
    async def configurations(
        user: User = Depends(login_required),
        settings: Settings = Depends(get_app_settings),
    ):
        return page_context("Configurations", user, settings)

    @router.get("/commits", tags=["Pages"])
    async def commits(
        user: User = Depends(login_required),
        settings: Settings = Depends(get_app_settings),
    ):
        return page_context("Commits", user, settings)

    return router
