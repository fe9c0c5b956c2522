"""
Tests for the provider login flow routes.
"""

from __future__ import annotations

import time
from unittest.mock import AsyncMock
from urllib.parse import parse_qs, urlparse

import httpx
from authlib.integrations.starlette_client import OAuthError

from salsaflow.api.auth import GOOGLE_AUTHORIZE_URL, safe_next
from tests.fakes import ADA, read_session, valid_credential


class TestSafeNext:
    def test_local_path_allowed(self):
        assert safe_next("/commits?page=2", "/") == "/commits?page=2"

    def test_external_urls_rejected(self):
        assert safe_next("https://evil.example.com/", "/") == "/"
        assert safe_next("//evil.example.com/", "/") == "/"

    def test_missing_uses_default(self):
        assert safe_next(None, "/login") == "/login"


class TestLogin:
    async def test_redirects_to_provider(self, client, settings):
        response = await client.get("/auth/google/login", params={"next": "/commits"})
        assert response.status_code == 302

        location = response.headers["location"]
        assert location.startswith(GOOGLE_AUTHORIZE_URL)
        query = parse_qs(urlparse(location).query)
        assert query["redirect_uri"] == ["http://test/auth/google/callback"]
        assert query["scope"] == ["email profile"]

        session = read_session(response.cookies[settings.session_cookie])
        assert session["next"] == "/commits"

    async def test_configured_redirect_url_is_used(self, app, client):
        app.state.settings = app.state.settings.model_copy(
            update={"oauth2_redirect_url": "https://salsaflow.example.com/auth/google/callback"}
        )
        response = await client.get("/auth/google/login")
        query = parse_qs(urlparse(response.headers["location"]).query)
        assert query["redirect_uri"] == ["https://salsaflow.example.com/auth/google/callback"]


class TestCallback:
    async def test_stores_credential_and_redirects_to_next(self, app, client, settings, session_headers):
        expires_at = int(time.time()) + 3600
        app.state.oauth.google.authorize_access_token = AsyncMock(
            return_value={"access_token": "ya29.new", "token_type": "Bearer", "expires_at": expires_at}
        )
        headers = session_headers({"next": "/commits", "userProfile": ADA.model_dump()})

        response = await client.get("/auth/google/callback", params={"code": "c"}, headers=headers)

        assert response.status_code == 302
        assert response.headers["location"] == "/commits"
        session = read_session(response.cookies[settings.session_cookie])
        assert session["oauth2Token"]["access_token"] == "ya29.new"
        assert session["oauth2Token"]["expires_at"] == expires_at
        # The previously cached profile belonged to another credential.
        assert "userProfile" not in session
        assert "next" not in session

    async def test_provider_error_redirects_to_error_page(self, app, client):
        app.state.oauth.google.authorize_access_token = AsyncMock(
            side_effect=OAuthError(error="access_denied", description="user said no")
        )
        response = await client.get("/auth/google/callback", params={"error": "access_denied"})
        assert response.status_code == 302
        assert response.headers["location"] == "/auth/google/error"

    async def test_token_endpoint_unreachable(self, app, client):
        app.state.oauth.google.authorize_access_token = AsyncMock(
            side_effect=httpx.ConnectError("refused")
        )
        response = await client.get("/auth/google/callback", params={"code": "c"})
        assert response.status_code == 500
        assert response.json()["error"]["code"] == "UPSTREAM_FAILURE"


class TestLogout:
    async def test_clears_session(self, client, settings, session_headers):
        headers = session_headers({"oauth2Token": valid_credential(), "userProfile": ADA.model_dump()})
        response = await client.get("/auth/google/logout", headers=headers)
        assert response.status_code == 302
        assert response.headers["location"] == "/login"
        # An emptied session is expired by the middleware.
        assert "expires=Thu, 01 Jan 1970" in response.headers["set-cookie"]

    async def test_honours_local_next(self, client):
        response = await client.get("/auth/google/logout", params={"next": "/login?next=%2Fcommits"})
        assert response.headers["location"] == "/login?next=%2Fcommits"


class TestErrorPage:
    async def test_error_envelope(self, client):
        response = await client.get("/auth/google/error")
        assert response.status_code == 401
        assert response.json()["error"]["code"] == "OAUTH2_FAILED"
