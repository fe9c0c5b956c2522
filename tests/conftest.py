"""
Shared fixtures for the SalsaFlow test suite.
"""

from __future__ import annotations

import pytest
from httpx import ASGITransport, AsyncClient

from salsaflow.core.config import load_settings
from salsaflow.main import create_app
from salsaflow.stores.memory import MemoryUserStore
from tests.fakes import TEST_COOKIE_SECRET, FakeFetcher, sign_session


@pytest.fixture
def settings():
    return load_settings(cookie_secret=TEST_COOKIE_SECRET, storage_url="memory://")


@pytest.fixture
def store():
    return MemoryUserStore()


@pytest.fixture
def fetcher():
    return FakeFetcher()


@pytest.fixture
def app(settings, store, fetcher):
    return create_app(settings, store=store, fetcher=fetcher)


@pytest.fixture
async def client(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture
def session_headers(settings):
    """Build request headers carrying a signed session cookie."""

    def _headers(data: dict | None = None, *, cookie: str | None = None) -> dict:
        value = cookie if cookie is not None else sign_session(data or {})
        return {"Cookie": f"{settings.session_cookie}={value}"}

    return _headers
