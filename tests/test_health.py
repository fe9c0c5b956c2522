"""
Health, readiness and application lifecycle tests.
"""

from __future__ import annotations

from unittest.mock import AsyncMock

from fastapi.testclient import TestClient
from httpx import ASGITransport, AsyncClient

from salsaflow.main import create_app
from salsaflow.stores.base import UserStore
from tests.fakes import FakeFetcher


async def test_health_check(client):
    """Health endpoint should return status ok."""
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


async def test_ready_check(client):
    """Ready endpoint should return status ready when the store answers."""
    response = await client.get("/ready")
    assert response.status_code == 200
    assert response.json() == {"status": "ready"}


async def test_ready_check_store_down(settings):
    store = AsyncMock(spec=UserStore)
    store.ping.return_value = False
    app = create_app(settings, store=store, fetcher=FakeFetcher())
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        response = await ac.get("/ready")
    assert response.status_code == 503


def test_lifespan_opens_and_closes_collaborators(settings):
    store = AsyncMock(spec=UserStore)
    fetcher = FakeFetcher()
    app = create_app(settings, store=store, fetcher=fetcher)

    with TestClient(app) as client:
        store.open.assert_awaited_once()
        assert client.get("/health").status_code == 200

    store.close.assert_awaited_once()
    assert fetcher.closed


def test_default_collaborators_from_settings(settings):
    app = create_app(settings)
    assert app.state.store.timeout == settings.store_timeout_seconds
    assert app.state.fetcher.timeout == settings.profile_fetch_timeout_seconds
    assert app.state.resolver.api_auto_provision is False
