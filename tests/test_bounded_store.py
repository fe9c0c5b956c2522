"""
Tests for the timeout wrapper around user stores.
"""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock

import pytest

from salsaflow.core.errors import StoreTimeoutError
from salsaflow.schemas.users import User
from salsaflow.stores.base import UserStore
from salsaflow.stores.bounded import BoundedUserStore
from salsaflow.stores.memory import MemoryUserStore


async def _hang(*args, **kwargs):
    await asyncio.sleep(10)


class TestBoundedUserStore:
    async def test_delegates(self):
        store = BoundedUserStore(MemoryUserStore(), timeout=1.0)
        saved = await store.save(User(email="ada@example.com", token="abc123"))
        assert (await store.find_by_token("abc123")).id == saved.id
        assert (await store.find_by_email("ada@example.com")).id == saved.id
        assert (await store.find_by_id(saved.id)).email == "ada@example.com"

    async def test_slow_lookup_times_out(self):
        inner = AsyncMock(spec=UserStore)
        inner.find_by_token.side_effect = _hang
        store = BoundedUserStore(inner, timeout=0.05)
        with pytest.raises(StoreTimeoutError) as exc_info:
            await store.find_by_token("abc123")
        assert exc_info.value.retryable

    async def test_slow_save_times_out(self):
        inner = AsyncMock(spec=UserStore)
        inner.save.side_effect = _hang
        store = BoundedUserStore(inner, timeout=0.05)
        with pytest.raises(StoreTimeoutError):
            await store.save(User(email="ada@example.com"))

    async def test_slow_ping_reports_unready(self):
        inner = AsyncMock(spec=UserStore)
        inner.ping.side_effect = _hang
        store = BoundedUserStore(inner, timeout=0.05)
        assert await store.ping() is False

    async def test_open_and_close_delegate(self):
        inner = AsyncMock(spec=UserStore)
        store = BoundedUserStore(inner, timeout=1.0)
        await store.open()
        await store.close()
        inner.open.assert_awaited_once()
        inner.close.assert_awaited_once()
