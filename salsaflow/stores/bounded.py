"""Timeout wrapper applied around any user store."""

from __future__ import annotations

import asyncio
from typing import Awaitable, Optional, TypeVar

from salsaflow.core.errors import StoreTimeoutError
from salsaflow.schemas.users import User
from salsaflow.stores.base import UserStore

T = TypeVar("T")


class BoundedUserStore(UserStore):
    """Delegates to ``inner``, failing any call that outlives ``timeout`` seconds."""

    def __init__(self, inner: UserStore, timeout: float):
        self.inner = inner
        self.timeout = timeout

    async def _bounded(self, operation: str, awaitable: Awaitable[T]) -> T:
        try:
            return await asyncio.wait_for(awaitable, timeout=self.timeout)
        except asyncio.TimeoutError as exc:
            raise StoreTimeoutError(
                f"store {operation} timed out after {self.timeout}s"
            ) from exc

    async def open(self) -> None:
        await self.inner.open()

    async def find_by_id(self, user_id: str) -> Optional[User]:
        return await self._bounded("find_by_id", self.inner.find_by_id(user_id))

    async def find_by_email(self, email: str) -> Optional[User]:
        return await self._bounded("find_by_email", self.inner.find_by_email(email))

    async def find_by_token(self, token: str) -> Optional[User]:
        return await self._bounded("find_by_token", self.inner.find_by_token(token))

    async def save(self, user: User) -> User:
        return await self._bounded("save", self.inner.save(user))

    async def ping(self) -> bool:
        try:
            return await self._bounded("ping", self.inner.ping())
        except StoreTimeoutError:
            return False

    async def close(self) -> None:
        await self.inner.close()
