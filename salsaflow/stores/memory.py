"""In-memory user store, used for development and tests."""

from __future__ import annotations

import asyncio
import uuid
from typing import Optional

from salsaflow.core.errors import DuplicateUserError
from salsaflow.schemas.users import User
from salsaflow.stores.base import UserStore


class MemoryUserStore(UserStore):
    """Three dicts indexing the same records by id, email and token.

    Records are copied on the way in and out so callers cannot mutate stored
    state behind the indexes.
    """

    def __init__(self) -> None:
        self._by_id: dict[str, User] = {}
        self._by_email: dict[str, User] = {}
        self._by_token: dict[str, User] = {}
        self._lock = asyncio.Lock()

    async def find_by_id(self, user_id: str) -> Optional[User]:
        return self._copy(self._by_id.get(user_id)) if user_id else None

    async def find_by_email(self, email: str) -> Optional[User]:
        return self._copy(self._by_email.get(email)) if email else None

    async def find_by_token(self, token: str) -> Optional[User]:
        return self._copy(self._by_token.get(token)) if token else None

    async def save(self, user: User) -> User:
        async with self._lock:
            record = user.model_copy()
            if not record.id:
                record.id = uuid.uuid4().hex

            # Check both unique keys before touching any index.
            if record.email:
                owner = self._by_email.get(record.email)
                if owner is not None and owner.id != record.id:
                    raise DuplicateUserError("email", record.email)
            if record.token:
                owner = self._by_token.get(record.token)
                if owner is not None and owner.id != record.id:
                    raise DuplicateUserError("token", record.token)

            previous = self._by_id.get(record.id)
            if previous is not None:
                if previous.email and previous.email != record.email:
                    del self._by_email[previous.email]
                if previous.token and previous.token != record.token:
                    del self._by_token[previous.token]

            self._by_id[record.id] = record
            if record.email:
                self._by_email[record.email] = record
            if record.token:
                self._by_token[record.token] = record

            return record.model_copy()

    async def close(self) -> None:
        pass

    def __len__(self) -> int:
        return len(self._by_id)

    @staticmethod
    def _copy(user: Optional[User]) -> Optional[User]:
        return user.model_copy() if user is not None else None
