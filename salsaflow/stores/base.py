"""User store contract."""

from __future__ import annotations

import abc
from typing import Optional

from salsaflow.schemas.users import User


class UserStore(abc.ABC):
    """Persistence for user records.

    Lookups return ``None`` when nothing matches; empty keys never match.
    ``save`` upserts by id, assigns an id when the user has none, and updates
    the email and token lookups together with the record itself. A save that
    would give a non-empty email or token to a second user raises
    DuplicateUserError.
    """

    async def open(self) -> None:
        """Prepare the underlying resources. Optional."""

    @abc.abstractmethod
    async def find_by_id(self, user_id: str) -> Optional[User]: ...

    @abc.abstractmethod
    async def find_by_email(self, email: str) -> Optional[User]: ...

    @abc.abstractmethod
    async def find_by_token(self, token: str) -> Optional[User]: ...

    @abc.abstractmethod
    async def save(self, user: User) -> User:
        """Upsert ``user`` and return the stored copy (with its id)."""

    @abc.abstractmethod
    async def close(self) -> None: ...

    async def ping(self) -> bool:
        """Return True when the store can serve requests."""
        return True
