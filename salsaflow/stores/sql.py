"""
SQL user store on SQLModel / async SQLAlchemy.

Any async SQLAlchemy URL works; development uses ``sqlite+aiosqlite`` and
production ``postgresql+asyncpg``. Concurrent provisioning of the same email
is settled by the unique index on ``users.email``: the losing insert fails
with DuplicateUserError.
"""

from __future__ import annotations

import uuid
from typing import Optional

import structlog
from sqlalchemy import text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel, select

from salsaflow.core.errors import DuplicateUserError, StoreError
from salsaflow.models.user import UserRecord
from salsaflow.schemas.users import User
from salsaflow.stores.base import UserStore

log = structlog.get_logger()


def _to_user(row: Optional[UserRecord]) -> Optional[User]:
    if row is None:
        return None
    return User(id=row.id, name=row.name, email=row.email, token=row.token)


class SQLUserStore(UserStore):
    def __init__(self, url: str, *, echo: bool = False):
        self._engine = create_async_engine(url, echo=echo, future=True)
        self._session_factory = sessionmaker(
            self._engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    async def open(self) -> None:
        """Create the users table (use migrations for anything beyond that)."""
        async with self._engine.begin() as conn:
            await conn.run_sync(SQLModel.metadata.create_all)

    async def _find_one(self, column, value: str) -> Optional[User]:
        if not value:
            return None
        try:
            async with self._session_factory() as session:
                result = await session.execute(select(UserRecord).where(column == value))
                return _to_user(result.scalar_one_or_none())
        except SQLAlchemyError as exc:
            raise StoreError(str(exc)) from exc

    async def find_by_id(self, user_id: str) -> Optional[User]:
        return await self._find_one(UserRecord.id, user_id)

    async def find_by_email(self, email: str) -> Optional[User]:
        return await self._find_one(UserRecord.email, email)

    async def find_by_token(self, token: str) -> Optional[User]:
        return await self._find_one(UserRecord.token, token)

    async def save(self, user: User) -> User:
        user_id = user.id or uuid.uuid4().hex
        async with self._session_factory() as session:
            try:
                row = await session.get(UserRecord, user_id)
                if row is None:
                    row = UserRecord(id=user_id)
                row.name = user.name or None
                row.email = user.email or None
                row.token = user.token or None
                session.add(row)
                await session.commit()
            except IntegrityError as exc:
                await session.rollback()
                field = "email" if "email" in str(exc.orig) else "token"
                log.warning("store.duplicate_user", field=field, user_id=user_id)
                raise DuplicateUserError(field) from exc
            except SQLAlchemyError as exc:
                await session.rollback()
                raise StoreError(str(exc)) from exc
        return _to_user(row)

    async def ping(self) -> bool:
        try:
            async with self._engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except SQLAlchemyError:
            log.warning("store.ping_failed", exc_info=True)
            return False
        return True

    async def close(self) -> None:
        await self._engine.dispose()
