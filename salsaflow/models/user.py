"""User table."""

from typing import Optional

from sqlmodel import Field, SQLModel


class UserRecord(SQLModel, table=True):
    __tablename__ = "users"

    id: str = Field(primary_key=True, max_length=32)
    name: Optional[str] = None
    # Unique indexes back the one-user-per-email and one-user-per-token rules;
    # empty values are stored as NULL so they never collide.
    email: Optional[str] = Field(default=None, unique=True, index=True)
    token: Optional[str] = Field(default=None, unique=True, index=True)
