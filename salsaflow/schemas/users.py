"""User schemas."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel


class User(BaseModel):
    """The authenticated principal.

    ``id`` is assigned by the store on first save and never changes. ``email``
    and ``token`` are unique across users whenever they are non-empty.
    """
    id: Optional[str] = None
    name: Optional[str] = None
    email: Optional[str] = None
    token: Optional[str] = None


class TokenResponse(BaseModel):
    """Body of a token issuance response."""
    token: str
