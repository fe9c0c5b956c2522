"""Identity provider schemas: the cached profile and the session credential."""

from __future__ import annotations

import time
from typing import Any, Optional

from pydantic import BaseModel

# Tokens this close to expiry are treated as already expired.
EXPIRY_DELTA_SECONDS = 10


class Profile(BaseModel):
    """Name and email as reported by the identity provider."""
    name: str = ""
    email: str = ""


class ProviderCredential(BaseModel):
    """OAuth2 token obtained from the provider login flow."""
    access_token: str = ""
    token_type: str = "Bearer"
    refresh_token: Optional[str] = None
    expires_at: Optional[int] = None

    @classmethod
    def from_token(cls, token: dict[str, Any]) -> "ProviderCredential":
        """Build a credential from the token dict returned by the OAuth2 client."""
        expires_at = token.get("expires_at")
        if expires_at is None and token.get("expires_in") is not None:
            expires_at = int(time.time()) + int(token["expires_in"])
        return cls(
            access_token=token.get("access_token") or "",
            token_type=token.get("token_type") or "Bearer",
            refresh_token=token.get("refresh_token"),
            expires_at=int(expires_at) if expires_at is not None else None,
        )

    def valid(self, now: float | None = None) -> bool:
        if not self.access_token:
            return False
        if self.expires_at is None:
            return True
        now = time.time() if now is None else now
        return self.expires_at - EXPIRY_DELTA_SECONDS > now
