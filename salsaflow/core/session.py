"""
Typed access to the per-browser session.

The session itself (a signed cookie managed by Starlette's SessionMiddleware)
is a plain JSON dict; everything SalsaFlow keeps in it goes through
SessionState so that readers always get validated models back.
"""

from __future__ import annotations

from typing import Any, MutableMapping, Optional

import structlog
from pydantic import ValidationError
from starlette.requests import Request

from salsaflow.schemas.auth import Profile, ProviderCredential

log = structlog.get_logger()

KEY_PROFILE = "userProfile"
KEY_CREDENTIAL = "oauth2Token"
KEY_NEXT = "next"


class SessionState:
    """Typed view over a session mapping."""

    def __init__(self, data: MutableMapping[str, Any]):
        self._data = data

    @classmethod
    def from_request(cls, request: Request) -> "SessionState":
        return cls(request.session)

    # --- Profile ---

    def get_profile(self) -> Optional[Profile]:
        raw = self._data.get(KEY_PROFILE)
        if raw is None:
            return None
        try:
            return Profile.model_validate(raw)
        except ValidationError:
            log.warning("session.profile_invalid")
            self.delete_profile()
            return None

    def set_profile(self, profile: Profile) -> None:
        self._data[KEY_PROFILE] = profile.model_dump()

    def delete_profile(self) -> None:
        self._data.pop(KEY_PROFILE, None)

    # --- Provider credential ---

    def get_credential(self) -> Optional[ProviderCredential]:
        raw = self._data.get(KEY_CREDENTIAL)
        if raw is None:
            return None
        try:
            return ProviderCredential.model_validate(raw)
        except ValidationError:
            log.warning("session.credential_invalid")
            self.delete_credential()
            return None

    def set_credential(self, credential: ProviderCredential) -> None:
        self._data[KEY_CREDENTIAL] = credential.model_dump()

    def delete_credential(self) -> None:
        self._data.pop(KEY_CREDENTIAL, None)

    # --- Post-login redirect target ---

    def pop_next(self, default: str) -> str:
        return self._data.pop(KEY_NEXT, None) or default

    def set_next(self, next_url: str) -> None:
        self._data[KEY_NEXT] = next_url

    def clear(self) -> None:
        self.delete_profile()
        self.delete_credential()
        self._data.pop(KEY_NEXT, None)
