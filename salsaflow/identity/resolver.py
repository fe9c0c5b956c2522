"""
Identity resolution: who is making this request?

Two independent credential channels are reconciled against the user store:

1. Token channel. The ``X-SalsaFlow-Token`` header is looked up in the store.
   A match ends resolution; the session is never consulted, so a programmatic
   caller can act as a user without any browser cookies. A token that matches
   nobody simply falls through.
2. Session channel. The provider credential kept in the browser session must
   be present and valid, otherwise the cached profile is dropped and there is
   no identity. The cached profile (or, when there is none, a freshly fetched
   one, cached immediately) is matched by email. A profile without a matching
   user is provisioned or reported as UNPROVISIONED, depending on policy.

Requests without credentials resolve to NO_IDENTITY. Failures of the store or
of the identity provider propagate.
"""

from __future__ import annotations

import asyncio
import enum
from dataclasses import dataclass
from typing import Optional

import structlog

from salsaflow.core.errors import UpstreamTimeoutError
from salsaflow.core.session import SessionState
from salsaflow.identity.profiles import ProfileFetcher
from salsaflow.identity.provisioner import UserProvisioner
from salsaflow.schemas.auth import Profile
from salsaflow.schemas.users import User
from salsaflow.stores.base import UserStore

log = structlog.get_logger()


class ResolveMode(str, enum.Enum):
    API = "api"
    PAGE = "page"


class ResolutionStatus(str, enum.Enum):
    RESOLVED = "resolved"
    # Signed in with the provider, but no local user exists and none was created.
    UNPROVISIONED = "unprovisioned"
    NO_IDENTITY = "no_identity"


class Channel(str, enum.Enum):
    TOKEN = "token"
    SESSION = "session"


@dataclass(frozen=True)
class Resolution:
    status: ResolutionStatus
    user: Optional[User] = None
    profile: Optional[Profile] = None
    channel: Optional[Channel] = None

    @property
    def resolved(self) -> bool:
        return self.status is ResolutionStatus.RESOLVED


NO_IDENTITY = Resolution(ResolutionStatus.NO_IDENTITY)


class IdentityResolver:
    """
    Decides the effective user of a request.

    Args:
        store: User store (wrap it in BoundedUserStore to bound store calls)
        fetcher: Remote profile fetcher
        provisioner: Creates users on first session contact
        fetch_timeout: Upper bound in seconds for one remote profile fetch
        api_auto_provision: Whether API-mode resolution creates missing users
    """

    def __init__(
        self,
        store: UserStore,
        fetcher: ProfileFetcher,
        provisioner: UserProvisioner | None = None,
        *,
        fetch_timeout: float = 10.0,
        api_auto_provision: bool = False,
    ):
        self.store = store
        self.fetcher = fetcher
        self.provisioner = provisioner or UserProvisioner(store)
        self.fetch_timeout = fetch_timeout
        self.api_auto_provision = api_auto_provision

    def provisions(self, mode: ResolveMode) -> bool:
        """Default provisioning policy for ``mode``."""
        return mode is ResolveMode.PAGE or self.api_auto_provision

    async def resolve(
        self,
        token: str | None,
        session: SessionState,
        mode: ResolveMode,
        *,
        provision: bool | None = None,
    ) -> Resolution:
        """Resolve the requester.

        ``provision`` overrides the mode's provisioning policy for this call.
        """
        if provision is None:
            provision = self.provisions(mode)

        if token:
            user = await self.store.find_by_token(token)
            if user is not None:
                log.debug("identity.resolved", channel="token", user_id=user.id, mode=mode.value)
                return Resolution(ResolutionStatus.RESOLVED, user=user, channel=Channel.TOKEN)

        return await self._resolve_session(session, mode, provision)

    async def resolve_page(self, token: str | None, session: SessionState) -> Resolution:
        return await self.resolve(token, session, ResolveMode.PAGE)

    async def resolve_api(
        self, token: str | None, session: SessionState, *, provision: bool | None = None
    ) -> Resolution:
        return await self.resolve(token, session, ResolveMode.API, provision=provision)

    async def _resolve_session(
        self, session: SessionState, mode: ResolveMode, provision: bool
    ) -> Resolution:
        credential = session.get_credential()
        if credential is None or not credential.valid():
            # Never keep a profile around that belongs to a dead credential.
            session.delete_profile()
            return NO_IDENTITY

        profile = session.get_profile()
        if profile is None:
            profile = await self._fetch_profile(credential)
            session.set_profile(profile)

        user = await self.store.find_by_email(profile.email)
        if user is not None:
            log.debug("identity.resolved", channel="session", user_id=user.id, mode=mode.value)
            return Resolution(
                ResolutionStatus.RESOLVED, user=user, profile=profile, channel=Channel.SESSION
            )

        if not provision:
            log.info("identity.unprovisioned", email=profile.email, mode=mode.value)
            return Resolution(
                ResolutionStatus.UNPROVISIONED, profile=profile, channel=Channel.SESSION
            )

        user = await self.provisioner.provision(profile)
        return Resolution(
            ResolutionStatus.RESOLVED, user=user, profile=profile, channel=Channel.SESSION
        )

    async def _fetch_profile(self, credential) -> Profile:
        try:
            return await asyncio.wait_for(
                self.fetcher.fetch(credential), timeout=self.fetch_timeout
            )
        except asyncio.TimeoutError as exc:
            raise UpstreamTimeoutError(
                f"profile fetch timed out after {self.fetch_timeout}s"
            ) from exc
