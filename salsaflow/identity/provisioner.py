"""First-time creation of local users from provider profiles."""

from __future__ import annotations

from typing import Callable

import structlog

from salsaflow.core.errors import DuplicateUserError, IncompleteProfileError
from salsaflow.identity.tokens import generate_access_token
from salsaflow.schemas.auth import Profile
from salsaflow.schemas.users import User
from salsaflow.stores.base import UserStore

log = structlog.get_logger()


class UserProvisioner:
    """Creates a user for a profile and mints the user's first access token."""

    def __init__(
        self,
        store: UserStore,
        token_factory: Callable[[], str] = generate_access_token,
    ):
        self.store = store
        self.token_factory = token_factory

    async def provision(self, profile: Profile) -> User:
        """Create and save a user for ``profile``.

        When the email already belongs to a user (a concurrent request won the
        race, or the caller skipped its own lookup) that user is returned and
        nothing new is written.
        """
        if not profile.email:
            raise IncompleteProfileError("cannot provision a user without an email address")

        user = User(
            name=profile.name or None,
            email=profile.email,
            token=self.token_factory(),
        )
        try:
            saved = await self.store.save(user)
        except DuplicateUserError as exc:
            if exc.field != "email":
                raise
            existing = await self.store.find_by_email(profile.email)
            if existing is None:
                raise
            log.info("user.provision_conflict", user_id=existing.id, email=profile.email)
            return existing

        log.info("user.provisioned", user_id=saved.id, email=saved.email)
        return saved
