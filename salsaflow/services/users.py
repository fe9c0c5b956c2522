"""
User service: business logic behind the user endpoints.
"""

from __future__ import annotations

import structlog
from fastapi import HTTPException

from salsaflow.identity.tokens import generate_access_token
from salsaflow.schemas.users import User
from salsaflow.stores.base import UserStore

log = structlog.get_logger()


async def regenerate_token(requester: User, user_id: str, store: UserStore) -> str:
    """Replace a user's access token. Returns the new plaintext token.

    Only the user themselves may do this. The previous token stops working
    as soon as the new one is saved.
    """
    user = await store.find_by_id(user_id)
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")
    if requester.id != user.id:
        raise HTTPException(status_code=403, detail="Cannot generate a token for another user")

    user.token = generate_access_token()
    await store.save(user)

    log.info("token.generated", user_id=user.id)
    return user.token
