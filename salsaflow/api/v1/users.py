"""
User API endpoints.

GET /api/v1/me                              The requesting user
GET /api/v1/users/{userId}/generateToken    Issue a new access token (self only)
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from salsaflow.core.auth import get_store, require_api_user
from salsaflow.schemas.users import TokenResponse, User
from salsaflow.services import users as user_service
from salsaflow.stores.base import UserStore

router = APIRouter()


@router.get("/me", response_model=User, response_model_exclude_none=True, tags=["Users"])
async def get_me(user: User = Depends(require_api_user)):
    """Return the user the request authenticates as."""
    return user


@router.get("/users/{userId}/generateToken", response_model=TokenResponse, tags=["Users"])
async def generate_token(
    userId: str,
    user: User = Depends(require_api_user),
    store: UserStore = Depends(get_store),
):
    """Generate and persist a new access token for the requesting user."""
    token = await user_service.regenerate_token(user, userId, store)
    return TokenResponse(token=token)
