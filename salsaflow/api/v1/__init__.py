"""
API v1 Router

Mounted under Settings.api_prefix (``/api/v1`` by default).
"""

from fastapi import APIRouter

from . import users

router = APIRouter()

router.include_router(users.router)


@router.get("/", tags=["API"])
async def api_root():
    """API root: version and available endpoints."""
    return {
        "api": "v1",
        "version": "0.1.0",
        "endpoints": [
            "/me",
            "/users/{userId}/generateToken",
        ],
    }
