"""Identity resolution, provisioning and access tokens."""

from salsaflow.identity.profiles import GoogleProfileFetcher, ProfileFetcher
from salsaflow.identity.provisioner import UserProvisioner
from salsaflow.identity.resolver import (
    Channel,
    IdentityResolver,
    Resolution,
    ResolutionStatus,
    ResolveMode,
)
from salsaflow.identity.tokens import TOKEN_BYTE_LEN, generate_access_token

__all__ = [
    "Channel",
    "GoogleProfileFetcher",
    "IdentityResolver",
    "ProfileFetcher",
    "Resolution",
    "ResolutionStatus",
    "ResolveMode",
    "TOKEN_BYTE_LEN",
    "UserProvisioner",
    "generate_access_token",
]
