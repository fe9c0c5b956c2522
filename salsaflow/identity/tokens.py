"""Access token generation."""

from __future__ import annotations

import secrets

from salsaflow.core.errors import RandomnessError

TOKEN_BYTE_LEN = 16


def generate_access_token() -> str:
    """Return a fresh random access token as 32 lowercase hex characters.

    Raises RandomnessError when the OS cannot provide secure random bytes;
    there is no fallback to a weaker source.
    """
    try:
        raw = secrets.token_bytes(TOKEN_BYTE_LEN)
    except (OSError, NotImplementedError) as exc:
        raise RandomnessError("secure random source unavailable") from exc
    return raw.hex()
