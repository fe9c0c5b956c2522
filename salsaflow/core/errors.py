"""
Error taxonomy for SalsaFlow.

Soft outcomes (lookups that find nothing, requests without credentials) are
not represented here; they are plain return values. Everything below is a
hard failure that propagates to the HTTP layer.
"""

from __future__ import annotations


class SalsaFlowError(Exception):
    """Base class for hard failures surfaced to the HTTP layer."""

    code = "INTERNAL_ERROR"
    status_code = 500
    retryable = False


# ---------------------------------------------------------------------------
# Identity provider
# ---------------------------------------------------------------------------

class UpstreamError(SalsaFlowError):
    """The identity provider could not be reached or answered with an error."""

    code = "UPSTREAM_FAILURE"


class UpstreamTimeoutError(UpstreamError):
    code = "UPSTREAM_TIMEOUT"
    status_code = 503
    retryable = True


class IncompleteProfileError(UpstreamError):
    """The provider returned a profile that cannot identify a user."""

    code = "INCOMPLETE_PROFILE"


# ---------------------------------------------------------------------------
# Persistence
# ---------------------------------------------------------------------------

class StoreError(SalsaFlowError):
    code = "STORE_FAILURE"


class StoreTimeoutError(StoreError):
    code = "STORE_TIMEOUT"
    status_code = 503
    retryable = True


class DuplicateUserError(StoreError):
    """A save would give a non-empty email or token to a second user."""

    code = "DUPLICATE_USER"

    def __init__(self, field: str, value: str | None = None):
        super().__init__(f"another user already holds this {field}")
        self.field = field
        self.value = value


# ---------------------------------------------------------------------------
# Misc
# ---------------------------------------------------------------------------

class RandomnessError(SalsaFlowError):
    """Secure random bytes could not be obtained."""

    code = "RANDOMNESS_FAILURE"


class ConfigurationError(SalsaFlowError):
    """Settings failed validation before the application was built."""

    code = "CONFIGURATION_ERROR"

    def __init__(self, problems: list[str]):
        super().__init__("invalid configuration: " + "; ".join(problems))
        self.problems = problems
