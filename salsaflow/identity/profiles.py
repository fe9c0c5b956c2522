"""Remote profile retrieval from the identity provider."""

from __future__ import annotations

import abc

import httpx
import structlog

from salsaflow.core.errors import IncompleteProfileError, UpstreamError, UpstreamTimeoutError
from salsaflow.schemas.auth import Profile, ProviderCredential

log = structlog.get_logger()

GOOGLE_USERINFO_URL = "https://openidconnect.googleapis.com/v1/userinfo"


class ProfileFetcher(abc.ABC):
    """Exchanges a provider credential for the user's name and email."""

    @abc.abstractmethod
    async def fetch(self, credential: ProviderCredential) -> Profile: ...

    async def close(self) -> None:
        """Release underlying resources. Optional."""


class GoogleProfileFetcher(ProfileFetcher):
    """
    Reads the signed-in user's profile from Google's userinfo endpoint.

    Attributes:
        userinfo_url: Endpoint queried with the credential's access token
        timeout: Per-request timeout in seconds

    Example:
        >>> fetcher = GoogleProfileFetcher(timeout=5.0)
        >>> profile = await fetcher.fetch(credential)
        >>> await fetcher.close()
    """

    def __init__(
        self,
        userinfo_url: str = GOOGLE_USERINFO_URL,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.userinfo_url = userinfo_url
        self.timeout = timeout
        self._http_client = httpx.AsyncClient(
            timeout=httpx.Timeout(timeout), transport=transport
        )

    async def fetch(self, credential: ProviderCredential) -> Profile:
        """
        Fetch the profile belonging to ``credential``.

        Raises:
            UpstreamTimeoutError: The provider did not answer in time
            UpstreamError: Network failure or an error response
            IncompleteProfileError: The profile carries no email address
        """
        try:
            response = await self._http_client.get(
                self.userinfo_url,
                headers={"Authorization": f"Bearer {credential.access_token}"},
            )
            response.raise_for_status()
            data = response.json()
        except httpx.TimeoutException as exc:
            log.warning("profile.fetch_timeout", url=self.userinfo_url)
            raise UpstreamTimeoutError("identity provider timed out") from exc
        except httpx.HTTPError as exc:
            log.error("profile.fetch_failed", url=self.userinfo_url, error=str(exc))
            raise UpstreamError(f"profile request failed: {exc}") from exc
        except ValueError as exc:
            raise UpstreamError("identity provider returned malformed JSON") from exc

        if not isinstance(data, dict):
            raise UpstreamError("identity provider returned an unexpected profile payload")

        email = data.get("email") or ""
        if not email:
            raise IncompleteProfileError("identity provider returned no email address")

        profile = Profile(name=data.get("name") or "", email=email)
        log.info("profile.fetched", email=profile.email)
        return profile

    async def close(self) -> None:
        await self._http_client.aclose()
