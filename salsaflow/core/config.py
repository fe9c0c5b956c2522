"""
Application configuration loaded from environment variables.
"""

from __future__ import annotations

import posixpath
from dataclasses import dataclass
from functools import lru_cache
from typing import Literal

from pydantic import ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from salsaflow.core.errors import ConfigurationError
from salsaflow.core.logging import level_number

DEFAULT_COOKIE_SECRET = "OneRingToRuleThemAll"


class Settings(BaseSettings):
    """SalsaFlow server configuration."""

    model_config = SettingsConfigDict(env_prefix="SALSAFLOW_", env_file=".env", extra="ignore")

    # Server
    host: str = "localhost"
    port: int = 3000
    production_mode: bool = False
    path_prefix: str = ""
    api_prefix: str = "/api/v1"
    root_dir: str = "."

    # Sessions
    cookie_secret: str = DEFAULT_COOKIE_SECRET
    session_cookie: str = "SalsaFlowSession"

    # OAuth2 (Google)
    oauth2_client_id: str = ""
    oauth2_client_secret: str = ""
    oauth2_redirect_url: str = ""
    oauth2_scopes: str = "email profile"

    # Storage
    storage_url: str = "memory://"
    store_timeout_seconds: float = 3.0
    profile_fetch_timeout_seconds: float = 10.0

    # Provision users on their first API call made with only a browser session
    api_auto_provision: bool = False

    # Logging
    log_level: str = "info"
    log_format: Literal["json", "text"] = "json"

    @field_validator("path_prefix")
    @classmethod
    def _normalize_prefix(cls, value: str) -> str:
        value = value.strip().rstrip("/")
        if value and not value.startswith("/"):
            raise ValueError("path prefix must start with '/'")
        return value

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level_number(value)
        return value.lower()

    @field_validator("store_timeout_seconds", "profile_fetch_timeout_seconds")
    @classmethod
    def _positive_timeout(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("timeout must be positive")
        return value

    def relative_path(self, path: str) -> str:
        """Join ``path`` onto the configured path prefix."""
        joined = posixpath.join(self.path_prefix or "/", path.lstrip("/"))
        return joined.rstrip("/") or "/"

    def problems(self) -> list[str]:
        """Return the checks that only make sense once all fields are loaded."""
        found = []
        if self.production_mode:
            for name in ("oauth2_client_id", "oauth2_client_secret", "oauth2_redirect_url"):
                if not getattr(self, name):
                    found.append(f"SALSAFLOW_{name.upper()} is not set")
            if self.cookie_secret == DEFAULT_COOKIE_SECRET:
                found.append("SALSAFLOW_COOKIE_SECRET must be changed in production mode")
        return found


@dataclass(frozen=True)
class OAuth2Paths:
    """Routes of the provider login flow, fixed when the app is built."""

    login: str = "/auth/google/login"
    logout: str = "/auth/google/logout"
    callback: str = "/auth/google/callback"
    error: str = "/auth/google/error"


def load_settings(env_file: str | None = None, **overrides) -> Settings:
    """Build and validate settings, raising ConfigurationError on any problem."""
    try:
        if env_file is not None:
            settings = Settings(_env_file=env_file, **overrides)
        else:
            settings = Settings(**overrides)
    except ValidationError as exc:
        raise ConfigurationError(
            [
                f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}"
                for err in exc.errors()
            ]
        ) from exc

    problems = settings.problems()
    if problems:
        raise ConfigurationError(problems)
    return settings


@lru_cache
def get_settings() -> Settings:
    return load_settings()
