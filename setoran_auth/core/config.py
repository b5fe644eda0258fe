"""
Application configuration models and helpers.

Centralizes settings management so the session services, the HTTP surface and
the environment check script share a consistent configuration surface.
"""

from functools import lru_cache
from typing import Optional

from pydantic import AliasChoices, AnyHttpUrl, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_ENV_CONFIG = SettingsConfigDict(
    env_file=".env",
    env_file_encoding="utf-8",
    extra="ignore",
    populate_by_name=True,
)


class IdentitySettings(BaseSettings):
    """Keycloak realm and client used for password and refresh grants."""

    model_config = _ENV_CONFIG

    base_url: AnyHttpUrl = Field(
        "https://id.tif.uin-suska.ac.id",
        validation_alias=AliasChoices("KEYCLOAK_BASE_URL", "base_url"),
    )
    realm: str = Field("dev", validation_alias=AliasChoices("KEYCLOAK_REALM", "realm"))
    client_id: str = Field(
        "setoran-mobile-dev",
        validation_alias=AliasChoices("KEYCLOAK_CLIENT_ID", "client_id"),
    )
    client_secret: str = Field(
        ...,
        validation_alias=AliasChoices("KEYCLOAK_CLIENT_SECRET", "client_secret"),
    )
    scope: str = Field(
        "openid profile email",
        validation_alias=AliasChoices("KEYCLOAK_SCOPE", "scope"),
    )
    verify_id_token: bool = Field(
        False,
        validation_alias=AliasChoices("VERIFY_ID_TOKEN", "verify_id_token"),
        description="Verify the identity token signature against the realm JWKS.",
    )

    @property
    def token_url(self) -> str:
        base = str(self.base_url).rstrip("/")
        return f"{base}/realms/{self.realm}/protocol/openid-connect/token"

    @property
    def jwks_url(self) -> str:
        base = str(self.base_url).rstrip("/")
        return f"{base}/realms/{self.realm}/protocol/openid-connect/certs"


class ApiSettings(BaseSettings):
    """Resource API location and transport policy."""

    model_config = _ENV_CONFIG

    base_url: AnyHttpUrl = Field(
        "https://api.tif.uin-suska.ac.id/setoran-dev/v1/",
        validation_alias=AliasChoices("SETORAN_API_BASE_URL", "base_url"),
    )
    timeout_seconds: float = Field(
        15.0,
        validation_alias=AliasChoices("HTTP_TIMEOUT_SECONDS", "timeout_seconds"),
        description="Applied uniformly to connect, read, write and pool timeouts.",
    )
    max_attempts: int = Field(
        3, validation_alias=AliasChoices("HTTP_MAX_ATTEMPTS", "max_attempts")
    )
    backoff_base_seconds: float = Field(
        1.0,
        validation_alias=AliasChoices("HTTP_BACKOFF_BASE_SECONDS", "backoff_base_seconds"),
    )
    backoff_max_seconds: float = Field(
        5.0,
        validation_alias=AliasChoices("HTTP_BACKOFF_MAX_SECONDS", "backoff_max_seconds"),
    )

    @field_validator("max_attempts")
    @classmethod
    def _at_least_one_attempt(cls, value: int) -> int:
        if value < 1:
            raise ValueError("HTTP_MAX_ATTEMPTS must be at least 1.")
        return value


class SessionSettings(BaseSettings):
    """Token lifetimes and inactivity policy."""

    model_config = _ENV_CONFIG

    access_token_ttl_seconds: int = Field(
        300, validation_alias=AliasChoices("ACCESS_TOKEN_TTL", "access_token_ttl_seconds")
    )
    refresh_token_ttl_seconds: int = Field(
        1800,
        validation_alias=AliasChoices("REFRESH_TOKEN_TTL", "refresh_token_ttl_seconds"),
    )
    inactivity_threshold_seconds: int = Field(
        600,
        validation_alias=AliasChoices(
            "INACTIVITY_THRESHOLD", "inactivity_threshold_seconds"
        ),
    )
    check_interval_seconds: float = Field(
        30.0,
        validation_alias=AliasChoices("ACTIVITY_CHECK_INTERVAL", "check_interval_seconds"),
    )
    refresh_on_grace: bool = Field(
        True,
        validation_alias=AliasChoices("REFRESH_ON_GRACE", "refresh_on_grace"),
        description=(
            "Refresh the access token when it expired while the user is still "
            "active; when disabled only the activity timestamp is touched."
        ),
    )
    db_path: str = Field(
        "data/session.db",
        validation_alias=AliasChoices("SESSION_DB_PATH", "db_path"),
    )
    profile_cache_dir: str = Field(
        "data/profile",
        validation_alias=AliasChoices("PROFILE_CACHE_DIR", "profile_cache_dir"),
    )

    @field_validator(
        "access_token_ttl_seconds",
        "refresh_token_ttl_seconds",
        "inactivity_threshold_seconds",
    )
    @classmethod
    def _positive(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("Session durations must be positive.")
        return value


class SecuritySettings(BaseSettings):
    """Security-related configuration."""

    model_config = _ENV_CONFIG

    token_encryption_secret: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("TOKEN_ENCRYPTION_SECRET", "token_encryption_secret"),
        description=(
            "Secret used to derive the symmetric key for encrypting stored tokens "
            "and saved credentials."
        ),
    )


class AppSettings(BaseSettings):
    """Root settings object for the session service."""

    model_config = _ENV_CONFIG

    environment: str = Field(
        "development", validation_alias=AliasChoices("APP_ENV", "environment")
    )
    log_level: str = Field("INFO", validation_alias=AliasChoices("APP_LOG_LEVEL", "log_level"))
    identity: IdentitySettings = Field(default_factory=IdentitySettings)
    api: ApiSettings = Field(default_factory=ApiSettings)
    session: SessionSettings = Field(default_factory=SessionSettings)
    security: SecuritySettings = Field(default_factory=SecuritySettings)


@lru_cache()
def get_settings() -> AppSettings:
    """Return a cached settings object."""
    return AppSettings()  # type: ignore[call-arg]


__all__ = [
    "ApiSettings",
    "AppSettings",
    "IdentitySettings",
    "SecuritySettings",
    "SessionSettings",
    "get_settings",
]
