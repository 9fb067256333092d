"""
Application configuration models and helpers.

Centralizes settings management so the FastAPI app, the connectors and the
maintenance scripts share a consistent configuration surface.
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional

import os

from pydantic import Field, HttpUrl
from pydantic_settings import BaseSettings, SettingsConfigDict

LOCAL_API_ENDPOINT = "http://localhost:3001/api"


def _load_env_file(path: str = ".env") -> None:
    """Best-effort load key=value pairs from a .env file into the environment."""
    env_path = Path(path)
    if not env_path.exists():
        return
    for raw_line in env_path.read_text().splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        key, sep, value = line.partition("=")
        if not sep:
            continue
        key = key.strip()
        if not key or key in os.environ:
            continue
        cleaned = value.strip().strip('"').strip("'")
        os.environ[key] = cleaned


_load_env_file()


class XboxSettings(BaseSettings):
    """Credentials for the Xbox Live (Microsoft account) OAuth application."""

    model_config = SettingsConfigDict(populate_by_name=True)

    enabled: bool = Field(False, validation_alias="XBOX_ENABLED")
    client_id: Optional[str] = Field(None, validation_alias="XBOX_CLIENT_ID")
    client_secret: Optional[str] = Field(None, validation_alias="XBOX_CLIENT_SECRET")


class ConnectionSettings(BaseSettings):
    """Host-side settings shared by every connector."""

    model_config = SettingsConfigDict(populate_by_name=True)

    api_endpoint: Optional[str] = Field(
        None,
        validation_alias="CONNECTIONS_API_ENDPOINT",
        description=(
            "Public base URL of this API including the /api prefix, used to build "
            "OAuth redirect URIs. "
            "Falls back to http://localhost:3001/api outside production."
        ),
    )
    state_secret: Optional[str] = Field(
        None,
        validation_alias="CONNECTIONS_STATE_SECRET",
        description="HMAC key for state tokens. Defaults to the connector client secret.",
    )
    state_ttl_seconds: int = Field(900, validation_alias="CONNECTIONS_STATE_TTL")
    http_timeout_seconds: float = Field(10.0, validation_alias="CONNECTIONS_HTTP_TIMEOUT")
    db_path: str = Field("data/connections.db", validation_alias="CONNECTIONS_DB_PATH")


class SecuritySettings(BaseSettings):
    """Security-related configuration."""

    model_config = SettingsConfigDict(populate_by_name=True)

    token_encryption_secret: Optional[str] = Field(
        None,
        validation_alias="TOKEN_ENCRYPTION_SECRET",
        description=(
            "Secret used to derive the symmetric key for encrypting stored tokens."
        ),
    )


class AppSettings(BaseSettings):
    """Root settings object for the FastAPI application."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        populate_by_name=True,
        extra="ignore",
    )

    environment: str = Field("development", validation_alias="APP_ENV")
    log_level: str = Field("INFO", validation_alias="APP_LOG_LEVEL")
    frontend_base_url: Optional[HttpUrl] = Field(
        None,
        validation_alias="FRONTEND_BASE_URL",
        description="Optional URL for redirecting users back to the front-end.",
    )
    security: SecuritySettings = Field(default_factory=SecuritySettings)
    connections: ConnectionSettings = Field(default_factory=ConnectionSettings)
    xbox: XboxSettings = Field(default_factory=XboxSettings)

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"


@lru_cache()
def get_settings() -> AppSettings:
    """Return a cached settings object."""
    return AppSettings()  # type: ignore[call-arg]


__all__ = [
    "AppSettings",
    "ConnectionSettings",
    "LOCAL_API_ENDPOINT",
    "SecuritySettings",
    "XboxSettings",
    "get_settings",
]
