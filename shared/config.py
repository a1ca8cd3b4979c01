"""
Shared configuration management for oauthtoy.
"""

from typing import Tuple

from pydantic import AliasChoices, Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from shared.errors import ConfigurationError


class BaseConfig(BaseSettings):
    """Base configuration class with common settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="OAUTHTOY_",
        case_sensitive=False,
        populate_by_name=True,
        extra="ignore",
    )

    # Environment
    env: str = Field(default="local")
    log_level: str = Field(default="info")

    # Client credential record
    client_id: str = Field(default="admin")
    client_secret: str = Field(default="admin")


class ServerConfig(BaseConfig):
    """Token server configuration."""

    addr: str = Field(default=":8080", validation_alias=AliasChoices("addr", "ADDR", "OAUTHTOY_ADDR"))
    token_route: str = Field(
        default="/oauth/token",
        validation_alias=AliasChoices("token_route", "ROUTE", "OAUTHTOY_ROUTE"),
    )
    echo_route: str = Field(default="/echo")

    # Security
    signing_secret: SecretStr = Field(default=SecretStr("SecretYouShouldHide"))
    signing_algorithm: str = Field(default="HS256")
    access_token_ttl: int = Field(default=30, ge=1)

    @property
    def host(self) -> str:
        return self._split_addr()[0]

    @property
    def port(self) -> int:
        return self._split_addr()[1]

    def _split_addr(self) -> Tuple[str, int]:
        host, sep, port = self.addr.rpartition(":")
        if not sep or not port.isdigit():
            raise ConfigurationError(f"Invalid listen address: {self.addr!r}")
        return host or "0.0.0.0", int(port)

    def secret_bytes(self) -> bytes:
        """Return the shared signing secret as bytes."""
        return self.signing_secret.get_secret_value().encode("utf-8")


class ClientConfig(BaseConfig):
    """Polling client configuration."""

    token_url: str = Field(
        default="http://localhost:8080/oauth/token",
        validation_alias=AliasChoices("token_url", "TOKEN_URL", "OAUTHTOY_TOKEN_URL"),
    )
    echo_url: str = Field(default="http://localhost:8080/echo")
    poll_interval: float = Field(default=2.0, gt=0)
    fail_fast: bool = Field(default=False)
    expiry_margin: float = Field(default=10.0, ge=0)


def get_server_config(**overrides) -> ServerConfig:
    """Get configuration for the token server."""
    return ServerConfig(**overrides)


def get_client_config(**overrides) -> ClientConfig:
    """Get configuration for the polling client."""
    return ClientConfig(**overrides)
