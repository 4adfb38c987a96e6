"""Client configuration.

ClientConfig is set once at construction and never mutated. It can be built
directly or loaded from ``OBSERVER_*`` environment variables.
"""

from __future__ import annotations

import os
from collections.abc import Mapping

from pydantic import BaseModel, ConfigDict, Field, SecretStr, ValidationError, field_validator

from .errors import ConfigError

ENV_PREFIX = "OBSERVER_"

_URL_SCHEMES = ("http://", "https://", "ws://", "wss://")
_TRUTHY = ("1", "true", "yes")


class ReconnectPolicy(BaseModel):
    """Opt-in reconnection, delegated to the transport library.

    Disabled by default: after a disconnect the caller must connect again.
    ``max_attempts`` of 0 means unlimited attempts while enabled.
    """

    model_config = ConfigDict(frozen=True)

    enabled: bool = False
    max_attempts: int = Field(default=0, ge=0)
    delay: float = Field(default=1.0, gt=0)
    max_delay: float = Field(default=30.0, gt=0)


class ClientConfig(BaseModel):
    """Configuration for an ObserverClient.

    Attributes:
        name: Display name presented during authentication. Must be unique
            per supervising server.
        url: Endpoint of the supervising server.
        api_key: Secret credential. Never logged.
        reconnect: Reconnection policy (disabled by default).
        connect_timeout: Seconds to wait for the transport handshake. This
            bounds opening the connection only, never individual commands.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    url: str
    api_key: SecretStr
    reconnect: ReconnectPolicy = Field(default_factory=ReconnectPolicy)
    connect_timeout: float = Field(default=10.0, gt=0)

    @field_validator("url")
    @classmethod
    def _check_url(cls, value: str) -> str:
        if not value.startswith(_URL_SCHEMES):
            raise ValueError(f"url must start with one of {', '.join(_URL_SCHEMES)}")
        return value

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> ClientConfig:
        """Load configuration from ``OBSERVER_*`` environment variables.

        Raises:
            ConfigError: If a required variable is missing or a value is invalid
        """
        env = os.environ if environ is None else environ

        missing = [
            f"{ENV_PREFIX}{key}"
            for key in ("NAME", "URL", "API_KEY")
            if not env.get(f"{ENV_PREFIX}{key}")
        ]
        if missing:
            raise ConfigError(f"Missing required environment variables: {', '.join(missing)}")

        values: dict[str, object] = {
            "name": env[f"{ENV_PREFIX}NAME"],
            "url": env[f"{ENV_PREFIX}URL"],
            "api_key": env[f"{ENV_PREFIX}API_KEY"],
        }
        if env.get(f"{ENV_PREFIX}RECONNECT", "").lower() in _TRUTHY:
            values["reconnect"] = ReconnectPolicy(enabled=True)
        if timeout := env.get(f"{ENV_PREFIX}CONNECT_TIMEOUT"):
            values["connect_timeout"] = timeout

        try:
            return cls.model_validate(values)
        except ValidationError as e:
            raise ConfigError(f"Invalid configuration: {e}") from e
