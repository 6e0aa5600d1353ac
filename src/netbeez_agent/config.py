"""Configuration management for the NetBeez MCP agent.

Provides a Pydantic Settings-based configuration class that loads settings
from environment variables (with ``NETBEEZ_`` prefix) and ``.env`` files.
The MCP transport settings keep their unprefixed ``MCP_TRANSPORT`` and
``MCP_HTTP_PORT`` names.

A singleton-style ``get_config()`` factory function avoids re-reading the
environment on every call.

Usage::

    from netbeez_agent.config import get_config

    config = get_config()
    print(config.base_url)       # https://demo1.netbeezcloud.net
    print(config.ssl_verify)     # True
    client = config.create_client()
"""

from __future__ import annotations

import logging
from typing import Any, Literal
from urllib.parse import urlparse

from pydantic import Field, ValidationInfo, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .client import NetBeezClient
from .models import DEFAULT_MAX_WAIT_MS, DEFAULT_POLL_INTERVAL_MS, DEFAULT_RETRIES, JobConfig

logger = logging.getLogger(__name__)

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
TransportMode = Literal["stdio", "http", "both"]


class NetBeezAgentConfig(BaseSettings):
    """Type-safe configuration for the NetBeez MCP agent.

    Loads values from environment variables with the ``NETBEEZ_`` prefix
    and from a ``.env`` file if present. Required fields (``base_url``,
    ``api_key``) raise a ``ValidationError`` with a clear message when
    missing.

    Environment variables:
        NETBEEZ_BASE_URL:          BeezKeeper instance URL (required).
        NETBEEZ_API_KEY:           API key (required, non-empty).
        NETBEEZ_SSL_VERIFY:        Verify TLS certificates (default true).
        NETBEEZ_TIMEOUT:           Request timeout in seconds (default 30).
        NETBEEZ_MAX_RETRIES:       Retries on 5xx/network errors (default 2).
        NETBEEZ_POLL_INTERVAL_MS:  Ad-hoc test poll interval (default 5000).
        NETBEEZ_MAX_WAIT_MS:       Ad-hoc test wait ceiling (default 300000).
        NETBEEZ_LOG_LEVEL:         Logging level (default INFO).
        MCP_TRANSPORT:             stdio, http or both (default stdio).
        MCP_HTTP_PORT:             HTTP transport port (default 3000).
    """

    model_config = SettingsConfigDict(
        env_prefix="NETBEEZ_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
        populate_by_name=True,
    )

    # ------------------------------------------------------------------
    # Required settings
    # ------------------------------------------------------------------

    base_url: str = Field(
        ...,
        description="BeezKeeper instance URL (e.g., https://demo1.netbeezcloud.net)",
    )
    api_key: str = Field(
        ...,
        min_length=1,
        description="API key from Dashboard > Settings > API Keys",
    )

    # ------------------------------------------------------------------
    # Optional settings
    # ------------------------------------------------------------------

    ssl_verify: bool = Field(
        default=True,
        description="Verify TLS certificates; disable for self-signed instances",
    )
    timeout: int = Field(
        default=30,
        gt=0,
        description="Request timeout in seconds",
    )
    max_retries: int = Field(
        default=DEFAULT_RETRIES,
        ge=0,
        description="Retries for server and network errors",
    )
    poll_interval_ms: int = Field(
        default=DEFAULT_POLL_INTERVAL_MS,
        gt=0,
        description="Delay between ad-hoc test status polls",
    )
    max_wait_ms: int = Field(
        default=DEFAULT_MAX_WAIT_MS,
        gt=0,
        description="Maximum time to wait for an ad-hoc test to finish",
    )
    log_level: LogLevel = Field(
        default="INFO",
        description="Level applied to the netbeez_agent loggers",
    )
    transport: TransportMode = Field(
        default="stdio",
        validation_alias="MCP_TRANSPORT",
        description="MCP transport mode",
    )
    http_port: int = Field(
        default=3000,
        ge=1,
        le=65535,
        validation_alias="MCP_HTTP_PORT",
        description="Port for the HTTP transport",
    )

    # ------------------------------------------------------------------
    # Validators
    # ------------------------------------------------------------------

    @field_validator("base_url")
    @classmethod
    def _validate_base_url(cls, value: str, info: ValidationInfo) -> str:
        """Validate and normalize the instance URL.

        The URL must use http or https. Trailing slashes are stripped for
        consistent URL construction.
        """
        url = value.strip().rstrip("/")
        if not url:
            raise ValueError(
                "NETBEEZ_BASE_URL must not be empty. "
                "Set it to your BeezKeeper instance URL (e.g. https://demo1.netbeezcloud.net)"
            )
        parsed = urlparse(url)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError(
                f"NETBEEZ_BASE_URL must be an http(s) URL. Got: {url!r}. "
                "Example: https://demo1.netbeezcloud.net"
            )
        return url

    @field_validator("log_level", "transport", mode="before")
    @classmethod
    def _normalize_choice(cls, value: Any, info: ValidationInfo) -> Any:
        """Accept choice values in any case; log levels are upper, transports lower."""
        if not isinstance(value, str):
            return value
        value = value.strip()
        return value.upper() if info.field_name == "log_level" else value.lower()

    @model_validator(mode="after")
    def _log_config_loaded(self) -> NetBeezAgentConfig:
        logger.debug(
            "Configuration loaded: base_url=%s, ssl_verify=%s, timeout=%d, transport=%s",
            self.base_url,
            self.ssl_verify,
            self.timeout,
            self.transport,
        )
        if not self.ssl_verify:
            logger.warning("TLS certificate verification is disabled for %s", self.base_url)
        return self

    # ------------------------------------------------------------------
    # Factory methods
    # ------------------------------------------------------------------

    def job_config(self) -> JobConfig:
        """Return the ad-hoc test polling policy from this configuration."""
        return JobConfig(poll_interval_ms=self.poll_interval_ms, max_wait_ms=self.max_wait_ms)

    def create_client(self, **overrides: Any) -> NetBeezClient:
        """Build a ``NetBeezClient`` for this instance; ``overrides`` win over config values."""
        kwargs: dict[str, Any] = {
            "base_url": self.base_url,
            "api_key": self.api_key,
            "timeout": self.timeout,
            "verify_ssl": self.ssl_verify,
            "max_retries": self.max_retries,
            "job_config": self.job_config(),
        }
        kwargs.update(overrides)
        return NetBeezClient(**kwargs)


# ------------------------------------------------------------------
# Process-wide instance
# ------------------------------------------------------------------

_config_instance: NetBeezAgentConfig | None = None


def get_config(**overrides: Any) -> NetBeezAgentConfig:
    """Load the configuration once and return the cached instance.

    ``overrides`` only take effect on the call that performs the load. A
    failed load is not cached, so a later call retries with the then
    current environment.

    Raises:
        pydantic.ValidationError: If ``NETBEEZ_BASE_URL`` or
            ``NETBEEZ_API_KEY`` is missing, or a value is out of range.
    """
    global _config_instance
    if _config_instance is None:
        _config_instance = NetBeezAgentConfig(**overrides)
        logger.info("Loaded NetBeez configuration for %s", _config_instance.base_url)
    return _config_instance


def _reset_config() -> None:
    """Drop the cached configuration (test helper)."""
    global _config_instance
    _config_instance = None
