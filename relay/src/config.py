"""
Relay configuration loaded from environment variables.

Uses Pydantic BaseSettings for automatic env var loading and validation.
Inside the Home Assistant supervisor the base URL and token are provided by
the add-on runtime; outside it they come from the environment or a .env file.

CHANGELOG:
- 2026-10-14: Accept SUPERVISOR_TOKEN as an alias for HA_TOKEN (STORY-106)
- 2026-10-12: Initial creation (STORY-101)

TODO:
- None
"""

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings

DEFAULT_HA_BASE_URL = "http://supervisor/core"
"""Supervisor proxy endpoint for Home Assistant Core, reachable from add-ons."""


class RelaySettings(BaseSettings):
    """Statistics relay configuration.

    All values are loaded from environment variables and every one has a
    default, so the relay starts without any configuration inside the
    supervisor.

    Attributes:
        ha_base_url: Base URL of the Home Assistant REST API.
        ha_token: Bearer token. Read from HA_TOKEN, falling back to the
            SUPERVISOR_TOKEN injected by the add-on runtime.
        flush_interval_s: Seconds between statistics flush cycles.
        request_timeout_s: Timeout in seconds for each HTTP request.
        health_path: Filesystem path of the JSON health file.
    """

    ha_base_url: str = DEFAULT_HA_BASE_URL
    ha_token: str = Field(
        default="",
        validation_alias=AliasChoices("ha_token", "supervisor_token"),
    )
    flush_interval_s: float = 60.0
    request_timeout_s: float = 10.0
    health_path: str = "/data/health.json"

    @field_validator("ha_base_url")
    @classmethod
    def ha_base_url_must_be_http(cls, v: str) -> str:
        """Validate the scheme and strip a trailing slash."""
        if not v.lower().startswith(("http://", "https://")):
            raise ValueError(
                f"HA_BASE_URL must start with http:// or https:// (got: '{v[:20]}...')"
            )
        return v.rstrip("/")

    @field_validator("flush_interval_s")
    @classmethod
    def flush_interval_must_be_positive(cls, v: float) -> float:
        """Validate flush interval is strictly positive."""
        if v <= 0:
            raise ValueError("FLUSH_INTERVAL_S must be > 0")
        return v

    @field_validator("request_timeout_s")
    @classmethod
    def request_timeout_must_be_positive(cls, v: float) -> float:
        """Validate request timeout is strictly positive."""
        if v <= 0:
            raise ValueError("REQUEST_TIMEOUT_S must be > 0")
        return v

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}
