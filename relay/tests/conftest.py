"""
Shared test fixtures for statistics relay tests.

Cleans all relay environment variables before each test so RelaySettings and
StatisticsRelay defaults are deterministic, and provides helpers for mocking
the httpx.AsyncClient used by the relay.

CHANGELOG:
- 2026-10-12: Initial creation (STORY-101)

TODO:
- None
"""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

# All RelaySettings environment variable names, used for cleanup.
_ALL_RELAY_ENV_VARS = (
    "HA_BASE_URL",
    "HA_TOKEN",
    "SUPERVISOR_TOKEN",
    "FLUSH_INTERVAL_S",
    "REQUEST_TIMEOUT_S",
    "HEALTH_PATH",
)


@pytest.fixture(autouse=True)
def _clean_relay_env(monkeypatch: pytest.MonkeyPatch, tmp_path: str) -> None:
    """Remove all relay env vars and isolate from .env files before each test."""
    for var in _ALL_RELAY_ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)


def make_response(status_code: int = 200, body: object = None) -> MagicMock:
    """Return a fake httpx response with the given status and JSON body."""
    response = MagicMock()
    response.status_code = status_code
    response.json = MagicMock(return_value=body)
    return response


def make_client(
    post: object = None,
    get: object = None,
) -> AsyncMock:
    """Return a fake httpx.AsyncClient usable as an async context manager.

    ``post`` / ``get`` are either a response (returned on every call) or an
    exception instance (raised on every call).
    """
    client = AsyncMock()
    for name, outcome in (("post", post), ("get", get)):
        if outcome is None:
            outcome = make_response(200)
        if isinstance(outcome, BaseException):
            setattr(client, name, AsyncMock(side_effect=outcome))
        else:
            setattr(client, name, AsyncMock(return_value=outcome))
    client.__aenter__ = AsyncMock(return_value=client)
    client.__aexit__ = AsyncMock(return_value=False)
    return client


@pytest.fixture()
def env_vars_full(monkeypatch: pytest.MonkeyPatch) -> dict[str, str]:
    """Set every RelaySettings environment variable."""
    env = {
        "HA_BASE_URL": "http://homeassistant.local:8123/",
        "HA_TOKEN": "long-lived-token",
        "FLUSH_INTERVAL_S": "30",
        "REQUEST_TIMEOUT_S": "5",
        "HEALTH_PATH": "/tmp/relay-health.json",
    }
    for key, value in env.items():
        monkeypatch.setenv(key, value)
    return env
