"""
Unit tests for the relay daemon entrypoint.

Tests verify:
- run_relay registers statistics, starts the relay, and stops it on shutdown.
- Startup logs the config summary without the bearer token.
- The JSON formatter emits ts/level/logger/msg and exception text.

CHANGELOG:
- 2026-10-14: Initial creation (STORY-107)

TODO:
- None
"""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from unittest.mock import AsyncMock, MagicMock

import pytest
from relay.src.main import JsonFormatter, log_config_summary, run_relay


def _make_settings(**overrides: object) -> MagicMock:
    defaults = {
        "ha_base_url": "http://supervisor/core",
        "ha_token": "secret-token-abc",
        "flush_interval_s": 60.0,
        "request_timeout_s": 10.0,
        "health_path": "/tmp/health.json",
    }
    defaults.update(overrides)
    settings = MagicMock()
    for key, value in defaults.items():
        setattr(settings, key, value)
    return settings


def _make_relay() -> MagicMock:
    relay = MagicMock()
    relay.register_all_statistics = AsyncMock(return_value=10)
    relay.start = MagicMock()
    relay.stop = AsyncMock()
    return relay


class TestRunRelay:
    @pytest.mark.asyncio
    async def test_lifecycle_order(self) -> None:
        relay = _make_relay()
        shutdown_event = asyncio.Event()
        shutdown_event.set()

        await run_relay(relay, shutdown_event)

        relay.register_all_statistics.assert_awaited_once()
        relay.start.assert_called_once()
        relay.stop.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_waits_for_shutdown(self) -> None:
        relay = _make_relay()
        shutdown_event = asyncio.Event()

        task = asyncio.create_task(run_relay(relay, shutdown_event))
        await asyncio.sleep(0.01)

        relay.start.assert_called_once()
        relay.stop.assert_not_awaited()

        shutdown_event.set()
        await asyncio.wait_for(task, timeout=1)
        relay.stop.assert_awaited_once()


class TestConfigSummary:
    def test_token_not_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.INFO):
            log_config_summary(_make_settings())

        assert "secret-token-abc" not in caplog.text
        assert "http://supervisor/core" in caplog.text
        assert "token_set=True" in caplog.text


class TestJsonFormatter:
    def test_fields(self) -> None:
        record = logging.LogRecord(
            "relay.test", logging.WARNING, __file__, 1, "flushed %d", (3,), None
        )

        entry = json.loads(JsonFormatter().format(record))

        assert entry["level"] == "WARNING"
        assert entry["logger"] == "relay.test"
        assert entry["msg"] == "flushed 3"
        assert "T" in entry["ts"]
        assert "exception" not in entry

    def test_exception_included(self) -> None:
        try:
            raise RuntimeError("boom")
        except RuntimeError:
            exc_info = sys.exc_info()
        record = logging.LogRecord(
            "relay.test", logging.ERROR, __file__, 1, "failed", (), exc_info
        )

        entry = json.loads(JsonFormatter().format(record))

        assert "RuntimeError: boom" in entry["exception"]
