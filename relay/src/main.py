"""
Daemon entrypoint for the VoltAssistant statistics relay.

Registers the statistics catalog with Home Assistant, then runs the relay's
periodic flush until SIGTERM/SIGINT. On shutdown the relay stops its timer
and attempts one final flush; readings that still fail are lost when the
process exits.

Structured JSON logging is used for all events. A HealthWriter instance
tracks last_flush_ts and pending_count, writing a JSON health file after
every flush.

CHANGELOG:
- 2026-10-16: Wire HealthWriter into the relay (STORY-109)
- 2026-10-14: Initial creation (STORY-107)

TODO:
- None
"""

from __future__ import annotations

import asyncio
import json
import logging
import signal
import sys
from datetime import UTC, datetime

from relay.src.health import HealthWriter

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Structured JSON logging setup
# ---------------------------------------------------------------------------


class JsonFormatter(logging.Formatter):
    """Minimal JSON log formatter."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info and record.exc_info[1] is not None:
            log_entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_entry)


def configure_logging(level: int = logging.INFO) -> None:
    """Install a JSON-formatted stderr handler on the root logger."""
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(JsonFormatter())
    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)


def log_config_summary(settings: object) -> None:
    """Log a config summary at startup, excluding the bearer token.

    Args:
        settings: A RelaySettings instance (or any object with the same attrs).
    """
    logger.info(
        "Statistics relay starting with config: "
        "ha_base_url=%s, flush_interval_s=%s, request_timeout_s=%s, "
        "health_path=%s, token_set=%s",
        settings.ha_base_url,  # type: ignore[union-attr]
        settings.flush_interval_s,  # type: ignore[union-attr]
        settings.request_timeout_s,  # type: ignore[union-attr]
        settings.health_path,  # type: ignore[union-attr]
        bool(settings.ha_token),  # type: ignore[union-attr]
    )


# ---------------------------------------------------------------------------
# Runner
# ---------------------------------------------------------------------------


async def run_relay(relay: object, shutdown_event: asyncio.Event) -> None:
    """Register statistics, run the periodic flush until shutdown, then stop.

    Args:
        relay: A StatisticsRelay (or any object with the same coroutines).
        shutdown_event: Event that signals graceful shutdown.
    """
    registered = await relay.register_all_statistics()  # type: ignore[union-attr]
    logger.info("Registered %d statistics", registered)

    relay.start()  # type: ignore[union-attr]
    await shutdown_event.wait()

    await relay.stop()  # type: ignore[union-attr]
    logger.info("Shutdown complete")


async def async_main() -> None:
    """Async entrypoint: load config, build the relay, run until signalled."""
    configure_logging()

    from relay.src.config import RelaySettings
    from relay.src.statistics import StatisticsRelay

    settings = RelaySettings()
    log_config_summary(settings)

    shutdown_event = asyncio.Event()

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGTERM, signal.SIGINT):
        loop.add_signal_handler(
            sig,
            lambda: _handle_signal(shutdown_event),
        )

    health = HealthWriter(settings.health_path)
    relay = StatisticsRelay.from_settings(settings, health=health)

    await run_relay(relay, shutdown_event)


def _handle_signal(shutdown_event: asyncio.Event) -> None:
    logger.info("Received shutdown signal, initiating graceful shutdown")
    shutdown_event.set()


def main() -> None:
    """Synchronous entrypoint for the relay daemon."""
    asyncio.run(async_main())


if __name__ == "__main__":
    main()
